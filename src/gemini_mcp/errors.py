from __future__ import annotations

# JSON-RPC 2.0 error codes used on the wire.
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ToolError(RuntimeError):
    """An error that is already shaped for the protocol boundary."""

    code = INTERNAL_ERROR

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code

    @property
    def message(self) -> str:
        return str(self)

    def as_rpc_error(self) -> dict:
        return {"code": self.code, "message": self.message}


class InvalidParamsError(ToolError):
    code = INVALID_PARAMS


class MethodNotFoundError(ToolError):
    code = METHOD_NOT_FOUND


class InternalError(ToolError):
    code = INTERNAL_ERROR


def normalize_error(exc: BaseException, prefix: str) -> ToolError:
    if isinstance(exc, ToolError):
        return exc
    return InternalError(f"{prefix}: {exc}")
