"""Validated argument structures for each tool.

``from_arguments`` is the only way in: it rejects missing or mistyped
required fields before any handler logic runs, and fills optional fields
with their schema defaults.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .errors import InvalidParamsError

DEFAULT_MEDIA_PROMPT = "Analyze this media file"


def _as_mapping(arguments: Any) -> dict[str, Any]:
    if arguments is None:
        return {}
    if not isinstance(arguments, dict):
        raise InvalidParamsError("Tool arguments must be an object")
    return arguments


def _required_str(arguments: dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    if not value or not isinstance(value, str):
        raise InvalidParamsError(f"Missing or invalid '{key}' parameter")
    return value


@dataclass(frozen=True, slots=True)
class ChatArgs:
    message: str
    reset_conversation: bool = False

    @classmethod
    def from_arguments(cls, arguments: dict[str, Any] | None) -> "ChatArgs":
        arguments = _as_mapping(arguments)
        return cls(
            message=_required_str(arguments, "message"),
            reset_conversation=bool(arguments.get("reset_conversation", False)),
        )


@dataclass(frozen=True, slots=True)
class AnalyzeMediaArgs:
    file_path: str
    prompt: str = DEFAULT_MEDIA_PROMPT

    @classmethod
    def from_arguments(cls, arguments: dict[str, Any] | None) -> "AnalyzeMediaArgs":
        arguments = _as_mapping(arguments)
        prompt = arguments.get("prompt")
        return cls(
            file_path=_required_str(arguments, "file_path"),
            prompt=prompt if isinstance(prompt, str) and prompt else DEFAULT_MEDIA_PROMPT,
        )
