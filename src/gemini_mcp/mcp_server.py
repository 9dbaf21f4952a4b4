"""
MCP (Model Context Protocol) server for Gemini.

Exposes Google's Gemini API as three MCP tools: multi-turn chat with
Google Search grounding (``gemini_chat``), the in-memory transcript of that
chat (``get_conversation_history``), and single-shot image/video analysis
of a local file (``analyze_media``).

Protocol: JSON-RPC 2.0 over stdio (one JSON object per line). stdout carries
protocol messages only; logs go to stderr.

Usage
-----
Run directly:
    GEMINI_API_KEY=... python -m gemini_mcp.mcp_server

Or via the CLI:
    gemini-mcp serve

Client mcp_servers.json entry
-----------------------------
{
  "mcpServers": {
    "gemini": {
      "command": "gemini-mcp",
      "args": ["serve"],
      "env": {"GEMINI_API_KEY": "<key>"}
    }
  }
}
"""
from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
from typing import Any, Awaitable

from . import __version__
from .client import GeminiClient
from .config import ConfigError, load_config, require_api_key
from .dispatcher import ToolDispatcher
from .errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    ToolError,
)
from .state import ConversationStore

log = logging.getLogger("gemini-mcp")

SERVER_NAME = "gemini-mcp-server"
_PROTOCOL_VERSIONS = {"2024-11-05", "2025-03-26", "2025-06-18"}
_DEFAULT_PROTOCOL = "2024-11-05"
# Inline base64 media and long pasted chats make for large request lines.
_LINE_LIMIT = 16 * 1024 * 1024


# ---------------------------------------------------------------------------
# JSON-RPC 2.0 helpers
# ---------------------------------------------------------------------------

def _ok(request_id: Any, result: Any) -> dict:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _err(request_id: Any, code: int, message: str) -> dict:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


def _write(obj: dict) -> None:
    sys.stdout.write(json.dumps(obj) + "\n")
    sys.stdout.flush()


# ---------------------------------------------------------------------------
# Main request handler
# ---------------------------------------------------------------------------

async def _handle(line: str, dispatcher: ToolDispatcher) -> None:
    try:
        req = json.loads(line)
    except json.JSONDecodeError:
        _write(_err(None, PARSE_ERROR, "Parse error"))
        return
    if not isinstance(req, dict):
        _write(_err(None, INVALID_REQUEST, "Invalid Request"))
        return

    req_id = req.get("id")
    try:
        await _dispatch(req, dispatcher)
    except Exception as exc:
        log.exception("request %r failed", req.get("method"))
        if req_id is not None:
            _write(_err(req_id, INTERNAL_ERROR, f"Internal error: {exc}"))


async def _dispatch(req: dict[str, Any], dispatcher: ToolDispatcher) -> None:
    req_id = req.get("id")
    method = req.get("method", "")
    params = req.get("params") or {}
    if not isinstance(params, dict):
        if req_id is not None:
            _write(_err(req_id, INVALID_PARAMS, "Invalid params"))
        return

    if method == "initialize":
        client_ver = params.get("protocolVersion")
        agreed_ver = (
            client_ver
            if isinstance(client_ver, str) and client_ver in _PROTOCOL_VERSIONS
            else _DEFAULT_PROTOCOL
        )
        _write(_ok(req_id, {
            "protocolVersion": agreed_ver,
            "capabilities": {"tools": {}},
            "serverInfo": {
                "name": SERVER_NAME,
                "version": __version__,
            },
        }))

    elif method in ("notifications/initialized", "initialized"):
        # Notification, no response needed
        pass

    elif method == "tools/list":
        _write(_ok(req_id, {"tools": dispatcher.list_tools()}))

    elif method == "tools/call":
        tool_name = params.get("name", "")
        arguments = params.get("arguments") or {}
        try:
            content_blocks = await dispatcher.call_tool(tool_name, arguments)
        except ToolError as exc:
            _write(_err(req_id, exc.code, exc.message))
            return
        _write(_ok(req_id, {
            "content": content_blocks,
            "isError": False,
        }))

    elif method == "ping":
        _write(_ok(req_id, {}))

    else:
        if req_id is not None:
            _write(_err(req_id, METHOD_NOT_FOUND, f"Method not found: {method}"))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

async def _race(aw: Awaitable[Any], stop: asyncio.Future) -> tuple[bool, Any]:
    """Await *aw* unless *stop* finishes first; returns ``(completed, result)``."""
    task = asyncio.ensure_future(aw)
    done, _ = await asyncio.wait({task, stop}, return_when=asyncio.FIRST_COMPLETED)
    if task not in done:
        task.cancel()
        return False, None
    return True, task.result()


async def _serve(reader: asyncio.StreamReader, dispatcher: ToolDispatcher, stop: asyncio.Future) -> None:
    """Handle one request line at a time until EOF or *stop* completes."""
    while True:
        try:
            completed, line_bytes = await _race(reader.readline(), stop)
        except ValueError:
            # Line longer than the reader's limit; the reader has dropped it.
            log.warning("discarded over-long request line")
            _write(_err(None, INVALID_REQUEST, "Request line too long"))
            continue
        except (ConnectionError, OSError) as exc:
            log.warning("stdin closed: %s", exc)
            break
        if not completed or not line_bytes:
            break
        line = line_bytes.decode(errors="replace").strip()
        if line:
            completed, _ = await _race(_handle(line, dispatcher), stop)
            if not completed:
                break


async def _run(dispatcher: ToolDispatcher, stdin: Any = None, limit: int = _LINE_LIMIT) -> None:
    loop = asyncio.get_running_loop()
    stopping = asyncio.Event()
    signals: list[int] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stopping.set)
            signals.append(sig)
        except (NotImplementedError, RuntimeError, ValueError):
            pass  # no signal handlers on this platform's loop or thread

    reader = asyncio.StreamReader(limit=limit)
    protocol = asyncio.StreamReaderProtocol(reader)
    transport, _ = await loop.connect_read_pipe(lambda: protocol, stdin or sys.stdin)
    stop = asyncio.ensure_future(stopping.wait())
    log.info("Gemini MCP server running on stdio")

    try:
        await _serve(reader, dispatcher, stop)
    finally:
        stop.cancel()
        transport.close()
        for sig in signals:
            loop.remove_signal_handler(sig)
        log.info("Gemini MCP server stopped")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def main() -> None:
    configure_logging()
    try:
        api_key = require_api_key()
        cfg = load_config()
    except ConfigError as exc:
        log.error("%s", exc)
        sys.exit(1)
    logging.getLogger().setLevel(cfg.log_level)
    client = GeminiClient(api_key, base_url=cfg.base_url, timeout=cfg.timeout)
    dispatcher = ToolDispatcher(client, ConversationStore())
    try:
        asyncio.run(_run(dispatcher))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
