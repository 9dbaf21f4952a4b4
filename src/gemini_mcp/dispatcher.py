from __future__ import annotations

import copy
import logging
from enum import Enum
from typing import Any

from .client import GeminiClient
from .errors import InternalError, MethodNotFoundError, ToolError, normalize_error
from .media import load_media
from .state import ConversationStore, Role
from .tool_args import DEFAULT_MEDIA_PROMPT, AnalyzeMediaArgs, ChatArgs

log = logging.getLogger("gemini-mcp")


class ToolName(str, Enum):
    GEMINI_CHAT = "gemini_chat"
    GET_CONVERSATION_HISTORY = "get_conversation_history"
    ANALYZE_MEDIA = "analyze_media"


# ---------------------------------------------------------------------------
# Tool schema registry: one entry per exposed tool
# ---------------------------------------------------------------------------

TOOL_SCHEMAS: list[dict[str, Any]] = [
    {
        "name": ToolName.GEMINI_CHAT.value,
        "description": "Chat with Google's Gemini AI model",
        "inputSchema": {
            "type": "object",
            "properties": {
                "message": {
                    "type": "string",
                    "description": "The message to send to Gemini",
                },
                "reset_conversation": {
                    "type": "boolean",
                    "description": "Whether to reset the conversation history",
                    "default": False,
                },
            },
            "required": ["message"],
        },
    },
    {
        "name": ToolName.GET_CONVERSATION_HISTORY.value,
        "description": "Get the current conversation history",
        "inputSchema": {
            "type": "object",
            "properties": {},
        },
    },
    {
        "name": ToolName.ANALYZE_MEDIA.value,
        "description": "Analyze image or video file using Gemini vision capabilities",
        "inputSchema": {
            "type": "object",
            "properties": {
                "file_path": {
                    "type": "string",
                    "description": "Path to the image or video file",
                },
                "prompt": {
                    "type": "string",
                    "description": "Optional analysis prompt",
                    "default": DEFAULT_MEDIA_PROMPT,
                },
            },
            "required": ["file_path"],
        },
    },
]


def _text(s: str) -> list[dict[str, Any]]:
    return [{"type": "text", "text": s}]


class ToolDispatcher:
    """Routes tool calls to their handlers.

    Owns no state of its own: the conversation store is handed in at
    construction and only the chat handler writes to it.
    """

    def __init__(self, client: GeminiClient, store: ConversationStore) -> None:
        self.client = client
        self.store = store

    def list_tools(self) -> list[dict[str, Any]]:
        return copy.deepcopy(TOOL_SCHEMAS)

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> list[dict[str, Any]]:
        """Dispatch a tool call and return a list of MCP content blocks.

        Raises ``ToolError``; anything else a handler raises is wrapped
        into an internal error first.
        """
        try:
            tool = ToolName(name)
        except ValueError:
            raise MethodNotFoundError(f"Unknown tool: {name}") from None

        log.info("tool call: %s", tool.value)
        try:
            if tool is ToolName.GEMINI_CHAT:
                return await self._chat(ChatArgs.from_arguments(arguments))
            if tool is ToolName.GET_CONVERSATION_HISTORY:
                return self._history()
            if tool is ToolName.ANALYZE_MEDIA:
                return await self._analyze_media(AnalyzeMediaArgs.from_arguments(arguments))
            raise AssertionError(f"unhandled tool: {tool}")
        except Exception as exc:
            error = normalize_error(exc, "Tool execution failed")
            log.warning("%s failed: %s", tool.value, error.message)
            if error is exc:
                raise
            raise error from exc

    async def _chat(self, args: ChatArgs) -> list[dict[str, Any]]:
        if args.reset_conversation:
            self.store.clear()

        self.store.append(Role.USER, args.message)
        try:
            reply = await self.client.chat(self.store.as_contents())
        except Exception as exc:
            # Drop the unanswered user turn so roles keep alternating.
            self.store.pop_last()
            raise InternalError(f"Gemini API error: {exc}") from exc

        self.store.append(Role.MODEL, reply)
        return _text(reply)

    def _history(self) -> list[dict[str, Any]]:
        return _text(self.store.to_json())

    async def _analyze_media(self, args: AnalyzeMediaArgs) -> list[dict[str, Any]]:
        try:
            blob = load_media(args.file_path)
            log.info("analyzing %s (%s, %d bytes)", blob.path, blob.mime_type, len(blob.data))
            reply = await self.client.analyze(blob, args.prompt)
        except ToolError:
            raise
        except Exception as exc:
            raise InternalError(f"Media analysis failed: {exc}") from exc
        return _text(reply)
