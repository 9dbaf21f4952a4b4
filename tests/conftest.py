from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from gemini_mcp.dispatcher import ToolDispatcher
from gemini_mcp.state import ConversationStore


class FakeGeminiClient:
    """Stands in for GeminiClient; records every call it receives."""

    def __init__(self, replies: list[str] | None = None) -> None:
        self.replies = list(replies or [])
        self.fail_with: Exception | None = None
        self.chat_calls: list[list[dict[str, Any]]] = []
        self.analyze_calls: list[tuple[Any, str]] = []

    async def chat(self, contents: list[dict[str, Any]]) -> str:
        self.chat_calls.append(contents)
        if self.fail_with is not None:
            raise self.fail_with
        return self.replies.pop(0) if self.replies else f"reply {len(self.chat_calls)}"

    async def analyze(self, blob: Any, prompt: str) -> str:
        self.analyze_calls.append((blob, prompt))
        if self.fail_with is not None:
            raise self.fail_with
        return f"saw {blob.mime_type}"


@pytest.fixture()
def fake_client() -> FakeGeminiClient:
    return FakeGeminiClient()


@pytest.fixture()
def store() -> ConversationStore:
    return ConversationStore()


@pytest.fixture()
def dispatcher(fake_client: FakeGeminiClient, store: ConversationStore) -> ToolDispatcher:
    return ToolDispatcher(fake_client, store)  # type: ignore[arg-type]
