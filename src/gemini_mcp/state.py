from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Role(str, Enum):
    USER = "user"
    MODEL = "model"


@dataclass(frozen=True, slots=True)
class MessageEntry:
    role: Role
    parts: tuple[dict[str, str], ...]

    @classmethod
    def text(cls, role: Role, text: str) -> "MessageEntry":
        return cls(role=Role(role), parts=({"text": text},))

    @property
    def content(self) -> str:
        return "".join(part.get("text", "") for part in self.parts)

    def as_content(self) -> dict[str, Any]:
        return {"role": self.role.value, "parts": [dict(part) for part in self.parts]}


class ConversationStore:
    """Ordered in-memory transcript shared by every chat call in the process.

    The store has exactly one writer, the chat handler, and relies on the
    transport delivering one request at a time. Entries are only ever
    appended, except for ``clear()`` on reset and ``pop_last()`` when a
    generation call fails and the dangling user turn has to be rolled back.
    """

    def __init__(self) -> None:
        self._entries: list[MessageEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[MessageEntry, ...]:
        return tuple(self._entries)

    def append(self, role: Role, text: str) -> MessageEntry:
        entry = MessageEntry.text(role, text)
        self._entries.append(entry)
        return entry

    def pop_last(self) -> MessageEntry | None:
        if not self._entries:
            return None
        return self._entries.pop()

    def clear(self) -> None:
        self._entries.clear()

    def as_contents(self) -> list[dict[str, Any]]:
        return [entry.as_content() for entry in self._entries]

    def to_json(self) -> str:
        return json.dumps(self.as_contents(), indent=2, ensure_ascii=False)
