"""Local image/video files prepared for inline upload to Gemini."""
from __future__ import annotations

import base64
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import InvalidParamsError


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


_MEDIA_TYPES: dict[str, tuple[MediaKind, str]] = {
    ".jpg": (MediaKind.IMAGE, "image/jpeg"),
    ".jpeg": (MediaKind.IMAGE, "image/jpeg"),
    ".png": (MediaKind.IMAGE, "image/png"),
    ".gif": (MediaKind.IMAGE, "image/gif"),
    ".webp": (MediaKind.IMAGE, "image/webp"),
    ".mp4": (MediaKind.VIDEO, "video/mp4"),
    ".mov": (MediaKind.VIDEO, "video/quicktime"),
    ".avi": (MediaKind.VIDEO, "video/x-msvideo"),
    ".mkv": (MediaKind.VIDEO, "video/x-matroska"),
    ".webm": (MediaKind.VIDEO, "video/webm"),
}

SUPPORTED_EXTENSIONS = frozenset(_MEDIA_TYPES)


class UnsupportedMediaError(InvalidParamsError):
    pass


@dataclass(frozen=True, slots=True)
class MediaBlob:
    path: str
    kind: MediaKind
    mime_type: str
    data: bytes

    @property
    def encoded(self) -> str:
        return base64.standard_b64encode(self.data).decode("ascii")

    def as_inline_part(self) -> dict[str, dict[str, str]]:
        return {"inlineData": {"mimeType": self.mime_type, "data": self.encoded}}


def classify(path: str) -> tuple[MediaKind, str]:
    ext = os.path.splitext(path)[1].lower()
    try:
        return _MEDIA_TYPES[ext]
    except KeyError:
        raise UnsupportedMediaError("File must be an image or video format") from None


def check_access(path: str) -> None:
    """Raise the matching ``OSError`` if *path* is not a readable file."""
    target = Path(path)
    if not target.exists():
        raise FileNotFoundError(f"no such file: '{path}'")
    if target.is_dir():
        raise IsADirectoryError(f"is a directory: '{path}'")
    if not os.access(target, os.R_OK):
        raise PermissionError(f"permission denied: '{path}'")


def load_media(path: str) -> MediaBlob:
    check_access(path)
    kind, mime = classify(path)
    return MediaBlob(path=path, kind=kind, mime_type=mime, data=Path(path).read_bytes())
