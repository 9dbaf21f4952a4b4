from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .client import DEFAULT_BASE_URL

API_KEY_ENV = "GEMINI_API_KEY"
CONFIG_ENV = "GEMINI_MCP_CONFIG"

CONFIG_PATH = Path(os.environ.get(CONFIG_ENV) or Path.home() / ".config" / "gemini-mcp" / "config.yml")


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class AppConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 300.0       # seconds per generateContent request
    log_level: str = "INFO"


def _validate(cfg: dict[str, Any]) -> dict[str, Any]:
    defaults = AppConfig().__dict__.copy()
    merged = {**defaults, **{k: v for k, v in cfg.items() if k in defaults}}
    if not isinstance(merged["base_url"], str) or not merged["base_url"].strip():
        merged["base_url"] = defaults["base_url"]
    raw_timeout = merged["timeout"]
    merged["timeout"] = (
        float(raw_timeout)
        if isinstance(raw_timeout, (int, float)) and not isinstance(raw_timeout, bool) and raw_timeout > 0
        else defaults["timeout"]
    )
    level = str(merged["log_level"]).upper()
    merged["log_level"] = level if isinstance(logging.getLevelName(level), int) else defaults["log_level"]
    return merged


def load_config(path: Path | None = None) -> AppConfig:
    """Read the optional YAML config; a missing file means all defaults."""
    path = path or CONFIG_PATH
    if not path.exists():
        return AppConfig(**_validate({}))
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        reason = str(exc).splitlines()[0] if str(exc) else type(exc).__name__
        raise ConfigError(f"Invalid config file {path}: {reason}") from exc
    return AppConfig(**_validate(raw if isinstance(raw, dict) else {}))


def require_api_key(environ: dict[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    key = (env.get(API_KEY_ENV) or "").strip()
    if not key:
        raise ConfigError(f"{API_KEY_ENV} environment variable not set. Please set it to your API key.")
    return key
