from __future__ import annotations

from pathlib import Path

import pytest

from gemini_mcp import config, mcp_server
from gemini_mcp.client import DEFAULT_BASE_URL
from gemini_mcp.config import AppConfig, ConfigError, load_config, require_api_key


def test_require_api_key_present() -> None:
    assert require_api_key({"GEMINI_API_KEY": " abc123 "}) == "abc123"


@pytest.mark.parametrize("environ", [{}, {"GEMINI_API_KEY": ""}, {"GEMINI_API_KEY": "   "}])
def test_require_api_key_missing(environ: dict) -> None:
    with pytest.raises(ConfigError, match="GEMINI_API_KEY environment variable not set"):
        require_api_key(environ)


def test_require_api_key_reads_process_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    assert require_api_key() == "from-env"


def test_missing_config_file_uses_defaults(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "absent.yml")
    assert cfg == AppConfig()
    assert cfg.base_url == DEFAULT_BASE_URL
    assert not (tmp_path / "absent.yml").exists()


def test_config_file_overrides(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    path.write_text("base_url: http://proxy:8080/v1beta\ntimeout: 45\nlog_level: debug\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.base_url == "http://proxy:8080/v1beta"
    assert cfg.timeout == 45.0
    assert cfg.log_level == "DEBUG"


def test_invalid_values_fall_back(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    path.write_text(
        "base_url: ''\ntimeout: -3\nlog_level: chatty\nmodel: gemini-ultra\n",
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg == AppConfig()


def test_non_mapping_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    assert load_config(path) == AppConfig()


def test_malformed_yaml_is_config_error(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    path.write_text("base_url: [unclosed\ntimeout: 3\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid config file"):
        load_config(path)


def test_default_path_is_read_at_call_time(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.yml"
    path.write_text("timeout: 12\n", encoding="utf-8")
    monkeypatch.setattr(config, "CONFIG_PATH", path)
    assert load_config().timeout == 12.0


def test_server_exits_cleanly_on_malformed_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.yml"
    path.write_text("log_level: {oops\n", encoding="utf-8")
    monkeypatch.setattr(config, "CONFIG_PATH", path)
    monkeypatch.setenv("GEMINI_API_KEY", "k")

    def _never_run(*_args, **_kwargs) -> None:
        raise AssertionError("server loop must not start")

    monkeypatch.setattr(mcp_server.asyncio, "run", _never_run)
    with pytest.raises(SystemExit) as exc:
        mcp_server.main()
    assert exc.value.code == 1
