"""Config module edge case tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from sdetkit.config import RunConfig, get_config_path, load_run_config, save_run_config
from sdetkit.errors import ConfigurationError


def test_load_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        load_run_config(tmp_path / "missing.toml")


def test_load_invalid_toml_raises(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("baseUrl = [unterminated", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Unreadable"):
        load_run_config(path)


def test_load_invalid_values_raises(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('baseUrl = "https://x.test"\ntimeoutMs = 0\nretries = 1\n', encoding="utf-8")

    with pytest.raises(ConfigurationError, match="timeoutMs must be between"):
        load_run_config(path)


def test_env_var_overrides_base_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.toml"
    path.write_text('baseUrl = "https://file.test"\ntimeoutMs = 100\nretries = 1\n', encoding="utf-8")
    monkeypatch.setenv("SDETKIT_BASE_URL", "https://env.test")

    assert load_run_config(path).base_url == "https://env.test"


def test_integer_values_from_toml_are_accepted(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SDETKIT_BASE_URL", raising=False)
    path = tmp_path / "config.toml"
    path.write_text('baseUrl = "https://x.test"\ntimeoutMs = 120000\nretries = 5\nextra = true\n', encoding="utf-8")

    config = load_run_config(path)

    assert config.timeout_ms == 120000
    assert config.env is None


def test_saved_file_omits_unset_env(tmp_path: Path) -> None:
    path = save_run_config(RunConfig(base_url="https://x.test", timeout_ms=1, retries=0), tmp_path / "c.toml")

    assert "env" not in path.read_text(encoding="utf-8")


def test_get_config_path_expands_user() -> None:
    assert get_config_path("~/cfg.toml").is_absolute()
