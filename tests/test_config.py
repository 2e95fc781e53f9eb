# -*- coding: utf-8 -*-
"""Tests for config persistence and validation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from chartroast.config import (
    ConfigError,
    get_default_config,
    load_config,
    resolve_api_key,
    save_config,
    validate_config,
)
from chartroast.constants import DEFAULT_MAX_TOKENS, DEFAULT_MODEL


def test_default_config_has_all_keys() -> None:
    config = get_default_config()
    assert {"api_keys", "analysis", "parsing", "export"}.issubset(config.keys())


def test_default_model_and_tokens() -> None:
    analysis = get_default_config()["analysis"]
    assert analysis["model"] == DEFAULT_MODEL
    assert analysis["max_tokens"] == DEFAULT_MAX_TOKENS


def test_default_config_is_a_copy() -> None:
    config = get_default_config()
    config["analysis"]["model"] = "changed"
    assert get_default_config()["analysis"]["model"] == DEFAULT_MODEL


def test_save_config_creates_json_file(tmp_path: Path, default_config: dict) -> None:
    target = tmp_path / "settings.json"
    save_config(default_config, target)
    assert target.exists()


def test_model_selection_saved(tmp_path: Path, default_config: dict) -> None:
    target = tmp_path / "settings.json"
    default_config["analysis"]["model"] = "claude-3-5-haiku-20241022"
    save_config(default_config, target)
    loaded = load_config(target)
    assert loaded["analysis"]["model"] == "claude-3-5-haiku-20241022"


def test_partial_file_merged_with_defaults(tmp_path: Path) -> None:
    target = tmp_path / "settings.json"
    target.write_text(json.dumps({"analysis": {"max_tokens": 1024}}), encoding="utf-8")
    loaded = load_config(target)
    assert loaded["analysis"]["max_tokens"] == 1024
    assert loaded["analysis"]["model"] == DEFAULT_MODEL


def test_short_api_keys_persisted(tmp_path: Path, default_config: dict) -> None:
    target = tmp_path / "settings.json"
    default_config["api_keys"]["anthropic"] = "test-key"
    save_config(default_config, target)
    loaded = json.loads(target.read_text(encoding="utf-8"))
    assert loaded["api_keys"]["anthropic"] == "test-key"


def test_real_api_keys_not_written(tmp_path: Path, default_config: dict) -> None:
    target = tmp_path / "settings.json"
    default_config["api_keys"]["anthropic"] = "sk-ant-api03-" + "x" * 40
    save_config(default_config, target)
    loaded = json.loads(target.read_text(encoding="utf-8"))
    assert loaded["api_keys"]["anthropic"] == "USE_ENV_FILE"


def test_invalid_max_tokens_rejected(default_config: dict) -> None:
    default_config["analysis"]["max_tokens"] = 0
    with pytest.raises(ConfigError):
        validate_config(default_config)


def test_boolean_max_tokens_rejected(default_config: dict) -> None:
    default_config["analysis"]["max_tokens"] = True
    with pytest.raises(ConfigError):
        validate_config(default_config)


def test_empty_model_rejected(default_config: dict) -> None:
    default_config["analysis"]["model"] = " "
    with pytest.raises(ConfigError):
        validate_config(default_config)


def test_invalid_timeout_rejected(default_config: dict) -> None:
    default_config["analysis"]["timeout_seconds"] = -1
    with pytest.raises(ConfigError):
        validate_config(default_config)


def test_invalid_export_format_rejected(default_config: dict) -> None:
    default_config["export"]["format"] = "pdf"
    with pytest.raises(ConfigError):
        validate_config(default_config)


def test_negative_excerpt_rejected(default_config: dict) -> None:
    default_config["parsing"]["excerpt_length"] = -5
    with pytest.raises(ConfigError):
        validate_config(default_config)


def test_invalid_file_rejected_on_load(tmp_path: Path) -> None:
    target = tmp_path / "settings.json"
    target.write_text(json.dumps({"export": {"format": "pdf"}}), encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(target)


def test_load_config_returns_defaults_when_file_missing(tmp_path: Path) -> None:
    loaded = load_config(tmp_path / "missing.json")
    assert loaded["export"]["format"] == "markdown"


def test_load_config_reads_key_from_env_file(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text(
        "# local secrets\nANTHROPIC_API_KEY=\"test-from-dotenv\"\nCHARTROAST_MODEL=claude-x\n",
        encoding="utf-8",
    )
    loaded = load_config(tmp_path / "settings.json")
    assert loaded["api_keys"]["anthropic"] == "test-from-dotenv"
    assert loaded["analysis"]["model"] == "claude-x"


def test_process_environment_beats_env_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text("ANTHROPIC_API_KEY=test-from-dotenv\n", encoding="utf-8")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-from-process")
    loaded = load_config(tmp_path / "settings.json")
    assert loaded["api_keys"]["anthropic"] == "test-from-process"


def test_resolve_api_key_treats_placeholder_as_missing(default_config: dict) -> None:
    assert resolve_api_key(default_config) == ""


def test_resolve_api_key_falls_back_to_environment(default_config: dict, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-env")
    assert resolve_api_key(default_config) == "test-env"


def test_resolve_api_key_prefers_settings(keyed_config: dict, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-env")
    assert resolve_api_key(keyed_config) == "test-key"
