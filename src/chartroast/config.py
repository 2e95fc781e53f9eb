# -*- coding: utf-8 -*-
"""Settings persistence and validation."""

from __future__ import annotations

import os
from copy import deepcopy
from pathlib import Path
from typing import Any

from chartroast.constants import DEFAULT_MAX_TOKENS, DEFAULT_MODEL, DEFAULT_SETTINGS_FILE
from chartroast.utils.file_utils import read_json_file, write_json_file


KEY_PLACEHOLDER = "USE_ENV_FILE"

DEFAULT_CONFIG: dict[str, Any] = {
    "api_keys": {"anthropic": KEY_PLACEHOLDER},
    "analysis": {
        "model": DEFAULT_MODEL,
        "max_tokens": DEFAULT_MAX_TOKENS,
        "timeout_seconds": 60.0,
        "save_raw_response": False,
        "debug_dir": "",
    },
    "parsing": {"excerpt_length": 200},
    "export": {"format": "markdown"},
}

EXPORT_FORMATS = {"markdown", "json"}


class ConfigError(ValueError):
    """Raised when settings are invalid."""


def get_default_config() -> dict[str, Any]:
    """Return a deep copy of the default config."""
    return deepcopy(DEFAULT_CONFIG)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge nested dicts; values from ``override`` win."""
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def merge_with_defaults(overrides: dict[str, Any]) -> dict[str, Any]:
    """Return the default config with a partial settings dict merged over it."""
    return _deep_merge(get_default_config(), overrides)


def _load_env_file(env_path: Path) -> dict[str, str]:
    """Load a simple .env file (KEY=VALUE)."""
    values: dict[str, str] = {}
    if not env_path.exists():
        return values

    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        if (value.startswith('"') and value.endswith('"')) or (
            value.startswith("'") and value.endswith("'")
        ):
            value = value[1:-1]
        values[key] = value
    return values


def _apply_env_overrides(config: dict[str, Any], env_values: dict[str, str]) -> dict[str, Any]:
    """Apply .env and process environment overrides; the process environment wins."""
    merged = deepcopy(config)
    combined = dict(env_values)
    for name in ("ANTHROPIC_API_KEY", "CHARTROAST_MODEL"):
        if os.environ.get(name, "").strip():
            combined[name] = os.environ[name]

    anthropic_key = combined.get("ANTHROPIC_API_KEY", "").strip()
    model = combined.get("CHARTROAST_MODEL", "").strip()

    if anthropic_key:
        merged.setdefault("api_keys", {})
        merged["api_keys"]["anthropic"] = anthropic_key
    if model:
        merged.setdefault("analysis", {})
        merged["analysis"]["model"] = model
    return merged


def validate_config(config: dict[str, Any]) -> None:
    """Validate the fields the analyzer and exporter depend on."""
    analysis = config.get("analysis", {})
    model = analysis.get("model")
    if not isinstance(model, str) or not model.strip():
        raise ConfigError("analysis.model must be a non-empty string")

    max_tokens = analysis.get("max_tokens")
    if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or not (1 <= max_tokens <= 64000):
        raise ConfigError("analysis.max_tokens must be an int in range 1..64000")

    timeout = analysis.get("timeout_seconds")
    if isinstance(timeout, bool) or not isinstance(timeout, (float, int)) or float(timeout) <= 0:
        raise ConfigError("analysis.timeout_seconds must be a positive number")

    excerpt = config.get("parsing", {}).get("excerpt_length")
    if isinstance(excerpt, bool) or not isinstance(excerpt, int) or excerpt < 0:
        raise ConfigError("parsing.excerpt_length must be a non-negative int")

    export_format = config.get("export", {}).get("format")
    if export_format not in EXPORT_FORMATS:
        raise ConfigError("export.format must be 'markdown' or 'json'")


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load config from JSON and merge into defaults."""
    config_path = Path(path or DEFAULT_SETTINGS_FILE)
    env_values = _load_env_file(config_path.parent / ".env")
    if not config_path.exists():
        return _apply_env_overrides(get_default_config(), env_values)

    loaded = read_json_file(config_path)
    merged = merge_with_defaults(loaded)
    merged = _apply_env_overrides(merged, env_values)
    validate_config(merged)
    return merged


def resolve_api_key(config: dict[str, Any]) -> str:
    """Return the configured Anthropic key, or an empty string when none is usable.

    Checked at call time so a key exported after startup is still picked up.
    """
    key = str(config.get("api_keys", {}).get("anthropic", "") or "").strip()
    if not key or key == KEY_PLACEHOLDER:
        key = os.environ.get("ANTHROPIC_API_KEY", "").strip()
    return key


def _strip_api_keys(config: dict[str, Any]) -> dict[str, Any]:
    """Replace real API keys with the placeholder before writing to disk."""
    config_copy = deepcopy(config)
    api_keys = config_copy.get("api_keys", {})
    for key_name, current_value in list(api_keys.items()):
        if current_value and len(str(current_value)) > 20:
            api_keys[key_name] = KEY_PLACEHOLDER
    return config_copy


def save_config(config: dict[str, Any], path: str | Path | None = None) -> Path:
    """Validate and save config as JSON, but without real API keys.

    API keys belong in the .env file or the environment, not in settings.json.
    """
    validate_config(config)
    config_path = Path(path or DEFAULT_SETTINGS_FILE)
    write_json_file(config_path, _strip_api_keys(config))
    return config_path
