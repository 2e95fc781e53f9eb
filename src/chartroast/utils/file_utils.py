# -*- coding: utf-8 -*-
"""UTF-8 file helpers for settings, replies, and exports."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def ensure_dir(path: str | Path) -> Path:
    """Create a directory if it does not exist."""
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def read_json_file(path: str | Path) -> dict[str, Any]:
    """Read a settings file that must hold a JSON object."""
    file_path = Path(path)
    data = json.loads(file_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Expected JSON object in {file_path}")
    return data


def write_json_file(path: str | Path, data: dict[str, Any]) -> Path:
    """Write a JSON object; non-ASCII text such as bullets is kept as-is."""
    file_path = Path(path)
    ensure_dir(file_path.parent)
    file_path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return file_path


def read_text_file(path: str | Path) -> str:
    """Read a UTF-8 text file, such as a saved model reply."""
    return Path(path).read_text(encoding="utf-8")


def write_text_file(path: str | Path, content: str) -> Path:
    """Write a UTF-8 text file, creating parent directories."""
    file_path = Path(path)
    ensure_dir(file_path.parent)
    file_path.write_text(content, encoding="utf-8")
    return file_path
