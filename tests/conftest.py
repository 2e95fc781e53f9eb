# -*- coding: utf-8 -*-
"""Shared pytest fixtures."""

from __future__ import annotations

import base64
import json
import sys
from pathlib import Path

import pytest


SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


PNG_1X1_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8/x8AAwMCAO7+fJ8AAAAASUVORK5CYII="
PNG_1X1_BYTES = base64.b64decode(PNG_1X1_B64)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("CHARTROAST_MODEL", raising=False)


@pytest.fixture
def sample_chart(tmp_path: Path) -> Path:
    path = tmp_path / "sales_chart.png"
    path.write_bytes(PNG_1X1_BYTES)
    return path


@pytest.fixture
def sample_reply() -> str:
    return json.dumps(
        {
            "strengths": ["Clear axis"],
            "weaknesses": ["No title"],
            "suggestions": ["Add title"],
            "roast": "Bland.",
            "plotCode": "Plot.plot({})",
        }
    )


@pytest.fixture
def default_config() -> dict:
    from chartroast.config import get_default_config

    return get_default_config()


@pytest.fixture
def keyed_config(default_config: dict) -> dict:
    default_config["api_keys"]["anthropic"] = "test-key"
    return default_config


class FakeAnthropicClient:
    """Records requests and returns a canned reply, or raises a canned error."""

    def __init__(self, raw_response: str = "", error: Exception | None = None) -> None:
        self.raw_response = raw_response
        self.error = error
        self.calls: list[dict] = []

    def create_message(self, image_part, system_prompt: str, user_prompt: str) -> str:
        self.calls.append(
            {"image_part": image_part, "system_prompt": system_prompt, "user_prompt": user_prompt}
        )
        if self.error is not None:
            raise self.error
        return self.raw_response


@pytest.fixture
def fake_client_factory():
    return FakeAnthropicClient
