# -*- coding: utf-8 -*-
"""Feedback record data model."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from chartroast.constants import BULLET, FEEDBACK_FIELDS


def format_field_value(value: Any) -> str | None:
    """Render a parsed value as display text; lists become bullet lines."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        items = [item if isinstance(item, str) else json.dumps(item, ensure_ascii=False) for item in value]
        return BULLET + f"\n{BULLET}".join(items)
    if isinstance(value, str):
        return value
    return str(value)


@dataclass(frozen=True)
class FeedbackRecord:
    """Structured critique handed to the display layer."""

    strengths: str
    weaknesses: str
    suggestions: str
    roast: str
    plot_code: str
    is_placeholder: bool = False
    raw_response: str = field(default="", compare=False, repr=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], raw_response: str = "") -> "FeedbackRecord":
        """Build a record from a parsed reply keyed by wire names."""
        values: dict[str, str] = {}
        for key in FEEDBACK_FIELDS:
            formatted = format_field_value(data.get(key))
            if formatted is None:
                raise KeyError(key)
            values[key] = formatted
        return cls(
            strengths=values["strengths"],
            weaknesses=values["weaknesses"],
            suggestions=values["suggestions"],
            roast=values["roast"],
            plot_code=values["plotCode"],
            raw_response=raw_response,
        )

    @classmethod
    def placeholder(
        cls,
        strengths: str,
        weaknesses: str,
        suggestions: str,
        roast: str,
        plot_code: str,
        raw_response: str = "",
    ) -> "FeedbackRecord":
        return cls(
            strengths=strengths,
            weaknesses=weaknesses,
            suggestions=suggestions,
            roast=roast,
            plot_code=plot_code,
            is_placeholder=True,
            raw_response=raw_response,
        )

    def as_dict(self) -> dict[str, str]:
        return {
            "strengths": self.strengths,
            "weaknesses": self.weaknesses,
            "suggestions": self.suggestions,
            "roast": self.roast,
            "plotCode": self.plot_code,
        }
