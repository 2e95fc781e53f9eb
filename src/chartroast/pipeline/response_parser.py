# -*- coding: utf-8 -*-
"""Recover a feedback record from a model reply that should be JSON but may not be.

Tiers are tried in order and the first success wins:

1. strict JSON (``json.loads``)
2. lenient JSON5 (trailing commas, unquoted keys, single quotes, comments)
3. per-field pattern extraction over the raw text

Each tier is a plain function ``str -> dict[str, str] | None`` returning the
formatted field values keyed by wire name, so each can be tested on its own.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Sequence

import json5

from chartroast.constants import FEEDBACK_FIELDS, LIST_FIELDS
from chartroast.errors import UnparseableResponse
from chartroast.models.feedback_record import FeedbackRecord, format_field_value

logger = logging.getLogger(__name__)

Tier = Callable[[str], "dict[str, str] | None"]

_FENCE_RE = re.compile(r"^```[\w-]*[ \t]*\n(.*?)\n?```\s*$", re.DOTALL)
_ESCAPE_RE = re.compile(r'\\(["\\/nrt])')
_ESCAPES = {'"': '"', "\\": "\\", "/": "/", "n": "\n", "r": "\r", "t": "\t"}
_QUOTED_ITEM_RE = re.compile(r'"((?:[^"\\]|\\.)*)"', re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence such as ```json ... ```."""
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    return match.group(1).strip() if match else stripped


def object_slice(text: str) -> str:
    """Return the text from the first ``{`` to the last ``}``, or the text itself."""
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[start:end + 1]
    return text


def unescape(text: str) -> str:
    r"""Decode ``\"``, ``\\`` and the common whitespace escapes in one pass."""
    return _ESCAPE_RE.sub(lambda match: _ESCAPES[match.group(1)], text)


def _candidates(raw: str) -> list[str]:
    """Documents worth handing to a JSON parser, most literal first."""
    candidates: list[str] = []
    for candidate in (raw.strip(), strip_code_fence(raw), object_slice(strip_code_fence(raw))):
        if candidate and candidate not in candidates:
            candidates.append(candidate)
    return candidates


def _fields_from_object(parsed: Any, fields: Sequence[str]) -> dict[str, str] | None:
    if not isinstance(parsed, dict):
        return None
    if not all(key in parsed for key in fields):
        # Older replies wrapped the feedback in a single envelope key.
        nested = [value for value in parsed.values() if isinstance(value, dict)]
        if len(parsed) == 1 and len(nested) == 1:
            return _fields_from_object(nested[0], fields)
        return None
    values: dict[str, str] = {}
    for key in fields:
        formatted = format_field_value(parsed[key])
        if formatted is None:
            return None
        values[key] = formatted
    return values


def parse_strict(raw: str, fields: Sequence[str] = FEEDBACK_FIELDS) -> dict[str, str] | None:
    for candidate in _candidates(raw):
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        values = _fields_from_object(parsed, fields)
        if values is not None:
            return values
    return None


def parse_lenient(raw: str, fields: Sequence[str] = FEEDBACK_FIELDS) -> dict[str, str] | None:
    for candidate in _candidates(raw):
        try:
            parsed = json5.loads(candidate)
        except ValueError:
            continue
        values = _fields_from_object(parsed, fields)
        if values is not None:
            return values
    return None


def _field_patterns(field: str, keys: Sequence[str] = FEEDBACK_FIELDS) -> list[re.Pattern[str]]:
    key = rf'"{re.escape(field)}"\s*:\s*'
    # Only the reply's own quoted keys end a value; plot code has unquoted ones.
    end = r'(?:\s*,\s*"(?:' + "|".join(re.escape(name) for name in keys) + r')"\s*:|\s*\}\s*$)'
    return [
        # `...` with literal newlines, as models like to emit for code
        re.compile(key + r"`(.*?)`(?=\s*(?:,|\}|$))", re.DOTALL),
        # "..." spanning lines; escape pairs are consumed whole, so \\" still closes
        re.compile(key + r'"((?:[^"\\]|\\.|"(?!' + end + r'))*)"(?=' + end + r")", re.DOTALL),
        re.compile(key + r'"((?:[^"\\\n]|\\.)*)"'),
    ]


def _list_pattern(field: str) -> re.Pattern[str]:
    return re.compile(
        rf'"{re.escape(field)}"\s*:\s*\[((?:[^\[\]"]|"(?:[^"\\]|\\.)*")*)\]',
        re.DOTALL,
    )


def extract_field(
    text: str,
    field: str,
    *,
    is_list: bool = False,
    keys: Sequence[str] = FEEDBACK_FIELDS,
) -> str | None:
    """Scrape one field's value from malformed JSON-ish text."""
    if is_list:
        match = _list_pattern(field).search(text)
        if match:
            items = [unescape(item) for item in _QUOTED_ITEM_RE.findall(match.group(1))]
            if items:
                return format_field_value(items)

    for index, pattern in enumerate(_field_patterns(field, keys)):
        match = pattern.search(text)
        if not match:
            continue
        value = match.group(1)
        # Backtick values are taken verbatim.
        return value if index == 0 else unescape(value)
    return None


def extract_fields_partial(
    raw: str,
    fields: Sequence[str] = FEEDBACK_FIELDS,
    list_fields: Sequence[str] = LIST_FIELDS,
) -> dict[str, str]:
    """Return every field that could be scraped with a non-empty value."""
    text = object_slice(strip_code_fence(raw))
    values: dict[str, str] = {}
    for field in fields:
        value = extract_field(text, field, is_list=field in list_fields, keys=fields)
        if value is not None and value.strip():
            values[field] = value
    return values


def extract_fields(
    raw: str,
    fields: Sequence[str] = FEEDBACK_FIELDS,
    list_fields: Sequence[str] = LIST_FIELDS,
) -> dict[str, str] | None:
    values = extract_fields_partial(raw, fields, list_fields)
    if len(values) != len(fields):
        return None
    return values


class ResponseParser:
    """Run the recovery tiers in order and build a FeedbackRecord."""

    fields = FEEDBACK_FIELDS
    list_fields = LIST_FIELDS

    @property
    def tiers(self) -> list[tuple[str, Tier]]:
        return [
            ("strict", lambda raw: parse_strict(raw, self.fields)),
            ("lenient", lambda raw: parse_lenient(raw, self.fields)),
            ("pattern", lambda raw: extract_fields(raw, self.fields, self.list_fields)),
        ]

    def parse_fields(self, raw_response: str) -> dict[str, str]:
        for name, tier in self.tiers:
            values = tier(raw_response)
            if values is not None:
                logger.debug("[parse] %s tier recovered all fields", name)
                return values
            logger.debug("[parse] %s tier failed", name)

        recovered = extract_fields_partial(raw_response, self.fields, self.list_fields)
        missing = [field for field in self.fields if field not in recovered]
        logger.warning("[parse] All tiers failed; unrecoverable fields: %s", ", ".join(missing))
        raise UnparseableResponse(raw_response, missing)

    def parse(self, raw_response: str) -> FeedbackRecord:
        return FeedbackRecord.from_mapping(self.parse_fields(raw_response), raw_response=raw_response)


def parse_response(raw_response: str) -> FeedbackRecord:
    """Parse a model reply with the default five-field schema."""
    return ResponseParser().parse(raw_response)
