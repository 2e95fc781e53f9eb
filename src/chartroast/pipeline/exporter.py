# -*- coding: utf-8 -*-
"""Write feedback records to JSON, Markdown, and a standalone plot script."""

from __future__ import annotations

import logging
from pathlib import Path

from chartroast.models.feedback_record import FeedbackRecord
from chartroast.utils.file_utils import ensure_dir, write_json_file, write_text_file

logger = logging.getLogger(__name__)


def render_markdown(record: FeedbackRecord, title: str = "Chart Roast") -> str:
    lines = [f"# {title}", ""]
    if record.is_placeholder:
        lines += ["> The analysis did not complete; the sections below describe the failure.", ""]
    for heading, body in (
        ("Strengths", record.strengths),
        ("Weaknesses", record.weaknesses),
        ("Suggestions", record.suggestions),
        ("Roast", record.roast),
    ):
        lines += [f"## {heading}", "", body, ""]
    lines += ["## Plot code", "", "```js", record.plot_code, "```", ""]
    return "\n".join(lines)


class Exporter:
    """Export a FeedbackRecord next to the analyzed chart or into a chosen folder."""

    def export(self, record: FeedbackRecord, output_dir: str | Path, stem: str) -> dict[str, Path]:
        logger.info("[export] Writing feedback for %s to %s", stem, output_dir)
        target_dir = ensure_dir(output_dir)

        written: dict[str, Path] = {
            "json": write_json_file(target_dir / f"{stem}.feedback.json", record.as_dict()),
            "markdown": write_text_file(target_dir / f"{stem}.feedback.md", render_markdown(record, stem)),
        }
        if record.is_placeholder:
            logger.debug("[export] Skipping plot script for placeholder record")
        else:
            written["plot"] = write_text_file(target_dir / f"{stem}.plot.js", record.plot_code.rstrip() + "\n")
        return written
