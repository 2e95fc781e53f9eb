# -*- coding: utf-8 -*-
"""Chart analysis orchestration: encode, request, parse, and fall back to placeholders."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from chartroast.config import get_default_config, merge_with_defaults, resolve_api_key
from chartroast.constants import SYSTEM_PROMPT, USER_PROMPT
from chartroast.errors import ChartRoastError, MissingCredential, UnparseableResponse
from chartroast.integrations.anthropic_client import AnthropicClient
from chartroast.models.feedback_record import FeedbackRecord
from chartroast.pipeline.response_parser import ResponseParser
from chartroast.utils.file_utils import write_text_file
from chartroast.utils.image_utils import encode_image

logger = logging.getLogger(__name__)


def missing_key_record() -> FeedbackRecord:
    return FeedbackRecord.placeholder(
        strengths="Error: API Key missing.",
        weaknesses="Please configure the ANTHROPIC_API_KEY environment variable.",
        suggestions="Refer to the project documentation.",
        roast="No roast without a key.",
        plot_code="// API key missing",
    )


def parse_failure_record(exc: UnparseableResponse, excerpt_length: int = 200) -> FeedbackRecord:
    excerpt = exc.raw_response[:excerpt_length]
    if exc.missing_fields:
        suggestions = (
            "The AI might have provided an invalid JSON format. "
            f"Fields that could not be recovered: {', '.join(exc.missing_fields)}."
        )
    else:
        suggestions = "The AI might have provided an invalid JSON format. Check the logs for details."
    return FeedbackRecord.placeholder(
        strengths="Error: Could not process AI response.",
        weaknesses=f"Failed to parse the response from the AI. Raw response: {excerpt}...",
        suggestions=suggestions,
        roast="The AI returned something unreadable.",
        plot_code=f"// Error parsing AI response: {exc}",
        raw_response=exc.raw_response,
    )


def analysis_error_record(message: str) -> FeedbackRecord:
    return FeedbackRecord.placeholder(
        strengths="Error: Analysis failed.",
        weaknesses=f"An error occurred: {message}",
        suggestions="Please check the file or console logs and try again.",
        roast="Analysis error.",
        plot_code=f"// Analysis error: {message}",
    )


class ChartAnalyzer:
    """Ask a vision model to roast a chart and always hand back a FeedbackRecord."""

    def __init__(
        self,
        settings: dict[str, Any] | None = None,
        client: AnthropicClient | None = None,
        parser: ResponseParser | None = None,
    ) -> None:
        self.settings = merge_with_defaults(settings) if settings is not None else get_default_config()
        self.client = client
        self.parser = parser or ResponseParser()

    def _build_client(self, api_key: str) -> AnthropicClient:
        if self.client is not None:
            return self.client
        analysis = self.settings.get("analysis", {})
        return AnthropicClient(
            api_key,
            model=str(analysis.get("model")),
            max_tokens=int(analysis.get("max_tokens")),
            timeout=float(analysis.get("timeout_seconds")),
        )

    def analyze(self, image_path: str | Path, media_type: str | None = None) -> FeedbackRecord:
        """Analyze one chart image; expected failures come back as placeholder records."""
        image_path = Path(image_path)
        logger.info("[analyze] Starting chart analysis for: %s", image_path.name)
        excerpt_length = int(self.settings.get("parsing", {}).get("excerpt_length", 200))

        try:
            api_key = resolve_api_key(self.settings)
            if not api_key:
                raise MissingCredential(
                    "Anthropic API key is missing. Please set ANTHROPIC_API_KEY in your .env file."
                )
            image_part = encode_image(image_path, media_type)
            client = self._build_client(api_key)
            raw_response = client.create_message(image_part, SYSTEM_PROMPT, USER_PROMPT)
            logger.debug("[analyze] Raw API response text (%d chars): %s", len(raw_response), raw_response[:500])
            self._save_raw_response(image_path, raw_response)
            record = self.parser.parse(raw_response)
        except MissingCredential as e:
            logger.error("[analyze] %s", e)
            return missing_key_record()
        except UnparseableResponse as e:
            logger.error("[analyze] Failed to parse model reply: %s", e)
            return parse_failure_record(e, excerpt_length)
        except (ChartRoastError, OSError) as e:
            logger.error("[analyze] Error in chart analysis: %s", e)
            return analysis_error_record(str(e))
        except Exception as e:
            logger.exception("[analyze] Unexpected error in chart analysis")
            return analysis_error_record(str(e))

        logger.info("[analyze] Chart analysis finished for: %s", image_path.name)
        return record

    async def analyze_async(self, image_path: str | Path, media_type: str | None = None) -> FeedbackRecord:
        """Run ``analyze`` in a worker thread; concurrent calls share no state."""
        return await asyncio.to_thread(self.analyze, image_path, media_type)

    def _save_raw_response(self, image_path: Path, raw_response: str) -> None:
        analysis = self.settings.get("analysis", {})
        debug_dir = str(analysis.get("debug_dir", "") or "").strip()
        if not analysis.get("save_raw_response", False) or not debug_dir:
            return
        try:
            write_text_file(Path(debug_dir) / f"{image_path.stem}.response.txt", raw_response)
        except OSError as e:
            logger.warning("[analyze] Could not save raw response: %s", e)
