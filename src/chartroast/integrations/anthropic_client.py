# -*- coding: utf-8 -*-
"""Anthropic Messages API wrapper for single-image chart analysis."""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib import error, request

from chartroast.constants import (
    ANTHROPIC_API_URL,
    ANTHROPIC_VERSION,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
)
from chartroast.errors import MalformedUpstreamResponse, MissingCredential, UpstreamRequestError
from chartroast.models.image_part import ImagePart

logger = logging.getLogger(__name__)


class AnthropicClient:
    """Thin wrapper for key checks and one-shot multimodal messages."""

    def __init__(
        self,
        api_key: str = "",
        *,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = 60.0,
        base_url: str = ANTHROPIC_API_URL,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    def validate_key(
        self,
        api_key: str | None = None,
        *,
        check_remote: bool = False,
        timeout: float = 2.0,
    ) -> bool:
        """Validate key format and optionally test it against the model listing."""
        key = (api_key if api_key is not None else self.api_key).strip()
        if not (bool(key) and (key.startswith("sk-ant-") or key.startswith("test-"))):
            return False
        if not check_remote:
            return True
        status, _ = self._request_json(
            "GET",
            f"{self.base_url}/models",
            api_key=key,
            timeout=timeout,
        )
        return status == 200

    def build_payload(self, image_part: ImagePart, system_prompt: str, user_prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": system_prompt,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "image", "source": image_part.as_source()},
                        {"type": "text", "text": user_prompt},
                    ],
                }
            ],
        }

    def create_message(self, image_part: ImagePart, system_prompt: str, user_prompt: str) -> str:
        """Send one image plus instructions and return the reply's text block."""
        if not self.api_key.strip():
            raise MissingCredential(
                "Anthropic API key is missing. Please set ANTHROPIC_API_KEY in your .env file."
            )

        payload = self.build_payload(image_part, system_prompt, user_prompt)
        logger.info("[request] Sending request to Anthropic API (model=%s)...", self.model)
        status, response_payload = self._request_json(
            "POST",
            f"{self.base_url}/messages",
            api_key=self.api_key,
            timeout=self.timeout,
            data=payload,
        )
        if response_payload is None:
            raise UpstreamRequestError("Anthropic request failed: no response from server", status=status)
        if status != 200:
            detail = ""
            upstream_error = response_payload.get("error")
            if isinstance(upstream_error, dict):
                detail = str(upstream_error.get("message", ""))
            raise UpstreamRequestError(
                f"Anthropic request failed (status={status}){': ' + detail if detail else ''}",
                status=status,
            )
        logger.info("[request] Received response from Anthropic API.")
        return self.extract_text(response_payload)

    @staticmethod
    def extract_text(response_payload: dict[str, Any]) -> str:
        """Return the text of the first content block, which must be text-typed."""
        content = response_payload.get("content")
        if not isinstance(content, list) or not content:
            raise MalformedUpstreamResponse("Invalid response format from Anthropic API: no content.")
        first = content[0]
        if not isinstance(first, dict) or first.get("type") != "text":
            raise MalformedUpstreamResponse("Invalid response format from Anthropic API: no text block.")
        return str(first.get("text", ""))

    def _request_json(
        self,
        method: str,
        url: str,
        *,
        api_key: str,
        timeout: float,
        data: dict[str, Any] | None = None,
    ) -> tuple[int, dict[str, Any] | None]:
        body = None
        headers = {
            "Content-Type": "application/json",
            "anthropic-version": ANTHROPIC_VERSION,
        }
        if api_key:
            headers["x-api-key"] = api_key
        if data is not None:
            body = json.dumps(data).encode("utf-8")
        req = request.Request(url, headers=headers, data=body, method=method)
        try:
            with request.urlopen(req, timeout=timeout) as response:
                status = int(getattr(response, "status", 200))
                raw_body = response.read().decode("utf-8", errors="ignore")
                try:
                    payload = json.loads(raw_body) if raw_body else {}
                except json.JSONDecodeError:
                    logger.warning("[request] Non-JSON body from %s: %s", url, raw_body[:200])
                    payload = {}
                return status, payload if isinstance(payload, dict) else {}
        except error.HTTPError as exc:
            raw_body = exc.read().decode("utf-8", errors="ignore")
            try:
                payload = json.loads(raw_body) if raw_body else {}
            except json.JSONDecodeError:
                payload = {}
            return int(exc.code), payload if isinstance(payload, dict) else {}
        except (error.URLError, OSError) as exc:
            logger.error("[request] %s %s failed: %s", method, url, exc)
            return 0, None
