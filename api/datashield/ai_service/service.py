"""
Gateway to the external completion API.

Sends the composed two-message prompt and returns the first choice's text as
the verdict. Every call is attempted exactly once: the SDK's own retries are
disabled and there is no fallback verdict.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from openai import OpenAI, OpenAIError

from ..config import Settings
from ..errors import ClassifierResponseMalformed, ClassifierUnavailable

logger = logging.getLogger(__name__)

CLASSIFIER_TIMEOUT_S = 10.0


def _build_ai_client(settings: Settings) -> OpenAI:
    if settings.openai_base_url:
        return OpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=CLASSIFIER_TIMEOUT_S,
            max_retries=0,
        )
    return OpenAI(api_key=settings.openai_api_key, timeout=CLASSIFIER_TIMEOUT_S, max_retries=0)


def _extract_verdict(resp: Any) -> str:
    try:
        content = resp.choices[0].message.content
    except (AttributeError, IndexError, KeyError, TypeError) as exc:
        raise ClassifierResponseMalformed(
            "Classifier response has no choices[0].message.content", cause=exc
        ) from exc
    if not isinstance(content, str):
        raise ClassifierResponseMalformed("Classifier response message has no text content")
    return content


class ClassifierGateway:
    def __init__(self, client: Any | None, *, model: str = "gpt-3.5-turbo") -> None:
        # client is None when no credential is configured.
        self._client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClassifierGateway":
        if not settings.openai_api_key:
            logger.warning("OPENAI_API_KEY not set; classifier calls will fail as unavailable")
            return cls(None, model=settings.openai_model)
        return cls(_build_ai_client(settings), model=settings.openai_model)

    def classify(self, messages: List[Dict[str, str]]) -> str:
        if self._client is None:
            raise ClassifierUnavailable("Classifier credential is not configured")

        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                timeout=CLASSIFIER_TIMEOUT_S,
            )
        except OpenAIError as exc:
            # Timeouts, connection errors and 4xx/5xx (including a rejected key).
            raise ClassifierUnavailable(f"Classifier request failed: {exc}", cause=exc) from exc
        return _extract_verdict(resp)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
