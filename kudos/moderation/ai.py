"""Optional AI classifier integration.

The engine never talks to a provider directly: callers inject an
:class:`AIClassifier`.  :class:`OpenAIModerationClassifier` is the stock
implementation backed by the OpenAI Moderation API.  Any failure (no key,
timeout, HTTP error, malformed payload) is logged as ``ai_unavailable`` and
treated as "no result" so moderation falls back to the heuristics alone.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Protocol, runtime_checkable

import httpx

from kudos.moderation.lexicons import AI_CATEGORY_LABELS, SEVERE_AI_CATEGORIES
from kudos.moderation.models import AIModerationResult, CheckOutcome, Severity

logger = logging.getLogger(__name__)

OPENAI_MODERATION_URL = "https://api.openai.com/v1/moderations"
DEFAULT_MODEL = "omni-moderation-latest"
DEFAULT_TIMEOUT = 5.0


@runtime_checkable
class AIClassifier(Protocol):
    async def classify(self, text: str) -> AIModerationResult | None:
        """Return a classification, or ``None`` when unavailable."""
        ...


class OpenAIModerationClassifier:
    """Classifier backed by the OpenAI Moderation endpoint.

    Parameters
    ----------
    api_key : str
        OpenAI API key.
    client : httpx.AsyncClient | None
        Shared client.  When *None* a short-lived client is opened per call.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
        url: str = OPENAI_MODERATION_URL,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.url = url
        self._client = client

    @classmethod
    def from_env(cls, **kwargs: Any) -> OpenAIModerationClassifier | None:
        """Build a classifier from ``OPENAI_API_KEY``; *None* when unset."""
        api_key = os.environ.get("OPENAI_API_KEY", "")
        if not api_key:
            logger.info("OPENAI_API_KEY not set; AI moderation disabled")
            return None
        return cls(api_key=api_key, **kwargs)

    async def classify(self, text: str) -> AIModerationResult | None:
        try:
            if self._client is not None:
                response = await self._post(self._client, text)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await self._post(client, text)
        except httpx.TimeoutException:
            logger.warning("ai_unavailable: moderation request timed out")
            return None
        except httpx.HTTPError as exc:
            logger.warning("ai_unavailable: moderation request failed: %s", exc)
            return None

        if response.status_code != 200:
            logger.warning(
                "ai_unavailable: moderation API returned %s %s",
                response.status_code,
                response.reason_phrase,
            )
            return None

        try:
            return parse_moderation_payload(response.json())
        except (ValueError, KeyError, TypeError, IndexError) as exc:
            logger.warning("ai_unavailable: malformed moderation payload: %s", exc)
            return None

    async def _post(self, client: httpx.AsyncClient, text: str) -> httpx.Response:
        return await client.post(
            self.url,
            json={"input": text, "model": self.model},
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
        )


def parse_moderation_payload(data: dict[str, Any]) -> AIModerationResult:
    """Convert the Moderation API JSON body into an :class:`AIModerationResult`."""
    result = data["results"][0]
    categories: dict[str, bool] = result.get("categories") or {}
    scores: dict[str, float] = result.get("category_scores") or {}
    return AIModerationResult(
        flagged=bool(result["flagged"]),
        flagged_categories=tuple(name for name, hit in categories.items() if hit is True),
        category_scores=dict(scores),
    )


async def classify_safely(
    classifier: AIClassifier | None,
    text: str,
    timeout: float = DEFAULT_TIMEOUT,
) -> AIModerationResult | None:
    """Run *classifier* under a timeout; any failure degrades to *None*."""
    if classifier is None:
        return None
    try:
        result = await asyncio.wait_for(classifier.classify(text), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("ai_unavailable: classifier exceeded %.1fs timeout", timeout)
        return None
    except Exception:
        logger.warning("ai_unavailable: classifier raised", exc_info=True)
        return None

    if result is None:
        logger.debug("AI classifier returned no result")
    elif not result.flagged:
        logger.debug("AI classifier: not flagged")
    return result


def format_ai_flags(result: AIModerationResult) -> list[str]:
    """Human-readable flag per flagged category."""
    if not result.flagged_categories:
        return ["AI: content flagged"] if result.flagged else []
    return [
        f"AI: {AI_CATEGORY_LABELS.get(cat, cat)} detected"
        for cat in result.flagged_categories
    ]


def ai_outcome(result: AIModerationResult | None) -> CheckOutcome:
    """Severe categories reject; anything else the classifier flagged is a flag."""
    if result is None or not (result.flagged or result.flagged_categories):
        return CheckOutcome(name="ai")
    if any(cat in SEVERE_AI_CATEGORIES for cat in result.flagged_categories):
        severity = Severity.REJECTED
    else:
        severity = Severity.FLAGGED
    return CheckOutcome(name="ai", severity=severity, issues=tuple(format_ai_flags(result)))
