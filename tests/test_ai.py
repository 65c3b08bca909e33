"""Tests for the optional AI classifier integration."""

import asyncio
import logging

import httpx

from kudos.moderation.ai import (
    OpenAIModerationClassifier,
    ai_outcome,
    classify_safely,
    format_ai_flags,
)
from kudos.moderation.models import AIModerationResult, Severity


def _classifier(handler) -> OpenAIModerationClassifier:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenAIModerationClassifier(api_key="sk-test", client=client)


def _payload(flagged: bool, **categories: bool) -> dict:
    return {
        "results": [{
            "flagged": flagged,
            "categories": {k.replace("_", "/"): v for k, v in categories.items()},
            "category_scores": {k.replace("_", "/"): 0.9 if v else 0.01 for k, v in categories.items()},
        }]
    }


# --- OpenAI classifier ---


def test_classifier_parses_flagged_categories():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = request.read()
        return httpx.Response(200, json=_payload(True, hate=True, violence=False))

    result = asyncio.run(_classifier(handler).classify("some text"))
    assert result == AIModerationResult(
        flagged=True,
        flagged_categories=("hate",),
        category_scores={"hate": 0.9, "violence": 0.01},
    )
    assert seen["auth"] == "Bearer sk-test"
    assert b'"omni-moderation-latest"' in seen["body"]


def test_classifier_http_error_status_is_unavailable(caplog):
    def handler(request):
        return httpx.Response(500)

    with caplog.at_level(logging.WARNING, logger="kudos.moderation.ai"):
        assert asyncio.run(_classifier(handler).classify("x")) is None
    assert "ai_unavailable" in caplog.text


def test_classifier_transport_error_is_unavailable(caplog):
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    with caplog.at_level(logging.WARNING, logger="kudos.moderation.ai"):
        assert asyncio.run(_classifier(handler).classify("x")) is None
    assert "ai_unavailable" in caplog.text


def test_classifier_malformed_payload_is_unavailable():
    def handler(request):
        return httpx.Response(200, json={"results": []})

    assert asyncio.run(_classifier(handler).classify("x")) is None


def test_from_env(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    assert OpenAIModerationClassifier.from_env() is None

    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    classifier = OpenAIModerationClassifier.from_env(timeout=2.0)
    assert classifier.api_key == "sk-env"
    assert classifier.timeout == 2.0


# --- Graceful degradation ---


class _SlowClassifier:
    async def classify(self, text):
        await asyncio.sleep(1)
        return AIModerationResult(flagged=True, flagged_categories=("hate",))


class _BrokenClassifier:
    async def classify(self, text):
        raise RuntimeError("provider exploded")


class _CleanClassifier:
    async def classify(self, text):
        return AIModerationResult(flagged=False)


def test_classify_safely_times_out(caplog):
    with caplog.at_level(logging.WARNING, logger="kudos.moderation.ai"):
        assert asyncio.run(classify_safely(_SlowClassifier(), "x", timeout=0.01)) is None
    assert "timeout" in caplog.text


def test_classify_safely_swallows_errors(caplog):
    with caplog.at_level(logging.WARNING, logger="kudos.moderation.ai"):
        assert asyncio.run(classify_safely(_BrokenClassifier(), "x")) is None
    assert "ai_unavailable" in caplog.text


def test_not_flagged_is_distinguishable_from_unavailable(caplog):
    with caplog.at_level(logging.DEBUG, logger="kudos.moderation.ai"):
        result = asyncio.run(classify_safely(_CleanClassifier(), "x"))
    assert result == AIModerationResult(flagged=False)
    assert "not flagged" in caplog.text
    assert "ai_unavailable" not in caplog.text


def test_classify_safely_without_classifier():
    assert asyncio.run(classify_safely(None, "x")) is None


# --- Merge into the verdict ---


def test_format_ai_flags():
    result = AIModerationResult(flagged=True, flagged_categories=("hate", "made-up"))
    assert format_ai_flags(result) == ["AI: Hate speech detected", "AI: made-up detected"]
    assert format_ai_flags(AIModerationResult(flagged=True)) == ["AI: content flagged"]
    assert format_ai_flags(AIModerationResult(flagged=False)) == []


def test_severe_category_rejects():
    outcome = ai_outcome(AIModerationResult(flagged=True, flagged_categories=("harassment", "sexual/minors")))
    assert outcome.severity == Severity.REJECTED
    assert outcome.issues == (
        "AI: Harassment detected",
        "AI: Sexual content involving minors detected",
    )


def test_other_category_flags():
    outcome = ai_outcome(AIModerationResult(flagged=True, flagged_categories=("harassment",)))
    assert outcome.severity == Severity.FLAGGED


def test_no_result_contributes_nothing():
    assert ai_outcome(None).severity == Severity.PENDING
    assert ai_outcome(AIModerationResult(flagged=False)).issues == ()
