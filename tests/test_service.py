"""Tests for the collaborator-facing moderation service."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import pytest

from kudos.moderation.models import (
    AIModerationResult,
    ModerationConfig,
    ModerationStatus,
    ReviewerCounts,
    SubmissionInput,
)
from kudos.moderation.service import (
    UNAVAILABLE_FLAG,
    InMemoryCorpus,
    InMemoryReviewerLog,
    ModerationService,
    ModerationUnavailableError,
)

GOOD = "The onboarding call was clear and the dashboard made setup quick for our team."


class _FailingCorpus:
    async def fetch_existing_contents(self, project_id):
        raise ConnectionError("database is down")


class _ExplodingCorpus:
    async def fetch_existing_contents(self, project_id):
        raise AssertionError("corpus should not be queried")


def _run(coro):
    return asyncio.run(coro)


# --- Failure handling ---


def test_corpus_failure_surfaces_as_unavailable():
    service = ModerationService(corpus=_FailingCorpus())
    with pytest.raises(ModerationUnavailableError) as excinfo:
        _run(service.moderate(SubmissionInput(content=GOOD), ModerationConfig(), "proj"))
    assert isinstance(excinfo.value.__cause__, ConnectionError)


def test_moderate_or_pending_queues_for_review(caplog):
    service = ModerationService(corpus=_FailingCorpus())
    with caplog.at_level(logging.ERROR, logger="kudos.moderation.service"):
        result = _run(
            service.moderate_or_pending(
                SubmissionInput(content=GOOD, rating=5), ModerationConfig(), "proj"
            )
        )
    assert result.status == ModerationStatus.PENDING
    assert result.flags == (UNAVAILABLE_FLAG,)
    assert result.auto_publish is False
    assert "Moderation unavailable for project proj" in caplog.text


def test_disabled_config_skips_collaborators():
    service = ModerationService(corpus=_ExplodingCorpus())
    result = _run(
        service.moderate(
            SubmissionInput(content=GOOD),
            ModerationConfig(auto_moderation_enabled=False),
            "proj",
        )
    )
    assert result.status == ModerationStatus.PENDING


# --- Corpus ---


def test_corpus_duplicate_rejected():
    corpus = InMemoryCorpus()
    corpus.add("proj", GOOD.upper())
    corpus.add("other", "unrelated")
    service = ModerationService(corpus=corpus)

    result = _run(service.moderate(SubmissionInput(content=GOOD), ModerationConfig(), "proj"))
    assert result.status == ModerationStatus.REJECTED
    assert "Duplicate content detected (similarity 1.00 to existing testimonial #0)" in result.flags


def test_corpus_is_scoped_by_project():
    corpus = InMemoryCorpus()
    corpus.add("other", GOOD)
    service = ModerationService(corpus=corpus)

    result = _run(service.moderate(SubmissionInput(content=GOOD, rating=5), ModerationConfig(), "proj"))
    assert result.status == ModerationStatus.APPROVED


def test_config_snapshot_takes_precedence_over_corpus():
    service = ModerationService(corpus=_ExplodingCorpus())
    result = _run(
        service.moderate(
            SubmissionInput(content=GOOD),
            ModerationConfig(existing_contents=(GOOD,)),
            "proj",
        )
    )
    assert result.status == ModerationStatus.REJECTED


# --- Reviewer counts ---


def test_reviewer_log_counts_trailing_window():
    log = InMemoryReviewerLog()
    now = datetime.now(timezone.utc)
    for _ in range(3):
        log.record("proj", ip="10.0.0.1", email="Fan@Example.com")
    log.record("other", ip="10.0.0.1")
    log.record("proj", ip="10.0.0.1", email="fan@example.com", submitted_at=now - timedelta(hours=30))

    counts = _run(log.fetch_reviewer_counts("10.0.0.1", "proj", "fan@example.com"))
    assert counts == ReviewerCounts(
        ip_recent_count=4,
        ip_project_recent_count=3,
        email_recent_count=3,
    )


def test_reviewer_log_ignores_missing_identifiers():
    log = InMemoryReviewerLog()
    log.record("proj")
    counts = _run(log.fetch_reviewer_counts(None, "proj", None))
    assert counts == ReviewerCounts()


def test_repeat_reviewer_flagged():
    log = InMemoryReviewerLog()
    for _ in range(3):
        log.record("proj", ip="10.0.0.9")
    service = ModerationService(counts=log)

    result = _run(
        service.moderate(SubmissionInput(content=GOOD), ModerationConfig(), "proj", ip="10.0.0.9")
    )
    assert result.status == ModerationStatus.FLAGGED
    assert result.flags == (
        "Suspicious reviewer behavior (medium risk): "
        "multiple testimonials for this project from same IP",
    )


# --- AI ---


class _StubClassifier:
    def __init__(self):
        self.seen = []

    async def classify(self, text):
        self.seen.append(text)
        return AIModerationResult(flagged=True, flagged_categories=("violence",))


def test_injected_classifier_contributes_flags():
    classifier = _StubClassifier()
    service = ModerationService(classifier=classifier)

    result = _run(service.moderate(SubmissionInput(content=GOOD), ModerationConfig(), "proj"))
    assert classifier.seen == [GOOD]
    assert result.status == ModerationStatus.FLAGGED
    assert result.flags == ("AI: Violent content detected",)


class _SlowCounts:
    def __init__(self):
        self.cancelled = False
        self.finished = False

    async def fetch_reviewer_counts(self, ip, project_id, email, window_hours=24):
        try:
            await asyncio.sleep(0.5)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        self.finished = True
        return ReviewerCounts()


def test_corpus_failure_cancels_pending_count_lookup():
    counts = _SlowCounts()
    service = ModerationService(corpus=_FailingCorpus(), counts=counts)

    async def scenario():
        with pytest.raises(ModerationUnavailableError):
            await service.moderate(SubmissionInput(content=GOOD), ModerationConfig(), "proj")
        for _ in range(3):
            await asyncio.sleep(0)
        assert counts.cancelled is True
        assert counts.finished is False

    _run(scenario())
