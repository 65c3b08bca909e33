"""Wires the engine to the collaborators that supply its inputs.

The engine is pure; everything that needs I/O (the existing-testimonial
corpus, reviewer submission counts, the AI classifier) is fetched here and
handed over as plain values.  Corpus and count failures are NOT swallowed:
they surface as :class:`ModerationUnavailableError` so the caller can queue
the submission for manual review instead of publishing it unchecked.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Protocol, Sequence

from kudos.moderation.ai import AIClassifier, DEFAULT_TIMEOUT
from kudos.moderation.engine import ModerationEngine
from kudos.moderation.models import (
    ModerationConfig,
    ModerationResult,
    ModerationStatus,
    ReviewerCounts,
    SubmissionInput,
)

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_HOURS = 24
UNAVAILABLE_FLAG = "Moderation unavailable: queued for manual review"


class ModerationError(Exception):
    """Base class for moderation errors."""


class ModerationUnavailableError(ModerationError):
    """A collaborator failed, so no verdict could be computed."""


# ---------------------------------------------------------------------------
# Collaborator interfaces
# ---------------------------------------------------------------------------


class ContentCorpus(Protocol):
    async def fetch_existing_contents(self, project_id: str) -> Sequence[str]:
        ...


class ReviewerCountSource(Protocol):
    async def fetch_reviewer_counts(
        self,
        ip: str | None,
        project_id: str,
        email: str | None,
        window_hours: int = DEFAULT_WINDOW_HOURS,
    ) -> ReviewerCounts:
        ...


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------


class InMemoryCorpus:
    """Existing testimonial contents keyed by project."""

    def __init__(self) -> None:
        self._contents: dict[str, list[str]] = {}

    def add(self, project_id: str, content: str) -> None:
        self._contents.setdefault(project_id, []).append(content)

    async def fetch_existing_contents(self, project_id: str) -> Sequence[str]:
        return list(self._contents.get(project_id, []))


@dataclass(frozen=True)
class SubmissionRecord:
    project_id: str
    ip: str | None
    email: str | None
    submitted_at: datetime


class InMemoryReviewerLog:
    """Timestamped submissions, counted over a trailing window."""

    def __init__(self) -> None:
        self._records: list[SubmissionRecord] = []

    def record(
        self,
        project_id: str,
        ip: str | None = None,
        email: str | None = None,
        submitted_at: datetime | None = None,
    ) -> None:
        self._records.append(
            SubmissionRecord(
                project_id=project_id,
                ip=ip,
                email=email.lower() if email else None,
                submitted_at=submitted_at or datetime.now(timezone.utc),
            )
        )

    async def fetch_reviewer_counts(
        self,
        ip: str | None,
        project_id: str,
        email: str | None,
        window_hours: int = DEFAULT_WINDOW_HOURS,
    ) -> ReviewerCounts:
        since = datetime.now(timezone.utc) - timedelta(hours=window_hours)
        recent = [r for r in self._records if r.submitted_at >= since]
        email = email.lower() if email else None
        return ReviewerCounts(
            ip_recent_count=sum(1 for r in recent if ip and r.ip == ip),
            ip_project_recent_count=sum(
                1 for r in recent if ip and r.ip == ip and r.project_id == project_id
            ),
            email_recent_count=sum(1 for r in recent if email and r.email == email),
        )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ModerationService:
    """Fetches collaborator data, then asks the engine for a verdict."""

    def __init__(
        self,
        engine: ModerationEngine | None = None,
        corpus: ContentCorpus | None = None,
        counts: ReviewerCountSource | None = None,
        classifier: AIClassifier | None = None,
        ai_timeout: float = DEFAULT_TIMEOUT,
        window_hours: int = DEFAULT_WINDOW_HOURS,
    ) -> None:
        self.engine = engine or ModerationEngine()
        self.corpus = corpus
        self.counts = counts
        self.classifier = classifier
        self.ai_timeout = ai_timeout
        self.window_hours = window_hours

    async def moderate(
        self,
        submission: SubmissionInput,
        config: ModerationConfig,
        project_id: str,
        ip: str | None = None,
    ) -> ModerationResult:
        """Evaluate *submission*.

        Raises :class:`ModerationUnavailableError` when the corpus or count
        lookup fails.
        """
        if not config.auto_moderation_enabled:
            return self.engine.evaluate(submission, config)

        tasks = [
            asyncio.ensure_future(self._existing_contents(config, project_id)),
            asyncio.ensure_future(self._reviewer_counts(submission, project_id, ip)),
        ]
        try:
            existing, counts = await asyncio.gather(*tasks)
        except Exception as exc:
            # The first failure aborts the verdict; stop the other lookup too.
            for task in tasks:
                task.cancel()
            raise ModerationUnavailableError(
                f"Could not gather moderation inputs for project {project_id}"
            ) from exc

        if existing is not None:
            config = replace(config, existing_contents=tuple(existing))
        return await self.engine.evaluate_async(
            submission,
            config,
            behavior=counts,
            classifier=self.classifier,
            ai_timeout=self.ai_timeout,
        )

    async def moderate_or_pending(
        self,
        submission: SubmissionInput,
        config: ModerationConfig,
        project_id: str,
        ip: str | None = None,
    ) -> ModerationResult:
        """Like :meth:`moderate`, but an unavailable engine means manual review."""
        try:
            return await self.moderate(submission, config, project_id, ip)
        except ModerationUnavailableError:
            logger.exception("Moderation unavailable for project %s", project_id)
            return ModerationResult(
                status=ModerationStatus.PENDING,
                score=0.0,
                flags=(UNAVAILABLE_FLAG,),
            )

    async def _existing_contents(
        self, config: ModerationConfig, project_id: str
    ) -> Sequence[str] | None:
        # A snapshot supplied with the config takes precedence over the corpus.
        if config.existing_contents is not None or self.corpus is None:
            return None
        return await self.corpus.fetch_existing_contents(project_id)

    async def _reviewer_counts(
        self, submission: SubmissionInput, project_id: str, ip: str | None
    ) -> ReviewerCounts | None:
        if self.counts is None:
            return None
        return await self.counts.fetch_reviewer_counts(
            ip, project_id, submission.author_email, self.window_hours
        )
