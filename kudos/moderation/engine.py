"""Moderation engine -- folds every check into one verdict.

Every check runs on every evaluation, even after one has already proposed
REJECTED, so the flag list is always a complete diagnostic trail.  Each
check returns a :class:`CheckOutcome`; the verdict is the maximum proposed
severity, and only a clean PENDING evaluation is eligible for auto-approval.
"""

from __future__ import annotations

import logging

from kudos.moderation.ai import AIClassifier, DEFAULT_TIMEOUT, ai_outcome, classify_safely
from kudos.moderation.behavior import BehaviorAnalyzer
from kudos.moderation.duplicates import DuplicateDetector
from kudos.moderation.models import (
    AIModerationResult,
    CheckOutcome,
    ModerationConfig,
    ModerationResult,
    ModerationStatus,
    ReviewerBehaviorSignals,
    ReviewerCounts,
    Severity,
    SubmissionInput,
)
from kudos.moderation.profanity import ProfanityDetector
from kudos.moderation.quality import quality_score
from kudos.moderation.sentiment import SentimentAnalyzer
from kudos.moderation.spam import SpamAnalyzer, email_domain

logger = logging.getLogger(__name__)

AUTO_APPROVE_QUALITY = 0.8
AUTO_APPROVE_RATING = 4


class ModerationEngine:
    """Stateless orchestrator.  Safe to share across threads and tasks."""

    def __init__(
        self,
        profanity: ProfanityDetector | None = None,
        spam: SpamAnalyzer | None = None,
        sentiment: SentimentAnalyzer | None = None,
        duplicates: DuplicateDetector | None = None,
        behavior: BehaviorAnalyzer | None = None,
    ) -> None:
        self.profanity = profanity or ProfanityDetector()
        self.spam = spam or SpamAnalyzer()
        self.sentiment = sentiment or SentimentAnalyzer()
        self.duplicates = duplicates or DuplicateDetector()
        self.behavior = behavior or BehaviorAnalyzer()

    # -- checks --------------------------------------------------------------

    def run_checks(
        self,
        submission: SubmissionInput,
        config: ModerationConfig,
        behavior: ReviewerCounts | ReviewerBehaviorSignals | None = None,
        ai_result: AIModerationResult | None = None,
    ) -> list[CheckOutcome]:
        """Every check's outcome, in evaluation order."""
        content = submission.content
        return [
            self._length(content, config.min_content_length),
            self.profanity.check(content, config.profanity_level, config.custom_profanity_terms),
            self.spam.check(content, submission.author_email, submission.rating, config),
            self.sentiment.check(content),
            self._blocked_domain(submission.author_email, config.blocked_email_domains),
            self.duplicates.check(
                content, config.existing_contents, config.duplicate_similarity_threshold
            ),
            self.behavior.check(behavior),
            ai_outcome(ai_result),
        ]

    @staticmethod
    def _length(content: str, minimum: int) -> CheckOutcome:
        if len(content) < minimum:
            return CheckOutcome(
                name="length",
                severity=Severity.REJECTED,
                issues=(f"Content too short (< {minimum} characters)",),
            )
        return CheckOutcome(name="length")

    @staticmethod
    def _blocked_domain(email: str | None, blocked: frozenset[str] | None) -> CheckOutcome:
        domain = email_domain(email)
        if domain and blocked and domain in {d.lower() for d in blocked}:
            return CheckOutcome(
                name="blocked_domain",
                severity=Severity.REJECTED,
                issues=(f"Blocked email domain: {domain}",),
            )
        return CheckOutcome(name="blocked_domain")

    # -- evaluation ----------------------------------------------------------

    def evaluate(
        self,
        submission: SubmissionInput,
        config: ModerationConfig,
        behavior: ReviewerCounts | ReviewerBehaviorSignals | None = None,
        ai_result: AIModerationResult | None = None,
    ) -> ModerationResult:
        if not config.auto_moderation_enabled:
            logger.debug("Auto-moderation disabled; leaving submission pending")
            return ModerationResult(status=ModerationStatus.PENDING, score=0.0)

        outcomes = self.run_checks(submission, config, behavior, ai_result)
        severity = max((o.severity for o in outcomes), default=Severity.PENDING)
        issues = [issue for o in outcomes for issue in o.issues]
        notes = [note for o in outcomes for note in o.notes]

        quality = quality_score(submission.content, submission.rating, submission.is_verified)
        status = severity.status
        auto_publish = False

        if severity is Severity.PENDING and not issues:
            approval = self._auto_approval(submission, config, quality)
            if approval:
                status = ModerationStatus.APPROVED
                auto_publish = True
                notes.append(approval)

        result = ModerationResult(
            status=status,
            score=round(1.0 - quality, 4),
            flags=tuple(issues + notes),
            auto_publish=auto_publish,
        )
        logger.debug(
            "Moderated submission: status=%s score=%.2f flags=%d",
            result.status.value,
            result.score,
            len(result.flags),
        )
        return result

    async def evaluate_async(
        self,
        submission: SubmissionInput,
        config: ModerationConfig,
        behavior: ReviewerCounts | ReviewerBehaviorSignals | None = None,
        classifier: AIClassifier | None = None,
        ai_timeout: float = DEFAULT_TIMEOUT,
    ) -> ModerationResult:
        """Like :meth:`evaluate`, first consulting *classifier* under a timeout."""
        ai_result = None
        if config.auto_moderation_enabled:
            ai_result = await classify_safely(classifier, submission.content, ai_timeout)
        return self.evaluate(submission, config, behavior, ai_result)

    @staticmethod
    def _auto_approval(
        submission: SubmissionInput, config: ModerationConfig, quality: float
    ) -> str | None:
        if submission.is_verified and config.auto_approve_verified:
            return "Auto-approved: verified reviewer"
        if (
            quality >= AUTO_APPROVE_QUALITY
            and submission.rating is not None
            and submission.rating >= AUTO_APPROVE_RATING
        ):
            return "Auto-approved: high quality score"
        return None
