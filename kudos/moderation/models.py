"""Data models for the testimonial moderation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Mapping


class ModerationStatus(Enum):
    """Verdict attached to a testimonial after evaluation."""

    PENDING = "PENDING"
    FLAGGED = "FLAGGED"
    REJECTED = "REJECTED"
    APPROVED = "APPROVED"


class Severity(IntEnum):
    """Severity proposed by a single check.  Combined with ``max``."""

    PENDING = 0
    FLAGGED = 1
    REJECTED = 2

    @property
    def status(self) -> ModerationStatus:
        return ModerationStatus(self.name)


class ProfanityLevel(Enum):
    """How much of the built-in lexicon a project opts into."""

    STRICT = "STRICT"  # severe + mild
    MODERATE = "MODERATE"  # severe only
    LENIENT = "LENIENT"  # custom terms only


class ProfanityIntensity(Enum):
    NONE = "none"
    MILD = "mild"
    SEVERE = "severe"


class SentimentBucket(Enum):
    VERY_NEGATIVE = "very_negative"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    POSITIVE = "positive"
    VERY_POSITIVE = "very_positive"


class RiskLevel(IntEnum):
    """Reviewer velocity risk.  Ordered so reasons can be folded with ``max``."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2

    @property
    def label(self) -> str:
        return self.name.lower()


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SubmissionInput:
    """A newly submitted testimonial."""

    content: str
    author_email: str | None = None
    rating: int | None = None  # 1..5
    is_verified: bool = False


@dataclass(frozen=True)
class ModerationConfig:
    """Per-project moderation settings.

    Optional fields carry the documented defaults; use :meth:`from_dict` to
    build one from stored project settings (malformed values fall back to
    defaults instead of raising).
    """

    auto_moderation_enabled: bool = True
    auto_approve_verified: bool = False
    profanity_level: ProfanityLevel = ProfanityLevel.MODERATE
    min_content_length: int = 10
    max_url_count: int = 2
    allowed_domains: frozenset[str] | None = None
    blocked_email_domains: frozenset[str] | None = None
    custom_profanity_terms: frozenset[str] | None = None
    brand_keywords: frozenset[str] | None = None
    average_rating: float | None = None
    existing_contents: tuple[str, ...] | None = None
    duplicate_similarity_threshold: float = 0.9

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ModerationConfig:
        from kudos.moderation.config import config_from_dict

        return config_from_dict(data)


@dataclass(frozen=True)
class ReviewerCounts:
    """Raw submission counts inside the trailing window."""

    ip_recent_count: int = 0
    ip_project_recent_count: int = 0
    email_recent_count: int = 0


@dataclass(frozen=True)
class ReviewerBehaviorSignals:
    """Reviewer counts plus the risk derived from them."""

    ip_recent_count: int = 0
    ip_project_recent_count: int = 0
    email_recent_count: int = 0
    risk_level: RiskLevel = RiskLevel.LOW
    reasons: tuple[str, ...] = ()

    @classmethod
    def from_counts(cls, counts: ReviewerCounts) -> ReviewerBehaviorSignals:
        from kudos.moderation.behavior import BehaviorAnalyzer

        return BehaviorAnalyzer().analyze(counts)


@dataclass(frozen=True)
class AIModerationResult:
    """Answer from an external content classifier."""

    flagged: bool
    flagged_categories: tuple[str, ...] = ()
    category_scores: Mapping[str, float] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Component reports
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProfanityReport:
    found: bool
    terms: tuple[str, ...] = ()
    intensity: ProfanityIntensity = ProfanityIntensity.NONE


@dataclass(frozen=True)
class SpamReport:
    indicators: tuple[str, ...] = ()

    @property
    def is_spam(self) -> bool:
        return len(self.indicators) >= 2


@dataclass(frozen=True)
class SentimentReport:
    score: float
    bucket: SentimentBucket
    negative_terms: tuple[str, ...] = ()
    positive_terms: tuple[str, ...] = ()


@dataclass(frozen=True)
class DuplicateReport:
    is_duplicate: bool
    matched_index: int | None = None
    similarity: float | None = None


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CheckOutcome:
    """What one check contributes to the verdict."""

    name: str
    severity: Severity = Severity.PENDING
    issues: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()


@dataclass(frozen=True)
class ModerationResult:
    """Verdict for one submission.  Issues come first in ``flags``, notes last."""

    status: ModerationStatus
    score: float
    flags: tuple[str, ...] = ()
    auto_publish: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "score": self.score,
            "flags": list(self.flags),
            "auto_publish": self.auto_publish,
        }
