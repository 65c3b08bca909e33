"""Testimonial moderation engine.

Combines obfuscation-resistant profanity matching, spam heuristics,
negation-aware sentiment, near-duplicate detection, reviewer velocity and an
optional AI classifier into one verdict with a full diagnostic trail.
"""

from kudos.moderation.config import config_from_dict, load_config
from kudos.moderation.engine import ModerationEngine
from kudos.moderation.models import (
    AIModerationResult,
    ModerationConfig,
    ModerationResult,
    ModerationStatus,
    ProfanityLevel,
    ReviewerBehaviorSignals,
    ReviewerCounts,
    RiskLevel,
    Severity,
    SubmissionInput,
)
from kudos.moderation.service import (
    ModerationError,
    ModerationService,
    ModerationUnavailableError,
)

__all__ = [
    "AIModerationResult",
    "ModerationConfig",
    "ModerationEngine",
    "ModerationError",
    "ModerationResult",
    "ModerationService",
    "ModerationStatus",
    "ModerationUnavailableError",
    "ProfanityLevel",
    "ReviewerBehaviorSignals",
    "ReviewerCounts",
    "RiskLevel",
    "Severity",
    "SubmissionInput",
    "config_from_dict",
    "load_config",
]
