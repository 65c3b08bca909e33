"""Reviewer velocity analysis.

Turns pre-fetched submission counts (same IP, same IP on this project, same
email) into a risk level.  The counts themselves come from a
:class:`~kudos.moderation.service.ReviewerCountSource`.
"""

from __future__ import annotations

from kudos.moderation.models import (
    CheckOutcome,
    ReviewerBehaviorSignals,
    ReviewerCounts,
    RiskLevel,
    Severity,
)

IP_HIGH = 10
IP_MEDIUM = 5
IP_PROJECT_MEDIUM = 3
EMAIL_HIGH = 6
EMAIL_MEDIUM = 4


class BehaviorAnalyzer:
    def analyze(self, counts: ReviewerCounts | ReviewerBehaviorSignals) -> ReviewerBehaviorSignals:
        reasons: list[str] = []
        risk = RiskLevel.LOW

        if counts.ip_recent_count >= IP_HIGH:
            reasons.append("high submission volume from same IP")
            risk = max(risk, RiskLevel.HIGH)
        elif counts.ip_recent_count >= IP_MEDIUM:
            reasons.append("unusual submission volume from same IP")
            risk = max(risk, RiskLevel.MEDIUM)

        if counts.ip_project_recent_count >= IP_PROJECT_MEDIUM:
            reasons.append("multiple testimonials for this project from same IP")
            risk = max(risk, RiskLevel.MEDIUM)

        if counts.email_recent_count >= EMAIL_HIGH:
            reasons.append("high submission volume from same email")
            risk = max(risk, RiskLevel.HIGH)
        elif counts.email_recent_count >= EMAIL_MEDIUM:
            reasons.append("repeated submissions from same email")
            risk = max(risk, RiskLevel.MEDIUM)

        return ReviewerBehaviorSignals(
            ip_recent_count=counts.ip_recent_count,
            ip_project_recent_count=counts.ip_project_recent_count,
            email_recent_count=counts.email_recent_count,
            risk_level=risk,
            reasons=tuple(reasons),
        )

    def check(self, signals: ReviewerCounts | ReviewerBehaviorSignals | None) -> CheckOutcome:
        if signals is None:
            return CheckOutcome(name="behavior")
        assessed = self.analyze(signals)
        if assessed.risk_level is RiskLevel.LOW:
            return CheckOutcome(name="behavior")
        severity = Severity.REJECTED if assessed.risk_level is RiskLevel.HIGH else Severity.FLAGGED
        return CheckOutcome(
            name="behavior",
            severity=severity,
            issues=(
                f"Suspicious reviewer behavior ({assessed.risk_level.label} risk): "
                + "; ".join(assessed.reasons),
            ),
        )
