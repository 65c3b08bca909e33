"""Tiered profanity detection over obfuscation-normalized text."""

from __future__ import annotations

from typing import Iterable

from kudos.moderation.lexicons import PROFANITY_MILD, PROFANITY_SEVERE
from kudos.moderation.models import (
    CheckOutcome,
    ProfanityIntensity,
    ProfanityLevel,
    ProfanityReport,
    Severity,
)
from kudos.moderation.normalizer import TextNormalizer


class ProfanityDetector:
    """Matches a severe and a mild lexicon, selected by :class:`ProfanityLevel`.

    Custom terms are always checked, whatever the level.  A custom term that
    also appears in the severe tier counts as severe.
    """

    def __init__(
        self,
        severe_terms: Iterable[str] = PROFANITY_SEVERE,
        mild_terms: Iterable[str] = PROFANITY_MILD,
        normalizer: TextNormalizer | None = None,
    ) -> None:
        self.severe_terms = tuple(sorted(set(severe_terms)))
        self.mild_terms = tuple(sorted(set(mild_terms) - set(self.severe_terms)))
        self._severe_set = frozenset(self.severe_terms)
        self.normalizer = normalizer or TextNormalizer()

    def lexicon_for(self, level: ProfanityLevel) -> tuple[str, ...]:
        if level is ProfanityLevel.STRICT:
            return self.severe_terms + self.mild_terms
        if level is ProfanityLevel.MODERATE:
            return self.severe_terms
        return ()

    def detect(
        self,
        text: str,
        level: ProfanityLevel = ProfanityLevel.MODERATE,
        custom_terms: Iterable[str] | None = None,
    ) -> ProfanityReport:
        terms = list(self.lexicon_for(level))
        seen = set(terms)
        for term in sorted(custom_terms or ()):
            term = term.strip().lower()
            if term and term not in seen:
                seen.add(term)
                terms.append(term)

        forms = [f for f in self.normalizer.variants(text) if f]
        if not forms:
            return ProfanityReport(found=False)

        found = tuple(
            t for t in terms if any(self.normalizer.contains(form, t) for form in forms)
        )
        if not found:
            return ProfanityReport(found=False)

        if any(t in self._severe_set for t in found):
            intensity = ProfanityIntensity.SEVERE
        else:
            intensity = ProfanityIntensity.MILD
        return ProfanityReport(found=True, terms=found, intensity=intensity)

    def check(
        self,
        text: str,
        level: ProfanityLevel,
        custom_terms: Iterable[str] | None = None,
    ) -> CheckOutcome:
        report = self.detect(text, level, custom_terms)
        if not report.found:
            return CheckOutcome(name="profanity")
        words = ", ".join(report.terms)
        if report.intensity is ProfanityIntensity.SEVERE:
            return CheckOutcome(
                name="profanity",
                severity=Severity.REJECTED,
                issues=(f"Contains severe profanity: {words}",),
            )
        return CheckOutcome(
            name="profanity",
            severity=Severity.FLAGGED,
            issues=(f"Contains mild profanity: {words}",),
        )
