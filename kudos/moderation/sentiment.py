"""Negation-aware keyword sentiment scoring.

Keywords are weighted by tier.  A negator within the three tokens before a
keyword flips that keyword's contribution, so "not great" counts against
the text and "not terrible" counts for it.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Iterable

from kudos.moderation import lexicons
from kudos.moderation.models import CheckOutcome, SentimentBucket, SentimentReport, Severity

NEGATION_WINDOW = 3


@dataclass(frozen=True)
class KeywordTier:
    name: str
    keywords: tuple[str, ...]
    weight: float  # signed: negative tiers pull the score down


DEFAULT_TIERS: tuple[KeywordTier, ...] = (
    KeywordTier("severe_negative", lexicons.NEGATIVE_SEVERE, -0.4),
    KeywordTier("strong_negative", lexicons.NEGATIVE_STRONG, -0.25),
    KeywordTier("moderate_negative", lexicons.NEGATIVE_MODERATE, -0.15),
    KeywordTier("positive", lexicons.POSITIVE, 0.2),
)


def tokenize(text: str) -> list[str]:
    """Whitespace tokens, lower-cased, with surrounding punctuation removed."""
    tokens = (t.strip(string.punctuation) for t in text.lower().split())
    return [t for t in tokens if t]


def bucket_for(score: float) -> SentimentBucket:
    if score <= -0.6:
        return SentimentBucket.VERY_NEGATIVE
    if score <= -0.2:
        return SentimentBucket.NEGATIVE
    if score >= 0.4:
        return SentimentBucket.VERY_POSITIVE
    if score >= 0.1:
        return SentimentBucket.POSITIVE
    return SentimentBucket.NEUTRAL


class SentimentAnalyzer:
    def __init__(
        self,
        tiers: Iterable[KeywordTier] = DEFAULT_TIERS,
        negators: Iterable[str] = lexicons.NEGATORS,
        window: int = NEGATION_WINDOW,
    ) -> None:
        self.tiers = tuple(tiers)
        self.negators = frozenset(negators)
        self.window = window

    def analyze(self, text: str) -> SentimentReport:
        tokens = tokenize(text)
        score = 0.0
        negative: list[str] = []
        positive: list[str] = []

        for tier in self.tiers:
            for keyword in tier.keywords:
                phrase = keyword.lower().split()
                for start in _occurrences(tokens, phrase):
                    negator = self._negator_before(tokens, start)
                    contribution = -tier.weight if negator else tier.weight
                    score += contribution
                    label = f"{negator} {keyword}" if negator else keyword
                    (negative if contribution < 0 else positive).append(label)

        score = round(max(-1.0, min(1.0, score)), 4)
        return SentimentReport(
            score=score,
            bucket=bucket_for(score),
            negative_terms=tuple(negative),
            positive_terms=tuple(positive),
        )

    def check(self, text: str) -> CheckOutcome:
        report = self.analyze(text)
        top = ", ".join(report.negative_terms[:3])
        if report.bucket is SentimentBucket.VERY_NEGATIVE:
            return CheckOutcome(
                name="sentiment",
                severity=Severity.REJECTED,
                issues=(f"Very negative sentiment detected: {top}",),
            )
        if report.bucket is SentimentBucket.NEGATIVE:
            return CheckOutcome(
                name="sentiment",
                severity=Severity.FLAGGED,
                issues=(f"Negative sentiment: {top}",),
            )
        if report.bucket in (SentimentBucket.POSITIVE, SentimentBucket.VERY_POSITIVE):
            return CheckOutcome(
                name="sentiment",
                notes=(
                    f"Positive sentiment detected ({len(report.positive_terms)} positive indicators)",
                ),
            )
        return CheckOutcome(name="sentiment")

    def _negator_before(self, tokens: list[str], start: int) -> str | None:
        for token in reversed(tokens[max(0, start - self.window):start]):
            if token in self.negators:
                return token
        return None


def _occurrences(tokens: list[str], phrase: list[str]) -> list[int]:
    if not phrase:
        return []
    size = len(phrase)
    return [
        i for i in range(len(tokens) - size + 1)
        if tokens[i:i + size] == phrase
    ]
