"""Near-duplicate detection using normalized Levenshtein similarity."""

from __future__ import annotations

from typing import Sequence

from kudos.moderation.models import CheckOutcome, DuplicateReport, Severity

DEFAULT_THRESHOLD = 0.9


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit insert/delete/substitute costs.

    Keeps two rows of the DP table, sized by the shorter string.
    """
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(
                previous[j] + 1,  # deletion
                current[j - 1] + 1,  # insertion
                previous[j - 1] + cost,  # substitution
            ))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """``(maxLen - distance) / maxLen``; two empty strings are identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein(a, b)) / longest


def _canonical(text: str) -> str:
    return text.lower().strip()


class DuplicateDetector:
    def __init__(self, threshold: float = DEFAULT_THRESHOLD) -> None:
        self.threshold = threshold

    def find(
        self,
        new_text: str,
        existing: Sequence[str],
        threshold: float | None = None,
    ) -> DuplicateReport:
        threshold = self.threshold if threshold is None else threshold
        candidate = _canonical(new_text)
        corpus = [_canonical(text or "") for text in existing]

        for index, text in enumerate(corpus):
            if text == candidate:
                return DuplicateReport(is_duplicate=True, matched_index=index, similarity=1.0)

        for index, text in enumerate(corpus):
            if not text:
                continue
            longest = max(len(text), len(candidate))
            # Length difference alone bounds the best achievable similarity.
            if (longest - abs(len(text) - len(candidate))) / longest < threshold:
                continue
            score = similarity(candidate, text)
            if score >= threshold:
                return DuplicateReport(is_duplicate=True, matched_index=index, similarity=score)

        return DuplicateReport(is_duplicate=False)

    def check(
        self,
        new_text: str,
        existing: Sequence[str] | None,
        threshold: float | None = None,
    ) -> CheckOutcome:
        if not existing:
            return CheckOutcome(name="duplicate")
        report = self.find(new_text, existing, threshold)
        if not report.is_duplicate:
            return CheckOutcome(name="duplicate")
        return CheckOutcome(
            name="duplicate",
            severity=Severity.REJECTED,
            issues=(
                f"Duplicate content detected (similarity {report.similarity:.2f} "
                f"to existing testimonial #{report.matched_index})",
            ),
        )
