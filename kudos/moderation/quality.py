"""Quality score -- how genuine and well-formed a submission looks.

Starts neutral at 0.5 and adjusts for length, rating, verification and word
count.  High score means LOW spam likelihood; the engine reports
``1 - quality`` as the moderation score.
"""

from __future__ import annotations


def quality_score(content: str, rating: int | None = None, is_verified: bool = False) -> float:
    score = 0.5

    length = len(content)
    if 50 <= length <= 500:
        score += 0.2
    elif 500 < length <= 1000:
        score += 0.1
    elif length < 20:
        score -= 0.3

    if rating is not None:
        if rating >= 4:
            score += 0.2
        elif rating <= 2:
            score -= 0.1

    if is_verified:
        score += 0.2

    words = len(content.split())
    if 10 <= words <= 200:
        score += 0.1
    elif words < 5:
        score -= 0.2

    return round(max(0.0, min(1.0, score)), 4)
