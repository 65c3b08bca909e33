"""Tests for near-duplicate detection."""

import random
import string

import pytest

from kudos.moderation.duplicates import DuplicateDetector, levenshtein, similarity
from kudos.moderation.models import DuplicateReport, Severity

ORIGINAL = "Great onboarding and friendly support from my team"  # 50 chars
# Four characters swapped for digits that never occur in ORIGINAL.
NEAR_COPY = "Gr0at onb1arding and fr2endly support from my t3am"


def test_levenshtein_known_values():
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("flaw", "lawn") == 2
    assert levenshtein("", "abc") == 3
    assert levenshtein("abc", "") == 3
    assert levenshtein("", "") == 0
    assert levenshtein("same", "same") == 0


def test_similarity_bounds():
    assert similarity("", "") == 1.0
    assert similarity("abc", "abc") == 1.0
    assert similarity("abc", "xyz") == 0.0
    assert similarity(ORIGINAL.lower(), NEAR_COPY.lower()) == pytest.approx(0.92)


def test_similarity_is_symmetric():
    rng = random.Random(1234)
    alphabet = string.ascii_lowercase[:6] + " "
    for _ in range(200):
        a = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 15)))
        b = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 15)))
        assert similarity(a, b) == similarity(b, a)


def test_exact_match_ignores_case_and_whitespace():
    report = DuplicateDetector().find("  This product is AMAZING and I love it! ", [
        "Great service!",
        "this product is amazing and i love it!",
    ])
    assert report.is_duplicate
    assert report.matched_index == 1
    assert report.similarity == 1.0


def test_exact_match_wins_over_earlier_near_match():
    report = DuplicateDetector().find(ORIGINAL, [NEAR_COPY, ORIGINAL])
    assert report.matched_index == 1
    assert report.similarity == 1.0


def test_near_duplicate():
    report = DuplicateDetector().find(NEAR_COPY, ["Not bad at all", ORIGINAL])
    assert report.is_duplicate
    assert report.matched_index == 1
    assert report.similarity == pytest.approx(0.92)


def test_threshold():
    assert not DuplicateDetector().find("abc", ["abd"]).is_duplicate
    report = DuplicateDetector().find("abc", ["abd"], threshold=0.5)
    assert report.is_duplicate
    assert report.similarity == pytest.approx(2 / 3)
    assert DuplicateDetector(threshold=0.6).find("abc", ["abd"]).is_duplicate


def test_distinct_content():
    report = DuplicateDetector().find("Fast shipping, great price", ["Slow support", ""])
    assert report == DuplicateReport(is_duplicate=False)


def test_check_outcome():
    detector = DuplicateDetector()
    outcome = detector.check(NEAR_COPY, [ORIGINAL])
    assert outcome.severity == Severity.REJECTED
    assert outcome.issues == (
        "Duplicate content detected (similarity 0.92 to existing testimonial #0)",
    )
    assert detector.check(NEAR_COPY, None).severity == Severity.PENDING
    assert detector.check(NEAR_COPY, ()).severity == Severity.PENDING
