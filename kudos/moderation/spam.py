"""Spam heuristics -- a battery of independent pattern checks.

Each heuristic that fires adds one human-readable indicator.  Two or more
indicators make the submission spam; a single indicator is only a flag.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable
from urllib.parse import urlsplit

from kudos.moderation.lexicons import (
    DISPOSABLE_EMAIL_DOMAINS,
    EXTREME_POSITIVE_WORDS,
    FIRST_PERSON_PRONOUNS,
    SECOND_PERSON_PRONOUNS,
    SPAM_PHRASES,
)
from kudos.moderation.models import CheckOutcome, ModerationConfig, Severity, SpamReport

_URL_RE = re.compile(r"https?://\S+", re.IGNORECASE)
_REPEAT_RE = re.compile(r"(.)\1{5,}", re.DOTALL)
_TOKEN_RE = re.compile(r"[a-z0-9]+(?:['\-][a-z0-9]+)*")
_URL_TRAILING = ".,;:!?)]}'\""

SPAM_THRESHOLD = 2
CAPS_RATIO = 0.8
CAPS_MIN_LETTERS = 20
SPECIAL_RATIO = 0.3
SPECIAL_MIN_LENGTH = 20
PRONOUN_RATIO = 0.6
PRONOUN_MIN_SECOND_PERSON = 3
RATING_DEVIATION = 2
BRAND_RATIO = 0.15
BRAND_MIN_MENTIONS = 3
EXTREME_MIN_WORDS = 3
EXTREME_MAX_TEXT_WORDS = 50


def email_domain(email: str | None) -> str | None:
    """Lower-cased domain part of *email*, or ``None``."""
    if not email or "@" not in email:
        return None
    domain = email.rsplit("@", 1)[1].strip().lower()
    return domain or None


def extract_urls(text: str) -> list[str]:
    return [u.rstrip(_URL_TRAILING) for u in _URL_RE.findall(text)]


def _host(url: str) -> str | None:
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def _domain_allowed(host: str | None, allowed: Iterable[str]) -> bool:
    if not host:
        return False
    for domain in allowed:
        domain = domain.strip().lower()
        if domain and (host == domain or host.endswith("." + domain)):
            return True
    return False


class SpamAnalyzer:
    """Runs every spam heuristic and collects indicators in a fixed order."""

    def __init__(
        self,
        phrases: Iterable[str] = SPAM_PHRASES,
        disposable_domains: Iterable[str] = DISPOSABLE_EMAIL_DOMAINS,
        extreme_positive_words: Iterable[str] = EXTREME_POSITIVE_WORDS,
    ) -> None:
        self.phrases = tuple(p.lower() for p in phrases)
        self.disposable_domains = frozenset(d.lower() for d in disposable_domains)
        self.extreme_positive_words = frozenset(w.lower() for w in extreme_positive_words)

    def analyze(
        self,
        text: str,
        email: str | None = None,
        rating: int | None = None,
        average_rating: float | None = None,
        config: ModerationConfig | None = None,
    ) -> SpamReport:
        config = config or ModerationConfig()
        lower = text.lower()
        tokens = _TOKEN_RE.findall(lower)
        word_count = len(text.split())

        checks: list[Callable[[], str | None]] = [
            lambda: self._phrases(lower),
            lambda: self._url_count(text, config.max_url_count),
            lambda: self._disallowed_domains(text, config.allowed_domains),
            lambda: self._capitalization(text),
            lambda: self._special_characters(text),
            lambda: self._repeated_characters(text),
            lambda: self._disposable_email(email),
            lambda: self._pronoun_ratio(tokens),
            lambda: self._rating_deviation(rating, average_rating),
            lambda: self._brand_mentions(lower, word_count, config.brand_keywords),
            lambda: self._extreme_positives(tokens, word_count),
        ]
        indicators = tuple(i for i in (check() for check in checks) if i)
        return SpamReport(indicators=indicators)

    def check(
        self,
        text: str,
        email: str | None,
        rating: int | None,
        config: ModerationConfig,
    ) -> CheckOutcome:
        report = self.analyze(text, email, rating, config.average_rating, config)
        if report.is_spam:
            severity = Severity.REJECTED
        elif report.indicators:
            severity = Severity.FLAGGED
        else:
            severity = Severity.PENDING
        return CheckOutcome(name="spam", severity=severity, issues=report.indicators)

    # -- heuristics ----------------------------------------------------------

    def _phrases(self, lower: str) -> str | None:
        found = [p for p in self.phrases if p in lower]
        if found:
            return f"Contains spam phrases: {', '.join(found)}"
        return None

    @staticmethod
    def _url_count(text: str, max_urls: int) -> str | None:
        urls = extract_urls(text)
        if len(urls) > max_urls:
            return f"Excessive URLs ({len(urls)} found)"
        return None

    @staticmethod
    def _disallowed_domains(text: str, allowed: frozenset[str] | None) -> str | None:
        if not allowed:
            return None
        rejected: list[str] = []
        for url in extract_urls(text):
            host = _host(url)
            if not _domain_allowed(host, allowed):
                label = host or url
                if label not in rejected:
                    rejected.append(label)
        if rejected:
            return f"Links to disallowed domain: {', '.join(rejected)}"
        return None

    @staticmethod
    def _capitalization(text: str) -> str | None:
        letters = [ch for ch in text if ch.isalpha()]
        if len(letters) < CAPS_MIN_LETTERS:
            return None
        upper = sum(1 for ch in letters if ch.isupper())
        if upper / len(letters) > CAPS_RATIO:
            return "Excessive capitalization (>80% uppercase)"
        return None

    @staticmethod
    def _special_characters(text: str) -> str | None:
        if len(text) <= SPECIAL_MIN_LENGTH:
            return None
        special = sum(1 for ch in text if not (ch.isalnum() or ch.isspace()))
        if special / len(text) > SPECIAL_RATIO:
            return "Excessive special characters (>30%)"
        return None

    @staticmethod
    def _repeated_characters(text: str) -> str | None:
        if _REPEAT_RE.search(text):
            return "Contains repeated characters"
        return None

    def _disposable_email(self, email: str | None) -> str | None:
        domain = email_domain(email)
        if domain and domain in self.disposable_domains:
            return f"Disposable email domain: {domain}"
        return None

    @staticmethod
    def _pronoun_ratio(tokens: list[str]) -> str | None:
        second = sum(1 for t in tokens if t in SECOND_PERSON_PRONOUNS)
        if second < PRONOUN_MIN_SECOND_PERSON:
            return None
        first = sum(1 for t in tokens if t in FIRST_PERSON_PRONOUNS)
        if second / (first + second) > PRONOUN_RATIO:
            return "Promotional language (high second-person pronoun ratio)"
        return None

    @staticmethod
    def _rating_deviation(rating: int | None, average: float | None) -> str | None:
        if rating is None or average is None:
            return None
        if abs(rating - average) > RATING_DEVIATION:
            return f"Rating deviates from project average ({rating} vs {average:.1f})"
        return None

    @staticmethod
    def _brand_mentions(
        lower: str, word_count: int, brands: frozenset[str] | None
    ) -> str | None:
        if not brands or word_count == 0:
            return None
        mentions = 0
        for brand in brands:
            brand = brand.strip().lower()
            if brand:
                mentions += len(re.findall(rf"\b{re.escape(brand)}\b", lower))
        if mentions >= BRAND_MIN_MENTIONS and mentions / word_count > BRAND_RATIO:
            return f"Excessive brand mentions ({mentions})"
        return None

    def _extreme_positives(self, tokens: list[str], word_count: int) -> str | None:
        if word_count >= EXTREME_MAX_TEXT_WORDS:
            return None
        extreme = sum(1 for t in tokens if t in self.extreme_positive_words)
        if extreme >= EXTREME_MIN_WORDS:
            return "Unnatural sentiment (too many extreme positive words)"
        return None
