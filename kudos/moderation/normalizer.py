"""Obfuscation-resistant text normalization for lexicon matching.

Handles leetspeak (``$h1t``), homoglyphs (``shıt``, ``ƒuck``), stretched
words (``shiiiit``), letters split by separators (``s.h.i.t``,
``b_i_t_c_h``) and stray punctuation or emoji.  Only the profanity detector
matches against this form; the other checks read the raw text.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Mapping

from unidecode import unidecode

from kudos.moderation.lexicons import SUBSTITUTIONS

_RUN_RE = re.compile(r"(.)\1{2,}", re.DOTALL)
_SEPARATOR_RE = re.compile(r"[._\-\s]+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_SPACE_RE = re.compile(r"\s+")


def _split_letters_pattern(symbols: str) -> re.Pattern[str]:
    # A chain of isolated single letters (or look-alike symbols such as "$")
    # joined by separators: "f.u.c.k", "$ h i t".  Digits never join, so
    # "a 5 5 deal" stays apart.
    sym = re.escape(symbols)
    unit = rf"(?:[^\W\d_]|[{sym}])" if symbols else r"[^\W\d_]"
    edge = rf"(?:[^\W_]|[{sym}])" if symbols else r"[^\W_]"
    return re.compile(rf"(?<!{edge}){unit}(?:[._\-\s]+{unit}(?!{edge}))+")


class TextNormalizer:
    """Canonicalizes text so that disguised words match their plain spelling."""

    def __init__(self, substitutions: Mapping[str, str] = SUBSTITUTIONS) -> None:
        self._table = str.maketrans(dict(substitutions))
        symbols = "".join(
            sorted(ch for ch in substitutions if not ch.isalnum() and not _SEPARATOR_RE.fullmatch(ch))
        )
        self._split_re = _split_letters_pattern(symbols)
        self._term_forms = lru_cache(maxsize=1024)(self._forms_of)

    def normalize(self, text: str, substitute: bool = True) -> str:
        result = text.lower()
        result = _RUN_RE.sub(r"\1\1", result)
        result = self._split_re.sub(lambda m: _SEPARATOR_RE.sub("", m.group(0)), result)
        if substitute:
            result = result.translate(self._table)
        # Remaining non-ASCII letters ("ı", "ø", "ƒ", "é") transliterate to ASCII.
        result = unidecode(result).lower()
        result = _NON_ALNUM_RE.sub("", result)
        return _SPACE_RE.sub(" ", result).strip()

    def contains(self, normalized: str, term: str) -> bool:
        """Whole-word match of *term* (normalized the same way) in *normalized*."""
        return any(_term_pattern(form).search(normalized) for form in self._term_forms(term))

    def variants(self, text: str) -> tuple[str, ...]:
        """The substituted form plus, when different, the form without substitutions.

        Punctuation read as a letter ("great!" -> "greati") would otherwise hide
        a plain word that merely ends a sentence.
        """
        substituted = self.normalize(text)
        plain = self.normalize(text, substitute=False)
        return (substituted,) if plain == substituted else (substituted, plain)

    def _forms_of(self, term: str) -> frozenset[str]:
        return frozenset({self.normalize(term), self.normalize(term, substitute=False)} - {""})


@lru_cache(maxsize=1024)
def _term_pattern(term: str) -> re.Pattern[str]:
    # Each letter may repeat so "fuuck" (left by run folding) still matches "fuck".
    body = "".join(re.escape(ch) + ("+" if ch.isalnum() else "") for ch in term)
    return re.compile(rf"\b{body}\b")


_default = TextNormalizer()


def normalize(text: str) -> str:
    """Normalize *text* with the built-in substitution table."""
    return _default.normalize(text)
