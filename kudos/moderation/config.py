"""Build :class:`ModerationConfig` values from stored project settings.

Settings arrive as loosely-typed mappings (a JSON column, a YAML file).
Optional values that are missing or malformed fall back to their defaults
with a warning; building a config never fails because of them.
"""

from __future__ import annotations

import logging
from dataclasses import fields
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from kudos.moderation.models import ModerationConfig, ProfanityLevel

logger = logging.getLogger(__name__)

_DEFAULTS = {f.name: f.default for f in fields(ModerationConfig)}

# Field names used by the web app's project settings blob.
_ALIASES = {
    "autoModeration": "auto_moderation_enabled",
    "auto_moderation": "auto_moderation_enabled",
    "autoApproveVerified": "auto_approve_verified",
    "profanityFilterLevel": "profanity_level",
    "profanity_filter_level": "profanity_level",
    "moderationSettings": "moderation_settings",
    "minContentLength": "min_content_length",
    "maxUrlCount": "max_url_count",
    "allowedDomains": "allowed_domains",
    "blockedDomains": "blocked_email_domains",
    "blocked_domains": "blocked_email_domains",
    "customProfanityList": "custom_profanity_terms",
    "custom_profanity_list": "custom_profanity_terms",
    "brandKeywords": "brand_keywords",
    "averageRating": "average_rating",
    "existingContents": "existing_contents",
    "duplicateSimilarityThreshold": "duplicate_similarity_threshold",
}


def _canonical_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    return {_ALIASES.get(key, key): value for key, value in data.items()}


def _malformed(name: str, value: Any) -> Any:
    default = _DEFAULTS[name]
    logger.warning("Ignoring malformed moderation setting %s=%r; using %r", name, value, default)
    return default


def _as_bool(name: str, value: Any) -> Any:
    return value if isinstance(value, bool) else _malformed(name, value)


def _as_level(name: str, value: Any) -> Any:
    if isinstance(value, ProfanityLevel):
        return value
    if isinstance(value, str):
        try:
            return ProfanityLevel(value.strip().upper())
        except ValueError:
            pass
    return _malformed(name, value)


def _as_count(name: str, value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return _malformed(name, value)


def _as_rating(name: str, value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and 0 <= value <= 5:
        return float(value)
    return _malformed(name, value)


def _as_ratio(name: str, value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and 0 < value <= 1:
        return float(value)
    return _malformed(name, value)


def _as_term_set(name: str, value: Any) -> Any:
    if not isinstance(value, (list, tuple, set, frozenset)):
        return _malformed(name, value)
    terms = frozenset(v.strip().lower() for v in value if isinstance(v, str) and v.strip())
    return terms or None


def _as_corpus(name: str, value: Any) -> Any:
    if not isinstance(value, (list, tuple)):
        return _malformed(name, value)
    return tuple(v for v in value if isinstance(v, str))


_COERCERS: dict[str, Callable[[str, Any], Any]] = {
    "auto_moderation_enabled": _as_bool,
    "auto_approve_verified": _as_bool,
    "profanity_level": _as_level,
    "min_content_length": _as_count,
    "max_url_count": _as_count,
    "allowed_domains": _as_term_set,
    "blocked_email_domains": _as_term_set,
    "custom_profanity_terms": _as_term_set,
    "brand_keywords": _as_term_set,
    "average_rating": _as_rating,
    "existing_contents": _as_corpus,
    "duplicate_similarity_threshold": _as_ratio,
}


def config_from_dict(data: Mapping[str, Any] | None) -> ModerationConfig:
    """Build a config from a settings mapping.

    A nested ``moderation_settings`` mapping is flattened into the top level;
    top-level keys win on conflict.
    """
    if not data:
        return ModerationConfig()

    settings = _canonical_keys(data)
    nested = settings.pop("moderation_settings", None)
    if isinstance(nested, Mapping):
        settings = {**_canonical_keys(nested), **settings}
    elif nested is not None:
        logger.warning("Ignoring non-mapping moderation_settings: %r", nested)

    values: dict[str, Any] = {}
    for key, value in settings.items():
        coerce = _COERCERS.get(key)
        if coerce is None:
            logger.debug("Ignoring unknown moderation setting %r", key)
            continue
        if value is None:
            continue
        values[key] = coerce(key, value)
    return ModerationConfig(**values)


def load_config(path: str | Path) -> ModerationConfig:
    """Load a config from a YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return ModerationConfig()
    if not isinstance(data, Mapping):
        raise ValueError(f"Moderation config {path} must be a mapping, got {type(data).__name__}")
    return config_from_dict(data)
