"""Static lexicons used by the moderation checks.

Everything here is immutable.  Components take these as constructor
defaults so tests can swap in small fixtures.
"""

from __future__ import annotations

from types import MappingProxyType

# ---------------------------------------------------------------------------
# Profanity
# ---------------------------------------------------------------------------

PROFANITY_SEVERE: frozenset[str] = frozenset({
    "fuck", "shit", "bitch", "asshole", "bastard", "cunt", "dick", "pussy", "cock",
    "whore", "slut", "fag", "piss",
    # hate speech
    "nigger", "nigga", "retard", "kike", "chink", "spic", "beaner", "wetback",
    # regional variants
    "wanker", "bollocks", "twat", "prick", "bugger", "arse", "tosser", "bellend",
    "knobhead", "minger", "pillock", "plonker", "wazzock", "numpty",
    # compounds
    "fucked", "fucking", "motherfucker", "fuckhead", "shithead", "bullshit",
    "horseshit", "dipshit", "jackass", "dumbass", "badass", "fatass",
    # slurs
    "faggot", "dyke", "tranny", "shemale", "raghead", "towelhead", "gook",
    # anatomical
    "titties", "boobs", "penis", "vagina", "anal", "anus", "scrotum",
    # actions
    "pissed", "pissing", "shitting", "screwed", "humping", "bonking",
})

PROFANITY_MILD: frozenset[str] = frozenset({
    "hell", "ass", "suck", "stupid", "idiot", "dumb", "jerk", "crap", "damn",
    "frig", "darn", "bloody", "knob", "git", "sucks", "sucked", "sucking",
    "moron", "imbecile", "fool", "loser", "lame", "pathetic", "wimpy",
    "dork", "nerd", "geek", "freak", "weirdo", "creep", "creepy",
    "butt", "booty", "booger", "fart", "poop", "pee", "turd",
    "blimey", "crikey", "sod", "naff", "pants", "rubbish", "codswallop",
})

# Base letter -> look-alike characters.  Order matters: a character listed
# under two letters ("1", "|") resolves to the first one.
_LOOKALIKES: tuple[tuple[str, str], ...] = (
    ("a", "@4αаáàâäãå"),
    ("e", "3€еéèêë"),
    ("i", "1!іíìîï|"),
    ("o", "0οоóòôöõ"),
    ("s", "$5ѕśšşß"),
    ("t", "7+τ†"),
    ("b", "8βв"),
    ("g", "96"),
    ("l", "ι"),
    ("z", "2"),
    ("c", "(<ç"),
    ("u", "υùúûü"),
    ("n", "ñ"),
)


def _build_substitutions() -> dict[str, str]:
    table: dict[str, str] = {}
    for base, variants in _LOOKALIKES:
        for ch in variants:
            table.setdefault(ch, base)
    return table


SUBSTITUTIONS = MappingProxyType(_build_substitutions())

# ---------------------------------------------------------------------------
# Spam
# ---------------------------------------------------------------------------

SPAM_PHRASES: tuple[str, ...] = (
    "buy now", "click here", "limited time offer", "act now",
    "call now", "order now", "visit now", "free money",
    "make money fast", "work from home", "earn extra cash",
    "no credit check", "viagra", "cialis", "weight loss",
    "lose weight fast", "get paid", "cash bonus",
)

DISPOSABLE_EMAIL_DOMAINS: frozenset[str] = frozenset({
    "mailinator.com", "temp-mail.org", "guerrillamail.com",
    "10minutemail.com", "throwaway.email", "tempmail.com",
    "sharklasers.com", "yopmail.com", "maildrop.cc",
})

SECOND_PERSON_PRONOUNS: frozenset[str] = frozenset({
    "you", "your", "yours", "yourself", "yourselves", "you'll", "you're", "you've",
})

FIRST_PERSON_PRONOUNS: frozenset[str] = frozenset({
    "i", "me", "my", "mine", "myself", "we", "us", "our", "ours", "ourselves",
    "i'm", "i've", "i'd", "i'll",
})

EXTREME_POSITIVE_WORDS: frozenset[str] = frozenset({
    "perfect", "amazing", "incredible", "outstanding", "unbelievable",
    "flawless", "phenomenal", "best", "miraculous", "life-changing",
})

# ---------------------------------------------------------------------------
# Sentiment
# ---------------------------------------------------------------------------

NEGATIVE_SEVERE: tuple[str, ...] = (
    "scam", "fraud", "ripoff", "rip-off", "theft", "steal", "stolen",
    "illegal", "lawsuit", "sue", "lawyer",
)

NEGATIVE_STRONG: tuple[str, ...] = (
    "terrible", "awful", "horrible", "worst", "disgusting", "pathetic",
    "garbage", "trash", "hate", "never again", "avoid", "waste of money",
)

NEGATIVE_MODERATE: tuple[str, ...] = (
    "bad", "poor", "disappointing", "disappointed", "unhappy", "unsatisfied",
    "mediocre", "subpar", "inadequate", "lacking",
)

POSITIVE: tuple[str, ...] = (
    "excellent", "amazing", "outstanding", "fantastic", "wonderful",
    "great", "awesome", "perfect", "love", "highly recommend",
    "best", "brilliant", "superb", "exceptional", "impressed",
)

NEGATORS: frozenset[str] = frozenset({
    "not", "no", "never", "none", "hardly", "scarcely", "barely", "neither", "nor",
})

# ---------------------------------------------------------------------------
# AI classifier categories
# ---------------------------------------------------------------------------

AI_CATEGORY_LABELS = MappingProxyType({
    "sexual": "Sexual content",
    "hate": "Hate speech",
    "harassment": "Harassment",
    "self-harm": "Self-harm content",
    "sexual/minors": "Sexual content involving minors",
    "hate/threatening": "Threatening hate speech",
    "violence/graphic": "Graphic violence",
    "violence": "Violent content",
    "harassment/threatening": "Threatening harassment",
    "self-harm/intent": "Self-harm intent",
    "self-harm/instructions": "Self-harm instructions",
    "illicit": "Illicit content",
    "illicit/violent": "Illicit violent content",
})

SEVERE_AI_CATEGORIES: frozenset[str] = frozenset({
    "hate",
    "hate/threatening",
    "harassment/threatening",
    "sexual/minors",
    "self-harm/intent",
    "self-harm/instructions",
    "violence/graphic",
    "illicit/violent",
})
