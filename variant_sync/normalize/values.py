"""
Cleaning and validation of scraped attribute values.

The capture agent reads variant selectors straight off retailer pages, so
values arrive with pricing suffixes ("Lightning 1 option from $587.49") or are
not variant values at all ("4.5 out of 5 stars", "12 items in cart").

clean() strips the suffix noise; is_valid() decides whether what is left may
be stored. is_valid() is deliberately strict: dropping a legitimate value only
costs the user a manual edit, while stored noise is shown on the wishlist.
"""

import re

# Bidi and zero-width marks that scraped text carries, raw or as HTML entities.
_INVISIBLE_ENTITY_RE = re.compile(
    r"&lrm;|&rlm;|&zwj;|&zwnj;|&#x200e;|&#x200f;|&#8206;|&#8207;", re.IGNORECASE
)
_INVISIBLE_CHAR_RE = re.compile("[\u200e\u200f\u200c\u200d\u2066-\u2069]")
_WHITESPACE_RE = re.compile(r"\s+")

_PRICE = r"\$\s?\d[\d,]*(?:\.\d+)?"

# Trailing noise, stripped in this order.
_SUFFIX_RULES: tuple[re.Pattern[str], ...] = (
    # "Lightning 1 option from $587.49"
    re.compile(rf"\s*\d+\s+options?\s+from\s+{_PRICE}\s*$", re.IGNORECASE),
    # "Midnight from $12.99"
    re.compile(rf"\s*\bfrom\s+{_PRICE}\s*$", re.IGNORECASE),
    # "Large $24.00"
    re.compile(rf"\s*{_PRICE}\s*$"),
    # "Blue 3 options"
    re.compile(r"\s*\b\d+\s+options?\s*$", re.IGNORECASE),
)

MAX_VALUE_LENGTH = 100
MAX_VALUE_WORDS = 5
# More periods than this means sentence text, not a variant value.
MAX_VALUE_PERIODS = 2

_BLACKLIST: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        # Reviews and ratings
        r"out\s+of\s+5\s+stars",
        r"percent\s+of\s+reviews",
        r"customer\s+reviews",
        r"\b\d[\d,]*\s+(?:global\s+)?ratings?\b",
        r"\bstars?\s+rating\b",
        # Cart and page chrome
        r"items?\s+in\s+cart",
        r"add\s+to\s+(?:cart|list|shopping|wish\s*list|registry|bag)",
        r"buy\s+now",
        r"back\s+to\s+top",
        r"about\s+this\s+item",
        r"buying\s+options",
        r"applecare",
        r"see\s+(?:all\s+)?available\s+options?",
        r"^(?:select|choose)\b",
        r"\b(?:free|fast)\s+(?:delivery|shipping|returns)\b",
        r"\bin\s+stock\b|\bonly\s+\d+\s+left\b",
        r"widget\s+jump|jump\s+link",
        r"shift,\s*alt",
        r"amazon\s+us\s+home",
        r"monthly.*\$",
        r"\$\s?\d",
        # Serialization artifacts and placeholders
        r"\[object\s+\w+\]",
        r"^(?:undefined|null|none|nan|n/?a|default|-+)$",
        r"^\s*[\[{].*[\]}]\s*$",
        r"<[^>]+>",
        r"\b(?:div|span|class|id):",
        r"background:|linear-gradient|transparent",
        r"^\|",
        r"^0\s",
        # Selector captions rather than the selected value
        r"\bselected\s+(?:color|colour|size|style|pattern|configuration|option)\s+is\b",
    )
)

_ALPHA_RE = re.compile(r"[^\W\d_]")


def _strip_invisible(raw: str) -> str:
    text = _INVISIBLE_ENTITY_RE.sub("", raw)
    text = _INVISIBLE_CHAR_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def clean(raw: str | None) -> str:
    """
    Strip pricing and option-count suffixes from a scraped value.

    Rules are re-applied until nothing changes, so clean(clean(x)) == clean(x).
    """
    value = _strip_invisible(raw or "")
    while True:
        before = value
        for rule in _SUFFIX_RULES:
            value = rule.sub("", value).strip()
        if value == before:
            return value


def rejection_reason(raw: str | None) -> str | None:
    """Why the cleaned value would be rejected, or None if it is acceptable."""
    value = clean(raw)
    if not value:
        return "empty"
    if len(value) > MAX_VALUE_LENGTH:
        return "too_long"
    if value.count(".") > MAX_VALUE_PERIODS:
        return "sentence"
    for pattern in _BLACKLIST:
        if pattern.search(value):
            return f"blacklisted:{pattern.pattern}"
    if not _ALPHA_RE.search(value):
        return "no_letters"
    if len(value.split()) > MAX_VALUE_WORDS:
        return "too_many_words"
    return None


def is_valid(raw: str | None) -> bool:
    return rejection_reason(raw) is None
