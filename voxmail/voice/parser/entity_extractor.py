"""Entity extraction from voice command transcripts.

Turns spoken forms into values: email addresses dictated word by word
("john dot smith at example dot com") and list positions ("third",
"email 2", "the last one").
"""

from __future__ import annotations

import re

# Spoken punctuation inside an email address
SPOKEN_SYMBOLS: dict[str, str] = {
    "at": "@",
    "dot": ".",
    "underscore": "_",
    "dash": "-",
    "hyphen": "-",
}

NUMBER_WORDS: dict[str, int] = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14,
    "fifteen": 15, "sixteen": 16, "seventeen": 17, "eighteen": 18,
    "nineteen": 19, "twenty": 20,
}

ORDINAL_WORDS: dict[str, int] = {
    "first": 1, "second": 2, "third": 3, "fourth": 4, "fifth": 5,
    "sixth": 6, "seventh": 7, "eighth": 8, "ninth": 9, "tenth": 10,
    "eleventh": 11, "twelfth": 12, "thirteenth": 13, "fourteenth": 14,
    "fifteenth": 15, "sixteenth": 16, "seventeenth": 17, "eighteenth": 18,
    "nineteenth": 19, "twentieth": 20,
}

# "last" maps to the final item of whatever list the page shows
LAST_POSITION = -1

_DIGITS_RE = re.compile(r"^(\d+)(?:st|nd|rd|th)?$")


def spoken_to_email(text: str) -> str:
    """Convert a dictated address to its written form.

    Lower-cases, maps spoken punctuation words and drops whitespace:
    "John Dot Smith at example dot com" → "john.smith@example.com".
    """
    words = text.lower().split()
    return "".join(SPOKEN_SYMBOLS.get(word, word) for word in words)


def parse_position(text: str) -> int | None:
    """Parse a 1-based list position from a spoken token.

    Accepts digits ("3", "3rd"), number words ("three"), ordinals
    ("third") and "last" (returned as LAST_POSITION). Returns None for
    anything else, including zero.
    """
    token = text.strip().lower()
    token = re.sub(r"^(?:the|number|no\.?)\s+", "", token)
    token = re.sub(r"\s+one$", "", token)

    if token == "last":
        return LAST_POSITION

    digits = _DIGITS_RE.match(token)
    if digits:
        value = int(digits.group(1))
        return value if value > 0 else None

    if token in NUMBER_WORDS:
        return NUMBER_WORDS[token]
    return ORDINAL_WORDS.get(token)


def resolve_position(position: int, count: int) -> int | None:
    """Convert a parsed position into a 0-based index into a list of ``count``."""
    if count <= 0:
        return None
    if position == LAST_POSITION:
        return count - 1
    if 1 <= position <= count:
        return position - 1
    return None


def extract_assignment(text: str, key: str, stops: tuple[str, ...]) -> tuple[int, int] | None:
    """Locate the value of a "<key> is <value>" phrase.

    The value runs until " and", one of the ``stops`` keywords, or the
    end of the utterance. Returns the (start, end) span of the value in
    ``text`` so callers can slice the original-case transcript.
    """
    stop_alternatives = "|".join([r"\s+and\b", *(rf"\s+{re.escape(s)}\b" for s in stops)])
    pattern = re.compile(rf"\b{re.escape(key)}\s+is\s+(.+?)(?:{stop_alternatives}|$)", re.IGNORECASE)
    match = pattern.search(text)
    if not match or not match.group(1).strip():
        return None
    start, end = match.span(1)
    value = text[start:end]
    # Trim surrounding whitespace without losing the span alignment
    start += len(value) - len(value.lstrip())
    end -= len(value) - len(value.rstrip())
    return start, end
