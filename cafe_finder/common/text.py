"""
Text helpers shared by the query pipeline.

Sanitisation and normalisation only; nothing here knows about synonyms,
entities or intents.
"""

import logging
import re
import unicodedata
from typing import List, Tuple

logger = logging.getLogger("cafe_finder.common.text")

MAX_QUERY_LENGTH = 500

# Null bytes and control characters, keeping \t (0x09) and \n (0x0A)
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")

# Markup or script fragments worth a log line. Retrieval never renders the
# query, so these are reported, never rejected.
SUSPICIOUS_PATTERNS = [
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+=", re.IGNORECASE),
    re.compile(r"data:", re.IGNORECASE),
]

_QUOTED_PHRASE = re.compile(r"\"([^\"]+)\"|'([^']+)'")
_WORD_SPLIT = re.compile(r"[\s,.;:!?()\[\]{}<>/\\|\"'`~@#$%^&*+=]+")
_TOKEN_STRIP = re.compile(r"[^a-z0-9-]")
_WHITESPACE = re.compile(r"\s+")


def find_suspicious(text: str) -> List[str]:
    """Return the suspicious patterns present in text"""
    return [p.pattern for p in SUSPICIOUS_PATTERNS if p.search(text)]


def sanitize(text: str) -> str:
    """Truncate to MAX_QUERY_LENGTH and strip control characters.

    Suspicious markup is logged and left in place.
    """
    if len(text) > MAX_QUERY_LENGTH:
        logger.debug("Query truncated from %d to %d characters", len(text), MAX_QUERY_LENGTH)
        text = text[:MAX_QUERY_LENGTH]

    cleaned = _CONTROL_CHARS.sub("", text)

    hits = find_suspicious(cleaned)
    if hits:
        logger.warning("Suspicious pattern(s) in query: %s", ", ".join(hits))

    return cleaned.strip()


def strip_diacritics(text: str) -> str:
    """NFD-decompose and drop combining marks ("café" -> "cafe")"""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def fold_text(text: str) -> str:
    """Lowercase and strip diacritics character by character.

    The result has the same length as text, so offsets found in it index
    the original. Characters that would expand ("İ") are kept as they are.
    """
    folded = []
    for ch in text:
        base = strip_diacritics(ch).lower()
        folded.append(base if len(base) == 1 else ch)
    return "".join(folded)


def normalize_text(text: str) -> str:
    """Lowercase, strip diacritics, collapse whitespace"""
    return _WHITESPACE.sub(" ", strip_diacritics(text.lower())).strip()


def normalize_token(token: str) -> str:
    """Normalise a single token down to [a-z0-9-]"""
    return _TOKEN_STRIP.sub("", strip_diacritics(token.lower()))


def extract_quoted_phrases(text: str) -> Tuple[List[str], str]:
    """Pull double- and single-quoted phrases out of text.

    Returns:
        (phrases, remainder) where remainder has each phrase replaced by a space
    """
    phrases: List[str] = []

    def _take(match: re.Match) -> str:
        phrase = (match.group(1) or match.group(2) or "").strip()
        if phrase:
            phrases.append(_WHITESPACE.sub(" ", phrase))
        return " "

    remainder = _QUOTED_PHRASE.sub(_take, text)
    return phrases, remainder


def split_words(text: str) -> List[str]:
    """Split on whitespace and punctuation, dropping empties"""
    return [w for w in _WORD_SPLIT.split(text) if w]
