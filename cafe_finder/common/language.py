"""
Query Language Detection

Annotates each query with its language and dominant script using langdetect,
with a Unicode script count as the tie-breaker for short or mixed input.
The synonym dictionaries are English; the annotation tells callers when a
query fell outside them.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from langdetect import DetectorFactory, LangDetectException, detect_langs

logger = logging.getLogger("cafe_finder.common.language")

# Seed langdetect for deterministic results
DetectorFactory.seed = 0

# Below this many characters langdetect is unreliable for Latin text
MIN_DETECT_LENGTH = 10

# (start, end, script, language)
_SCRIPT_RANGES = [
    (0xAC00, 0xD7AF, "Hangul", "ko"),
    (0x1100, 0x11FF, "Hangul", "ko"),
    (0x3130, 0x318F, "Hangul", "ko"),
    (0x3040, 0x309F, "Kana", "ja"),
    (0x30A0, 0x30FF, "Kana", "ja"),
    (0x4E00, 0x9FFF, "CJK", "zh"),
    (0x3400, 0x4DBF, "CJK", "zh"),
]


@dataclass(frozen=True)
class LanguageInfo:
    """Detected language of a query"""
    code: str           # ISO 639-1: "en", "ko", "ja"
    confidence: float   # 0.0~1.0
    script: str         # "Latin", "Hangul", "CJK", "Kana"

    @property
    def is_english(self) -> bool:
        return self.code == "en"


ENGLISH = LanguageInfo(code="en", confidence=0.5, script="Latin")


def _script_of(ch: str) -> Tuple[str, Optional[str]]:
    cp = ord(ch)
    for start, end, script, lang in _SCRIPT_RANGES:
        if start <= cp <= end:
            return script, lang
    return "Latin", None


def detect_script(text: str) -> Tuple[str, Optional[str]]:
    """Return the dominant script and, for non-Latin scripts, its language.

    Japanese mixes Kana with CJK ideographs, so any Kana wins over CJK.
    """
    counts: Dict[str, int] = {}
    langs: Dict[str, str] = {}
    for ch in text:
        if not ch.isalnum():
            continue
        script, lang = _script_of(ch)
        counts[script] = counts.get(script, 0) + 1
        if lang:
            langs[script] = lang

    non_latin = {k: v for k, v in counts.items() if k != "Latin"}
    if not non_latin:
        return "Latin", None
    if "Kana" in non_latin:
        return "Kana", "ja"

    script = max(non_latin, key=non_latin.get)
    return script, langs[script]


def detect_language(text: str) -> LanguageInfo:
    """Detect the language of a query.

    Latin-only text is reported as English: langdetect regularly labels
    short English queries ("jira access") as nl, af or de, and the only
    dictionaries the engine carries are English ones.

    Args:
        text: Sanitised query text

    Returns:
        LanguageInfo with language code, confidence and script
    """
    if not text or not text.strip():
        return LanguageInfo(code="en", confidence=1.0, script="Latin")

    cleaned = text.strip()
    script, script_lang = detect_script(cleaned)

    if script_lang is None:
        return ENGLISH

    if len(cleaned) < MIN_DETECT_LENGTH:
        return LanguageInfo(code=script_lang, confidence=0.6, script=script)

    try:
        results = detect_langs(cleaned)
    except LangDetectException as e:
        logger.debug("langdetect failed for %r: %s", cleaned[:30], e)
        return LanguageInfo(code=script_lang, confidence=0.7, script=script)

    if not results:
        return LanguageInfo(code=script_lang, confidence=0.7, script=script)

    top = results[0]
    return LanguageInfo(code=top.lang, confidence=round(top.prob, 4), script=script)
