"""
Query Processor

Sanitises, tokenises, normalises and synonym-expands raw query text.
Entities and intent are attached later by the engine; this stage never
raises to its caller.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Pattern, Sequence

from ..common.language import detect_language
from ..common.schemas.query import Query, SearchContext
from ..common.text import (
    extract_quoted_phrases,
    normalize_text,
    normalize_token,
    sanitize,
    split_words,
)
from .synonyms import get_canonical, get_synonyms

logger = logging.getLogger("cafe_finder.retriever.query_processor")

MAX_EXPANDED_TOKENS = 50

# Function words; kept in tokens for intent detection, skipped by search
STOP_WORDS = frozenset({
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
    "be", "have", "has", "had", "do", "does", "did", "will", "would",
    "could", "should", "may", "might", "must", "shall", "can",
})

# Words that signal intent rather than content
INTENT_WORDS = frozenset({
    "how", "what", "who", "where", "when", "why", "which",
    "find", "get", "access", "request", "show", "open", "go",
    "contact", "message", "email", "talk", "reach",
    "learn", "explain", "define", "meaning", "understand",
    "compare", "vs", "versus", "difference", "between",
    "all", "list", "browse", "recent", "new", "latest", "popular", "top",
    "next", "upcoming",
})


@dataclass
class ClassifiedTokens:
    """Tokens split by role"""
    all: List[str] = field(default_factory=list)
    intent_words: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    stop_words: List[str] = field(default_factory=list)


def tokenize(text: str) -> List[str]:
    """Split on whitespace/punctuation and normalise each token"""
    tokens = []
    for word in split_words(text):
        token = normalize_token(word)
        if token:
            tokens.append(token)
    return tokens


def _normalize_term(term: str) -> str:
    # Phrases keep their inner spaces
    if " " in term.strip():
        return normalize_text(term)
    return normalize_token(term)


def expand_with_synonyms(tokens: Sequence[str], limit: int = MAX_EXPANDED_TOKENS) -> List[str]:
    """Normalised form, canonical form and all synonyms of each token.

    Order is first-seen; duplicates are dropped and the result capped at limit.
    """
    expanded: List[str] = []
    seen = set()

    def _add(term: str) -> None:
        if term and term not in seen:
            seen.add(term)
            expanded.append(term)

    for token in tokens:
        normalized = _normalize_term(token)
        if not normalized:
            continue
        _add(normalized)
        _add(get_canonical(normalized))
        for synonym in get_synonyms(normalized):
            _add(synonym)
        if len(expanded) >= limit:
            break

    return expanded[:limit]


def classify_tokens(tokens: Sequence[str]) -> ClassifiedTokens:
    """Split tokens into intent words, content keywords and stop words"""
    result = ClassifiedTokens()
    for token in tokens:
        normalized = _normalize_term(token)
        if not normalized:
            continue
        result.all.append(normalized)
        if normalized in INTENT_WORDS:
            result.intent_words.append(normalized)
        elif normalized in STOP_WORDS:
            result.stop_words.append(normalized)
        else:
            result.keywords.append(normalized)
    return result


def matches_pattern(text: str, patterns: Sequence[Pattern]) -> bool:
    """Check the normalised text against compiled patterns"""
    normalized = normalize_text(text)
    return any(p.search(normalized) for p in patterns)


def empty_query(raw: str = "", context: Optional[SearchContext] = None) -> Query:
    """The zero-value query used for invalid or blank input"""
    return Query(raw=raw, normalized="", tokens=[], expanded_tokens=[], context=context)


class QueryProcessor:
    """
    Turns raw user input into a Query without entities or intent.

    Responsibilities:
    1. Validate and sanitise input (truncate, strip control characters)
    2. Normalise text (case, diacritics, whitespace)
    3. Pull quoted phrases out as atomic tokens
    4. Expand tokens with domain synonyms
    5. Annotate the detected query language
    """

    def __init__(self, max_expanded_tokens: int = MAX_EXPANDED_TOKENS):
        self.max_expanded_tokens = max_expanded_tokens

    def process(self, raw: Any, context: Optional[SearchContext] = None) -> Query:
        """
        Process a raw query.

        Args:
            raw: User input; anything other than a string yields the empty query
            context: Optional page context carried on the query

        Returns:
            Query with tokens and expanded tokens, no entities or intent
        """
        if not isinstance(raw, str):
            logger.warning("Rejected non-string query of type %s", type(raw).__name__)
            return empty_query(context=context)

        sanitized = sanitize(raw)
        if not sanitized:
            return empty_query(context=context)

        try:
            normalized = normalize_text(sanitized)
            phrases, remainder = extract_quoted_phrases(sanitized)

            tokens = tokenize(remainder)
            tokens.extend(normalize_text(p) for p in phrases)

            expanded = expand_with_synonyms(tokens, self.max_expanded_tokens)

            return Query(
                raw=sanitized,
                normalized=normalized,
                tokens=tokens,
                expanded_tokens=expanded,
                context=context,
                language=detect_language(sanitized),
            )
        except Exception as e:
            logger.error("Query processing failed, using whitespace split: %s", e)
            return Query(
                raw=sanitized,
                normalized=sanitized.lower().strip(),
                tokens=sanitized.lower().split(),
                expanded_tokens=[],
                context=context,
            )
