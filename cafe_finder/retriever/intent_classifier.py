"""
Intent Classifier

Scores a query against a fixed, ordered catalog of intent definitions.

Each definition carries typed patterns:
- phrase: substring of the normalised query
- keyword: every word of the keyword present among the tokens
- regex: re.search against the normalised query

An intent scores its base confidence once per matching pattern, plus a flat
0.10 when any of its keywords is present, clamped to 1.0. The catalog order
breaks ties.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Set, Tuple

from ..common.schemas.query import (
    ExpectedResultType,
    IntentResult,
    IntentType,
    QueryType,
)
from ..common.text import normalize_text
from .query_processor import classify_tokens
from .synonyms import TEAM_SYNONYMS, TOOL_SYNONYMS

logger = logging.getLogger("cafe_finder.retriever.intent_classifier")

# Callers trust IntentResult.primary at or above this confidence
INTENT_CONFIDENCE_THRESHOLD = 0.5

KEYWORD_BONUS = 0.10
MAX_SECONDARY = 3


class PatternKind(str, Enum):
    PHRASE = "phrase"
    KEYWORD = "keyword"
    REGEX = "regex"


@dataclass(frozen=True)
class IntentPattern:
    kind: PatternKind
    value: str

    def matches(self, normalized: str, token_set: Set[str]) -> bool:
        if self.kind == PatternKind.PHRASE:
            return self.value in normalized
        if self.kind == PatternKind.KEYWORD:
            return all(part in token_set for part in self.value.split())
        return re.search(self.value, normalized) is not None


def _phrase(value: str) -> IntentPattern:
    return IntentPattern(PatternKind.PHRASE, value)


def _keyword(value: str) -> IntentPattern:
    return IntentPattern(PatternKind.KEYWORD, value)


def _regex(value: str) -> IntentPattern:
    return IntentPattern(PatternKind.REGEX, value)


@dataclass(frozen=True)
class IntentDefinition:
    intent: IntentType
    patterns: List[IntentPattern]
    keywords: List[str]
    expected_result: ExpectedResultType
    base_confidence: float
    description: str = ""


# ============================================================================
# Catalog (order matters for ties)
# ============================================================================

INTENT_CATALOG: List[IntentDefinition] = [
    IntentDefinition(
        intent=IntentType.FIND_PERSON,
        patterns=[
            _regex(r"who (?:is|knows|can help)"),
            _regex(r"contact (?:info|information|details)"),
            _regex(r"(?:find|reach|talk to|message|email)\s+(?:someone|person|expert)"),
            _regex(r"expert (?:in|on|for|about)"),
            _regex(r"(?:slack|teams|email) (?:for|of)"),
        ],
        keywords=["who", "contact", "expert", "person", "email", "slack", "teams", "reach out", "talk to"],
        expected_result=ExpectedResultType.ENTITY_CARD,
        base_confidence=0.85,
        description="Who is the expert on X?",
    ),
    IntentDefinition(
        intent=IntentType.FIND_TOOL,
        patterns=[
            _regex(r"(?:where is|open|launch|go to)\s+\w+"),
            _regex(r"link to\s+\w+"),
        ],
        keywords=list(TOOL_SYNONYMS),
        expected_result=ExpectedResultType.ENTITY_CARD,
        base_confidence=0.90,
        description="Open Jira",
    ),
    IntentDefinition(
        intent=IntentType.TOOL_ACCESS,
        patterns=[
            _regex(r"(?:get|request|need|want)\s+(?:\w+\s+)?access"),
            _regex(r"how (?:do i|to|can i)\s+(?:get|request)\s+\w+"),
            _regex(r"access (?:to|for)\s+\w+"),
            _regex(r"\w+\s+access request"),
            _regex(r"request\s+\w+\s+(?:access|permission)"),
        ],
        keywords=["access", "permission", "request", "login", "account"],
        expected_result=ExpectedResultType.ACTIONABLE_ANSWER,
        base_confidence=0.90,
        description="How do I get Figma access?",
    ),
    IntentDefinition(
        intent=IntentType.FIND_FAQ,
        patterns=[
            _regex(r"how (?:do|does|can|should|would|to)"),
            _regex(r"what (?:is|are|does|do)"),
            _regex(r"when (?:do|does|should|is)"),
            _regex(r"where (?:do|does|can|is)"),
            _regex(r"why (?:do|does|is|are)"),
            _phrase("can i "),
            _phrase("is there "),
        ],
        keywords=["how", "what", "when", "where", "why", "faq", "question"],
        expected_result=ExpectedResultType.DIRECT_ANSWER,
        base_confidence=0.75,
    ),
    IntentDefinition(
        intent=IntentType.EXPLAIN_CONCEPT,
        patterns=[
            _regex(r"what is (?:a |an |the )?"),
            _regex(r"(?:explain|define|meaning of)\s+"),
            _regex(r"what does\s+\w+\s+mean"),
            _phrase("tell me about "),
        ],
        keywords=["what is", "explain", "define", "meaning", "understand", "about"],
        expected_result=ExpectedResultType.DIRECT_ANSWER,
        base_confidence=0.85,
        description="What is COB?",
    ),
    IntentDefinition(
        intent=IntentType.LEARN_PROCESS,
        patterns=[
            _regex(r"how does\s+.+\s+work"),
            _regex(r"process (?:for|of)\s+"),
            _regex(r"steps (?:for|to)\s+"),
            _regex(r"procedure (?:for|to)\s+"),
        ],
        keywords=["process", "steps", "procedure", "workflow", "how does"],
        expected_result=ExpectedResultType.DIRECT_ANSWER,
        base_confidence=0.80,
    ),
    IntentDefinition(
        intent=IntentType.COMPARE,
        patterns=[
            _regex(r"\w+\s+(?:vs|versus|or)\s+\w+"),
            _phrase("difference between "),
            _regex(r"compare\s+"),
            _regex(r"\w+\s+compared to\s+\w+"),
        ],
        keywords=["vs", "versus", "compare", "difference", "between"],
        expected_result=ExpectedResultType.DIRECT_ANSWER,
        base_confidence=0.85,
    ),
    IntentDefinition(
        intent=IntentType.FIND_RESOURCE,
        patterns=[
            _regex(r"(?:find|search|look for|show)\s+(?:a |the )?\w+"),
            _regex(r"\w+\s+(?:template|guide|document|doc|checklist)"),
        ],
        keywords=["find", "search", "document", "template", "guide", "resource", "file"],
        expected_result=ExpectedResultType.RESOURCE_LIST,
        base_confidence=0.70,
    ),
    IntentDefinition(
        intent=IntentType.FIND_TEAM,
        patterns=[
            _regex(r"(?:who|which team)\s+(?:works on|owns|manages)"),
            _regex(r"\w+\s+team\b"),
            _regex(r"team (?:for|of)\s+"),
        ],
        keywords=list(TEAM_SYNONYMS) + ["team", "group", "department"],
        expected_result=ExpectedResultType.ENTITY_CARD,
        base_confidence=0.80,
    ),
    IntentDefinition(
        intent=IntentType.START_DISCUSSION,
        patterns=[
            _regex(r"(?:ask|discuss|question about)\s+"),
            _phrase("i have a question"),
            _phrase("need help with"),
        ],
        keywords=["ask", "discuss", "question", "help with"],
        expected_result=ExpectedResultType.ACTIONABLE_ANSWER,
        base_confidence=0.75,
    ),
    IntentDefinition(
        intent=IntentType.CONTACT_EXPERT,
        patterns=[
            _regex(r"talk to (?:someone|expert|person)"),
            _phrase("reach out to"),
            _phrase("who can help"),
        ],
        keywords=["talk to", "reach out", "contact", "help", "expert"],
        expected_result=ExpectedResultType.ENTITY_CARD,
        base_confidence=0.80,
    ),
    IntentDefinition(
        intent=IntentType.NAVIGATE,
        patterns=[
            _regex(r"go to\s+"),
            _regex(r"open\s+"),
            _regex(r"show me\s+"),
            _regex(r"take me to\s+"),
            _keyword("navigate"),
        ],
        keywords=["go", "open", "show", "navigate", "take me"],
        expected_result=ExpectedResultType.NAVIGATION,
        base_confidence=0.85,
    ),
    IntentDefinition(
        intent=IntentType.LOP_NEXT,
        patterns=[
            _phrase("next lop"),
            _regex(r"upcoming (?:lop|product talk|session)"),
            _regex(r"when is (?:the )?(?:next )?lop"),
        ],
        keywords=["next lop", "upcoming lop", "when lop"],
        expected_result=ExpectedResultType.ENTITY_CARD,
        base_confidence=0.90,
        description="When is the next LOP?",
    ),
    IntentDefinition(
        intent=IntentType.LOP_FIND,
        patterns=[
            _regex(r"lop (?:about|on|for)\s+"),
            _regex(r"product talk (?:about|on)\s+"),
            _regex(r"session (?:about|on)\s+"),
        ],
        keywords=["lop", "product talk", "session", "presentation"],
        expected_result=ExpectedResultType.RESOURCE_LIST,
        base_confidence=0.85,
    ),
    IntentDefinition(
        intent=IntentType.LOP_SPEAKER,
        patterns=[
            _regex(r"who (?:spoke|presented|talked) (?:about|on)"),
            _regex(r"\w+(?:'s| 's) lop"),
            _regex(r"lop by\s+\w+"),
            _keyword("speaker"),
        ],
        keywords=["spoke", "presented", "speaker", "by"],
        expected_result=ExpectedResultType.ENTITY_CARD,
        base_confidence=0.80,
    ),
    IntentDefinition(
        intent=IntentType.BROWSE,
        patterns=[
            _regex(r"(?:all|list|browse|show)\s+(?:the )?\w+s?\b"),
        ],
        keywords=["all", "list", "browse", "show"],
        expected_result=ExpectedResultType.RESOURCE_LIST,
        base_confidence=0.70,
    ),
    IntentDefinition(
        intent=IntentType.RECENT,
        patterns=[
            _regex(r"(?:recent|new|latest|fresh)\s+"),
            _phrase("what's new"),
        ],
        keywords=["recent", "new", "latest", "fresh"],
        expected_result=ExpectedResultType.RESOURCE_LIST,
        base_confidence=0.75,
    ),
    IntentDefinition(
        intent=IntentType.POPULAR,
        patterns=[
            _regex(r"(?:popular|top|trending|most used)\s+"),
        ],
        keywords=["popular", "top", "trending", "most used", "best"],
        expected_result=ExpectedResultType.RESOURCE_LIST,
        base_confidence=0.75,
    ),
]

_QUESTION_START = re.compile(
    r"^(how|what|who|where|when|why|which|can|is|does|do|are|will|would|could|should)\b"
)
_COMMAND_START = re.compile(r"^(show|open|go|find|get|list|browse|take|navigate)\b")


def detect_query_type(query: str) -> QueryType:
    """Classify the shape of the query text"""
    normalized = normalize_text(query)

    if _QUESTION_START.search(normalized):
        return QueryType.QUESTION
    if _COMMAND_START.search(normalized):
        return QueryType.COMMAND

    words = query.split()
    if 1 <= len(words) <= 4 and all(w[0].isupper() for w in words):
        return QueryType.NAME
    if len(words) <= 2:
        return QueryType.KEYWORD
    return QueryType.PHRASE


def _token_set(tokens: Sequence[str]) -> Set[str]:
    token_set: Set[str] = set()
    for token in classify_tokens(tokens).all:
        token_set.add(token)
        # Quoted phrases also count word by word
        token_set.update(token.split())
    return token_set


def trusted_intent(
    result: IntentResult,
    fallback: IntentType = IntentType.GENERAL_SEARCH,
    threshold: float = INTENT_CONFIDENCE_THRESHOLD,
) -> IntentType:
    """The primary intent if confident enough, otherwise the fallback"""
    if result.confidence >= threshold:
        return result.primary
    return fallback


class IntentClassifier:
    """
    Classifies query intent against INTENT_CATALOG.

    Never raises for string input; an unmatched query yields GENERAL_SEARCH.
    """

    def __init__(self, catalog: Sequence[IntentDefinition] = INTENT_CATALOG):
        self.catalog = list(catalog)

    def score(self, definition: IntentDefinition, normalized: str, token_set: Set[str]) -> float:
        """Score a single intent definition"""
        score = 0.0
        for pattern in definition.patterns:
            if pattern.matches(normalized, token_set):
                score += definition.base_confidence

        if any(all(part in token_set for part in kw.split()) for kw in definition.keywords):
            score += KEYWORD_BONUS

        return min(score, 1.0)

    def classify(self, query: str, tokens: Sequence[str]) -> IntentResult:
        """
        Classify the intent of a query.

        Args:
            query: Sanitised query text
            tokens: Tokens from the query processor

        Returns:
            IntentResult with primary, up to three secondary intents and query shape
        """
        query = query or ""
        normalized = normalize_text(query)
        token_set = _token_set(tokens or [])
        query_type = detect_query_type(query)

        scored: List[Tuple[IntentDefinition, float]] = []
        for definition in self.catalog:
            score = self.score(definition, normalized, token_set)
            if score > 0:
                scored.append((definition, score))

        if not scored:
            return IntentResult(
                primary=IntentType.GENERAL_SEARCH,
                confidence=0.5,
                secondary=[],
                query_type=query_type,
                expected_result=ExpectedResultType.MIXED,
            )

        # Stable: equal scores keep catalog order
        scored.sort(key=lambda item: item[1], reverse=True)
        top, top_score = scored[0]

        logger.debug("Intent %s (%.2f) for %r", top.intent.value, top_score, query[:50])

        return IntentResult(
            primary=top.intent,
            confidence=top_score,
            secondary=[(d.intent, s) for d, s in scored[1:1 + MAX_SECONDARY]],
            query_type=query_type,
            expected_result=top.expected_result,
        )
