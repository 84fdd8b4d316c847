"""
Query Schema

Parsed representation of a user query: tokens, entities and intent.
Built exactly once per request and never mutated afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..language import LanguageInfo


# ============================================================================
# Enums
# ============================================================================

class IntentType(str, Enum):
    """Classified purpose of a query"""
    # Find intents (seeking information)
    FIND_PERSON = "FIND_PERSON"
    FIND_TOOL = "FIND_TOOL"
    FIND_RESOURCE = "FIND_RESOURCE"
    FIND_FAQ = "FIND_FAQ"
    FIND_TEAM = "FIND_TEAM"
    # Action intents (wanting to do something)
    TOOL_ACCESS = "TOOL_ACCESS"
    START_DISCUSSION = "START_DISCUSSION"
    CONTACT_EXPERT = "CONTACT_EXPERT"
    NAVIGATE = "NAVIGATE"
    # Learn intents (wanting to understand)
    EXPLAIN_CONCEPT = "EXPLAIN_CONCEPT"
    LEARN_PROCESS = "LEARN_PROCESS"
    COMPARE = "COMPARE"
    # LOP intents
    LOP_NEXT = "LOP_NEXT"
    LOP_FIND = "LOP_FIND"
    LOP_SPEAKER = "LOP_SPEAKER"
    # Meta intents
    BROWSE = "BROWSE"
    RECENT = "RECENT"
    POPULAR = "POPULAR"
    # Fallback
    GENERAL_SEARCH = "GENERAL_SEARCH"

    @property
    def is_find(self) -> bool:
        return self in _FIND_INTENTS

    @property
    def is_action(self) -> bool:
        return self in _ACTION_INTENTS

    @property
    def is_learn(self) -> bool:
        return self in _LEARN_INTENTS


_FIND_INTENTS = frozenset({
    IntentType.FIND_PERSON, IntentType.FIND_TOOL, IntentType.FIND_RESOURCE,
    IntentType.FIND_FAQ, IntentType.FIND_TEAM,
})
_ACTION_INTENTS = frozenset({
    IntentType.TOOL_ACCESS, IntentType.START_DISCUSSION,
    IntentType.CONTACT_EXPERT, IntentType.NAVIGATE,
})
_LEARN_INTENTS = frozenset({
    IntentType.EXPLAIN_CONCEPT, IntentType.LEARN_PROCESS, IntentType.COMPARE,
})


class QueryType(str, Enum):
    """Shape of the query text"""
    QUESTION = "QUESTION"   # "how do I", "what is"
    COMMAND = "COMMAND"     # "show me", "open"
    KEYWORD = "KEYWORD"     # just keywords
    NAME = "NAME"           # looks like a name
    PHRASE = "PHRASE"       # natural language phrase


class ExpectedResultType(str, Enum):
    """Result shape an intent expects"""
    DIRECT_ANSWER = "DIRECT_ANSWER"
    ACTIONABLE_ANSWER = "ACTIONABLE_ANSWER"
    ENTITY_CARD = "ENTITY_CARD"
    RESOURCE_LIST = "RESOURCE_LIST"
    NAVIGATION = "NAVIGATION"
    MIXED = "MIXED"


class EntityType(str, Enum):
    """Types of entities recognised in a query"""
    TOOL = "TOOL"
    PERSON = "PERSON"
    TOPIC = "TOPIC"
    TEAM = "TEAM"
    RESOURCE_TYPE = "RESOURCE_TYPE"
    ACTION = "ACTION"
    PILLAR = "PILLAR"
    DATE = "DATE"
    TIME_RANGE = "TIME_RANGE"


# ============================================================================
# Models
# ============================================================================

@dataclass(frozen=True)
class Position:
    """Half-open character span [start, end) in the query"""
    start: int
    end: int

    def overlaps(self, other: "Position") -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class Entity:
    """A typed, positioned span recognised in the query"""
    type: EntityType
    value: str
    normalized_value: str
    confidence: float
    position: Position


@dataclass(frozen=True)
class IntentResult:
    """Result of intent classification"""
    primary: IntentType
    confidence: float
    secondary: List[Tuple[IntentType, float]] = field(default_factory=list)
    query_type: QueryType = QueryType.KEYWORD
    expected_result: ExpectedResultType = ExpectedResultType.MIXED


@dataclass(frozen=True)
class SearchContext:
    """Page context supplied by the caller.

    Carried on the query for a future context boost; no stage scores on it yet.
    """
    current_page: str
    current_resource_id: Optional[str] = None
    current_topics: List[str] = field(default_factory=list)


EMPTY_INTENT = IntentResult(
    primary=IntentType.GENERAL_SEARCH,
    confidence=0.0,
    secondary=[],
    query_type=QueryType.KEYWORD,
    expected_result=ExpectedResultType.MIXED,
)


@dataclass(frozen=True)
class Query:
    """Parsed representation of a user query"""
    raw: str
    normalized: str
    tokens: List[str] = field(default_factory=list)
    expanded_tokens: List[str] = field(default_factory=list)
    entities: List[Entity] = field(default_factory=list)
    intent: IntentResult = EMPTY_INTENT
    context: Optional[SearchContext] = None
    language: Optional[LanguageInfo] = None

    @property
    def is_empty(self) -> bool:
        return not self.normalized and not self.tokens
