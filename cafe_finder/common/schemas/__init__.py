"""
Café Finder Schemas

Query, result and corpus record types shared across the pipeline.
"""

from .query import (
    Entity,
    EntityType,
    ExpectedResultType,
    IntentResult,
    IntentType,
    Position,
    Query,
    QueryType,
    SearchContext,
    EMPTY_INTENT,
)
from .results import (
    AnswerAction,
    AnswerSource,
    AnswerType,
    CompetitorResult,
    DiscussionResult,
    FAQResult,
    LopSessionResult,
    PersonResult,
    PulseSignalResult,
    QuickSearchResults,
    ResourceResult,
    ResultType,
    SearchMetrics,
    SearchResponse,
    SearchResult,
    SearchResults,
    SynthesizedAnswer,
    ToolResult,
)
from .corpus import (
    FAQ,
    FAQStep,
    Competitor,
    CorpusSnapshot,
    Discussion,
    LopSession,
    Person,
    PulseSignal,
    Resource,
)

__all__ = [
    # query
    "Entity",
    "EntityType",
    "ExpectedResultType",
    "IntentResult",
    "IntentType",
    "Position",
    "Query",
    "QueryType",
    "SearchContext",
    "EMPTY_INTENT",
    # results
    "AnswerAction",
    "AnswerSource",
    "AnswerType",
    "CompetitorResult",
    "DiscussionResult",
    "FAQResult",
    "LopSessionResult",
    "PersonResult",
    "PulseSignalResult",
    "QuickSearchResults",
    "ResourceResult",
    "ResultType",
    "SearchMetrics",
    "SearchResponse",
    "SearchResult",
    "SearchResults",
    "SynthesizedAnswer",
    "ToolResult",
    # corpus
    "FAQ",
    "FAQStep",
    "Competitor",
    "CorpusSnapshot",
    "Discussion",
    "LopSession",
    "Person",
    "PulseSignal",
    "Resource",
]
