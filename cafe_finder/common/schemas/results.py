"""
Result Schemas

Typed search results (one variant per corpus category), synthesized answers
and the response envelope returned by SearchEngine.search().
"""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from .query import Query


class ResultType(str, Enum):
    """Corpus category a result was drawn from"""
    PERSON = "person"
    TOOL = "tool"
    FAQ = "faq"
    RESOURCE = "resource"
    DISCUSSION = "discussion"
    LOP_SESSION = "lop_session"
    PULSE_SIGNAL = "pulse_signal"
    COMPETITOR = "competitor"


class AnswerType(str, Enum):
    """Template used for a synthesized answer"""
    INSTANT_ANSWER = "INSTANT_ANSWER"
    PERSON_CARD = "PERSON_CARD"
    TOOL_CARD = "TOOL_CARD"
    CONCEPT_EXPLANATION = "CONCEPT_EXPLANATION"
    LOP_SESSION = "LOP_SESSION"
    ZERO_RESULTS = "ZERO_RESULTS"


# ============================================================================
# Search results
# ============================================================================

@dataclass(frozen=True)
class SearchResult:
    """Shared fields of every result variant.

    score is oriented so 1.0 is a perfect match.
    """
    id: str
    score: float
    matched_terms: List[str] = field(default_factory=list)

    @property
    def label(self) -> str:
        """Display name used in logs and citations"""
        return self.id

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


@dataclass(frozen=True)
class PersonResult(SearchResult):
    type: ResultType = field(default=ResultType.PERSON, init=False)
    name: str = ""
    email: str = ""
    title: str = ""
    team: str = ""
    location: str = ""
    avatar_url: str = ""
    expertise_areas: List[str] = field(default_factory=list)
    teams_deep_link: Optional[str] = None
    slack_handle: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class ToolResult(SearchResult):
    type: ResultType = field(default=ResultType.TOOL, init=False)
    name: str = ""
    description: str = ""
    category: str = ""
    access_url: str = ""
    request_url: Optional[str] = None
    guide_url: Optional[str] = None
    status: str = "available"   # available | limited | unavailable | coming_soon

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class FAQResult(SearchResult):
    type: ResultType = field(default=ResultType.FAQ, init=False)
    question: str = ""
    answer: str = ""
    answer_summary: str = ""
    category: str = ""
    tags: List[str] = field(default_factory=list)
    steps: List[str] = field(default_factory=list)
    view_count: int = 0
    helpful_count: int = 0
    expert_id: Optional[str] = None
    related_resource_ids: List[str] = field(default_factory=list)

    @property
    def label(self) -> str:
        return self.question


@dataclass(frozen=True)
class ResourceResult(SearchResult):
    type: ResultType = field(default=ResultType.RESOURCE, init=False)
    title: str = ""
    description: str = ""
    url: str = ""
    pillar: str = ""
    category: str = ""
    resource_type: str = ""
    tags: List[str] = field(default_factory=list)
    author_id: Optional[str] = None
    view_count: int = 0
    created_at: str = ""
    updated_at: str = ""

    @property
    def label(self) -> str:
        return self.title


@dataclass(frozen=True)
class DiscussionResult(SearchResult):
    type: ResultType = field(default=ResultType.DISCUSSION, init=False)
    title: str = ""
    body_preview: str = ""
    author_name: str = ""
    author_id: str = ""
    status: str = "open"   # open | resolved | stale
    reply_count: int = 0
    upvote_count: int = 0
    has_accepted_answer: bool = False
    created_at: str = ""
    tags: List[str] = field(default_factory=list)

    @property
    def label(self) -> str:
        return self.title


@dataclass(frozen=True)
class LopSessionResult(SearchResult):
    type: ResultType = field(default=ResultType.LOP_SESSION, init=False)
    title: str = ""
    description: str = ""
    speaker_name: str = ""
    speaker_id: str = ""
    session_date: str = ""
    topics: List[str] = field(default_factory=list)
    video_url: Optional[str] = None
    slides_url: Optional[str] = None

    @property
    def label(self) -> str:
        return self.title


@dataclass(frozen=True)
class PulseSignalResult(SearchResult):
    type: ResultType = field(default=ResultType.PULSE_SIGNAL, init=False)
    title: str = ""
    summary: str = ""
    domain: str = ""
    priority: str = "medium"   # critical | high | medium | low
    source: str = ""
    published_at: str = ""
    companies: List[str] = field(default_factory=list)
    is_read: bool = False

    @property
    def label(self) -> str:
        return self.title


@dataclass(frozen=True)
class CompetitorResult(SearchResult):
    type: ResultType = field(default=ResultType.COMPETITOR, init=False)
    name: str = ""
    category: str = ""
    tier: int = 3
    description: str = ""
    signal_count: int = 0
    watchlisted: bool = False
    markets: List[str] = field(default_factory=list)

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class SearchResults:
    """Results grouped by corpus category, each list ordered by score"""
    people: List[PersonResult] = field(default_factory=list)
    tools: List[ToolResult] = field(default_factory=list)
    faqs: List[FAQResult] = field(default_factory=list)
    resources: List[ResourceResult] = field(default_factory=list)
    discussions: List[DiscussionResult] = field(default_factory=list)
    lop_sessions: List[LopSessionResult] = field(default_factory=list)
    pulse_signals: List[PulseSignalResult] = field(default_factory=list)
    competitors: List[CompetitorResult] = field(default_factory=list)

    @staticmethod
    def categories() -> List[str]:
        return [f.name for f in fields(SearchResults)]

    @property
    def total_count(self) -> int:
        return sum(len(getattr(self, name)) for name in self.categories())

    def flatten(self) -> List[SearchResult]:
        """All results across categories, best first"""
        flat: List[SearchResult] = []
        for name in self.categories():
            flat.extend(getattr(self, name))
        # Stable sort keeps category order among equal scores
        return sorted(flat, key=lambda r: r.score, reverse=True)

    def top_result(self) -> Optional[SearchResult]:
        flat = self.flatten()
        return flat[0] if flat else None

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            name: [r.to_dict() for r in getattr(self, name)]
            for name in self.categories()
        }


@dataclass(frozen=True)
class QuickSearchResults:
    """Reduced result set for autocomplete"""
    people: List[PersonResult] = field(default_factory=list)
    faqs: List[FAQResult] = field(default_factory=list)
    resources: List[ResourceResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "people": [r.to_dict() for r in self.people],
            "faqs": [r.to_dict() for r in self.faqs],
            "resources": [r.to_dict() for r in self.resources],
        }


# ============================================================================
# Answers
# ============================================================================

@dataclass(frozen=True)
class AnswerAction:
    """An action button attached to an answer"""
    label: str
    url: str
    icon: Optional[str] = None
    primary: bool = False


@dataclass(frozen=True)
class AnswerSource:
    """A source citation"""
    title: str
    url: str
    type: ResultType


@dataclass(frozen=True)
class SynthesizedAnswer:
    """Direct answer generated from the top result"""
    type: AnswerType
    confidence: float
    text: Optional[str] = None
    steps: Optional[List[str]] = None
    key_points: Optional[List[str]] = None
    actions: List[AnswerAction] = field(default_factory=list)
    sources: List[AnswerSource] = field(default_factory=list)
    featured_result: Optional[SearchResult] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "confidence": self.confidence,
            "text": self.text,
            "steps": self.steps,
            "key_points": self.key_points,
            "actions": [asdict(a) for a in self.actions],
            "sources": [
                {"title": s.title, "url": s.url, "type": s.type.value}
                for s in self.sources
            ],
            "featured_result": self.featured_result.to_dict() if self.featured_result else None,
        }


# ============================================================================
# Response envelope
# ============================================================================

@dataclass(frozen=True)
class SearchMetrics:
    """Per-stage timings of one search call"""
    total_time_ms: float = 0.0
    query_processing_ms: float = 0.0
    search_execution_ms: float = 0.0
    answer_synthesis_ms: float = 0.0
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


@dataclass(frozen=True)
class SearchResponse:
    """The sole externally observable output of a search call"""
    query: Query
    results: SearchResults
    metrics: SearchMetrics
    answer: Optional[SynthesizedAnswer] = None
    suggestions: List[str] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return self.results.total_count

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready view of the response"""
        q = self.query
        return {
            "query": {
                "raw": q.raw,
                "normalized": q.normalized,
                "tokens": list(q.tokens),
                "expanded_tokens": list(q.expanded_tokens),
                "entities": [
                    {
                        "type": e.type.value,
                        "value": e.value,
                        "normalized_value": e.normalized_value,
                        "confidence": e.confidence,
                        "position": {"start": e.position.start, "end": e.position.end},
                    }
                    for e in q.entities
                ],
                "intent": {
                    "primary": q.intent.primary.value,
                    "confidence": q.intent.confidence,
                    "secondary": [
                        {"intent": i.value, "confidence": c} for i, c in q.intent.secondary
                    ],
                    "query_type": q.intent.query_type.value,
                    "expected_result": q.intent.expected_result.value,
                },
                "language": q.language.code if q.language else None,
            },
            "answer": self.answer.to_dict() if self.answer else None,
            "results": self.results.to_dict(),
            "total_count": self.total_count,
            "metrics": asdict(self.metrics),
            "suggestions": list(self.suggestions),
        }
