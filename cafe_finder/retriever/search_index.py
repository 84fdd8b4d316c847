"""
Multi-Index Search

One fuzzy index per corpus category, built from a provider snapshot.
Matching uses rapidfuzz per query term and per weighted field; each hit's
distance (0 = perfect) is inverted to the engine's score (1 = perfect).

Entity filters (team, pillar, resource type, dates) narrow a category before
matching. A strictly reduced candidate set is indexed ad hoc and searched
with the same terms; otherwise the prebuilt index is used.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import (
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
    TypeVar,
    Union,
)

from rapidfuzz import fuzz, process

from ..common.config import SearchConfig
from ..common.errors import IndexNotInitializedError
from ..common.schemas.corpus import (
    FAQ,
    Competitor,
    CorpusSnapshot,
    Discussion,
    LopSession,
    Person,
    PulseSignal,
    Resource,
)
from ..common.schemas.query import Entity, EntityType
from ..common.schemas.results import (
    CompetitorResult,
    DiscussionResult,
    FAQResult,
    LopSessionResult,
    PersonResult,
    PulseSignalResult,
    ResourceResult,
    SearchResults,
    ToolResult,
)
from ..common.text import normalize_text, normalize_token, split_words
from ..providers.base import CorpusProvider
from .entity_extractor import FUTURE, NEXT_OCCURRENCE
from .query_processor import STOP_WORDS
from .synonyms import get_synonyms

logger = logging.getLogger("cafe_finder.retriever.search_index")

T = TypeVar("T")
Terms = Union[str, Sequence[str]]

# Floor on a field's distance so a perfect match still leaves score < 1
MIN_DISTANCE = 0.001
_EPSILON = 1e-9

PREFIX_SIMILARITY = 0.9
# Shorter terms only match whole words or word prefixes
MIN_FUZZY_TERM_LENGTH = 4

# Score given to "next occurrence" LOP sessions picked by date alone
NEXT_OCCURRENCE_SCORE = 0.99

# Question and filler words carry no content for matching
_NOISE_WORDS = STOP_WORDS | frozenset({
    "how", "what", "who", "whom", "where", "when", "why", "which",
    "i", "me", "my", "we", "our", "us", "you", "your", "it", "its",
    "this", "that", "these", "those", "there", "about", "into",
    "need", "want", "please", "tell", "show", "find", "get", "go",
    "open", "take", "list", "browse", "whats", "what's", "any", "some",
})

_LOP_TEMPORAL_WORDS = frozenset({
    "next", "upcoming", "future", "session", "sessions", "lop", "lops",
    "meeting", "meetings", "q1", "q2", "q3", "q4", "tomorrow", "today",
})
_LOP_TERMS = frozenset(get_synonyms("lop"))


# ============================================================================
# Field weights: (attribute, weight) and match threshold per category
# ============================================================================

PEOPLE_FIELDS = [
    ("display_name", 3.0),
    ("email", 1.0),
    ("title", 2.0),
    ("team", 1.5),
    ("expertise_areas", 2.5),
    ("location", 0.5),
]
PEOPLE_THRESHOLD = 0.4

RESOURCE_FIELDS = [
    ("title", 3.0),
    ("description", 2.0),
    ("pillar", 1.0),
    ("category", 1.5),
    ("tags", 2.0),
]
RESOURCE_THRESHOLD = 0.4

FAQ_FIELDS = [
    ("question", 4.0),
    ("alternate_questions", 3.0),
    ("answer_summary", 2.0),
    ("category", 1.0),
    ("tags", 2.0),
]
FAQ_THRESHOLD = 0.3

DISCUSSION_FIELDS = [
    ("title", 3.0),
    ("body", 2.0),
    ("author_name", 1.0),
]
DISCUSSION_THRESHOLD = 0.4

LOP_FIELDS = [
    ("title", 4.0),
    ("description", 2.0),
    ("tags", 3.0),
]
LOP_THRESHOLD = 0.4

PULSE_FIELDS = [
    ("title", 4.0),
    ("summary", 3.0),
    ("companies", 2.5),
    ("topics", 2.0),
    ("domain", 1.0),
]
PULSE_THRESHOLD = 0.35

COMPETITOR_FIELDS = [
    ("name", 4.0),
    ("category", 2.0),
    ("description", 2.0),
    ("markets", 1.5),
]
COMPETITOR_THRESHOLD = 0.3

TOOL_FIELDS = [
    ("title", 3.0),
    ("description", 2.0),
    ("tags", 2.0),
]
TOOL_THRESHOLD = 0.3


# ============================================================================
# Fuzzy matching
# ============================================================================

def prepare_terms(terms: Terms) -> List[str]:
    """Normalise search terms, dropping noise words and 1-character terms.

    A string is split on whitespace; a sequence keeps multi-word phrases whole.
    """
    raw = terms.split() if isinstance(terms, str) else list(terms)
    prepared: List[str] = []
    seen: Set[str] = set()
    for term in raw:
        normalized = normalize_text(term)
        if len(normalized) < 2 or normalized in _NOISE_WORDS or normalized in seen:
            continue
        seen.add(normalized)
        prepared.append(normalized)
    return prepared


@dataclass(frozen=True)
class FieldText:
    """Searchable form of one field value"""
    text: str
    words: Tuple[str, ...]

    @classmethod
    def of(cls, value) -> "FieldText":
        if value is None:
            value = ""
        elif isinstance(value, (list, tuple)):
            value = " ".join(str(v) for v in value)
        text = normalize_text(str(value))
        words = []
        for word in split_words(text):
            token = normalize_token(word)
            if token and token not in words:
                words.append(token)
        return cls(text=text, words=tuple(words))


def term_similarity(term: str, field_text: FieldText) -> float:
    """Similarity of a prepared term to a field, 0.0 to 1.0"""
    if not field_text.text:
        return 0.0

    if " " in term:
        if term in field_text.text:
            return 1.0
        return fuzz.partial_ratio(term, field_text.text) / 100.0

    if term in field_text.words:
        return 1.0
    if any(word.startswith(term) for word in field_text.words):
        return PREFIX_SIMILARITY
    if len(term) < MIN_FUZZY_TERM_LENGTH:
        return 0.0

    best = process.extractOne(term, field_text.words, scorer=fuzz.ratio)
    return best[1] / 100.0 if best else 0.0


@dataclass
class Match(Generic[T]):
    """A matched record with its score and the terms that hit"""
    record: T
    score: float
    matched_terms: List[str] = field(default_factory=list)


class FuzzyIndex(Generic[T]):
    """
    Weighted fuzzy index over one list of records.

    A field matches when 1 - similarity <= threshold. A record's distance is
    the product of its matched fields' distances, each raised to the field's
    share of the total weight; records with no matching field are dropped.
    """

    def __init__(self, records: Sequence[T], keys: Sequence[Tuple[str, float]], threshold: float):
        self.records = list(records)
        self.keys = list(keys)
        self.threshold = threshold
        self._total_weight = sum(w for _, w in self.keys) or 1.0
        self._docs = [
            [(weight, FieldText.of(getattr(record, name, ""))) for name, weight in self.keys]
            for record in self.records
        ]

    def __len__(self) -> int:
        return len(self.records)

    def subset(self, records: Sequence[T]) -> "FuzzyIndex[T]":
        """Ad-hoc index over a filtered candidate set with the same configuration"""
        return FuzzyIndex(records, self.keys, self.threshold)

    def _field_matches(self, similarity: float) -> bool:
        return 1.0 - similarity <= self.threshold + _EPSILON

    def search(self, terms: Terms, limit: Optional[int] = None) -> List[Match[T]]:
        prepared = prepare_terms(terms)
        if not prepared:
            return []

        matches: List[Match[T]] = []
        for record, fields in zip(self.records, self._docs):
            distance = 1.0
            matched_terms: List[str] = []
            for weight, field_text in fields:
                best = 0.0
                for term in prepared:
                    similarity = term_similarity(term, field_text)
                    if self._field_matches(similarity) and term not in matched_terms:
                        matched_terms.append(term)
                    best = max(best, similarity)
                if self._field_matches(best):
                    distance *= max(1.0 - best, MIN_DISTANCE) ** (weight / self._total_weight)

            if matched_terms:
                matches.append(Match(record, min(max(1.0 - distance, 0.0), 1.0), matched_terms))

        # Stable: equal scores keep corpus order
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:limit] if limit else matches


# ============================================================================
# Index set
# ============================================================================

def _parse_date(value: str) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _first_entity(entities: Sequence[Entity], *types: EntityType) -> Optional[Entity]:
    for entity in entities:
        if entity.type in types:
            return entity
    return None


@dataclass
class _Indexes:
    """Everything built from one corpus snapshot"""
    resources: List[Resource]
    people_by_id: Dict[str, Person]
    people: FuzzyIndex[Person]
    resources_index: FuzzyIndex[Resource]
    faqs: FuzzyIndex[FAQ]
    discussions: FuzzyIndex[Discussion]
    lop_sessions: FuzzyIndex[LopSession]
    pulse_signals: FuzzyIndex[PulseSignal]
    competitors: FuzzyIndex[Competitor]


class IndexSet:
    """
    Read-only fuzzy indexes over a corpus provider's snapshot.

    initialize() is idempotent and serialised by a lock; rebuild() builds a
    fresh set and swaps it in under the same lock so readers never see a
    partial build.
    """

    def __init__(
        self,
        provider: CorpusProvider,
        config: Optional[SearchConfig] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.provider = provider
        self.config = config or SearchConfig()
        self._now = now or datetime.now
        self._lock = threading.Lock()
        self._indexes: Optional[_Indexes] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def is_initialized(self) -> bool:
        return self._indexes is not None

    def initialize(self) -> None:
        """Build all indexes once. Provider errors propagate."""
        with self._lock:
            if self._indexes is not None:
                return
            self._indexes = self._build()

    def rebuild(self) -> None:
        """Rebuild all indexes from a fresh provider snapshot"""
        indexes = self._build()
        with self._lock:
            self._indexes = indexes

    def _build(self) -> _Indexes:
        snapshot: CorpusSnapshot = self.provider.snapshot()
        resources = [r for r in snapshot.resources if not r.is_archived]

        indexes = _Indexes(
            resources=resources,
            people_by_id={p.id: p for p in snapshot.people},
            people=FuzzyIndex(snapshot.people, PEOPLE_FIELDS, PEOPLE_THRESHOLD),
            resources_index=FuzzyIndex(resources, RESOURCE_FIELDS, RESOURCE_THRESHOLD),
            faqs=FuzzyIndex(snapshot.faqs, FAQ_FIELDS, FAQ_THRESHOLD),
            discussions=FuzzyIndex(snapshot.discussions, DISCUSSION_FIELDS, DISCUSSION_THRESHOLD),
            lop_sessions=FuzzyIndex(snapshot.lop_sessions, LOP_FIELDS, LOP_THRESHOLD),
            pulse_signals=FuzzyIndex(snapshot.pulse_signals, PULSE_FIELDS, PULSE_THRESHOLD),
            competitors=FuzzyIndex(snapshot.competitors, COMPETITOR_FIELDS, COMPETITOR_THRESHOLD),
        )
        logger.info(
            "Indexes built: %d people, %d resources, %d faqs, %d discussions, "
            "%d lop sessions, %d signals, %d competitors",
            len(indexes.people), len(indexes.resources_index), len(indexes.faqs),
            len(indexes.discussions), len(indexes.lop_sessions),
            len(indexes.pulse_signals), len(indexes.competitors),
        )
        return indexes

    def _require(self) -> _Indexes:
        indexes = self._indexes
        if indexes is None:
            raise IndexNotInitializedError("IndexSet.initialize() has not been called")
        return indexes

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _keep(self, matches: List[Match]) -> List[Match]:
        return [m for m in matches if m.score >= self.config.min_score_threshold]

    @staticmethod
    def _filtered_search(
        index: FuzzyIndex[T],
        candidates: Optional[List[T]],
        terms: Terms,
        limit: int,
        default_term: str,
    ) -> List[Match[T]]:
        if candidates is None or len(candidates) >= len(index):
            return index.search(terms, limit)
        if not candidates:
            return []
        prepared = prepare_terms(terms)
        return index.subset(candidates).search(prepared or [default_term], limit)

    # ------------------------------------------------------------------
    # Per-category search
    # ------------------------------------------------------------------

    def search_people(self, terms: Terms, entities: Sequence[Entity] = (), limit: int = 5) -> List[PersonResult]:
        idx = self._require()

        candidates = None
        team = _first_entity(entities, EntityType.TEAM)
        if team:
            candidates = [p for p in idx.people.records if team.normalized_value in p.team.lower()]

        matches = self._filtered_search(idx.people, candidates, terms, limit, "person")
        return [_person_result(m) for m in self._keep(matches)]

    def search_resources(self, terms: Terms, entities: Sequence[Entity] = (), limit: int = 5) -> List[ResourceResult]:
        idx = self._require()

        candidates = None
        pillar = _first_entity(entities, EntityType.PILLAR)
        if pillar:
            candidates = [r for r in idx.resources if r.pillar == pillar.normalized_value]

        resource_type = _first_entity(entities, EntityType.RESOURCE_TYPE)
        if resource_type:
            value = resource_type.normalized_value
            pool = candidates if candidates is not None else idx.resources
            candidates = [
                r for r in pool
                if r.content_type == value or value in r.category.lower()
            ]

        matches = self._filtered_search(idx.resources_index, candidates, terms, limit, "resource")
        return [_resource_result(m) for m in self._keep(matches)]

    def search_faqs(self, terms: Terms, limit: int = 5) -> List[FAQResult]:
        idx = self._require()
        return [_faq_result(m) for m in self._keep(idx.faqs.search(terms, limit))]

    def search_discussions(self, terms: Terms, limit: int = 5) -> List[DiscussionResult]:
        idx = self._require()
        return [_discussion_result(m) for m in self._keep(idx.discussions.search(terms, limit))]

    def search_lop_sessions(self, terms: Terms, entities: Sequence[Entity] = (), limit: int = 5) -> List[LopSessionResult]:
        """
        Search LOP sessions, narrowed by any DATE or TIME_RANGE entity.

        "next occurrence" with no other content terms skips fuzzy matching and
        returns upcoming sessions soonest first.
        """
        idx = self._require()
        sessions = idx.lop_sessions.records

        temporal = _first_entity(entities, EntityType.TIME_RANGE, EntityType.DATE)
        candidates = None
        if temporal:
            candidates = self._filter_sessions(sessions, temporal.normalized_value)

        if temporal and temporal.normalized_value == NEXT_OCCURRENCE and not self._content_terms(terms):
            upcoming = sorted(candidates, key=lambda s: _parse_date(s.date) or date.max)
            matches = [Match(s, NEXT_OCCURRENCE_SCORE, []) for s in upcoming[:limit]]
        else:
            matches = self._keep(self._filtered_search(idx.lop_sessions, candidates, terms, limit, "session"))

        return [_lop_result(m, idx.people_by_id) for m in matches]

    def _filter_sessions(self, sessions: List[LopSession], value: str) -> Optional[List[LopSession]]:
        today = self._now().date()

        if value in (FUTURE, NEXT_OCCURRENCE):
            return [s for s in sessions if (_parse_date(s.date) or date.min) >= today]

        if "/" in value:
            start, end = (_parse_date(part) for part in value.split("/", 1))
            if start is None or end is None:
                return None
            return [s for s in sessions if start <= (_parse_date(s.date) or date.min) <= end]

        target = _parse_date(value)
        if target is None:
            return None
        return [s for s in sessions if _parse_date(s.date) == target]

    @staticmethod
    def _content_terms(terms: Terms) -> List[str]:
        """Terms left once temporal and LOP vocabulary is removed"""
        return [
            t for t in prepare_terms(terms)
            if t not in _LOP_TERMS and not any(w in _LOP_TEMPORAL_WORDS for w in t.split())
        ]

    def search_tools(self, terms: Terms, limit: int = 5) -> List[ToolResult]:
        """Tools are library resources typed as tools or filed under tools-access"""
        idx = self._require()
        tools = [r for r in idx.resources if r.content_type == "tool" or r.pillar == "tools-access"]
        index = FuzzyIndex(tools, TOOL_FIELDS, TOOL_THRESHOLD)
        return [_tool_result(m) for m in self._keep(index.search(terms, limit))]

    def search_pulse_signals(self, terms: Terms, limit: int = 5) -> List[PulseSignalResult]:
        idx = self._require()
        return [_pulse_result(m) for m in self._keep(idx.pulse_signals.search(terms, limit))]

    def search_competitors(self, terms: Terms, limit: int = 5) -> List[CompetitorResult]:
        idx = self._require()
        return [_competitor_result(m) for m in self._keep(idx.competitors.search(terms, limit))]

    def search_all(self, terms: Terms, entities: Sequence[Entity] = (), limit_per_type: int = 5) -> SearchResults:
        """Search every category"""
        return SearchResults(
            people=self.search_people(terms, entities, limit_per_type),
            tools=self.search_tools(terms, limit_per_type),
            faqs=self.search_faqs(terms, limit_per_type),
            resources=self.search_resources(terms, entities, limit_per_type),
            discussions=self.search_discussions(terms, limit_per_type),
            lop_sessions=self.search_lop_sessions(terms, entities, limit_per_type),
            pulse_signals=self.search_pulse_signals(terms, limit_per_type),
            competitors=self.search_competitors(terms, limit_per_type),
        )


# ============================================================================
# Record -> result conversion
# ============================================================================

def _person_result(m: Match[Person]) -> PersonResult:
    p = m.record
    return PersonResult(
        id=p.id,
        score=m.score,
        matched_terms=m.matched_terms,
        name=p.display_name,
        email=p.email,
        title=p.title,
        team=p.team,
        location=p.location,
        avatar_url=p.avatar_url,
        expertise_areas=list(p.expertise_areas),
        teams_deep_link=p.teams_deep_link,
        slack_handle=p.slack_handle,
    )


def _resource_result(m: Match[Resource]) -> ResourceResult:
    r = m.record
    return ResourceResult(
        id=r.id,
        score=m.score,
        matched_terms=m.matched_terms,
        title=r.title,
        description=r.description,
        url=r.url,
        pillar=r.pillar,
        category=r.category,
        resource_type=r.content_type,
        tags=list(r.tags),
        author_id=r.owner,
        view_count=r.view_count,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


def _tool_result(m: Match[Resource]) -> ToolResult:
    r = m.record
    return ToolResult(
        id=r.id,
        score=m.score,
        matched_terms=m.matched_terms,
        name=r.title,
        description=r.description,
        category=r.category,
        access_url=r.url,
        request_url=r.request_url,
        guide_url=r.guide_url,
        status=r.status,
    )


def _faq_result(m: Match[FAQ]) -> FAQResult:
    f = m.record
    return FAQResult(
        id=f.id,
        score=m.score,
        matched_terms=m.matched_terms,
        question=f.question,
        answer=f.answer or f.answer_summary,
        answer_summary=f.answer_summary,
        category=f.category,
        tags=list(f.tags),
        steps=f.step_texts,
        view_count=f.view_count,
        helpful_count=f.helpful_count,
        expert_id=f.expert_ids[0] if f.expert_ids else None,
        related_resource_ids=list(f.related_resource_ids),
    )


def _discussion_result(m: Match[Discussion]) -> DiscussionResult:
    d = m.record
    return DiscussionResult(
        id=d.id,
        score=m.score,
        matched_terms=m.matched_terms,
        title=d.title,
        body_preview=d.body[:150],
        author_name=d.author_name,
        author_id=d.author_id,
        status=d.status,
        reply_count=d.reply_count,
        upvote_count=d.upvote_count,
        has_accepted_answer=d.accepted_reply_id is not None,
        created_at=d.created_at,
        tags=list(d.tags),
    )


def _lop_result(m: Match[LopSession], people_by_id: Dict[str, Person]) -> LopSessionResult:
    s = m.record
    speaker = next((people_by_id[i] for i in s.speaker_ids if i in people_by_id), None)
    return LopSessionResult(
        id=s.id,
        score=m.score,
        matched_terms=m.matched_terms,
        title=s.title,
        description=s.description,
        speaker_name=speaker.display_name if speaker else "Unknown Speaker",
        speaker_id=s.speaker_ids[0] if s.speaker_ids else "",
        session_date=s.date,
        topics=list(s.tags),
        video_url=s.recording_url,
        slides_url=s.slides_url,
    )


def _pulse_result(m: Match[PulseSignal]) -> PulseSignalResult:
    s = m.record
    return PulseSignalResult(
        id=s.id,
        score=m.score,
        matched_terms=m.matched_terms,
        title=s.title,
        summary=s.summary,
        domain=s.domain,
        priority=s.priority,
        source=s.source,
        published_at=s.published_at,
        companies=list(s.companies),
        is_read=s.is_read,
    )


def _competitor_result(m: Match[Competitor]) -> CompetitorResult:
    c = m.record
    return CompetitorResult(
        id=c.id,
        score=m.score,
        matched_terms=m.matched_terms,
        name=c.name,
        category=c.category,
        tier=c.tier,
        description=c.description or f"{c.category} competitor",
        signal_count=c.signal_count,
        watchlisted=c.watchlisted,
        markets=list(c.markets),
    )
