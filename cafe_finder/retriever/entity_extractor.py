"""
Entity Extractor

Recognises typed entities (tools, topics, teams, resource types, actions,
pillars, dates and time ranges, person names) in the query text.

Extraction runs in priority order and the first claim on a character span
wins, so the returned entities never overlap:
1. Multi-word dictionary aliases ("coordination of benefits")
2. Single dictionary tokens ("jira")
3. Temporal phrases ("next lop", "tomorrow", "Q3")
4. Capitalised person names ("Jane Doe")

Temporal phrases are recognised before step 2 runs so that a phrase like
"next lop" is not broken up by the single-token topic "lop".
"""

import logging
import re
from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..common.schemas.query import Entity, EntityType, Position
from ..common.text import fold_text, normalize_token
from .synonyms import (
    ACTION_KEYWORDS,
    PILLAR_KEYWORDS,
    RESOURCE_TYPE_KEYWORDS,
    TEAM_ENTITIES,
    TOOL_ENTITIES,
    TOOL_SYNONYMS,
    TOPIC_ENTITIES,
    TOPIC_SYNONYMS,
)

logger = logging.getLogger("cafe_finder.retriever.entity_extractor")

# Temporal markers understood by the LOP search
NEXT_OCCURRENCE = "next_occurrence"
FUTURE = "future"

# Single-token dictionaries in lookup order: (table, type, confidence)
_TOKEN_DICTIONARIES = [
    (TOOL_ENTITIES, EntityType.TOOL, 0.95),
    (TOPIC_ENTITIES, EntityType.TOPIC, 0.90),
    (TEAM_ENTITIES, EntityType.TEAM, 0.85),
    (RESOURCE_TYPE_KEYWORDS, EntityType.RESOURCE_TYPE, 0.90),
    (ACTION_KEYWORDS, EntityType.ACTION, 0.85),
    (PILLAR_KEYWORDS, EntityType.PILLAR, 0.90),
]

PERSON_CONFIDENCE = 0.70

_NAME_PATTERN = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+){0,2})\b")

# Capitalised words that start sentences, not names
_NAME_STOPLIST = frozenset({
    "how", "what", "when", "where", "why", "which", "who", "whom", "whose",
    "the", "this", "that", "these", "those", "a", "an", "and", "or",
    "is", "are", "was", "can", "could", "does", "do", "did", "will", "would", "should",
    "i", "my", "me", "we", "our", "you", "your", "please", "tell", "explain",
    "show", "open", "go", "find", "get", "list", "browse", "take", "navigate",
    "next", "upcoming", "future", "today", "tomorrow", "yesterday",
    "last", "recent", "new", "latest", "top", "popular",
})

_UNITS = r"(week|month|quarter|year)s?"

_RELATIVE_DAY = re.compile(r"\b(today|tomorrow|yesterday)\b", re.IGNORECASE)
_NEXT_SESSION = re.compile(
    r"\b(next|upcoming)\s+(lops?|sessions?|meetings?)\b", re.IGNORECASE
)
_FUTURE_SESSIONS = re.compile(r"\bfuture\s+(lops?|sessions?|meetings?)\b", re.IGNORECASE)
_NEXT_UNIT = re.compile(r"\bnext\s+" + _UNITS + r"\b", re.IGNORECASE)
_ROLLING_UNIT = re.compile(r"\b(upcoming|future)\s+" + _UNITS + r"\b", re.IGNORECASE)
_THIS_LAST_UNIT = re.compile(r"\b(this|last)\s+" + _UNITS + r"\b", re.IGNORECASE)
_QUARTER = re.compile(r"\bq([1-4])(?:\s+(\d{4}))?\b", re.IGNORECASE)


# ============================================================================
# Date helpers
# ============================================================================

def _iso_range(start: date, end: date) -> str:
    return f"{start.isoformat()}/{end.isoformat()}"


def _quarter_bounds(year: int, quarter: int) -> Tuple[date, date]:
    first_month = 3 * (quarter - 1) + 1
    last_month = first_month + 2
    return date(year, first_month, 1), date(year, last_month, monthrange(year, last_month)[1])


def _shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _unit_bounds(today: date, unit: str, offset: int) -> Tuple[date, date]:
    """Calendar bounds of the unit containing today, shifted by offset units"""
    if unit == "week":
        start = today - timedelta(days=today.weekday()) + timedelta(weeks=offset)
        return start, start + timedelta(days=6)
    if unit == "month":
        year, month = _shift_month(today.year, today.month, offset)
        return date(year, month, 1), date(year, month, monthrange(year, month)[1])
    if unit == "quarter":
        quarter_index = today.year * 4 + (today.month - 1) // 3 + offset
        return _quarter_bounds(quarter_index // 4, quarter_index % 4 + 1)
    year = today.year + offset
    return date(year, 1, 1), date(year, 12, 31)


def _rolling_end(today: date, unit: str) -> date:
    if unit == "week":
        return today + timedelta(weeks=1)
    if unit == "month":
        year, month = _shift_month(today.year, today.month, 1)
        return date(year, month, min(today.day, monthrange(year, month)[1]))
    if unit == "quarter":
        year, month = _shift_month(today.year, today.month, 3)
        return date(year, month, min(today.day, monthrange(year, month)[1]))
    return today + timedelta(days=365)


# ============================================================================
# Extractor
# ============================================================================

class EntityExtractor:
    """
    Rule-based named entity recognition over the raw query.

    Args:
        now: Clock used to resolve relative dates; defaults to datetime.now
    """

    def __init__(self, now: Optional[Callable[[], datetime]] = None):
        self._now = now or datetime.now

    def extract(self, query: str, tokens: Sequence[str]) -> List[Entity]:
        """
        Extract entities from a query.

        Args:
            query: Sanitised query text (entity positions index into it)
            tokens: Normalised tokens from the query processor

        Returns:
            Non-overlapping entities ordered by start position
        """
        if not query:
            return []

        entities: List[Entity] = []
        folded = fold_text(query)

        for entity in self._multi_word_entities(folded, query):
            self._claim(entities, entity)

        temporal = self._temporal_entities(query)
        reserved = [e.position for e in temporal]

        for entity in self._token_entities(folded, query, tokens, entities, reserved):
            self._claim(entities, entity)

        for entity in temporal:
            self._claim(entities, entity)

        for entity in self._person_entities(query):
            self._claim(entities, entity)

        entities.sort(key=lambda e: e.position.start)
        return entities

    @staticmethod
    def _claim(entities: List[Entity], candidate: Entity) -> bool:
        if any(candidate.position.overlaps(e.position) for e in entities):
            return False
        entities.append(candidate)
        return True

    # ------------------------------------------------------------------
    # Step 1: multi-word aliases
    # ------------------------------------------------------------------

    @staticmethod
    def _multi_word_aliases() -> Iterable[Tuple[str, str, EntityType, float]]:
        for tool, aliases in TOOL_SYNONYMS.items():
            for alias in [tool] + aliases:
                if " " in alias:
                    yield fold_text(alias), tool, EntityType.TOOL, 0.95
        for topic, aliases in TOPIC_SYNONYMS.items():
            for alias in [topic] + aliases:
                if " " in alias:
                    yield fold_text(alias), topic, EntityType.TOPIC, 0.90
        for phrase, pillar in PILLAR_KEYWORDS.items():
            if " " in phrase:
                yield fold_text(phrase), pillar, EntityType.PILLAR, 0.90

    def _multi_word_entities(self, folded: str, query: str) -> List[Entity]:
        candidates = []
        for alias, canonical, entity_type, confidence in self._multi_word_aliases():
            for match in re.finditer(r"\b" + re.escape(alias) + r"\b", folded):
                candidates.append(Entity(
                    type=entity_type,
                    value=query[match.start():match.end()],
                    normalized_value=canonical,
                    confidence=confidence,
                    position=Position(match.start(), match.end()),
                ))
        # Longer aliases claim first ("revenue cycle management" over "revenue cycle")
        candidates.sort(key=lambda e: (-(e.position.end - e.position.start), e.position.start))
        return candidates

    # ------------------------------------------------------------------
    # Step 2: single tokens
    # ------------------------------------------------------------------

    def _token_entities(
        self,
        folded: str,
        query: str,
        tokens: Sequence[str],
        claimed: List[Entity],
        reserved: List[Position],
    ) -> List[Entity]:
        found: List[Entity] = []
        cursor = 0
        for token in tokens:
            if " " in token:
                # Quoted phrases were handled as multi-word text
                continue
            start = folded.find(token.lower(), cursor)
            if start == -1:
                continue
            position = Position(start, start + len(token))
            cursor = position.end

            if any(position.overlaps(e.position) for e in claimed):
                continue
            if any(position.overlaps(r) for r in reserved):
                continue

            entity = self._lookup_token(query[position.start:position.end], position)
            if entity:
                found.append(entity)
        return found

    @staticmethod
    def _lookup_token(token: str, position: Position) -> Optional[Entity]:
        normalized = normalize_token(token)
        if not normalized:
            return None
        for table, entity_type, confidence in _TOKEN_DICTIONARIES:
            canonical = table.get(normalized)
            if canonical:
                return Entity(
                    type=entity_type,
                    value=token,
                    normalized_value=canonical,
                    confidence=confidence,
                    position=position,
                )
        return None

    # ------------------------------------------------------------------
    # Step 3: temporal phrases
    # ------------------------------------------------------------------

    def _temporal_entities(self, query: str) -> List[Entity]:
        today = self._now().date()
        found: List[Entity] = []

        def _add(match: re.Match, entity_type: EntityType, value: str, confidence: float) -> None:
            position = Position(match.start(), match.end())
            if any(position.overlaps(e.position) for e in found):
                return
            found.append(Entity(
                type=entity_type,
                value=match.group(0),
                normalized_value=value,
                confidence=confidence,
                position=position,
            ))

        for match in _NEXT_SESSION.finditer(query):
            _add(match, EntityType.TIME_RANGE, NEXT_OCCURRENCE, 0.95)

        for match in _FUTURE_SESSIONS.finditer(query):
            _add(match, EntityType.TIME_RANGE, FUTURE, 0.90)

        for match in _RELATIVE_DAY.finditer(query):
            word = match.group(1).lower()
            offset = {"today": 0, "tomorrow": 1, "yesterday": -1}[word]
            _add(match, EntityType.DATE, (today + timedelta(days=offset)).isoformat(), 0.95)

        for match in _NEXT_UNIT.finditer(query):
            start, end = _unit_bounds(today, match.group(1).lower(), 1)
            _add(match, EntityType.TIME_RANGE, _iso_range(start, end), 0.90)

        for match in _ROLLING_UNIT.finditer(query):
            end = _rolling_end(today, match.group(2).lower())
            _add(match, EntityType.TIME_RANGE, _iso_range(today, end), 0.90)

        for match in _THIS_LAST_UNIT.finditer(query):
            offset = 0 if match.group(1).lower() == "this" else -1
            start, end = _unit_bounds(today, match.group(2).lower(), offset)
            _add(match, EntityType.TIME_RANGE, _iso_range(start, end), 0.90)

        for match in _QUARTER.finditer(query):
            year = int(match.group(2)) if match.group(2) else today.year
            start, end = _quarter_bounds(year, int(match.group(1)))
            _add(match, EntityType.TIME_RANGE, _iso_range(start, end), 0.90)

        return found

    # ------------------------------------------------------------------
    # Step 4: person names
    # ------------------------------------------------------------------

    @staticmethod
    def _person_entities(query: str) -> List[Entity]:
        found: List[Entity] = []
        for match in _NAME_PATTERN.finditer(query):
            start = match.start(1)
            words = match.group(1).split()

            # "Where Jane Doe" -> "Jane Doe"
            while words and words[0].lower() in _NAME_STOPLIST:
                start = query.index(words[1], start + len(words[0])) if len(words) > 1 else start
                words = words[1:]
            if not words:
                continue

            name = query[start:match.end(1)]
            found.append(Entity(
                type=EntityType.PERSON,
                value=name,
                normalized_value=" ".join(words).lower(),
                confidence=PERSON_CONFIDENCE,
                position=Position(start, match.end(1)),
            ))
        return found


# ============================================================================
# Helpers
# ============================================================================

def get_entities_by_type(entities: Sequence[Entity], entity_type: EntityType) -> List[Entity]:
    return [e for e in entities if e.type == entity_type]


def has_entity_type(entities: Sequence[Entity], entity_type: EntityType) -> bool:
    return any(e.type == entity_type for e in entities)


def get_best_entity(entities: Sequence[Entity], entity_type: EntityType) -> Optional[Entity]:
    """Highest-confidence entity of a type; earliest wins ties"""
    best: Optional[Entity] = None
    for entity in entities:
        if entity.type == entity_type and (best is None or entity.confidence > best.confidence):
            best = entity
    return best
