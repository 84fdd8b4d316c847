"""
Reranker

Pure post-search score adjustment. Order of application:
1. Intent boost for the category the primary intent is after
2. Entity boosts for person and tool results whose name contains the entity
3. Re-sort every category by score, descending

Inputs are never modified; boosted results are new objects.
"""

from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple, TypeVar

from ..common.schemas.query import EntityType, IntentType, Query
from ..common.schemas.results import SearchResult, SearchResults

R = TypeVar("R", bound=SearchResult)

STRONG_BOOST = 1.3
MILD_BOOST = 1.2
ENTITY_BOOST = 1.5

# Every intent appears here; None means no category boost
INTENT_BOOSTS: Dict[IntentType, Optional[Tuple[str, float]]] = {
    IntentType.FIND_PERSON: ("people", STRONG_BOOST),
    IntentType.CONTACT_EXPERT: ("people", STRONG_BOOST),
    IntentType.FIND_TOOL: ("tools", STRONG_BOOST),
    IntentType.TOOL_ACCESS: ("tools", STRONG_BOOST),
    IntentType.FIND_FAQ: ("faqs", STRONG_BOOST),
    IntentType.EXPLAIN_CONCEPT: ("faqs", STRONG_BOOST),
    IntentType.LEARN_PROCESS: ("faqs", STRONG_BOOST),
    IntentType.FIND_RESOURCE: ("resources", MILD_BOOST),
    IntentType.BROWSE: ("resources", MILD_BOOST),
    IntentType.START_DISCUSSION: ("discussions", MILD_BOOST),
    IntentType.FIND_TEAM: None,
    IntentType.NAVIGATE: None,
    IntentType.COMPARE: None,
    IntentType.LOP_NEXT: None,
    IntentType.LOP_FIND: None,
    IntentType.LOP_SPEAKER: None,
    IntentType.RECENT: None,
    IntentType.POPULAR: None,
    IntentType.GENERAL_SEARCH: None,
}


# Entity type -> category whose result label is compared to the entity
ENTITY_TARGETS: Dict[EntityType, str] = {
    EntityType.PERSON: "people",
    EntityType.TOOL: "tools",
}


def boost(results: Sequence[R], factor: float) -> List[R]:
    """Multiply every score by factor, clamped to 1.0"""
    return [replace(r, score=min(r.score * factor, 1.0)) for r in results]


def _boost_named(results: Sequence[R], needle: str, factor: float) -> List[R]:
    return [
        replace(r, score=min(r.score * factor, 1.0)) if needle in r.label.lower() else r
        for r in results
    ]


def rerank(results: SearchResults, query: Query) -> SearchResults:
    """
    Re-rank results for a query.

    Args:
        results: Raw search results
        query: Fully parsed query (entities and intent attached)

    Returns:
        New SearchResults with boosted scores and each category re-sorted
    """
    categories: Dict[str, List[SearchResult]] = {
        name: list(getattr(results, name)) for name in SearchResults.categories()
    }

    target = INTENT_BOOSTS[query.intent.primary]
    if target is not None:
        name, factor = target
        categories[name] = boost(categories[name], factor)

    for entity in query.entities:
        name = ENTITY_TARGETS.get(entity.type)
        if name is None or not entity.normalized_value:
            continue
        categories[name] = _boost_named(categories[name], entity.normalized_value, ENTITY_BOOST)

    return SearchResults(**{
        name: sorted(items, key=lambda r: r.score, reverse=True)
        for name, items in categories.items()
    })
