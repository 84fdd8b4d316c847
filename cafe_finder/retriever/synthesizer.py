"""
Answer Synthesizer

Decides whether the top-ranked result is strong enough to answer the query
directly, and with which template.

Gating, in order:
1. Synthesis disabled -> no answer; no results at all -> zero-results answer
2. Top score below MIN_ANSWER_SCORE (and not EXPLAIN_CONCEPT) -> no answer
3. The primary intent's template, if the top result is the type it expects
4. Top score above FALLBACK_SCORE -> template for the result type alone
"""

import logging
from typing import Callable, Dict, Optional, Tuple

from ..common.config import SearchConfig
from ..common.schemas.query import IntentType, Query
from ..common.schemas.results import (
    ResultType,
    SearchResult,
    SearchResults,
    SynthesizedAnswer,
)
from .templates import (
    concept_answer,
    faq_answer,
    lop_answer,
    person_answer,
    tool_answer,
    zero_results_answer,
)

logger = logging.getLogger("cafe_finder.retriever.synthesizer")

MIN_ANSWER_SCORE = 0.6
FALLBACK_SCORE = 0.9

Template = Callable[[Query, SearchResult], SynthesizedAnswer]


def _faq(query: Query, result: SearchResult) -> SynthesizedAnswer:
    return faq_answer(result)


# Intent -> (expected top result type, template); every intent appears
INTENT_TEMPLATES: Dict[IntentType, Optional[Tuple[ResultType, Template]]] = {
    IntentType.FIND_PERSON: (ResultType.PERSON, person_answer),
    IntentType.CONTACT_EXPERT: (ResultType.PERSON, person_answer),
    IntentType.FIND_TEAM: (ResultType.PERSON, person_answer),
    IntentType.FIND_TOOL: (ResultType.TOOL, tool_answer),
    IntentType.TOOL_ACCESS: (ResultType.TOOL, tool_answer),
    IntentType.FIND_FAQ: (ResultType.FAQ, _faq),
    IntentType.EXPLAIN_CONCEPT: (ResultType.FAQ, concept_answer),
    IntentType.LEARN_PROCESS: (ResultType.FAQ, concept_answer),
    IntentType.LOP_NEXT: (ResultType.LOP_SESSION, lop_answer),
    IntentType.LOP_FIND: (ResultType.LOP_SESSION, lop_answer),
    IntentType.LOP_SPEAKER: (ResultType.LOP_SESSION, lop_answer),
    IntentType.FIND_RESOURCE: None,
    IntentType.START_DISCUSSION: None,
    IntentType.NAVIGATE: None,
    IntentType.COMPARE: None,
    IntentType.BROWSE: None,
    IntentType.RECENT: None,
    IntentType.POPULAR: None,
    IntentType.GENERAL_SEARCH: None,
}

# Result type -> template used for very high-confidence matches
TYPE_TEMPLATES: Dict[ResultType, Optional[Template]] = {
    ResultType.PERSON: person_answer,
    ResultType.TOOL: tool_answer,
    ResultType.FAQ: _faq,
    ResultType.LOP_SESSION: lop_answer,
    ResultType.RESOURCE: None,
    ResultType.DISCUSSION: None,
    ResultType.PULSE_SIGNAL: None,
    ResultType.COMPETITOR: None,
}


def synthesize(
    query: Query,
    results: SearchResults,
    config: Optional[SearchConfig] = None,
) -> Optional[SynthesizedAnswer]:
    """
    Synthesize a direct answer from reranked results.

    Args:
        query: Fully parsed query
        results: Reranked results
        config: Search configuration (answer_synthesis switch)

    Returns:
        SynthesizedAnswer, or None when no answer should be shown
    """
    config = config or SearchConfig()
    if not config.answer_synthesis:
        return None

    top = results.top_result()
    if results.total_count == 0 or top is None:
        return zero_results_answer(query)

    intent = query.intent.primary
    if top.score < MIN_ANSWER_SCORE and intent != IntentType.EXPLAIN_CONCEPT:
        logger.debug("Top score %.2f too low to answer (%s)", top.score, intent.value)
        return None

    route = INTENT_TEMPLATES[intent]
    if route is not None:
        expected_type, template = route
        if top.type == expected_type:
            return template(query, top)

    if top.score > FALLBACK_SCORE:
        template = TYPE_TEMPLATES[top.type]
        if template is not None:
            return template(query, top)

    return None
