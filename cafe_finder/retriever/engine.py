"""
Search Engine

Orchestrates the pipeline for one request:
sanitise -> tokenise/expand -> entities -> intent -> search -> rerank ->
synthesize -> assemble.

search() never raises: invalid input, initialisation failures and stage
failures all come back as a well-formed, empty SearchResponse.
"""

import logging
import time
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, List, Optional

from ..common.config import SearchConfig
from ..common.schemas.query import EntityType, IntentType, Query, SearchContext
from ..common.schemas.results import (
    QuickSearchResults,
    SearchMetrics,
    SearchResponse,
    SearchResults,
)
from ..common.text import MAX_QUERY_LENGTH
from ..providers.base import CorpusProvider
from .entity_extractor import EntityExtractor, get_entities_by_type
from .intent_classifier import IntentClassifier, trusted_intent
from .query_processor import QueryProcessor, empty_query
from .reranker import rerank
from .search_index import IndexSet
from .synthesizer import synthesize

logger = logging.getLogger("cafe_finder.retriever.engine")

DEFAULT_SUGGESTIONS = ["Browse all resources", "Start a discussion"]
FAILURE_SUGGESTIONS = ["Try a different search", "Browse all resources"]


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


class SearchEngine:
    """
    Query understanding and answer retrieval over a corpus provider.

    The engine owns its IndexSet; call initialize() up front, or let the
    first search() do it.

    Args:
        provider: Source of corpus records
        config: Search configuration
        now: Clock for relative dates (tests pin it)
    """

    def __init__(
        self,
        provider: CorpusProvider,
        config: Optional[SearchConfig] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config or SearchConfig()
        self.index = IndexSet(provider, self.config, now=now)
        self.processor = QueryProcessor()
        self.extractor = EntityExtractor(now=now)
        self.classifier = IntentClassifier()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        if self.index.is_initialized():
            return
        logger.info("Initializing search engine...")
        self.index.initialize()
        logger.info("Search engine ready")

    def is_initialized(self) -> bool:
        return self.index.is_initialized()

    def rebuild(self) -> None:
        """Re-read the corpus and swap in fresh indexes"""
        logger.info("Rebuilding search indexes")
        self.index.rebuild()

    def _ensure_initialized(self) -> bool:
        if self.index.is_initialized():
            return True
        try:
            self.initialize()
        except Exception:
            logger.exception("Search engine initialization failed")
            return False
        return True

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, raw: Any, context: Optional[SearchContext] = None) -> SearchResponse:
        """
        Run the full pipeline for one query.

        Args:
            raw: User query; non-strings and blank input give an empty response
            context: Optional page context (carried on the query, not scored)

        Returns:
            SearchResponse; empty with suggestions on any failure
        """
        start = time.perf_counter()

        if not self._ensure_initialized():
            return self._empty_response(raw, start, context, failed=True)

        if not isinstance(raw, str) or not raw.strip():
            return self._empty_response("", start, context)

        try:
            stage = time.perf_counter()
            processed = self.processor.process(raw, context)
            if processed.is_empty:
                return self._empty_response(raw, start, context)

            query = replace(
                processed,
                entities=self.extractor.extract(processed.raw, processed.tokens),
                intent=self.classifier.classify(processed.raw, processed.tokens),
            )
            query_processing_ms = _elapsed_ms(stage)

            stage = time.perf_counter()
            terms = self._search_terms(query)
            if not terms:
                return self._empty_response(raw, start, context)
            raw_results = self.index.search_all(terms, query.entities, self.config.max_results_per_type)
            search_execution_ms = _elapsed_ms(stage)

            results = rerank(raw_results, query)

            stage = time.perf_counter()
            answer = synthesize(query, results, self.config)
            answer_synthesis_ms = _elapsed_ms(stage)

            metrics = SearchMetrics(
                total_time_ms=_elapsed_ms(start),
                query_processing_ms=query_processing_ms,
                search_execution_ms=search_execution_ms,
                answer_synthesis_ms=answer_synthesis_ms,
            )
            response = SearchResponse(
                query=query,
                results=results,
                metrics=metrics,
                answer=answer,
                suggestions=self._suggestions(query, results),
            )

            logger.debug(
                "Search %r -> %d results in %.1fms (%s)",
                query.raw[:50], response.total_count, metrics.total_time_ms,
                query.intent.primary.value,
            )
            return response

        except Exception:
            logger.exception("Search failed for %r", raw[:50])
            return self._empty_response(raw, start, context, failed=True)

    def quick_search(self, raw: Any, limit: Optional[int] = None) -> QuickSearchResults:
        """People, FAQs and resources only; no reranking or synthesis"""
        limit = limit or self.config.quick_search_limit
        if not isinstance(raw, str) or not raw.strip():
            return QuickSearchResults()
        if not self._ensure_initialized():
            return QuickSearchResults()

        try:
            query = self.processor.process(raw)
            terms = query.tokens or ([query.normalized] if query.normalized else [])
            if not terms:
                return QuickSearchResults()
            return QuickSearchResults(
                people=self.index.search_people(terms, limit=limit),
                faqs=self.index.search_faqs(terms, limit=limit),
                resources=self.index.search_resources(terms, limit=limit),
            )
        except Exception:
            logger.exception("Quick search failed for %r", raw[:50])
            return QuickSearchResults()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def trusted_intent(self, query: Query) -> IntentType:
        """Primary intent at or above the configured confidence, else GENERAL_SEARCH"""
        return trusted_intent(query.intent, threshold=self.config.intent_confidence_threshold)

    def _search_terms(self, query: Query) -> List[str]:
        """Expanded tokens, plain tokens when expansion is off, else the whole query"""
        if self.config.synonym_expansion and query.expanded_tokens:
            return list(query.expanded_tokens)
        if query.tokens:
            return list(query.tokens)
        return [query.normalized] if query.normalized.strip() else []

    @staticmethod
    def _suggestions(query: Query, results: SearchResults) -> List[str]:
        if results.total_count > 0:
            return []

        suggestions: List[str] = []
        topics = get_entities_by_type(query.entities, EntityType.TOPIC)
        if topics:
            topic = topics[0].normalized_value
            suggestions.extend([f"{topic} guide", f"{topic} faq", f"{topic} expert"])
        suggestions.extend(DEFAULT_SUGGESTIONS)
        return suggestions

    def _empty_response(
        self,
        raw: Any,
        start: float,
        context: Optional[SearchContext] = None,
        failed: bool = False,
    ) -> SearchResponse:
        raw_text = raw[:MAX_QUERY_LENGTH] if isinstance(raw, str) else ""
        query = empty_query(raw_text, context)
        results = SearchResults()
        return SearchResponse(
            query=query,
            results=results,
            metrics=SearchMetrics(total_time_ms=_elapsed_ms(start)),
            answer=None,
            suggestions=list(FAILURE_SUGGESTIONS) if failed else self._suggestions(query, results),
        )
