"""
End-to-end tests for SearchEngine

Runs the whole pipeline against the fixture corpus with a pinned clock.
"""

import json
import pytest
from unittest.mock import patch


class TestSearchScenarios:
    """Representative queries through the full pipeline"""

    def test_exact_tool_match(self, engine):
        from cafe_finder.common.schemas.query import EntityType, IntentType
        from cafe_finder.common.schemas.results import AnswerType, ResultType

        response = engine.search("jira")

        assert response.query.intent.primary == IntentType.FIND_TOOL
        assert response.query.entities[0].type == EntityType.TOOL
        assert response.results.tools[0].name == "Jira"
        assert response.results.top_result().type == ResultType.TOOL
        assert response.answer.type == AnswerType.TOOL_CARD
        assert response.answer.actions[0].url == "https://jira.example.com"
        assert response.suggestions == []

    def test_tool_score_is_boosted_above_raw_match(self, engine):
        response = engine.search("jira")
        raw = engine.index.search_tools(response.query.expanded_tokens)

        assert raw[0].name == "Jira"
        assert response.results.tools[0].id == raw[0].id
        assert response.results.tools[0].score > raw[0].score

    def test_zero_results(self, engine):
        from cafe_finder.common.schemas.results import AnswerType
        from cafe_finder.retriever.engine import DEFAULT_SUGGESTIONS

        response = engine.search("zzqqxxnonsense999")

        assert response.total_count == 0
        assert response.answer.type == AnswerType.ZERO_RESULTS
        assert response.suggestions == DEFAULT_SUGGESTIONS

    def test_next_lop(self, engine):
        from cafe_finder.common.schemas.query import EntityType, IntentType
        from cafe_finder.common.schemas.results import AnswerType
        from cafe_finder.retriever.entity_extractor import NEXT_OCCURRENCE

        response = engine.search("When is the next LOP?")

        assert response.query.intent.primary == IntentType.LOP_NEXT
        temporal = [e for e in response.query.entities if e.type == EntityType.TIME_RANGE]
        assert temporal[0].normalized_value == NEXT_OCCURRENCE
        assert [s.id for s in response.results.lop_sessions] == ["l1", "l2"]
        assert response.answer.type == AnswerType.LOP_SESSION
        assert "Designing for Members" in response.answer.text
        assert "March 12, 2026" in response.answer.text

    def test_quoted_phrase(self, engine):
        response = engine.search('"prior auth" update')

        assert "prior auth" in response.query.tokens
        assert response.results.pulse_signals[0].id == "s1"

    def test_quoted_phrase_with_surrounding_words(self, engine):
        response = engine.search('find "access request" form')

        assert response.query.tokens[0] == "find"
        assert "access request" in response.query.tokens
        assert "form" in response.query.tokens
        assert "access request" in response.query.expanded_tokens

    def test_synonym_expansion_switch(self, provider, clock):
        from cafe_finder.common.config import SearchConfig
        from cafe_finder.retriever.engine import SearchEngine

        expanded = SearchEngine(provider, SearchConfig(), now=clock).search('"bug tracker"')
        plain = SearchEngine(provider, SearchConfig(synonym_expansion=False), now=clock).search('"bug tracker"')

        assert [t.id for t in expanded.results.tools] == ["r1"]
        assert plain.results.tools == []
        assert "jira" in plain.query.expanded_tokens

    def test_context_is_carried(self, engine):
        from cafe_finder.common.schemas.query import SearchContext

        context = SearchContext(current_page="/library", current_topics=["cob"])
        response = engine.search("cob", context)

        assert response.query.context is context


class TestInvariants:
    QUERIES = [
        "jira",
        "who is the expert on cob",
        "how do i get figma access",
        "When is the next LOP?",
        "Acme Health medicare",
        "healthcare domain guide",
        "Q2 2026 claims sessions",
    ]

    @pytest.mark.parametrize("text", QUERIES)
    def test_deterministic(self, engine, text):
        first = engine.search(text)
        second = engine.search(text)

        assert first.results.to_dict() == second.results.to_dict()
        assert first.query.entities == second.query.entities
        assert first.query.intent == second.query.intent
        assert (first.answer.to_dict() if first.answer else None) == \
               (second.answer.to_dict() if second.answer else None)

    @pytest.mark.parametrize("text", QUERIES)
    def test_scores_within_bounds(self, engine, text):
        response = engine.search(text)

        for result in response.results.flatten():
            assert 0.0 <= result.score <= 1.0
        assert 0.0 <= response.query.intent.confidence <= 1.0
        for entity in response.query.entities:
            assert 0.0 <= entity.confidence <= 1.0

    @pytest.mark.parametrize("text", QUERIES)
    def test_entities_do_not_overlap(self, engine, text):
        entities = engine.search(text).query.entities

        for a, b in zip(entities, entities[1:]):
            assert a.position.end <= b.position.start

    @pytest.mark.parametrize("text", QUERIES)
    def test_each_category_sorted(self, engine, text):
        results = engine.search(text).results

        for name in results.categories():
            scores = [r.score for r in getattr(results, name)]
            assert scores == sorted(scores, reverse=True)

    def test_expanded_tokens_capped(self, engine):
        response = engine.search("jira confluence slack teams outlook sharepoint figma miro notion github")
        assert len(response.query.expanded_tokens) <= 50

    def test_response_is_json_serialisable(self, engine):
        data = engine.search("how do i get figma access").to_dict()

        encoded = json.dumps(data)
        assert '"TOOL_ACCESS"' in encoded
        assert data["query"]["language"] == "en"


class TestFallbacks:
    @pytest.mark.parametrize("raw", [None, 123, "", "   ", "\x00\x01"])
    def test_invalid_input_gives_empty_response(self, engine, raw):
        from cafe_finder.retriever.engine import DEFAULT_SUGGESTIONS

        response = engine.search(raw)

        assert response is not None
        assert response.total_count == 0
        assert response.answer is None
        assert response.suggestions == DEFAULT_SUGGESTIONS

    def test_long_query_is_truncated(self, engine):
        response = engine.search("jira " * 120)

        assert len(response.query.raw) <= 500
        assert response.results.tools[0].name == "Jira"

    @pytest.mark.parametrize("garbage", ["%$#@!" * 2000, "x" * 10_000, "🙂" * 10_000])
    def test_garbage_never_raises(self, engine, garbage):
        response = engine.search(garbage)

        assert response is not None
        assert response.query.intent is not None

    def test_initialization_failure(self, provider, clock):
        from cafe_finder.common.errors import CorpusLoadError
        from cafe_finder.retriever.engine import FAILURE_SUGGESTIONS, SearchEngine

        engine = SearchEngine(provider, now=clock)
        with patch.object(provider, "snapshot", side_effect=CorpusLoadError("feed down")):
            response = engine.search("jira")

        assert response.total_count == 0
        assert response.suggestions == FAILURE_SUGGESTIONS
        assert not engine.is_initialized()

    def test_stage_failure_is_contained(self, engine):
        from cafe_finder.retriever.engine import FAILURE_SUGGESTIONS

        with patch.object(engine.index, "search_all", side_effect=RuntimeError("boom")):
            response = engine.search("jira")

        assert response.total_count == 0
        assert response.answer is None
        assert response.suggestions == FAILURE_SUGGESTIONS
        assert response.query.raw == "jira"

    def test_lazy_initialization(self, provider, clock):
        from cafe_finder.retriever.engine import SearchEngine

        engine = SearchEngine(provider, now=clock)
        assert not engine.is_initialized()

        engine.search("jira")
        assert engine.is_initialized()


class TestSuggestions:
    def test_topic_suggestions_on_zero_results(self):
        from cafe_finder.common.schemas.query import Entity, EntityType, Position, Query
        from cafe_finder.common.schemas.results import SearchResults
        from cafe_finder.retriever.engine import DEFAULT_SUGGESTIONS, SearchEngine

        query = Query(
            raw="eob", normalized="eob", tokens=["eob"],
            entities=[Entity(EntityType.TOPIC, "eob", "eob", 0.9, Position(0, 3))],
        )

        suggestions = SearchEngine._suggestions(query, SearchResults())

        assert suggestions == ["eob guide", "eob faq", "eob expert"] + DEFAULT_SUGGESTIONS


class TestQuickSearch:
    def test_quick_search_people(self, engine):
        results = engine.quick_search("jane")

        assert [p.id for p in results.people] == ["p1"]
        assert results.to_dict()["people"][0]["type"] == "person"

    def test_quick_search_limit(self, engine):
        results = engine.quick_search("claims cob guide template", limit=1)

        assert len(results.people) <= 1
        assert len(results.faqs) <= 1
        assert len(results.resources) <= 1

    @pytest.mark.parametrize("raw", [None, "", "  "])
    def test_quick_search_invalid_input(self, engine, raw):
        results = engine.quick_search(raw)
        assert results.people == [] and results.faqs == [] and results.resources == []


class TestRebuild:
    def test_rebuild_reads_fresh_snapshot(self, engine):
        from cafe_finder.providers.memory import InMemoryCorpusProvider

        engine.index.provider = InMemoryCorpusProvider.from_dict({
            "resources": [{"id": "r9", "title": "Figma", "content_type": "tool"}],
        })
        engine.rebuild()

        assert engine.search("jira").results.tools == []
        assert [t.id for t in engine.search("figma").results.tools] == ["r9"]


class TestTrustedIntent:
    def test_weak_intent_is_not_trusted(self, engine):
        from cafe_finder.common.schemas.query import IntentType

        response = engine.search("jira")

        assert response.query.intent.confidence < 0.5
        assert engine.trusted_intent(response.query) == IntentType.GENERAL_SEARCH

    def test_threshold_comes_from_config(self, provider, clock):
        from cafe_finder.common.config import SearchConfig
        from cafe_finder.common.schemas.query import IntentType
        from cafe_finder.retriever.engine import SearchEngine

        engine = SearchEngine(provider, SearchConfig(intent_confidence_threshold=0.05), now=clock)
        response = engine.search("jira")

        assert engine.trusted_intent(response.query) == IntentType.FIND_TOOL
