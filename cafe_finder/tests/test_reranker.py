"""Tests for intent and entity boosts."""

import pytest


def _query(intent, entities=()):
    from cafe_finder.common.schemas.query import IntentResult, Query
    return Query(
        raw="q",
        normalized="q",
        tokens=["q"],
        entities=list(entities),
        intent=IntentResult(primary=intent, confidence=0.9),
    )


def _results():
    from cafe_finder.common.schemas.results import (
        FAQResult,
        PersonResult,
        SearchResults,
        ToolResult,
    )
    return SearchResults(
        people=[
            PersonResult(id="p2", score=0.5, name="Raj Patel"),
            PersonResult(id="p1", score=0.4, name="Jane Doe"),
        ],
        tools=[
            ToolResult(id="t2", score=0.7, name="Figma"),
            ToolResult(id="t1", score=0.6, name="Jira"),
        ],
        faqs=[FAQResult(id="f1", score=0.9, question="How do I request Figma access?")],
    )


class TestRerank:
    def test_intent_boosts_target_category(self):
        from cafe_finder.common.schemas.query import IntentType
        from cafe_finder.retriever.reranker import rerank

        reranked = rerank(_results(), _query(IntentType.FIND_PERSON))

        assert reranked.people[0].score == pytest.approx(0.65)
        assert reranked.tools[0].score == pytest.approx(0.7)

    def test_boost_is_clamped(self):
        from cafe_finder.common.schemas.query import IntentType
        from cafe_finder.retriever.reranker import rerank

        reranked = rerank(_results(), _query(IntentType.FIND_FAQ))

        assert reranked.faqs[0].score == 1.0

    def test_entity_boost_reorders(self):
        from cafe_finder.common.schemas.query import Entity, EntityType, IntentType, Position
        from cafe_finder.retriever.reranker import rerank

        jira = Entity(EntityType.TOOL, "Jira", "jira", 0.95, Position(0, 4))
        reranked = rerank(_results(), _query(IntentType.GENERAL_SEARCH, [jira]))

        assert [t.id for t in reranked.tools] == ["t1", "t2"]
        assert reranked.tools[0].score == pytest.approx(0.9)

    def test_person_entity_boost(self):
        from cafe_finder.common.schemas.query import Entity, EntityType, IntentType, Position
        from cafe_finder.retriever.reranker import rerank

        jane = Entity(EntityType.PERSON, "Jane Doe", "jane doe", 0.7, Position(0, 8))
        reranked = rerank(_results(), _query(IntentType.GENERAL_SEARCH, [jane]))

        assert [p.id for p in reranked.people] == ["p1", "p2"]
        assert reranked.people[0].score == pytest.approx(0.6)

    def test_inputs_are_not_modified(self):
        from cafe_finder.common.schemas.query import IntentType
        from cafe_finder.retriever.reranker import rerank

        results = _results()
        rerank(results, _query(IntentType.FIND_TOOL))

        assert [t.score for t in results.tools] == [0.7, 0.6]

    def test_no_boost_intent_only_sorts(self):
        from cafe_finder.common.schemas.query import IntentType
        from cafe_finder.retriever.reranker import rerank

        reranked = rerank(_results(), _query(IntentType.COMPARE))

        assert [r.score for r in reranked.flatten()] == [0.9, 0.7, 0.6, 0.5, 0.4]

    def test_every_intent_has_a_boost_entry(self):
        from cafe_finder.common.schemas.query import IntentType
        from cafe_finder.retriever.reranker import INTENT_BOOSTS
        assert set(INTENT_BOOSTS) == set(IntentType)
