"""Tests for fuzzy matching and the per-category index set."""

from types import SimpleNamespace

import pytest


def _entity(entity_type, value):
    from cafe_finder.common.schemas.query import Entity, Position
    return Entity(entity_type, value, value, 0.9, Position(0, len(value)))


class TestPrepareTerms:
    def test_drops_noise_and_short_terms(self):
        from cafe_finder.retriever.search_index import prepare_terms
        assert prepare_terms("how do I find the PRD template a") == ["prd", "template"]

    def test_sequence_keeps_phrases(self):
        from cafe_finder.retriever.search_index import prepare_terms
        assert prepare_terms(["Issue Tracker", "jira", "jira"]) == ["issue tracker", "jira"]


class TestTermSimilarity:
    def test_exact_word(self):
        from cafe_finder.retriever.search_index import FieldText, term_similarity
        assert term_similarity("jira", FieldText.of("Jira Cloud")) == 1.0

    def test_word_prefix(self):
        from cafe_finder.retriever.search_index import PREFIX_SIMILARITY, FieldText, term_similarity
        assert term_similarity("temp", FieldText.of("PRD Template")) == PREFIX_SIMILARITY

    def test_short_term_needs_exact_or_prefix(self):
        from cafe_finder.retriever.search_index import FieldText, term_similarity
        assert term_similarity("xya", FieldText.of("xyz")) == 0.0

    def test_typo_scores_by_ratio(self):
        from cafe_finder.retriever.search_index import FieldText, term_similarity
        assert 0.7 < term_similarity("confluense", FieldText.of("Confluence")) < 1.0

    def test_phrase_substring(self):
        from cafe_finder.retriever.search_index import FieldText, term_similarity
        assert term_similarity("issue tracker", FieldText.of("The issue tracker for teams")) == 1.0

    def test_list_field(self):
        from cafe_finder.retriever.search_index import FieldText, term_similarity
        assert term_similarity("claims", FieldText.of(["cob", "claims"])) == 1.0

    def test_empty_field(self):
        from cafe_finder.retriever.search_index import FieldText, term_similarity
        assert term_similarity("jira", FieldText.of(None)) == 0.0


class TestFuzzyIndex:
    def test_perfect_match_stays_below_one(self):
        from cafe_finder.retriever.search_index import FuzzyIndex
        index = FuzzyIndex([SimpleNamespace(title="Jira")], [("title", 1.0)], 0.3)

        matches = index.search(["jira"])

        assert len(matches) == 1
        assert 0.99 < matches[0].score < 1.0
        assert matches[0].matched_terms == ["jira"]

    def test_unmatched_records_are_dropped(self):
        from cafe_finder.retriever.search_index import FuzzyIndex
        records = [SimpleNamespace(title="Jira"), SimpleNamespace(title="Figma")]
        index = FuzzyIndex(records, [("title", 1.0)], 0.3)

        assert [m.record.title for m in index.search("figma")] == ["Figma"]

    def test_ties_keep_record_order(self):
        from cafe_finder.retriever.search_index import FuzzyIndex
        records = [SimpleNamespace(id=i, title="Claims Guide") for i in range(3)]
        index = FuzzyIndex(records, [("title", 1.0)], 0.3)

        assert [m.record.id for m in index.search("claims")] == [0, 1, 2]

    def test_weighted_fields_rank_title_hits_first(self):
        from cafe_finder.retriever.search_index import FuzzyIndex
        records = [
            SimpleNamespace(id="body", title="Release notes", body="claims backlog"),
            SimpleNamespace(id="title", title="Claims backlog", body="release notes"),
        ]
        index = FuzzyIndex(records, [("title", 3.0), ("body", 1.0)], 0.3)

        matches = index.search("claims")

        assert [m.record.id for m in matches] == ["title", "body"]
        assert all(0.0 <= m.score < 1.0 for m in matches)

    def test_limit_and_no_terms(self):
        from cafe_finder.retriever.search_index import FuzzyIndex
        records = [SimpleNamespace(title="Claims") for _ in range(5)]
        index = FuzzyIndex(records, [("title", 1.0)], 0.3)

        assert len(index.search("claims", limit=2)) == 2
        assert index.search("the a of") == []


class TestIndexSet:
    def test_uninitialized_index_raises(self, provider):
        from cafe_finder.common.errors import IndexNotInitializedError
        from cafe_finder.retriever.search_index import IndexSet

        index = IndexSet(provider)

        assert not index.is_initialized()
        with pytest.raises(IndexNotInitializedError):
            index.search_people(["jane"])

    def test_initialize_is_idempotent(self, provider):
        from unittest.mock import patch
        from cafe_finder.retriever.search_index import IndexSet

        index = IndexSet(provider)
        with patch.object(provider, "snapshot", wraps=provider.snapshot) as snapshot:
            index.initialize()
            index.initialize()

        assert snapshot.call_count == 1
        assert index.is_initialized()

    def test_rebuild_swaps_in_new_snapshot(self, index_set):
        from cafe_finder.providers.memory import InMemoryCorpusProvider

        index_set.provider = InMemoryCorpusProvider.from_dict({
            "people": [{"id": "p9", "display_name": "Mina Kim", "title": "Designer"}],
        })
        index_set.rebuild()

        assert [p.id for p in index_set.search_people(["mina"])] == ["p9"]
        assert index_set.search_people(["jane"]) == []

    def test_archived_resources_are_excluded(self, index_set):
        resources = index_set.search_resources(["jira"])
        tools = index_set.search_tools(["jira"])

        assert "r4" not in [r.id for r in resources]
        assert [t.id for t in tools] == ["r1"]
        assert tools[0].request_url == "https://identity.example.com/request/jira"

    def test_team_filter_narrows_people(self, index_set):
        from cafe_finder.common.schemas.query import EntityType

        assert [p.id for p in index_set.search_people(["claims"])] == ["p1"]
        filtered = index_set.search_people(["claims"], entities=[_entity(EntityType.TEAM, "analytics")])
        assert filtered == []

    def test_pillar_filter_narrows_resources(self, index_set):
        from cafe_finder.common.schemas.query import EntityType

        results = index_set.search_resources(
            ["guide", "template"], entities=[_entity(EntityType.PILLAR, "healthcare")]
        )
        assert [r.id for r in results] == ["r3"]

    def test_faq_result_carries_ordered_steps(self, index_set):
        faqs = index_set.search_faqs(["figma", "access"])

        assert faqs[0].id == "f1"
        assert faqs[0].steps == ["Open the Identity Portal", "Search for Figma", "Submit the request"]
        assert faqs[0].expert_id == "p1"

    def test_lop_date_range_filter(self, index_set):
        from cafe_finder.common.schemas.query import EntityType

        in_range = index_set.search_lop_sessions(
            ["claims"], entities=[_entity(EntityType.TIME_RANGE, "2026-04-01/2026-06-30")]
        )
        out_of_range = index_set.search_lop_sessions(
            ["claims"], entities=[_entity(EntityType.TIME_RANGE, "2026-01-01/2026-01-31")]
        )

        assert [s.id for s in in_range] == ["l2"]
        assert in_range[0].speaker_name == "Raj Patel"
        assert out_of_range == []

    def test_next_occurrence_bypasses_fuzzy_matching(self, index_set):
        from cafe_finder.common.schemas.query import EntityType
        from cafe_finder.retriever.entity_extractor import NEXT_OCCURRENCE
        from cafe_finder.retriever.search_index import NEXT_OCCURRENCE_SCORE

        sessions = index_set.search_lop_sessions(
            ["next", "lop", "love of product", "session"],
            entities=[_entity(EntityType.TIME_RANGE, NEXT_OCCURRENCE)],
        )

        assert [s.id for s in sessions] == ["l1", "l2"]
        assert all(s.score == NEXT_OCCURRENCE_SCORE for s in sessions)

    def test_next_occurrence_with_content_terms_still_matches(self, index_set):
        from cafe_finder.common.schemas.query import EntityType
        from cafe_finder.retriever.entity_extractor import NEXT_OCCURRENCE

        sessions = index_set.search_lop_sessions(
            ["next", "lop", "claims"],
            entities=[_entity(EntityType.TIME_RANGE, NEXT_OCCURRENCE)],
        )

        assert [s.id for s in sessions] == ["l2"]

    def test_min_score_threshold(self, provider):
        from cafe_finder.common.config import SearchConfig
        from cafe_finder.retriever.search_index import IndexSet

        index = IndexSet(provider, SearchConfig(min_score_threshold=0.9999))
        index.initialize()

        assert index.search_people(["jane"]) == []

    def test_search_all_scores_in_bounds(self, index_set):
        results = index_set.search_all(["claims", "cob", "jira", "acme"], limit_per_type=5)

        assert results.total_count > 0
        for result in results.flatten():
            assert 0.0 <= result.score <= 1.0
        assert results.competitors[0].name == "Acme Health"
        assert results.pulse_signals[0].id == "s1"
