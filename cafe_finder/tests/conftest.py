"""Shared fixtures: a small corpus and a pinned clock."""

from datetime import datetime

import pytest

FIXED_NOW = datetime(2026, 3, 1, 9, 0)


def fixed_now() -> datetime:
    return FIXED_NOW


def corpus_data() -> dict:
    """Raw snapshot dict; mixes snake_case and camelCase keys like the feeds do."""
    return {
        "people": [
            {
                "id": "p1",
                "displayName": "Jane Doe",
                "email": "jane.doe@example.com",
                "title": "Product Manager",
                "team": "Platform",
                "location": "Boston",
                "expertiseAreas": ["cob", "claims"],
                "teamsDeepLink": "msteams://chat/jane",
            },
            {
                "id": "p2",
                "display_name": "Raj Patel",
                "email": "raj.patel@example.com",
                "title": "Staff Engineer",
                "team": "Analytics",
                "location": "Austin",
                "expertise_areas": ["edi", "data pipelines"],
            },
        ],
        "resources": [
            {
                "id": "r1",
                "title": "Jira",
                "description": "Issue tracking for engineering teams",
                "url": "https://jira.example.com",
                "category": "Engineering Tools",
                "pillar": "tools-access",
                "contentType": "tool",
                "tags": ["tickets", "issues"],
                "requestUrl": "https://identity.example.com/request/jira",
                "guideUrl": "https://wiki.example.com/jira-guide",
            },
            {
                "id": "r2",
                "title": "PRD Template",
                "description": "Starting point for product requirement documents",
                "url": "https://library.example.com/prd-template",
                "category": "Templates",
                "pillar": "product-craft",
                "content_type": "template",
                "tags": ["prd", "template"],
            },
            {
                "id": "r3",
                "title": "COB Overview Guide",
                "description": "Coordination of benefits explained",
                "url": "https://library.example.com/cob-guide",
                "category": "Guides",
                "pillar": "healthcare",
                "content_type": "guide",
                "tags": ["cob"],
            },
            {
                "id": "r4",
                "title": "Old Jira Notes",
                "description": "Superseded notes",
                "pillar": "tools-access",
                "content_type": "tool",
                "is_archived": True,
            },
        ],
        "faqs": [
            {
                "id": "f1",
                "question": "How do I request Figma access?",
                "answerSummary": "Request Figma through the Identity Portal.",
                "answer": "Open the Identity Portal, search for Figma and submit a request.",
                "answerSteps": [
                    {"order": 2, "instruction": "Search for Figma"},
                    {"order": 1, "instruction": "Open the Identity Portal"},
                    {"order": 3, "instruction": "Submit the request"},
                ],
                "category": "Access",
                "tags": ["figma", "access"],
                "expertIds": ["p1"],
            },
            {
                "id": "f2",
                "question": "What is coordination of benefits?",
                "answerSummary": "COB decides which plan pays first.",
                "answer": "COB determines which plan pays first when a member has multiple coverage.",
                "category": "Healthcare",
                "tags": ["cob", "coverage"],
            },
        ],
        "discussions": [
            {
                "id": "d1",
                "title": "Best practices for sprint planning",
                "body": "How do teams size stories before planning?",
                "author_id": "p2",
                "author_name": "Raj Patel",
                "reply_count": 4,
            },
        ],
        "lop_sessions": [
            {
                "id": "l1",
                "title": "Designing for Members",
                "description": "Research stories from the member portal",
                "date": "2026-03-12",
                "speakerIds": ["p1"],
                "recordingUrl": "https://video.example.com/l1",
                "tags": ["design", "ux"],
            },
            {
                "id": "l2",
                "title": "Claims Automation Deep Dive",
                "description": "Automating adjudication end to end",
                "date": "2026-04-20",
                "speaker_ids": ["p2"],
                "tags": ["claims"],
            },
            {
                "id": "l3",
                "title": "Roadmapping 101",
                "description": "Planning a product roadmap",
                "date": "2026-01-15",
                "speaker_ids": ["p1"],
                "tags": ["roadmap"],
            },
        ],
        "pulse_signals": [
            {
                "id": "s1",
                "title": "Acme Health launches prior auth API",
                "summary": "Acme opened a public prior authorization API for providers.",
                "domain": "payer",
                "priority": "high",
                "companies": ["Acme Health"],
                "topics": ["prior auth"],
            },
        ],
        "competitors": [
            {
                "id": "c1",
                "name": "Acme Health",
                "tier": 1,
                "category": "Payer Platform",
                "markets": ["medicare"],
            },
        ],
    }


@pytest.fixture
def provider():
    from cafe_finder.providers.memory import InMemoryCorpusProvider
    return InMemoryCorpusProvider.from_dict(corpus_data())


@pytest.fixture
def index_set(provider):
    from cafe_finder.common.config import SearchConfig
    from cafe_finder.retriever.search_index import IndexSet
    index = IndexSet(provider, SearchConfig(), now=fixed_now)
    index.initialize()
    return index


@pytest.fixture
def engine(provider):
    from cafe_finder.common.config import SearchConfig
    from cafe_finder.retriever.engine import SearchEngine
    engine = SearchEngine(provider, SearchConfig(), now=fixed_now)
    engine.initialize()
    return engine


@pytest.fixture
def clock():
    return fixed_now


@pytest.fixture
def extractor():
    from cafe_finder.retriever.entity_extractor import EntityExtractor
    return EntityExtractor(now=fixed_now)


@pytest.fixture
def corpus():
    return corpus_data()
