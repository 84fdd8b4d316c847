"""
Café Finder

Query understanding and answer retrieval for the Product Café.

Philosophy:
- Every score is deterministic, rule-based and explainable
- A failing search still returns a well-formed, empty response
- Corpus data is owned by providers; the engine only indexes snapshots

Usage:
    from cafe_finder.common import load_config
    from cafe_finder.providers import InMemoryCorpusProvider
    from cafe_finder.retriever import SearchEngine
"""

__version__ = "0.1.0"
