"""
Café Finder Retriever

Query understanding and answer retrieval pipeline.

Flow:
1. QueryProcessor: sanitise, tokenise, synonym-expand
2. EntityExtractor: tools, topics, teams, dates, names
3. IntentClassifier: ranked intents and query shape
4. IndexSet: fuzzy search per corpus category
5. rerank: intent and entity boosts
6. synthesize: optional direct answer
"""

from .query_processor import QueryProcessor
from .entity_extractor import EntityExtractor
from .intent_classifier import IntentClassifier, trusted_intent, INTENT_CONFIDENCE_THRESHOLD
from .search_index import IndexSet, FuzzyIndex
from .reranker import rerank
from .synthesizer import synthesize
from .engine import SearchEngine

__all__ = [
    "QueryProcessor",
    "EntityExtractor",
    "IntentClassifier",
    "trusted_intent",
    "INTENT_CONFIDENCE_THRESHOLD",
    "IndexSet",
    "FuzzyIndex",
    "rerank",
    "synthesize",
    "SearchEngine",
]
