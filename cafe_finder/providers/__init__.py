"""
Corpus providers: the engine's read-only data sources.
"""

from .base import CorpusProvider
from .memory import InMemoryCorpusProvider

__all__ = [
    "CorpusProvider",
    "InMemoryCorpusProvider",
]
