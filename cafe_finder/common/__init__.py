"""
Café Finder Common Module

Shared infrastructure for the retriever pipeline and the MCP server.
"""

from .config import FinderConfig, SearchConfig, load_config
from .errors import FinderError, CorpusLoadError, IndexNotInitializedError
from .language import LanguageInfo, detect_language

__all__ = [
    "FinderConfig",
    "SearchConfig",
    "load_config",
    "FinderError",
    "CorpusLoadError",
    "IndexNotInitializedError",
    "LanguageInfo",
    "detect_language",
]
