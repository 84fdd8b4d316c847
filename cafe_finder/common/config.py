"""
Configuration Management for Café Finder

Loads configuration from ~/.cafe_finder/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field

logger = logging.getLogger("cafe_finder.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".cafe_finder"
CONFIG_PATH = CONFIG_DIR / "config.json"


@dataclass
class SearchConfig:
    """Search pipeline configuration"""
    max_results_per_type: int = 10
    quick_search_limit: int = 5
    min_score_threshold: float = 0.1
    synonym_expansion: bool = True
    answer_synthesis: bool = True
    intent_confidence_threshold: float = 0.5  # caller-side trust level for IntentResult.primary


@dataclass
class CorpusConfig:
    """Corpus snapshot location"""
    path: str = ""  # JSON snapshot consumed by InMemoryCorpusProvider.from_json_file


@dataclass
class ServerConfig:
    """MCP server configuration"""
    name: str = "cafe_finder"
    log_level: str = "INFO"


@dataclass
class FinderConfig:
    """Main Café Finder configuration"""
    search: SearchConfig = field(default_factory=SearchConfig)
    corpus: CorpusConfig = field(default_factory=CorpusConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def _parse_search_config(data: dict) -> SearchConfig:
    """Parse search section from config dict"""
    search_data = data.get("search", {})
    return SearchConfig(
        max_results_per_type=search_data.get("max_results_per_type", 10),
        quick_search_limit=search_data.get("quick_search_limit", 5),
        min_score_threshold=search_data.get("min_score_threshold", 0.1),
        synonym_expansion=search_data.get("synonym_expansion", True),
        answer_synthesis=search_data.get("answer_synthesis", True),
        intent_confidence_threshold=search_data.get("intent_confidence_threshold", 0.5),
    )


def _parse_corpus_config(data: dict) -> CorpusConfig:
    """Parse corpus section from config dict"""
    corpus_data = data.get("corpus", {})
    return CorpusConfig(path=corpus_data.get("path", ""))


def _parse_server_config(data: dict) -> ServerConfig:
    """Parse server section from config dict"""
    server_data = data.get("server", {})
    return ServerConfig(
        name=server_data.get("name", "cafe_finder"),
        log_level=server_data.get("log_level", "INFO"),
    )


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


def load_config() -> FinderConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.cafe_finder/config.json)
    3. Default values
    """
    config = FinderConfig()

    # Load from config file if exists
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.search = _parse_search_config(data)
            config.corpus = _parse_corpus_config(data)
            config.server = _parse_server_config(data)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load config file %s: %s", CONFIG_PATH, e)

    # Environment variable overrides
    if os.getenv("CAFE_FINDER_MAX_RESULTS"):
        config.search.max_results_per_type = int(os.getenv("CAFE_FINDER_MAX_RESULTS"))
    if os.getenv("CAFE_FINDER_QUICK_LIMIT"):
        config.search.quick_search_limit = int(os.getenv("CAFE_FINDER_QUICK_LIMIT"))
    if os.getenv("CAFE_FINDER_MIN_SCORE"):
        config.search.min_score_threshold = float(os.getenv("CAFE_FINDER_MIN_SCORE"))
    if os.getenv("CAFE_FINDER_SYNONYMS"):
        config.search.synonym_expansion = _env_bool(os.getenv("CAFE_FINDER_SYNONYMS"))
    if os.getenv("CAFE_FINDER_ANSWERS"):
        config.search.answer_synthesis = _env_bool(os.getenv("CAFE_FINDER_ANSWERS"))

    if os.getenv("CAFE_FINDER_CORPUS"):
        config.corpus.path = os.getenv("CAFE_FINDER_CORPUS")

    if os.getenv("CAFE_FINDER_SERVER_NAME"):
        config.server.name = os.getenv("CAFE_FINDER_SERVER_NAME")
    if os.getenv("CAFE_FINDER_LOG_LEVEL"):
        config.server.log_level = os.getenv("CAFE_FINDER_LOG_LEVEL")

    return config


def save_config(config: FinderConfig) -> None:
    """Save configuration to file."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    data = {
        "search": {
            "max_results_per_type": config.search.max_results_per_type,
            "quick_search_limit": config.search.quick_search_limit,
            "min_score_threshold": config.search.min_score_threshold,
            "synonym_expansion": config.search.synonym_expansion,
            "answer_synthesis": config.search.answer_synthesis,
            "intent_confidence_threshold": config.search.intent_confidence_threshold,
        },
        "corpus": {
            "path": config.corpus.path,
        },
        "server": {
            "name": config.server.name,
            "log_level": config.server.log_level,
        },
    }

    with open(CONFIG_PATH, "w") as f:
        json.dump(data, f, indent=2)

    # Set secure permissions
    CONFIG_PATH.chmod(0o600)
