"""Tests for config loading, env overrides and persistence."""

import json
import os
import pytest
from unittest.mock import patch


class TestSearchConfig:
    def test_search_config_defaults(self):
        from cafe_finder.common.config import SearchConfig
        cfg = SearchConfig()
        assert cfg.max_results_per_type == 10
        assert cfg.quick_search_limit == 5
        assert cfg.min_score_threshold == 0.1
        assert cfg.synonym_expansion is True
        assert cfg.answer_synthesis is True
        assert cfg.intent_confidence_threshold == 0.5

    def test_load_config_without_file_uses_defaults(self, tmp_path):
        from cafe_finder.common.config import load_config
        missing = tmp_path / "missing.json"

        with patch("cafe_finder.common.config.CONFIG_PATH", missing):
            cfg = load_config()

        assert cfg.search.max_results_per_type == 10
        assert cfg.corpus.path == ""
        assert cfg.server.name == "cafe_finder"


class TestLoadConfig:
    def test_load_config_reads_sections(self, tmp_path):
        from cafe_finder.common.config import load_config
        config_data = {
            "search": {"max_results_per_type": 3, "answer_synthesis": False},
            "corpus": {"path": "/data/corpus.json"},
            "server": {"name": "finder-test", "log_level": "DEBUG"},
        }
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(config_data))

        with patch("cafe_finder.common.config.CONFIG_PATH", config_file):
            cfg = load_config()

        assert cfg.search.max_results_per_type == 3
        assert cfg.search.answer_synthesis is False
        assert cfg.search.quick_search_limit == 5
        assert cfg.corpus.path == "/data/corpus.json"
        assert cfg.server.name == "finder-test"
        assert cfg.server.log_level == "DEBUG"

    def test_invalid_json_falls_back_to_defaults(self, tmp_path):
        from cafe_finder.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")

        with patch("cafe_finder.common.config.CONFIG_PATH", config_file):
            cfg = load_config()

        assert cfg.search.max_results_per_type == 10

    def test_env_var_overrides_file(self, tmp_path):
        from cafe_finder.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"search": {"max_results_per_type": 3}}))

        env = {
            "CAFE_FINDER_MAX_RESULTS": "7",
            "CAFE_FINDER_SYNONYMS": "false",
            "CAFE_FINDER_MIN_SCORE": "0.25",
            "CAFE_FINDER_CORPUS": "/tmp/corpus.json",
        }
        with patch("cafe_finder.common.config.CONFIG_PATH", config_file), \
             patch.dict(os.environ, env, clear=False):
            cfg = load_config()

        assert cfg.search.max_results_per_type == 7
        assert cfg.search.synonym_expansion is False
        assert cfg.search.min_score_threshold == pytest.approx(0.25)
        assert cfg.corpus.path == "/tmp/corpus.json"


class TestSaveConfig:
    def test_save_config_round_trips(self, tmp_path):
        from cafe_finder.common.config import FinderConfig, load_config, save_config
        config_file = tmp_path / "config.json"
        cfg = FinderConfig()
        cfg.search.quick_search_limit = 8
        cfg.corpus.path = "/srv/corpus.json"

        with patch("cafe_finder.common.config.CONFIG_PATH", config_file), \
             patch("cafe_finder.common.config.CONFIG_DIR", tmp_path):
            save_config(cfg)
            loaded = load_config()

        saved = json.loads(config_file.read_text())
        assert saved["search"]["quick_search_limit"] == 8
        assert loaded.search.quick_search_limit == 8
        assert loaded.corpus.path == "/srv/corpus.json"

    def test_save_config_sets_owner_only_permissions(self, tmp_path):
        from cafe_finder.common.config import FinderConfig, save_config
        config_file = tmp_path / "config.json"

        with patch("cafe_finder.common.config.CONFIG_PATH", config_file), \
             patch("cafe_finder.common.config.CONFIG_DIR", tmp_path):
            save_config(FinderConfig())

        assert config_file.stat().st_mode & 0o777 == 0o600
