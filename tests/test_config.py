"""Tests for settings loading."""

import json
import os

import pytest

from taxonomist.config import TaxonomistSettings
from taxonomist.errors import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    """Remove any TAXONOMIST_ variables inherited from the environment."""

    for name in list(os.environ):
        if name.startswith("TAXONOMIST_"):
            monkeypatch.delenv(name)
    return monkeypatch


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self):
        settings = TaxonomistSettings()
        assert settings.similarity_to_header_threshold == 0.4
        assert settings.max_examples_per_leaf == 10
        assert settings.include_original_leaf is True
        assert settings.only_query_by_leaf_header_terms is False
        assert settings.manual_eval is False
        assert settings.lemmatize is False
        assert settings.evidence_cap == 5
        assert settings.embeddings_backend == "word2vec"


class TestFromEnv:
    """Tests for environment-variable settings."""

    def test_reads_prefixed_variables(self, clean_env):
        clean_env.setenv("TAXONOMIST_MAX_EXAMPLES_PER_LEAF", "3")
        clean_env.setenv("TAXONOMIST_SIMILARITY_TO_HEADER_THRESHOLD", "0.75")
        clean_env.setenv("TAXONOMIST_MANUAL_EVAL", "yes")
        clean_env.setenv("TAXONOMIST_INCLUDE_ORIGINAL_LEAF", "0")
        clean_env.setenv("TAXONOMIST_ONTOLOGY_DIR", "/data/ontology")

        settings = TaxonomistSettings.from_env()

        assert settings.max_examples_per_leaf == 3
        assert settings.similarity_to_header_threshold == 0.75
        assert settings.manual_eval is True
        assert settings.include_original_leaf is False
        assert settings.ontology_dir == "/data/ontology"

    def test_custom_prefix(self, clean_env):
        clean_env.setenv("TEST_EVIDENCE_CAP", "2")
        assert TaxonomistSettings.from_env(prefix="TEST_").evidence_cap == 2

    def test_bad_boolean(self, clean_env):
        clean_env.setenv("TAXONOMIST_LEMMATIZE", "maybe")
        with pytest.raises(ConfigurationError, match="must be a boolean"):
            TaxonomistSettings.from_env()

    def test_invalid_value(self, clean_env):
        clean_env.setenv("TAXONOMIST_MAX_EXAMPLES_PER_LEAF", "-1")
        with pytest.raises(ConfigurationError, match="Invalid settings"):
            TaxonomistSettings.from_env()

    def test_unknown_backend(self, clean_env):
        clean_env.setenv("TAXONOMIST_EMBEDDINGS_BACKEND", "glove")
        with pytest.raises(ConfigurationError):
            TaxonomistSettings.from_env()


class TestFromFile:
    """Tests for JSON settings files."""

    def test_loads_json(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"ontology_dir": "ont", "output_dir": "out", "lemmatize": True}))

        settings = TaxonomistSettings.from_file(path)

        assert settings.ontology_dir == "ont"
        assert settings.output_dir == "out"
        assert settings.lemmatize is True
        assert settings.max_examples_per_leaf == 10

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            TaxonomistSettings.from_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            TaxonomistSettings.from_file(path)
