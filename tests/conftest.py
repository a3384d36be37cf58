"""Pytest configuration and fixtures."""

import os

import pytest
from dotenv import load_dotenv

from taxonomist.patterns import PatternCompiler
from taxonomist.reader import TaxonomyReader
from taxonomist.similarity import SimilarityScorer
from tests.fakes import FakeCorpus, FakeEmbeddings, FakeLemmatizer

# Load environment variables from .env file
load_dotenv()


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (require external services)"
    )


@pytest.fixture
def openai_api_key() -> str | None:
    """Get OpenAI API key from environment."""
    return os.getenv("OPENAI_API_KEY")


@pytest.fixture
def skip_without_openai_key(openai_api_key):
    """Skip test if OpenAI API key is not available."""
    if not openai_api_key:
        pytest.skip("OPENAI_API_KEY not set")


@pytest.fixture
def corpus() -> FakeCorpus:
    """Empty in-memory corpus."""
    return FakeCorpus()


@pytest.fixture
def lemmatizer() -> FakeLemmatizer:
    """Plural-stripping lemmatizer."""
    return FakeLemmatizer()


@pytest.fixture
def animal_embeddings() -> FakeEmbeddings:
    """Small vectors where poodle is closer to dog than terrier is."""
    return FakeEmbeddings(
        {
            "dog": [1.0, 0.0, 0.0],
            "poodle": [0.9, 0.1, 0.0],
            "terrier": [0.2, 0.8, 0.0],
            "cat": [0.0, 0.0, 1.0],
        }
    )


@pytest.fixture
def make_reader(corpus, lemmatizer):
    """Factory for readers over the fake corpus."""

    def factory(embeddings: FakeEmbeddings | None = None, evidence_cap: int = 5) -> TaxonomyReader:
        return TaxonomyReader(
            corpus=corpus,
            scorer=SimilarityScorer(embeddings or FakeEmbeddings()),
            compiler=PatternCompiler(),
            lemmatizer=lemmatizer,
            evidence_cap=evidence_cap,
        )

    return factory
