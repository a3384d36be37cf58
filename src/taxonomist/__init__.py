"""Taxonomist - taxonomic relation extraction and ontology enrichment."""

import logging

# Suppress verbose HTTP logs from the corpus and embedding clients
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)

from .config import TaxonomistSettings
from .consolidation import consolidate
from .embeddings import OpenAIEmbeddingStore, Word2VecEmbeddings
from .errors import (
    ConfigurationError,
    LeafProcessingError,
    QueryCompilationError,
    TaxonomistError,
)
from .patterns import PatternCompiler
from .reader import TaxonomyReader
from .schemas import (
    CompiledQuery,
    ConsolidatedMatch,
    CorpusHit,
    Evidence,
    RawMatch,
    RelationKind,
    ScoredMatch,
)
from .similarity import SimilarityScorer

__all__ = [
    "TaxonomyReader",
    "PatternCompiler",
    "SimilarityScorer",
    "Word2VecEmbeddings",
    "OpenAIEmbeddingStore",
    "TaxonomistSettings",
    "consolidate",
    "RelationKind",
    "Evidence",
    "CorpusHit",
    "CompiledQuery",
    "RawMatch",
    "ConsolidatedMatch",
    "ScoredMatch",
    "TaxonomistError",
    "ConfigurationError",
    "QueryCompilationError",
    "LeafProcessingError",
]
