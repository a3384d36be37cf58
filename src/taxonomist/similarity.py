"""
Embedding-based scoring and ranking of candidate relations.

Two numbers are attached to every candidate:

- similarity: ``SIMILARITY_FLOOR + sigmoid(dot(emb(query), emb(result)))``,
  strictly positive even at the sigmoid's lower asymptote
- score: ``log(1 + count) * similarity``, the rank key

The ontology extender's header relevance uses the raw dot product instead
(see ``SimilarityScorer.raw_similarity``); the two are separate metrics.
"""

import math
from collections.abc import Iterable

import numpy as np

from .embeddings import EmbeddingStore, dot_product
from .schemas import ConsolidatedMatch, ScoredMatch


# =============================================================================
# Default Configuration
# =============================================================================

# Keeps similarity strictly positive so no candidate scores exactly zero
SIMILARITY_FLOOR = 1e-4


# =============================================================================
# Core Functions
# =============================================================================


def sigmoid(x: float) -> float:
    """
    Logistic function 1 / (1 + exp(-x)), stable for large |x|.

    Example:
        >>> sigmoid(0.0)
        0.5
    """
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def floored_similarity(raw: float) -> float:
    """Map a raw dot product into (0, 1 + SIMILARITY_FLOOR]."""
    return SIMILARITY_FLOOR + sigmoid(raw)


def rank_score(count: int, similarity: float) -> float:
    """
    Rank key for a candidate.

    Strictly increasing in count (for count >= 0) and in similarity (for
    count >= 1).
    """
    return math.log1p(count) * similarity


class SimilarityScorer:
    """Score and rank candidate matches against a query with an embedding store."""

    def __init__(self, embeddings: EmbeddingStore):
        self.embeddings = embeddings

    def composite_embedding(self, tokens: list[str]) -> np.ndarray:
        """Single composite vector for a token sequence (zero vector if unknown)."""
        return self.embeddings.vector_for(tokens)

    def raw_similarity(self, a: list[str], b: list[str]) -> float:
        """Dot product of the composite embeddings of two token sequences."""
        return dot_product(self.composite_embedding(a), self.composite_embedding(b))

    def score(self, query: list[str], match: ConsolidatedMatch) -> ScoredMatch:
        """Derive a ScoredMatch for one candidate; the candidate is not modified."""
        similarity = floored_similarity(self.raw_similarity(query, match.result))
        return ScoredMatch(
            query=list(query),
            result=list(match.result),
            count=match.count,
            similarity=similarity,
            score=rank_score(match.count, similarity),
            evidence=list(match.evidence),
        )

    def rank(self, query: list[str], matches: Iterable[ConsolidatedMatch]) -> list[ScoredMatch]:
        """
        Score candidates and sort them by descending score.

        Candidates whose result equals the query verbatim are dropped: a term
        is never its own hypernym, hyponym or co-hyponym. Ties keep their
        input order.

        Args:
            query: Query token sequence
            matches: Consolidated candidates

        Returns:
            Ranked ScoredMatch list
        """
        scored = [self.score(query, m) for m in matches if list(m.result) != list(query)]
        return sorted(scored, key=lambda s: s.score, reverse=True)
