"""Embedding stores mapping token sequences to composite vectors."""

import logging
import os
from pathlib import Path
from typing import Protocol

import numpy as np
from dotenv import load_dotenv
from openai import OpenAI

from .errors import ConfigurationError

load_dotenv()

logger = logging.getLogger(__name__)

# Default OpenAI embedding model
DEFAULT_MODEL = "text-embedding-3-small"


class EmbeddingStore(Protocol):
    """Anything that returns one fixed-size vector per token sequence."""

    @property
    def dimension(self) -> int: ...

    def vector_for(self, tokens: list[str]) -> np.ndarray: ...


def dot_product(vec1: np.ndarray, vec2: np.ndarray) -> float:
    """
    Dot product of two vectors.

    Raises:
        ValueError: If the vectors differ in length
    """
    if vec1.shape != vec2.shape:
        raise ValueError("Vectors must have the same length")
    return float(np.dot(vec1, vec2))


def _normalize(vec: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vec)
    if norm == 0:
        return vec
    return vec / norm


class Word2VecEmbeddings:
    """
    Word vectors loaded from a word2vec text file.

    Every word vector is L2-normalized on load. The composite vector of a
    token sequence is the normalized sum of its known word vectors, so the
    dot product of two composites is their cosine similarity. Sequences with
    no known word map to the zero vector.
    """

    def __init__(self, vectors: dict[str, np.ndarray], dimension: int):
        self._vectors = vectors
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def vocabulary_size(self) -> int:
        return len(self._vectors)

    @classmethod
    def load(cls, path: str | Path) -> "Word2VecEmbeddings":
        """
        Load vectors from a word2vec text file.

        The optional first line ``<count> <dimension>`` is skipped. Lines whose
        width disagrees with the first vector are ignored.

        Args:
            path: Path to the embeddings file

        Returns:
            Loaded embeddings

        Raises:
            ConfigurationError: If the file is missing or holds no vectors
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Embeddings file not found: {path}")

        logger.info(f"[EMBED] Loading word vectors from {path}")
        vectors: dict[str, np.ndarray] = {}
        dimension: int | None = None
        skipped = 0

        with path.open(encoding="utf-8") as f:
            for line_no, line in enumerate(f):
                parts = line.rstrip().split(" ")
                if line_no == 0 and len(parts) == 2 and all(p.isdigit() for p in parts):
                    continue
                if len(parts) < 2:
                    continue
                if dimension is None:
                    dimension = len(parts) - 1
                if len(parts) - 1 != dimension:
                    skipped += 1
                    continue
                vec = np.asarray(parts[1:], dtype=np.float64)
                vectors[parts[0]] = _normalize(vec)

        if not vectors or dimension is None:
            raise ConfigurationError(f"No word vectors found in {path}")

        if skipped:
            logger.warning(f"[EMBED] Skipped {skipped} malformed lines in {path}")
        logger.info(f"[EMBED] Loaded {len(vectors)} vectors of dimension {dimension}")
        return cls(vectors, dimension)

    def lookup(self, word: str) -> np.ndarray | None:
        """Vector for a word, trying the exact form then the lowercased form."""
        vec = self._vectors.get(word)
        if vec is None:
            vec = self._vectors.get(word.lower())
        return vec

    def vector_for(self, tokens: list[str]) -> np.ndarray:
        composite = np.zeros(self._dimension)
        for token in tokens:
            vec = self.lookup(token)
            if vec is not None:
                composite += vec
        return _normalize(composite)


def get_client() -> OpenAI:
    """Create an OpenAI client from the environment."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise ConfigurationError("OPENAI_API_KEY environment variable is not set")
    return OpenAI(api_key=api_key)


class OpenAIEmbeddingStore:
    """
    Composite vectors from the OpenAI embeddings API.

    The space-joined token sequence is embedded as one text. Results are
    cached per sequence for the lifetime of the store. Empty sequences map to
    the zero vector.
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        client: OpenAI | None = None,
        dimension: int = 1536,
    ):
        """
        Initialize the store.

        Args:
            model: The embedding model to use (default: text-embedding-3-small)
            client: Optional OpenAI client (created from the environment if None)
            dimension: Vector size produced by the model
        """
        self.model = model
        self._client = client
        self._dimension = dimension
        self._cache: dict[tuple[str, ...], np.ndarray] = {}

    @property
    def dimension(self) -> int:
        return self._dimension

    def vector_for(self, tokens: list[str]) -> np.ndarray:
        key = tuple(tokens)
        if key in self._cache:
            return self._cache[key]

        text = " ".join(tokens).replace("\n", " ").strip()
        if not text:
            return np.zeros(self._dimension)

        if self._client is None:
            self._client = get_client()

        response = self._client.embeddings.create(input=text, model=self.model)
        vec = np.asarray(response.data[0].embedding, dtype=np.float64)
        self._cache[key] = vec
        return vec
