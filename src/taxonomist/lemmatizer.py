"""Lemmatization of short terms through a spaCy pipeline."""

import logging
import threading
from typing import Protocol

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SPACY_MODEL = "en_core_web_sm"


class Lemmatizer(Protocol):
    """Returns exactly one lemma per input token."""

    def lemmatize(self, tokens: list[str]) -> list[str]: ...


class SpacyLemmatizer:
    """
    spaCy-backed lemmatizer for pre-tokenized terms.

    The pipeline runs on a Doc built from the caller's tokens, so the output
    is aligned one-to-one with the input. The model is loaded on first use
    and calls are serialized: one pipeline instance is never used by two
    threads at once.
    """

    def __init__(self, model: str = DEFAULT_SPACY_MODEL):
        self.model = model
        self._nlp = None
        self._lock = threading.Lock()

    def _load(self):
        try:
            import spacy
        except ImportError as e:
            raise ConfigurationError(
                "spaCy is required for lemmatization. Install the 'nlp' extra."
            ) from e

        try:
            nlp = spacy.load(self.model, exclude=["ner", "parser"])
        except OSError as e:
            raise ConfigurationError(
                f"spaCy model '{self.model}' is unavailable. "
                f"Install it with `python -m spacy download {self.model}`."
            ) from e

        logger.info(f"[LEMMA] Loaded spaCy model {self.model}")
        return nlp

    def lemmatize(self, tokens: list[str]) -> list[str]:
        if not tokens:
            return []

        with self._lock:
            if self._nlp is None:
                self._nlp = self._load()

            from spacy.tokens import Doc

            doc = self._nlp(Doc(self._nlp.vocab, words=list(tokens)))
            return [token.lemma_ or token.text for token in doc]
