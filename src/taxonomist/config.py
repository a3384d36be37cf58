"""Settings for the taxonomy reader and the ontology extender."""

import json
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigurationError

load_dotenv()

ENV_PREFIX = "TAXONOMIST_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class TaxonomistSettings(BaseModel):
    """All recognized configuration options."""

    # Resources
    embeddings_path: str | None = Field(
        default=None, description="Path to a word2vec text file"
    )
    embeddings_backend: Literal["word2vec", "openai"] = Field(
        default="word2vec", description="Where composite embeddings come from"
    )
    embedding_model: str = Field(
        default="text-embedding-3-small", description="OpenAI model for the openai backend"
    )
    corpus_url: str = Field(
        default="http://localhost:9000", description="Root URL of the corpus query server"
    )
    corpus_timeout: float = Field(default=60.0, gt=0, description="Corpus request timeout (s)")
    rules_dir: str | None = Field(
        default=None, description="Directory with custom rule templates"
    )
    spacy_model: str = Field(default="en_core_web_sm", description="spaCy lemmatizer model")

    # Reader
    lemmatize: bool = Field(default=False, description="Match query tokens by lemma")
    evidence_cap: int = Field(
        default=5, ge=0, description="Evidence sentences kept per candidate"
    )

    # Ontology extender
    ontology_dir: str | None = Field(default=None, description="Directory of ontology leaf files")
    output_dir: str | None = Field(default=None, description="Directory for enriched leaf files")
    similarity_to_header_threshold: float = Field(
        default=0.4, description="Minimum decay-weighted relevance to the leaf header"
    )
    max_examples_per_leaf: int = Field(
        default=10, ge=0, description="Maximum examples added per ontology leaf"
    )
    include_original_leaf: bool = Field(
        default=True, description="Copy original header and examples to the output"
    )
    only_query_by_leaf_header_terms: bool = Field(
        default=False, description="Query with header terms only, not existing examples"
    )
    manual_eval: bool = Field(
        default=False, description="Write scored diagnostic tables instead of examples"
    )
    max_concurrency: int = Field(default=4, ge=1, description="Leaf files processed at once")

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> "TaxonomistSettings":
        """
        Build settings from ``<prefix><FIELD_NAME>`` environment variables.

        Variables are read after loading a ``.env`` file; unset variables keep
        their defaults.

        Raises:
            ConfigurationError: If a value cannot be parsed
        """
        values: dict[str, object] = {}
        for name, field in cls.model_fields.items():
            raw = os.getenv(f"{prefix}{name.upper()}")
            if raw is None:
                continue
            if field.annotation is bool:
                lowered = raw.strip().lower()
                if lowered not in _TRUE | _FALSE:
                    raise ConfigurationError(f"{prefix}{name.upper()} must be a boolean, got {raw!r}")
                values[name] = lowered in _TRUE
            else:
                values[name] = raw
        return cls._validate(values)

    @classmethod
    def from_file(cls, path: str | Path) -> "TaxonomistSettings":
        """
        Load settings from a JSON file.

        Raises:
            ConfigurationError: If the file is missing, not JSON, or invalid
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Config file {path} is not valid JSON: {e}") from e
        return cls._validate(data)

    @classmethod
    def _validate(cls, values: dict) -> "TaxonomistSettings":
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid settings: {e}") from e
