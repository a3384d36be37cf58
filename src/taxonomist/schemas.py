"""Pydantic models for extracted, consolidated and scored relations."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RelationKind(str, Enum):
    """Taxonomic relation a rule template extracts."""

    HYPERNYM = "hypernym"
    HYPONYM = "hyponym"
    COHYPONYM = "cohyponym"


class Evidence(BaseModel):
    """A sentence that produced a match."""

    model_config = ConfigDict(frozen=True)

    document_id: int = Field(..., description="Identifier of the matching document")
    sentence: str = Field(..., description="Full text of the matching sentence")


class CorpusHit(BaseModel):
    """A single match returned by the corpus query client."""

    span: list[str] = Field(..., description="Tokens of the whole matched span")
    captures: dict[str, list[str]] = Field(
        default_factory=dict, description="Tokens of named captures within the match"
    )
    document_id: int = Field(..., description="Identifier of the matching document")
    sentence: str = Field(default="", description="Full text of the matching sentence")

    def result_tokens(self) -> list[str]:
        """Tokens of the `result` capture if the query defines one, else the span."""
        captured = self.captures.get("result")
        if captured:
            return list(captured)
        return list(self.span)


class CompiledQuery(BaseModel):
    """A structured query produced from one rule body."""

    model_config = ConfigDict(frozen=True)

    relation: RelationKind | None = Field(
        default=None, description="Relation of the rule file, None for ad hoc rules"
    )
    rule_index: int = Field(..., ge=0, description="Position of the rule body in its template")
    text: str = Field(..., description="Query text in the engine's pattern grammar")


class RawMatch(BaseModel):
    """One query hit before consolidation."""

    result: list[str] = Field(..., description="Result token sequence")
    evidence: Evidence = Field(..., description="Where the hit was found")


class ConsolidatedMatch(BaseModel):
    """Raw matches sharing a result, counted and with a bounded evidence sample."""

    result: list[str] = Field(..., description="Result token sequence")
    count: int = Field(..., ge=1, description="Number of raw matches collapsed into this one")
    evidence: list[Evidence] = Field(
        default_factory=list, description="First evidence sentences, in discovery order"
    )


class ScoredMatch(BaseModel):
    """A consolidated match ranked against a query."""

    query: list[str] = Field(..., description="Query token sequence")
    result: list[str] = Field(..., description="Result token sequence")
    count: int = Field(..., ge=1, description="Number of raw matches behind the result")
    similarity: float = Field(..., gt=0.0, le=1.0 + 1e-4, description="Floored sigmoid similarity")
    score: float = Field(..., ge=0.0, description="Rank key: log(1 + count) * similarity")
    evidence: list[Evidence] = Field(default_factory=list, description="Evidence sample")

    @property
    def surface(self) -> str:
        """Space-joined result."""
        return " ".join(self.result)
