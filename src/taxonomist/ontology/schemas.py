"""Pydantic models for ontology leaf files and extension results."""

from typing import Literal

from pydantic import BaseModel, Field

from ..schemas import ScoredMatch


class OntologyHeaderPath(BaseModel):
    """Root-to-leaf path of an ontology node, each segment split into words."""

    segments: list[list[str]] = Field(
        default_factory=list, description="Path segments from root to leaf, as word lists"
    )

    @property
    def leaf(self) -> list[str]:
        """Words of the leaf segment."""
        return self.segments[-1] if self.segments else []

    def weights(self) -> list[float]:
        """
        Decay weight per segment, in root-to-leaf order.

        The leaf weighs 1.0 and each step towards the root halves the weight,
        so a segment at distance d from the leaf weighs 2^-d.
        """
        n = len(self.segments)
        return [2.0 ** -(n - 1 - i) for i in range(n)]


class OntologyLeafFile(BaseModel):
    """A parsed ontology leaf file."""

    name: str = Field(..., description="File name of the leaf")
    header_lines: list[str] = Field(..., description="Original header lines, with '#'")
    header_paths: list[OntologyHeaderPath] = Field(
        ..., description="One decomposed path per header line"
    )
    header_terms: list[str] = Field(
        default_factory=list, description="Query terms derived from the leaf segments"
    )
    examples: list[str] = Field(
        default_factory=list, description="Existing example terms, in file order"
    )

    @property
    def path(self) -> OntologyHeaderPath:
        """Header path used for relevance filtering (the first header line)."""
        return self.header_paths[0]


class CandidateRow(BaseModel):
    """A candidate that passed the header relevance filter."""

    match: ScoredMatch = Field(..., description="Ranked candidate")
    relevance: float = Field(..., description="Decay-weighted similarity to the header path")

    @property
    def surface(self) -> str:
        return self.match.surface


class CollectedCandidates(BaseModel):
    """Relevant candidates of one leaf, partitioned for diagnostics."""

    all_queries: list[CandidateRow] = Field(
        default_factory=list, description="Candidates found by any query"
    )
    single_word: list[CandidateRow] = Field(
        default_factory=list, description="Candidates found by single-word queries"
    )
    multi_word: list[CandidateRow] = Field(
        default_factory=list, description="Candidates found by multi-word queries"
    )


class LeafReport(BaseModel):
    """Outcome of extending one leaf file."""

    name: str = Field(..., description="File name of the leaf")
    status: Literal["extended", "failed"] = Field(..., description="Terminal state")
    added: int = Field(default=0, description="Number of examples written")
    error: str | None = Field(default=None, description="Failure message")


class ExtensionSummary(BaseModel):
    """Outcome of a directory run."""

    reports: list[LeafReport] = Field(default_factory=list)

    @property
    def succeeded(self) -> list[LeafReport]:
        return [r for r in self.reports if r.status == "extended"]

    @property
    def failed(self) -> list[LeafReport]:
        return [r for r in self.reports if r.status == "failed"]
