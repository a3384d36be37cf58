"""Ontology extension: enrich ontology leaf files with related terms."""

from .extender import OntologyExtender
from .parser import conjuncts, leaf_terms, parse_header_path, parse_leaf, render_leaf, split_words
from .schemas import (
    CandidateRow,
    CollectedCandidates,
    ExtensionSummary,
    LeafReport,
    OntologyHeaderPath,
    OntologyLeafFile,
)

__all__ = [
    # Main classes
    "OntologyExtender",
    # Parsing
    "parse_leaf",
    "parse_header_path",
    "leaf_terms",
    "conjuncts",
    "split_words",
    "render_leaf",
    # Schemas
    "OntologyHeaderPath",
    "OntologyLeafFile",
    "CandidateRow",
    "CollectedCandidates",
    "LeafReport",
    "ExtensionSummary",
]
