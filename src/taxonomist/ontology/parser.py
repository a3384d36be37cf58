"""Reading and writing the flat-file ontology leaf format.

A leaf file holds one or more header lines starting with ``#`` that encode
the node's path as CamelCase segments joined by ``/``, followed by example
terms, one per line::

    #Event/AnimalsAndPets/CatsAndDogs
    labrador
    siamese cat
"""

import re

from .schemas import OntologyHeaderPath, OntologyLeafFile

# Words joining sibling concepts inside one segment
CONNECTIVES = frozenset({"and", "or"})

_WORD = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")


def split_words(segment: str) -> list[str]:
    """
    Split a segment on capitalization boundaries and non-alphanumerics.

    Example:
        >>> split_words("CatsAndDogs")
        ['cats', 'and', 'dogs']
    """
    return [w.lower() for w in _WORD.findall(segment)]


def conjuncts(segment: str) -> list[list[str]]:
    """
    Split a segment into its conjoined concepts.

    Example:
        >>> conjuncts("SmallCatsAndLargeDogs")
        [['small', 'cats'], ['large', 'dogs']]
    """
    groups: list[list[str]] = [[]]
    for word in split_words(segment):
        if word in CONNECTIVES:
            groups.append([])
        else:
            groups[-1].append(word)
    return [g for g in groups if g]


def _segments(line: str) -> list[str]:
    return [s for s in line.strip().lstrip("#").split("/") if split_words(s)]


def parse_header_path(line: str) -> OntologyHeaderPath:
    """Decompose a header line into root-to-leaf segments of content words."""
    segments = []
    for segment in _segments(line):
        words = [w for group in conjuncts(segment) for w in group]
        if words:
            segments.append(words)
    return OntologyHeaderPath(segments=segments)


def leaf_terms(line: str) -> list[str]:
    """Query terms named by the last segment of a header line."""
    segments = _segments(line)
    if not segments:
        return []
    return [" ".join(group) for group in conjuncts(segments[-1])]


def parse_leaf(name: str, text: str) -> OntologyLeafFile:
    """
    Parse the contents of a leaf file.

    Args:
        name: File name, kept for reporting
        text: File contents

    Returns:
        Parsed leaf with distinct examples in file order

    Raises:
        ValueError: If the file has no usable header line
    """
    header_lines: list[str] = []
    examples: list[str] = []
    for line in text.splitlines():
        if line.startswith("#"):
            header_lines.append(line.rstrip())
        else:
            example = line.strip()
            if example and example not in examples:
                examples.append(example)

    paths = [parse_header_path(line) for line in header_lines]
    paths = [p for p in paths if p.segments]
    if not paths:
        raise ValueError(f"{name}: no ontology header line found")

    terms: list[str] = []
    for line in header_lines:
        for term in leaf_terms(line):
            if term not in terms:
                terms.append(term)

    return OntologyLeafFile(
        name=name,
        header_lines=header_lines,
        header_paths=paths,
        header_terms=terms,
        examples=examples,
    )


def render_leaf(
    leaf: OntologyLeafFile,
    additions: list[str],
    include_original: bool = True,
) -> str:
    """Leaf file text: original header and examples (optionally), then additions."""
    lines: list[str] = []
    if include_original:
        lines.extend(leaf.header_lines)
        lines.extend(leaf.examples)
    lines.extend(additions)
    return "".join(f"{line}\n" for line in lines)
