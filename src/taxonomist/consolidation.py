"""Consolidation of raw query hits into counted, evidenced candidates."""

from collections.abc import Iterable, Mapping

from .schemas import ConsolidatedMatch, RawMatch

# Accumulated candidate counts keyed by result tokens
Tally = dict[tuple[str, ...], int]


def consolidate(raw_matches: Iterable[RawMatch], evidence_cap: int) -> list[ConsolidatedMatch]:
    """
    Group raw matches by their exact result tokens.

    Groups keep the order in which their result was first seen. Each group's
    count is its full size; only the first ``evidence_cap`` evidence
    sentences are kept, in discovery order.

    Args:
        raw_matches: Hits to consolidate
        evidence_cap: Maximum evidence sentences kept per result

    Returns:
        One ConsolidatedMatch per distinct result
    """
    if evidence_cap < 0:
        raise ValueError("evidence_cap must be non-negative")

    groups: dict[tuple[str, ...], ConsolidatedMatch] = {}
    for raw in raw_matches:
        key = tuple(raw.result)
        group = groups.get(key)
        if group is None:
            group = ConsolidatedMatch(result=list(raw.result), count=1)
            groups[key] = group
        else:
            group.count += 1
        if len(group.evidence) < evidence_cap:
            group.evidence.append(raw.evidence)

    return list(groups.values())


def head(tokens: list[str]) -> list[str]:
    """
    Head of a token sequence, taken as its final token.

    This is a positional approximation, not syntactic head extraction;
    expansion ranking depends on it.
    """
    return [tokens[-1]] if tokens else []


def tally(counts: Mapping[tuple[str, ...], int], matches: Iterable) -> Tally:
    """
    Add match counts to an accumulated tally.

    Args:
        counts: Tally so far (left untouched)
        matches: Anything with ``result`` and ``count`` attributes

    Returns:
        New tally with the counts summed per result
    """
    updated = dict(counts)
    for m in matches:
        key = tuple(m.result)
        updated[key] = updated.get(key, 0) + m.count
    return updated


def tally_heads(counts: Mapping[tuple[str, ...], int]) -> Tally:
    """Add the head of every tallied candidate once more to a new tally."""
    updated = dict(counts)
    for candidate in counts:
        key = tuple(head(list(candidate)))
        if key:
            updated[key] = updated.get(key, 0) + 1
    return updated


def to_matches(counts: Mapping[tuple[str, ...], int]) -> list[ConsolidatedMatch]:
    """Turn a tally into evidence-free consolidated matches."""
    return [
        ConsolidatedMatch(result=list(result), count=count)
        for result, count in counts.items()
        if count > 0
    ]
