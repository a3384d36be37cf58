"""Corpus query client interface and a REST adapter for an Odinson server."""

import logging
from typing import Any, Protocol

import httpx

from .errors import QueryCompilationError
from .schemas import CompiledQuery, CorpusHit

logger = logging.getLogger(__name__)

# Endpoint executing a pattern query
PATTERN_ENDPOINT = "/api/execute/pattern"


class CorpusClient(Protocol):
    """Executes compiled queries against an indexed, annotated corpus."""

    def execute(self, query: CompiledQuery) -> list[CorpusHit]: ...


def _span_tokens(words: list[str], span: dict[str, Any] | None) -> list[str]:
    if not span:
        return []
    return words[span["start"] : span["end"]]


def _iter_captures(captures: Any):
    """Yield (name, capture) pairs from the shapes the server may send."""
    if isinstance(captures, dict):
        yield from captures.items()
        return
    for capture in captures or []:
        if "name" in capture:
            yield capture["name"], capture
        else:
            yield from capture.items()


def parse_score_doc(score_doc: dict[str, Any]) -> list[CorpusHit]:
    """
    Convert one scored document of a pattern response into hits.

    Args:
        score_doc: Scored document with ``words`` and ``matches``

    Returns:
        One CorpusHit per match in the document
    """
    words = score_doc.get("words") or []
    sentence = score_doc.get("sentence") or " ".join(words)
    document_id = int(score_doc.get("odinsonDoc", score_doc.get("documentId", -1)))

    hits = []
    for match in score_doc.get("matches", []):
        captures = {}
        for name, capture in _iter_captures(match.get("captures")):
            span = capture.get("span", capture)
            captures[name] = _span_tokens(words, span)
        hits.append(
            CorpusHit(
                span=_span_tokens(words, match.get("span")),
                captures=captures,
                document_id=document_id,
                sentence=sentence,
            )
        )
    return hits


class OdinsonClient:
    """
    Pattern queries over HTTP against an Odinson REST server.

    Results are paged with ``prevDoc``/``prevScore`` until every hit has
    been read. A 400 response means the server rejected the query syntax.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Server root, e.g. http://localhost:9000
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client
        """
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def execute(self, query: CompiledQuery) -> list[CorpusHit]:
        hits: list[CorpusHit] = []
        params: dict[str, Any] = {"odinsonQuery": query.text}
        seen_docs = 0

        while True:
            response = self._client.get(PATTERN_ENDPOINT, params=params)
            if response.status_code == 400:
                raise QueryCompilationError(
                    f"Corpus server rejected query: {response.text}", query.text
                )
            response.raise_for_status()
            payload = response.json()

            score_docs = payload.get("scoreDocs") or []
            for score_doc in score_docs:
                hits.extend(parse_score_doc(score_doc))
            seen_docs += len(score_docs)

            total = payload.get("totalHits", 0)
            if not score_docs or seen_docs >= total:
                break
            last = score_docs[-1]
            params = {
                "odinsonQuery": query.text,
                "prevDoc": last["odinsonDoc"],
                "prevScore": last["score"],
            }

        logger.debug(f"[CORPUS] rule {query.rule_index}: {len(hits)} hits in {seen_docs} docs")
        return hits

    def close(self) -> None:
        self._client.close()
