"""Tests for the REST corpus client."""

import httpx
import pytest

from taxonomist.corpus import OdinsonClient, parse_score_doc
from taxonomist.errors import QueryCompilationError
from taxonomist.schemas import CompiledQuery, RelationKind

WORDS = ["Pets", "such", "as", "toy", "poodles", "are", "popular", "."]


def score_doc(doc: int, score: float = 1.0, captures=None) -> dict:
    return {
        "odinsonDoc": doc,
        "score": score,
        "documentId": f"doc-{doc}",
        "words": WORDS,
        "matches": [
            {
                "span": {"start": 0, "end": 5},
                "captures": captures if captures is not None else [
                    {"result": {"span": {"start": 3, "end": 5}, "captures": []}}
                ],
            }
        ],
    }


@pytest.fixture
def query() -> CompiledQuery:
    return CompiledQuery(relation=RelationKind.HYPONYM, rule_index=0, text='[norm="pets"] such as')


def make_client(handler) -> OdinsonClient:
    transport = httpx.MockTransport(handler)
    return OdinsonClient(
        "http://corpus.test",
        client=httpx.Client(base_url="http://corpus.test", transport=transport),
    )


class TestParseScoreDoc:
    """Tests for converting scored documents into hits."""

    def test_span_and_named_capture(self):
        [hit] = parse_score_doc(score_doc(7))
        assert hit.span == ["Pets", "such", "as", "toy", "poodles"]
        assert hit.captures == {"result": ["toy", "poodles"]}
        assert hit.result_tokens() == ["toy", "poodles"]
        assert hit.document_id == 7
        assert hit.sentence == "Pets such as toy poodles are popular ."

    def test_capture_list_with_name_field(self):
        captures = [{"name": "result", "span": {"start": 4, "end": 5}}]
        [hit] = parse_score_doc(score_doc(1, captures=captures))
        assert hit.result_tokens() == ["poodles"]

    def test_without_capture_uses_whole_span(self):
        [hit] = parse_score_doc(score_doc(1, captures=[]))
        assert hit.result_tokens() == WORDS[:5]


class TestOdinsonClient:
    """Tests for executing queries over HTTP."""

    def test_execute_sends_query(self, query):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"totalHits": 1, "scoreDocs": [score_doc(3)]})

        hits = make_client(handler).execute(query)
        assert len(hits) == 1
        assert seen[0].url.path == "/api/execute/pattern"
        assert seen[0].url.params["odinsonQuery"] == query.text

    def test_pages_until_all_hits_read(self, query):
        pages = [
            {"totalHits": 3, "scoreDocs": [score_doc(1, 2.0), score_doc(2, 1.5)]},
            {"totalHits": 3, "scoreDocs": [score_doc(5, 1.0)]},
        ]
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(dict(request.url.params))
            return httpx.Response(200, json=pages[len(seen) - 1])

        hits = make_client(handler).execute(query)
        assert [h.document_id for h in hits] == [1, 2, 5]
        assert len(seen) == 2
        assert seen[1]["prevDoc"] == "2"
        assert seen[1]["prevScore"] == "1.5"

    def test_no_hits(self, query):
        client = make_client(lambda r: httpx.Response(200, json={"totalHits": 0, "scoreDocs": []}))
        assert client.execute(query) == []

    def test_rejected_query_is_compilation_error(self, query):
        client = make_client(lambda r: httpx.Response(400, text="parse error at 3"))
        with pytest.raises(QueryCompilationError, match="parse error"):
            client.execute(query)

    def test_server_error_propagates(self, query):
        client = make_client(lambda r: httpx.Response(500, text="boom"))
        with pytest.raises(httpx.HTTPStatusError):
            client.execute(query)
