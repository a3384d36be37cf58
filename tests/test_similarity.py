"""Tests for similarity scoring and ranking."""

import math

import pytest

from taxonomist.schemas import ConsolidatedMatch, Evidence
from taxonomist.similarity import (
    SIMILARITY_FLOOR,
    SimilarityScorer,
    floored_similarity,
    rank_score,
    sigmoid,
)
from tests.fakes import FakeEmbeddings


class TestSigmoid:
    """Tests for the logistic function."""

    def test_zero_returns_half(self):
        assert sigmoid(0.0) == 0.5

    def test_symmetry(self):
        assert abs(sigmoid(2.0) + sigmoid(-2.0) - 1.0) < 1e-12

    def test_extreme_inputs_do_not_overflow(self):
        assert sigmoid(1000.0) == 1.0
        assert sigmoid(-1000.0) == 0.0

    def test_floor_keeps_similarity_positive(self):
        """Even at the lower asymptote similarity stays above zero."""
        assert floored_similarity(-1000.0) == SIMILARITY_FLOOR
        assert floored_similarity(-1000.0) > 0


class TestRankScore:
    """Tests for the count/similarity rank key."""

    @pytest.mark.parametrize("c1,c2", [(0, 1), (1, 2), (2, 10), (10, 1000)])
    def test_monotonic_in_count(self, c1, c2):
        assert rank_score(c1, 0.6) < rank_score(c2, 0.6)

    @pytest.mark.parametrize("s1,s2", [(SIMILARITY_FLOOR, 0.1), (0.3, 0.31), (0.5, 1.0)])
    def test_monotonic_in_similarity(self, s1, s2):
        assert rank_score(3, s1) < rank_score(3, s2)

    def test_formula(self):
        assert rank_score(3, 0.5) == pytest.approx(math.log(4) * 0.5)


class TestSimilarityScorer:
    """Tests for scoring and ranking candidates."""

    @pytest.fixture
    def scorer(self, animal_embeddings) -> SimilarityScorer:
        return SimilarityScorer(animal_embeddings)

    def test_raw_similarity_is_dot_product(self, scorer):
        assert scorer.raw_similarity(["dog"], ["poodle"]) == pytest.approx(0.9)
        assert scorer.raw_similarity(["dog"], ["terrier"]) == pytest.approx(0.2)

    def test_raw_similarity_not_normalized(self, scorer):
        """Composite vectors are used as the store returns them."""
        assert scorer.raw_similarity(["dog", "dog"], ["dog"]) == pytest.approx(2.0)

    def test_unknown_tokens_fall_back_to_zero_vector(self, scorer):
        assert scorer.raw_similarity(["dog"], ["zebra"]) == 0.0

    def test_score_fields(self, scorer):
        evidence = [Evidence(document_id=1, sentence="dogs such as poodles")]
        match = ConsolidatedMatch(result=["poodle"], count=3, evidence=evidence)
        scored = scorer.score(["dog"], match)

        expected_similarity = SIMILARITY_FLOOR + 1 / (1 + math.exp(-0.9))
        assert scored.query == ["dog"]
        assert scored.result == ["poodle"]
        assert scored.count == 3
        assert scored.similarity == pytest.approx(expected_similarity)
        assert scored.score == pytest.approx(math.log(4) * expected_similarity)
        assert scored.evidence == evidence

    def test_score_does_not_modify_match(self, scorer):
        match = ConsolidatedMatch(result=["poodle"], count=3)
        scorer.score(["dog"], match)
        assert match == ConsolidatedMatch(result=["poodle"], count=3)

    def test_rank_orders_by_descending_score(self, scorer):
        matches = [
            ConsolidatedMatch(result=["terrier"], count=1),
            ConsolidatedMatch(result=["poodle"], count=3),
        ]
        ranked = scorer.rank(["dog"], matches)
        assert [r.result for r in ranked] == [["poodle"], ["terrier"]]

    def test_rank_excludes_query_itself(self, scorer):
        matches = [
            ConsolidatedMatch(result=["dog"], count=50),
            ConsolidatedMatch(result=["poodle"], count=1),
        ]
        ranked = scorer.rank(["dog"], matches)
        assert [r.result for r in ranked] == [["poodle"]]

    def test_self_match_exclusion_is_verbatim(self, scorer):
        """Only exact equality is excluded; case variants stay."""
        ranked = scorer.rank(["dog"], [ConsolidatedMatch(result=["Dog"], count=1)])
        assert [r.result for r in ranked] == [["Dog"]]

    def test_ties_keep_input_order(self):
        scorer = SimilarityScorer(FakeEmbeddings())
        matches = [ConsolidatedMatch(result=[w], count=2) for w in ["b", "a", "c"]]
        ranked = scorer.rank(["x"], matches)
        assert [r.result for r in ranked] == [["b"], ["a"], ["c"]]
