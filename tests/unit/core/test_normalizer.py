from datetime import datetime, timezone

import pytest

from image_scoring.core.normalizer import PENDING_ANALYSIS, ResponseNormalizer, placeholder_score, rank_results
from image_scoring.core.types import (
    Comparison,
    ComparisonResponse,
    ComparisonResult,
    EvaluationResponse,
    PairwiseEvaluation,
)

FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def normalizer():
    return ResponseNormalizer(clock=lambda: FIXED_NOW)


class TestPlaceholderScore:
    """Test the stand-in score"""

    @pytest.mark.parametrize("context", [None, "", "clarity", "colour balance and framing"])
    def test_score_in_range(self, context):
        for position in range(50):
            assert 0 <= placeholder_score(context, position) <= 100

    def test_score_is_deterministic(self):
        assert placeholder_score("clarity", 3) == placeholder_score("clarity", 3)


class TestPairwiseNormalization:
    """Test normalization of pairwise evaluations"""

    def test_analysis_echoes_context(self, normalizer):
        request = PairwiseEvaluation(b"a", b"b", context="clarity")

        response = normalizer.normalize({}, request)

        assert isinstance(response, EvaluationResponse)
        assert "clarity" in response.text.analysis
        assert response.text.details.context == "clarity"
        assert 0 <= response.text.score <= 100

    def test_timestamp_is_normalization_time(self, normalizer):
        response = normalizer.normalize({"workflow_run_id": "run-1"}, PairwiseEvaluation(b"a", b"b"))

        assert response.text.details.timestamp == FIXED_NOW
        assert response.text.details.context is None
        assert response.text.analysis == PENDING_ANALYSIS


class TestComparisonNormalization:
    """Test normalization of comparisons"""

    def test_one_result_per_target_in_order(self, normalizer):
        request = Comparison("b64a", ["b64b", "b64c"])

        response = normalizer.normalize({}, request)

        assert isinstance(response, ComparisonResponse)
        assert len(response.results) == 2
        assert response.results[0].image_index == 0
        assert response.results[1].image_index == 1

    def test_many_targets(self, normalizer):
        request = Comparison("base", [f"t{i}" for i in range(12)], context="sharpness")

        response = normalizer.normalize({}, request)

        assert [r.image_index for r in response.results] == list(range(12))
        assert all(0 <= r.score <= 100 for r in response.results)
        assert sorted(r.rank for r in response.results) == list(range(1, 13))

    def test_unsupported_request(self, normalizer):
        with pytest.raises(TypeError):
            normalizer.normalize({}, "not a request")


class TestRanking:
    """Test comparison ranking"""

    def test_rank_by_score_keeps_order(self):
        results = [ComparisonResult(0, 40), ComparisonResult(1, 90), ComparisonResult(2, 40)]

        rank_results(results)

        assert [r.image_index for r in results] == [0, 1, 2]
        assert [r.rank for r in results] == [2, 1, 3]

    def test_ranked_view(self):
        response = ComparisonResponse(results=rank_results([ComparisonResult(0, 10), ComparisonResult(1, 70)]))
        assert [r.image_index for r in response.ranked()] == [1, 0]
