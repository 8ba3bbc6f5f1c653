from datetime import datetime, timezone
import hashlib
import logging
from typing import Any, Callable

from image_scoring.core.types import (
    MAX_SCORE,
    Comparison,
    ComparisonResponse,
    ComparisonResult,
    EvaluationDetails,
    EvaluationResponse,
    EvaluationText,
    PairwiseEvaluation,
    WorkflowRequest,
    WorkflowResponse,
)

logger = logging.getLogger(__name__)

PENDING_ANALYSIS = "Analysis pending workflow configuration"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def placeholder_score(context: str | None, position: int) -> int:
    """Stable stand-in score in [0, 100] derived from the context and image position"""
    digest = hashlib.sha256(f"{context or ''}:{position}".encode("utf-8")).hexdigest()
    return int(digest, 16) % (MAX_SCORE + 1)


def rank_results(results: list[ComparisonResult]) -> list[ComparisonResult]:
    """
    Assign ranks in place (1 = highest score) without reordering the list.

    Ties keep input order.
    """
    order = sorted(range(len(results)), key=lambda i: (-results[i].score, results[i].image_index))
    for rank, i in enumerate(order, start=1):
        results[i].rank = rank
    return results


class ResponseNormalizer:
    """
    Maps a raw workflow result onto the local response types.

    The Dify workflow's output schema is not wired in yet, so scores and
    analysis are placeholders. Replacing ``_evaluation_text`` and
    ``_comparison_result`` is the only change needed once it is.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self._clock = clock

    def normalize(self, raw_result: dict[str, Any], request: WorkflowRequest) -> WorkflowResponse:
        logger.debug("Normalizing %s workflow result", type(raw_result).__name__)

        if isinstance(request, PairwiseEvaluation):
            return EvaluationResponse(text=self._evaluation_text(raw_result, request))
        if isinstance(request, Comparison):
            results = [
                self._comparison_result(raw_result, request, index)
                for index in range(len(request.target_images))
            ]
            return ComparisonResponse(results=rank_results(results))
        raise TypeError(f"Unsupported workflow request: {type(request).__name__}")

    def _evaluation_text(self, raw_result: dict[str, Any], request: PairwiseEvaluation) -> EvaluationText:
        if request.context:
            analysis = f"Placeholder analysis for context: {request.context}"
        else:
            analysis = PENDING_ANALYSIS
        return EvaluationText(
            score=placeholder_score(request.context, 0),
            analysis=analysis,
            details=EvaluationDetails(timestamp=self._clock(), context=request.context),
        )

    def _comparison_result(self, raw_result: dict[str, Any], request: Comparison, index: int) -> ComparisonResult:
        return ComparisonResult(
            image_index=index,
            score=placeholder_score(request.context, index),
            analysis=PENDING_ANALYSIS,
        )
