from dataclasses import asdict
import logging

import httpx

from image_scoring.config import settings
from image_scoring.config.settings import AppSettings
from image_scoring.core import Comparison, DifyWorkflowClient, PairwiseEvaluation, encode_image
from image_scoring.core.types import ImageInput

from .schema import ComparisonRequest, ComparisonResponse, EvaluationResponse

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


class EvaluationHandler:
    """Async handler for evaluation and comparison requests"""

    def __init__(self, app_settings: AppSettings | None = None, http_client: httpx.AsyncClient | None = None):
        self._settings = app_settings or settings
        self._http_client = http_client

    def _client(self) -> DifyWorkflowClient:
        return DifyWorkflowClient(self._settings.dify, http_client=self._http_client)

    def check_image_size(self, image_bytes: bytes, name: str) -> None:
        limit_mb = self._settings.api.max_image_size_mb
        if len(image_bytes) > limit_mb * BYTES_PER_MB:
            raise ValueError(f"Image '{name}' exceeds the {limit_mb} MB limit")

    def _check_target_count(self, count: int) -> None:
        limit = self._settings.api.max_target_images
        if count > limit:
            raise ValueError(f"Too many target images: {count} (maximum {limit})")

    async def evaluate_pairwise(
        self, image1: ImageInput, image2: ImageInput, context: str | None = None
    ) -> EvaluationResponse:
        """Handle pairwise evaluation of two uploaded images"""
        request = PairwiseEvaluation(image1=image1, image2=image2, context=context or None)
        async with self._client() as client:
            result = await client.evaluate(request)
        return EvaluationResponse.model_validate(asdict(result))

    async def compare(self, request: ComparisonRequest) -> ComparisonResponse:
        """Handle comparison of pre-encoded images"""
        self._check_target_count(len(request.target_images))
        comparison = Comparison(
            base_image=request.base_image,
            target_images=tuple(request.target_images),
            context=request.context or None,
        )
        async with self._client() as client:
            result = await client.compare(comparison)
        return ComparisonResponse.model_validate(asdict(result))

    async def compare_files(
        self, base_image: bytes, target_images: list[bytes], context: str | None = None
    ) -> ComparisonResponse:
        """Encode uploaded files, then handle them as a comparison"""
        self._check_target_count(len(target_images))
        base_encoded = await encode_image(base_image)
        targets_encoded = [await encode_image(target) for target in target_images]
        logger.debug("Encoded base image and %d targets for comparison", len(targets_encoded))
        return await self.compare(
            ComparisonRequest(context=context, base_image=base_encoded, target_images=targets_encoded)
        )

    def describe(self) -> dict:
        return {
            **self._client().describe(),
            "max_image_size_mb": self._settings.api.max_image_size_mb,
            "max_target_images": self._settings.api.max_target_images,
        }


_handler: EvaluationHandler | None = None


def get_handler() -> EvaluationHandler:
    global _handler  # noqa: PLW0603
    if _handler is None:
        _handler = EvaluationHandler()
    return _handler
