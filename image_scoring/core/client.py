import logging
import time
from typing import Any, Awaitable, Callable, TypeVar

import httpx

from image_scoring.config.settings import DifySettings
from image_scoring.core.exceptions import ConfigurationError, ServiceError, UnexpectedError
from image_scoring.core.normalizer import ResponseNormalizer
from image_scoring.core.observability import record_workflow_run
from image_scoring.core.types import (
    Comparison,
    ComparisonResponse,
    EvaluationResponse,
    FileHandle,
    ImageInput,
    PairwiseEvaluation,
    WorkflowRequest,
    WorkflowResponse,
)
from image_scoring.core.uploader import FileUploader
from image_scoring.core.workflow import WorkflowInvoker

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DifyWorkflowClient:
    """
    Entry point for scoring images through a Dify workflow.

    Every failure leaves this class as a ServiceError subclass; httpx
    exceptions and other surprises are wrapped in UnexpectedError.

    Usage:
        async with DifyWorkflowClient(settings.dify) as client:
            response = await client.evaluate(PairwiseEvaluation(image1, image2, context="clarity"))
    """

    def __init__(
        self,
        settings: DifySettings,
        http_client: httpx.AsyncClient | None = None,
        normalizer: ResponseNormalizer | None = None,
    ):
        """Initialize with optional HTTP client for connection reuse"""
        self._settings = settings
        self._http_client = http_client
        self._own_client = http_client is None
        self._normalizer = normalizer or ResponseNormalizer()

    async def __aenter__(self):
        if self._own_client:
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(self._settings.timeout))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._own_client and self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def settings(self) -> DifySettings:
        return self._settings

    def _require_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            raise UnexpectedError("HTTP client not initialized. Use async context manager.")
        return self._http_client

    async def _guarded(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        if not self._settings.is_configured:
            raise ConfigurationError("Dify API key is not configured")

        try:
            return await call()
        except ServiceError:
            raise
        except Exception as e:
            logger.exception("Unexpected error while trying to %s", operation)
            raise UnexpectedError(f"Failed to {operation}: {e}") from e

    async def upload(self, resource: ImageInput) -> FileHandle:
        """Upload a single image and return its Dify file handle"""

        async def call() -> FileHandle:
            return await FileUploader(self._require_http_client(), self._settings).upload(resource)

        return await self._guarded("upload image", call)

    async def run(self, request: WorkflowRequest) -> WorkflowResponse:
        """Invoke the workflow for either request variant and normalize the result"""
        request_type = type(request).__name__

        async def call() -> WorkflowResponse:
            invoker = WorkflowInvoker(self._require_http_client(), self._settings)
            raw_result = await invoker.invoke(request)
            return self._normalizer.normalize(raw_result, request)

        start_time = time.time()
        try:
            response = await self._guarded(f"run {request_type.lower()} workflow", call)
        except ServiceError as e:
            record_workflow_run(request_type, e.error_type, time.time() - start_time)
            raise

        duration = time.time() - start_time
        record_workflow_run(request_type, "success", duration)
        logger.info("%s finished in %.1f ms", request_type, duration * 1000)
        return response

    async def evaluate(self, request: PairwiseEvaluation) -> EvaluationResponse:
        """Score two images against each other"""
        return await self.run(request)

    async def compare(self, request: Comparison) -> ComparisonResponse:
        """Score each target image against the base image in a single workflow call"""
        return await self.run(request)

    def describe(self) -> dict[str, Any]:
        """Non-secret view of the client configuration"""
        return {
            "base_url": self._settings.api_root,
            "user": self._settings.user,
            "configured": self._settings.is_configured,
            "timeout": self._settings.timeout,
        }
