import asyncio
import logging
from typing import Any

import httpx

from image_scoring.config.settings import DifySettings
from image_scoring.constants import RESPONSE_MODE_BLOCKING, WORKFLOW_RUN_PATH
from image_scoring.core.exceptions import ConfigurationError, WorkflowError
from image_scoring.core.image_codec import inline_data_url
from image_scoring.core.types import Comparison, FileHandle, ImageInput, PairwiseEvaluation, WorkflowRequest
from image_scoring.core.uploader import FileUploader

logger = logging.getLogger(__name__)

CONTEXT_INPUT_KEY = "context"


def uploaded_file_reference(file_id: FileHandle) -> dict[str, str]:
    return {"type": "image", "transfer_method": "local_file", "upload_file_id": file_id}


def inline_file_reference(data_url: str) -> dict[str, str]:
    return {"type": "image", "transfer_method": "remote_url", "url": data_url}


def build_workflow_payload(inputs: dict[str, Any], user: str) -> dict[str, Any]:
    return {"inputs": inputs, "response_mode": RESPONSE_MODE_BLOCKING, "user": user}


class WorkflowInvoker:
    """
    Sends evaluation and comparison requests to the Dify workflow-run endpoint.

    Pairwise evaluations upload both images concurrently and reference the
    returned handles. Comparisons skip the upload step and embed every image
    inline, so N targets cost one workflow call.
    """

    def __init__(self, http_client: httpx.AsyncClient, settings: DifySettings, uploader: FileUploader | None = None):
        self._http_client = http_client
        self._settings = settings
        self._uploader = uploader or FileUploader(http_client, settings)

    async def invoke(self, request: WorkflowRequest) -> dict[str, Any]:
        """
        Run the workflow for one request and return the parsed JSON body.

        Raises:
            ConfigurationError: No API key configured; nothing is sent
            ReadError: An image could not be read or decoded
            UploadError: Either upload failed; the workflow is not called
            WorkflowError: Non-2xx response, or a body that is not a JSON object
        """
        if not self._settings.is_configured:
            raise ConfigurationError("Dify API key is not configured")

        inputs = await self._build_inputs(request)
        payload = build_workflow_payload(inputs, self._settings.user)

        response = await self._http_client.post(
            self._settings.url_for(WORKFLOW_RUN_PATH),
            json=payload,
            headers=self._settings.auth_headers(),
        )

        if not response.is_success:
            body = response.text
            logger.error("Dify workflow run failed with status %s: %s", response.status_code, body)
            raise WorkflowError(f"Workflow request failed: HTTP {response.status_code}", response.status_code, body)

        try:
            result = response.json()
        except ValueError as e:
            raise WorkflowError("Workflow returned a non-JSON body", response.status_code, response.text) from e

        if not isinstance(result, dict):
            raise WorkflowError("Workflow returned a non-object JSON body", response.status_code, response.text)
        return result

    async def _build_inputs(self, request: WorkflowRequest) -> dict[str, Any]:
        if not isinstance(request, (PairwiseEvaluation, Comparison)):
            raise TypeError(f"Unsupported workflow request: {type(request).__name__}")

        inputs: dict[str, Any] = {}
        if request.context:
            inputs[CONTEXT_INPUT_KEY] = request.context

        if isinstance(request, PairwiseEvaluation):
            file_id1, file_id2 = await self._upload_all([request.image1, request.image2])
            inputs["image1"] = uploaded_file_reference(file_id1)
            inputs["image2"] = uploaded_file_reference(file_id2)
        else:
            data_urls = await asyncio.gather(
                inline_data_url(request.base_image),
                *(inline_data_url(target) for target in request.target_images),
            )
            inputs["image"] = [inline_file_reference(url) for url in data_urls]

        return inputs

    async def _upload_all(self, resources: list[ImageInput]) -> list[FileHandle]:
        """Upload concurrently; the first failure cancels the remaining uploads and propagates"""
        tasks = [asyncio.ensure_future(self._uploader.upload(resource)) for resource in resources]
        try:
            return await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            # Let cancelled uploads unwind before the error propagates
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
