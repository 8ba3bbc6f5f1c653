import logging
from typing import Any

import httpx

from image_scoring.config.settings import DifySettings
from image_scoring.constants import UPLOAD_PATH
from image_scoring.core.exceptions import ConfigurationError, UploadError
from image_scoring.core.image_codec import detect_mime_type, read_image_bytes, resource_filename
from image_scoring.core.observability import record_upload
from image_scoring.core.types import FileHandle, ImageInput

logger = logging.getLogger(__name__)

# The upload response names its identifier differently across Dify versions; first match wins
UPLOAD_ID_KEYS = ("id", "file_id", "upload_file_id")


def extract_upload_id(body: dict[str, Any]) -> FileHandle | None:
    for key in UPLOAD_ID_KEYS:
        value = body.get(key)
        if value:
            return str(value)
    return None


class FileUploader:
    """
    Uploads image resources to the Dify files endpoint.

    Holds no per-call state, so one instance can serve concurrent uploads.
    """

    def __init__(self, http_client: httpx.AsyncClient, settings: DifySettings):
        self._http_client = http_client
        self._settings = settings

    async def upload(self, resource: ImageInput) -> FileHandle:
        """
        Upload one image and return the remote file handle.

        Raises:
            ConfigurationError: No API key configured
            ReadError: Resource could not be read
            UploadError: Non-2xx response, or a body without a known identifier key
        """
        if not self._settings.is_configured:
            raise ConfigurationError("Dify API key is not configured")

        image_bytes = await read_image_bytes(resource)
        mime_type = detect_mime_type(image_bytes)
        files = {"file": (resource_filename(resource, mime_type), image_bytes, mime_type)}

        response = await self._http_client.post(
            self._settings.url_for(UPLOAD_PATH),
            files=files,
            data={"user": self._settings.user},
            headers=self._settings.auth_headers(),
        )

        if not response.is_success:
            body = response.text
            logger.error("Dify file upload failed with status %s: %s", response.status_code, body)
            record_upload("http_error")
            raise UploadError(f"File upload failed: HTTP {response.status_code}", response.status_code, body)

        try:
            payload = response.json()
        except ValueError as e:
            record_upload("invalid_body")
            raise UploadError("File upload returned a non-JSON body", response.status_code, response.text) from e

        file_id = extract_upload_id(payload) if isinstance(payload, dict) else None
        if file_id is None:
            record_upload("invalid_body")
            raise UploadError(
                f"File upload response has none of the keys {', '.join(UPLOAD_ID_KEYS)}",
                response.status_code,
                response.text,
            )

        record_upload("success")
        logger.debug("Uploaded %d bytes (%s) as file %s", len(image_bytes), mime_type, file_id)
        return file_id
