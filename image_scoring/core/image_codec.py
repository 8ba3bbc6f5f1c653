import asyncio
import base64
import binascii
from io import BytesIO
import logging
from pathlib import Path

import aiofiles
from PIL import Image, UnidentifiedImageError

from image_scoring.core.exceptions import ReadError
from image_scoring.core.types import ImageInput, UploadedImage, unwrap_image

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"


def is_data_url(value: str) -> bool:
    return value.startswith("data:")


def strip_data_url_prefix(text: str) -> str:
    """Return the base64 payload of ``text``, dropping a ``data:...;base64,`` header if present"""
    if not is_data_url(text):
        return text
    header, sep, encoded = text.partition(",")
    if not sep:
        raise ReadError(f"Malformed data URL: missing payload after header {header[:40]!r}")
    return encoded


def to_data_url(encoded: str, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    return f"data:{mime_type};base64,{strip_data_url_prefix(encoded)}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Sniff the image MIME type from its header, falling back to JPEG"""
    try:
        with Image.open(BytesIO(image_bytes)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError):
        logger.debug("Could not identify image format, assuming %s", DEFAULT_MIME_TYPE)
        return DEFAULT_MIME_TYPE
    return Image.MIME.get(image_format, DEFAULT_MIME_TYPE)


def resource_filename(resource: ImageInput, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    """Filename sent with multipart uploads"""
    if isinstance(resource, UploadedImage):
        if Path(resource.id).suffix:
            return Path(resource.id).name
        resource = resource.resource
    if isinstance(resource, Path) or (isinstance(resource, str) and not is_data_url(resource)):
        return Path(resource).name
    extension = mime_type.split("/", 1)[-1]
    return f"image.{extension}"


def _decode_base64(encoded: str) -> bytes:
    return base64.b64decode(encoded, validate=True)


def _encode_base64(image_bytes: bytes) -> str:
    return base64.b64encode(image_bytes).decode("ascii")


async def read_image_bytes(resource: ImageInput) -> bytes:
    """
    Read the raw bytes behind an image resource.

    Args:
        resource: Raw bytes, a local file path, a base64 data URL, or an UploadedImage wrapping one

    Returns:
        Image bytes

    Raises:
        ReadError: File missing or unreadable, or data URL not valid base64
    """
    resource = unwrap_image(resource)
    if isinstance(resource, (bytes, bytearray)):
        return bytes(resource)

    if isinstance(resource, str) and is_data_url(resource):
        try:
            return await asyncio.to_thread(_decode_base64, strip_data_url_prefix(resource))
        except (binascii.Error, ValueError) as e:
            raise ReadError(f"Failed to decode base64 data URL: {e}") from e

    if not isinstance(resource, (str, Path)):
        raise ReadError(f"Unsupported image resource type: {type(resource).__name__}")

    try:
        async with aiofiles.open(resource, "rb") as f:
            return await f.read()
    except OSError as e:
        raise ReadError(f"Failed to read image from file {resource}: {e}") from e


async def encode_image(resource: ImageInput) -> str:
    """Encode an image resource as pure base64 text, without any data URL prefix"""
    resource = unwrap_image(resource)
    if isinstance(resource, str) and is_data_url(resource):
        # Validate and return the payload as-is
        await read_image_bytes(resource)
        return strip_data_url_prefix(resource)

    image_bytes = await read_image_bytes(resource)
    return await asyncio.to_thread(_encode_base64, image_bytes)


async def inline_data_url(encoded: str) -> str:
    """Build a data URL for pre-encoded image text, with the MIME type sniffed from its bytes"""
    image_bytes = await read_image_bytes(to_data_url(encoded))
    return to_data_url(encoded, detect_mime_type(image_bytes))
