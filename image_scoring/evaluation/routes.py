from fastapi import APIRouter, Depends, File, Form, UploadFile

from image_scoring.core.exception_handler import common_exception_handler
from image_scoring.core.types import UploadedImage
from image_scoring.evaluation.handler import EvaluationHandler, get_handler
from image_scoring.evaluation.schema import ComparisonRequest, ComparisonResponse, EvaluationResponse
from image_scoring.log import get_logger

logger = get_logger(__name__)

EVALUATION_PREFIX = "/v1/evaluation"

router = APIRouter(prefix=EVALUATION_PREFIX, tags=["evaluation"])


async def _read_upload(upload: UploadFile, handler: EvaluationHandler) -> bytes:
    data = await upload.read()
    handler.check_image_size(data, upload.filename or "upload")
    return data


@router.post(
    "/pairwise",
    response_model=EvaluationResponse,
    response_model_exclude_none=True,
    summary="Evaluate two images against each other",
)
@common_exception_handler
async def evaluate_pairwise(
    image1: UploadFile = File(...),
    image2: UploadFile = File(...),
    context: str | None = Form(None),
    handler: EvaluationHandler = Depends(get_handler),
) -> EvaluationResponse:
    first = UploadedImage(id=image1.filename or "image1", resource=await _read_upload(image1, handler))
    second = UploadedImage(id=image2.filename or "image2", resource=await _read_upload(image2, handler))
    return await handler.evaluate_pairwise(first, second, context)


@router.post(
    "/compare",
    response_model=ComparisonResponse,
    response_model_exclude_none=True,
    summary="Score base64 target images against a base image",
)
@common_exception_handler
async def compare(
    request: ComparisonRequest, handler: EvaluationHandler = Depends(get_handler)
) -> ComparisonResponse:
    return await handler.compare(request)


@router.post(
    "/compare/upload",
    response_model=ComparisonResponse,
    response_model_exclude_none=True,
    summary="Score uploaded target images against an uploaded base image",
)
@common_exception_handler
async def compare_upload(
    base_image: UploadFile = File(...),
    target_images: list[UploadFile] = File(...),
    context: str | None = Form(None),
    handler: EvaluationHandler = Depends(get_handler),
) -> ComparisonResponse:
    base = await _read_upload(base_image, handler)
    targets = [await _read_upload(target, handler) for target in target_images]
    return await handler.compare_files(base, targets, context)
