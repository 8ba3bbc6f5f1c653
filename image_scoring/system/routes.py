import logging
from typing import Any

from fastapi import APIRouter, Depends

from image_scoring.core.exception_handler import common_exception_handler
from image_scoring.evaluation.handler import EvaluationHandler, get_handler
from image_scoring.system.handler import get_config_info

logger = logging.getLogger(__name__)

SYSTEM_PREFIX = "/v1/system"

router = APIRouter(prefix=SYSTEM_PREFIX, tags=["system"])


@router.get(
    "/config",
    summary="Get effective configuration",
    description="Dify connection settings and upload limits; the API key is never returned",
)
@common_exception_handler
async def get_config(handler: EvaluationHandler = Depends(get_handler)) -> dict[str, Any]:
    return get_config_info(handler)
