import logging
from typing import Any

from image_scoring.__version__ import __version__
from image_scoring.evaluation.handler import EvaluationHandler

logger = logging.getLogger(__name__)


def get_config_info(handler: EvaluationHandler) -> dict[str, Any]:
    """
    Effective configuration without the API key.

    Args:
        handler: Evaluation handler whose settings are reported

    Returns:
        Dictionary with the Dify base URL, caller tag, configured flag and upload limits
    """
    return {"version": __version__, "dify": handler.describe()}
