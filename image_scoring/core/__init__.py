from .client import DifyWorkflowClient
from .exceptions import (
    ConfigurationError,
    ReadError,
    ServiceError,
    UnexpectedError,
    UploadError,
    WorkflowError,
)
from .image_codec import encode_image
from .normalizer import ResponseNormalizer
from .types import (
    Comparison,
    ComparisonResponse,
    ComparisonResult,
    EvaluationResponse,
    PairwiseEvaluation,
    UploadedImage,
)
from .uploader import FileUploader
from .workflow import WorkflowInvoker

__all__ = [
    "DifyWorkflowClient",
    "FileUploader",
    "WorkflowInvoker",
    "ResponseNormalizer",
    "encode_image",
    "PairwiseEvaluation",
    "Comparison",
    "EvaluationResponse",
    "ComparisonResponse",
    "ComparisonResult",
    "UploadedImage",
    "ServiceError",
    "ConfigurationError",
    "ReadError",
    "UploadError",
    "WorkflowError",
    "UnexpectedError",
]
