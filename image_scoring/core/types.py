from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Union

# Raw bytes, a local file path, or a data URL
ImageResource = Union[bytes, str, Path]

# Opaque identifier returned by the Dify upload endpoint
FileHandle = str

MIN_SCORE = 0
MAX_SCORE = 100


def _check_score(score: float) -> None:
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise ValueError(f"score must be within [{MIN_SCORE}, {MAX_SCORE}], got {score}")


@dataclass
class UploadedImage:
    """Image selected by a caller, held only for the duration of one request"""

    id: str
    resource: ImageResource
    url: str = ""
    is_base: bool = False


# Anything an operation accepts as an image
ImageInput = Union[ImageResource, UploadedImage]


def unwrap_image(image: ImageInput) -> ImageResource:
    return image.resource if isinstance(image, UploadedImage) else image


@dataclass(frozen=True)
class PairwiseEvaluation:
    """Two raw images evaluated against each other; both are uploaded first"""

    image1: ImageInput
    image2: ImageInput
    context: str | None = None


@dataclass(frozen=True)
class Comparison:
    """Base image plus N target images, all pre-encoded as base64 text"""

    base_image: str
    target_images: tuple[str, ...]
    context: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "target_images", tuple(self.target_images))
        if not self.target_images:
            raise ValueError("Comparison requires at least one target image")


WorkflowRequest = Union[PairwiseEvaluation, Comparison]


@dataclass
class EvaluationDetails:
    timestamp: datetime
    context: str | None = None


@dataclass
class EvaluationText:
    score: float
    analysis: str
    details: EvaluationDetails | None = None

    def __post_init__(self):
        _check_score(self.score)


@dataclass
class EvaluationResponse:
    """Normalized result of a pairwise evaluation"""

    text: EvaluationText


@dataclass
class ComparisonResult:
    image_index: int
    score: float
    analysis: str | None = None
    rank: int | None = None

    def __post_init__(self):
        _check_score(self.score)


@dataclass
class ComparisonResponse:
    """Normalized result of a comparison, one entry per target image in input order"""

    results: list[ComparisonResult] = field(default_factory=list)

    def ranked(self) -> list[ComparisonResult]:
        """Entries ordered by rank; unranked entries keep input order at the end"""
        return sorted(
            self.results,
            key=lambda r: (r.rank is None, r.rank if r.rank is not None else 0, r.image_index),
        )


WorkflowResponse = Union[EvaluationResponse, ComparisonResponse]
