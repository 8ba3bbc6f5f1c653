from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class ComparisonRequest(BaseModel):
    """Comparison request with pre-encoded images"""

    context: str | None = Field(None, description="Free-text evaluation instructions")
    base_image: str = Field(..., description="Base64-encoded reference image or data URL")
    target_images: list[str] = Field(..., min_length=1, description="Base64-encoded images scored against the base")

    @field_validator("base_image")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v

    @field_validator("target_images")
    @classmethod
    def validate_targets_not_empty(cls, v: list[str]) -> list[str]:
        if any(not item or not item.strip() for item in v):
            raise ValueError("Target images cannot be empty")
        return v


class EvaluationDetails(BaseModel):
    timestamp: datetime = Field(..., description="When the response was normalized")
    context: str | None = Field(None, description="Context the evaluation was run with")


class EvaluationText(BaseModel):
    score: float = Field(..., ge=0, le=100, description="Score (0-100)")
    analysis: str = Field(..., description="Free-text analysis")
    details: EvaluationDetails | None = None


class EvaluationResponse(BaseModel):
    """Pairwise evaluation response"""

    text: EvaluationText


class ComparisonResult(BaseModel):
    image_index: int = Field(..., ge=0, description="Position of the target image in the request")
    score: float = Field(..., ge=0, le=100, description="Score (0-100)")
    analysis: str | None = None
    rank: int | None = Field(None, ge=1, description="1 for the highest score")


class ComparisonResponse(BaseModel):
    """Comparison response, one entry per target image in request order"""

    results: list[ComparisonResult]
