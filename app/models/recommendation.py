"""
Models for AI format and quality recommendations.
"""
from typing import List
from pydantic import Field

from app.core.compressor import ImageFormat
from app.models.base import CamelModel, SuccessResponse


class FormatRecommendation(CamelModel):
    format: ImageFormat = Field(..., description="Recommended output format")
    reason: str = Field(..., description="Why the format was chosen")
    detected_objects: List[str] = Field(
        default_factory=list, description="Object labels the recommendation is based on"
    )


class FormatRecommendationResponse(SuccessResponse):
    recommendation: FormatRecommendation


class QualityRequest(CamelModel):
    """Request model for a quality recommendation"""
    prompt: str = Field(..., description="Free text description of how the image will be used")


class QualityRecommendation(CamelModel):
    quality: int = Field(..., ge=0, le=100, description="Recommended quality (0-100)")
    format: ImageFormat = Field(..., description="Recommended output format")
    context: str = Field(..., description="Use case the recommendation targets")


class QualityRecommendationResponse(SuccessResponse):
    recommendation: QualityRecommendation
