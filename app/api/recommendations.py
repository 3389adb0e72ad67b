"""
AI recommendation endpoints.
"""
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from app.api.dependencies import get_detector, get_recommender
from app.core.detection import RegionDetector, region_labels
from app.core.recommendation import Recommender
from app.models.recommendation import (
    FormatRecommendation,
    FormatRecommendationResponse,
    QualityRecommendation,
    QualityRecommendationResponse,
    QualityRequest
)
from app.utils.file_handling import read_image_upload

# Set up logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=["AI Recommendations"])


@router.post("/ai-format", response_model=FormatRecommendationResponse)
async def recommend_format(
    image: UploadFile = File(...),
    detector: RegionDetector = Depends(get_detector),
    recommender: Recommender = Depends(get_recommender)
):
    """
    Recommend an output format for an image based on the objects it contains.

    The image is analysed in memory and never stored.
    """
    content = await read_image_upload(image)

    labels = region_labels(await detector.detect(content))
    recommendation = await recommender.recommend_format(labels)

    return FormatRecommendationResponse(
        recommendation=FormatRecommendation(
            format=recommendation["format"],
            reason=recommendation["reason"],
            detected_objects=labels
        )
    )


@router.post("/ai-quality", response_model=QualityRecommendationResponse)
async def recommend_quality(
    body: QualityRequest,
    recommender: Recommender = Depends(get_recommender)
):
    """
    Recommend quality and format from a description of how the image will be used.

    - **prompt**: e.g. "Social media sharing" or "High quality for print"
    """
    prompt = body.prompt.strip()
    if not prompt:
        raise HTTPException(status_code=400, detail="Prompt is required")

    recommendation = await recommender.recommend_quality(prompt)
    return QualityRecommendationResponse(recommendation=QualityRecommendation(**recommendation))
