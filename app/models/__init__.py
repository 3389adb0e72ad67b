"""
Data models for the image compression API.

This module provides Pydantic models for request/response validation and
documentation. All JSON keys are camelCase.
"""
from app.models.base import (
    CamelModel,
    SuccessResponse,
    ErrorResponse
)

from app.models.compression import (
    CompressionSummary,
    CompressionResult,
    CompressionDetail,
    UploadResponse,
    CompressionDetailResponse,
    RecentCompressionsResponse,
    BatchDownloadRequest
)

from app.models.recommendation import (
    FormatRecommendation,
    FormatRecommendationResponse,
    QualityRequest,
    QualityRecommendation,
    QualityRecommendationResponse
)

__all__ = [
    # Base models
    'CamelModel',
    'SuccessResponse',
    'ErrorResponse',

    # Compression models
    'CompressionSummary',
    'CompressionResult',
    'CompressionDetail',
    'UploadResponse',
    'CompressionDetailResponse',
    'RecentCompressionsResponse',
    'BatchDownloadRequest',

    # Recommendation models
    'FormatRecommendation',
    'FormatRecommendationResponse',
    'QualityRequest',
    'QualityRecommendation',
    'QualityRecommendationResponse'
]
