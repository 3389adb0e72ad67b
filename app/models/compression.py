"""
Models for image compression requests and responses.
"""
from datetime import datetime
from typing import Any, List, Optional, Union
from pydantic import Field

from app.core.compressor import ImageFormat
from app.models.base import CamelModel, SuccessResponse


class CompressionSummary(CamelModel):
    """Size statistics of one compression, as listed by /api/recent"""
    id: str = Field(..., description="Record identifier")
    original_name: str = Field(..., description="Client supplied file name")
    original_size: int = Field(..., description="Size of the original file in bytes")
    compressed_size: int = Field(..., description="Size of the compressed file in bytes")
    compression_ratio: float = Field(..., description="Size reduction in percent")
    format: ImageFormat = Field(..., description="Output format")
    created_at: datetime = Field(..., description="When the record was created")


class CompressionResult(CompressionSummary):
    """Result for one uploaded image"""
    original_url: str = Field(..., description="Public URL of the original image")
    compressed_url: str = Field(..., description="Public URL of the compressed image")
    regions: List[Any] = Field(
        default_factory=list, description="First detected regions (at most 5)"
    )
    quality: int = Field(..., description="Quality used for encoding, after adaptive adjustment")
    ai_suggestion: Optional[str] = Field(None, description="AI explanation of the chosen settings")
    prompt_used: Optional[str] = Field(None, description="Prompt the settings were derived from")
    psnr: Optional[float] = Field(None, description="Peak Signal-to-Noise Ratio against the original")
    ssim: Optional[float] = Field(None, description="Structural Similarity Index against the original")


class CompressionDetail(CompressionResult):
    """Full stored record with public URLs"""
    original_path: str = Field(..., description="Blob store name of the original")
    compressed_path: str = Field(..., description="Blob store name of the compressed image")
    detected_regions: List[Any] = Field(
        default_factory=list, description="All regions returned by detection"
    )


class UploadResponse(SuccessResponse):
    """Response for /api/upload: one result for a single file, a list for a batch"""
    data: Union[CompressionResult, List[CompressionResult]]


class CompressionDetailResponse(SuccessResponse):
    data: CompressionDetail


class RecentCompressionsResponse(SuccessResponse):
    data: List[CompressionSummary]


class BatchDownloadRequest(CamelModel):
    """Request model for downloading several compressed images as a ZIP"""
    image_ids: List[str] = Field(..., description="Record ids to include in the archive")
