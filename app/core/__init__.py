"""
Core implementations for the image compression service.

This package contains:
- compressor: adaptive Pillow re-encoding (WebP, JPEG, PNG, AVIF)
- detection: object-detection client used by the adaptive policy
- recommendation: text-generation client for format/quality suggestions
- archive: streaming ZIP builder for batch downloads
"""
from app.core.compressor import (
    ImageFormat,
    DEFAULT_FORMAT,
    DEFAULT_QUALITY,
    IMPORTANT_LABELS,
    FILE_EXTENSIONS,
    parse_format,
    has_important_regions,
    adjust_quality,
    encode_image,
    compress_image
)

from app.core.detection import RegionDetector, region_labels

from app.core.recommendation import (
    Recommender,
    parse_format_response,
    parse_quality_response
)

from app.core.archive import stream_zip, archive_names

__all__ = [
    # Compression
    'ImageFormat',
    'DEFAULT_FORMAT',
    'DEFAULT_QUALITY',
    'IMPORTANT_LABELS',
    'FILE_EXTENSIONS',
    'parse_format',
    'has_important_regions',
    'adjust_quality',
    'encode_image',
    'compress_image',

    # Detection
    'RegionDetector',
    'region_labels',

    # Recommendation
    'Recommender',
    'parse_format_response',
    'parse_quality_response',

    # Archive
    'stream_zip',
    'archive_names'
]
