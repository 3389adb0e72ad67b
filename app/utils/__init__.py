"""
Utility functions for the image compression application.
"""
from app.utils.metrics import (
    get_cpu_mem,
    calculate_compression_ratio,
    calculate_image_metrics,
    PerformanceTimer
)

from app.utils.file_handling import (
    is_image_upload,
    read_image_upload,
    discard_on_error
)

__all__ = [
    # Metrics utilities
    'get_cpu_mem',
    'calculate_compression_ratio',
    'calculate_image_metrics',
    'PerformanceTimer',

    # File handling utilities
    'is_image_upload',
    'read_image_upload',
    'discard_on_error'
]
