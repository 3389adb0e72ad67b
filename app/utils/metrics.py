"""
Utilities for measuring compression results and image quality.
"""
import time
import logging
import numpy as np
import psutil
from PIL import Image
from typing import Tuple, Optional, Dict, Union
from skimage.metrics import peak_signal_noise_ratio, structural_similarity

# Set up logging
logger = logging.getLogger(__name__)


def get_cpu_mem() -> Dict[str, float]:
    """
    Get current CPU and memory usage.

    Returns:
        Dictionary with CPU and memory usage percentages
    """
    return {
        "cpu_usage": psutil.cpu_percent(interval=None),
        "memory_usage": psutil.virtual_memory().percent
    }


def calculate_compression_ratio(original_size: int, compressed_size: int) -> float:
    """
    Percentage size reduction from original to compressed.

    Args:
        original_size: Size of the original file in bytes
        compressed_size: Size of the compressed file in bytes

    Returns:
        ``(original - compressed) / original * 100`` rounded to 2 decimals,
        negative when the output grew, 0 for an empty original
    """
    if original_size <= 0:
        return 0.0
    return round((original_size - compressed_size) / original_size * 100, 2)


def calculate_image_metrics(
    original_img: Union[np.ndarray, Image.Image],
    compressed_img: Union[np.ndarray, Image.Image]
) -> Tuple[Optional[float], Optional[float]]:
    """
    Calculate PSNR and SSIM between an original and its compressed version.

    Args:
        original_img: Original image (PIL Image or numpy array)
        compressed_img: Compressed image (PIL Image or numpy array)

    Returns:
        Tuple of (PSNR, SSIM) values, rounded to 2 and 4 decimal places respectively.
        PSNR is None for identical images; (None, None) if calculation fails
    """
    # Convert PIL images to numpy arrays if needed
    try:
        if not isinstance(original_img, np.ndarray):
            original_img = np.array(original_img.convert("RGB"))
        if not isinstance(compressed_img, np.ndarray):
            compressed_img = np.array(compressed_img.convert("RGB"))
    except Exception as e:
        logger.error(f"Failed to convert image to array: {e}")
        return None, None

    try:
        if original_img.shape != compressed_img.shape:
            logger.info(f"Image shapes don't match: original {original_img.shape} vs compressed {compressed_img.shape}")
            resized = Image.fromarray(compressed_img).resize((original_img.shape[1], original_img.shape[0]))
            compressed_img = np.array(resized)

        if compressed_img.dtype != original_img.dtype:
            compressed_img = compressed_img.astype(original_img.dtype)

        mse = np.mean(np.square(original_img.astype(np.float32) - compressed_img.astype(np.float32)))
        if mse == 0:
            # Lossless result, PSNR is infinite and not JSON friendly
            psnr = None
        else:
            psnr = round(float(peak_signal_noise_ratio(original_img, compressed_img, data_range=255)), 2)

        # SSIM needs a 7x7 window by default; tiny images use the largest odd window that fits
        win_size = min(7, original_img.shape[0], original_img.shape[1])
        if win_size % 2 == 0:
            win_size -= 1
        if win_size < 3:
            return psnr, None

        ssim = structural_similarity(
            original_img, compressed_img, data_range=255, channel_axis=2, win_size=win_size
        )
        return psnr, round(float(ssim), 4)
    except Exception as e:
        logger.error(f"Error calculating metrics: {e}")
        return None, None


class PerformanceTimer:
    """
    Context manager for measuring execution time.

    Example:
        with PerformanceTimer() as timer:
            # Code to measure
        execution_time = timer.execution_time
    """

    def __init__(self):
        self.start_time = None
        self.execution_time = 0

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.execution_time = time.time() - self.start_time
        return False  # Don't suppress exceptions
