"""
Adaptive image compression on top of Pillow.

Images are re-encoded once, deterministically, with fixed per-format
encoder settings. When region detection found something worth keeping
sharp (people, faces, text, ...) the requested quality is raised before
encoding.
"""
import os
import logging
from enum import Enum
from io import BytesIO
from typing import Any, Dict, Iterable, List, Optional

from PIL import Image, ImageOps

from app.utils.metrics import calculate_image_metrics, PerformanceTimer

# Set up logging
logger = logging.getLogger(__name__)


class ImageFormat(str, Enum):
    """Output formats supported by the compressor"""
    JPEG = "jpeg"
    WEBP = "webp"
    AVIF = "avif"
    PNG = "png"


# Constants
DEFAULT_FORMAT = ImageFormat.WEBP
DEFAULT_QUALITY = 80
IMPORTANT_LABELS = ("person", "face", "text", "book", "laptop", "phone")
IMPORTANT_QUALITY_BOOST = 10
MAX_ADAPTIVE_QUALITY = 95

FILE_EXTENSIONS = {
    ImageFormat.JPEG: "jpg",
    ImageFormat.WEBP: "webp",
    ImageFormat.AVIF: "avif",
    ImageFormat.PNG: "png",
}


def parse_format(value: Optional[str]) -> Optional[ImageFormat]:
    """Map a user or model supplied format name onto ImageFormat, or None if unknown."""
    if not value:
        return None
    name = value.strip().lower().lstrip(".")
    if name == "jpg":
        name = "jpeg"
    try:
        return ImageFormat(name)
    except ValueError:
        return None


def has_important_regions(regions: Optional[Iterable[Any]]) -> bool:
    """True if any detected region's label contains one of the important keywords."""
    for region in regions or []:
        if not isinstance(region, dict):
            continue
        label = region.get("label")
        if not isinstance(label, str):
            continue
        label = label.lower()
        if any(keyword in label for keyword in IMPORTANT_LABELS):
            return True
    return False


def adjust_quality(quality: int, regions: Optional[Iterable[Any]] = None) -> int:
    """
    Apply the content-adaptive quality bump.

    Args:
        quality: Requested quality (0-100)
        regions: Detections from the region-detection client

    Returns:
        ``quality + 10`` capped at 95 when important regions are present,
        otherwise the requested quality. Never lowers the requested quality.
    """
    if not has_important_regions(regions):
        return quality
    return max(quality, min(quality + IMPORTANT_QUALITY_BOOST, MAX_ADAPTIVE_QUALITY))


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or (image.mode == "P" and "transparency" in image.info)


def _prepare(image: Image.Image, image_format: ImageFormat) -> Image.Image:
    """Normalise the decoded image to a mode the target encoder accepts."""
    image = ImageOps.exif_transpose(image)
    alpha = _has_alpha(image)

    if image_format == ImageFormat.JPEG:
        if alpha:
            # JPEG has no alpha channel, flatten onto white
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background
        return image.convert("RGB")

    return image.convert("RGBA" if alpha else "RGB")


def encode_image(image: Image.Image, image_format: ImageFormat, quality: int) -> bytes:
    """
    Encode a prepared image with the fixed settings for its format.

    Args:
        image: Image in RGB or RGBA mode
        image_format: Target format
        quality: Encoder quality (0-100)

    Returns:
        The encoded bytes
    """
    buffer = BytesIO()

    if image_format == ImageFormat.JPEG:
        image.save(buffer, format="JPEG", quality=quality, progressive=True, optimize=True)
    elif image_format == ImageFormat.WEBP:
        image.save(buffer, format="WEBP", quality=quality, method=6)
    elif image_format == ImageFormat.AVIF:
        image.save(buffer, format="AVIF", quality=quality, speed=0)
    elif image_format == ImageFormat.PNG:
        if quality < 100:
            # Lossy PNG: reduce to a 256 colour palette before deflating
            image = image.quantize(colors=256, method=Image.Quantize.FASTOCTREE)
        image.save(buffer, format="PNG", optimize=True, compress_level=9)
    else:
        raise ValueError(f"Unsupported format: {image_format}")

    return buffer.getvalue()


def compress_image(
    source_path: str,
    output_path: str,
    image_format: ImageFormat = DEFAULT_FORMAT,
    quality: int = DEFAULT_QUALITY,
    regions: Optional[List[Any]] = None
) -> Dict[str, Any]:
    """
    Compress an image file and write the result to ``output_path``.

    Args:
        source_path: Path of the original image
        output_path: Path to write the compressed image to
        image_format: Target format
        quality: Requested quality (0-100), before the adaptive adjustment
        regions: Detected regions used by the adaptive adjustment

    Returns:
        Dictionary with the compressed path and size, the format and final
        quality used and PSNR/SSIM against the original
    """
    image_format = ImageFormat(image_format)
    if not 0 <= quality <= 100:
        raise ValueError(f"Quality must be between 0 and 100, got {quality}")

    final_quality = adjust_quality(quality, regions)
    if final_quality != quality:
        logger.info(f"Important regions detected, raising quality {quality} -> {final_quality}")

    with Image.open(source_path) as original:
        original.load()
        prepared = _prepare(original, image_format)

    with PerformanceTimer() as timer:
        compressed_data = encode_image(prepared, image_format, final_quality)

    with open(output_path, "wb") as f:
        f.write(compressed_data)

    compressed_size = len(compressed_data)
    logger.info(
        f"Encoded {os.path.basename(source_path)} as {image_format.value} q={final_quality}: "
        f"{compressed_size} bytes in {timer.execution_time:.3f}s"
    )

    psnr, ssim = None, None
    try:
        with Image.open(BytesIO(compressed_data)) as compressed:
            psnr, ssim = calculate_image_metrics(prepared, compressed)
    except Exception as e:
        logger.warning(f"Could not calculate image quality metrics: {e}")

    return {
        "compressed_path": output_path,
        "compressed_size": compressed_size,
        "format": image_format.value,
        "quality": final_quality,
        "psnr": psnr,
        "ssim": ssim
    }
