import numpy as np
import pytest
from PIL import Image

from app.utils.metrics import (
    PerformanceTimer,
    calculate_compression_ratio,
    calculate_image_metrics,
    get_cpu_mem
)


@pytest.mark.parametrize("original,compressed,expected", [
    (1000, 250, 75.0),
    (3, 2, 33.33),
    (1000, 1000, 0.0),
    (1000, 1200, -20.0),
    (0, 10, 0.0),
])
def test_compression_ratio(original, compressed, expected):
    assert calculate_compression_ratio(original, compressed) == expected


def test_identical_images():
    image = Image.new("RGB", (32, 32), (10, 200, 30))
    psnr, ssim = calculate_image_metrics(image, image.copy())
    assert psnr is None
    assert ssim == 1.0


def test_noisy_image_has_finite_scores():
    rng = np.random.default_rng(0)
    original = rng.integers(0, 256, size=(40, 40, 3), dtype=np.uint8)
    noisy = np.clip(original.astype(int) + rng.integers(-10, 11, size=original.shape), 0, 255).astype(np.uint8)

    psnr, ssim = calculate_image_metrics(original, noisy)

    assert 20 < psnr < 60
    assert 0 < ssim < 1


def test_tiny_images_skip_ssim():
    original = Image.new("RGB", (2, 2), (0, 0, 0))
    compressed = Image.new("RGB", (2, 2), (5, 5, 5))
    psnr, ssim = calculate_image_metrics(original, compressed)
    assert psnr is not None
    assert ssim is None


def test_cpu_mem_keys():
    assert set(get_cpu_mem()) == {"cpu_usage", "memory_usage"}


def test_performance_timer():
    with PerformanceTimer() as timer:
        sum(range(1000))
    assert timer.execution_time >= 0
