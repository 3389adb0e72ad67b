import os

import pytest
from PIL import Image

from app.core.compressor import (
    ImageFormat,
    adjust_quality,
    compress_image,
    has_important_regions,
    parse_format
)
from tests.conftest import make_image


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "original-1-1.png"
    path.write_bytes(make_image(size=(120, 80)))
    return str(path)


class TestAdaptiveQuality:
    def test_no_regions_keeps_quality(self):
        assert adjust_quality(70, []) == 70
        assert adjust_quality(70, None) == 70

    def test_unimportant_labels_keep_quality(self):
        regions = [{"label": "dog", "score": 0.98}, {"label": "car", "score": 0.7}]
        assert adjust_quality(70, regions) == 70

    def test_important_label_raises_quality(self):
        regions = [{"label": "dog"}, {"label": "person", "score": 0.99}]
        assert adjust_quality(70, regions) == 80

    def test_boost_is_capped(self):
        regions = [{"label": "person"}]
        assert adjust_quality(90, regions) == 95

    def test_quality_above_cap_is_not_lowered(self):
        assert adjust_quality(98, [{"label": "face"}]) == 98

    def test_loose_case_insensitive_match(self):
        assert has_important_regions([{"label": "Cell Phone"}])
        assert has_important_regions([{"label": "TEXTBOOK"}])

    def test_malformed_regions_are_ignored(self):
        assert not has_important_regions(["person", {"score": 0.9}, {"label": None}])


class TestParseFormat:
    @pytest.mark.parametrize("value,expected", [
        ("webp", ImageFormat.WEBP),
        ("JPG", ImageFormat.JPEG),
        (" jpeg ", ImageFormat.JPEG),
        (".png", ImageFormat.PNG),
        ("AVIF", ImageFormat.AVIF),
    ])
    def test_known_formats(self, value, expected):
        assert parse_format(value) == expected

    @pytest.mark.parametrize("value", ["gif", "", None])
    def test_unknown_formats(self, value):
        assert parse_format(value) is None


class TestCompressImage:
    def test_webp_output(self, source, tmp_path):
        output = str(tmp_path / "compressed-webp-1-1.webp")
        result = compress_image(source, output, ImageFormat.WEBP, 70)

        assert result["compressed_path"] == output
        assert result["compressed_size"] == os.path.getsize(output)
        assert result["format"] == "webp"
        assert result["quality"] == 70
        with Image.open(output) as image:
            assert image.format == "WEBP"
            assert image.size == (120, 80)

    def test_important_regions_raise_encode_quality(self, source, tmp_path):
        output = str(tmp_path / "out.jpg")
        result = compress_image(source, output, ImageFormat.JPEG, 60, [{"label": "person", "score": 0.9}])
        assert result["quality"] == 70

    def test_jpeg_flattens_alpha(self, tmp_path):
        source = tmp_path / "alpha.png"
        source.write_bytes(make_image(mode="RGBA"))
        output = str(tmp_path / "out.jpg")

        compress_image(str(source), output, ImageFormat.JPEG, 80)

        with Image.open(output) as image:
            assert image.format == "JPEG"
            assert image.mode == "RGB"
            # Transparent corner becomes white
            r, g, b = image.getpixel((2, 2))
            assert min(r, g, b) > 230

    def test_png_is_palette_quantised(self, source, tmp_path):
        output = str(tmp_path / "out.png")
        compress_image(source, output, ImageFormat.PNG, 80)
        with Image.open(output) as image:
            assert image.format == "PNG"
            assert image.mode == "P"

    def test_quality_metrics_are_reported(self, source, tmp_path):
        result = compress_image(source, str(tmp_path / "out.webp"), ImageFormat.WEBP, 80)
        assert result["psnr"] is not None and result["psnr"] > 20
        assert 0 < result["ssim"] <= 1

    def test_invalid_quality_raises(self, source, tmp_path):
        with pytest.raises(ValueError):
            compress_image(source, str(tmp_path / "out.webp"), ImageFormat.WEBP, 101)

    def test_unreadable_source_raises(self, tmp_path):
        source = tmp_path / "broken.png"
        source.write_bytes(b"not an image")
        with pytest.raises(Exception):
            compress_image(str(source), str(tmp_path / "out.webp"), ImageFormat.WEBP, 80)
