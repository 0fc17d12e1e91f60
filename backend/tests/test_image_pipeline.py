"""
Unit Tests for avatar validation, optimization and upload sequencing

Run with: pytest tests/test_image_pipeline.py -v
"""

import io
import os

import pytest
from PIL import Image

from signatures.image_pipeline import (
    MAX_FILE_SIZE,
    ImageOptimizationOptions,
    ImageProcessingError,
    UploadSequencer,
    extension_for,
    fit_within,
    optimize_image,
    parse_data_url,
    validate_image,
)
from conftest import make_data_url, make_image_bytes


def decode(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


class TestValidateImage:

    def test_small_png_is_valid(self):
        data = make_image_bytes(120, 80)
        result = validate_image(data, "image/png")

        assert result.valid
        assert result.errors == []
        assert result.warnings == []
        assert (result.info.width, result.info.height) == (120, 80)
        assert result.info.size == len(data)

    def test_rejects_unsupported_type(self):
        result = validate_image(make_image_bytes(10, 10), "image/svg+xml")

        assert not result.valid
        assert result.errors[0].startswith("Invalid file type: image/svg+xml")

    def test_type_match_is_case_insensitive(self):
        assert validate_image(make_image_bytes(10, 10), "IMAGE/PNG").valid

    def test_rejects_oversized_file(self):
        data = b"\x00" * (MAX_FILE_SIZE + 1)
        result = validate_image(data, "image/png")

        assert not result.valid
        assert any("exceeds maximum of 2MB" in e for e in result.errors)
        assert "Could not read image dimensions" in result.errors

    def test_warns_on_large_dimensions(self):
        result = validate_image(make_image_bytes(800, 600), "image/png")

        assert result.valid
        assert any("800x600" in w for w in result.warnings)

    def test_warns_above_recommended_size(self):
        # Random pixels do not compress, so this PNG is well over 50KB
        img = Image.frombytes("RGB", (300, 300), os.urandom(300 * 300 * 3))
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")

        result = validate_image(buffer.getvalue(), "image/png")

        assert result.valid
        assert any("larger than recommended 50KB" in w for w in result.warnings)

    def test_undecodable_bytes(self):
        result = validate_image(b"definitely not an image", "image/jpeg")

        assert not result.valid
        assert result.errors == ["Could not read image dimensions"]
        assert result.info.width is None

    def test_to_dict(self):
        payload = validate_image(make_image_bytes(10, 20), "image/png").to_dict()
        assert payload["valid"] is True
        assert payload["info"]["width"] == 10
        assert payload["info"]["height"] == 20


class TestParseDataUrl:

    def test_round_trip(self):
        data = make_image_bytes(5, 5)
        payload = parse_data_url(make_data_url(data, "image/png"))

        assert payload.valid
        assert payload.content_type == "image/png"
        assert payload.data == data

    @pytest.mark.parametrize("value,error", [
        (None, "Missing dataUrl"),
        ("", "Missing dataUrl"),
        ("https://example.com/a.png", "Invalid dataUrl format"),
        ("data:image/png,not-base64", "Invalid dataUrl format"),
        ("data:image/png;base64,@@@@", "Failed to decode base64 image"),
    ])
    def test_errors(self, value, error):
        payload = parse_data_url(value)
        assert not payload.valid
        assert payload.error == error


class TestExtensionFor:

    @pytest.mark.parametrize("content_type,ext", [
        ("image/png", "png"),
        ("image/jpeg", "jpg"),
        ("image/jpg", "jpg"),
        ("image/webp", "webp"),
        ("IMAGE/GIF", "gif"),
        ("application/pdf", "bin"),
        (None, "bin"),
    ])
    def test_mapping(self, content_type, ext):
        assert extension_for(content_type) == ext


class TestFitWithin:

    def test_landscape(self):
        assert fit_within(400, 200, 200, 200) == (200, 100)

    def test_portrait(self):
        assert fit_within(300, 600, 200, 200) == (100, 200)

    def test_never_upscales(self):
        assert fit_within(100, 50, 200, 200) == (100, 50)

    def test_degenerate(self):
        assert fit_within(0, 10, 200, 200) == (0, 10)


class TestOptimizeImage:

    def test_downscales_to_jpeg(self):
        data = make_image_bytes(800, 400)
        result = optimize_image(data)

        assert result.content_type == "image/jpeg"
        assert (result.width, result.height) == (200, 100)
        assert result.original_size == len(data)
        img = decode(result.data)
        assert img.format == "JPEG"
        assert img.size == (200, 100)

    def test_small_image_not_upscaled(self):
        result = optimize_image(make_image_bytes(64, 32))
        assert (result.width, result.height) == (64, 32)

    def test_transparency_flattened_onto_white(self):
        data = make_image_bytes(50, 50, mode="RGBA", color=(0, 0, 0, 0))
        result = optimize_image(data)

        pixel = decode(result.data).convert("RGB").getpixel((25, 25))
        assert all(channel >= 250 for channel in pixel)

    def test_png_output_keeps_alpha(self):
        data = make_image_bytes(300, 300, mode="RGBA", color=(10, 20, 30, 128))
        options = ImageOptimizationOptions(output_format="image/png")

        result = optimize_image(data, options)

        img = decode(result.data)
        assert result.content_type == "image/png"
        assert img.format == "PNG"
        assert img.mode == "RGBA"
        assert img.size == (200, 200)

    def test_custom_box(self):
        options = ImageOptimizationOptions(max_width=90, max_height=90)
        result = optimize_image(make_image_bytes(300, 150), options)
        assert (result.width, result.height) == (90, 45)

    def test_accepts_gif_and_webp_input(self):
        for fmt in ("GIF", "WEBP"):
            result = optimize_image(make_image_bytes(400, 400, fmt=fmt))
            assert result.content_type == "image/jpeg"
            assert result.size > 0

    def test_unsupported_output_format(self):
        options = ImageOptimizationOptions(output_format="image/webp")
        with pytest.raises(ImageProcessingError):
            optimize_image(make_image_bytes(10, 10), options)

    def test_undecodable_input(self):
        with pytest.raises(ImageProcessingError):
            optimize_image(b"not an image")


class TestUploadSequencer:

    def test_latest_ticket_wins(self):
        sequencer = UploadSequencer()
        first = sequencer.next_ticket()
        second = sequencer.next_ticket()

        assert not sequencer.is_current(first)
        assert sequencer.is_current(second)
        assert sequencer.current == second

    def test_invalidate_discards_pending(self):
        sequencer = UploadSequencer()
        ticket = sequencer.next_ticket()
        sequencer.invalidate()
        assert not sequencer.is_current(ticket)
