"""Tests for the single-purpose transformers and their pixel filters."""

import numpy as np
import pytest
from PIL import Image, features

from image_restoration.operations import (
    adjust_color_balance,
    convert_format,
    create_thumbnail,
    enhance_image,
    remove_noise,
    upscale_image,
)
from image_restoration.operations import filters
from image_restoration.operations.denoise import apply_denoise
from image_restoration.operations.upscale import compute_target_size
from image_restoration.results import ErrorKind, OperationResult


def _read(path) -> np.ndarray:
    with Image.open(path) as img:
        return np.array(img)


class TestEnhance:

    def test_enhance_writes_output(self, jpeg_source, tmp_path):
        output = tmp_path / "enhanced.jpg"

        result = enhance_image(jpeg_source, output, {'brightness': 1.2, 'sharpen': True})

        assert isinstance(result, OperationResult)
        assert result.success is True
        assert result.output_path == str(output)
        assert result.message == f"Enhanced image saved to {output}"
        assert output.exists()
        with Image.open(output) as img:
            assert img.format == "JPEG"
            assert img.size == (400, 300)

    def test_step_order(self, png_source, tmp_path):
        options = {'brightness': 1.1, 'gamma': 1.2, 'contrast': 1.3, 'sharpen': True, 'denoise': True}

        result = enhance_image(png_source, tmp_path / "out.png", options)

        assert [step.split('(')[0] for step in result.steps] == [
            'modulate', 'gamma', 'contrast', 'sharpen', 'median'
        ]

    def test_identity_options_apply_nothing(self, png_source, tmp_path):
        output = tmp_path / "same.png"

        result = enhance_image(png_source, output, {})

        assert result.steps == ()
        np.testing.assert_array_equal(_read(output), _read(png_source))

    def test_deterministic(self, png_source, tmp_path):
        options = {'brightness': 1.1, 'contrast': 1.2, 'gamma': 1.1, 'sharpen': True, 'denoise': True}
        first = tmp_path / "a.png"
        second = tmp_path / "b.png"

        enhance_image(png_source, first, options)
        enhance_image(png_source, second, options)

        assert first.read_bytes() == second.read_bytes()

    def test_keeps_source_format_despite_extension(self, png_source, tmp_path):
        output = tmp_path / "looks_like.jpg"

        assert enhance_image(png_source, output, {'contrast': 1.1}).success
        with Image.open(output) as img:
            assert img.format == "PNG"

    def test_alpha_preserved(self, make_image, tmp_path):
        source = make_image("alpha.png", channels=4)
        output = tmp_path / "alpha_out.png"

        result = enhance_image(source, output, {'brightness': 1.3, 'sharpen': True})

        assert result.success
        np.testing.assert_array_equal(_read(output)[:, :, 3], _read(source)[:, :, 3])

    def test_missing_input_fails_without_raising(self, tmp_path):
        result = enhance_image(tmp_path / "missing.jpg", tmp_path / "out.jpg")

        assert result.success is False
        assert result.error_kind is ErrorKind.NOT_FOUND
        assert not (tmp_path / "out.jpg").exists()


class TestUpscale:

    def test_upscale_doubles_dimensions(self, jpeg_source, tmp_path):
        output = tmp_path / "up.jpg"

        result = upscale_image(jpeg_source, output, {'scale': 2})

        assert result.success
        assert result.original_size == "400x300"
        assert result.new_size == "800x600"
        assert result.scale_factor == "2.0x"
        assert result.message == "Upscaled image from 400x300 to 800x600"
        with Image.open(output) as img:
            assert img.size == (800, 600)

    def test_width_cap_is_independent(self, png_source, tmp_path):
        output = tmp_path / "capped.png"

        result = upscale_image(png_source, output, {'scale': 2, 'max_width': 500})

        assert result.new_size == "500x600"
        with Image.open(output) as img:
            assert img.size == (500, 600)

    def test_scale_below_minimum_is_clamped(self, png_source, tmp_path):
        result = upscale_image(png_source, tmp_path / "min.png", {'scale': 0.5})

        assert result.new_size == "440x330"
        assert result.scale_factor == "1.1x"

    def test_touchup_steps(self, png_source, tmp_path):
        with_touchup = upscale_image(png_source, tmp_path / "a.png", {'scale': 1.5})
        without = upscale_image(
            png_source, tmp_path / "b.png", {'scale': 1.5, 'enhance_after_upscale': False, 'kernel': 'cubic'}
        )

        assert with_touchup.steps[0] == "resize(600x450, lanczos)"
        assert "sharpen" in with_touchup.steps
        assert without.steps == ("resize(600x450, cubic)",)

    @pytest.mark.parametrize("width, height, scale, caps, expected", [
        (400, 300, 2.0, (8000, 8000), (800, 600)),
        (333, 333, 1.5, (8000, 8000), (500, 500)),
        (5000, 100, 2.0, (8000, 8000), (8000, 200)),
        (1, 1, 1.1, (8000, 8000), (1, 1)),
    ])
    def test_compute_target_size(self, width, height, scale, caps, expected):
        assert compute_target_size(width, height, scale, *caps) == expected


class TestDenoise:

    @pytest.mark.parametrize("strength, steps", [
        (2, ["median(2)"]),
        (5, ["median(3)", "blur(0.5)", "sharpen"]),
        (8, ["median(3)", "blur(0.8)", "sharpen", "modulate(brightness=1.02)"]),
    ])
    def test_tiers(self, png_source, tmp_path, strength, steps):
        result = remove_noise(png_source, tmp_path / f"d{strength}.png", {'strength': strength})

        assert result.success
        assert list(result.steps) == steps
        assert result.message == f"Noise removed (strength: {strength}) and saved to {tmp_path / f'd{strength}.png'}"

    def test_default_strength(self, png_source, tmp_path):
        assert remove_noise(png_source, tmp_path / "d.png").steps == ("median(3)",)

    def test_medium_tier_keeps_flat_image(self, make_image, tmp_path):
        source = make_image("flat.png", width=64, height=48, fill=100)
        output = tmp_path / "flat_out.png"

        remove_noise(source, output, {'strength': 5})

        assert _read(output).mean() == pytest.approx(100.0)

    def test_strong_tier_lifts_brightness(self, make_image, tmp_path):
        source = make_image("flat.png", width=64, height=48, fill=100)
        output = tmp_path / "flat_out.png"

        remove_noise(source, output, {'strength': 8})

        assert _read(output).mean() == pytest.approx(102.0, abs=1.0)

    def test_reduces_noise(self):
        rng = np.random.default_rng(7)
        noisy = np.clip(128 + rng.normal(0, 25, size=(80, 80, 3)), 0, 255).astype(np.uint8)

        denoised, _ = apply_denoise(noisy, 3)

        assert denoised.std() < noisy.std()


class TestColorBalance:

    def test_temperature_warms(self, make_image, tmp_path):
        source = make_image("grey.png", width=32, height=32, fill=128)
        output = tmp_path / "warm.png"

        result = adjust_color_balance(source, output, {'temperature': 5})

        assert result.success
        assert result.steps == ("temperature(5)",)
        pixel = _read(output)[10, 10]
        assert tuple(int(v) for v in pixel[:3]) == (178, 128, 128)

    def test_negative_temperature_cools(self, make_image, tmp_path):
        source = make_image("grey.png", width=32, height=32, fill=128)
        output = tmp_path / "cool.png"

        adjust_color_balance(source, output, {'temperature': -2})

        pixel = _read(output)[0, 0]
        assert tuple(int(v) for v in pixel[:3]) == (128, 128, 148)

    def test_container_follows_output_extension(self, png_source, tmp_path):
        output = tmp_path / "balanced.jpg"

        result = adjust_color_balance(png_source, output, {'vibrance': 20})

        assert result.success
        with Image.open(output) as img:
            assert img.format == "JPEG"

    def test_unknown_output_extension_fails(self, png_source, tmp_path):
        output = tmp_path / "balanced.xyz"

        result = adjust_color_balance(png_source, output, {'temperature': 1})

        assert result.success is False
        assert result.error_kind is ErrorKind.PROCESSING_FAILURE
        assert not output.exists()

    def test_highlights_and_shadows(self, png_source, tmp_path):
        result = adjust_color_balance(png_source, tmp_path / "hs.png", {'shadows': 10, 'highlights': -10})
        assert result.steps == ("shadows(10)", "highlights(-10)")


class TestConvert:

    def test_convert_to_webp(self, jpeg_source, tmp_path):
        output = tmp_path / "converted.webp"

        result = convert_format(jpeg_source, output, {'target_format': 'webp', 'quality': 80})

        assert result.success
        assert result.message == f"Converted to WEBP and saved to {output}"
        with Image.open(output) as img:
            assert img.format == "WEBP"

    def test_jpg_alias(self, png_source, tmp_path):
        output = tmp_path / "converted.jpg"

        assert convert_format(png_source, output, {'format': 'jpg'}).success
        with Image.open(output) as img:
            assert img.format == "JPEG"

    def test_unsupported_target(self, jpeg_source, tmp_path):
        output = tmp_path / "converted.bmp"

        result = convert_format(jpeg_source, output, {'target_format': 'bmp'})

        assert result.success is False
        assert result.error_kind is ErrorKind.UNSUPPORTED_TARGET_FORMAT
        assert result.error == "Unsupported target format: bmp"
        assert not output.exists()

    @pytest.mark.skipif(not features.check("avif"), reason="Pillow built without AVIF support")
    def test_convert_to_avif(self, jpeg_source, tmp_path):
        output = tmp_path / "converted.avif"

        assert convert_format(jpeg_source, output, {'target_format': 'avif'}).success
        with Image.open(output) as img:
            assert img.format == "AVIF"


class TestThumbnail:

    def test_fits_bounding_box(self, png_source, tmp_path):
        output = tmp_path / "thumb.jpg"

        result = create_thumbnail(png_source, output, {'size': 100})

        assert result.success
        assert result.original_size == "400x300"
        assert result.new_size == "100x75"
        with Image.open(output) as img:
            assert img.format == "JPEG"
            assert img.size == (100, 75)

    def test_small_image_not_enlarged(self, make_image, tmp_path):
        source = make_image("small.png", width=50, height=40)

        result = create_thumbnail(source, tmp_path / "thumb.jpg")

        assert result.new_size == "50x40"

    def test_alpha_source_becomes_rgb_jpeg(self, make_image, tmp_path):
        source = make_image("alpha.png", channels=4)
        output = tmp_path / "thumb.jpg"

        create_thumbnail(source, output, {'size': 64})

        with Image.open(output) as img:
            assert img.mode == "RGB"


class TestFilters:

    def test_gamma_lut(self):
        pixels = np.array([[[0, 128, 255]]], dtype=np.uint8)

        result = filters.apply_gamma(pixels, 2.0)

        assert result[0, 0, 0] == 0
        assert result[0, 0, 1] == 181
        assert result[0, 0, 2] == 255

    def test_linear_contrast(self):
        pixels = np.array([[[100, 200, 128]]], dtype=np.uint8)

        result = filters.apply_linear(pixels, 1.2, 128 - 128 * 1.2)

        assert list(result[0, 0]) == [94, 214, 128]

    def test_linear_saturates(self):
        pixels = np.array([[[0, 255, 10]]], dtype=np.uint8)
        result = filters.apply_linear(pixels, 3.0, -100)
        assert list(result[0, 0]) == [0, 255, 0]

    def test_filters_do_not_modify_input(self):
        pixels = np.full((16, 16, 3), 90, dtype=np.uint8)
        pixels.setflags(write=False)

        filters.sharpen(pixels)
        filters.median(pixels, 3)
        filters.modulate(pixels, brightness=1.5)

        assert (pixels == 90).all()

    def test_alpha_passes_through(self):
        rgba = np.zeros((8, 8, 4), dtype=np.uint8)
        rgba[:, :, 3] = 77

        result = filters.shift_channels(rgba, red=40)

        assert result.shape == (8, 8, 4)
        assert (result[:, :, 3] == 77).all()
        assert (result[:, :, 0] == 40).all()

    def test_resize_exact(self):
        pixels = np.zeros((30, 40, 3), dtype=np.uint8)
        assert filters.resize(pixels, 57, 13, 'nearest').shape == (13, 57, 3)
