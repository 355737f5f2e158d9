"""Tests for the command-line interface."""

import pytest
from click.testing import CliRunner
from PIL import Image

from image_restoration.cli import main


@pytest.fixture
def runner():
    return CliRunner()


class TestCli:

    def test_restore_default_output(self, runner, jpeg_source):
        result = runner.invoke(main, ['restore', str(jpeg_source), '--scale', '2'])

        assert result.exit_code == 0, result.output
        output = jpeg_source.with_name("source_restored.jpg")
        with Image.open(output) as img:
            assert img.size == (800, 600)

    def test_enhance_explicit_output(self, runner, png_source, tmp_path):
        output = tmp_path / "nested" / "enhanced.png"

        result = runner.invoke(main, ['enhance', str(png_source), '-o', str(output), '--sharpen'])

        assert result.exit_code == 0, result.output
        assert output.exists()

    def test_thumbnail_writes_jpg(self, runner, png_source):
        result = runner.invoke(main, ['thumbnail', str(png_source), '--size', '80'])

        assert result.exit_code == 0, result.output
        with Image.open(png_source.with_name("source_thumb.jpg")) as img:
            assert img.size == (80, 60)

    def test_convert_unsupported_target_exits_non_zero(self, runner, jpeg_source):
        result = runner.invoke(main, ['convert', str(jpeg_source), '--format', 'bmp'])

        assert result.exit_code == 1
        assert not jpeg_source.with_name("source_converted.bmp").exists()

    def test_info(self, runner, jpeg_source):
        result = runner.invoke(main, ['info', str(jpeg_source)])

        assert result.exit_code == 0
        assert "Size: 400x300" in result.output
        assert "Format: jpeg" in result.output

    def test_presets(self, runner):
        result = runner.invoke(main, ['presets', '400', '300'])

        assert result.exit_code == 0
        assert "scale: 2.0" in result.output
        assert "sharpen: True" in result.output

    def test_presets_web(self, runner):
        result = runner.invoke(main, ['presets', '4000', '3000', '--use-case', 'web'])
        assert "scale: 0.8" in result.output

    def test_batch(self, runner, make_image, tmp_path):
        make_image("a.png")
        make_image("b.jpg")
        output_dir = tmp_path / "out"

        result = runner.invoke(main, ['batch', str(tmp_path), '-p', 'denoise', '-o', str(output_dir)])

        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in output_dir.iterdir()) == ["a_denoise.png", "b_denoise.jpg"]

    def test_batch_empty_directory(self, runner, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()

        result = runner.invoke(main, ['batch', str(empty)])

        assert result.exit_code == 1
