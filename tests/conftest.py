"""Shared fixtures: synthetic images written to tmp_path."""

from pathlib import Path
from typing import Callable, Optional

import numpy as np
import pytest
from PIL import Image


def _pattern(width: int, height: int, channels: int = 3, seed: int = 42) -> np.ndarray:
    """Gradient with coloured blocks and mild noise, uint8."""
    rng = np.random.default_rng(seed)
    y, x = np.mgrid[0:height, 0:width]

    img = np.zeros((height, width, 3), dtype=np.float32)
    img[:, :, 0] = 60 + 120 * x / max(width - 1, 1)
    img[:, :, 1] = 80 + 100 * y / max(height - 1, 1)
    img[:, :, 2] = 140.0

    # Coloured blocks for some structure
    img[height // 4: height // 2, width // 4: width // 2] = [200, 90, 60]
    img[height // 2: 3 * height // 4, width // 2: 3 * width // 4] = [50, 160, 210]

    img += rng.normal(0, 6, size=img.shape)
    pixels = np.clip(img, 0, 255).astype(np.uint8)

    if channels == 4:
        alpha = np.full((height, width, 1), 255, dtype=np.uint8)
        alpha[: height // 3] = 128
        pixels = np.concatenate([pixels, alpha], axis=2)

    return pixels


@pytest.fixture
def make_image(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a synthetic image and returning its path."""

    def _make(
        name: str = "source.jpg",
        width: int = 400,
        height: int = 300,
        format: Optional[str] = None,
        channels: int = 3,
        fill: Optional[int] = None,
    ) -> Path:
        if fill is not None:
            pixels = np.full((height, width, channels), fill, dtype=np.uint8)
        else:
            pixels = _pattern(width, height, channels)

        path = tmp_path / name
        save_kwargs = {'quality': 90} if (format or path.suffix.lower()) in ('JPEG', '.jpg', '.jpeg') else {}
        Image.fromarray(pixels).save(path, format=format, **save_kwargs)
        return path

    return _make


@pytest.fixture
def jpeg_source(make_image) -> Path:
    """400x300 JPEG."""
    return make_image("source.jpg")


@pytest.fixture
def png_source(make_image) -> Path:
    """400x300 PNG."""
    return make_image("source.png")
