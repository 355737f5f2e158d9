"""Pixel operations composed by the transformers.

Each function takes a uint8 array in RGB or RGBA order and returns a new
uint8 array of the same shape. The input is never modified. Alpha channels
are passed through unchanged; only colour channels are filtered (resize is
the exception and scales alpha with the rest of the image).
"""

import logging
from typing import Optional, Tuple

import cv2
import numpy as np
from PIL import Image, ImageEnhance
from scipy.ndimage import gaussian_filter, median_filter

logger = logging.getLogger(__name__)

INTERPOLATION = {
    'lanczos': cv2.INTER_LANCZOS4,
    'cubic': cv2.INTER_CUBIC,
    'linear': cv2.INTER_LINEAR,
    'nearest': cv2.INTER_NEAREST,
    'area': cv2.INTER_AREA,
}


def _split_alpha(pixels: np.ndarray) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    if pixels.ndim == 3 and pixels.shape[2] == 4:
        return np.ascontiguousarray(pixels[:, :, :3]), pixels[:, :, 3:]
    return np.ascontiguousarray(pixels), None


def _merge_alpha(rgb: np.ndarray, alpha: Optional[np.ndarray]) -> np.ndarray:
    if alpha is None:
        return rgb
    return np.concatenate([rgb, alpha], axis=2)


def _apply_lut(pixels: np.ndarray, lut: np.ndarray) -> np.ndarray:
    rgb, alpha = _split_alpha(pixels)
    return _merge_alpha(cv2.LUT(rgb, lut), alpha)


def _to_uint8(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def modulate(pixels: np.ndarray, brightness: float = 1.0, saturation: float = 1.0) -> np.ndarray:
    """Scale brightness and colour saturation (1.0 = unchanged)."""
    rgb, alpha = _split_alpha(pixels)
    img = Image.fromarray(rgb)

    if brightness != 1.0:
        img = ImageEnhance.Brightness(img).enhance(brightness)
    if saturation != 1.0:
        img = ImageEnhance.Color(img).enhance(saturation)

    return _merge_alpha(np.array(img, dtype=np.uint8), alpha)


def apply_gamma(pixels: np.ndarray, gamma: float) -> np.ndarray:
    """Gamma correction: out = 255 * (in / 255) ^ (1 / gamma).

    Gamma above 1 lifts mid-tones while leaving black and white fixed.
    """
    levels = np.arange(256, dtype=np.float64) / 255.0
    lut = _to_uint8(255.0 * np.power(levels, 1.0 / gamma))
    return _apply_lut(pixels, lut)


def apply_linear(pixels: np.ndarray, multiplier: float, offset: float) -> np.ndarray:
    """Linear remap: out = multiplier * in + offset, saturated to [0, 255]."""
    lut = _to_uint8(multiplier * np.arange(256, dtype=np.float64) + offset)
    return _apply_lut(pixels, lut)


def sharpen(pixels: np.ndarray, radius: float = 1.0, amount: float = 0.5) -> np.ndarray:
    """Unsharp mask: sharp = original + amount * (original - blurred)."""
    rgb, alpha = _split_alpha(pixels)
    image = rgb.astype(np.float32)

    blurred = gaussian_filter(image, sigma=(radius, radius, 0))
    sharpened = image + amount * (image - blurred)

    return _merge_alpha(_to_uint8(sharpened), alpha)


def median(pixels: np.ndarray, size: int) -> np.ndarray:
    """Median filter with a size x size window on each colour channel."""
    rgb, alpha = _split_alpha(pixels)
    filtered = median_filter(rgb, size=(size, size, 1), mode='reflect')
    return _merge_alpha(filtered, alpha)


def gaussian_blur(pixels: np.ndarray, sigma: float) -> np.ndarray:
    """Gaussian blur with standard deviation ``sigma`` in pixels."""
    rgb, alpha = _split_alpha(pixels)
    blurred = cv2.GaussianBlur(rgb, (0, 0), sigmaX=sigma, sigmaY=sigma)
    return _merge_alpha(blurred, alpha)


def resize(pixels: np.ndarray, width: int, height: int, kernel: str = 'lanczos') -> np.ndarray:
    """Resize to exactly width x height (no aspect preservation)."""
    interpolation = INTERPOLATION[kernel]
    resized = cv2.resize(
        np.ascontiguousarray(pixels),
        (width, height),
        interpolation=interpolation
    )
    # cv2 drops the channel axis for single-channel input
    if resized.ndim == 2:
        resized = resized[:, :, np.newaxis]
    return resized


def shift_channels(pixels: np.ndarray, red: float = 0.0, green: float = 0.0, blue: float = 0.0) -> np.ndarray:
    """Add constant offsets to the colour channels, clipped to [0, 255]."""
    rgb, alpha = _split_alpha(pixels)
    shifted = rgb.astype(np.float32) + np.array([red, green, blue], dtype=np.float32)
    return _merge_alpha(_to_uint8(shifted), alpha)


def nudge_brightness(pixels: np.ndarray, amount: float) -> np.ndarray:
    """Brightness nudge in [-1, 1].

    Negative values darken proportionally; positive values move each level
    toward white by ``amount`` of the remaining headroom.
    """
    amount = float(np.clip(amount, -1.0, 1.0))
    levels = np.arange(256, dtype=np.float64)
    if amount < 0:
        lut = levels * (1.0 + amount)
    else:
        lut = levels + (255.0 - levels) * amount
    return _apply_lut(pixels, _to_uint8(lut))


def nudge_contrast(pixels: np.ndarray, amount: float) -> np.ndarray:
    """Contrast nudge in (-1, 1) around mid-grey; factor = (1 + a) / (1 - a)."""
    amount = float(np.clip(amount, -0.99, 0.99))
    factor = (1.0 + amount) / (1.0 - amount)
    return apply_linear(pixels, factor, 127.5 - 127.5 * factor)
