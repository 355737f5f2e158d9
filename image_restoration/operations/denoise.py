"""Strength-tiered noise removal.

Three tiers trade noise suppression against detail loss:

1. LIGHT (strength <= 3): a single median pass sized to the strength
2. MEDIUM (4-6): median + slight blur, then sharpen to recover perceived detail
3. STRONG (> 6): median + stronger blur + sharpen, plus a small brightness
   lift to offset the darker look the stronger blur leaves behind
"""

import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Union

import numpy as np

from image_restoration.config import DEFAULT_CONFIG, RestorationConfig
from image_restoration.operations import filters
from image_restoration.operations.encoder import save_image
from image_restoration.preprocessing.loader import load_source
from image_restoration.preprocessing.params import DenoiseParams, normalize_params
from image_restoration.results import OperationResult, guarded_operation

logger = logging.getLogger(__name__)

TIER_MEDIAN_SIZE = 3
MEDIUM_BLUR_SIGMA = 0.5
STRONG_BLUR_SIGMA = 0.8
STRONG_BRIGHTNESS_LIFT = 1.02


def apply_denoise(pixels: np.ndarray, strength: int) -> Tuple[np.ndarray, List[str]]:
    """Run the denoise tier selected by ``strength``.

    Args:
        pixels: uint8 RGB or RGBA array
        strength: Clamped strength, 1-10

    Returns:
        Tuple of (denoised pixels, names of the steps applied in order)
    """
    if strength <= 3:
        return filters.median(pixels, strength), [f"median({strength})"]

    if strength <= 6:
        result = filters.median(pixels, TIER_MEDIAN_SIZE)
        result = filters.gaussian_blur(result, MEDIUM_BLUR_SIGMA)
        result = filters.sharpen(result)
        return result, [f"median({TIER_MEDIAN_SIZE})", f"blur({MEDIUM_BLUR_SIGMA:g})", "sharpen"]

    result = filters.median(pixels, TIER_MEDIAN_SIZE)
    result = filters.gaussian_blur(result, STRONG_BLUR_SIGMA)
    result = filters.sharpen(result)
    result = filters.modulate(result, brightness=STRONG_BRIGHTNESS_LIFT)
    return result, [
        f"median({TIER_MEDIAN_SIZE})",
        f"blur({STRONG_BLUR_SIGMA:g})",
        "sharpen",
        f"modulate(brightness={STRONG_BRIGHTNESS_LIFT:g})",
    ]


@guarded_operation("denoise")
def remove_noise(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    options: Optional[Mapping[str, Any]] = None,
    config: Optional[RestorationConfig] = None
) -> OperationResult:
    """Remove noise at the given strength, preserving the source format.

    Args:
        input_path: Source image
        output_path: Destination file
        options: Raw options (strength, 1-10, default 3)
        config: Restoration config. If None, uses defaults.

    Returns:
        OperationResult; never raises
    """
    config = config or DEFAULT_CONFIG
    params = normalize_params(options, DenoiseParams)
    source = load_source(input_path)

    denoised, steps = apply_denoise(source.pixels, params.strength)

    # PNG keeps Pillow's default compression here
    save_image(denoised, output_path, source.format, quality=config.output_quality)

    logger.info(f"Denoised image: {input_path} -> {output_path} (strength={params.strength}, steps={steps})")

    return OperationResult.ok(
        message=f"Noise removed (strength: {params.strength}) and saved to {output_path}",
        output_path=str(output_path),
        steps=tuple(steps),
    )
