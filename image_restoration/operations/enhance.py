"""Tone, contrast and detail enhancement.

Applies, in this order: brightness/saturation modulation, gamma correction,
linear contrast remap, optional sharpening and optional denoising. Contrast
comes after modulation so the remap's mid-grey pivot
(out = contrast * in - 128 * contrast + 128) does not re-skew the brightness
and saturation shifts.
"""

import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Union

import numpy as np

from image_restoration.config import DEFAULT_CONFIG, RestorationConfig
from image_restoration.operations import filters
from image_restoration.operations.encoder import save_image
from image_restoration.preprocessing.loader import load_source
from image_restoration.preprocessing.params import EnhanceParams, normalize_params
from image_restoration.results import OperationResult, guarded_operation

logger = logging.getLogger(__name__)

# Fixed smoothing pass used when denoise is requested
DENOISE_MEDIAN_SIZE = 3


def apply_enhancement(pixels: np.ndarray, params: EnhanceParams) -> Tuple[np.ndarray, List[str]]:
    """Run the enhancement chain on a pixel array.

    Args:
        pixels: uint8 RGB or RGBA array
        params: Canonical enhancement parameters

    Returns:
        Tuple of (enhanced pixels, names of the steps applied in order)
    """
    steps: List[str] = []
    result = pixels

    if params.brightness != 1.0 or params.saturation != 1.0:
        result = filters.modulate(result, brightness=params.brightness, saturation=params.saturation)
        steps.append(f"modulate(brightness={params.brightness:g}, saturation={params.saturation:g})")

    if params.gamma != 1.0:
        result = filters.apply_gamma(result, params.gamma)
        steps.append(f"gamma({params.gamma:g})")

    if params.contrast != 1.0:
        result = filters.apply_linear(result, params.contrast, 128.0 - 128.0 * params.contrast)
        steps.append(f"contrast({params.contrast:g})")

    if params.sharpen:
        result = filters.sharpen(result)
        steps.append("sharpen")

    if params.denoise:
        result = filters.median(result, DENOISE_MEDIAN_SIZE)
        steps.append(f"median({DENOISE_MEDIAN_SIZE})")

    logger.debug(f"Enhancement steps: {steps or ['none']}")

    return result, steps


def enhance_with_params(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    params: EnhanceParams,
    config: Optional[RestorationConfig] = None
) -> OperationResult:
    """Enhance a file with already-normalized parameters.

    Raises:
        RestorationError: On any load, processing or encoding failure
    """
    config = config or DEFAULT_CONFIG
    source = load_source(input_path)

    enhanced, steps = apply_enhancement(source.pixels, params)

    save_image(
        enhanced,
        output_path,
        source.format,
        quality=config.output_quality,
        png_compression=config.png_compression,
    )

    logger.info(f"Enhanced image: {input_path} -> {output_path} ({source.size_label})")

    return OperationResult.ok(
        message=f"Enhanced image saved to {output_path}",
        output_path=str(output_path),
        steps=tuple(steps),
    )


@guarded_operation("enhance")
def enhance_image(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    options: Optional[Mapping[str, Any]] = None,
    config: Optional[RestorationConfig] = None
) -> OperationResult:
    """Enhance tone and detail, writing in the source's container format.

    Args:
        input_path: Source image
        output_path: Destination file
        options: Raw options (brightness, contrast, saturation, gamma,
            sharpen, denoise); normalized before use
        config: Restoration config. If None, uses defaults.

    Returns:
        OperationResult; never raises
    """
    params = normalize_params(options, EnhanceParams)
    return enhance_with_params(input_path, output_path, params, config)
