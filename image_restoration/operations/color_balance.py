"""Colour temperature, vibrance and highlight/shadow balance."""

import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Union

import numpy as np

from image_restoration.config import DEFAULT_CONFIG, RestorationConfig
from image_restoration.operations import filters
from image_restoration.operations.encoder import format_for_path, save_image
from image_restoration.preprocessing.loader import load_source
from image_restoration.preprocessing.params import ColorParams, normalize_params
from image_restoration.results import OperationResult, guarded_operation

logger = logging.getLogger(__name__)

TEMPERATURE_MULTIPLIER = 10.0  # channel levels per temperature unit
PERCENT_DIVISOR = 100.0  # vibrance/highlights/shadows are percentages


def apply_color_balance(pixels: np.ndarray, params: ColorParams) -> Tuple[np.ndarray, List[str]]:
    """Apply temperature, vibrance and highlight/shadow nudges.

    Positive temperature warms by lifting red, negative cools by lifting
    blue; only one channel moves, by ``|temperature| * 10`` levels.
    Vibrance maps onto a saturation boost. Shadows nudge brightness and
    highlights nudge contrast, both as fractions of 100.

    Args:
        pixels: uint8 RGB or RGBA array
        params: Canonical colour parameters

    Returns:
        Tuple of (balanced pixels, names of the steps applied in order)
    """
    steps: List[str] = []
    result = pixels

    if params.temperature != 0:
        shift = abs(params.temperature) * TEMPERATURE_MULTIPLIER
        if params.temperature > 0:
            result = filters.shift_channels(result, red=shift)
        else:
            result = filters.shift_channels(result, blue=shift)
        steps.append(f"temperature({params.temperature:g})")

    if params.vibrance != 0:
        result = filters.modulate(result, saturation=1.0 + params.vibrance / PERCENT_DIVISOR)
        steps.append(f"vibrance({params.vibrance:g})")

    if params.highlights != 0 or params.shadows != 0:
        result = filters.nudge_brightness(result, params.shadows / PERCENT_DIVISOR)
        result = filters.nudge_contrast(result, params.highlights / PERCENT_DIVISOR)
        steps.append(f"shadows({params.shadows:g})")
        steps.append(f"highlights({params.highlights:g})")

    return result, steps


@guarded_operation("color balance")
def adjust_color_balance(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    options: Optional[Mapping[str, Any]] = None,
    config: Optional[RestorationConfig] = None
) -> OperationResult:
    """Adjust colour balance and re-encode at fixed quality.

    Unlike the other transformers the output container follows the output
    path's extension, not the source format.

    Args:
        input_path: Source image
        output_path: Destination file; its extension picks the container
        options: Raw options (temperature, vibrance, highlights, shadows)
        config: Restoration config. If None, uses defaults.

    Returns:
        OperationResult; never raises
    """
    config = config or DEFAULT_CONFIG
    params = normalize_params(options, ColorParams)
    output_format = format_for_path(output_path)
    source = load_source(input_path)

    balanced, steps = apply_color_balance(source.pixels, params)

    save_image(balanced, output_path, output_format, quality=config.output_quality)

    logger.info(f"Color balance adjusted: {input_path} -> {output_path} ({', '.join(steps) or 'no change'})")

    return OperationResult.ok(
        message=f"Color balance adjusted and saved to {output_path}",
        output_path=str(output_path),
        steps=tuple(steps),
    )
