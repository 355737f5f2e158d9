"""Resolution upscaling."""

import logging
import math
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Union

from image_restoration.config import DEFAULT_CONFIG, RestorationConfig
from image_restoration.operations import filters
from image_restoration.operations.encoder import save_image
from image_restoration.preprocessing.loader import load_source
from image_restoration.preprocessing.params import UpscaleParams, normalize_params
from image_restoration.results import OperationResult, format_size, guarded_operation

logger = logging.getLogger(__name__)

# Light touch-up applied after resizing when enhance_after_upscale is set
POST_UPSCALE_BRIGHTNESS = 1.02
POST_UPSCALE_SATURATION = 1.05


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_target_size(
    width: int,
    height: int,
    scale: float,
    max_width: int,
    max_height: int
) -> Tuple[int, int]:
    """Scaled dimensions, each capped independently at its maximum."""
    new_width = min(_round_half_up(width * scale), max_width)
    new_height = min(_round_half_up(height * scale), max_height)
    return max(new_width, 1), max(new_height, 1)


def upscale_with_params(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    params: UpscaleParams,
    config: Optional[RestorationConfig] = None
) -> OperationResult:
    """Upscale a file with already-normalized parameters.

    Raises:
        RestorationError: On any load, processing or encoding failure
    """
    config = config or DEFAULT_CONFIG
    source = load_source(input_path)

    new_width, new_height = compute_target_size(
        source.width,
        source.height,
        params.scale,
        params.max_width,
        params.max_height,
    )

    steps: List[str] = [f"resize({new_width}x{new_height}, {params.kernel})"]
    upscaled = filters.resize(source.pixels, new_width, new_height, params.kernel)

    if params.enhance_after_upscale:
        upscaled = filters.sharpen(upscaled)
        upscaled = filters.modulate(
            upscaled,
            brightness=POST_UPSCALE_BRIGHTNESS,
            saturation=POST_UPSCALE_SATURATION,
        )
        steps.extend([
            "sharpen",
            f"modulate(brightness={POST_UPSCALE_BRIGHTNESS:g}, saturation={POST_UPSCALE_SATURATION:g})",
        ])

    save_image(
        upscaled,
        output_path,
        source.format,
        quality=config.output_quality,
        png_compression=config.png_compression,
        webp_method=config.webp_method,
    )

    original_size = source.size_label
    new_size = format_size(new_width, new_height)

    logger.info(f"Upscaled image: {input_path} {original_size} -> {new_size} ({params.scale:.2f}x)")

    return OperationResult.ok(
        message=f"Upscaled image from {original_size} to {new_size}",
        output_path=str(output_path),
        original_size=original_size,
        new_size=new_size,
        scale_factor=f"{params.scale:.1f}x",
        steps=tuple(steps),
    )


@guarded_operation("upscale")
def upscale_image(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    options: Optional[Mapping[str, Any]] = None,
    config: Optional[RestorationConfig] = None
) -> OperationResult:
    """Upscale by a clamped scale factor, filling the exact target size.

    Args:
        input_path: Source image
        output_path: Destination file
        options: Raw options (scale, kernel, max_width, max_height,
            enhance_after_upscale); normalized before use
        config: Restoration config. If None, uses defaults. Supplies the
            default kernel and size caps.

    Returns:
        OperationResult with original/new size and scale factor; never raises
    """
    config = config or DEFAULT_CONFIG
    params = normalize_params(
        options,
        UpscaleParams,
        defaults={
            'kernel': config.default_kernel,
            'max_width': config.max_width,
            'max_height': config.max_height,
        },
    )
    return upscale_with_params(input_path, output_path, params, config)
