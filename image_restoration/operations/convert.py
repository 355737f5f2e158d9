"""Container conversion and thumbnail generation."""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import numpy as np
from PIL import Image

from image_restoration.config import DEFAULT_CONFIG, RestorationConfig
from image_restoration.operations.encoder import save_image
from image_restoration.preprocessing.loader import canonical_format, load_source
from image_restoration.preprocessing.params import (
    ConvertParams,
    ThumbnailParams,
    normalize_params,
)
from image_restoration.results import (
    OperationResult,
    UnsupportedTargetFormatError,
    format_size,
    guarded_operation,
)

logger = logging.getLogger(__name__)

CONVERT_TARGETS = ('jpeg', 'png', 'webp', 'avif')


@guarded_operation("convert")
def convert_format(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    options: Optional[Mapping[str, Any]] = None,
    config: Optional[RestorationConfig] = None
) -> OperationResult:
    """Re-encode into an explicitly requested container.

    Args:
        input_path: Source image
        output_path: Destination file
        options: Raw options (target_format: jpeg/jpg, png, webp or avif;
            quality 1-100, default 95)
        config: Restoration config. If None, uses defaults.

    Returns:
        OperationResult; fails with UNSUPPORTED_TARGET_FORMAT before anything
        is written when the target is not supported. Never raises.
    """
    config = config or DEFAULT_CONFIG
    params = normalize_params(options, ConvertParams)
    target = canonical_format(params.target_format)

    if target not in CONVERT_TARGETS:
        raise UnsupportedTargetFormatError(f"Unsupported target format: {params.target_format}")

    source = load_source(input_path)

    save_image(
        source.pixels,
        output_path,
        target,
        quality=params.quality,
        png_compression=config.png_compression,
        webp_method=config.webp_method,
        avif_speed=config.avif_speed,
    )

    logger.info(f"Converted {source.format.upper()} -> {target.upper()}: {output_path} (quality={params.quality})")

    return OperationResult.ok(
        message=f"Converted to {target.upper()} and saved to {output_path}",
        output_path=str(output_path),
        steps=(f"encode({target}, quality={params.quality})",),
    )


@guarded_operation("thumbnail")
def create_thumbnail(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    options: Optional[Mapping[str, Any]] = None,
    config: Optional[RestorationConfig] = None
) -> OperationResult:
    """Fit the image inside a size x size box and write it as JPEG.

    Aspect ratio is preserved and images smaller than the box are not
    enlarged. The output is always JPEG, whatever the source format.

    Args:
        input_path: Source image
        output_path: Destination file
        options: Raw options (size, bounding box edge in pixels)
        config: Restoration config. If None, uses defaults.

    Returns:
        OperationResult with original and thumbnail sizes; never raises
    """
    config = config or DEFAULT_CONFIG
    params = normalize_params(options, ThumbnailParams, defaults={'size': config.thumbnail_size})
    source = load_source(input_path)

    img = Image.fromarray(np.ascontiguousarray(source.pixels)).convert('RGB')
    img.thumbnail((params.size, params.size), Image.Resampling.LANCZOS)

    save_image(np.asarray(img), output_path, 'jpeg', quality=config.thumbnail_quality)

    new_size = format_size(img.width, img.height)
    logger.info(f"Thumbnail created: {input_path} {source.size_label} -> {new_size}")

    return OperationResult.ok(
        message=f"Thumbnail created at {output_path}",
        output_path=str(output_path),
        original_size=source.size_label,
        new_size=new_size,
        steps=(f"thumbnail({params.size})",),
    )
