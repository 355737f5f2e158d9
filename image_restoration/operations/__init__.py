"""Single-operation image transformers.

Every public transformer shares one signature,
``(input_path, output_path, options=None, config=None) -> OperationResult``,
reads the source without modifying it and writes only to ``output_path``.
"""

from image_restoration.operations.enhance import (
    enhance_image,
    apply_enhancement,
)

from image_restoration.operations.upscale import (
    upscale_image,
    compute_target_size,
)

from image_restoration.operations.denoise import (
    remove_noise,
    apply_denoise,
)

from image_restoration.operations.color_balance import (
    adjust_color_balance,
    apply_color_balance,
)

from image_restoration.operations.convert import (
    convert_format,
    create_thumbnail,
    CONVERT_TARGETS,
)

__all__ = [
    # Enhancement
    'enhance_image',
    'apply_enhancement',
    # Upscaling
    'upscale_image',
    'compute_target_size',
    # Denoising
    'remove_noise',
    'apply_denoise',
    # Colour
    'adjust_color_balance',
    'apply_color_balance',
    # Conversion
    'convert_format',
    'create_thumbnail',
    'CONVERT_TARGETS',
]
