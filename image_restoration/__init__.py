"""Image restoration: enhancement, upscaling, denoising and colour balance.

Every public operation takes ``(input_path, output_path, options=None,
config=None)`` and returns an ``OperationResult``; none of them raise.
"""

from image_restoration.config import RestorationConfig
from image_restoration.results import ErrorKind, OperationResult
from image_restoration.preprocessing import (
    get_image_info,
    get_optimal_settings,
    validate_input_file,
)
from image_restoration.operations import (
    adjust_color_balance,
    convert_format,
    create_thumbnail,
    enhance_image,
    remove_noise,
    upscale_image,
)
from image_restoration.pipeline import (
    BatchEntry,
    Operation,
    RestorationPipeline,
    restore_image,
)
from image_restoration.utils.paths import generate_output_path

__version__ = '0.1.0'

__all__ = [
    'RestorationConfig',
    'ErrorKind',
    'OperationResult',
    'get_image_info',
    'get_optimal_settings',
    'validate_input_file',
    'adjust_color_balance',
    'convert_format',
    'create_thumbnail',
    'enhance_image',
    'remove_noise',
    'upscale_image',
    'BatchEntry',
    'Operation',
    'RestorationPipeline',
    'restore_image',
    'generate_output_path',
]
