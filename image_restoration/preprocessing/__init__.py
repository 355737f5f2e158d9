"""Loading, validation and parameter normalization for source images."""

from image_restoration.preprocessing.loader import (
    SourceImage,
    ImageInfo,
    InfoResult,
    load_source,
    get_image_info,
)

from image_restoration.preprocessing.validator import (
    ValidationResult,
    validate_input_file,
    SUPPORTED_DECODE_FORMATS,
    SUPPORTED_EXTENSIONS,
)

from image_restoration.preprocessing.params import (
    EnhanceParams,
    UpscaleParams,
    DenoiseParams,
    ColorParams,
    ConvertParams,
    ThumbnailParams,
    RestoreParams,
    RestorationPlan,
    ParameterPreset,
    canonical_kernel,
    normalize_params,
    normalize_restore_params,
    get_optimal_settings,
)

__all__ = [
    # Loading
    'SourceImage',
    'ImageInfo',
    'InfoResult',
    'load_source',
    'get_image_info',
    # Validation
    'ValidationResult',
    'validate_input_file',
    'SUPPORTED_DECODE_FORMATS',
    'SUPPORTED_EXTENSIONS',
    # Parameters
    'EnhanceParams',
    'UpscaleParams',
    'DenoiseParams',
    'ColorParams',
    'ConvertParams',
    'ThumbnailParams',
    'RestoreParams',
    'RestorationPlan',
    'ParameterPreset',
    'canonical_kernel',
    'normalize_params',
    'normalize_restore_params',
    'get_optimal_settings',
]
