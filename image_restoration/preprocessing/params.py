"""Parameter normalization: raw option mappings into typed, bounded records.

Every operation has a frozen dataclass describing its parameters. Fields carry
their valid range in the dataclass field metadata; ``normalize_params`` fills
defaults, coerces types and clamps to that range. It never raises: a value
that cannot be interpreted falls back to the field default.

Only fields where an extreme value would crash the codec or blow up resource
use are bounded (gamma, scale, denoise strength, quality, sizes). Cosmetic
fields such as brightness pass through unclamped.
"""

import logging
import math
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

P = TypeVar('P')

GAMMA_RANGE = (1.0, 3.0)
SCALE_RANGE = (1.1, 8.0)
DENOISE_STRENGTH_RANGE = (1, 10)
QUALITY_RANGE = (1, 100)

# Resampling kernel names accepted from callers -> canonical kernel
KERNEL_ALIASES = {
    'lanczos': 'lanczos',
    'lanczos2': 'lanczos',
    'lanczos3': 'lanczos',
    'cubic': 'cubic',
    'bicubic': 'cubic',
    'mitchell': 'cubic',
    'linear': 'linear',
    'bilinear': 'linear',
    'nearest': 'nearest',
    'area': 'area',
}

_FALSE_STRINGS = ('false', '0', 'no', 'off', '')


def canonical_kernel(name: str) -> str:
    """Canonical resampling kernel for a name or alias; unknown names give lanczos."""
    return KERNEL_ALIASES.get(str(name).strip().lower(), 'lanczos')


def _param(
    default: Any,
    low: Optional[float] = None,
    high: Optional[float] = None,
    choices: Optional[Mapping[str, str]] = None,
    aliases: Tuple[str, ...] = (),
) -> Any:
    return field(
        default=default,
        metadata={'range': (low, high), 'choices': choices, 'aliases': aliases},
    )


@dataclass(frozen=True)
class EnhanceParams:
    brightness: float = _param(1.0)
    contrast: float = _param(1.0)
    saturation: float = _param(1.0)
    gamma: float = _param(1.0, *GAMMA_RANGE)
    sharpen: bool = _param(False)
    denoise: bool = _param(False)


@dataclass(frozen=True)
class UpscaleParams:
    scale: float = _param(2.0, *SCALE_RANGE)
    kernel: str = _param('lanczos', choices=KERNEL_ALIASES, aliases=('algorithm',))
    max_width: int = _param(8000, 1)
    max_height: int = _param(8000, 1)
    enhance_after_upscale: bool = _param(True)


@dataclass(frozen=True)
class DenoiseParams:
    strength: int = _param(3, *DENOISE_STRENGTH_RANGE)


@dataclass(frozen=True)
class ColorParams:
    temperature: float = _param(0.0)
    vibrance: float = _param(0.0)
    highlights: float = _param(0.0)
    shadows: float = _param(0.0)


@dataclass(frozen=True)
class ConvertParams:
    target_format: str = _param('jpeg', aliases=('format',))
    quality: int = _param(95, *QUALITY_RANGE)


@dataclass(frozen=True)
class ThumbnailParams:
    size: int = _param(300, 1)


class RestorationPlan(str, Enum):
    """Which stages a restore runs."""

    ENHANCE_ONLY = "enhance_only"
    UPSCALE_THEN_ENHANCE = "upscale_then_enhance"


@dataclass(frozen=True)
class RestoreParams:
    brightness: float = _param(1.1)
    contrast: float = _param(1.2)
    saturation: float = _param(1.1)
    gamma: float = _param(1.1, *GAMMA_RANGE)
    scale: float = _param(1.5, *SCALE_RANGE)
    sharpen: bool = _param(True)
    denoise: bool = _param(True)
    plan: RestorationPlan = field(
        default=RestorationPlan.UPSCALE_THEN_ENHANCE,
        metadata={'derived': True},
    )

    def enhance_params(self) -> EnhanceParams:
        return EnhanceParams(
            brightness=self.brightness,
            contrast=self.contrast,
            saturation=self.saturation,
            gamma=self.gamma,
            sharpen=self.sharpen,
            denoise=self.denoise,
        )

    def upscale_params(self, max_width: int, max_height: int, kernel: str) -> UpscaleParams:
        # The enhance stage applies its own adjustments afterwards
        return UpscaleParams(
            scale=self.scale,
            kernel=kernel,
            max_width=max_width,
            max_height=max_height,
            enhance_after_upscale=False,
        )


def _camel_case(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


def _coerce(value: Any, kind: type) -> Any:
    if kind is bool:
        if isinstance(value, str):
            return value.strip().lower() not in _FALSE_STRINGS
        return bool(value)
    if kind is str:
        return str(value).strip().lower().lstrip('.')
    if isinstance(value, bool):
        raise TypeError("boolean is not a number")

    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite value {value!r}")
    if kind is int:
        return int(math.floor(number + 0.5))
    return number


def _clamp(value: Any, bounds: Tuple[Optional[float], Optional[float]]) -> Any:
    low, high = bounds
    if low is not None and value < low:
        return type(value)(low)
    if high is not None and value > high:
        return type(value)(high)
    return value


def _lookup(raw: Mapping[str, Any], name: str, aliases: Tuple[str, ...] = ()) -> Any:
    for key in (name, _camel_case(name)) + tuple(aliases):
        if raw.get(key) is not None:
            return raw[key]
    return None


def normalize_params(
    raw: Optional[Mapping[str, Any]],
    schema: Type[P],
    defaults: Optional[Mapping[str, Any]] = None,
) -> P:
    """Turn a raw option mapping into a canonical parameter record.

    Args:
        raw: Caller-supplied options; keys may be snake_case or camelCase.
            Unknown keys are ignored.
        schema: Parameter dataclass to build (e.g. EnhanceParams)
        defaults: Optional per-field default overrides (e.g. from config)

    Returns:
        Instance of ``schema`` with every field defaulted, coerced and clamped
    """
    raw = raw or {}
    defaults = defaults or {}
    values: Dict[str, Any] = {}

    for f in fields(schema):
        if f.metadata.get('derived'):
            continue

        default = defaults.get(f.name, f.default)
        value = _lookup(raw, f.name, f.metadata.get('aliases', ()))

        if value is None:
            value = default
        else:
            try:
                value = _coerce(value, f.type)
            except (TypeError, ValueError) as e:
                logger.warning(
                    f"{schema.__name__}.{f.name}: cannot use {value!r} ({e}), "
                    f"falling back to {default!r}"
                )
                value = default

        choices = f.metadata.get('choices')
        if choices is not None:
            if value not in choices:
                logger.warning(f"{schema.__name__}.{f.name}: unknown value {value!r}, using {f.default!r}")
                value = f.default
            value = choices[value]

        bounded = _clamp(value, f.metadata.get('range', (None, None)))
        if bounded != value:
            logger.debug(f"{schema.__name__}.{f.name}: clamped {value} -> {bounded}")
        values[f.name] = bounded

    return schema(**values)


def normalize_restore_params(raw: Optional[Mapping[str, Any]]) -> RestoreParams:
    """Normalize restore options and derive the restoration plan.

    The plan follows the *requested* scale: anything at or below 1 means
    enhance-only. The stored scale is clamped like any other upscale scale.
    """
    params = normalize_params(raw, RestoreParams)

    requested = _lookup(raw or {}, 'scale')
    try:
        requested_scale = _coerce(requested, float) if requested is not None else params.scale
    except (TypeError, ValueError):
        requested_scale = params.scale

    plan = (
        RestorationPlan.UPSCALE_THEN_ENHANCE
        if requested_scale > 1
        else RestorationPlan.ENHANCE_ONLY
    )
    return replace(params, plan=plan)


@dataclass(frozen=True)
class ParameterPreset:
    """Suggested restore settings for an image size and use case."""

    brightness: float
    contrast: float
    saturation: float
    sharpen: bool
    scale: float

    def to_options(self) -> Dict[str, Any]:
        return {
            'brightness': self.brightness,
            'contrast': self.contrast,
            'saturation': self.saturation,
            'sharpen': self.sharpen,
            'scale': self.scale,
        }


def get_optimal_settings(width: int, height: int, use_case: str = "general") -> ParameterPreset:
    """Suggest restore settings from the image's megapixel count.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        use_case: "general", "print" or "web"; anything else means "general"

    Returns:
        ParameterPreset
    """
    megapixels = (width * height) / 1_000_000

    if use_case == "print":
        scale = 2.5 if megapixels < 2 else 1.8 if megapixels < 8 else 1.3
        return ParameterPreset(brightness=1.02, contrast=1.15, saturation=1.1, sharpen=True, scale=scale)

    if use_case == "web":
        scale = 0.8 if megapixels > 4 else 1.2
        return ParameterPreset(brightness=1.08, contrast=1.12, saturation=1.15, sharpen=True, scale=scale)

    if use_case != "general":
        logger.debug(f"Unknown use case {use_case!r}, using general preset")

    scale = 2.0 if megapixels < 1 else 1.5 if megapixels < 4 else 1.2
    return ParameterPreset(brightness=1.05, contrast=1.1, saturation=1.05, sharpen=True, scale=scale)
