"""Image loading: decode a source file into pixels plus metadata.

Supports every container Pillow can read, with HEIF/HEIC added through
pillow-heif. Pixels are returned as uint8 arrays in RGB or RGBA order.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError
from pillow_heif import register_heif_opener

from image_restoration.results import (
    FileTooLargeError,
    InputNotFoundError,
    UnreadableFileError,
)

logger = logging.getLogger(__name__)

register_heif_opener()

# Pillow format names that map onto a shorter canonical name
_FORMAT_ALIASES = {
    'mpo': 'jpeg',  # multi-picture JPEG written by many phone cameras
    'jpg': 'jpeg',
    'tif': 'tiff',
    'heic': 'heif',
}

_COLORSPACES = {
    '1': 'b-w',
    'L': 'b-w',
    'LA': 'b-w',
    'I;16': 'grey16',
    'RGB': 'srgb',
    'RGBA': 'srgb',
    'P': 'srgb',
    'PA': 'srgb',
    'CMYK': 'cmyk',
    'YCbCr': 'ycbcr',
    'LAB': 'lab',
}


def canonical_format(name: Optional[str]) -> str:
    """Lower-case container name, e.g. ``"MPO"`` -> ``"jpeg"``."""
    if not name:
        return "unknown"
    lowered = name.lower()
    return _FORMAT_ALIASES.get(lowered, lowered)


def _has_alpha(img: Image.Image) -> bool:
    return 'A' in img.getbands() or 'transparency' in img.info


@dataclass(frozen=True)
class SourceImage:
    """Decoded source pixels plus metadata. Read-only once loaded."""

    pixels: np.ndarray  # uint8, (H, W, 3) RGB or (H, W, 4) RGBA
    path: str
    format: str  # canonical container name, e.g. "jpeg"
    colorspace: str
    file_size_bytes: int

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def channels(self) -> int:
        return int(self.pixels.shape[2])

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    @property
    def size_label(self) -> str:
        return f"{self.width}x{self.height}"


def _open(path: Union[str, Path]) -> Image.Image:
    path_obj = Path(path)
    if not path_obj.is_file():
        raise InputNotFoundError(f"File does not exist: {path}")

    try:
        return Image.open(path_obj)
    except Image.DecompressionBombError as e:
        raise FileTooLargeError(f"Image dimensions too large: {e}") from e
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise UnreadableFileError(f"Unable to decode image {path}: {e}") from e


def load_source(path: Union[str, Path]) -> SourceImage:
    """Decode an image file into a SourceImage.

    EXIF orientation is applied, palette and greyscale images are expanded
    to RGB, and images with transparency become RGBA.

    Args:
        path: Path to image file

    Returns:
        SourceImage with uint8 pixels

    Raises:
        InputNotFoundError: If the file does not exist
        UnreadableFileError: If the file cannot be decoded
    """
    with _open(path) as img:
        format_name = canonical_format(img.format)
        colorspace = _COLORSPACES.get(img.mode, img.mode.lower())
        try:
            img.load()
            oriented = ImageOps.exif_transpose(img)
        except (OSError, ValueError) as e:
            raise UnreadableFileError(f"Unable to decode image {path}: {e}") from e

        mode = 'RGBA' if _has_alpha(oriented) else 'RGB'
        pixels = np.array(oriented.convert(mode), dtype=np.uint8)

    pixels.setflags(write=False)
    source = SourceImage(
        pixels=pixels,
        path=str(path),
        format=format_name,
        colorspace=colorspace,
        file_size_bytes=Path(path).stat().st_size,
    )

    logger.debug(f"Loaded {format_name.upper()}: {path} ({source.size_label}, {mode})")

    return source


@dataclass(frozen=True)
class ImageInfo:
    """Header-level description of an image file."""

    width: int
    height: int
    format: str
    channels: int
    has_alpha: bool
    colorspace: str
    file_size_bytes: int

    @property
    def file_size_mb(self) -> str:
        return f"{self.file_size_bytes / (1024 * 1024):.2f}"


@dataclass(frozen=True)
class InfoResult:
    """Outcome of ``get_image_info``."""

    success: bool
    info: Optional[ImageInfo] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.success or self.info is None:
            return {'success': False, 'error': self.error}
        info = self.info
        return {
            'success': True,
            'info': {
                'width': info.width,
                'height': info.height,
                'format': info.format,
                'channels': info.channels,
                'has_alpha': info.has_alpha,
                'colorspace': info.colorspace,
                'file_size_bytes': info.file_size_bytes,
                'file_size_mb': info.file_size_mb,
            },
        }


def get_image_info(path: Union[str, Path]) -> InfoResult:
    """Describe an image file from its header without decoding pixels.

    Args:
        path: Path to image file

    Returns:
        InfoResult; never raises
    """
    try:
        with _open(path) as img:
            info = ImageInfo(
                width=img.width,
                height=img.height,
                format=canonical_format(img.format),
                channels=len(img.getbands()),
                has_alpha=_has_alpha(img),
                colorspace=_COLORSPACES.get(img.mode, img.mode.lower()),
                file_size_bytes=Path(path).stat().st_size,
            )
    except Exception as e:
        logger.warning(f"Could not read image info for {path}: {e}")
        return InfoResult(success=False, error=str(e))

    return InfoResult(success=True, info=info)
