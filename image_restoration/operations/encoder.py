"""Format-aware image writing."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
from PIL import Image

from image_restoration.results import ProcessingError

logger = logging.getLogger(__name__)

# Canonical container name -> Pillow writer name
PIL_FORMATS = {
    'jpeg': 'JPEG',
    'png': 'PNG',
    'webp': 'WEBP',
    'tiff': 'TIFF',
    'gif': 'GIF',
    'avif': 'AVIF',
    'heif': 'HEIF',
}


def _writer_options(
    format_name: str,
    quality: int,
    png_compression: Optional[int],
    webp_method: Optional[int],
    avif_speed: Optional[int],
) -> Dict[str, Any]:
    if format_name == 'jpeg':
        return {'quality': quality, 'optimize': True}
    if format_name == 'png':
        return {'compress_level': png_compression} if png_compression is not None else {}
    if format_name == 'webp':
        options: Dict[str, Any] = {'quality': quality}
        if webp_method is not None:
            options['method'] = webp_method
        return options
    if format_name == 'avif':
        options = {'quality': quality}
        if avif_speed is not None:
            options['speed'] = avif_speed
        return options
    if format_name == 'heif':
        return {'quality': quality}
    return {}


def save_image(
    pixels: np.ndarray,
    output_path: Union[str, Path],
    format_name: str,
    quality: int = 95,
    png_compression: Optional[int] = None,
    webp_method: Optional[int] = None,
    avif_speed: Optional[int] = None,
) -> Path:
    """Encode pixels into ``format_name`` regardless of the output extension.

    Args:
        pixels: uint8 RGB or RGBA array
        output_path: Destination file; parent directories are created
        format_name: Canonical container name, e.g. "jpeg"
        quality: Encoder quality for lossy formats
        png_compression: zlib level for PNG; None keeps Pillow's default
        webp_method: WEBP effort (0-6); None keeps Pillow's default
        avif_speed: AVIF speed (0-10); None keeps Pillow's default

    Returns:
        Path that was written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    img = Image.fromarray(np.ascontiguousarray(pixels))

    # JPEG has no alpha channel
    if format_name == 'jpeg' and img.mode != 'RGB':
        img = img.convert('RGB')

    writer = PIL_FORMATS.get(format_name, format_name.upper())
    options = _writer_options(format_name, quality, png_compression, webp_method, avif_speed)

    try:
        img.save(str(output_path), format=writer, **options)
    except (KeyError, ValueError, OSError) as e:
        if output_path.is_file():
            output_path.unlink()
        raise ProcessingError(f"Could not encode {format_name.upper()} to {output_path}: {e}") from e

    logger.debug(f"Wrote {writer} {img.width}x{img.height} to {output_path} ({options})")

    return output_path


def format_for_path(path: Union[str, Path]) -> str:
    """Container implied by a file extension, e.g. ``"out.jpg"`` -> ``"jpeg"``.

    Raises:
        ProcessingError: If Pillow has no writer for the extension
    """
    ext = Path(path).suffix.lower()
    writer = Image.registered_extensions().get(ext)
    if writer is None:
        raise ProcessingError(f"Cannot determine output format from extension '{ext}'")

    for name, pil_name in PIL_FORMATS.items():
        if pil_name == writer:
            return name
    return writer.lower()
