"""Input validation run before any transformer touches a file."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from PIL import Image, UnidentifiedImageError

from image_restoration.config import DEFAULT_CONFIG, MIB, RestorationConfig
from image_restoration.preprocessing.loader import canonical_format
from image_restoration.results import ErrorKind

logger = logging.getLogger(__name__)

# Formats accepted when the header probe identifies the file
SUPPORTED_DECODE_FORMATS = ('jpeg', 'png', 'webp', 'tiff', 'gif', 'avif', 'heif')

# Fallback when the probe fails. Mirrors SUPPORTED_DECODE_FORMATS so both
# paths accept the same set of containers.
SUPPORTED_EXTENSIONS = (
    '.jpg', '.jpeg', '.jpe',
    '.png',
    '.webp',
    '.tif', '.tiff',
    '.gif',
    '.avif',
    '.heic', '.heif',
)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of ``validate_input_file``."""

    valid: bool
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    format: Optional[str] = None  # probed container, when the probe succeeded

    def to_dict(self) -> Dict[str, Any]:
        if self.valid:
            return {'valid': True}
        return {'valid': False, 'error': self.error}


def _invalid(error: str, kind: ErrorKind) -> ValidationResult:
    logger.info(f"Input rejected ({kind.value}): {error}")
    return ValidationResult(valid=False, error=error, error_kind=kind)


def _probe_format(path: Path) -> Optional[str]:
    """Identify the container from the file header; None if undecodable.

    Raises:
        Image.DecompressionBombError: If the header declares more pixels
            than Pillow's decompression-bomb limit allows
    """
    try:
        with Image.open(path) as img:
            return canonical_format(img.format)
    except Image.DecompressionBombError:
        raise
    except (UnidentifiedImageError, OSError, ValueError, RuntimeError, SyntaxError) as e:
        # Plugins (pillow-heif among them) signal bad headers in different ways
        logger.debug(f"Header probe failed for {path}: {e}")
        return None


def validate_input_file(
    path: Union[str, Path],
    config: Optional[RestorationConfig] = None
) -> ValidationResult:
    """Check that a candidate source file can be processed.

    Checks, in order: the path is a readable regular file, its size is under
    the configured ceiling, and its decoded format is supported. When the
    header cannot be decoded at all the file extension is used instead.

    Args:
        path: Candidate source file
        config: Restoration config. If None, uses defaults.

    Returns:
        ValidationResult; never raises
    """
    config = config or DEFAULT_CONFIG
    path_obj = Path(path)

    if not path_obj.is_file() or not os.access(path_obj, os.R_OK):
        return _invalid('File does not exist', ErrorKind.NOT_FOUND)

    size = path_obj.stat().st_size
    if size > config.max_file_size_bytes:
        max_mb = config.max_file_size_bytes / MIB
        return _invalid(f"File too large. Maximum size: {max_mb:g}MB", ErrorKind.TOO_LARGE)

    try:
        format_name = _probe_format(path_obj)
    except Image.DecompressionBombError as e:
        return _invalid(f"Image dimensions too large: {e}", ErrorKind.TOO_LARGE)

    if format_name is None:
        ext = path_obj.suffix.lower()
        if ext not in SUPPORTED_EXTENSIONS:
            return _invalid('Unsupported format. Unable to process file.', ErrorKind.UNREADABLE)
        logger.debug(f"Accepting {path_obj.name} on extension {ext}")
        return ValidationResult(valid=True)

    if format_name not in SUPPORTED_DECODE_FORMATS:
        return _invalid(
            f"Unsupported format: {format_name}. "
            f"Supported formats: {', '.join(SUPPORTED_DECODE_FORMATS)}",
            ErrorKind.UNSUPPORTED_FORMAT,
        )

    return ValidationResult(valid=True, format=format_name)
