"""Tunable constants for the restoration pipeline."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

MIB = 1024 * 1024


@dataclass(frozen=True)
class RestorationConfig:
    """All tunable parameters in one place."""

    # Input validation
    max_file_size_bytes: int = 100 * MIB

    # Upscaling
    max_width: int = 8000
    max_height: int = 8000
    default_kernel: str = "lanczos"

    # Encoding
    output_quality: int = 95
    png_compression: int = 6
    webp_method: int = 6
    avif_speed: int = 6

    # Thumbnails
    thumbnail_size: int = 300
    thumbnail_quality: int = 85

    # Two-stage restore
    intermediate_suffix: str = "_temp"

    @classmethod
    def from_env(cls) -> "RestorationConfig":
        """Build a config, overriding defaults from environment variables.

        Reads IMAGE_RESTORE_MAX_FILE_SIZE_MB, IMAGE_RESTORE_MAX_WIDTH,
        IMAGE_RESTORE_MAX_HEIGHT and IMAGE_RESTORE_KERNEL. Unparseable values
        are ignored with a warning.
        """
        defaults = cls()

        max_mb = _env_number("IMAGE_RESTORE_MAX_FILE_SIZE_MB")
        max_width = _env_number("IMAGE_RESTORE_MAX_WIDTH")
        max_height = _env_number("IMAGE_RESTORE_MAX_HEIGHT")
        kernel = os.getenv("IMAGE_RESTORE_KERNEL", "").strip().lower()

        return cls(
            max_file_size_bytes=int(max_mb * MIB) if max_mb else defaults.max_file_size_bytes,
            max_width=int(max_width) if max_width else defaults.max_width,
            max_height=int(max_height) if max_height else defaults.max_height,
            default_kernel=kernel or defaults.default_kernel,
        )


def _env_number(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not a number")
        return None
    if value <= 0:
        logger.warning(f"Ignoring {name}={raw!r}: must be positive")
        return None
    return value


DEFAULT_CONFIG = RestorationConfig()
