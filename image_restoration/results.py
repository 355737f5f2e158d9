"""Result records and error types shared by every restoration operation.

Public operations never raise. Internally they raise ``RestorationError``
subclasses, and ``guarded_operation`` turns any exception into a failed
``OperationResult`` at the public boundary.
"""

import functools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Failure categories reported to callers."""

    NOT_FOUND = "not_found"
    TOO_LARGE = "too_large"
    UNSUPPORTED_FORMAT = "unsupported_format"
    UNSUPPORTED_TARGET_FORMAT = "unsupported_target_format"
    UNREADABLE = "unreadable"
    PROCESSING_FAILURE = "processing_failure"


class RestorationError(Exception):
    """Base class for errors raised inside the restoration core."""

    kind: ErrorKind = ErrorKind.PROCESSING_FAILURE


class InputNotFoundError(RestorationError):
    kind = ErrorKind.NOT_FOUND


class FileTooLargeError(RestorationError):
    kind = ErrorKind.TOO_LARGE


class UnsupportedFormatError(RestorationError):
    kind = ErrorKind.UNSUPPORTED_FORMAT


class UnsupportedTargetFormatError(RestorationError):
    kind = ErrorKind.UNSUPPORTED_TARGET_FORMAT


class UnreadableFileError(RestorationError):
    kind = ErrorKind.UNREADABLE


class ProcessingError(RestorationError):
    kind = ErrorKind.PROCESSING_FAILURE


def format_size(width: int, height: int) -> str:
    """Format dimensions as ``"WxH"``."""
    return f"{width}x{height}"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of one operation: either a success or a failure, never both.

    Build instances with ``OperationResult.ok`` or ``OperationResult.fail``.
    """

    success: bool
    message: Optional[str] = None
    output_path: Optional[str] = None
    original_size: Optional[str] = None  # "WxH"
    new_size: Optional[str] = None  # "WxH"
    scale_factor: Optional[str] = None  # e.g. "1.5x"
    steps: Tuple[str, ...] = field(default_factory=tuple)
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def ok(
        cls,
        message: str,
        output_path: str,
        original_size: Optional[str] = None,
        new_size: Optional[str] = None,
        scale_factor: Optional[str] = None,
        steps: Tuple[str, ...] = (),
    ) -> "OperationResult":
        return cls(
            success=True,
            message=message,
            output_path=str(output_path),
            original_size=original_size,
            new_size=new_size,
            scale_factor=scale_factor,
            steps=tuple(steps),
        )

    @classmethod
    def fail(
        cls,
        error: str,
        kind: ErrorKind = ErrorKind.PROCESSING_FAILURE
    ) -> "OperationResult":
        return cls(success=False, error=error, error_kind=kind)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict for the web/CLI layers."""
        if not self.success:
            return {
                'success': False,
                'error': self.error,
                'error_kind': self.error_kind.value if self.error_kind else None,
            }

        record: Dict[str, Any] = {
            'success': True,
            'message': self.message,
            'output_path': self.output_path,
            'steps': list(self.steps),
        }
        for key in ('original_size', 'new_size', 'scale_factor'):
            value = getattr(self, key)
            if value is not None:
                record[key] = value
        return record


def guarded_operation(name: str) -> Callable:
    """Wrap a public operation so every exception becomes a failed result.

    Args:
        name: Operation name used in log messages

    Returns:
        Decorator for functions returning ``OperationResult``
    """
    def decorator(func: Callable[..., OperationResult]) -> Callable[..., OperationResult]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> OperationResult:
            try:
                return func(*args, **kwargs)
            except RestorationError as e:
                logger.error(f"{name} failed ({e.kind.value}): {e}")
                return OperationResult.fail(str(e), e.kind)
            except Exception as e:
                logger.error(f"{name} failed: {e}", exc_info=logger.isEnabledFor(logging.DEBUG))
                return OperationResult.fail(str(e) or type(e).__name__)

        return wrapper

    return decorator
