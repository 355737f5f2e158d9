"""Restoration orchestrator: upscale-then-enhance, operation dispatch and batches."""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from image_restoration.config import DEFAULT_CONFIG, RestorationConfig
from image_restoration.operations.color_balance import adjust_color_balance
from image_restoration.operations.convert import convert_format, create_thumbnail
from image_restoration.operations.denoise import remove_noise
from image_restoration.operations.enhance import enhance_image, enhance_with_params
from image_restoration.operations.upscale import upscale_image, upscale_with_params
from image_restoration.preprocessing.params import (
    RestorationPlan,
    canonical_kernel,
    normalize_restore_params,
)
from image_restoration.preprocessing.validator import validate_input_file
from image_restoration.results import (
    ErrorKind,
    OperationResult,
    guarded_operation,
)
from image_restoration.utils.paths import create_intermediate, generate_output_path

logger = logging.getLogger(__name__)

Transformer = Callable[..., OperationResult]


class Operation(str, Enum):
    """Operations the pipeline can dispatch."""

    RESTORE = "restore"
    ENHANCE = "enhance"
    UPSCALE = "upscale"
    DENOISE = "denoise"
    COLOR_BALANCE = "color_balance"
    CONVERT = "convert"
    THUMBNAIL = "thumbnail"

    @classmethod
    def parse(cls, name: Union[str, "Operation"]) -> "Operation":
        """Resolve an operation from its value or a legacy alias.

        Raises:
            ValueError: If the name matches no operation
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower().replace('-', '_')
        key = _OPERATION_ALIASES.get(key, key)
        return cls(key)


_OPERATION_ALIASES = {
    'color': 'color_balance',
    'colour': 'color_balance',
    'format': 'convert',
    'noise': 'denoise',
}


@dataclass(frozen=True)
class BatchEntry:
    """Outcome for one input of a batch run."""

    input_path: str
    output_path: Optional[str]
    result: OperationResult


class RestorationPipeline:
    """Runs restoration and single operations with one shared config."""

    def __init__(self, config: Optional[RestorationConfig] = None) -> None:
        """Initialize pipeline with configuration.

        Args:
            config: Restoration config. If None, uses defaults.
        """
        self.config = config or DEFAULT_CONFIG
        self._registry: Dict[Operation, Transformer] = {
            Operation.RESTORE: restore_image,
            Operation.ENHANCE: enhance_image,
            Operation.UPSCALE: upscale_image,
            Operation.DENOISE: remove_noise,
            Operation.COLOR_BALANCE: adjust_color_balance,
            Operation.CONVERT: convert_format,
            Operation.THUMBNAIL: create_thumbnail,
        }

    def restore(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        options: Optional[Mapping[str, Any]] = None
    ) -> OperationResult:
        """Validate, upscale when requested, then enhance.

        See ``restore_image``.
        """
        return restore_image(input_path, output_path, options, self.config)

    def run(
        self,
        operation: Union[str, Operation],
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        options: Optional[Mapping[str, Any]] = None
    ) -> OperationResult:
        """Dispatch one operation by enum member or name.

        Returns:
            The operation's result, or a failure for an unknown operation
        """
        try:
            op = Operation.parse(operation)
        except ValueError:
            logger.error(f"Unknown operation: {operation}")
            return OperationResult.fail(f"Unknown operation: {operation}")

        return self._registry[op](input_path, output_path, options, self.config)

    def process_batch(
        self,
        input_paths: Sequence[Union[str, Path]],
        output_dir: Union[str, Path],
        operation: Union[str, Operation] = Operation.RESTORE,
        options: Optional[Mapping[str, Any]] = None
    ) -> List[BatchEntry]:
        """Apply one operation to many inputs, continuing past failures.

        Outputs are named ``<stem>_<operation><ext>`` inside ``output_dir``.

        Args:
            input_paths: Source images
            output_dir: Directory for outputs; created if missing
            operation: Operation to run on every input
            options: Raw options passed to every call

        Returns:
            One BatchEntry per input, in input order
        """
        try:
            op = Operation.parse(operation)
        except ValueError:
            logger.error(f"Unknown operation: {operation}")
            failure = OperationResult.fail(f"Unknown operation: {operation}")
            return [BatchEntry(str(p), None, failure) for p in input_paths]

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        entries: List[BatchEntry] = []
        start_time = time.time()

        for i, path in enumerate(input_paths, 1):
            logger.info(f"Processing {i}/{len(input_paths)}: {path}")

            validation = validate_input_file(path, self.config)
            if not validation.valid:
                failure = OperationResult.fail(validation.error, validation.error_kind)
                entries.append(BatchEntry(str(path), None, failure))
                continue

            output_path = str(output_dir / Path(generate_output_path(path, f"_{op.value}")).name)
            result = self.run(op, path, output_path, options)
            entries.append(BatchEntry(str(path), output_path, result))

        succeeded = sum(1 for entry in entries if entry.result.success)
        logger.info(
            f"Batch {op.value}: {succeeded}/{len(entries)} succeeded "
            f"in {time.time() - start_time:.3f}s"
        )

        return entries


def _remove_intermediate(path: str) -> None:
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not delete intermediate file {path}: {e}")


@guarded_operation("restore")
def restore_image(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    options: Optional[Mapping[str, Any]] = None,
    config: Optional[RestorationConfig] = None
) -> OperationResult:
    """Restore an image: optional upscale followed by enhancement.

    When the requested scale is above 1 the image is first upscaled into an
    intermediate file next to the output, then enhanced into the output. The
    intermediate file is removed on every exit path. At scale 1 or below only
    the enhancement runs.

    Args:
        input_path: Source image
        output_path: Destination file
        options: Raw options; missing fields take the restore defaults
            (brightness 1.1, contrast 1.2, saturation 1.1, gamma 1.1,
            scale 1.5, sharpen and denoise on)
        config: Restoration config. If None, uses defaults.

    Returns:
        OperationResult; never raises
    """
    config = config or DEFAULT_CONFIG

    validation = validate_input_file(input_path, config)
    if not validation.valid:
        return OperationResult.fail(validation.error, validation.error_kind or ErrorKind.UNREADABLE)

    params = normalize_restore_params(options)
    enhance_params = params.enhance_params()

    if params.plan is RestorationPlan.ENHANCE_ONLY:
        logger.info(f"Restoring {input_path}: enhance only")
        return enhance_with_params(input_path, output_path, enhance_params, config)

    logger.info(f"Restoring {input_path}: upscale {params.scale:g}x then enhance")

    upscale_params = params.upscale_params(
        max_width=config.max_width,
        max_height=config.max_height,
        kernel=canonical_kernel(config.default_kernel),
    )
    temp_path = create_intermediate(output_path, config.intermediate_suffix)

    try:
        upscale_result = upscale_with_params(input_path, temp_path, upscale_params, config)
        enhance_result = enhance_with_params(temp_path, output_path, enhance_params, config)
    finally:
        _remove_intermediate(temp_path)

    return OperationResult.ok(
        message=f"Restored and upscaled image ({upscale_result.scale_factor}) saved to {output_path}",
        output_path=str(output_path),
        original_size=upscale_result.original_size,
        new_size=upscale_result.new_size,
        scale_factor=upscale_result.scale_factor,
        steps=upscale_result.steps + enhance_result.steps,
    )
