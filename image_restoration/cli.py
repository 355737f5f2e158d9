"""Command-line interface for image restoration."""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from dotenv import load_dotenv

from image_restoration import __version__
from image_restoration.config import RestorationConfig
from image_restoration.pipeline import Operation, RestorationPipeline
from image_restoration.preprocessing.loader import get_image_info
from image_restoration.preprocessing.params import get_optimal_settings
from image_restoration.results import OperationResult
from image_restoration.utils.paths import generate_output_path

logger = logging.getLogger(__name__)

IMAGE_PATTERNS = ['*.jpg', '*.jpeg', '*.png', '*.webp', '*.tif', '*.tiff', '*.gif', '*.avif', '*.heic', '*.heif']


def _pipeline(ctx: click.Context) -> RestorationPipeline:
    return ctx.obj['pipeline']


def _report(result: OperationResult) -> None:
    """Log the result and exit non-zero on failure."""
    if not result.success:
        logger.error(f"Error: {result.error}")
        sys.exit(1)

    logger.info(result.message)
    if result.original_size and result.new_size:
        logger.info(f"Size: {result.original_size} -> {result.new_size}")
    if result.steps:
        logger.debug(f"Steps: {', '.join(result.steps)}")


def _run(
    ctx: click.Context,
    operation: Operation,
    input_path: str,
    output: Optional[str],
    suffix: str,
    options: Dict[str, Any],
    extension: Optional[str] = None
) -> None:
    output_path = output or generate_output_path(input_path, suffix, extension)
    logger.info(f"{operation.value}: {input_path} -> {output_path}")
    _report(_pipeline(ctx).run(operation, input_path, output_path, options))


output_option = click.option('--output', '-o', type=click.Path(), help='Output file path (optional)')
input_argument = click.argument('input_path', type=click.Path(exists=True, dir_okay=False))


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Image restoration - enhance, upscale, denoise and colour-correct images."""
    load_dotenv()

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    ctx.ensure_object(dict)
    ctx.obj['pipeline'] = RestorationPipeline(RestorationConfig.from_env())


@main.command()
@input_argument
@output_option
@click.option('--scale', '-s', type=float, default=1.5, show_default=True, help='Upscale factor (<= 1 skips upscaling)')
@click.option('--brightness', '-b', type=float, default=1.1, show_default=True)
@click.option('--contrast', '-c', type=float, default=1.2, show_default=True)
@click.option('--saturation', type=float, default=1.1, show_default=True)
@click.option('--gamma', '-g', type=float, default=1.1, show_default=True)
@click.option('--sharpen/--no-sharpen', default=True, help='Apply sharpening')
@click.option('--denoise/--no-denoise', default=True, help='Apply noise reduction')
@click.pass_context
def restore(
    ctx: click.Context,
    input_path: str,
    output: Optional[str],
    scale: float,
    brightness: float,
    contrast: float,
    saturation: float,
    gamma: float,
    sharpen: bool,
    denoise: bool
) -> None:
    """Restore an image with automatic enhancement and upscaling.

    INPUT_PATH: Image file to restore
    """
    options = {
        'scale': scale,
        'brightness': brightness,
        'contrast': contrast,
        'saturation': saturation,
        'gamma': gamma,
        'sharpen': sharpen,
        'denoise': denoise,
    }
    _run(ctx, Operation.RESTORE, input_path, output, '_restored', options)


@main.command()
@input_argument
@output_option
@click.option('--brightness', '-b', type=float, default=1.0, show_default=True)
@click.option('--contrast', '-c', type=float, default=1.0, show_default=True)
@click.option('--saturation', '-s', type=float, default=1.0, show_default=True)
@click.option('--gamma', '-g', type=float, default=1.0, show_default=True, help='Gamma correction (1.0-3.0)')
@click.option('--sharpen', is_flag=True, help='Apply sharpening filter')
@click.option('--denoise', is_flag=True, help='Apply noise reduction')
@click.pass_context
def enhance(
    ctx: click.Context,
    input_path: str,
    output: Optional[str],
    brightness: float,
    contrast: float,
    saturation: float,
    gamma: float,
    sharpen: bool,
    denoise: bool
) -> None:
    """Enhance image quality without upscaling."""
    options = {
        'brightness': brightness,
        'contrast': contrast,
        'saturation': saturation,
        'gamma': gamma,
        'sharpen': sharpen,
        'denoise': denoise,
    }
    _run(ctx, Operation.ENHANCE, input_path, output, '_enhanced', options)


@main.command()
@input_argument
@output_option
@click.option('--scale', '-s', type=float, default=2.0, show_default=True, help='Upscale factor (1.1-8.0)')
@click.option(
    '--kernel',
    '-k',
    type=click.Choice(['lanczos', 'cubic', 'linear', 'nearest', 'area']),
    default=None,
    help='Resampling kernel (default from config)'
)
@click.option('--max-width', type=int, default=None, help='Maximum output width')
@click.option('--max-height', type=int, default=None, help='Maximum output height')
@click.option('--no-touchup', is_flag=True, help='Skip the post-upscale sharpen and saturation nudge')
@click.pass_context
def upscale(
    ctx: click.Context,
    input_path: str,
    output: Optional[str],
    scale: float,
    kernel: Optional[str],
    max_width: Optional[int],
    max_height: Optional[int],
    no_touchup: bool
) -> None:
    """Upscale image resolution."""
    options = {
        'scale': scale,
        'kernel': kernel,
        'max_width': max_width,
        'max_height': max_height,
        'enhance_after_upscale': not no_touchup,
    }
    _run(ctx, Operation.UPSCALE, input_path, output, '_upscaled', options)


@main.command()
@input_argument
@output_option
@click.option('--strength', '-s', type=int, default=3, show_default=True, help='Noise reduction strength (1-10)')
@click.pass_context
def denoise(ctx: click.Context, input_path: str, output: Optional[str], strength: int) -> None:
    """Remove noise from an image."""
    _run(ctx, Operation.DENOISE, input_path, output, '_denoised', {'strength': strength})


@main.command()
@input_argument
@output_option
@click.option('--temperature', '-t', type=float, default=0, help='Colour temperature (negative cools, positive warms)')
@click.option('--vibrance', type=float, default=0, help='Vibrance (-100 to 100)')
@click.option('--highlights', type=float, default=0, help='Highlights (-100 to 100)')
@click.option('--shadows', type=float, default=0, help='Shadows (-100 to 100)')
@click.pass_context
def color(
    ctx: click.Context,
    input_path: str,
    output: Optional[str],
    temperature: float,
    vibrance: float,
    highlights: float,
    shadows: float
) -> None:
    """Adjust colour balance and temperature."""
    options = {
        'temperature': temperature,
        'vibrance': vibrance,
        'highlights': highlights,
        'shadows': shadows,
    }
    _run(ctx, Operation.COLOR_BALANCE, input_path, output, '_color_adjusted', options)


@main.command()
@input_argument
@output_option
@click.option('--format', '-f', 'target_format', required=True, help='Target format: jpeg, png, webp or avif')
@click.option('--quality', '-q', type=int, default=95, show_default=True)
@click.pass_context
def convert(
    ctx: click.Context,
    input_path: str,
    output: Optional[str],
    target_format: str,
    quality: int
) -> None:
    """Convert an image to another container format."""
    extension = 'jpg' if target_format.lower() in ('jpeg', 'jpg') else target_format.lower()
    options = {'target_format': target_format, 'quality': quality}
    _run(ctx, Operation.CONVERT, input_path, output, '_converted', options, extension=extension)


@main.command()
@input_argument
@output_option
@click.option('--size', type=int, default=None, help='Bounding box edge in pixels (default from config)')
@click.pass_context
def thumbnail(ctx: click.Context, input_path: str, output: Optional[str], size: Optional[int]) -> None:
    """Create a JPEG thumbnail."""
    _run(ctx, Operation.THUMBNAIL, input_path, output, '_thumb', {'size': size}, extension='jpg')


@main.command()
@input_argument
def info(input_path: str) -> None:
    """Show image dimensions, format and size."""
    result = get_image_info(input_path)
    if not result.success:
        logger.error(f"Error: {result.error}")
        sys.exit(1)

    details = result.info
    click.echo(f"Size: {details.width}x{details.height}")
    click.echo(f"Format: {details.format}")
    click.echo(f"Channels: {details.channels} (alpha: {'yes' if details.has_alpha else 'no'})")
    click.echo(f"Colorspace: {details.colorspace}")
    click.echo(f"File size: {details.file_size_mb}MB")


@main.command()
@click.argument('width', type=int)
@click.argument('height', type=int)
@click.option(
    '--use-case',
    type=click.Choice(['general', 'print', 'web']),
    default='general',
    show_default=True
)
def presets(width: int, height: int, use_case: str) -> None:
    """Suggest restore settings for an image size."""
    preset = get_optimal_settings(width, height, use_case)
    for key, value in preset.to_options().items():
        click.echo(f"{key}: {value}")


@main.command()
@click.argument('input_dir', type=click.Path(exists=True, file_okay=False))
@click.option(
    '--operation',
    '-p',
    type=click.Choice([op.value for op in Operation]),
    default=Operation.RESTORE.value,
    show_default=True
)
@click.option('--output', '-o', 'output_dir', type=click.Path(), default='./output', show_default=True)
@click.option('--filter', 'filter_pattern', type=str, help='Glob pattern to filter files (e.g. "*.png")')
@click.pass_context
def batch(
    ctx: click.Context,
    input_dir: str,
    operation: str,
    output_dir: str,
    filter_pattern: Optional[str]
) -> None:
    """Apply one operation to every image in a directory.

    Uses each operation's default options.
    """
    directory = Path(input_dir)
    input_files: List[Path] = []

    if filter_pattern:
        input_files.extend(directory.glob(filter_pattern))
    else:
        for pattern in IMAGE_PATTERNS:
            input_files.extend(directory.glob(pattern))
            input_files.extend(directory.glob(pattern.upper()))

    input_files = sorted(set(input_files))
    if not input_files:
        logger.error(f"No input files found in {directory}")
        sys.exit(1)

    entries = _pipeline(ctx).process_batch([str(p) for p in input_files], output_dir, operation)

    failed = 0
    for entry in entries:
        if entry.result.success:
            logger.info(f"OK   {Path(entry.input_path).name} -> {entry.output_path}")
        else:
            failed += 1
            logger.error(f"FAIL {Path(entry.input_path).name}: {entry.result.error}")

    logger.info(f"COMPLETE: {len(entries) - failed}/{len(entries)} file(s) succeeded")
    logger.info(f"Output directory: {Path(output_dir).absolute()}")

    if failed:
        sys.exit(1)


if __name__ == '__main__':
    main()
