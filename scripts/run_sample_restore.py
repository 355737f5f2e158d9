#!/usr/bin/env python3
"""Run every operation on a synthetic image to verify integration."""

import sys
import tempfile
from pathlib import Path

import numpy as np
from PIL import Image

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from image_restoration import Operation, RestorationPipeline, get_image_info


def create_synthetic_test_image() -> str:
    """Create a small, dim, noisy test image."""
    rng = np.random.default_rng(0)
    img_array = np.ones((300, 400, 3), dtype=np.float32) * 90  # Dim grey background

    # Add some photo content (coloured squares)
    img_array[60:140, 60:140] = [70, 100, 140]
    img_array[60:140, 260:340] = [140, 70, 70]
    img_array[180:260, 160:240] = [70, 140, 70]

    # Sensor-style noise
    img_array += rng.normal(0, 12, size=img_array.shape)
    img_pil = Image.fromarray(np.clip(img_array, 0, 255).astype(np.uint8))

    with tempfile.NamedTemporaryFile(suffix='.jpg', delete=False) as f:
        img_pil.save(f.name, quality=90)
        return f.name


def main():
    """Run each operation on the synthetic image."""
    print("Creating synthetic test image...")
    test_image_path = create_synthetic_test_image()
    print(f"Created: {test_image_path}")

    output_dir = Path(__file__).parent.parent / "output" / "synthetic_test"
    output_dir.mkdir(parents=True, exist_ok=True)
    print(f"  Output: {output_dir}")

    pipeline = RestorationPipeline()
    runs = [
        (Operation.RESTORE, "restored.jpg", {'scale': 2}),
        (Operation.ENHANCE, "enhanced.jpg", {'brightness': 1.2, 'gamma': 1.3, 'sharpen': True}),
        (Operation.UPSCALE, "upscaled.jpg", {'scale': 3, 'kernel': 'cubic'}),
        (Operation.DENOISE, "denoised.jpg", {'strength': 7}),
        (Operation.COLOR_BALANCE, "warm.png", {'temperature': 3, 'vibrance': 15}),
        (Operation.CONVERT, "converted.webp", {'target_format': 'webp', 'quality': 80}),
        (Operation.THUMBNAIL, "thumb.jpg", {'size': 120}),
    ]

    failed = 0
    try:
        print("\n" + "=" * 80)
        print("OPERATION RESULTS")
        print("=" * 80)

        for operation, name, options in runs:
            output_path = output_dir / name
            result = pipeline.run(operation, test_image_path, output_path, options)

            if not result.success:
                failed += 1
                print(f"✗ {operation.value}: {result.error}")
                continue

            info = get_image_info(output_path).info
            print(f"✓ {operation.value}: {result.message}")
            print(f"    {info.width}x{info.height} {info.format}, {info.file_size_mb}MB")
            if result.steps:
                print(f"    steps: {', '.join(result.steps)}")

        print("\n" + "=" * 80)

    finally:
        # Clean up temp file
        Path(test_image_path).unlink(missing_ok=True)

    if failed:
        print(f"\n✗ {failed} operation(s) failed")
        sys.exit(1)

    print("\n✓ All operations completed successfully!")


if __name__ == "__main__":
    main()
