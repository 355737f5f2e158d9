"""Output and intermediate path naming."""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union


def generate_output_path(
    input_path: Union[str, Path],
    suffix: str = "_restored",
    extension: Optional[str] = None
) -> str:
    """Sibling path with ``suffix`` appended to the stem.

    ``photos/cat.jpg`` with suffix ``_restored`` becomes
    ``photos/cat_restored.jpg``. The original extension is kept unless
    ``extension`` is given (with or without the leading dot).
    """
    path = Path(input_path)
    ext = path.suffix if extension is None else '.' + extension.lstrip('.')
    return str(path.with_name(f"{path.stem}{suffix}{ext}"))


def create_intermediate(output_path: Union[str, Path], suffix: str = "_temp") -> str:
    """Create an empty, uniquely named file for the first stage of a restore.

    The file sits next to ``output_path`` as ``<stem><suffix>_<random><ext>``.
    It is created atomically, so it never names an existing file such as the
    source or the output. The caller owns it and must delete it.
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, name = tempfile.mkstemp(suffix=path.suffix, prefix=f"{path.stem}{suffix}_", dir=path.parent)
    os.close(fd)
    return name
