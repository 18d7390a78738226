"""File helpers for writing into the output root."""

from __future__ import annotations

import hashlib
import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable

# (source, target) -> bytes written
Copier = Callable[[Path, Path], int]


def copy_atomic(source: Path, target: Path) -> int:
    """
    Copy the bytes of `source` over `target` atomically.

    Writes to a temp file in the target directory, then renames it into
    place, so readers see either the old content or the new content.

    Returns:
        Number of bytes written
    """
    fd, temp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as dst, source.open("rb") as src:
            shutil.copyfileobj(src, dst)
        shutil.copymode(source, temp_path)
        os.replace(temp_path, target)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
    return target.stat().st_size


def compute_file_hash(path: Path) -> str:
    """Compute SHA-256 hash of file contents (first 16 hex chars)."""
    digest = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1 << 16), b""):
            digest.update(chunk)
    return digest.hexdigest()[:16]
