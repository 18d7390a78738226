"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Callable

import pytest

from classweave.config import ReconcileConfig


def _write_file(path: Path, content: bytes = b"\xca\xfe\xba\xbe") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


@pytest.fixture
def write_file() -> Callable[..., Path]:
    """Create a file (and its parents) with the given bytes."""
    return _write_file


@pytest.fixture
def java_root(tmp_path: Path) -> Path:
    """Output directory of the first upstream compiler."""
    root = tmp_path / "classes" / "java"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def kotlin_root(tmp_path: Path) -> Path:
    """Output directory of the second upstream compiler."""
    root = tmp_path / "classes" / "kotlin"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    """Merged output directory."""
    root = tmp_path / "merged"
    root.mkdir()
    return root


@pytest.fixture
def reconcile_config(tmp_path: Path, java_root: Path, kotlin_root: Path, output_root: Path) -> ReconcileConfig:
    """Reconcile settings over both compiler outputs."""
    return ReconcileConfig(
        inputs=(java_root, kotlin_root),
        output_dir=output_root,
        state_dir=tmp_path / ".classweave",
    )
