"""
Error taxonomy for reconciliation passes and configuration.

Fatal conditions are raised and abort the current pass. Delete failures are
not raised; they are collected as DeleteFailure records on the pass result.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .reconciler import ReconcileResult


class ClassweaveError(Exception):
    """Base class for all classweave errors."""


class ConfigError(ClassweaveError):
    """Configuration file is missing, malformed, or inconsistent."""


class ReconcileError(ClassweaveError):
    """Base class for failures that abort a reconciliation pass."""

    # What the pass applied before failing; set by the reconciler
    result: ReconcileResult | None = None


class PathEscapeError(ReconcileError):
    """A relative path resolved outside the output root."""

    def __init__(self, relative_path: str, output_root: Path):
        self.relative_path = relative_path
        self.output_root = output_root
        super().__init__(f"Path {relative_path!r} escapes output root {output_root}")


class DirectoryCreationError(ReconcileError):
    """The parent directory chain of a target could not be created."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Failed to create target directory: {path}")


class CopyError(ReconcileError):
    """Copying a source file to its target failed."""

    def __init__(self, source: Path, target: Path):
        self.source = source
        self.target = target
        super().__init__(f"Failed to copy {source} to {target}")


class UnclassifiableChangeError(ReconcileError):
    """A change carries a kind/entry-type combination with no defined handling."""


@dataclass(frozen=True)
class DeleteFailure:
    """A deletion that failed for a reason other than the file being absent."""

    relative_path: str
    target: Path
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {
            "relative_path": self.relative_path,
            "target": str(self.target),
            "reason": self.reason,
        }
