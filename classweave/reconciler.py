"""
Incremental reconciliation of the merged output directory.

Applies classified change records to the output root, one record at a time,
touching only the paths named by the records. Records are processed in
order; there is no rescan of the output tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from .changes import ChangeKind, EntryType, FileChangeRecord
from .errors import (
    CopyError,
    DeleteFailure,
    DirectoryCreationError,
    PathEscapeError,
    ReconcileError,
    UnclassifiableChangeError,
)
from .filesystem import Copier, copy_atomic

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation pass."""

    copied: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)  # Removals with no target present
    delete_failures: list[DeleteFailure] = field(default_factory=list)
    aborted_at: FileChangeRecord | None = None
    bytes_written: int = 0
    bytes_erased: int = 0

    @property
    def complete(self) -> bool:
        """True if every record was processed."""
        return self.aborted_at is None

    @property
    def success(self) -> bool:
        """True if the pass completed and every deletion succeeded."""
        return self.complete and not self.delete_failures

    @property
    def applied(self) -> int:
        return len(self.copied) + len(self.deleted) + len(self.missing)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "copied": list(self.copied),
            "deleted": list(self.deleted),
            "missing": list(self.missing),
            "delete_failures": [f.to_dict() for f in self.delete_failures],
            "aborted_at": self.aborted_at.to_dict() if self.aborted_at else None,
            "bytes_written": self.bytes_written,
            "bytes_erased": self.bytes_erased,
        }


class OutputReconciler:
    """
    Mirrors watched compiler outputs into a single output root.

    Key behaviors:
    - A DIRECTORY record ends the pass; later records are left unapplied
    - Removals are idempotent; other delete errors are collected, not raised
    - Copies replace the target atomically
    - Every target must resolve inside the output root
    """

    def __init__(self, output_root: Path, copier: Copier = copy_atomic):
        self.output_root = output_root
        self.copier = copier

    def resolve_target(self, relative_path: str) -> Path:
        """Map a relative path to its target, refusing anything outside the root."""
        root = self.output_root.resolve()
        if Path(relative_path).is_absolute():
            raise PathEscapeError(relative_path, self.output_root)
        target = (root / relative_path).resolve()
        if target == root or not target.is_relative_to(root):
            raise PathEscapeError(relative_path, self.output_root)
        return target

    def reconcile(self, records: Iterable[FileChangeRecord]) -> ReconcileResult:
        """
        Apply change records to the output root.

        Raises:
            PathEscapeError: a record resolves outside the output root
            DirectoryCreationError: a target's parent chain could not be created
            CopyError: a source could not be copied to its target
            UnclassifiableChangeError: a record has no defined handling

        A raised error carries the partial result of the pass as `result`.
        """
        result = ReconcileResult()
        try:
            self._apply(records, result)
        except ReconcileError as e:
            e.result = result
            raise
        return result

    def _apply(self, records: Iterable[FileChangeRecord], result: ReconcileResult) -> None:
        for record in records:
            if record.entry_type == EntryType.DIRECTORY:
                # Stops the whole pass, not just this record
                logger.warning(
                    "Directory change at %s ended the reconciliation pass; remaining changes were not applied",
                    record.relative_path,
                )
                result.aborted_at = record
                return

            if record.entry_type != EntryType.FILE:
                raise UnclassifiableChangeError(
                    f"No handling for entry type {record.entry_type!r} at {record.relative_path}"
                )

            target = self.resolve_target(record.relative_path)

            if record.kind == ChangeKind.REMOVED:
                self._remove(record, target, result)
            elif record.kind in (ChangeKind.ADDED, ChangeKind.MODIFIED):
                self._copy(record, target, result)
            else:
                raise UnclassifiableChangeError(
                    f"No handling for change kind {record.kind!r} at {record.relative_path}"
                )

    def _remove(self, record: FileChangeRecord, target: Path, result: ReconcileResult) -> None:
        try:
            size = target.stat().st_size
            target.unlink()
        except FileNotFoundError:
            result.missing.append(record.relative_path)
            return
        except OSError as e:
            failure = DeleteFailure(record.relative_path, target, str(e))
            logger.error("Failed to delete %s: %s", target, e)
            result.delete_failures.append(failure)
            return

        logger.debug("Deleted file %s", target)
        result.deleted.append(record.relative_path)
        result.bytes_erased += size

    def _copy(self, record: FileChangeRecord, target: Path, result: ReconcileResult) -> None:
        if record.source is None:
            raise UnclassifiableChangeError(f"{record.kind.value} change for {record.relative_path} has no source")
        parent = target.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreationError(parent) from e

        try:
            written = self.copier(record.source, target)
        except OSError as e:
            raise CopyError(record.source, target) from e

        logger.debug("Copied %s to %s", record.source, target)
        result.copied.append(record.relative_path)
        result.bytes_written += written
