"""
Change classification for watched compiler output roots.

This module provides:
- ChangeKind / EntryType enums
- ChangeObservation: one raw observation from a change feed
- FileChangeRecord: the normalized record consumed by the reconciler
- Classification and per-path coalescing of records

Nothing here touches the filesystem.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator

from .errors import UnclassifiableChangeError


class ChangeKind(str, Enum):
    """Types of file changes."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


class EntryType(str, Enum):
    """What kind of filesystem entry changed."""

    FILE = "file"
    DIRECTORY = "directory"


# Raw event type -> change kind
EVENT_KINDS: dict[str, ChangeKind] = {
    "created": ChangeKind.ADDED,
    "modified": ChangeKind.MODIFIED,
    "deleted": ChangeKind.REMOVED,
}


@dataclass(frozen=True)
class ChangeObservation:
    """A single raw change observed under a watched root."""

    root: Path
    path: Path  # Absolute, or relative to root
    event_type: str  # "created", "modified" or "deleted"
    is_directory: bool = False


@dataclass(frozen=True)
class FileChangeRecord:
    """A classified change, addressed by its path relative to the watched root."""

    relative_path: str
    kind: ChangeKind
    entry_type: EntryType = EntryType.FILE
    source: Path | None = None  # Absent for removals
    root: Path | None = None  # Watched root the change came from

    def __post_init__(self) -> None:
        if not self.relative_path or self.relative_path.startswith("/"):
            raise ValueError(f"relative_path must be a non-empty relative path: {self.relative_path!r}")
        needs_source = self.kind in (ChangeKind.ADDED, ChangeKind.MODIFIED)
        if needs_source and self.source is None:
            raise ValueError(f"{self.kind.value} change for {self.relative_path} requires a source")
        if not needs_source and self.source is not None:
            raise ValueError(f"{self.kind.value} change for {self.relative_path} must not carry a source")

    def to_dict(self) -> dict[str, str | None]:
        """Convert to dictionary for JSON serialization."""
        return {
            "relative_path": self.relative_path,
            "kind": self.kind.value,
            "entry_type": self.entry_type.value,
            "source": str(self.source) if self.source else None,
            "root": str(self.root) if self.root else None,
        }


def normalize_relative_path(path: str | Path) -> str:
    """Normalize a relative path to POSIX form without `.` segments."""
    text = str(path).replace("\\", "/")
    parts = [part for part in PurePosixPath(text).parts if part not in (".", "")]
    return "/".join(parts)


def classify_observation(observation: ChangeObservation) -> FileChangeRecord:
    """Classify one raw observation. Same observation, same record."""
    kind = EVENT_KINDS.get(observation.event_type)
    if kind is None:
        raise UnclassifiableChangeError(
            f"Unknown event type {observation.event_type!r} for {observation.path}"
        )

    path = observation.path
    if path.is_absolute():
        try:
            rel = path.relative_to(observation.root)
        except ValueError:
            raise UnclassifiableChangeError(
                f"{path} is not under watched root {observation.root}"
            ) from None
        source = path
    else:
        rel = path
        source = observation.root / path

    relative_path = normalize_relative_path(rel)
    if not relative_path:
        raise UnclassifiableChangeError(f"Change at watched root itself: {observation.root}")

    entry_type = EntryType.DIRECTORY if observation.is_directory else EntryType.FILE
    return FileChangeRecord(
        relative_path=relative_path,
        kind=kind,
        entry_type=entry_type,
        source=None if kind == ChangeKind.REMOVED else source,
        root=observation.root,
    )


def classify(observations: Iterable[ChangeObservation]) -> Iterator[FileChangeRecord]:
    """Lazily classify observations, one record per observation."""
    for observation in observations:
        yield classify_observation(observation)


def _same_root(a: FileChangeRecord, b: FileChangeRecord) -> bool:
    return a.root is None or b.root is None or a.root == b.root


def _merge(previous: FileChangeRecord, latest: FileChangeRecord) -> FileChangeRecord | None:
    """Merge two records for the same path. None means they cancel out."""
    if latest.kind == ChangeKind.REMOVED and previous.kind != ChangeKind.REMOVED:
        if not _same_root(previous, latest):
            # Removed from one root while another still provides the content
            return replace(previous, kind=ChangeKind.MODIFIED)
        if previous.kind == ChangeKind.ADDED:
            # Added then removed before being applied - nothing to do
            return None
    if previous.kind == ChangeKind.ADDED and latest.kind == ChangeKind.MODIFIED:
        return replace(latest, kind=ChangeKind.ADDED)
    if previous.kind == ChangeKind.REMOVED and latest.kind == ChangeKind.ADDED:
        return replace(latest, kind=ChangeKind.MODIFIED)
    return latest


def coalesce(records: Iterable[FileChangeRecord]) -> list[FileChangeRecord]:
    """
    Collapse records to at most one per relative path.

    Order of first appearance is kept. A path that is added and then removed
    in the same root disappears entirely; a later record for it starts a new
    entry. A removal from one root does not override pending content from
    another root.
    """
    pending: dict[str, FileChangeRecord] = {}
    for record in records:
        previous = pending.get(record.relative_path)
        if previous is None:
            pending[record.relative_path] = record
            continue
        merged = _merge(previous, record)
        if merged is None:
            del pending[record.relative_path]
        else:
            pending[record.relative_path] = merged
    return list(pending.values())


def format_record(record: FileChangeRecord) -> str:
    """Format a change record for human-readable display."""
    icon = {
        ChangeKind.ADDED: "+",
        ChangeKind.MODIFIED: "~",
        ChangeKind.REMOVED: "-",
    }.get(record.kind, "?")
    suffix = "/" if record.entry_type == EntryType.DIRECTORY else ""
    return f"{icon} {record.relative_path}{suffix}"
