"""
Content fingerprints of the watched input roots.

A snapshot records a hash for every file under each input root. Diffing the
stored snapshot against a fresh one yields the change observations for a
one-shot incremental sync.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from .changes import ChangeObservation, normalize_relative_path
from .errors import ConfigError
from .filesystem import compute_file_hash


@dataclass
class InputSnapshot:
    """Per-root file hashes and directory listings."""

    files: dict[str, dict[str, str]] = field(default_factory=dict)  # root -> rel path -> hash
    directories: dict[str, set[str]] = field(default_factory=dict)  # root -> rel paths

    def to_dict(self) -> dict:
        return {
            "version": 1,
            "files": {root: dict(sorted(entries.items())) for root, entries in self.files.items()},
            "directories": {root: sorted(dirs) for root, dirs in self.directories.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> InputSnapshot:
        return cls(
            files={root: dict(entries) for root, entries in data.get("files", {}).items()},
            directories={root: set(dirs) for root, dirs in data.get("directories", {}).items()},
        )

    def save(self, path: Path) -> None:
        """Write the snapshot as JSON, replacing any previous one."""
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(".tmp")
        temp_path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        temp_path.replace(path)

    @classmethod
    def load(cls, path: Path) -> InputSnapshot:
        """Read a snapshot; a missing file is an empty snapshot."""
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return cls.from_dict(data)
        except (json.JSONDecodeError, AttributeError, TypeError) as e:
            raise ConfigError(f"Corrupt snapshot {path}: {e}") from e


def _is_hidden(rel: Path) -> bool:
    return any(part.startswith(".") for part in rel.parts)


def take_snapshot(roots: Iterable[Path]) -> InputSnapshot:
    """Hash every non-hidden file under each root. Missing roots are empty."""
    snapshot = InputSnapshot()
    for root in roots:
        key = str(root)
        files: dict[str, str] = {}
        dirs: set[str] = set()
        if root.is_dir():
            for path in root.rglob("*"):
                rel = path.relative_to(root)
                if _is_hidden(rel):
                    continue
                rel_str = normalize_relative_path(rel)
                if path.is_dir():
                    dirs.add(rel_str)
                elif path.is_file():
                    files[rel_str] = compute_file_hash(path)
        snapshot.files[key] = files
        snapshot.directories[key] = dirs
    return snapshot


def diff_snapshots(
    old: InputSnapshot,
    new: InputSnapshot,
    include_directories: bool = False,
) -> list[ChangeObservation]:
    """
    Compute change observations between two snapshots.

    Roots are visited in the order of the new snapshot, then roots that
    only exist in the old one. Within a root, paths are sorted.
    """
    observations: list[ChangeObservation] = []
    roots = list(new.files) + [r for r in old.files if r not in new.files]

    for root_key in roots:
        root = Path(root_key)
        old_files = old.files.get(root_key, {})
        new_files = new.files.get(root_key, {})

        if include_directories:
            old_dirs = old.directories.get(root_key, set())
            new_dirs = new.directories.get(root_key, set())
            for rel in sorted(new_dirs - old_dirs):
                observations.append(ChangeObservation(root, Path(rel), "created", is_directory=True))
            for rel in sorted(old_dirs - new_dirs):
                observations.append(ChangeObservation(root, Path(rel), "deleted", is_directory=True))

        for rel in sorted(set(old_files) | set(new_files)):
            if rel not in old_files:
                observations.append(ChangeObservation(root, Path(rel), "created"))
            elif rel not in new_files:
                observations.append(ChangeObservation(root, Path(rel), "deleted"))
            elif old_files[rel] != new_files[rel]:
                observations.append(ChangeObservation(root, Path(rel), "modified"))

    return observations
