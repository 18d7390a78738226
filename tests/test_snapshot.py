"""Tests for input snapshots and snapshot diffing."""

from __future__ import annotations

from pathlib import Path

import pytest

from classweave.changes import ChangeKind, classify, coalesce
from classweave.errors import ConfigError
from classweave.reconciler import OutputReconciler
from classweave.snapshot import InputSnapshot, diff_snapshots, take_snapshot


def test_snapshot_hashes_files_and_skips_hidden(java_root: Path, write_file):
    write_file(java_root / "com/acme/Foo.class", b"foo")
    write_file(java_root / ".cache/ignored.bin", b"x")

    snapshot = take_snapshot([java_root])

    assert list(snapshot.files[str(java_root)]) == ["com/acme/Foo.class"]
    assert snapshot.directories[str(java_root)] == {"com", "com/acme"}


def test_missing_root_is_empty(tmp_path: Path):
    snapshot = take_snapshot([tmp_path / "absent"])
    assert snapshot.files[str(tmp_path / "absent")] == {}


def test_diff_reports_created_modified_deleted(java_root: Path, write_file):
    write_file(java_root / "Keep.class", b"same")
    write_file(java_root / "Change.class", b"v1")
    write_file(java_root / "Drop.class", b"gone soon")
    before = take_snapshot([java_root])

    write_file(java_root / "Change.class", b"v2")
    (java_root / "Drop.class").unlink()
    write_file(java_root / "New.class", b"new")
    after = take_snapshot([java_root])

    records = list(classify(diff_snapshots(before, after)))

    assert [(r.relative_path, r.kind) for r in records] == [
        ("Change.class", ChangeKind.MODIFIED),
        ("Drop.class", ChangeKind.REMOVED),
        ("New.class", ChangeKind.ADDED),
    ]
    assert records[0].source == java_root / "Change.class"


def test_diff_against_empty_snapshot_adds_everything(java_root: Path, kotlin_root: Path, write_file):
    write_file(java_root / "A.class")
    write_file(kotlin_root / "B.class")

    observations = diff_snapshots(InputSnapshot(), take_snapshot([java_root, kotlin_root]))

    assert [(o.root, o.path.as_posix(), o.event_type) for o in observations] == [
        (java_root, "A.class", "created"),
        (kotlin_root, "B.class", "created"),
    ]


def test_diff_includes_directories_on_request(java_root: Path, write_file):
    before = take_snapshot([java_root])
    write_file(java_root / "pkg/A.class")
    after = take_snapshot([java_root])

    without = diff_snapshots(before, after)
    with_dirs = diff_snapshots(before, after, include_directories=True)

    assert all(not o.is_directory for o in without)
    assert with_dirs[0].is_directory and with_dirs[0].path.as_posix() == "pkg"


def test_dropped_root_reports_deletions(java_root: Path, write_file):
    write_file(java_root / "A.class")
    before = take_snapshot([java_root])

    observations = diff_snapshots(before, InputSnapshot())

    assert [(o.path.as_posix(), o.event_type) for o in observations] == [("A.class", "deleted")]


def test_save_and_load(tmp_path: Path, java_root: Path, write_file):
    write_file(java_root / "A.class")
    snapshot = take_snapshot([java_root])
    path = tmp_path / "state" / "snapshot.json"

    snapshot.save(path)

    assert InputSnapshot.load(path) == snapshot
    assert diff_snapshots(InputSnapshot.load(path), snapshot) == []


def test_load_missing_is_empty(tmp_path: Path):
    assert InputSnapshot.load(tmp_path / "none.json") == InputSnapshot()


def test_load_corrupt_snapshot(tmp_path: Path):
    path = tmp_path / "snapshot.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError):
        InputSnapshot.load(path)


def test_class_moved_between_roots_is_mirrored_from_new_root(
    java_root: Path, kotlin_root: Path, output_root: Path, write_file
):
    write_file(kotlin_root / "X.class", b"kotlin-old")
    before = take_snapshot([java_root, kotlin_root])
    OutputReconciler(output_root).reconcile(coalesce(classify(diff_snapshots(InputSnapshot(), before))))

    (kotlin_root / "X.class").unlink()
    write_file(java_root / "X.class", b"java-new")
    after = take_snapshot([java_root, kotlin_root])
    records = coalesce(classify(diff_snapshots(before, after)))
    OutputReconciler(output_root).reconcile(records)

    assert [(r.relative_path, r.kind) for r in records] == [("X.class", ChangeKind.MODIFIED)]
    assert (output_root / "X.class").read_bytes() == b"java-new"
