"""Tests for change classification and coalescing."""

from __future__ import annotations

from pathlib import Path

import pytest

from classweave.changes import (
    ChangeKind,
    ChangeObservation,
    EntryType,
    FileChangeRecord,
    classify,
    classify_observation,
    coalesce,
    format_record,
    normalize_relative_path,
)
from classweave.errors import UnclassifiableChangeError


ROOT = Path("/build/classes/java")
KOTLIN = Path("/build/classes/kotlin")


def _added(rel: str) -> FileChangeRecord:
    return FileChangeRecord(rel, ChangeKind.ADDED, source=ROOT / rel)


def _modified(rel: str) -> FileChangeRecord:
    return FileChangeRecord(rel, ChangeKind.MODIFIED, source=ROOT / rel)


def _removed(rel: str) -> FileChangeRecord:
    return FileChangeRecord(rel, ChangeKind.REMOVED)


# -----------------------------------------------------------------------------
# FileChangeRecord invariants
# -----------------------------------------------------------------------------


def test_record_requires_source_for_added_and_modified():
    with pytest.raises(ValueError):
        FileChangeRecord("a/B.class", ChangeKind.ADDED)
    with pytest.raises(ValueError):
        FileChangeRecord("a/B.class", ChangeKind.MODIFIED)


def test_record_rejects_source_for_removed():
    with pytest.raises(ValueError):
        FileChangeRecord("a/B.class", ChangeKind.REMOVED, source=ROOT / "a/B.class")


def test_record_rejects_empty_or_absolute_path():
    with pytest.raises(ValueError):
        FileChangeRecord("", ChangeKind.REMOVED)
    with pytest.raises(ValueError):
        FileChangeRecord("/etc/passwd", ChangeKind.REMOVED)


def test_record_is_immutable():
    record = _removed("a/B.class")
    with pytest.raises(AttributeError):
        record.kind = ChangeKind.ADDED  # type: ignore[misc]


# -----------------------------------------------------------------------------
# Classification
# -----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "event_type,kind",
    [("created", ChangeKind.ADDED), ("modified", ChangeKind.MODIFIED), ("deleted", ChangeKind.REMOVED)],
)
def test_event_types_map_to_kinds(event_type: str, kind: ChangeKind):
    record = classify_observation(ChangeObservation(ROOT, ROOT / "com/acme/Foo.class", event_type))
    assert record.kind == kind
    assert record.relative_path == "com/acme/Foo.class"
    assert record.entry_type == EntryType.FILE


def test_source_present_only_for_content_changes():
    added = classify_observation(ChangeObservation(ROOT, ROOT / "Foo.class", "created"))
    removed = classify_observation(ChangeObservation(ROOT, ROOT / "Foo.class", "deleted"))
    assert added.source == ROOT / "Foo.class"
    assert removed.source is None


def test_relative_observation_is_resolved_against_root():
    record = classify_observation(ChangeObservation(ROOT, Path("com/acme/Foo.class"), "modified"))
    assert record.relative_path == "com/acme/Foo.class"
    assert record.source == ROOT / "com/acme/Foo.class"


def test_directory_observation_is_directory_record():
    record = classify_observation(ChangeObservation(ROOT, ROOT / "com/acme", "created", is_directory=True))
    assert record.entry_type == EntryType.DIRECTORY


def test_classification_is_deterministic():
    obs = ChangeObservation(ROOT, ROOT / "x/Y.class", "modified")
    assert classify_observation(obs) == classify_observation(obs)


def test_unknown_event_type_is_unclassifiable():
    with pytest.raises(UnclassifiableChangeError):
        classify_observation(ChangeObservation(ROOT, ROOT / "Foo.class", "closed"))


def test_path_outside_root_is_unclassifiable():
    with pytest.raises(UnclassifiableChangeError):
        classify_observation(ChangeObservation(ROOT, Path("/elsewhere/Foo.class"), "created"))


def test_classify_is_lazy():
    def observations():
        yield ChangeObservation(ROOT, ROOT / "A.class", "created")
        raise AssertionError("consumed past the first record")

    records = classify(observations())
    assert next(records).relative_path == "A.class"


def test_normalize_relative_path():
    assert normalize_relative_path("com\\acme\\Foo.class") == "com/acme/Foo.class"
    assert normalize_relative_path("./com/./acme/Foo.class") == "com/acme/Foo.class"
    assert normalize_relative_path(Path("com") / "Foo.class") == "com/Foo.class"


# -----------------------------------------------------------------------------
# Coalescing
# -----------------------------------------------------------------------------


def test_coalesce_keeps_one_record_per_path_in_first_seen_order():
    records = coalesce([_modified("a.class"), _modified("b.class"), _modified("a.class")])
    assert [r.relative_path for r in records] == ["a.class", "b.class"]


def test_added_then_modified_stays_added():
    (record,) = coalesce([_added("a.class"), _modified("a.class")])
    assert record.kind == ChangeKind.ADDED


def test_added_then_removed_cancels_out():
    assert coalesce([_added("a.class"), _removed("a.class")]) == []


def test_removed_then_added_becomes_modified():
    (record,) = coalesce([_removed("a.class"), _added("a.class")])
    assert record.kind == ChangeKind.MODIFIED
    assert record.source == ROOT / "a.class"


def test_modified_then_removed_is_removed():
    (record,) = coalesce([_modified("a.class"), _removed("a.class")])
    assert record.kind == ChangeKind.REMOVED


def test_removal_from_another_root_keeps_pending_content():
    """A class moving between roots is rewritten from its new root."""
    added = FileChangeRecord("X.class", ChangeKind.ADDED, source=ROOT / "X.class", root=ROOT)
    removed = FileChangeRecord("X.class", ChangeKind.REMOVED, root=KOTLIN)

    (record,) = coalesce([added, removed])

    assert record.kind == ChangeKind.MODIFIED
    assert record.source == ROOT / "X.class"
    assert record.root == ROOT


def test_removal_before_add_from_another_root_becomes_modified():
    removed = FileChangeRecord("X.class", ChangeKind.REMOVED, root=KOTLIN)
    added = FileChangeRecord("X.class", ChangeKind.ADDED, source=ROOT / "X.class", root=ROOT)

    (record,) = coalesce([removed, added])

    assert record.kind == ChangeKind.MODIFIED
    assert record.source == ROOT / "X.class"


def test_added_then_removed_in_same_root_cancels_out():
    added = FileChangeRecord("X.class", ChangeKind.ADDED, source=ROOT / "X.class", root=ROOT)
    removed = FileChangeRecord("X.class", ChangeKind.REMOVED, root=ROOT)

    assert coalesce([added, removed]) == []


def test_classified_records_carry_their_root():
    record = classify_observation(ChangeObservation(KOTLIN, KOTLIN / "K.class", "deleted"))
    assert record.root == KOTLIN


def test_format_record():
    assert format_record(_added("a/B.class")) == "+ a/B.class"
    assert format_record(_removed("a/B.class")) == "- a/B.class"
