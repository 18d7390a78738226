"""
Audit log of reconciliation passes.

One JSON Lines entry per pass records what was written and what was erased
from the output root.
"""

import json
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .reconciler import ReconcileResult


@dataclass
class ErasureCost:
    """Summary of what was erased in an operation."""
    files: int = 0
    bytes_erased: int = 0


@dataclass
class CreationSummary:
    """Summary of what was written in an operation."""
    files: int = 0
    bytes_written: int = 0


@dataclass
class AuditEntry:
    """A single audit log entry."""
    timestamp: str
    operation: str
    erased: ErasureCost
    created: CreationSummary
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp,
            "operation": self.operation,
            "erased": asdict(self.erased),
            "created": asdict(self.created),
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuditEntry":
        """Create from dictionary."""
        return cls(
            timestamp=data["timestamp"],
            operation=data["operation"],
            erased=ErasureCost(**data.get("erased", {})),
            created=CreationSummary(**data.get("created", {})),
            metadata=data.get("metadata", {}),
        )


def log_operation(
    log_path: Path,
    operation: str,
    erased: ErasureCost | None = None,
    created: CreationSummary | None = None,
    metadata: dict[str, Any] | None = None,
) -> AuditEntry:
    """
    Append an operation to the audit log.

    Args:
        log_path: Path to the audit log file
        operation: Name of the operation (e.g., "sync", "watch")
        erased: Summary of what was erased
        created: Summary of what was created
        metadata: Additional context

    Returns:
        The created audit entry
    """
    entry = AuditEntry(
        timestamp=datetime.now(timezone.utc).isoformat(),
        operation=operation,
        erased=erased or ErasureCost(),
        created=created or CreationSummary(),
        metadata=metadata or {},
    )

    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Append as JSON Lines format (one JSON object per line)
    with log_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry.to_dict()) + "\n")

    return entry


def log_reconcile_result(
    log_path: Path,
    operation: str,
    result: ReconcileResult,
    error: str | None = None,
) -> AuditEntry:
    """
    Record a reconciliation pass.

    `error` is the message of a fatal error that ended the pass; `result`
    then holds what was applied before it.
    """
    metadata: dict[str, Any] = {"complete": result.complete and error is None}
    if error is not None:
        metadata["error"] = error
    if result.missing:
        metadata["already_absent"] = len(result.missing)
    if result.aborted_at is not None:
        metadata["aborted_at"] = result.aborted_at.relative_path
    if result.delete_failures:
        metadata["delete_failures"] = [f.to_dict() for f in result.delete_failures]

    return log_operation(
        log_path,
        operation,
        erased=ErasureCost(files=len(result.deleted), bytes_erased=result.bytes_erased),
        created=CreationSummary(files=len(result.copied), bytes_written=result.bytes_written),
        metadata=metadata,
    )


def read_audit_log(log_path: Path, last_n: int | None = None) -> list[AuditEntry]:
    """
    Read entries from the audit log.

    Args:
        log_path: Path to the audit log file
        last_n: If specified, return only the last N entries

    Returns:
        List of audit entries (oldest first)
    """
    if not log_path.exists():
        return []

    entries = []
    with log_path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                try:
                    data = json.loads(line)
                    entries.append(AuditEntry.from_dict(data))
                except (json.JSONDecodeError, KeyError, TypeError):
                    continue  # Skip malformed lines

    if last_n is not None:
        return entries[-last_n:] if last_n > 0 else []
    return entries


def format_audit_entry(entry: AuditEntry) -> str:
    """Format an audit entry for human-readable display."""
    lines = [
        f"[{entry.timestamp}] {entry.operation}",
    ]

    if entry.created.files:
        lines.append(f"  Written: {entry.created.files} files ({entry.created.bytes_written} bytes)")

    if entry.erased.files:
        lines.append(f"  Erased: {entry.erased.files} files ({entry.erased.bytes_erased} bytes)")

    if entry.metadata:
        for key, value in entry.metadata.items():
            lines.append(f"  {key}: {value}")

    return "\n".join(lines)
