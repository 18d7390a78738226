"""classweave - incremental class output mirroring and modifier resolution."""

__version__ = "0.1.0"

from .changes import ChangeKind, ChangeObservation, EntryType, FileChangeRecord, classify, coalesce
from .config import ProjectConfig, ReconcileConfig, TransformExtension, load_config
from .errors import (
    ClassweaveError,
    ConfigError,
    CopyError,
    DeleteFailure,
    DirectoryCreationError,
    PathEscapeError,
    ReconcileError,
    UnclassifiableChangeError,
)
from .modifiers import MemberDescriptor, Modifier, ModifierResolver
from .reconciler import OutputReconciler, ReconcileResult

__all__ = [
    "__version__",
    # Change classification
    "ChangeKind",
    "ChangeObservation",
    "EntryType",
    "FileChangeRecord",
    "classify",
    "coalesce",
    # Reconciliation
    "OutputReconciler",
    "ReconcileResult",
    # Modifier resolution
    "MemberDescriptor",
    "Modifier",
    "ModifierResolver",
    # Configuration
    "ProjectConfig",
    "ReconcileConfig",
    "TransformExtension",
    "load_config",
    # Errors
    "ClassweaveError",
    "ConfigError",
    "CopyError",
    "DeleteFailure",
    "DirectoryCreationError",
    "PathEscapeError",
    "ReconcileError",
    "UnclassifiableChangeError",
]
