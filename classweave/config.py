"""
Project configuration loaded from classweave.toml.

Holds the reconcile settings (input roots, output root, state directory) and
the transform settings (modifier resolver, plugin discovery set).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from .errors import ConfigError
from .modifiers import ModifierResolver

CONFIG_FILENAME = "classweave.toml"
DEFAULT_STATE_DIR = ".classweave"


class TransformExtension:
    """
    Settings for a transformation pass.

    The discovery set lists locations an external plugin discovery step may
    search. None means no discovery was requested; an empty tuple means
    discovery over zero locations. The two are kept distinct.
    """

    def __init__(
        self,
        resolver: ModifierResolver = ModifierResolver.IDENTITY,
        discovery_set: Iterable[Path | str] | None = None,
    ):
        self.resolver = resolver
        self._discovery_set: tuple[Path, ...] | None = None
        self.discovery_set = discovery_set

    @property
    def discovery_set(self) -> tuple[Path, ...] | None:
        """Locations used for plugin discovery, or None if none are used."""
        return self._discovery_set

    @discovery_set.setter
    def discovery_set(self, value: Iterable[Path | str] | None) -> None:
        if value is None:
            self._discovery_set = None
            return
        if isinstance(value, (str, bytes, Path)):
            raise TypeError("discovery_set must be a collection of paths, not a single path")
        self._discovery_set = tuple(Path(p) for p in value)

    def configure(self, target: Any) -> None:
        """Copy these settings onto a task or another extension."""
        target.resolver = self.resolver
        target.discovery_set = self.discovery_set

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TransformExtension):
            return NotImplemented
        return self.resolver == other.resolver and self.discovery_set == other.discovery_set

    def __repr__(self) -> str:
        return f"TransformExtension(resolver={self.resolver.value!r}, discovery_set={self.discovery_set!r})"


@dataclass(frozen=True)
class ReconcileConfig:
    inputs: tuple[Path, ...]
    output_dir: Path
    state_dir: Path

    @property
    def snapshot_path(self) -> Path:
        return self.state_dir / "snapshot.json"

    @property
    def audit_log_path(self) -> Path:
        return self.state_dir / "audit.log"


@dataclass
class ProjectConfig:
    reconcile: ReconcileConfig
    transform: TransformExtension = field(default_factory=TransformExtension)
    source: Path | None = None


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _resolve(base: Path, raw: Any, key: str) -> Path:
    if not isinstance(raw, str) or not raw.strip():
        raise ConfigError(f"{key} must be a non-empty string")
    path = Path(raw.strip())
    return (path if path.is_absolute() else base / path).resolve()


def parse_config(data: dict[str, Any], base: Path, source: Path | None = None) -> ProjectConfig:
    """
    Build a ProjectConfig from parsed TOML data.

    Relative paths are resolved against `base`.
    """
    reconcile = _coerce_dict(data.get("reconcile"))

    raw_inputs = reconcile.get("inputs")
    if not isinstance(raw_inputs, list) or not raw_inputs:
        raise ConfigError("reconcile.inputs must be a non-empty list of directories")
    inputs = tuple(_resolve(base, raw, "reconcile.inputs") for raw in raw_inputs)

    if "output_dir" not in reconcile:
        raise ConfigError("reconcile.output_dir is required")
    output_dir = _resolve(base, reconcile["output_dir"], "reconcile.output_dir")
    if output_dir in inputs:
        raise ConfigError("reconcile.output_dir must differ from every input")

    state_dir = _resolve(base, reconcile.get("state_dir", DEFAULT_STATE_DIR), "reconcile.state_dir")

    transform = _coerce_dict(data.get("transform"))
    resolver = ModifierResolver.parse(str(transform.get("resolver", ModifierResolver.IDENTITY.value)))

    discovery: tuple[Path, ...] | None = None
    if "discovery" in transform:
        raw_discovery = transform["discovery"]
        if not isinstance(raw_discovery, list):
            raise ConfigError("transform.discovery must be a list of paths")
        discovery = tuple(_resolve(base, raw, "transform.discovery") for raw in raw_discovery)

    return ProjectConfig(
        reconcile=ReconcileConfig(inputs=inputs, output_dir=output_dir, state_dir=state_dir),
        transform=TransformExtension(resolver=resolver, discovery_set=discovery),
        source=source,
    )


def load_config(path: Path) -> ProjectConfig:
    """Load project configuration from TOML."""
    import tomllib

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    return parse_config(data, path.parent.resolve(), source=path)


def find_config(start: Path) -> Path | None:
    """Find classweave.toml by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        candidate = p / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
