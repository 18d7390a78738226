"""
Modifier resolution for members emitted by a transformation pass.

A ModifierResolver computes the access flags to write for a member. The set
of resolvers is closed: each one reads `current_flags` exactly once and
derives its result from that value alone.
"""

from __future__ import annotations

from enum import Enum, IntFlag
from typing import Iterable, Protocol, runtime_checkable

from .errors import ConfigError


class Modifier(IntFlag):
    """JVM access flag bits for methods."""

    PUBLIC = 0x0001
    PRIVATE = 0x0002
    PROTECTED = 0x0004
    STATIC = 0x0008
    FINAL = 0x0010
    SYNCHRONIZED = 0x0020
    BRIDGE = 0x0040
    VARARGS = 0x0080
    NATIVE = 0x0100
    ABSTRACT = 0x0400
    STRICT = 0x0800
    SYNTHETIC = 0x1000


@runtime_checkable
class MemberDescriptor(Protocol):
    """A member whose flags can be queried."""

    def current_flags(self, implemented: bool) -> int:
        """Flags of the member, adjusted for whether it is being implemented."""
        ...


class ModifierResolver(str, Enum):
    """Closed set of modifier resolution strategies."""

    IDENTITY = "identity"
    DESYNCHRONIZING = "desynchronizing"

    def transform(self, member: MemberDescriptor, implemented: bool) -> int:
        """Return the flags to emit for `member`."""
        flags = int(member.current_flags(implemented))
        if self is ModifierResolver.DESYNCHRONIZING:
            # ~int keeps bits outside the named Modifier set
            return flags & ~int(Modifier.SYNCHRONIZED)
        return flags

    @classmethod
    def parse(cls, name: str) -> ModifierResolver:
        """Look up a resolver by name, case-insensitively."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            known = ", ".join(r.value for r in cls)
            raise ConfigError(f"Unknown modifier resolver {name!r} (known: {known})") from None


def transform_all(
    resolver: ModifierResolver,
    members: Iterable[MemberDescriptor],
    implemented: bool,
) -> list[int]:
    """Apply a resolver to each member in order."""
    return [resolver.transform(member, implemented) for member in members]


def parse_flags(text: str) -> int:
    """Parse a flag value written in decimal, hex (0x) or binary (0b)."""
    try:
        value = int(text.strip(), 0)
    except ValueError:
        raise ValueError(f"Not a flag value: {text!r}") from None
    if value < 0:
        raise ValueError(f"Flag values are non-negative: {text!r}")
    return value


def describe_flags(value: int) -> str:
    """Render a flag value as `public|static`; unnamed bits are shown in hex."""
    names = []
    remaining = value
    for flag in Modifier:
        if value & flag.value:
            names.append(flag.name.lower())
            remaining &= ~flag.value
    if remaining:
        names.append(hex(remaining))
    return "|".join(names) if names else "none"
