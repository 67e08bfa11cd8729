"""
Semantic Versioning

Version value type, comparator and per-component version history.

Ordering and equality use (major, minor, patch) only. Prerelease and build
tags are carried for display.
"""

import re
import time
from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering

from bridge_shared.common.exceptions import InvalidRollbackError, InvalidVersionError, VersionNotFoundError

_VERSION_RE = re.compile(
    r"^v?(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"
    r"(?:-(?P<prerelease>[0-9A-Za-z.-]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z.-]+))?$"
)


@total_ordering
@dataclass(frozen=True, eq=False)
class ComponentVersion:
    """
    Semantic version.

    Example:
        v = ComponentVersion.parse("1.4.0-beta+42")
        assert v == ComponentVersion(1, 4, 0)
        assert str(v) == "1.4.0-beta+42"
    """

    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    def __post_init__(self):
        for part in ("major", "minor", "patch"):
            value = getattr(self, part)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise InvalidVersionError(f"{part} must be a non-negative integer", details={part: value})

    @classmethod
    def parse(cls, text: str) -> "ComponentVersion":
        match = _VERSION_RE.match(text.strip())
        if not match:
            raise InvalidVersionError(f"Not a semantic version: {text!r}")
        return cls(
            int(match["major"]),
            int(match["minor"]),
            int(match["patch"]),
            prerelease=match["prerelease"],
            build=match["build"],
        )

    @property
    def key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    def __eq__(self, other):
        if isinstance(other, ComponentVersion):
            return self.key == other.key
        return NotImplemented

    def __lt__(self, other):
        if isinstance(other, ComponentVersion):
            return self.key < other.key
        return NotImplemented

    def __hash__(self):
        return hash(self.key)

    def __str__(self):
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text


class CompatibilityLevel(str, Enum):
    """Kind of difference between two versions"""

    IDENTICAL = "identical"  # only prerelease/build differ
    PATCH = "patch"
    BACKWARD = "backward"  # minor upgrade
    FORWARD = "forward"  # minor downgrade
    BREAKING = "breaking"  # major change


class VersionComparator:
    """
    Total order and upgrade policy over ``ComponentVersion``.

    Policy: any same-or-forward move is compatible (cross-major included);
    a strictly lower target is never compatible and must go through rollback.
    """

    @staticmethod
    def compare(a: ComponentVersion, b: ComponentVersion) -> int:
        """Three-way compare: -1, 0 or 1."""
        if a.key < b.key:
            return -1
        if a.key > b.key:
            return 1
        return 0

    def is_compatible_upgrade(self, current: ComponentVersion, target: ComponentVersion) -> bool:
        return self.compare(target, current) >= 0

    @staticmethod
    def compatibility_level(current: ComponentVersion, target: ComponentVersion) -> CompatibilityLevel:
        if current.major != target.major:
            return CompatibilityLevel.BREAKING
        if current.minor != target.minor:
            return CompatibilityLevel.BACKWARD if current.minor < target.minor else CompatibilityLevel.FORWARD
        if current.patch != target.patch:
            return CompatibilityLevel.PATCH
        return CompatibilityLevel.IDENTICAL

    @staticmethod
    def latest_stable(versions: list[ComponentVersion]) -> ComponentVersion | None:
        stable = [v for v in versions if not v.is_prerelease]
        return max(stable) if stable else None

    @staticmethod
    def versions_between(
        start: ComponentVersion, end: ComponentVersion, versions: list[ComponentVersion]
    ) -> list[ComponentVersion]:
        """Versions in [start, end], sorted."""
        return sorted(v for v in versions if start <= v <= end)

    @staticmethod
    def is_prerelease(version: ComponentVersion) -> bool:
        return version.is_prerelease


class VersionChangeType(str, Enum):
    CREATION = "Creation"
    UPGRADE = "Upgrade"
    DOWNGRADE = "Downgrade"
    MIGRATION = "Migration"
    ROLLBACK = "Rollback"
    PATCH = "Patch"


@dataclass(frozen=True)
class VersionEntry:
    version: ComponentVersion
    previous_version: ComponentVersion | None
    change_type: VersionChangeType
    timestamp: float = field(default_factory=time.time)


class VersionHistory:
    """
    Append-only version log per component id.

    Migration and rollback execution are external; this only records changes
    and checks the rollback precondition.
    """

    def __init__(self):
        self._entries: dict[str, list[VersionEntry]] = {}

    def record_change(
        self,
        component_id: str,
        to: ComponentVersion,
        previous: ComponentVersion | None = None,
        change_type: VersionChangeType = VersionChangeType.UPGRADE,
    ) -> VersionEntry:
        entry = VersionEntry(version=to, previous_version=previous, change_type=change_type)
        self._entries.setdefault(component_id, []).append(entry)
        return entry

    def history_for(self, component_id: str) -> list[VersionEntry]:
        return list(self._entries.get(component_id, []))

    def clear(self, component_id: str) -> None:
        self._entries.pop(component_id, None)

    def validate_rollback(self, component_id: str, current: ComponentVersion, target: ComponentVersion) -> None:
        """
        Raise unless ``target`` is a legal rollback destination.

        Raises:
            InvalidRollbackError: target is not strictly lower than current
            VersionNotFoundError: target never appeared in the history
        """
        if not target < current:
            raise InvalidRollbackError(
                "Cannot rollback to a newer or equal version",
                details={"component": component_id, "current": str(current), "target": str(target)},
            )
        if not any(entry.version == target for entry in self._entries.get(component_id, [])):
            raise VersionNotFoundError(
                f"Version {target} not found in history",
                details={"component": component_id},
            )
