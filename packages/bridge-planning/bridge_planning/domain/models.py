"""
Planning Domain Models

Hierarchy levels, lifecycle enums, build instructions and build plans.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class HierarchyLevel(str, Enum):
    """
    Nesting category of a component.

    Nesting is governed by ``weight`` only. Microservice and Utility sit between
    Widget and Subtask by weight even though they are declared last, so never
    derive ordering from declaration order.
    """

    APP = "App"
    MODULE = "Module"
    SUBMODULE = "Submodule"
    EPIC = "Epic"
    STORY = "Story"
    FEATURE = "Feature"
    COMPONENT = "Component"
    WIDGET = "Widget"
    TASK = "Task"
    SUBTASK = "Subtask"
    MICROSERVICE = "Microservice"
    UTILITY = "Utility"

    @property
    def weight(self) -> int:
        return LEVEL_WEIGHTS[self]

    def can_contain(self, other: "HierarchyLevel") -> bool:
        """True if ``other`` may nest directly under this level."""
        return other.weight < self.weight


LEVEL_WEIGHTS: dict[HierarchyLevel, int] = {
    HierarchyLevel.APP: 100,
    HierarchyLevel.MODULE: 90,
    HierarchyLevel.SUBMODULE: 80,
    HierarchyLevel.EPIC: 70,
    HierarchyLevel.STORY: 60,
    HierarchyLevel.FEATURE: 50,
    HierarchyLevel.COMPONENT: 40,
    HierarchyLevel.WIDGET: 30,
    HierarchyLevel.TASK: 20,
    HierarchyLevel.SUBTASK: 10,
    HierarchyLevel.MICROSERVICE: 25,
    HierarchyLevel.UTILITY: 15,
}


class ComponentStatus(str, Enum):
    """Lifecycle status of a component node"""

    UNINITIALIZED = "Uninitialized"
    INITIALIZING = "Initializing"
    READY = "Ready"
    EXECUTING = "Executing"
    SUSPENDED = "Suspended"
    ERROR = "Error"
    CLEANING = "Cleaning"


class HealthStatus(str, Enum):
    """Derived health of a component node"""

    HEALTHY = "Healthy"
    DEGRADED = "Degraded"
    UNHEALTHY = "Unhealthy"
    UNKNOWN = "Unknown"


class BuildScope(str, Enum):
    """Blast radius of a requested change"""

    COMPONENT = "component"  # single UI element or function
    SUBMODULE = "submodule"  # feature within a module
    MODULE = "module"  # entire module
    SYSTEM = "system"  # core architecture
    FULL = "full"  # complete rebuild (rare)


class BuildAction(str, Enum):
    """Requested action"""

    ADD = "add"
    ENHANCE = "enhance"
    UPDATE = "update"
    REMOVE = "remove"
    FIX = "fix"
    OTHER = "other"

    @property
    def updates_documents(self) -> bool:
        return self in (BuildAction.ADD, BuildAction.ENHANCE)


class MessageType(str, Enum):
    """Kind of inter-component message"""

    COMMAND = "Command"
    QUERY = "Query"
    RESPONSE = "Response"
    EVENT = "Event"
    NOTIFICATION = "Notification"
    ERROR = "Error"


@dataclass(frozen=True)
class ComponentCapability:
    """Capability a component provides"""

    id: str
    name: str
    description: str = ""
    version: str = "1.0.0"


@dataclass
class ComponentMessage:
    """
    Message passed along the hierarchy.

    A receiver sets ``stop_propagation`` to end upward bubbling.
    """

    type: MessageType
    source_id: str
    payload: dict[str, Any] = field(default_factory=dict)
    stop_propagation: bool = False


@dataclass(frozen=True)
class ComponentDescriptor:
    """Creation request handed to a component factory"""

    id: str
    name: str
    level: HierarchyLevel
    version: str = "1.0.0"
    dependencies: frozenset[str] = frozenset()
    capabilities: frozenset[ComponentCapability] = frozenset()
    description: str = ""


@dataclass(frozen=True)
class BuildInstruction:
    """
    Structured change request produced by an external instruction producer.

    Example:
        instruction = BuildInstruction(
            target="module.dashboard",
            scope=BuildScope.MODULE,
            action=BuildAction.ENHANCE,
        )
    """

    target: str
    scope: BuildScope
    action: BuildAction
    tests: frozenset[str] = frozenset()
    hot_swappable: bool = False

    def __post_init__(self):
        if not self.target:
            raise ValueError("target must be a non-empty component identifier")
        # Accept any iterable of test ids
        if not isinstance(self.tests, frozenset):
            object.__setattr__(self, "tests", frozenset(self.tests))


@dataclass(frozen=True)
class BuildPlan:
    """
    Complete plan for a build: affected components, order, timing, verdicts.

    Invariant: ``build_order`` is a permutation of
    ``{primary_target} | set(dependent_components)`` (except the fixed Full plan),
    with every in-set dependency placed before its dependent.
    """

    primary_target: str
    dependent_components: tuple[str, ...]
    tests_to_run: tuple[str, ...]
    documents_to_update: tuple[str, ...]
    estimated_build_time: int
    build_order: tuple[str, ...]
    can_hot_swap: bool
    requires_restart: bool
    warnings: tuple[str, ...] = ()

    @property
    def affected_components(self) -> frozenset[str]:
        return frozenset(self.dependent_components) | {self.primary_target}

    @property
    def component_count(self) -> int:
        return len(self.dependent_components) + 1

    def summary(self) -> str:
        """Human-readable summary"""
        if self.estimated_build_time < 60:
            time_string = f"{self.estimated_build_time} seconds"
        else:
            time_string = f"{self.estimated_build_time // 60} minutes"
        mode = "hot-swappable" if self.can_hot_swap else "requires reload"

        return (
            "Build Plan:\n"
            f"- Target: {self.primary_target}\n"
            f"- Affected Components: {self.component_count}\n"
            f"- Estimated Time: {time_string}\n"
            f"- Mode: {mode}\n"
            f"- Tests: {len(self.tests_to_run)}"
        )

    def __repr__(self):
        return (
            f"BuildPlan({self.primary_target}, components={self.component_count}, "
            f"time={self.estimated_build_time}s, hot_swap={self.can_hot_swap})"
        )
