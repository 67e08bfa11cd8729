"""
Component Node

A unit of the component tree: identity, level, version, ownership links,
lifecycle state machine and runtime metrics.

Ownership runs parent -> children only. ``parent_id`` and ``dependencies`` are
plain identifiers resolved through the hierarchy's index, never owning links.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Protocol

from bridge_shared.common.exceptions import ComponentExecutionError, InvalidStateTransition, VersionError
from bridge_shared.common.observability import get_logger

from .models import ComponentCapability, ComponentMessage, ComponentStatus, HealthStatus, HierarchyLevel
from .version import ComponentVersion, VersionChangeType, VersionComparator, VersionHistory

logger = get_logger(__name__)

S = ComponentStatus

# operation -> statuses it may start from
ALLOWED_FROM: dict[str, frozenset[ComponentStatus]] = {
    "initialize": frozenset({S.UNINITIALIZED, S.ERROR}),
    "execute": frozenset({S.READY}),
    "suspend": frozenset({S.READY}),
    "resume": frozenset({S.SUSPENDED}),
    "cleanup": frozenset({S.READY, S.ERROR, S.SUSPENDED}),
}


class ComponentBehavior(Protocol):
    """
    Capability set a concrete component implements.

    Hooks receive the node they run for. Raising from a hook moves the node to Error.
    """

    def on_initialize(self, node: "ComponentNode") -> None: ...

    def on_execute(self, node: "ComponentNode") -> Any: ...

    def on_suspend(self, node: "ComponentNode") -> None: ...

    def on_resume(self, node: "ComponentNode") -> None: ...

    def on_cleanup(self, node: "ComponentNode") -> None: ...

    def on_message(self, node: "ComponentNode", message: ComponentMessage) -> None: ...


class NullBehavior:
    """Behavior with no side effects"""

    def on_initialize(self, node):
        pass

    def on_execute(self, node):
        return None

    def on_suspend(self, node):
        pass

    def on_resume(self, node):
        pass

    def on_cleanup(self, node):
        pass

    def on_message(self, node, message):
        pass


@dataclass
class ComponentState:
    status: ComponentStatus = ComponentStatus.UNINITIALIZED
    error_count: int = 0
    last_activity: float = field(default_factory=time.time)
    last_error: str | None = None


@dataclass
class ComponentMetrics:
    execution_count: int = 0
    total_duration: float = 0.0
    last_execution: float | None = None

    @property
    def average_duration(self) -> float:
        return self.total_duration / self.execution_count if self.execution_count else 0.0


@dataclass(eq=False)
class ComponentNode:
    """
    Node in the component hierarchy.

    Example:
        node = ComponentNode(id="dashboard.widgets.stats", name="Stats", level=HierarchyLevel.SUBMODULE)
        node.initialize()
        node.execute()
        assert node.status == ComponentStatus.READY
    """

    id: str
    name: str
    level: HierarchyLevel
    version: ComponentVersion = field(default_factory=lambda: ComponentVersion(1, 0, 0))
    parent_id: str | None = None
    children: list["ComponentNode"] = field(default_factory=list)
    dependencies: set[str] = field(default_factory=set)
    capabilities: frozenset[ComponentCapability] = frozenset()
    description: str = ""
    behavior: ComponentBehavior = field(default_factory=NullBehavior, repr=False)
    state: ComponentState = field(default_factory=ComponentState)
    metrics: ComponentMetrics = field(default_factory=ComponentMetrics)

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if isinstance(other, ComponentNode):
            return self.id == other.id
        return False

    def __repr__(self):
        return f"ComponentNode({self.id}, {self.level.value}, {self.state.status.value})"

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def status(self) -> ComponentStatus:
        return self.state.status

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def health(self) -> HealthStatus:
        if self.state.status == S.UNINITIALIZED:
            return HealthStatus.UNKNOWN
        if self.state.status == S.ERROR:
            return HealthStatus.UNHEALTHY
        if self.state.error_count > 0:
            return HealthStatus.DEGRADED
        return HealthStatus.HEALTHY

    def child(self, component_id: str) -> "ComponentNode | None":
        for child in self.children:
            if child.id == component_id:
                return child
        return None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Uninitialized/Error -> Initializing -> Ready. Reinitializing from Error resets the error count."""
        if self.state.status == S.ERROR:
            self.state.error_count = 0
            self.state.last_error = None
        self._transition("initialize", S.INITIALIZING)
        self._run_hook("initialize", self.behavior.on_initialize)
        self._set_status(S.READY)

    def execute(self) -> Any:
        """Ready -> Executing -> Ready, recording execution metrics."""
        self._transition("execute", S.EXECUTING)
        start = time.perf_counter()
        try:
            result = self._run_hook("execute", self.behavior.on_execute)
        finally:
            self.metrics.execution_count += 1
            self.metrics.total_duration += time.perf_counter() - start
            self.metrics.last_execution = time.time()
        self._set_status(S.READY)
        return result

    def suspend(self) -> None:
        self._transition("suspend", S.SUSPENDED)
        self._run_hook("suspend", self.behavior.on_suspend)

    def resume(self) -> None:
        self._transition("resume", S.READY)
        self._run_hook("resume", self.behavior.on_resume)

    def cleanup(self) -> None:
        """Ready/Error/Suspended -> Cleaning. The owner detaches the node afterwards."""
        self._transition("cleanup", S.CLEANING)
        self._run_hook("cleanup", self.behavior.on_cleanup)

    def fail(self, error: BaseException | str | None = None) -> None:
        """Any status -> Error on an unrecovered failure."""
        self.state.error_count += 1
        self.state.last_error = str(error) if error is not None else None
        self._set_status(S.ERROR)

    def receive_message(self, message: ComponentMessage) -> None:
        self.state.last_activity = time.time()
        self._run_hook("receive_message", self.behavior.on_message, message)

    def can_unload(self) -> bool:
        """Local half of the unload check; the hierarchy adds the dependents check."""
        return self.state.status != S.EXECUTING

    # ------------------------------------------------------------------
    # Versioning
    # ------------------------------------------------------------------

    def update_version(
        self,
        target: ComponentVersion,
        history: VersionHistory | None = None,
        comparator: VersionComparator | None = None,
    ) -> None:
        """
        Move to ``target`` if it is a compatible (same or forward) version.

        Raises:
            VersionError: target is lower than the current version; use ``rollback_version``
        """
        comparator = comparator or VersionComparator()
        if not comparator.is_compatible_upgrade(self.version, target):
            raise VersionError(
                "Downgrade requires an explicit rollback",
                details={"component": self.id, "current": str(self.version), "target": str(target)},
            )
        previous = self.version
        self.version = target
        if history is not None:
            change = VersionChangeType.PATCH if previous.key[:2] == target.key[:2] else VersionChangeType.UPGRADE
            history.record_change(self.id, target, previous, change)

    def rollback_version(self, target: ComponentVersion, history: VersionHistory) -> None:
        """Move back to a version recorded in ``history``."""
        history.validate_rollback(self.id, self.version, target)
        previous = self.version
        self.version = target
        history.record_change(self.id, target, previous, VersionChangeType.ROLLBACK)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(self, operation: str, target: ComponentStatus) -> None:
        allowed = ALLOWED_FROM[operation]
        if self.state.status not in allowed:
            raise InvalidStateTransition(
                f"Cannot {operation} component in status {self.state.status.value}",
                details={"component": self.id, "allowed": sorted(s.value for s in allowed)},
            )
        self._set_status(target)

    def _set_status(self, status: ComponentStatus) -> None:
        previous = self.state.status
        self.state.status = status
        self.state.last_activity = time.time()
        logger.debug("status_changed", component=self.id, previous=previous.value, status=status.value)

    def _run_hook(self, operation: str, hook, *args) -> Any:
        try:
            return hook(self, *args)
        except Exception as e:
            self.fail(e)
            raise ComponentExecutionError(
                f"{operation} failed for {self.id}",
                details={"component": self.id, "error_type": type(e).__name__},
            ) from e
