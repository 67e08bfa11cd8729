"""
Bridge Exception Hierarchy

Standardized exceptions for the build-scope planner.

Guide:
    1. Recoverable errors (unknown catalog entries) -> log and fall back to defaults
    2. Structural violations -> raised before any mutation, tree left unchanged
    3. Internal invariant failures -> GraphInconsistency, never expected in correct operation

Example:
    try:
        hierarchy.add_child(child, parent)
    except HierarchyViolation as e:
        logger.warning("rejected_child", error=str(e))
"""

from typing import Any


class BridgeError(Exception):
    """Base exception for all Bridge errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Initialize Bridge error.

        Args:
            message: Human-readable error message
            details: Optional additional details for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


# ============================================================
# Hierarchy Errors
# ============================================================


class HierarchyError(BridgeError):
    """Component tree operation failures."""

    pass


class HierarchyViolation(HierarchyError):
    """Level-weight ordering broken (child weight >= parent weight)."""

    pass


class CycleViolation(HierarchyError):
    """Operation would create a cycle in the ownership tree."""

    pass


class ComponentNotFoundError(HierarchyError):
    """Component id is not registered in the hierarchy."""

    pass


class CannotRemoveError(HierarchyError):
    """Component refuses to be unloaded."""

    pass


class HasDependentsError(HierarchyError):
    """Component is still listed as a dependency of other components."""

    pass


class InvalidReorderError(HierarchyError):
    """Reordered child list does not match the current children."""

    pass


class MaxChildrenExceededError(HierarchyError):
    """Parent already holds the maximum number of children."""

    pass


# ============================================================
# Lifecycle Errors
# ============================================================


class LifecycleError(BridgeError):
    """Component lifecycle failures."""

    pass


class InvalidStateTransition(LifecycleError):
    """Requested status transition is not allowed from the current status."""

    pass


class ComponentExecutionError(LifecycleError):
    """A lifecycle hook raised; the component is now in Error."""

    pass


# ============================================================
# Version Errors
# ============================================================


class VersionError(BridgeError):
    """Version handling failures."""

    pass


class InvalidVersionError(VersionError):
    """Unparsable version string or negative version component."""

    pass


class InvalidRollbackError(VersionError):
    """Rollback target is not strictly lower than the current version."""

    pass


class VersionNotFoundError(VersionError):
    """Rollback target never appeared in the component's version history."""

    pass


# ============================================================
# Catalog / Graph Errors
# ============================================================


class UnknownComponent(BridgeError):
    """
    Identifier not present in catalog or graph.

    Planning never raises this; it degrades to defaults instead.
    Only explicit lookups (``ComponentCatalog.require``) raise it.
    """

    pass


class GraphInconsistency(BridgeError):
    """Internal invariant failure (forward/reverse index mismatch). Fatal."""

    pass


class CyclicBuildOrderError(GraphInconsistency):
    """Affected components form a dependency cycle (strict mode only)."""

    pass


# ============================================================
# Configuration Errors
# ============================================================


class InvalidConfigurationError(BridgeError):
    """Invalid configuration or catalog manifest."""

    pass
