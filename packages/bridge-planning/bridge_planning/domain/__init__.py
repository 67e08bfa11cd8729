"""
Planning Domain

Pure value types and the component node state machine.
"""

from .catalog import CatalogEntry
from .component import ComponentBehavior, ComponentMetrics, ComponentNode, ComponentState, NullBehavior
from .models import (
    LEVEL_WEIGHTS,
    BuildAction,
    BuildInstruction,
    BuildPlan,
    BuildScope,
    ComponentCapability,
    ComponentDescriptor,
    ComponentMessage,
    ComponentStatus,
    HealthStatus,
    HierarchyLevel,
    MessageType,
)
from .structure import ModuleStructure
from .version import (
    CompatibilityLevel,
    ComponentVersion,
    VersionChangeType,
    VersionComparator,
    VersionEntry,
    VersionHistory,
)

__all__ = [
    "LEVEL_WEIGHTS",
    "BuildAction",
    "BuildInstruction",
    "BuildPlan",
    "BuildScope",
    "CatalogEntry",
    "CompatibilityLevel",
    "ComponentBehavior",
    "ComponentCapability",
    "ComponentDescriptor",
    "ComponentMessage",
    "ComponentMetrics",
    "ComponentNode",
    "ComponentState",
    "ComponentStatus",
    "ComponentVersion",
    "HealthStatus",
    "HierarchyLevel",
    "MessageType",
    "ModuleStructure",
    "NullBehavior",
    "VersionChangeType",
    "VersionComparator",
    "VersionEntry",
    "VersionHistory",
]
