"""
Bridge Planning

Build scope analysis and component hierarchy for modular application shells.

Hexagonal Architecture:
- domain/: value types, versions, component state machine
- ports/: collaborator protocols (catalog, graph, factory)
- infrastructure/: dependency graph, catalogs, default topology
- application/: ComponentHierarchy, ScopeAnalyzer
"""

from .application import ComponentHierarchy, ScopeAnalyzer
from .domain import (
    BuildAction,
    BuildInstruction,
    BuildPlan,
    BuildScope,
    ComponentNode,
    ComponentVersion,
    HierarchyLevel,
    VersionComparator,
)
from .infrastructure import DependencyGraph, InMemoryComponentCatalog

__version__ = "0.1.0"

__all__ = [
    "BuildAction",
    "BuildInstruction",
    "BuildPlan",
    "BuildScope",
    "ComponentHierarchy",
    "ComponentNode",
    "ComponentVersion",
    "DependencyGraph",
    "HierarchyLevel",
    "InMemoryComponentCatalog",
    "ScopeAnalyzer",
    "VersionComparator",
]
