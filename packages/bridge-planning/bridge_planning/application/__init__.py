"""
Planning Application Layer

Hierarchy management and build scope analysis.
"""

from .hierarchy import ComponentHierarchy
from .hierarchy_rules import (
    HierarchyRule,
    HierarchyValidation,
    HierarchyWeightRule,
    MaxChildrenRule,
    MaxDependenciesRule,
    MaxDepthRule,
    Severity,
    ValidationIssue,
)
from .scope_analyzer import ScopeAnalyzer

__all__ = [
    "ComponentHierarchy",
    "HierarchyRule",
    "HierarchyValidation",
    "HierarchyWeightRule",
    "MaxChildrenRule",
    "MaxDependenciesRule",
    "MaxDepthRule",
    "ScopeAnalyzer",
    "Severity",
    "ValidationIssue",
]
