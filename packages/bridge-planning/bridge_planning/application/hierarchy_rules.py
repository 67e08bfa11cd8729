"""
Hierarchy validation rules

Each rule inspects one node in the context of its hierarchy and reports at
most one issue. Rules are read-only.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from ..domain.component import ComponentNode

if TYPE_CHECKING:
    from .hierarchy import ComponentHierarchy


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ValidationIssue:
    component_id: str
    message: str
    severity: Severity = Severity.MEDIUM


@dataclass
class HierarchyValidation:
    """Result of ``ComponentHierarchy.validate_hierarchy``"""

    is_valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    component_count: int = 0
    orphaned_count: int = 0


class HierarchyRule(Protocol):
    def validate(self, node: ComponentNode, hierarchy: "ComponentHierarchy") -> ValidationIssue | None: ...


class HierarchyWeightRule:
    """Children must have strictly lower weight than their parent"""

    def validate(self, node, hierarchy):
        for child in node.children:
            if child.level.weight >= node.level.weight:
                return ValidationIssue(
                    node.id,
                    f"Contains {child.level.value} child {child.id} under {node.level.value}",
                    Severity.HIGH,
                )
        return None


class MaxDepthRule:
    def __init__(self, max_depth: int):
        self.max_depth = max_depth

    def validate(self, node, hierarchy):
        depth = len(hierarchy.ancestors_of(node))
        if depth > self.max_depth:
            return ValidationIssue(node.id, f"Exceeds maximum hierarchy depth of {self.max_depth}")
        return None


class MaxChildrenRule:
    def __init__(self, max_children: int):
        self.max_children = max_children

    def validate(self, node, hierarchy):
        if len(node.children) > self.max_children:
            return ValidationIssue(node.id, f"Exceeds maximum children limit of {self.max_children}")
        return None


class MaxDependenciesRule:
    def __init__(self, max_dependencies: int):
        self.max_dependencies = max_dependencies

    def validate(self, node, hierarchy):
        if len(node.dependencies) > self.max_dependencies:
            return ValidationIssue(
                node.id,
                f"Exceeds maximum dependencies limit of {self.max_dependencies}",
                Severity.LOW,
            )
        return None
