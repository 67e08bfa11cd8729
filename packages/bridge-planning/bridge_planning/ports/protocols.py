"""
Planning Ports

Interfaces of the collaborators the planner consumes.
Hexagonal Architecture port layer.
"""

from collections.abc import Iterable
from typing import Protocol

from ..domain.catalog import CatalogEntry
from ..domain.component import ComponentNode
from ..domain.models import ComponentDescriptor


class ComponentCatalogPort(Protocol):
    """
    Component catalog port

    Read-only static metadata per component id. A missing entry means
    "unknown, use conservative defaults", never an error.
    """

    def get(self, component_id: str) -> CatalogEntry | None:
        """Entry for ``component_id`` or None"""
        ...

    def ids(self) -> Iterable[str]:
        """All catalogued ids"""
        ...


class DependencyGraphPort(Protocol):
    """
    Dependency relation port

    Forward edges (component -> what it depends on) and the reverse index.
    """

    def dependencies_of(self, component_id: str) -> frozenset[str]: ...

    def dependents_of(self, component_id: str) -> frozenset[str]: ...

    def transitive_dependents(self, component_id: str) -> frozenset[str]: ...


class ComponentFactoryPort(Protocol):
    """
    Component factory port

    Builds component nodes from a creation descriptor. The planner never
    constructs nodes itself.
    """

    def create(self, descriptor: ComponentDescriptor) -> ComponentNode: ...