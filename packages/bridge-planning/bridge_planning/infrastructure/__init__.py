from .bridge_topology import default_catalog, default_dependency_graph, default_structure
from .catalog import InMemoryComponentCatalog
from .dependency_graph import DependencyGraph
from .rwlock import ReadWriteLock

__all__ = [
    "DependencyGraph",
    "InMemoryComponentCatalog",
    "ReadWriteLock",
    "default_catalog",
    "default_dependency_graph",
    "default_structure",
]
