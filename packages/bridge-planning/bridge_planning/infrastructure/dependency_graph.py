"""
DependencyGraph - component dependency relation store

Forward edges (component -> components it depends on) plus a reverse index
(component -> components that depend on it), kept consistent on every write.

Performance: O(1) neighbor lookup through both indices.
Cycles are allowed in the raw relation; every traversal here is cycle-safe.
"""

from collections import deque
from collections.abc import Iterable, Mapping

from bridge_shared.common.exceptions import GraphInconsistency
from bridge_shared.common.observability import get_logger

from .rwlock import ReadWriteLock

logger = get_logger(__name__)


class DependencyGraph:
    """
    Dependency relation with reverse index.

    No validation against the hierarchy is performed; this is a pure relation store.

    Example:
        graph = DependencyGraph({"dashboard.widgets.stats": ["module.dashboard"]})
        graph.dependents_of("module.dashboard")  # frozenset({"dashboard.widgets.stats"})
    """

    def __init__(self, edges: Mapping[str, Iterable[str]] | None = None):
        """
        Initialize graph

        Args:
            edges: Optional initial forward edges {component: dependencies}
        """
        self._forward: dict[str, set[str]] = {}
        self._reverse: dict[str, set[str]] = {}
        self._lock = ReadWriteLock()

        for source, targets in (edges or {}).items():
            for target in targets:
                self._insert(source, target)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_edge(self, source: str, target: str) -> None:
        """Record that ``source`` depends on ``target``."""
        with self._lock.write():
            self._insert(source, target)
        logger.debug("dependency_edge_added", source=source, target=target)

    def remove_edge(self, source: str, target: str) -> None:
        with self._lock.write():
            self._forward.get(source, set()).discard(target)
            self._reverse.get(target, set()).discard(source)

    def remove_component(self, component_id: str) -> None:
        """Drop every edge touching ``component_id``."""
        with self._lock.write():
            for target in self._forward.pop(component_id, set()):
                self._reverse.get(target, set()).discard(component_id)
            for source in self._reverse.pop(component_id, set()):
                self._forward.get(source, set()).discard(component_id)

    def _insert(self, source: str, target: str) -> None:
        self._forward.setdefault(source, set()).add(target)
        self._reverse.setdefault(target, set()).add(source)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def dependencies_of(self, component_id: str) -> frozenset[str]:
        with self._lock.read():
            return frozenset(self._forward.get(component_id, ()))

    def dependents_of(self, component_id: str) -> frozenset[str]:
        """Direct dependents only."""
        with self._lock.read():
            return frozenset(self._reverse.get(component_id, ()))

    def transitive_dependents(self, component_id: str) -> frozenset[str]:
        """
        All components that depend on ``component_id``, directly or not.

        BFS over the reverse index. Nodes are marked visited before their own
        dependents are enqueued, so cycles terminate. The start node is only
        included when a cycle leads back to it.
        """
        with self._lock.read():
            visited = {component_id}
            dependents: set[str] = set()
            queue = deque([component_id])

            while queue:
                current = queue.popleft()
                for dependent in self._reverse.get(current, ()):
                    dependents.add(dependent)
                    if dependent not in visited:
                        visited.add(dependent)
                        queue.append(dependent)

            return frozenset(dependents)

    def has_path(self, source: str, target: str) -> bool:
        """True if ``target`` is reachable from ``source`` along forward edges."""
        with self._lock.read():
            visited: set[str] = set()
            queue = deque([source])
            while queue:
                current = queue.popleft()
                if current == target:
                    return True
                if current in visited:
                    continue
                visited.add(current)
                queue.extend(self._forward.get(current, ()))
            return False

    def would_create_cycle(self, source: str, target: str) -> bool:
        """True if adding ``source -> target`` would close a cycle."""
        return source == target or self.has_path(target, source)

    def nodes(self) -> frozenset[str]:
        with self._lock.read():
            return frozenset(self._forward) | frozenset(self._reverse)

    def edges(self) -> list[tuple[str, str]]:
        with self._lock.read():
            return sorted((s, t) for s, targets in self._forward.items() for t in targets)

    def __len__(self) -> int:
        with self._lock.read():
            return sum(len(targets) for targets in self._forward.values())

    def verify(self) -> None:
        """
        Check forward/reverse consistency.

        Raises:
            GraphInconsistency: the two indices disagree (internal bug)
        """
        with self._lock.read():
            forward_pairs = {(s, t) for s, targets in self._forward.items() for t in targets}
            reverse_pairs = {(s, t) for t, sources in self._reverse.items() for s in sources}
        if forward_pairs != reverse_pairs:
            raise GraphInconsistency(
                "Forward and reverse dependency indices disagree",
                details={
                    "missing_reverse": sorted(forward_pairs - reverse_pairs)[:5],
                    "missing_forward": sorted(reverse_pairs - forward_pairs)[:5],
                },
            )
