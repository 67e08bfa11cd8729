"""
Component Hierarchy

Owned tree of component nodes. Guards the two structural invariants:

1. Weight ordering: a child's level weight is strictly lower than its parent's
2. Acyclicity: a node never becomes a descendant of itself

Every structural mutation validates first and mutates second under one lock,
so a failed call leaves the tree untouched.
"""

import threading
from collections import deque
from collections.abc import Iterator

from bridge_shared.common.exceptions import (
    CannotRemoveError,
    ComponentExecutionError,
    ComponentNotFoundError,
    CycleViolation,
    HasDependentsError,
    HierarchyError,
    HierarchyViolation,
    InvalidReorderError,
    MaxChildrenExceededError,
)
from bridge_shared.common.observability import get_logger, log_error
from bridge_shared.infra.config import HierarchyConfig, settings

from ..domain.component import ComponentNode
from ..domain.models import ComponentDescriptor, ComponentMessage, ComponentStatus, HierarchyLevel
from ..domain.structure import ModuleStructure
from ..infrastructure.dependency_graph import DependencyGraph
from ..ports import ComponentFactoryPort
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

logger = get_logger(__name__)

_CLEANABLE = frozenset({ComponentStatus.READY, ComponentStatus.ERROR, ComponentStatus.SUSPENDED})


class ComponentHierarchy:
    """
    Component tree manager.

    Example:
        hierarchy = ComponentHierarchy()
        hierarchy.add_root(app)
        hierarchy.add_child(dashboard, app)
        hierarchy.move_component(stats_widget, dashboard)

        hierarchy.find_components(HierarchyLevel.MODULE)
        hierarchy.validate_hierarchy(app)
    """

    def __init__(
        self,
        config: HierarchyConfig | None = None,
        structure: ModuleStructure | None = None,
        factory: ComponentFactoryPort | None = None,
        graph: DependencyGraph | None = None,
    ):
        """
        Args:
            config: Tree limits (default: settings.hierarchy)
            structure: Static module structure used for nodes not loaded in the tree
            factory: Builds nodes for ``spawn``
            graph: Dependency graph kept in sync by ``add_dependency``/``remove_dependency``
        """
        self.config = config or settings.hierarchy
        self.structure = structure or ModuleStructure()
        self.factory = factory
        self.graph = graph

        self._roots: list[ComponentNode] = []
        self._registry: dict[str, ComponentNode] = {}
        self._lock = threading.RLock()

        self.rules: list[HierarchyRule] = [
            HierarchyWeightRule(),
            MaxDepthRule(self.config.max_depth),
            MaxChildrenRule(self.config.max_children),
            MaxDependenciesRule(self.config.max_dependencies),
        ]

    # ------------------------------------------------------------------
    # Structural operations
    # ------------------------------------------------------------------

    def add_root(self, node: ComponentNode) -> None:
        """Register ``node`` (and its subtree) as a root owned by the hierarchy."""
        with self._lock:
            if node.parent_id is not None:
                raise HierarchyError(f"{node.id} already has a parent", details={"parent": node.parent_id})
            self._check_subtree_registrable(node)
            if node not in self._roots:
                self._roots.append(node)
            self._register(node)
        logger.info("root_added", component=node.id, level=node.level.value)

    def add_child(self, child: ComponentNode, parent: ComponentNode) -> None:
        """
        Attach ``child`` under ``parent``, detaching it from any prior parent.

        An unregistered ``parent`` is registered as a root.

        Raises:
            CycleViolation: parent is child itself or one of its descendants
            HierarchyViolation: child.level.weight >= parent.level.weight
            MaxChildrenExceededError: parent is full
        """
        with self._lock:
            self._validate_attach(child, parent)
            previous_parent = child.parent_id
            self._attach(child, parent)
        logger.info("child_added", parent=parent.id, child=child.id, previous_parent=previous_parent)

    def move_component(self, node: ComponentNode, new_parent: ComponentNode) -> None:
        """
        Move a registered node under ``new_parent``.

        Both attach invariants are checked before anything changes; on failure
        the tree is left exactly as it was.
        """
        with self._lock:
            if self._registry.get(node.id) is not node:
                raise ComponentNotFoundError(f"Component not in hierarchy: {node.id}")
            self._validate_attach(node, new_parent)
            previous_parent = node.parent_id
            self._attach(node, new_parent)
        logger.info("component_moved", component=node.id, source=previous_parent, destination=new_parent.id)

    def remove_component(self, node: ComponentNode) -> None:
        """
        Tear down ``node`` and its subtree.

        Every node in the subtree must be unloadable and may only be depended on
        from inside the subtree; otherwise nothing changes. Once those checks pass
        the removal always completes: every cleanup hook runs, children first, and
        the whole subtree is detached even if a hook fails. The first hook failure
        is raised afterwards.

        Raises:
            ComponentNotFoundError: node is not registered
            CannotRemoveError: a node in the subtree is executing
            HasDependentsError: a node outside the subtree depends on the subtree
            ComponentExecutionError: a cleanup hook failed (the subtree is still removed)
        """
        with self._lock:
            if self._registry.get(node.id) is not node:
                raise ComponentNotFoundError(f"Component not in hierarchy: {node.id}")

            subtree = [node, *self.descendants_of(node)]
            subtree_ids = {n.id for n in subtree}

            for member in subtree:
                if member.status == ComponentStatus.EXECUTING:
                    raise CannotRemoveError(
                        f"Component is executing: {member.id}", details={"component": member.id}
                    )
                outside = sorted(d.id for d in self.dependents_of(member.id) if d.id not in subtree_ids)
                if outside:
                    raise HasDependentsError(
                        f"Component has dependents: {member.id}",
                        details={"component": member.id, "dependents": outside},
                    )

            failures: list[ComponentExecutionError] = []
            # Children first
            for member in reversed(subtree):
                if member.status in _CLEANABLE:
                    try:
                        member.cleanup()
                    except ComponentExecutionError as e:
                        failures.append(e)

            self._detach(node)
            for member in subtree:
                self._registry.pop(member.id, None)
                if self.graph is not None:
                    self.graph.remove_component(member.id)

        logger.info("component_removed", component=node.id, subtree_size=len(subtree))
        if failures:
            log_error(logger, "component_cleanup_failed", failures[0], component=node.id, failed=len(failures))
            raise failures[0]

    def reorder_children(self, parent: ComponentNode, ordered_children: list[ComponentNode]) -> None:
        with self._lock:
            current = [c.id for c in parent.children]
            requested = [c.id for c in ordered_children]
            if sorted(current) != sorted(requested):
                raise InvalidReorderError(
                    "Child list mismatch", details={"parent": parent.id, "expected": sorted(current)}
                )
            by_id = {c.id: c for c in parent.children}
            parent.children[:] = [by_id[cid] for cid in requested]

    def spawn(self, descriptor: ComponentDescriptor, parent: ComponentNode | None = None) -> ComponentNode:
        """Create a node through the injected factory and attach it (as a root when ``parent`` is None)."""
        if self.factory is None:
            raise HierarchyError("No component factory configured")
        node = self.factory.create(descriptor)
        if parent is None:
            self.add_root(node)
        else:
            self.add_child(node, parent)
        return node

    # ------------------------------------------------------------------
    # Dependencies (by id, never ownership)
    # ------------------------------------------------------------------

    def add_dependency(self, dependent: ComponentNode, dependency: ComponentNode) -> None:
        """
        Record that ``dependent`` depends on ``dependency``.

        Raises:
            CycleViolation: the dependency relation would become cyclic
        """
        with self._lock:
            if dependent.id == dependency.id or self._depends_on(dependency.id, dependent.id):
                raise CycleViolation(
                    "Circular dependency", details={"chain": [dependent.id, dependency.id]}
                )
            dependent.dependencies.add(dependency.id)
            if self.graph is not None:
                self.graph.add_edge(dependent.id, dependency.id)
        logger.debug("dependency_added", source=dependent.id, target=dependency.id)

    def remove_dependency(self, dependent: ComponentNode, dependency: ComponentNode) -> None:
        with self._lock:
            dependent.dependencies.discard(dependency.id)
            if self.graph is not None:
                self.graph.remove_edge(dependent.id, dependency.id)

    def resolve_dependencies(self, node: ComponentNode) -> list[ComponentNode]:
        """
        Raises:
            ComponentNotFoundError: a dependency id is not registered
        """
        resolved = []
        for dependency_id in sorted(node.dependencies):
            dependency = self._registry.get(dependency_id)
            if dependency is None:
                raise ComponentNotFoundError(
                    f"Missing dependency: {dependency_id}", details={"component": node.id}
                )
            resolved.append(dependency)
        return resolved

    def dependents_of(self, component_id: str) -> list[ComponentNode]:
        """Registered nodes that list ``component_id`` as a dependency."""
        with self._lock:
            return [
                n for n in self._registry.values() if component_id in n.dependencies and n.id != component_id
            ]

    def can_unload(self, node: ComponentNode) -> bool:
        """True iff no other node depends on ``node`` and it is not executing."""
        return node.can_unload() and not self.dependents_of(node.id)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    @property
    def roots(self) -> list[ComponentNode]:
        return list(self._roots)

    def find_component(self, component_id: str) -> ComponentNode | None:
        return self._registry.get(component_id)

    def find_components(self, level: HierarchyLevel) -> list[ComponentNode]:
        return [n for n in self.walk() if n.level == level]

    def parent_of(self, node: ComponentNode) -> ComponentNode | None:
        if node.parent_id is None:
            return None
        return self._registry.get(node.parent_id)

    def children_of(self, node: ComponentNode) -> list[ComponentNode]:
        return list(node.children)

    def ancestors_of(self, node: ComponentNode) -> list[ComponentNode]:
        """Immediate parent first, root last."""
        ancestors = []
        seen = {node.id}
        current = self.parent_of(node)
        while current is not None and current.id not in seen:
            ancestors.append(current)
            seen.add(current.id)
            current = self.parent_of(current)
        return ancestors

    def descendants_of(self, node: ComponentNode) -> list[ComponentNode]:
        """Depth-first pre-order."""
        descendants = []
        stack = list(reversed(node.children))
        while stack:
            current = stack.pop()
            descendants.append(current)
            stack.extend(reversed(current.children))
        return descendants

    def root_of(self, node: ComponentNode) -> ComponentNode:
        ancestors = self.ancestors_of(node)
        return ancestors[-1] if ancestors else node

    def walk(self) -> Iterator[ComponentNode]:
        """Every node reachable from a root, depth-first."""
        for root in list(self._roots):
            yield root
            yield from self.descendants_of(root)

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._registry

    def __len__(self) -> int:
        return len(self._registry)

    # ------------------------------------------------------------------
    # Module structure
    # ------------------------------------------------------------------

    def parent_module_of(self, component_id: str) -> str | None:
        """Owning module: nearest Module ancestor in the tree, else the static structure."""
        node = self._registry.get(component_id)
        if node is not None:
            for ancestor in self.ancestors_of(node):
                if ancestor.level == HierarchyLevel.MODULE:
                    return ancestor.id
        return self.structure.parent_module_of(component_id)

    def submodules_of(self, module_id: str) -> frozenset[str]:
        """Declared submodules plus Submodule-level descendants loaded in the tree."""
        submodules = set(self.structure.submodules_of(module_id))
        node = self._registry.get(module_id)
        if node is not None:
            submodules.update(d.id for d in self.descendants_of(node) if d.level == HierarchyLevel.SUBMODULE)
        return frozenset(submodules)

    def top_level_modules(self) -> list[str]:
        modules = list(self.structure.top_level_modules)
        for node in self.find_components(HierarchyLevel.MODULE):
            if node.id not in modules:
                modules.append(node.id)
        return modules

    # ------------------------------------------------------------------
    # Messaging
    # ------------------------------------------------------------------

    def bubble_message(self, message: ComponentMessage, source: ComponentNode) -> list[str]:
        """Deliver to each ancestor until one sets ``stop_propagation``. Returns receiver ids."""
        delivered = []
        for ancestor in self.ancestors_of(source):
            ancestor.receive_message(message)
            delivered.append(ancestor.id)
            if message.stop_propagation:
                break
        return delivered

    def broadcast_message(self, message: ComponentMessage, source: ComponentNode) -> list[str]:
        delivered = []
        for descendant in self.descendants_of(source):
            descendant.receive_message(message)
            delivered.append(descendant.id)
        return delivered

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_hierarchy(self, root: ComponentNode) -> HierarchyValidation:
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []
        visited: set[str] = set()

        with self._lock:
            queue = deque([root])
            while queue:
                node = queue.popleft()
                if node.id in visited:
                    errors.append(ValidationIssue(node.id, "Duplicate component ID detected", Severity.CRITICAL))
                    continue
                visited.add(node.id)

                for rule in self.rules:
                    issue = rule.validate(node, self)
                    if issue is not None:
                        errors.append(issue)

                for child in node.children:
                    if child.parent_id != node.id:
                        errors.append(
                            ValidationIssue(child.id, "Inconsistent parent-child relationship", Severity.HIGH)
                        )
                    queue.append(child)

            root_id = self.root_of(root).id
            orphaned = sorted(
                cid for cid, n in self._registry.items() if cid not in visited and self.root_of(n).id == root_id
            )

        for orphan_id in orphaned:
            warnings.append(ValidationIssue(orphan_id, "Orphaned component not reachable from root", Severity.LOW))

        return HierarchyValidation(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            component_count=len(visited),
            orphaned_count=len(orphaned),
        )

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _validate_attach(self, child: ComponentNode, parent: ComponentNode) -> None:
        if child.id == parent.id or self._is_ancestor(child, parent):
            raise CycleViolation(
                f"{parent.id} is {child.id} or one of its descendants",
                details={"child": child.id, "parent": parent.id},
            )
        if not parent.level.can_contain(child.level):
            raise HierarchyViolation(
                f"Cannot add {child.level.value} as child of {parent.level.value}",
                details={
                    "child": child.id,
                    "child_weight": child.level.weight,
                    "parent": parent.id,
                    "parent_weight": parent.level.weight,
                },
            )
        if child not in parent.children and len(parent.children) >= self.config.max_children:
            raise MaxChildrenExceededError(
                "Maximum children limit exceeded", details={"parent": parent.id, "limit": self.config.max_children}
            )
        self._check_subtree_registrable(child)
        self._check_subtree_registrable(parent)

    def _is_ancestor(self, candidate: ComponentNode, node: ComponentNode) -> bool:
        """Ancestor scan upward from ``node``; also catches a descendant not yet registered."""
        current: ComponentNode | None = node
        seen: set[str] = set()
        while current is not None and current.id not in seen:
            if current.id == candidate.id:
                return True
            seen.add(current.id)
            current = self.parent_of(current)
        return any(d.id == node.id for d in self.descendants_of(candidate))

    def _check_registrable(self, node: ComponentNode) -> None:
        existing = self._registry.get(node.id)
        if existing is not None and existing is not node:
            raise HierarchyError(f"Duplicate component id: {node.id}")

    def _check_subtree_registrable(self, node: ComponentNode) -> None:
        """Every id in the subtree is unique within it and free or already bound to that very node."""
        seen: dict[str, ComponentNode] = {}
        for member in (node, *self.descendants_of(node)):
            if seen.setdefault(member.id, member) is not member:
                raise HierarchyError(f"Duplicate component id: {member.id}")
            self._check_registrable(member)

    def _attach(self, child: ComponentNode, parent: ComponentNode) -> None:
        if parent.id not in self._registry:
            self._roots.append(parent)
            self._register(parent)
        self._detach(child)
        child.parent_id = parent.id
        parent.children.append(child)
        self._register(child)

    def _detach(self, node: ComponentNode) -> None:
        previous = self.parent_of(node)
        if previous is not None:
            previous.children[:] = [c for c in previous.children if c.id != node.id]
        if node in self._roots:
            self._roots.remove(node)
        node.parent_id = None

    def _register(self, node: ComponentNode) -> None:
        self._registry[node.id] = node
        for child in node.children:
            child.parent_id = node.id
            self._register(child)

    def _depends_on(self, source_id: str, target_id: str) -> bool:
        """True if ``target_id`` is reachable from ``source_id`` over node dependency sets."""
        visited: set[str] = set()
        queue = deque([source_id])
        while queue:
            current = queue.popleft()
            if current == target_id:
                return True
            if current in visited:
                continue
            visited.add(current)
            node = self._registry.get(current)
            if node is not None:
                queue.extend(node.dependencies)
        return False
