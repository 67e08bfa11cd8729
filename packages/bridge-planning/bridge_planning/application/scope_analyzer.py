"""
ScopeAnalyzer - build scope impact analysis

Turns a BuildInstruction into a BuildPlan: the affected component set, a
dependency-respecting build order, a time estimate and hot-swap/restart verdicts.

Planning is total over any target string. Components missing from the catalog
or graph fall back to defaults (default build time, not hot-swappable).

Algorithm (non-Full scopes):
    1. Start with the primary target
    2. Widen by scope (dependents / parent module / submodules / system modules)
    3. Order the affected set topologically (dependencies first)
    4. Sum catalog build times
    5. Decide hot-swap and restart
"""

from dataclasses import replace

from bridge_shared.common.exceptions import CyclicBuildOrderError
from bridge_shared.common.observability import LogPerformance, get_logger
from bridge_shared.infra.config import PlanningConfig, settings

from ..domain.models import BuildAction, BuildInstruction, BuildPlan, BuildScope
from ..domain.version import ComponentVersion, VersionComparator
from ..ports import ComponentCatalogPort, DependencyGraphPort
from .hierarchy import ComponentHierarchy

logger = get_logger(__name__)


class ScopeAnalyzer:
    """
    Build scope analyzer.

    Collaborators are injected; nothing is read from process-wide registries.

    Example:
        analyzer = ScopeAnalyzer(catalog, graph, hierarchy)
        plan = analyzer.analyze_impact(
            BuildInstruction(target="module.dashboard", scope=BuildScope.MODULE, action=BuildAction.ENHANCE)
        )
        plan = analyzer.optimize_build_plan(plan)
        print(plan.summary())
    """

    def __init__(
        self,
        catalog: ComponentCatalogPort,
        graph: DependencyGraphPort,
        hierarchy: ComponentHierarchy | None = None,
        config: PlanningConfig | None = None,
        comparator: VersionComparator | None = None,
    ):
        """
        Args:
            catalog: Static component metadata
            graph: Dependency relation with reverse index
            hierarchy: Component tree and static module structure
            config: Planning constants (default: settings.planning)
            comparator: Version policy used by ``can_hot_swap_version``
        """
        self.catalog = catalog
        self.graph = graph
        self.hierarchy = hierarchy or ComponentHierarchy()
        self.config = config or settings.planning
        self.comparator = comparator or VersionComparator()

    # ------------------------------------------------------------------
    # Planning API
    # ------------------------------------------------------------------

    def analyze_impact(self, instruction: BuildInstruction) -> BuildPlan:
        """
        Compute the build plan for ``instruction``.

        Never raises on unknown identifiers. Raises ``CyclicBuildOrderError`` only
        when ``strict_cycles`` is enabled and the affected set is cyclic.
        """
        if instruction.scope == BuildScope.FULL:
            return self._full_plan(instruction)

        with LogPerformance(logger, "analyze_impact", target=instruction.target, scope=instruction.scope.value):
            affected, tests = self._affected_components(instruction)

            documents: set[str] = set()
            if instruction.action.updates_documents:
                documents.add(f"{instruction.target}{self.config.doc_suffix}")
                documents.add(self.config.manifest_document)

            build_order, warnings = self._build_order(affected)
            estimated_time = self.calculate_total_build_time(affected)
            can_hot_swap = instruction.hot_swappable and all(self._catalog_hot_swappable(c) for c in affected)
            requires_restart = instruction.scope == BuildScope.SYSTEM or any(self.is_system_component(c) for c in affected)

            plan = BuildPlan(
                primary_target=instruction.target,
                dependent_components=tuple(sorted(affected - {instruction.target})),
                tests_to_run=tuple(sorted(tests)),
                documents_to_update=tuple(sorted(documents)),
                estimated_build_time=estimated_time,
                build_order=tuple(build_order),
                can_hot_swap=can_hot_swap,
                requires_restart=requires_restart,
                warnings=tuple(warnings),
            )

        logger.info(
            "impact_analyzed",
            target=plan.primary_target,
            scope=instruction.scope.value,
            affected=plan.component_count,
            estimated_time=plan.estimated_build_time,
            hot_swap=plan.can_hot_swap,
            restart=plan.requires_restart,
        )
        return plan

    def optimize_build_plan(self, plan: BuildPlan) -> BuildPlan:
        """
        Refine duration only; the affected set and order are never changed.

        1. A lone hot-swappable component is capped at ``hot_swap_time_cap``.
        2. When more than one component has no in-set dependency, the estimate is
           scaled by ``parallel_speedup``. This is a flat heuristic standing in for
           parallel scheduling, not a critical-path computation.
        """
        estimated_time = plan.estimated_build_time

        if plan.can_hot_swap and not plan.dependent_components:
            estimated_time = min(self.config.hot_swap_time_cap, estimated_time)

        groups = self.parallel_groups(plan.build_order)
        if groups and len(groups[0]) > 1:
            estimated_time = int(estimated_time * self.config.parallel_speedup)

        if estimated_time != plan.estimated_build_time:
            logger.info(
                "plan_optimized",
                target=plan.primary_target,
                before=plan.estimated_build_time,
                after=estimated_time,
            )
        return replace(plan, estimated_build_time=estimated_time)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    def check_dependencies(self, component_id: str) -> frozenset[str]:
        """Declared dependencies of ``component_id`` (empty if unknown)."""
        return self.graph.dependencies_of(component_id)

    def can_hot_swap(self, component_id: str) -> bool:
        if self.is_system_component(component_id):
            return False
        return self._catalog_hot_swappable(component_id)

    def can_hot_swap_version(self, component_id: str, current: ComponentVersion, target: ComponentVersion) -> bool:
        """Hot-swap check for a concrete version change: eligible component and compatible upgrade."""
        return self.can_hot_swap(component_id) and self.comparator.is_compatible_upgrade(current, target)

    def requires_full_rebuild(self, instruction: BuildInstruction) -> bool:
        # Protocol changes ripple through every module
        if instruction.target == self.config.cross_cutting_component:
            return True
        return instruction.action == BuildAction.UPDATE and instruction.scope == BuildScope.SYSTEM

    def is_system_component(self, component_id: str) -> bool:
        return component_id.startswith(self.config.system_prefix)

    def calculate_total_build_time(self, components: set[str] | frozenset[str]) -> int:
        total = 0
        for component_id in components:
            entry = self.catalog.get(component_id)
            total += entry.build_time if entry is not None else self.config.default_build_time
        return total

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def determine_build_order(self, components: set[str] | frozenset[str]) -> list[str]:
        """Dependency-respecting order restricted to ``components``."""
        order, _ = self._build_order(components)
        return order

    def parallel_groups(self, build_order: tuple[str, ...] | list[str]) -> list[list[str]]:
        """
        Layer the build order by in-set dependency depth.

        Group 0 holds the components with no in-set dependency; each later group
        depends only on earlier ones. A back edge closing a cycle is ignored, so the
        cycle member reached first keeps the level its other dependencies give it.
        """
        members = set(build_order)
        level: dict[str, int] = {}
        for component_id in build_order:
            deps = [d for d in self.graph.dependencies_of(component_id) if d in members and d in level]
            level[component_id] = 1 + max((level[d] for d in deps), default=-1)

        groups: dict[int, list[str]] = {}
        for component_id in build_order:
            groups.setdefault(level[component_id], []).append(component_id)
        return [groups[k] for k in sorted(groups)]

    def _build_order(self, components: set[str] | frozenset[str]) -> tuple[list[str], list[str]]:
        """
        Depth-first post-order over in-set dependencies.

        A visited guard stops recursion on cycles; the order is then best effort
        and the cycle is reported (or raised in strict mode).
        """
        sorted_order: list[str] = []
        visited: set[str] = set()
        on_stack: set[str] = set()
        stack: list[str] = []
        cycles: list[tuple[str, str]] = []

        def visit(component_id: str) -> None:
            if component_id in visited:
                if component_id in on_stack:
                    cycles.append((stack[-1], component_id))
                return
            visited.add(component_id)
            on_stack.add(component_id)
            stack.append(component_id)

            for dependency in sorted(self.graph.dependencies_of(component_id)):
                if dependency in components:
                    visit(dependency)

            stack.pop()
            on_stack.discard(component_id)
            sorted_order.append(component_id)

        for component_id in sorted(components):
            visit(component_id)

        warnings = []
        if cycles:
            edges = [f"{source} -> {target}" for source, target in cycles]
            logger.warning("build_order_cycle_detected", edges=edges)
            if self.config.strict_cycles:
                raise CyclicBuildOrderError("Affected components form a dependency cycle", details={"edges": edges})
            warnings = [f"dependency cycle: {edge}" for edge in edges]

        return sorted_order, warnings

    # ------------------------------------------------------------------
    # Scope expansion
    # ------------------------------------------------------------------

    def _affected_components(self, instruction: BuildInstruction) -> tuple[set[str], set[str]]:
        target = instruction.target
        affected = {target}
        tests = set(instruction.tests)

        if instruction.scope == BuildScope.COMPONENT:
            dependents = self.graph.dependents_of(target)
            if dependents:
                logger.info("dependents_found", target=target, dependents=sorted(dependents))
                affected |= dependents

        elif instruction.scope == BuildScope.SUBMODULE:
            parent_module = self.hierarchy.parent_module_of(target)
            if parent_module is not None:
                affected.add(parent_module)
                tests.add(f"{parent_module}Tests")

        elif instruction.scope == BuildScope.MODULE:
            affected |= self.hierarchy.submodules_of(target)
            affected |= self.graph.transitive_dependents(target)

        elif instruction.scope == BuildScope.SYSTEM:
            # Core changes conservatively touch every top-level module
            if self.is_system_component(target):
                affected.update(self.hierarchy.top_level_modules())

        return affected, tests

    def _full_plan(self, instruction: BuildInstruction) -> BuildPlan:
        logger.info("impact_analyzed", target=instruction.target, scope=BuildScope.FULL.value, full=True)
        return BuildPlan(
            primary_target=instruction.target,
            dependent_components=(),
            tests_to_run=("all",),
            documents_to_update=("all",),
            estimated_build_time=self.config.full_rebuild_time,
            build_order=("full",),
            can_hot_swap=False,
            requires_restart=True,
        )

    def _catalog_hot_swappable(self, component_id: str) -> bool:
        entry = self.catalog.get(component_id)
        return entry.hot_swappable if entry is not None else False
