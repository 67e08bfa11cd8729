"""
Component Hierarchy Tests

Test Coverage:
- Weight and cycle invariants on add/move (atomic failure)
- Removal, reorder, dependencies, unload checks
- Traversal and module structure queries
- Messaging and validation
"""

import pytest

from bridge_planning.application import ComponentHierarchy
from bridge_planning.domain import (
    ComponentDescriptor,
    ComponentMessage,
    ComponentStatus,
    HierarchyLevel,
    MessageType,
)
from bridge_planning.infrastructure import DependencyGraph
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
from bridge_shared.infra.config import HierarchyConfig
from tests.fakes import FakeComponentFactory, RecordingBehavior

L = HierarchyLevel


@pytest.fixture
def tree(hierarchy, make_node):
    """app > module.dashboard > {stats, activity}, app > module.projects"""
    nodes = {
        "app": make_node("app", L.APP),
        "module.dashboard": make_node("module.dashboard", L.MODULE),
        "module.projects": make_node("module.projects", L.MODULE),
        "dashboard.widgets.stats": make_node("dashboard.widgets.stats", L.SUBMODULE),
        "dashboard.widgets.activity": make_node("dashboard.widgets.activity", L.SUBMODULE),
    }
    hierarchy.add_root(nodes["app"])
    hierarchy.add_child(nodes["module.dashboard"], nodes["app"])
    hierarchy.add_child(nodes["module.projects"], nodes["app"])
    hierarchy.add_child(nodes["dashboard.widgets.stats"], nodes["module.dashboard"])
    hierarchy.add_child(nodes["dashboard.widgets.activity"], nodes["module.dashboard"])
    return nodes


class TestAddChild:
    """Structural invariants on attach"""

    def test_add_child_links_both_sides(self, tree, hierarchy):
        stats = tree["dashboard.widgets.stats"]
        assert stats.parent_id == "module.dashboard"
        assert stats in tree["module.dashboard"].children
        assert hierarchy.parent_of(stats) is tree["module.dashboard"]
        assert len(hierarchy) == 5

    def test_app_under_module_rejected(self, hierarchy, make_node):
        module = make_node("module.dashboard", L.MODULE)
        app = make_node("app", L.APP)
        with pytest.raises(HierarchyViolation):
            hierarchy.add_child(app, module)
        assert module.children == []
        assert app.parent_id is None

    def test_equal_weight_rejected(self, hierarchy, make_node):
        with pytest.raises(HierarchyViolation):
            hierarchy.add_child(make_node("b", L.MODULE), make_node("a", L.MODULE))

    def test_microservice_under_widget_allowed(self, hierarchy, make_node):
        widget = make_node("w", L.WIDGET)
        service = make_node("svc", L.MICROSERVICE)
        hierarchy.add_child(service, widget)
        assert service.parent_id == "w"

    def test_adding_ancestor_under_descendant_is_cycle(self, hierarchy, make_node):
        """The cycle check wins over the weight check"""
        x = make_node("x", L.MODULE)
        child_of_x = make_node("x.child", L.SUBMODULE)
        hierarchy.add_child(child_of_x, x)

        with pytest.raises(CycleViolation):
            hierarchy.add_child(x, child_of_x)
        assert x.parent_id is None
        assert child_of_x.children == []

    def test_self_parent_is_cycle(self, hierarchy, make_node):
        node = make_node("x", L.MODULE)
        with pytest.raises(CycleViolation):
            hierarchy.add_child(node, node)

    def test_unregistered_parent_becomes_root(self, hierarchy, make_node):
        parent = make_node("app", L.APP)
        hierarchy.add_child(make_node("m", L.MODULE), parent)
        assert hierarchy.roots == [parent]

    def test_duplicate_id_rejected(self, tree, hierarchy, make_node):
        impostor = make_node("dashboard.widgets.stats", L.SUBMODULE)
        with pytest.raises(HierarchyError):
            hierarchy.add_child(impostor, tree["module.projects"])

    def test_duplicate_id_inside_attached_subtree_rejected(self, tree, hierarchy, make_node):
        """Ids deeper in the incoming subtree are checked before anything changes"""
        original_stats = tree["dashboard.widgets.stats"]
        module = make_node("module.terminal", L.MODULE)
        module.children.append(make_node("dashboard.widgets.stats", L.SUBMODULE, parent_id="module.terminal"))

        with pytest.raises(HierarchyError):
            hierarchy.add_child(module, tree["app"])

        assert module.parent_id is None
        assert module not in tree["app"].children
        assert hierarchy.find_component("dashboard.widgets.stats") is original_stats
        hierarchy.remove_component(original_stats)
        assert "dashboard.widgets.stats" not in hierarchy

    def test_duplicate_id_within_subtree_rejected(self, hierarchy, make_node):
        module = make_node("m", L.MODULE)
        module.children.extend([make_node("w", L.WIDGET), make_node("w", L.WIDGET)])
        with pytest.raises(HierarchyError):
            hierarchy.add_root(module)
        assert len(hierarchy) == 0

    def test_add_root_with_registered_descendant_id_rejected(self, tree, hierarchy, make_node):
        app = make_node("app.secondary", L.APP)
        app.children.append(make_node("module.projects", L.MODULE, parent_id="app.secondary"))
        with pytest.raises(HierarchyError):
            hierarchy.add_root(app)
        assert hierarchy.find_component("module.projects") is tree["module.projects"]
        assert app not in hierarchy.roots

    def test_max_children(self, make_node):
        hierarchy = ComponentHierarchy(config=HierarchyConfig(max_children=1))
        parent = make_node("m", L.MODULE)
        hierarchy.add_child(make_node("a", L.SUBMODULE), parent)
        with pytest.raises(MaxChildrenExceededError):
            hierarchy.add_child(make_node("b", L.SUBMODULE), parent)


class TestMoveComponent:
    """Moves are validated before any change"""

    def test_move_reparents(self, tree, hierarchy):
        stats = tree["dashboard.widgets.stats"]
        hierarchy.move_component(stats, tree["module.projects"])

        assert stats.parent_id == "module.projects"
        assert stats not in tree["module.dashboard"].children
        assert stats in tree["module.projects"].children

    def test_failed_move_leaves_tree_unchanged(self, tree, hierarchy, make_node):
        dashboard = tree["module.dashboard"]
        before = [c.id for c in dashboard.children]

        with pytest.raises(HierarchyViolation):
            hierarchy.move_component(dashboard, make_node("widget", L.WIDGET))
        with pytest.raises(CycleViolation):
            hierarchy.move_component(dashboard, tree["dashboard.widgets.stats"])

        assert dashboard.parent_id == "app"
        assert [c.id for c in dashboard.children] == before
        assert dashboard in tree["app"].children

    def test_move_unregistered_rejected(self, tree, hierarchy, make_node):
        with pytest.raises(ComponentNotFoundError):
            hierarchy.move_component(make_node("ghost", L.SUBMODULE), tree["module.projects"])


class TestRemoveComponent:
    def test_remove_subtree(self, tree, hierarchy):
        behavior = RecordingBehavior()
        stats = tree["dashboard.widgets.stats"]
        stats.behavior = behavior
        stats.initialize()

        hierarchy.remove_component(tree["module.dashboard"])

        assert "module.dashboard" not in hierarchy
        assert "dashboard.widgets.stats" not in hierarchy
        assert tree["module.dashboard"] not in tree["app"].children
        assert behavior.calls == ["initialize", "cleanup"]
        assert stats.status == ComponentStatus.CLEANING

    def test_cleanup_failure_still_removes_subtree(self, tree, hierarchy):
        """A failing cleanup hook does not leave cleaned nodes in the live tree"""
        dashboard = tree["module.dashboard"]
        stats = tree["dashboard.widgets.stats"]
        activity = tree["dashboard.widgets.activity"]
        stats.behavior = RecordingBehavior(fail_on={"cleanup"})
        for node in (dashboard, stats, activity):
            node.initialize()

        with pytest.raises(ComponentExecutionError):
            hierarchy.remove_component(dashboard)

        for component_id in ("module.dashboard", "dashboard.widgets.stats", "dashboard.widgets.activity"):
            assert component_id not in hierarchy
        assert dashboard not in tree["app"].children
        assert stats.status == ComponentStatus.ERROR
        assert activity.status == ComponentStatus.CLEANING
        assert dashboard.status == ComponentStatus.CLEANING

    def test_remove_executing_rejected(self, tree, hierarchy):
        tree["dashboard.widgets.stats"].state.status = ComponentStatus.EXECUTING
        with pytest.raises(CannotRemoveError):
            hierarchy.remove_component(tree["module.dashboard"])
        assert "module.dashboard" in hierarchy

    def test_remove_with_outside_dependents_rejected(self, tree, hierarchy):
        hierarchy.add_dependency(tree["module.projects"], tree["module.dashboard"])
        with pytest.raises(HasDependentsError):
            hierarchy.remove_component(tree["module.dashboard"])

    def test_inside_dependents_do_not_block(self, tree, hierarchy):
        hierarchy.add_dependency(tree["dashboard.widgets.stats"], tree["module.dashboard"])
        hierarchy.remove_component(tree["module.dashboard"])
        assert len(hierarchy) == 2

    def test_remove_unregistered_rejected(self, hierarchy, make_node):
        with pytest.raises(ComponentNotFoundError):
            hierarchy.remove_component(make_node("ghost"))


class TestReorderAndSpawn:
    def test_reorder_children(self, tree, hierarchy):
        dashboard = tree["module.dashboard"]
        hierarchy.reorder_children(dashboard, [tree["dashboard.widgets.activity"], tree["dashboard.widgets.stats"]])
        assert [c.id for c in dashboard.children] == ["dashboard.widgets.activity", "dashboard.widgets.stats"]

    def test_reorder_mismatch_rejected(self, tree, hierarchy):
        with pytest.raises(InvalidReorderError):
            hierarchy.reorder_children(tree["module.dashboard"], [tree["dashboard.widgets.stats"]])

    def test_spawn_through_factory(self, make_node):
        factory = FakeComponentFactory()
        hierarchy = ComponentHierarchy(factory=factory)
        app = make_node("app", L.APP)
        hierarchy.add_root(app)

        node = hierarchy.spawn(
            ComponentDescriptor(id="module.terminal", name="Terminal", level=L.MODULE, version="2.1.0"),
            parent=app,
        )

        assert factory.created == [node]
        assert node.parent_id == "app"
        assert str(node.version) == "2.1.0"

    def test_spawn_without_factory_rejected(self, hierarchy):
        with pytest.raises(HierarchyError):
            hierarchy.spawn(ComponentDescriptor(id="x", name="x", level=L.MODULE))


class TestDependencies:
    """Dependencies by id, mirrored into a graph"""

    def test_add_dependency_mirrors_graph(self, make_node):
        graph = DependencyGraph()
        hierarchy = ComponentHierarchy(graph=graph)
        a, b = make_node("a"), make_node("b")
        hierarchy.add_root(a)
        hierarchy.add_root(b)

        hierarchy.add_dependency(a, b)
        assert a.dependencies == {"b"}
        assert graph.dependents_of("b") == {"a"}

        hierarchy.remove_dependency(a, b)
        assert a.dependencies == set()
        assert graph.edges() == []

    def test_circular_dependency_rejected(self, tree, hierarchy):
        hierarchy.add_dependency(tree["module.projects"], tree["module.dashboard"])
        with pytest.raises(CycleViolation):
            hierarchy.add_dependency(tree["module.dashboard"], tree["module.projects"])

    def test_resolve_dependencies(self, tree, hierarchy):
        hierarchy.add_dependency(tree["module.projects"], tree["module.dashboard"])
        assert hierarchy.resolve_dependencies(tree["module.projects"]) == [tree["module.dashboard"]]

    def test_resolve_missing_dependency(self, tree, hierarchy):
        tree["module.projects"].dependencies.add("ghost")
        with pytest.raises(ComponentNotFoundError):
            hierarchy.resolve_dependencies(tree["module.projects"])

    def test_can_unload(self, tree, hierarchy):
        dashboard = tree["module.dashboard"]
        assert hierarchy.can_unload(dashboard)

        hierarchy.add_dependency(tree["module.projects"], dashboard)
        assert not hierarchy.can_unload(dashboard)
        assert [n.id for n in hierarchy.dependents_of("module.dashboard")] == ["module.projects"]


class TestTraversal:
    def test_find(self, tree, hierarchy):
        assert hierarchy.find_component("module.projects") is tree["module.projects"]
        assert hierarchy.find_component("ghost") is None
        assert {n.id for n in hierarchy.find_components(L.MODULE)} == {"module.dashboard", "module.projects"}

    def test_descendants_depth_first(self, tree, hierarchy):
        assert [n.id for n in hierarchy.descendants_of(tree["app"])] == [
            "module.dashboard",
            "dashboard.widgets.stats",
            "dashboard.widgets.activity",
            "module.projects",
        ]

    def test_walk_includes_roots(self, tree, hierarchy):
        assert [n.id for n in hierarchy.walk()][0] == "app"
        assert len(list(hierarchy.walk())) == 5

    def test_ancestors_and_root(self, tree, hierarchy):
        stats = tree["dashboard.widgets.stats"]
        assert [n.id for n in hierarchy.ancestors_of(stats)] == ["module.dashboard", "app"]
        assert hierarchy.root_of(stats) is tree["app"]
        assert hierarchy.children_of(tree["module.projects"]) == []


class TestModuleStructure:
    """Tree first, static structure as fallback"""

    def test_parent_module_from_tree(self, tree, hierarchy):
        assert hierarchy.parent_module_of("dashboard.widgets.activity") == "module.dashboard"

    def test_parent_module_from_structure(self, hierarchy):
        assert hierarchy.parent_module_of("dashboard.widgets.health") == "module.dashboard"
        assert hierarchy.parent_module_of("ui.sidebar.addModule") is None

    def test_submodules_merge_tree_and_structure(self, hierarchy, make_node):
        module = make_node("module.dashboard", L.MODULE)
        hierarchy.add_child(make_node("dashboard.widgets.weather", L.SUBMODULE), module)
        submodules = hierarchy.submodules_of("module.dashboard")
        assert "dashboard.widgets.weather" in submodules
        assert "dashboard.widgets.health" in submodules
        assert len(submodules) == 5

    def test_top_level_modules(self, tree, hierarchy, make_node):
        hierarchy.add_child(make_node("module.settings", L.MODULE), tree["app"])
        modules = hierarchy.top_level_modules()
        assert modules[:3] == ["module.dashboard", "module.projects", "module.terminal"]
        assert "module.settings" in modules
        assert len(modules) == len(set(modules))


class TestMessaging:
    def test_bubble_stops_when_asked(self, tree, hierarchy):
        dashboard_behavior = RecordingBehavior()
        dashboard_behavior.stop_messages = True
        tree["module.dashboard"].behavior = dashboard_behavior

        message = ComponentMessage(type=MessageType.EVENT, source_id="dashboard.widgets.stats")
        delivered = hierarchy.bubble_message(message, tree["dashboard.widgets.stats"])

        assert delivered == ["module.dashboard"]
        assert message.stop_propagation

    def test_bubble_reaches_root(self, tree, hierarchy):
        message = ComponentMessage(type=MessageType.NOTIFICATION, source_id="dashboard.widgets.stats")
        assert hierarchy.bubble_message(message, tree["dashboard.widgets.stats"]) == ["module.dashboard", "app"]

    def test_broadcast_reaches_descendants(self, tree, hierarchy):
        message = ComponentMessage(type=MessageType.COMMAND, source_id="app")
        assert len(hierarchy.broadcast_message(message, tree["app"])) == 4


class TestValidateHierarchy:
    def test_valid_tree(self, tree, hierarchy):
        result = hierarchy.validate_hierarchy(tree["app"])
        assert result.is_valid
        assert result.component_count == 5
        assert result.orphaned_count == 0

    def test_externally_broken_weight_reported(self, tree, hierarchy, make_node):
        bad = make_node("rogue.app", L.APP, parent_id="module.projects")
        tree["module.projects"].children.append(bad)

        result = hierarchy.validate_hierarchy(tree["app"])
        assert not result.is_valid
        assert any(issue.component_id == "module.projects" for issue in result.errors)

    def test_orphan_reported_as_warning(self, tree, hierarchy):
        stats = tree["dashboard.widgets.stats"]
        tree["module.dashboard"].children.remove(stats)

        result = hierarchy.validate_hierarchy(tree["app"])
        assert result.is_valid
        assert result.orphaned_count == 1
        assert result.warnings[0].component_id == "dashboard.widgets.stats"

    def test_depth_limit(self, make_node):
        hierarchy = ComponentHierarchy(config=HierarchyConfig(max_depth=1))
        app, module, sub = make_node("app", L.APP), make_node("m", L.MODULE), make_node("s", L.SUBMODULE)
        hierarchy.add_child(module, app)
        hierarchy.add_child(sub, module)
        assert not hierarchy.validate_hierarchy(app).is_valid
