"""
Global test configuration and fixtures
"""

import time

import pytest

from bridge_planning.application import ComponentHierarchy, ScopeAnalyzer
from bridge_planning.domain import ComponentNode, HierarchyLevel
from bridge_planning.infrastructure import default_catalog, default_dependency_graph, default_structure
from bridge_shared.infra.config import HierarchyConfig, PlanningConfig

# Slow test threshold (seconds)
SLOW_TEST_THRESHOLD = 5.0
WARNING_TEST_THRESHOLD = 2.0


@pytest.fixture(autouse=True)
def track_test_duration(request):
    """Track every test's duration and warn about slow ones"""
    start_time = time.time()

    yield

    duration = time.time() - start_time
    test_name = request.node.nodeid

    if duration > SLOW_TEST_THRESHOLD:
        print(f"\nSLOW TEST ({duration:.2f}s): {test_name}")
        print("   Consider marking with @pytest.mark.slow or optimizing")
    elif duration > WARNING_TEST_THRESHOLD:
        print(f"\nSlow ({duration:.2f}s): {test_name}")


@pytest.fixture
def planning_config() -> PlanningConfig:
    """Planning constants independent of the environment"""
    return PlanningConfig()


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def graph():
    return default_dependency_graph()


@pytest.fixture
def hierarchy():
    """Empty hierarchy with the stock module structure"""
    return ComponentHierarchy(config=HierarchyConfig(), structure=default_structure())


@pytest.fixture
def analyzer(catalog, graph, hierarchy, planning_config) -> ScopeAnalyzer:
    return ScopeAnalyzer(catalog, graph, hierarchy, config=planning_config)


@pytest.fixture
def make_node():
    """Node factory: make_node("module.dashboard", HierarchyLevel.MODULE)"""

    def _make(component_id: str, level: HierarchyLevel = HierarchyLevel.COMPONENT, **kwargs) -> ComponentNode:
        return ComponentNode(id=component_id, name=kwargs.pop("name", component_id), level=level, **kwargs)

    return _make


# Pytest hooks
def pytest_configure(config):
    """pytest configuration"""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (medium speed)")
    config.addinivalue_line("markers", "slow: Slow tests (>5s)")


def pytest_collection_modifyitems(config, items):
    """Path-based markers"""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


def pytest_report_header(config):
    return [
        "Test Structure: Pyramid (Unit > Integration)",
        f"Slow test threshold: {SLOW_TEST_THRESHOLD}s",
        f"Warning threshold: {WARNING_TEST_THRESHOLD}s",
    ]
