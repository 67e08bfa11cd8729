"""
Default Bridge topology

Catalog, dependency edges and module structure of the stock Bridge app,
used when no external catalog is supplied.
"""

from ..domain.structure import ModuleStructure
from .catalog import InMemoryComponentCatalog
from .dependency_graph import DependencyGraph

DEFAULT_DEPENDENCIES: dict[str, tuple[str, ...]] = {
    # UI
    "ui.sidebar.addModule": ("moduleManager",),
    "ui.navigation.sidebar": ("navigationController",),
    "ui.sidebar.moduleRow": ("moduleManager",),
    # Modules
    "module.projects": ("module.dashboard",),
    "dashboard.widgets.stats": ("module.dashboard",),
    "dashboard.widgets.activity": ("module.dashboard",),
}

DEFAULT_CATALOG: dict[str, dict] = {
    "ui.sidebar.addModule": {
        "level": "Component",
        "files": ["Platforms/macOS/BridgeMac.swift"],
        "testFiles": ["Tests/UI/ModuleSelectorTests.swift"],
        "buildTime": 30,
        "hotSwappable": True,
    },
    "ui.navigation.sidebar": {
        "level": "Component",
        "files": ["Platforms/macOS/BridgeMac.swift"],
        "testFiles": ["Tests/UI/SidebarNavigationTests.swift"],
        "buildTime": 45,
        "hotSwappable": True,
    },
    "dashboard.widgets.stats": {
        "level": "Submodule",
        "files": ["Modules/Dashboard/SubModules/StatsWidget/", "Core/MockModules.swift"],
        "testFiles": ["Tests/Modules/Dashboard/StatsWidgetTests.swift"],
        "buildTime": 60,
        "hotSwappable": True,
    },
    "module.dashboard": {
        "level": "Module",
        "files": ["Modules/Dashboard/Sources/DashboardModule.swift", "Core/MockModules.swift"],
        "testFiles": ["Tests/Modules/DashboardTests.swift"],
        "buildTime": 120,
        "hotSwappable": True,
    },
}

DASHBOARD_WIDGETS = frozenset(
    {
        "dashboard.widgets.stats",
        "dashboard.widgets.activity",
        "dashboard.widgets.actions",
        "dashboard.widgets.health",
    }
)


def default_dependency_graph() -> DependencyGraph:
    return DependencyGraph(DEFAULT_DEPENDENCIES)


def default_catalog() -> InMemoryComponentCatalog:
    return InMemoryComponentCatalog.from_mapping(DEFAULT_CATALOG)


def default_structure() -> ModuleStructure:
    return ModuleStructure(
        submodule_prefixes={"dashboard.widgets.": "module.dashboard"},
        submodules={"module.dashboard": DASHBOARD_WIDGETS},
        top_level_modules=("module.dashboard", "module.projects", "module.terminal"),
    )
