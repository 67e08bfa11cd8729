"""
Static module structure

Structural relations that hold regardless of what is loaded in the tree:
which module owns a submodule, which submodules a module declares, and
which modules are top-level.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ModuleStructure:
    """
    Example:
        structure = ModuleStructure(
            submodule_prefixes={"dashboard.widgets.": "module.dashboard"},
            submodules={"module.dashboard": frozenset({"dashboard.widgets.stats"})},
            top_level_modules=("module.dashboard",),
        )
        structure.parent_module_of("dashboard.widgets.stats")  # "module.dashboard"
    """

    # id prefix -> owning module
    submodule_prefixes: dict[str, str] = field(default_factory=dict)
    submodules: dict[str, frozenset[str]] = field(default_factory=dict)
    top_level_modules: tuple[str, ...] = ()

    def parent_module_of(self, submodule_id: str) -> str | None:
        # Longest prefix wins
        for prefix in sorted(self.submodule_prefixes, key=len, reverse=True):
            if submodule_id.startswith(prefix):
                return self.submodule_prefixes[prefix]
        for module_id, members in self.submodules.items():
            if submodule_id in members:
                return module_id
        return None

    def submodules_of(self, module_id: str) -> frozenset[str]:
        return self.submodules.get(module_id, frozenset())
