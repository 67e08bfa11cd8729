"""
Config group definitions.

Settings are split into logical groups. Each group is usable on its own
and is assembled by ``Settings``.
"""

from pydantic import BaseModel, Field


class PlanningConfig(BaseModel):
    """Scope analyzer settings."""

    default_build_time: int = Field(default=60, ge=0, description="Build time (s) for components missing from the catalog")
    full_rebuild_time: int = Field(default=300, ge=0, description="Fixed estimate (s) for a Full-scope plan")
    hot_swap_time_cap: int = Field(default=30, ge=0, description="Cap (s) for a single hot-swappable component")
    parallel_speedup: float = Field(default=0.7, gt=0.0, le=1.0, description="Flat factor for parallelizable plans")
    system_prefix: str = Field(default="core.", description="Namespace of system-critical components")
    cross_cutting_component: str = Field(
        default="core.bridgeModule", description="Protocol component whose change always forces a full rebuild"
    )
    manifest_document: str = Field(default="component-map.json", description="Catalog manifest document")
    doc_suffix: str = Field(default=".md", description="Suffix of a component's own document")
    strict_cycles: bool = Field(default=False, description="Raise instead of best-effort ordering on cycles")


class HierarchyConfig(BaseModel):
    """Component tree limits."""

    max_depth: int = Field(default=10, ge=1, description="Maximum ancestor chain length")
    max_children: int = Field(default=100, ge=1, description="Maximum children per component")
    max_dependencies: int = Field(default=20, ge=0, description="Maximum declared dependencies per component")


class ObservabilityConfig(BaseModel):
    """Logging settings."""

    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="console", pattern="^(console|json)$", description="console or json")
