from functools import cached_property

from pydantic_settings import BaseSettings, SettingsConfigDict

from bridge_shared.infra.config.groups import HierarchyConfig, ObservabilityConfig, PlanningConfig


class Settings(BaseSettings):
    """
    Bridge Planner Settings

    Environment variables use the BRIDGE_ prefix.
    Example: BRIDGE_DEFAULT_BUILD_TIME=90, BRIDGE_LOG_FORMAT=json

    Grouped access:
        settings.planning       # PlanningConfig
        settings.hierarchy      # HierarchyConfig
        settings.observability  # ObservabilityConfig
    """

    model_config = SettingsConfigDict(
        env_prefix="BRIDGE_",
        extra="ignore",
    )

    # ========================================================================
    # Grouped Config Accessors
    # ========================================================================

    @cached_property
    def planning(self) -> PlanningConfig:
        """Scope analyzer settings group."""
        return PlanningConfig(
            default_build_time=self.default_build_time,
            full_rebuild_time=self.full_rebuild_time,
            hot_swap_time_cap=self.hot_swap_time_cap,
            parallel_speedup=self.parallel_speedup,
            system_prefix=self.system_prefix,
            cross_cutting_component=self.cross_cutting_component,
            manifest_document=self.manifest_document,
            doc_suffix=self.doc_suffix,
            strict_cycles=self.strict_cycles,
        )

    @cached_property
    def hierarchy(self) -> HierarchyConfig:
        """Component tree settings group."""
        return HierarchyConfig(
            max_depth=self.max_depth,
            max_children=self.max_children,
            max_dependencies=self.max_dependencies,
        )

    @cached_property
    def observability(self) -> ObservabilityConfig:
        """Logging settings group."""
        return ObservabilityConfig(log_level=self.log_level, log_format=self.log_format)

    # ========================================================================
    # Planning
    # ========================================================================

    default_build_time: int = 60
    full_rebuild_time: int = 300
    hot_swap_time_cap: int = 30
    parallel_speedup: float = 0.7
    system_prefix: str = "core."
    cross_cutting_component: str = "core.bridgeModule"
    manifest_document: str = "component-map.json"
    doc_suffix: str = ".md"
    strict_cycles: bool = False

    # ========================================================================
    # Hierarchy
    # ========================================================================

    max_depth: int = 10
    max_children: int = 100
    max_dependencies: int = 20

    # ========================================================================
    # Observability
    # ========================================================================

    log_level: str = "INFO"
    log_format: str = "console"


settings = Settings()
