from bridge_shared.infra.config.groups import HierarchyConfig, ObservabilityConfig, PlanningConfig
from bridge_shared.infra.config.settings import Settings, settings

__all__ = ["HierarchyConfig", "ObservabilityConfig", "PlanningConfig", "Settings", "settings"]
