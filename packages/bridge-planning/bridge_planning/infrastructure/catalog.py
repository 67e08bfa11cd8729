"""
In-memory component catalog

Read-only mapping from component id to ``CatalogEntry``. Manifests use the
``component-map.json`` shape (JSON or YAML):

    {
      "dashboard.widgets.stats": {
        "files": ["Modules/Dashboard/SubModules/StatsWidget/"],
        "testFiles": ["Tests/Modules/Dashboard/StatsWidgetTests.swift"],
        "buildTime": 60,
        "hotSwappable": true
      }
    }
"""

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from bridge_shared.common.exceptions import InvalidConfigurationError, UnknownComponent
from bridge_shared.common.observability import get_logger

from ..domain.catalog import CatalogEntry

logger = get_logger(__name__)


class InMemoryComponentCatalog:
    """
    Component catalog backed by a dict.

    Example:
        catalog = InMemoryComponentCatalog.from_mapping({"module.dashboard": {"buildTime": 120}})
        catalog.get("module.dashboard").build_time  # 120
        catalog.get("nope")  # None
    """

    def __init__(self, entries: Mapping[str, CatalogEntry] | None = None):
        self._entries: dict[str, CatalogEntry] = dict(entries or {})

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, Any]]) -> "InMemoryComponentCatalog":
        """
        Build from raw manifest data.

        Raises:
            InvalidConfigurationError: an entry fails validation
        """
        entries: dict[str, CatalogEntry] = {}
        for component_id, raw in data.items():
            try:
                entries[component_id] = CatalogEntry.model_validate(raw)
            except ValidationError as e:
                raise InvalidConfigurationError(
                    f"Invalid catalog entry for {component_id}",
                    details={"errors": e.errors(include_url=False)},
                ) from e
        return cls(entries)

    @classmethod
    def from_file(cls, path: str | Path) -> "InMemoryComponentCatalog":
        """Load a JSON (.json) or YAML (.yaml/.yml) manifest."""
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)

        if not isinstance(data, dict):
            raise InvalidConfigurationError("Catalog manifest must be a mapping", details={"path": str(path)})

        catalog = cls.from_mapping(data)
        logger.info("catalog_loaded", path=str(path), entries=len(catalog))
        return catalog

    def get(self, component_id: str) -> CatalogEntry | None:
        entry = self._entries.get(component_id)
        if entry is None:
            logger.debug("unknown_component", component=component_id)
        return entry

    def require(self, component_id: str) -> CatalogEntry:
        """
        Raises:
            UnknownComponent: no entry for ``component_id``
        """
        entry = self._entries.get(component_id)
        if entry is None:
            raise UnknownComponent(f"Component not in catalog: {component_id}")
        return entry

    def ids(self) -> Iterable[str]:
        return sorted(self._entries)

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
