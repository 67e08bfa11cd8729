"""
Component Catalog Entry

Static metadata per component id, as supplied by an external catalog.
"""

from pydantic import BaseModel, ConfigDict, Field

from .models import HierarchyLevel


class CatalogEntry(BaseModel):
    """
    Catalog metadata for one component.

    Example:
        entry = CatalogEntry(level=HierarchyLevel.SUBMODULE, hot_swappable=True, build_time=60)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    level: HierarchyLevel | None = None
    hot_swappable: bool = Field(default=False, alias="hotSwappable")
    build_time: int = Field(default=60, ge=0, alias="buildTime")
    files: tuple[str, ...] = ()
    test_files: tuple[str, ...] = Field(default=(), alias="testFiles")
