"""Project repository, item operations, interchange and dashboards."""

from hospm.core.items import ItemRef, ItemService, ItemStatistics
from hospm.core.projects import ProjectStore

__all__ = ["ItemRef", "ItemService", "ItemStatistics", "ProjectStore"]
