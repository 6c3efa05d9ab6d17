"""Project data models."""

from hospm.models.ids import generate_id
from hospm.models.item import VALID_PRIORITIES, VALID_STATUSES, Item, ItemStatus, Priority
from hospm.models.link import LINK_COLORS, Link
from hospm.models.project import DEFAULT_PROJECT_NAME, Project
from hospm.models.stage import ProjectStage

__all__ = [
    "DEFAULT_PROJECT_NAME",
    "LINK_COLORS",
    "VALID_PRIORITIES",
    "VALID_STATUSES",
    "Item",
    "ItemStatus",
    "Link",
    "Priority",
    "Project",
    "ProjectStage",
    "generate_id",
]
