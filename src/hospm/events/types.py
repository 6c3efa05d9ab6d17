"""Event type constants for hospm."""

from enum import StrEnum


class EventType(StrEnum):
    PROJECT_CREATED = "project.created"
    PROJECT_LOADED = "project.loaded"
    PROJECT_RESET = "project.reset"
    PROJECT_SAVED = "project.saved"

    STAGE_ADDED = "stage.added"
    STAGE_UPDATED = "stage.updated"
    STAGE_REMOVED = "stage.removed"

    LINK_ADDED = "link.added"
    LINK_UPDATED = "link.updated"
    LINK_REMOVED = "link.removed"

    ITEM_ADDED = "item.added"
    ITEM_UPDATED = "item.updated"
    ITEM_DELETED = "item.deleted"
