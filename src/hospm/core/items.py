"""Item service: item CRUD, search, statistics, copy and move.

Manages items on the links of the current project. Unlike the project
store's lookups, every mutation here requires its link (and, where
relevant, its item) to exist and raises otherwise.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any, NamedTuple

from pydantic import BaseModel, Field, ValidationError

from hospm.core.dashboard import percent_done
from hospm.core.interchange import ValidationResult
from hospm.core.projects import ProjectStore
from hospm.errors import (
    HospmError,
    InvalidItemError,
    InvalidStatusError,
    ItemNotFoundError,
    LinkNotFoundError,
)
from hospm.events.types import EventType
from hospm.models import VALID_PRIORITIES, VALID_STATUSES, Item, ItemStatus, Link, Priority

logger = logging.getLogger(__name__)


class ItemRef(NamedTuple):
    """Address of one item in the project tree."""

    stage_id: str
    link_id: str
    item_id: str


class ItemStatistics(BaseModel):
    """Item counts for the dashboard."""

    total: int = 0
    by_status: dict[str, int] = Field(default_factory=lambda: {s.value: 0 for s in ItemStatus})
    by_priority: dict[str, int] = Field(default_factory=lambda: {p.value: 0 for p in Priority})

    @property
    def completion_rate(self) -> int:
        """Percentage of done items, rounded; 0 for an empty project."""
        return percent_done(self.by_status[ItemStatus.DONE.value], self.total)


class ItemService:
    """Item-level operations routed through a ProjectStore."""

    def __init__(self, store: ProjectStore) -> None:
        """Initialize the ItemService.

        Args:
            store: Project store owning the current project
        """
        self._store = store

    def _require_link(self, stage_id: str, link_id: str) -> Link:
        link = self._store.get_link(stage_id, link_id)
        if link is None:
            raise LinkNotFoundError(f"Link {link_id} not found in stage {stage_id}")
        return link

    # --- CRUD ---

    def add_item(self, stage_id: str, link_id: str, item_data: Mapping[str, Any]) -> Item:
        """Add a new item to a link.

        Args:
            stage_id: Stage holding the link
            link_id: Target link
            item_data: Partial item record; missing fields take defaults

        Returns:
            The created Item

        Raises:
            LinkNotFoundError: If the link does not exist
            InvalidItemError: If a field value is rejected (bad date, status or priority)
        """
        link = self._require_link(stage_id, link_id)
        try:
            new_item = Item.from_json(dict(item_data))
        except ValidationError as e:
            raise InvalidItemError(f"Invalid item data: {e}") from e
        item = link.add_item(new_item)
        logger.info("Added item %s to %s/%s", item.id, stage_id, link_id)
        self._store.commit(EventType.ITEM_ADDED, {"stage_id": stage_id, "link_id": link_id, "item_id": item.id})
        return item

    def update_item(self, stage_id: str, link_id: str, item: Item) -> Item:
        """Replace an item by id.

        Raises:
            LinkNotFoundError: If the link does not exist
            ItemNotFoundError: If the link holds no item with that id
        """
        link = self._require_link(stage_id, link_id)
        if not link.update_item(item):
            raise ItemNotFoundError(f"Item {item.id} not found in link {link_id}")
        self._store.commit(EventType.ITEM_UPDATED, {"stage_id": stage_id, "link_id": link_id, "item_id": item.id})
        return item

    def delete_item(self, stage_id: str, link_id: str, item_id: str) -> bool:
        link = self._require_link(stage_id, link_id)
        link.remove_item(item_id)
        logger.info("Deleted item %s from %s/%s", item_id, stage_id, link_id)
        self._store.commit(EventType.ITEM_DELETED, {"stage_id": stage_id, "link_id": link_id, "item_id": item_id})
        return True

    # --- Queries ---

    def get_item(self, stage_id: str, link_id: str, item_id: str) -> Item | None:
        link = self._store.get_link(stage_id, link_id)
        if link is None:
            return None
        return link.get_item(item_id)

    def get_items_by_link(self, stage_id: str, link_id: str) -> list[Item]:
        link = self._store.get_link(stage_id, link_id)
        return list(link.items) if link else []

    def get_items_by_stage(self, stage_id: str) -> list[Item]:
        stage = self._store.get_stage(stage_id)
        return list(stage.iter_items()) if stage else []

    def get_all_items(self) -> list[Item]:
        """All items in stage, then link, then item order."""
        return list(self._store.get_current_project().iter_items())

    def get_items_by_status(self, status: str) -> list[Item]:
        return [item for item in self.get_all_items() if item.status == status]

    def get_items_by_priority(self, priority: str) -> list[Item]:
        return [item for item in self.get_all_items() if item.priority == priority]

    def search_items(self, keyword: str | None) -> list[Item]:
        """Case-insensitive search over description, participants and notes.

        A blank keyword applies no filter and returns every item.
        """
        items = self.get_all_items()
        if not keyword or not keyword.strip():
            return items
        return [item for item in items if item.matches(keyword)]

    def get_item_statistics(self) -> ItemStatistics:
        stats = ItemStatistics()
        for item in self.get_all_items():
            stats.total += 1
            stats.by_status[item.status.value] += 1
            stats.by_priority[item.priority.value] += 1
        return stats

    # --- Status ---

    def update_item_status(self, stage_id: str, link_id: str, item_id: str, new_status: str) -> Item:
        """Set an item's status.

        Raises:
            InvalidStatusError: If new_status is not todo, in-progress or done
            LinkNotFoundError: If the link does not exist
            ItemNotFoundError: If the item does not exist
        """
        _check_status(new_status)

        link = self._require_link(stage_id, link_id)
        item = link.get_item(item_id)
        if item is None:
            raise ItemNotFoundError(f"Item {item_id} not found in link {link_id}")

        return self.update_item(stage_id, link_id, item.with_status(new_status))

    def batch_update_item_status(self, refs: Iterable[ItemRef | tuple[str, str, str]], new_status: str) -> list[Item]:
        """Set the status of several items, skipping the ones that fail.

        Returns:
            The items that were updated, in input order

        Raises:
            InvalidStatusError: If new_status is invalid (nothing is changed)
        """
        _check_status(new_status)

        updated: list[Item] = []
        for stage_id, link_id, item_id in refs:
            try:
                updated.append(self.update_item_status(stage_id, link_id, item_id, new_status))
            except HospmError as e:
                logger.warning("Status update of item %s skipped: %s", item_id, e)
        return updated

    # --- Copy / move ---

    def copy_item(
        self,
        source_stage_id: str,
        source_link_id: str,
        item_id: str,
        target_stage_id: str,
        target_link_id: str,
    ) -> Item:
        """Copy an item's fields to another link under a new id.

        Raises:
            LinkNotFoundError: If the source or target link does not exist
            ItemNotFoundError: If the source item does not exist
        """
        source = self._require_link(source_stage_id, source_link_id).get_item(item_id)
        if source is None:
            raise ItemNotFoundError(f"Item {item_id} not found in link {source_link_id}")

        data = source.to_json()
        del data["id"]
        return self.add_item(target_stage_id, target_link_id, data)

    def move_item(
        self,
        source_stage_id: str,
        source_link_id: str,
        item_id: str,
        target_stage_id: str,
        target_link_id: str,
    ) -> Item:
        """Copy an item to another link, then delete the original.

        If the copy fails the original is left in place.
        """
        copied = self.copy_item(source_stage_id, source_link_id, item_id, target_stage_id, target_link_id)
        self.delete_item(source_stage_id, source_link_id, item_id)
        logger.info("Moved item %s to %s/%s as %s", item_id, target_stage_id, target_link_id, copied.id)
        return copied

    # --- Validation ---

    def validate_item(self, item_data: Mapping[str, Any]) -> ValidationResult:
        """Advisory check of a partial item record; never raises."""
        result = ValidationResult()
        errors = result.errors

        description = item_data.get("description")
        if not isinstance(description, str) or not description.strip():
            errors.append("Item description must not be empty")

        if not isinstance(item_data.get("participants"), list):
            errors.append("Participants must be a list")

        status = item_data.get("status")
        if status and (not isinstance(status, str) or status not in VALID_STATUSES):
            errors.append(f"Invalid status: {status}")

        priority = item_data.get("priority")
        if priority and (not isinstance(priority, str) or priority not in VALID_PRIORITIES):
            errors.append(f"Invalid priority: {priority}")

        dates: dict[str, date | None] = {}
        for key in ("startDate", "endDate"):
            value = item_data.get(key)
            try:
                dates[key] = _as_date(value)
            except ValueError:
                errors.append(f"Invalid {key}: {value}")
                dates[key] = None

        start, end = dates["startDate"], dates["endDate"]
        if start and end and start > end:
            errors.append("Start date must not be after end date")

        return result


def _check_status(status: Any) -> None:
    if not isinstance(status, str) or status not in VALID_STATUSES:
        raise InvalidStatusError(f"Invalid status: {status}. Must be one of {sorted(VALID_STATUSES)}")


def _as_date(value: Any) -> date | None:
    """Read an ISO date; None or a blank string means unset.

    Raises:
        ValueError: If the value is not a date or an ISO date string
    """
    if value is None or isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value) if value.strip() else None
    raise ValueError(f"not a date: {value!r}")
