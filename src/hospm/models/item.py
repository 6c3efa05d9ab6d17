"""Item model: the leaf unit of work on a link."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field, model_validator

from hospm.models.base import OptionalDate, Record, check_date_range
from hospm.models.ids import generate_id


class ItemStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


VALID_STATUSES = {s.value for s in ItemStatus}
VALID_PRIORITIES = {p.value for p in Priority}


class Item(Record):
    """A task or event tracked on one link of a stage."""

    id: str = Field(default_factory=lambda: generate_id("item"))
    description: str = ""
    participants: list[str] = Field(default_factory=list)
    status: ItemStatus = ItemStatus.TODO
    start_date: OptionalDate = None
    end_date: OptionalDate = None
    priority: Priority = Priority.MEDIUM
    notes: str = ""

    @model_validator(mode="before")
    @classmethod
    def _blank_enums(cls, data: Any) -> Any:
        # An empty status or priority falls back to its default.
        if isinstance(data, dict):
            data = {k: v for k, v in data.items() if not (k in ("status", "priority") and v == "")}
        return data

    @model_validator(mode="after")
    def _check_dates(self) -> Item:
        check_date_range(self.start_date, self.end_date)
        return self

    def with_status(self, status: ItemStatus | str) -> Item:
        """Return a copy of this item with ``status`` replaced."""
        return self.model_copy(update={"status": ItemStatus(status)})

    def matches(self, keyword: str) -> bool:
        """Case-insensitive substring match on description, participants and notes."""
        needle = keyword.lower()
        if needle in self.description.lower():
            return True
        if any(needle in participant.lower() for participant in self.participants):
            return True
        return bool(self.notes) and needle in self.notes.lower()
