"""Link model: one of the six management threads of a stage."""

from __future__ import annotations

import random

from pydantic import Field

from hospm.models.base import Record
from hospm.models.ids import generate_id
from hospm.models.item import Item

LINK_COLORS = ("#3B82F6", "#10B981", "#F59E0B", "#EF4444", "#8B5CF6", "#06B6D4")


class Link(Record):
    """A management thread owning an ordered list of items."""

    id: str = Field(default_factory=lambda: generate_id("link"))
    name: str = ""
    owner: str = ""
    color: str = Field(default_factory=lambda: random.choice(LINK_COLORS))
    items: list[Item] = Field(default_factory=list)

    def add_item(self, item: Item) -> Item:
        self.items.append(item)
        return item

    def remove_item(self, item_id: str) -> None:
        self.items = [item for item in self.items if item.id != item_id]

    def get_item(self, item_id: str) -> Item | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def update_item(self, updated: Item) -> bool:
        """Replace the item with the same id. Returns False if there is none."""
        for index, item in enumerate(self.items):
            if item.id == updated.id:
                self.items[index] = updated
                return True
        return False
