"""Project stage model."""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import Field

from hospm.models.base import OptionalDate, Record
from hospm.models.ids import generate_id
from hospm.models.item import Item
from hospm.models.link import Link


class ProjectStage(Record):
    """One phase of the project lifecycle, holding its links."""

    id: str = Field(default_factory=lambda: generate_id("stage"))
    name: str = ""
    start_date: OptionalDate = None
    end_date: OptionalDate = None
    description: str = ""
    status: str = "planned"
    links: list[Link] = Field(default_factory=list)

    def add_link(self, link: Link) -> Link:
        self.links.append(link)
        return link

    def remove_link(self, link_id: str) -> None:
        self.links = [link for link in self.links if link.id != link_id]

    def get_link(self, link_id: str) -> Link | None:
        for link in self.links:
            if link.id == link_id:
                return link
        return None

    def update_link(self, updated: Link) -> bool:
        """Replace the link with the same id. Returns False if there is none."""
        for index, link in enumerate(self.links):
            if link.id == updated.id:
                self.links[index] = updated
                return True
        return False

    def find_link_by_name(self, name: str) -> Link | None:
        for link in self.links:
            if link.name == name:
                return link
        return None

    def iter_items(self) -> Iterator[Item]:
        for link in self.links:
            yield from link.items
