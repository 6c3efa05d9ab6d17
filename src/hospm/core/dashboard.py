"""Per-stage and per-link progress figures for the project dashboard."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel

from hospm.models import Item, ItemStatus, Project


class ProgressSummary(BaseModel):
    """Status counts for a group of items."""

    name: str
    owner: str | None = None
    total: int = 0
    todo: int = 0
    in_progress: int = 0
    done: int = 0

    @property
    def progress(self) -> int:
        """Percentage of done items, rounded; 0 when the group is empty."""
        return percent_done(self.done, self.total)

    def count(self, items: Iterable[Item]) -> None:
        for item in items:
            self.total += 1
            if item.status == ItemStatus.TODO:
                self.todo += 1
            elif item.status == ItemStatus.IN_PROGRESS:
                self.in_progress += 1
            elif item.status == ItemStatus.DONE:
                self.done += 1


def percent_done(done: int, total: int) -> int:
    """Percentage rounded half up (12.5 -> 13)."""
    if total == 0:
        return 0
    return (200 * done + total) // (2 * total)


def stage_statistics(project: Project) -> list[ProgressSummary]:
    """One summary per stage, in stage order."""
    summaries = []
    for stage in project.stages:
        summary = ProgressSummary(name=stage.name)
        summary.count(stage.iter_items())
        summaries.append(summary)
    return summaries


def link_statistics(project: Project) -> list[ProgressSummary]:
    """One summary per link name, summed across stages in first-seen order."""
    by_name: dict[str, ProgressSummary] = {}
    for stage in project.stages:
        for link in stage.links:
            summary = by_name.setdefault(link.name, ProgressSummary(name=link.name, owner=link.owner))
            summary.count(link.items)
    return list(by_name.values())


def overall_progress(project: Project) -> int:
    items = list(project.iter_items())
    done = sum(1 for item in items if item.status == ItemStatus.DONE)
    return percent_done(done, len(items))
