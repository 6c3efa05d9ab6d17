"""Project model: the root of the stage / link / item tree."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime

from pydantic import Field

from hospm.models.base import OptionalDate, Record
from hospm.models.ids import generate_id
from hospm.models.item import Item
from hospm.models.stage import ProjectStage

DEFAULT_PROJECT_NAME = "Hospital Construction Project"


def _now() -> str:
    return datetime.now(UTC).isoformat()


class Project(Record):
    """A hospital construction project and its ordered stages."""

    id: str = Field(default_factory=lambda: generate_id("project"))
    name: str = DEFAULT_PROJECT_NAME
    description: str = ""
    start_date: OptionalDate = None
    end_date: OptionalDate = None
    created_at: str = Field(default_factory=_now)
    updated_at: str = Field(default_factory=_now)
    stages: list[ProjectStage] = Field(default_factory=list)

    def touch(self) -> None:
        self.updated_at = _now()

    def add_stage(self, stage: ProjectStage) -> ProjectStage:
        self.stages.append(stage)
        self.touch()
        return stage

    def remove_stage(self, stage_id: str) -> None:
        self.stages = [stage for stage in self.stages if stage.id != stage_id]
        self.touch()

    def get_stage(self, stage_id: str) -> ProjectStage | None:
        for stage in self.stages:
            if stage.id == stage_id:
                return stage
        return None

    def update_stage(self, updated: ProjectStage) -> bool:
        """Replace the stage with the same id. Returns False if there is none."""
        for index, stage in enumerate(self.stages):
            if stage.id == updated.id:
                self.stages[index] = updated
                self.touch()
                return True
        return False

    def find_stage_by_name(self, name: str) -> ProjectStage | None:
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    def iter_items(self) -> Iterator[Item]:
        for stage in self.stages:
            yield from stage.iter_items()
