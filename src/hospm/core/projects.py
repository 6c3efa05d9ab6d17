"""Project repository: owns the current project and its persistence."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from hospm.config import DEFAULT_STORAGE_KEY
from hospm.core import interchange
from hospm.core.templates import build_default_project, build_template_project
from hospm.errors import (
    DataFormatError,
    NoProjectError,
    PersistenceError,
    SchemaValidationError,
    SerializeError,
)
from hospm.events.bus import EventBus
from hospm.events.types import EventType
from hospm.models import Link, Project, ProjectStage
from hospm.storage.base import StorageBackend

logger = logging.getLogger(__name__)


class ProjectStore:
    """Single source of truth for the current project.

    Lookups return None (or False) when a stage or link is missing.
    Persistence is best-effort: storage failures are logged and the
    in-memory project stays usable.
    """

    def __init__(
        self,
        backend: StorageBackend,
        event_bus: EventBus | None = None,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        json_indent: int = 2,
    ) -> None:
        """Initialize the store.

        Args:
            backend: Key-value storage holding the serialized project
            event_bus: Bus notified after every change (a private one if omitted)
            storage_key: Key the project is stored under
            json_indent: Indentation used by export_project_data
        """
        self._backend = backend
        self._bus = event_bus or EventBus()
        self.storage_key = storage_key
        self.json_indent = json_indent
        self.current_project: Project | None = None

    @property
    def event_bus(self) -> EventBus:
        return self._bus

    # --- Project lifecycle ---

    def get_current_project(self) -> Project:
        """Return the current project, loading or creating it if needed."""
        if self.current_project is None:
            return self.load_from_storage() or self.create_default_project()
        return self.current_project

    def create_default_project(self) -> Project:
        project = build_default_project()
        self.current_project = project
        self.save_to_storage()
        logger.info("Created default project %s (%d stages)", project.id, len(project.stages))
        self._bus.emit(EventType.PROJECT_CREATED, {"project_id": project.id})
        return project

    def load_project_data(self, data: str | dict[str, Any]) -> Project:
        """Replace the current project with ``data``.

        Raises:
            DataFormatError: If the text or record cannot be turned into a
                project. The previous project is kept.
        """
        try:
            record = interchange.parse(data) if isinstance(data, str) else data
            project = Project.from_json(record)
        except (DataFormatError, ValidationError) as e:
            logger.warning("Rejected project data: %s", e)
            raise DataFormatError(f"Invalid project data: {e}") from e

        self.current_project = project
        self.save_to_storage()
        logger.info("Loaded project %s (%s)", project.id, project.name)
        self._bus.emit(EventType.PROJECT_LOADED, {"project_id": project.id})
        return project

    def import_project(self, document: str | dict[str, Any], *, merge: bool = False) -> Project:
        """Parse, check and load an exported project document.

        With ``merge``, the document is merged into the current project by
        stage and link name instead of replacing it.

        Raises:
            ParseError: If the text is not JSON
            SchemaValidationError: If the document has structural defects
        """
        data = interchange.parse(document) if isinstance(document, str) else document
        result = interchange.validate_project_data(data)
        if not result.is_valid:
            raise SchemaValidationError(result.errors)

        if merge:
            data = interchange.merge_project_data(self.get_current_project().to_json(), data)
        return self.load_project_data(data)

    def apply_template(self, template_id: str) -> Project:
        """Replace the current project with a fresh template project."""
        return self.load_project_data(build_template_project(template_id).to_json())

    def export_project_data(self) -> str:
        if self.current_project is None:
            raise NoProjectError("No project loaded to export")
        return interchange.stringify(self.current_project.to_json(), indent=self.json_indent)

    def reset_project(self) -> Project:
        self.clear_storage()
        self.current_project = None
        project = self.create_default_project()
        self._bus.emit(EventType.PROJECT_RESET, {"project_id": project.id})
        return project

    def commit(self, event_type: EventType, data: dict[str, Any] | None = None) -> None:
        """Record a change to the current project: touch, persist, notify."""
        if self.current_project is not None:
            self.current_project.touch()
        self.save_to_storage()
        self._bus.emit(event_type, data)

    # --- Stages ---

    def get_project_stages(self) -> list[ProjectStage]:
        return self.get_current_project().stages

    def add_stage(self, stage_data: ProjectStage | dict[str, Any]) -> ProjectStage:
        project = self.get_current_project()
        stage = stage_data if isinstance(stage_data, ProjectStage) else ProjectStage.from_json(stage_data)
        project.add_stage(stage)
        self.commit(EventType.STAGE_ADDED, {"stage_id": stage.id})
        return stage

    def remove_stage(self, stage_id: str) -> bool:
        if self.current_project is None:
            return False
        self.current_project.remove_stage(stage_id)
        self.commit(EventType.STAGE_REMOVED, {"stage_id": stage_id})
        return True

    def update_stage(self, stage: ProjectStage) -> bool:
        """Replace a stage by id. Returns False if there is no project or no such stage."""
        if self.current_project is None:
            return False
        if not self.current_project.update_stage(stage):
            return False
        self.commit(EventType.STAGE_UPDATED, {"stage_id": stage.id})
        return True

    def get_stage(self, stage_id: str) -> ProjectStage | None:
        if self.current_project is None:
            return None
        return self.current_project.get_stage(stage_id)

    # --- Links ---

    def add_link(self, stage_id: str, link_data: Link | dict[str, Any]) -> Link | None:
        stage = self.get_stage(stage_id)
        if stage is None:
            return None
        link = link_data if isinstance(link_data, Link) else Link.from_json(link_data)
        stage.add_link(link)
        self.commit(EventType.LINK_ADDED, {"stage_id": stage_id, "link_id": link.id})
        return link

    def remove_link(self, stage_id: str, link_id: str) -> bool:
        stage = self.get_stage(stage_id)
        if stage is None:
            return False
        stage.remove_link(link_id)
        self.commit(EventType.LINK_REMOVED, {"stage_id": stage_id, "link_id": link_id})
        return True

    def update_link(self, stage_id: str, link: Link) -> bool:
        stage = self.get_stage(stage_id)
        if stage is None or not stage.update_link(link):
            return False
        self.commit(EventType.LINK_UPDATED, {"stage_id": stage_id, "link_id": link.id})
        return True

    def get_link(self, stage_id: str, link_id: str) -> Link | None:
        stage = self.get_stage(stage_id)
        if stage is None:
            return None
        return stage.get_link(link_id)

    # --- Persistence ---

    def save_to_storage(self) -> bool:
        """Write the current project to the backend. Returns False on failure."""
        if self.current_project is None:
            return False
        try:
            payload = interchange.stringify(self.current_project.to_json(), pretty=False)
            self._backend.set(self.storage_key, payload)
        except (PersistenceError, SerializeError) as e:
            logger.warning("Saving project to storage failed: %s", e)
            return False
        self._bus.emit(EventType.PROJECT_SAVED, {"project_id": self.current_project.id})
        return True

    def load_from_storage(self) -> Project | None:
        """Load the stored project, making it current. Returns None if absent or unreadable."""
        try:
            payload = self._backend.get(self.storage_key)
            if not payload:
                return None
            project = Project.from_json(interchange.parse(payload))
        except (PersistenceError, DataFormatError, ValidationError) as e:
            logger.warning("Loading project from storage failed: %s", e)
            return None

        self.current_project = project
        logger.debug("Loaded project %s from storage", project.id)
        return project

    def clear_storage(self) -> None:
        try:
            self._backend.delete(self.storage_key)
        except PersistenceError as e:
            logger.warning("Clearing stored project failed: %s", e)
