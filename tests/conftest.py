"""Shared test fixtures for hospm."""

from __future__ import annotations

from pathlib import Path

import pytest

from hospm.config import Config
from hospm.core.items import ItemService
from hospm.core.projects import ProjectStore
from hospm.events.bus import EventBus
from hospm.models import Project
from hospm.storage.memory_store import MemoryStore


@pytest.fixture
def backend() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def store(backend: MemoryStore, event_bus: EventBus) -> ProjectStore:
    return ProjectStore(backend, event_bus)


@pytest.fixture
def project(store: ProjectStore) -> Project:
    return store.get_current_project()


@pytest.fixture
def service(store: ProjectStore, project: Project) -> ItemService:
    return ItemService(store)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(home=tmp_path)
