"""Tests for the ItemService."""

from __future__ import annotations

import json

import pytest

from hospm.core.items import ItemRef, ItemService
from hospm.core.projects import ProjectStore
from hospm.errors import (
    InvalidEnumError,
    InvalidItemError,
    InvalidStatusError,
    ItemNotFoundError,
    LinkNotFoundError,
)
from hospm.events.bus import EventBus
from hospm.events.types import EventType
from hospm.models import Item, ItemStatus, Project
from hospm.storage.memory_store import MemoryStore


def _ids(project: Project, stage: int, link: int) -> tuple[str, str]:
    s = project.stages[stage]
    return s.id, s.links[link].id


@pytest.fixture
def seeded(service: ItemService, project: Project) -> dict[str, Item]:
    """Three extra items spread over two stages."""
    return {
        "gas": service.add_item(
            *_ids(project, 3, 1),
            {"description": "Medical gas design", "participants": ["MEP"], "priority": "low"},
        ),
        "theatre": service.add_item(
            *_ids(project, 3, 1),
            {
                "description": "Clean theatre design",
                "participants": ["Cleanroom Specialist"],
                "status": "in-progress",
                "notes": "ISO class 5",
            },
        ),
        "install": service.add_item(
            *_ids(project, 5, 3),
            {"description": "Equipment install", "participants": ["Contractor"], "status": "done"},
        ),
    }


# --- CRUD ---


def test_add_item_defaults(service: ItemService, project: Project, backend: MemoryStore):
    stage_id, link_id = _ids(project, 0, 1)
    item = service.add_item(stage_id, link_id, {"description": "X", "participants": ["A"]})

    assert item.status == ItemStatus.TODO
    assert item.priority == "medium"
    assert project.stages[0].links[1].items == [item]
    stored = json.loads(backend.data["hospital-project-manager-data"])
    assert stored["stages"][0]["links"][1]["items"][0]["id"] == item.id


def test_add_item_missing_link(service: ItemService, project: Project):
    with pytest.raises(LinkNotFoundError):
        service.add_item(project.stages[0].id, "missing", {"description": "X"})
    with pytest.raises(LinkNotFoundError):
        service.add_item("missing", project.stages[0].links[0].id, {"description": "X"})


@pytest.mark.parametrize(
    "field",
    [{"startDate": "garbage"}, {"endDate": "2024-02-30"}, {"status": "blocked"}, {"priority": "urgent"}],
)
def test_add_item_rejects_bad_field_values(service: ItemService, project: Project, field):
    stage_id, link_id = _ids(project, 0, 0)
    with pytest.raises(InvalidItemError):
        service.add_item(stage_id, link_id, {"description": "X", "participants": ["A"], **field})
    assert len(service.get_items_by_link(stage_id, link_id)) == 1


def test_add_item_emits_event(service: ItemService, project: Project, event_bus: EventBus):
    captured = []
    event_bus.on(EventType.ITEM_ADDED, lambda event_type, data: captured.append(data))
    stage_id, link_id = _ids(project, 0, 0)

    item = service.add_item(stage_id, link_id, {"description": "X"})
    assert captured == [{"stage_id": stage_id, "link_id": link_id, "item_id": item.id}]


def test_add_item_touches_project(service: ItemService, project: Project):
    project.updated_at = "2000-01-01T00:00:00+00:00"
    service.add_item(*_ids(project, 0, 0), {"description": "X"})
    assert project.updated_at != "2000-01-01T00:00:00+00:00"


def test_update_item(service: ItemService, project: Project, seeded):
    stage_id, link_id = _ids(project, 3, 1)
    changed = seeded["gas"].model_copy(update={"notes": "Add vacuum"})

    result = service.update_item(stage_id, link_id, changed)
    assert result.notes == "Add vacuum"
    assert service.get_item(stage_id, link_id, changed.id).notes == "Add vacuum"


def test_update_item_unknown_id_raises(service: ItemService, project: Project):
    with pytest.raises(ItemNotFoundError):
        service.update_item(*_ids(project, 0, 0), Item(description="stranger"))


def test_delete_item(service: ItemService, project: Project, seeded):
    stage_id, link_id = _ids(project, 3, 1)
    assert service.delete_item(stage_id, link_id, seeded["gas"].id) is True
    assert service.get_item(stage_id, link_id, seeded["gas"].id) is None
    assert [i.id for i in service.get_items_by_link(stage_id, link_id)] == [seeded["theatre"].id]


def test_delete_item_missing_link(service: ItemService, project: Project):
    with pytest.raises(LinkNotFoundError):
        service.delete_item(project.stages[0].id, "missing", "item")


# --- Queries ---


def test_get_item_missing_returns_none(service: ItemService, project: Project):
    assert service.get_item("missing", "missing", "missing") is None
    assert service.get_item(*_ids(project, 0, 0), "missing") is None


def test_get_items_by_link_and_stage(service: ItemService, project: Project, seeded):
    assert len(service.get_items_by_link(*_ids(project, 3, 1))) == 2
    assert len(service.get_items_by_stage(project.stages[3].id)) == 2
    assert service.get_items_by_link("missing", "missing") == []
    assert service.get_items_by_stage("missing") == []


def test_get_all_items_order(service: ItemService, project: Project, seeded):
    items = service.get_all_items()
    sample = project.stages[0].links[0].items[0]
    assert [i.id for i in items] == [sample.id, seeded["gas"].id, seeded["theatre"].id, seeded["install"].id]


def test_filters_by_status_and_priority(service: ItemService, seeded):
    assert service.get_items_by_status("done") == [seeded["install"]]
    assert service.get_items_by_status("in-progress") == [seeded["theatre"]]
    assert service.get_items_by_priority("low") == [seeded["gas"]]
    assert len(service.get_items_by_priority("high")) == 1


# --- Search ---


def test_search_description(service: ItemService, seeded):
    assert service.search_items("DESIGN") == [seeded["gas"], seeded["theatre"]]


def test_search_participants_and_notes(service: ItemService, seeded):
    assert service.search_items("contractor") == [seeded["install"]]
    assert service.search_items("iso class") == [seeded["theatre"]]


def test_search_no_match(service: ItemService, seeded):
    assert service.search_items("helipad") == []


@pytest.mark.parametrize("keyword", ["", "   ", None])
def test_search_blank_returns_all(service: ItemService, seeded, keyword):
    assert service.search_items(keyword) == service.get_all_items()


# --- Statistics ---


def test_statistics_buckets(service: ItemService, seeded):
    stats = service.get_item_statistics()
    assert stats.total == 4
    assert stats.by_status == {"todo": 2, "in-progress": 1, "done": 1}
    assert stats.by_priority == {"low": 1, "medium": 2, "high": 1}
    assert stats.completion_rate == 25


def test_statistics_sum_to_total(service: ItemService, seeded):
    stats = service.get_item_statistics()
    assert sum(stats.by_status.values()) == stats.total
    assert sum(stats.by_priority.values()) == stats.total
    assert stats.total == len(service.get_all_items())


def test_statistics_empty_project_has_zero_buckets():
    store = ProjectStore(MemoryStore())
    store.load_project_data({"stages": []})
    stats = ItemService(store).get_item_statistics()
    assert stats.total == 0
    assert stats.by_status == {"todo": 0, "in-progress": 0, "done": 0}
    assert stats.by_priority == {"low": 0, "medium": 0, "high": 0}
    assert stats.completion_rate == 0


def test_add_item_increments_statistics(service: ItemService, project: Project):
    before = service.get_item_statistics()
    service.add_item(*_ids(project, 0, 1), {"description": "X", "participants": ["A"]})
    after = service.get_item_statistics()

    assert after.total == before.total + 1
    assert after.by_status["todo"] == before.by_status["todo"] + 1
    assert after.by_status["done"] == before.by_status["done"]


# --- Status ---


def test_update_item_status(service: ItemService, project: Project, seeded):
    stage_id, link_id = _ids(project, 3, 1)
    updated = service.update_item_status(stage_id, link_id, seeded["gas"].id, "done")

    assert updated.status == ItemStatus.DONE
    assert service.get_item(stage_id, link_id, seeded["gas"].id).status == "done"


@pytest.mark.parametrize("bad", ["blocked", "DONE", "", "in_progress", ["done"], None])
def test_update_item_status_invalid_leaves_item(service: ItemService, project: Project, seeded, bad):
    stage_id, link_id = _ids(project, 3, 1)
    with pytest.raises(InvalidEnumError):
        service.update_item_status(stage_id, link_id, seeded["gas"].id, bad)
    assert service.get_item(stage_id, link_id, seeded["gas"].id) == seeded["gas"]


def test_update_item_status_missing_item(service: ItemService, project: Project):
    with pytest.raises(ItemNotFoundError):
        service.update_item_status(*_ids(project, 0, 0), "missing", "done")


def test_update_item_status_missing_link(service: ItemService, project: Project):
    with pytest.raises(LinkNotFoundError):
        service.update_item_status(project.stages[0].id, "missing", "item", "done")


def test_batch_update_partial_success(service: ItemService, project: Project, seeded, caplog):
    refs = [
        ItemRef(*_ids(project, 3, 1), seeded["gas"].id),
        ItemRef(*_ids(project, 3, 1), "missing"),
        (*_ids(project, 5, 3), seeded["install"].id),
        ItemRef("missing", "missing", "missing"),
    ]
    updated = service.batch_update_item_status(refs, "in-progress")

    assert [i.id for i in updated] == [seeded["gas"].id, seeded["install"].id]
    assert all(i.status == ItemStatus.IN_PROGRESS for i in updated)
    assert "skipped" in caplog.text


def test_batch_update_invalid_status(service: ItemService, project: Project, seeded):
    with pytest.raises(InvalidStatusError):
        service.batch_update_item_status([ItemRef(*_ids(project, 3, 1), seeded["gas"].id)], "paused")
    assert service.get_item(*_ids(project, 3, 1), seeded["gas"].id).status == ItemStatus.TODO


# --- Copy / move ---


def test_copy_item(service: ItemService, project: Project, seeded):
    src = _ids(project, 3, 1)
    dst = _ids(project, 4, 2)
    copy = service.copy_item(*src, seeded["theatre"].id, *dst)

    assert copy.id != seeded["theatre"].id
    assert copy.model_dump(exclude={"id"}) == seeded["theatre"].model_dump(exclude={"id"})
    assert service.get_items_by_link(*dst) == [copy]
    assert len(service.get_items_by_link(*src)) == 2


def test_copy_item_missing_source(service: ItemService, project: Project):
    with pytest.raises(ItemNotFoundError):
        service.copy_item(*_ids(project, 0, 0), "missing", *_ids(project, 1, 0))


def test_move_item(service: ItemService, project: Project, seeded):
    src = _ids(project, 3, 1)
    dst = _ids(project, 8, 5)
    moved = service.move_item(*src, seeded["gas"].id, *dst)

    assert service.get_item(*src, seeded["gas"].id) is None
    assert service.get_items_by_link(*dst) == [moved]
    assert moved.id != seeded["gas"].id
    assert moved.description == seeded["gas"].description
    assert moved.participants == seeded["gas"].participants
    assert moved.priority == seeded["gas"].priority


def test_move_item_to_missing_link_keeps_source(service: ItemService, project: Project, seeded):
    src = _ids(project, 3, 1)
    total = len(service.get_all_items())

    with pytest.raises(LinkNotFoundError):
        service.move_item(*src, seeded["gas"].id, project.stages[8].id, "missing")

    assert service.get_item(*src, seeded["gas"].id) == seeded["gas"]
    assert len(service.get_all_items()) == total


# --- Validation ---


def test_validate_item_ok(service: ItemService):
    result = service.validate_item({"description": "X", "participants": ["A"], "status": "done", "priority": "high"})
    assert result.is_valid
    assert result.errors == []


def test_validate_item_collects_every_error(service: ItemService):
    result = service.validate_item({"description": "  ", "participants": "A", "status": "later", "priority": "urgent"})
    assert not result.is_valid
    assert len(result.errors) == 4


def test_validate_item_missing_fields(service: ItemService):
    result = service.validate_item({})
    assert len(result.errors) == 2


def test_validate_item_date_order(service: ItemService):
    result = service.validate_item(
        {"description": "X", "participants": [], "startDate": "2025-05-01", "endDate": "2025-04-01"}
    )
    assert result.errors == ["Start date must not be after end date"]


@pytest.mark.parametrize(("key", "value"), [("startDate", "2024-13-45"), ("endDate", "soon"), ("startDate", 20240501)])
def test_validate_item_unparseable_date(service: ItemService, key, value):
    result = service.validate_item({"description": "X", "participants": ["A"], key: value})
    assert result.errors == [f"Invalid {key}: {value}"]


def test_validate_item_blank_dates_are_unset(service: ItemService):
    result = service.validate_item({"description": "X", "participants": [], "startDate": "", "endDate": None})
    assert result.is_valid


def test_validate_item_does_not_raise_on_odd_types(service: ItemService):
    result = service.validate_item({"description": 5, "participants": None, "status": ["todo"]})
    assert not result.is_valid
    assert result.to_dict()["isValid"] is False
