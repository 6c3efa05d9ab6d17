"""JSON import/export helpers.

Everything here works on plain dicts and strings so the project tree can be
checked, merged and previewed before it is turned into models. File access
is confined to ``read_from_file`` and ``download_as_file``.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from hospm.errors import FileReadError, FileWriteError, ParseError, SerializeError

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Outcome of an advisory structural check."""

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {"isValid": self.is_valid, "errors": list(self.errors)}


def parse(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ParseError(f"JSON parse failed: {e}") from e


def stringify(obj: Any, pretty: bool = True, indent: int = 2) -> str:
    try:
        if pretty:
            return json.dumps(obj, indent=indent, ensure_ascii=False)
        return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializeError(f"JSON serialization failed: {e}") from e


def is_valid_json(text: str) -> bool:
    try:
        parse(text)
    except ParseError:
        return False
    return True


def compress(obj: Any) -> str:
    """Serialize without whitespace."""
    return stringify(obj, pretty=False)


def prettify(text: str) -> str:
    """Re-indent a JSON document."""
    return stringify(parse(text))


def deep_clone(obj: Any) -> Any:
    return copy.deepcopy(obj)


def validate_project_data(data: Any) -> ValidationResult:
    """Check the stages -> links -> items shape of a project document.

    Every missing field of every entity is reported, numbered from 1 in
    document order. Empty lists are valid.
    """
    result = ValidationResult()
    errors = result.errors

    if not isinstance(data, dict):
        errors.append("Project data must be an object")
        return result

    stages = data.get("stages")
    if not isinstance(stages, list):
        errors.append("Missing stages field or stages is not a list")
        return result

    for s, stage in enumerate(stages, start=1):
        if not isinstance(stage, dict):
            errors.append(f"Stage {s} must be an object")
            continue
        if not stage.get("id"):
            errors.append(f"Stage {s} is missing id")
        if not stage.get("name"):
            errors.append(f"Stage {s} is missing name")
        links = stage.get("links")
        if not isinstance(links, list):
            errors.append(f"Stage {s} is missing links or links is not a list")
            continue

        for k, link in enumerate(links, start=1):
            where = f"Stage {s} link {k}"
            if not isinstance(link, dict):
                errors.append(f"{where} must be an object")
                continue
            if not link.get("id"):
                errors.append(f"{where} is missing id")
            if not link.get("name"):
                errors.append(f"{where} is missing name")
            items = link.get("items")
            if not isinstance(items, list):
                errors.append(f"{where} is missing items or items is not a list")
                continue

            for i, item in enumerate(items, start=1):
                if not isinstance(item, dict):
                    errors.append(f"{where} item {i} must be an object")
                    continue
                if not item.get("id"):
                    errors.append(f"{where} item {i} is missing id")
                if not item.get("description"):
                    errors.append(f"{where} item {i} is missing description")

    return result


def merge_project_data(base: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    """Additively merge ``incoming`` into a copy of ``base``.

    Stages are matched by name, then links by name within a matched stage.
    Items of a matched link are appended after the base items without
    deduplication; unmatched links and stages are appended whole. When names
    repeat, the first match in ``base`` wins.
    """
    merged = deep_clone(base)
    merged_stages = merged.setdefault("stages", [])

    new_stages = incoming.get("stages")
    if not isinstance(new_stages, list):
        return merged

    for new_stage in new_stages:
        stage = _find_by_name(merged_stages, new_stage.get("name"))
        if stage is None:
            merged_stages.append(deep_clone(new_stage))
            continue

        new_links = new_stage.get("links")
        if not isinstance(new_links, list):
            continue
        links = stage.setdefault("links", [])
        for new_link in new_links:
            link = _find_by_name(links, new_link.get("name"))
            if link is None:
                links.append(deep_clone(new_link))
                continue
            new_items = new_link.get("items")
            if isinstance(new_items, list):
                link.setdefault("items", []).extend(deep_clone(new_items))

    return merged


def _find_by_name(entries: list[dict[str, Any]], name: Any) -> dict[str, Any] | None:
    for entry in entries:
        if entry.get("name") == name:
            return entry
    return None


def preview_statistics(data: dict[str, Any]) -> dict[str, int]:
    """Count stages, links and items of an import candidate."""
    stages = data.get("stages") or []
    links = [link for stage in stages for link in stage.get("links") or []]
    items = [item for link in links for item in link.get("items") or []]
    return {"stages": len(stages), "links": len(links), "items": len(items)}


def generate_file_name(base_name: str = "project-data", extension: str = "json") -> str:
    """Return ``<base>-<YYYY-MM-DDTHH-MM-SS>.<ext>`` using the current UTC time."""
    timestamp = datetime.now(UTC).strftime("%Y-%m-%dT%H-%M-%S")
    return f"{base_name}-{timestamp}.{extension}"


def format_file_size(size: int) -> str:
    if size == 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    exponent = 0
    while exponent < len(units) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    value = round(size / 1024**exponent, 2)
    return f"{value:g} {units[exponent]}"


async def read_from_file(path: str | Path) -> Any:
    """Read and parse a ``.json`` file without blocking the event loop."""
    path = Path(path)
    if path.suffix.lower() != ".json":
        raise FileReadError(f"Not a JSON file: {path.name}")

    try:
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(f"Cannot read {path}: {e}") from e

    return parse(text)


def download_as_file(data: Any, path: str | Path, indent: int = 2) -> Path:
    """Write ``data`` as pretty JSON, adding a ``.json`` suffix when missing."""
    path = Path(path)
    if not path.name.endswith(".json"):
        path = path.with_name(f"{path.name}.json")

    text = stringify(data, indent=indent)
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise FileWriteError(f"Cannot write {path}: {e}") from e

    logger.info("Exported project data to %s", path)
    return path
