"""Shared pydantic base for project records."""

from __future__ import annotations

from datetime import date
from typing import Annotated, Any, Self

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ISO 8601 calendar date on the wire; "" and null both mean "not set".
OptionalDate = Annotated[date | None, BeforeValidator(_blank_to_none)]


class Record(BaseModel):
    """A project tree record serialized with camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_missing(cls, data: Any) -> Any:
        # Null fields and a blank id fall back to their defaults.
        if isinstance(data, dict):
            data = {k: v for k, v in data.items() if v is not None}
            if not data.get("id"):
                data.pop("id", None)
        return data

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_storage(self) -> dict[str, Any]:
        return self.to_json()

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Self:
        return cls.model_validate(data)


def check_date_range(start: date | None, end: date | None) -> None:
    if start is not None and end is not None and start > end:
        raise ValueError(f"start date {start.isoformat()} is after end date {end.isoformat()}")
