"""Inbound request forms shared by the HTTP API and the services."""
from __future__ import annotations

from datetime import date
from typing import List, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .keys import MAX_INTEGER_ID
from .models import TeeShirtSize


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProfileForm(CamelModel):
    display_name: Optional[str] = Field(default=None, max_length=200)
    tee_shirt_size: Optional[TeeShirtSize] = None

    @field_validator("display_name")
    @classmethod
    def _normalize_display_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None


class ConferenceForm(CamelModel):
    name: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = None
    city: Optional[str] = Field(default=None, max_length=200)
    topics: List[str] = Field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    max_attendees: int = Field(default=0, ge=0, le=MAX_INTEGER_ID)

    @field_validator("name", "city")
    @classmethod
    def _strip(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None

    @field_validator("topics", mode="before")
    @classmethod
    def _normalise_topics(cls, value: object) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            raise ValueError("topics must be provided as a list of strings")
        normalised: List[str] = []
        seen: Set[str] = set()
        for item in value:
            if not isinstance(item, str):
                raise ValueError("topics must contain only strings")
            stripped = item.strip()
            if not stripped or stripped in seen:
                continue
            normalised.append(stripped)
            seen.add(stripped)
        return normalised

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _truncate_timestamp(cls, value: object) -> object:
        # Clients send full ISO timestamps ("2016-01-05T00:00:00.000Z"); keep the date part.
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                return None
            return stripped[:10]
        return value

    @model_validator(mode="after")
    def _check_date_order(self):  # type: ignore[override]
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class QueryFilter(CamelModel):
    field: str = Field(..., min_length=1)
    operator: str = Field(..., min_length=1)
    value: Union[int, str]


class ConferenceQueryForm(CamelModel):
    filters: List[QueryFilter] = Field(default_factory=list)
    order: List[str] = Field(default_factory=list)


__all__ = [
    "ConferenceForm",
    "ConferenceQueryForm",
    "ProfileForm",
    "QueryFilter",
]
