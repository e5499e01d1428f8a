"""
Craving event schemas.

POST /events  → CravingEventRequest  → CravingEventResponse
GET  /events  → CravingEventListResponse
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.services.event_store import Mood


class CravingEventRequest(BaseModel):
    """A single craving occurrence reported by the user.

    - Out-of-range numeric values are clamped, not rejected.
    - `hour` / `day_of_week` default to the values of `timestamp`.
    - Trigger ids are opaque; duplicates are collapsed.
    """
    model_config = ConfigDict(use_enum_values=True)

    mood: Mood = Field(description="Mood at the time of the craving.", examples=["bad"])
    stress_level: int = Field(description="1–10, clamped.", examples=[7])
    craving_level: int = Field(description="1–10, clamped.", examples=[8])
    did_smoke: bool = Field(description="Outcome: True if the user smoked.")
    triggers: list[str] = Field(
        default_factory=list,
        description="Trigger ids, e.g. morning_coffee, stress.",
        examples=[["morning_coffee", "stress"]],
    )
    activity: Annotated[str, Field(max_length=500)] = ""
    location: Optional[Annotated[str, Field(max_length=200)]] = None
    weather: Optional[Annotated[str, Field(max_length=100)]] = None
    timestamp: Optional[datetime] = Field(
        default=None,
        description="When the craving happened. Defaults to now (UTC).",
    )
    hour: Optional[int] = Field(default=None, description="0–23, clamped.")
    day_of_week: Optional[int] = Field(default=None, description="0 = Sunday … 6, clamped.")

    @field_validator("triggers")
    @classmethod
    def strip_triggers(cls, v: list[str]) -> list[str]:
        return [t.strip() for t in v if t and t.strip()]


class CravingEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    timestamp: str = Field(description="UTC ISO timestamp.")
    hour: int
    day_of_week: int
    mood: str
    stress_level: int
    craving_level: int
    did_smoke: bool
    activity: str
    triggers: list[str]
    location: Optional[str] = None
    weather: Optional[str] = None


class CravingEventListResponse(BaseModel):
    total: int
    items: list[CravingEventResponse]
