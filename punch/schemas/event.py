"""
Punch event schemas: the engine's event value type and the API request/response DTOs.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, field_serializer

from punch.models.event import EventType, PunchDirection
from punch.utils.datetime_utils import ensure_utc, iso_8601_utc


class PunchEvent(BaseModel):
    """One immutable entry of the event log, as consumed by the report engine. Clock is UTC."""
    id: Optional[int] = None
    kind: EventType
    clock: datetime
    note: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("clock")
    @classmethod
    def _clock_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_serializer("clock", when_used="json")
    def _ser_clock(self, dt: datetime) -> str:
        return iso_8601_utc(dt)


class PunchRequest(BaseModel):
    """Schema for punch-in/punch-out request"""
    direction: PunchDirection = Field(..., description="IN or OUT")
    note: Optional[str] = Field(None, max_length=2000, description="Optional note stored with the punch")


class NoteRequest(BaseModel):
    """Schema for a free-standing note event"""
    note: str = Field(..., min_length=1, max_length=2000)

    @field_validator("note")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("note must not be blank")
        return v.strip()


class EventOut(BaseModel):
    """Schema for a stored event. Clock serialized as ISO-8601 UTC (Z)."""
    id: int
    project_id: int
    event_type: EventType
    clock: datetime
    note: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("clock", when_used="always")
    def _ser_clock(self, dt: datetime) -> str:
        return iso_8601_utc(dt)
