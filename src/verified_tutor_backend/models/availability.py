'''
Weekly availability API models.
'''
from datetime import time
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

HHMM_PATTERN = r'^\d{2}:\d{2}$'


class AvailabilitySlotInput(BaseModel):
    """
    One recurring weekly slot as sent by the client.
    day_of_week: 0 = Sunday ... 6 = Saturday. Times are local civil 'HH:MM'.
    """
    day_of_week: int = Field(..., ge=0, le=6)
    start_time: str = Field(..., pattern=HHMM_PATTERN)
    end_time: str = Field(..., pattern=HHMM_PATTERN)
    is_available: bool = True

    @field_validator('start_time', 'end_time')
    @classmethod
    def _valid_clock_time(cls, value: str) -> str:
        time.fromisoformat(value)
        return value


class AvailabilityUpdate(BaseModel):
    """Full replacement of the caller's weekly grid."""
    slots: list[AvailabilitySlotInput]


class AvailabilitySlotRead(BaseModel):
    id: Optional[UUID] = None
    owner_id: Optional[UUID] = None
    day_of_week: int
    start_time: time
    end_time: time
    is_available: bool = True

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('start_time', 'end_time')
    def _as_hhmm(self, value: time) -> str:
        return value.strftime('%H:%M')


class TimeWindow(BaseModel):
    """A half-open [start, end) window within one day."""
    start: time
    end: time

    model_config = ConfigDict(frozen=True)

    @field_serializer('start', 'end')
    def _as_hhmm(self, value: time) -> str:
        return value.strftime('%H:%M')
