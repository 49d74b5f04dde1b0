"""
Pydantic schemas for office availability configuration
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Dict, List, Any

from app.services.availability.slot_engine import is_valid_date_format, is_valid_time_format


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys (defaultSchedule, slotDuration, ...)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DayScheduleSchema(CamelModel):
    start: str = Field(..., description="HH:MM (24h)")
    end: str = Field(..., description="HH:MM (24h)")
    available: bool = True

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v):
        if not is_valid_time_format(v):
            raise ValueError("Invalid time format. Use HH:MM")
        return v


class UnavailableDateRangeSchema(CamelModel):
    start: str
    end: str
    reason: Optional[str] = None

    @field_validator("start", "end")
    @classmethod
    def validate_date(cls, v):
        if not is_valid_date_format(v):
            raise ValueError("Invalid date format. Use YYYY-MM-DD")
        return v


class AvailabilityUpdate(CamelModel):
    """Partial update: only fields that are sent are changed"""
    default_schedule: Optional[Dict[str, DayScheduleSchema]] = None
    slot_duration: Optional[int] = Field(None, ge=1, le=24 * 60, description="Slot length in minutes")
    unavailable_date_ranges: Optional[List[UnavailableDateRangeSchema]] = None
    unavailable_dates: Optional[List[str]] = None
    date_overrides: Optional[Dict[str, DayScheduleSchema]] = None

    @field_validator("default_schedule")
    @classmethod
    def validate_weekdays(cls, v):
        if v is None:
            return v
        for day in v:
            if day not in {str(d) for d in range(7)}:
                raise ValueError("defaultSchedule keys must be weekday indexes 0 (Sunday) to 6 (Saturday)")
        return v

    @field_validator("unavailable_dates")
    @classmethod
    def validate_dates(cls, v):
        if v is None:
            return v
        for d in v:
            if not is_valid_date_format(d):
                raise ValueError("Invalid date format. Use YYYY-MM-DD")
        return v

    @field_validator("date_overrides")
    @classmethod
    def validate_override_dates(cls, v):
        if v is None:
            return v
        for d in v:
            if not is_valid_date_format(d):
                raise ValueError("Invalid date format. Use YYYY-MM-DD")
        return v

    def to_partial_config(self) -> Dict[str, Any]:
        """camelCase dict holding only the fields the client sent"""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)

