# ===== app/services/availability/slot_engine.py =====
"""
Slot computation for office availability.

Dates are "YYYY-MM-DD" strings and times are zero-padded 24h "HH:MM"
strings. Both are fixed width, so plain string comparison orders them.
"""
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Union

TIME_PATTERN = re.compile(r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateLike = Union[date, str]


@dataclass(frozen=True)
class TimeSlot:
    start: str
    end: str
    available: bool = True

    def to_dict(self) -> Dict:
        return {"start": self.start, "end": self.end, "available": self.available}


@dataclass(frozen=True)
class DaySchedule:
    start: str
    end: str
    available: bool

    @classmethod
    def from_dict(cls, data: Dict) -> "DaySchedule":
        return cls(
            start=data.get("start", "00:00"),
            end=data.get("end", "00:00"),
            available=bool(data.get("available", False)),
        )

    def to_dict(self) -> Dict:
        return {"start": self.start, "end": self.end, "available": self.available}


@dataclass(frozen=True)
class UnavailableDateRange:
    start: str
    end: str
    reason: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "UnavailableDateRange":
        return cls(start=data["start"], end=data["end"], reason=data.get("reason"))

    def to_dict(self) -> Dict:
        data = {"start": self.start, "end": self.end}
        if self.reason is not None:
            data["reason"] = self.reason
        return data

    def contains(self, date_str: str) -> bool:
        return self.start <= date_str <= self.end


@dataclass
class AvailabilityConfig:
    default_schedule: Dict[str, DaySchedule] = field(default_factory=dict)
    slot_duration: int = 30
    unavailable_date_ranges: List[UnavailableDateRange] = field(default_factory=list)
    unavailable_dates: List[str] = field(default_factory=list)
    date_overrides: Dict[str, DaySchedule] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict) -> "AvailabilityConfig":
        """Build from the camelCase shape stored on OfficeAvailability"""
        return cls(
            default_schedule={
                str(day): DaySchedule.from_dict(s)
                for day, s in (data.get("defaultSchedule") or {}).items()
            },
            slot_duration=int(data.get("slotDuration") or 30),
            unavailable_date_ranges=[
                UnavailableDateRange.from_dict(r) for r in (data.get("unavailableDateRanges") or [])
            ],
            unavailable_dates=list(data.get("unavailableDates") or []),
            date_overrides={
                d: DaySchedule.from_dict(s) for d, s in (data.get("dateOverrides") or {}).items()
            },
        )

    def to_dict(self) -> Dict:
        return {
            "defaultSchedule": {day: s.to_dict() for day, s in self.default_schedule.items()},
            "slotDuration": self.slot_duration,
            "unavailableDateRanges": [r.to_dict() for r in self.unavailable_date_ranges],
            "unavailableDates": list(self.unavailable_dates),
            "dateOverrides": {d: s.to_dict() for d, s in self.date_overrides.items()},
        }


# ============================================================================
# Formatting / validation helpers
# ============================================================================

def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_time(minutes: int) -> str:
    """Minutes since midnight -> "HH:MM" """
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_date(value: DateLike) -> str:
    if isinstance(value, str):
        return value
    return value.strftime("%Y-%m-%d")


def is_valid_time_format(value: str) -> bool:
    return bool(value) and TIME_PATTERN.match(value) is not None


def is_valid_date_format(value: str) -> bool:
    """Shape check plus a real calendar date (2025-02-30 is rejected)."""
    if not value or DATE_PATTERN.match(value) is None:
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def parse_date(value: str) -> date:
    """
    Raises:
        ValueError: If value is not a valid YYYY-MM-DD date
    """
    if not is_valid_date_format(value):
        raise ValueError("Invalid date format. Use YYYY-MM-DD")
    return datetime.strptime(value, "%Y-%m-%d").date()


def day_of_week(value: DateLike) -> int:
    """0 = Sunday, 1 = Monday, ..., 6 = Saturday"""
    if isinstance(value, str):
        value = parse_date(value)
    return value.isoweekday() % 7


def default_schedule() -> Dict[str, DaySchedule]:
    """Monday-Friday 09:00-17:00, weekend closed"""
    schedule = {}
    for day in range(7):
        schedule[str(day)] = DaySchedule(start="09:00", end="17:00", available=day not in (0, 6))
    return schedule


# ============================================================================
# Slot generation
# ============================================================================

def generate_time_slots(schedule: DaySchedule, slot_duration: int) -> List[TimeSlot]:
    """
    Consecutive slots of exactly slot_duration minutes from start to end.
    A trailing remainder shorter than slot_duration is dropped.
    """
    if not schedule.available or slot_duration <= 0:
        return []

    current = time_to_minutes(schedule.start)
    end = time_to_minutes(schedule.end)

    slots = []
    while current + slot_duration <= end:
        slots.append(TimeSlot(start=format_time(current), end=format_time(current + slot_duration)))
        current += slot_duration

    return slots


def is_date_in_unavailable_range(value: DateLike, ranges: Iterable[UnavailableDateRange]) -> bool:
    date_str = format_date(value)
    return any(r.contains(date_str) for r in ranges)


def is_date_unavailable(value: DateLike, unavailable_dates: Iterable[str]) -> bool:
    return format_date(value) in set(unavailable_dates)


def resolve_day_schedule(value: DateLike, config: AvailabilityConfig) -> Optional[DaySchedule]:
    """
    Schedule in force on a date, or None when nothing can be booked.

    Precedence: blackout ranges, blackout dates, date override, weekday default.
    """
    date_str = format_date(value)

    if is_date_in_unavailable_range(date_str, config.unavailable_date_ranges):
        return None

    if is_date_unavailable(date_str, config.unavailable_dates):
        return None

    schedule = config.date_overrides.get(date_str)
    if schedule is None:
        schedule = config.default_schedule.get(str(day_of_week(date_str)))

    if schedule is None or not schedule.available:
        return None

    return schedule


def get_available_time_slots(
        value: DateLike,
        config: AvailabilityConfig,
        booked_slots: Iterable[str] = ()
) -> List[TimeSlot]:
    """
    Free slots on a date. A slot is taken when a booking starts exactly at
    its start time; booking length is not considered.
    """
    schedule = resolve_day_schedule(value, config)
    if schedule is None:
        return []

    booked = set(booked_slots)
    return [
        slot for slot in generate_time_slots(schedule, config.slot_duration)
        if slot.start not in booked
    ]
