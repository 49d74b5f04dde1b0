from __future__ import annotations

from datetime import date

import pytest

from app.services.availability.slot_engine import (
    AvailabilityConfig,
    DaySchedule,
    UnavailableDateRange,
    day_of_week,
    default_schedule,
    generate_time_slots,
    get_available_time_slots,
    is_valid_date_format,
    is_valid_time_format,
    parse_date,
    resolve_day_schedule,
)

MONDAY = "2025-01-06"
SATURDAY = "2025-01-04"
SUNDAY = "2025-01-05"


def _config(**overrides) -> AvailabilityConfig:
    values = {"default_schedule": default_schedule(), "slot_duration": 30}
    values.update(overrides)
    return AvailabilityConfig(**values)


def test_slots_are_consecutive_and_fit_inside_the_window() -> None:
    slots = generate_time_slots(DaySchedule("09:00", "10:00", True), 30)
    assert [(s.start, s.end) for s in slots] == [("09:00", "09:30"), ("09:30", "10:00")]


def test_trailing_remainder_shorter_than_a_slot_is_dropped() -> None:
    slots = generate_time_slots(DaySchedule("09:00", "10:10", True), 30)
    assert [s.start for s in slots] == ["09:00", "09:30"]
    assert slots[-1].end == "10:00"


def test_window_shorter_than_one_slot_yields_nothing() -> None:
    assert generate_time_slots(DaySchedule("09:00", "09:20", True), 30) == []


def test_unavailable_schedule_yields_nothing() -> None:
    assert generate_time_slots(DaySchedule("09:00", "17:00", False), 30) == []


def test_slot_times_are_zero_padded() -> None:
    slots = generate_time_slots(DaySchedule("08:15", "09:45", True), 45)
    assert [(s.start, s.end) for s in slots] == [("08:15", "09:00"), ("09:00", "09:45")]


def test_day_of_week_counts_from_sunday() -> None:
    assert day_of_week(SUNDAY) == 0
    assert day_of_week(MONDAY) == 1
    assert day_of_week(date(2025, 1, 4)) == 6


def test_default_schedule_closes_weekends() -> None:
    config = _config()
    assert resolve_day_schedule(MONDAY, config) == DaySchedule("09:00", "17:00", True)
    assert resolve_day_schedule(SATURDAY, config) is None
    assert resolve_day_schedule(SUNDAY, config) is None
    assert len(get_available_time_slots(MONDAY, config)) == 16


def test_override_replaces_weekday_default() -> None:
    config = _config(date_overrides={MONDAY: DaySchedule("10:00", "11:00", True)})
    assert [s.start for s in get_available_time_slots(MONDAY, config)] == ["10:00", "10:30"]


def test_override_can_open_a_closed_weekend_day() -> None:
    config = _config(date_overrides={SATURDAY: DaySchedule("10:00", "11:00", True)})
    assert len(get_available_time_slots(SATURDAY, config)) == 2


def test_blackout_date_beats_override() -> None:
    config = _config(
        unavailable_dates=[MONDAY],
        date_overrides={MONDAY: DaySchedule("10:00", "11:00", True)},
    )
    assert get_available_time_slots(MONDAY, config) == []


def test_blackout_range_is_inclusive_and_beats_override() -> None:
    config = _config(
        unavailable_date_ranges=[UnavailableDateRange("2025-01-06", "2025-01-08", "Holiday")],
        date_overrides={"2025-01-08": DaySchedule("10:00", "11:00", True)},
    )
    assert get_available_time_slots("2025-01-06", config) == []
    assert get_available_time_slots("2025-01-08", config) == []
    assert len(get_available_time_slots("2025-01-09", config)) == 16


def test_booked_starts_are_excluded_by_exact_match_only() -> None:
    config = _config(date_overrides={MONDAY: DaySchedule("09:00", "11:00", True)})
    free = get_available_time_slots(MONDAY, config, ["09:30", "10:15"])
    assert [s.start for s in free] == ["09:00", "10:00", "10:30"]


def test_config_round_trips_camel_case_shape() -> None:
    data = {
        "defaultSchedule": {"1": {"start": "09:00", "end": "12:00", "available": True}},
        "slotDuration": 20,
        "unavailableDateRanges": [{"start": "2025-02-01", "end": "2025-02-03"}],
        "unavailableDates": ["2025-03-01"],
        "dateOverrides": {},
    }
    config = AvailabilityConfig.from_dict(data)
    assert config.slot_duration == 20
    assert config.to_dict() == data


@pytest.mark.parametrize("value,expected", [
    ("09:00", True), ("23:59", True), ("24:00", False), ("9:00", False), ("09:60", False), ("", False),
])
def test_time_format_validation(value: str, expected: bool) -> None:
    assert is_valid_time_format(value) is expected


def test_date_validation_rejects_impossible_dates() -> None:
    assert is_valid_date_format("2025-02-28")
    assert not is_valid_date_format("2025-02-30")
    assert not is_valid_date_format("06/01/2025")
    with pytest.raises(ValueError, match="Invalid date format"):
        parse_date("2025-13-01")
