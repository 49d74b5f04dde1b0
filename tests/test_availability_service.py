from __future__ import annotations

import uuid
from datetime import date

import pytest

from app.models import Appointment, OfficeAvailability
from app.services.availability.availability_service import AvailabilityService
from tests.factories import make_office, make_role, make_user

MONDAY = "2025-01-06"


@pytest.fixture()
def office(db, catalog):
    return make_office(db, "North")


@pytest.fixture()
def other_office(db, catalog):
    return make_office(db, "South")


def _book(db, office, time, status="pending", day=date(2025, 1, 6)):
    db.add(Appointment(office_id=office.id, date=day, time=time, status=status))
    db.commit()


def test_get_config_creates_defaults_once(db, office) -> None:
    first = AvailabilityService.get_config(db, office.id)
    second = AvailabilityService.get_config(db, office.id)

    assert first.success and second.success
    assert first.data == second.data
    assert first.data["slotDuration"] == 30
    assert first.data["defaultSchedule"]["1"] == {"start": "09:00", "end": "17:00", "available": True}
    assert first.data["defaultSchedule"]["0"]["available"] is False
    assert db.query(OfficeAvailability).filter(OfficeAvailability.office_id == office.id).count() == 1


def test_get_config_for_unknown_office(db, catalog) -> None:
    result = AvailabilityService.get_config(db, uuid.uuid4())
    assert (result.status_code, result.message) == (404, "Office not found")


def test_admin_updates_only_given_fields(db, office, catalog) -> None:
    admin = make_user(db, "root", make_role(db, "admin"))
    AvailabilityService.get_config(db, office.id)

    result = AvailabilityService.update_config(db, admin, office.id, {
        "slotDuration": 60,
        "unavailableDates": ["2025-01-07"],
    })

    assert result.success
    assert result.data["slotDuration"] == 60
    assert result.data["unavailableDates"] == ["2025-01-07"]
    assert result.data["defaultSchedule"]["1"]["start"] == "09:00"


def test_update_creates_row_when_missing(db, office, catalog) -> None:
    admin = make_user(db, "root", make_role(db, "admin"))

    result = AvailabilityService.update_config(db, admin, office.id, {"slotDuration": 15})

    assert result.data["slotDuration"] == 15
    assert result.data["dateOverrides"] == {}


def test_manager_configures_own_office_only(db, office, other_office, catalog) -> None:
    role = make_role(db, "manager", ["office:configure", "office:manage"])
    manager = make_user(db, "boss", role, office=office)

    assert AvailabilityService.update_config(db, manager, office.id, {"slotDuration": 45}).success

    denied = AvailabilityService.update_config(db, manager, other_office.id, {"slotDuration": 45})
    assert denied.status_code == 403
    assert denied.message == "Managers can only configure availability for their own office"
    assert db.query(OfficeAvailability).filter(OfficeAvailability.office_id == other_office.id).count() == 0


def test_staff_cannot_configure_even_with_permission(db, office, catalog) -> None:
    role = make_role(db, "CLERK", ["office:configure"], office=office)
    clerk = make_user(db, "clerk", role, office=office)

    result = AvailabilityService.update_config(db, clerk, office.id, {"slotDuration": 45})
    assert result.status_code == 403


def test_available_slots_exclude_active_bookings(db, office) -> None:
    _book(db, office, "09:00")
    _book(db, office, "10:30", status="approved")
    _book(db, office, "11:00", status="cancelled")
    _book(db, office, None)
    _book(db, office, "09:30", day=date(2025, 1, 7))

    result = AvailabilityService.get_available_slots(db, office.id, MONDAY)

    data = result.data
    assert data["date"] == MONDAY
    assert data["bookedSlots"] == ["09:00", "10:30"]
    starts = [s["start"] for s in data["availableSlots"]]
    assert "09:00" not in starts and "10:30" not in starts
    assert "11:00" in starts
    assert len(starts) == 14
    assert data["config"]["slotDuration"] == 30


def test_available_slots_reject_bad_date(db, office) -> None:
    result = AvailabilityService.get_available_slots(db, office.id, "06-01-2025")
    assert (result.status_code, result.message) == (400, "Invalid date format. Use YYYY-MM-DD")


def test_slot_starts_require_existing_configuration(db, office) -> None:
    result = AvailabilityService.get_slot_starts(db, office.id, MONDAY)
    assert (result.status_code, result.message) == (404, "Office availability not configured")
    assert db.query(OfficeAvailability).count() == 0

    AvailabilityService.get_config(db, office.id)
    _book(db, office, "16:30")

    data = AvailabilityService.get_slot_starts(db, office.id, MONDAY).data
    assert data["availableSlots"][0] == "09:00"
    assert "16:30" not in data["availableSlots"]
    assert data["totalSlots"] == 15


def test_slot_starts_require_date(db, office) -> None:
    assert AvailabilityService.get_slot_starts(db, office.id, None).status_code == 400
