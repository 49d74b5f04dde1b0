# ===== app/services/availability/availability_service.py =====
from typing import Any, Dict, List, Optional
from dataclasses import dataclass
from datetime import date
from uuid import UUID, uuid4
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from app.config.settings import get_settings
from app.core.role_rules import is_admin_role, is_manager_role
from app.models.appointment import Appointment
from app.models.availability import OfficeAvailability
from app.models.office import Office
from app.models.user import User
from app.services.availability.slot_engine import (
    AvailabilityConfig,
    default_schedule,
    format_date,
    get_available_time_slots,
    parse_date,
)
from app.services.user.user_service import UserService
import logging

logger = logging.getLogger(__name__)

INVALID_DATE_MESSAGE = "Invalid date format. Use YYYY-MM-DD"

# camelCase config key -> OfficeAvailability column
CONFIG_COLUMNS = {
    "defaultSchedule": "default_schedule",
    "slotDuration": "slot_duration",
    "unavailableDateRanges": "unavailable_date_ranges",
    "unavailableDates": "unavailable_dates",
    "dateOverrides": "date_overrides",
}


@dataclass
class AvailabilityResult:
    success: bool
    status_code: int = 200
    message: str = ""
    data: Optional[Dict[str, Any]] = None


def _insert_for(db: Session):
    """Dialect insert construct that supports ON CONFLICT."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


def _default_values(office_id: UUID) -> Dict[str, Any]:
    config = AvailabilityConfig(
        default_schedule=default_schedule(),
        slot_duration=get_settings().DEFAULT_SLOT_DURATION,
    ).to_dict()
    values = {column: config[key] for key, column in CONFIG_COLUMNS.items()}
    values["id"] = uuid4()
    values["office_id"] = office_id
    return values


class AvailabilityService:
    """Office availability configuration and bookable slots"""

    @staticmethod
    def _office_exists(db: Session, office_id: UUID) -> bool:
        return db.query(Office.id).filter(Office.id == office_id).first() is not None

    @staticmethod
    def _find(db: Session, office_id: UUID) -> Optional[OfficeAvailability]:
        return db.query(OfficeAvailability).filter(OfficeAvailability.office_id == office_id).first()

    @staticmethod
    def ensure_availability(db: Session, office_id: UUID) -> OfficeAvailability:
        """
        Row for the office, created with defaults on first access.
        Concurrent first reads are safe: the insert is ON CONFLICT DO NOTHING.
        """
        existing = AvailabilityService._find(db, office_id)
        if existing:
            return existing

        insert = _insert_for(db)
        stmt = insert(OfficeAvailability).values(**_default_values(office_id)).on_conflict_do_nothing(
            index_elements=["office_id"]
        )
        db.execute(stmt)
        db.commit()

        logger.info(f"Initialized default availability for office {office_id}")
        return AvailabilityService._find(db, office_id)

    @staticmethod
    def get_config(db: Session, office_id: UUID) -> AvailabilityResult:
        if not AvailabilityService._office_exists(db, office_id):
            return AvailabilityResult(success=False, status_code=404, message="Office not found")

        availability = AvailabilityService.ensure_availability(db, office_id)
        return AvailabilityResult(success=True, data=availability.to_config_dict())

    @staticmethod
    def _can_configure(db: Session, actor: Optional[User], office_id: UUID) -> Optional[AvailabilityResult]:
        """Only admins and the manager assigned to this office may configure it."""
        if actor is None:
            return AvailabilityResult(success=False, status_code=401, message="Unauthorized")

        if is_admin_role(actor.role_name):
            return None

        if not is_manager_role(actor.role_name):
            return AvailabilityResult(
                success=False,
                status_code=403,
                message="Only the office manager or an administrator can configure availability"
            )

        actor_office_id = UserService.get_staff_office_id(db, actor.id)
        if actor_office_id is None:
            return AvailabilityResult(success=False, status_code=403, message="Manager must be assigned to an office")

        if actor_office_id != office_id:
            return AvailabilityResult(
                success=False,
                status_code=403,
                message="Managers can only configure availability for their own office"
            )

        return None

    @staticmethod
    def update_config(
            db: Session,
            actor: Optional[User],
            office_id: UUID,
            partial: Dict[str, Any]
    ) -> AvailabilityResult:
        """
        Merge the given camelCase fields into the office config (upsert).
        Fields that are not present keep their stored or default value.
        """
        if not AvailabilityService._office_exists(db, office_id):
            return AvailabilityResult(success=False, status_code=404, message="Office not found")

        denial = AvailabilityService._can_configure(db, actor, office_id)
        if denial:
            logger.warning(
                f"User {actor.id if actor else None} denied configuring office {office_id}: {denial.message}"
            )
            return denial

        changes = {CONFIG_COLUMNS[k]: v for k, v in partial.items() if k in CONFIG_COLUMNS and v is not None}

        values = _default_values(office_id)
        values.update(changes)

        insert = _insert_for(db)
        stmt = insert(OfficeAvailability).values(**values)
        if changes:
            stmt = stmt.on_conflict_do_update(
                index_elements=["office_id"],
                set_={**changes, "updated_at": func.now()}
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=["office_id"])

        try:
            db.execute(stmt)
            db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to update availability for office {office_id}: {e}", exc_info=True)
            db.rollback()
            return AvailabilityResult(success=False, status_code=500, message="Failed to update availability")

        availability = AvailabilityService._find(db, office_id)
        db.refresh(availability)

        logger.info(f"Updated availability for office {office_id}: {sorted(changes)}")

        return AvailabilityResult(
            success=True,
            message="Availability updated successfully",
            data=availability.to_config_dict()
        )

    @staticmethod
    def get_booked_slots(db: Session, office_id: UUID, target_date: date) -> List[str]:
        """Start times of non-cancelled appointments on the date."""
        rows = db.query(Appointment.time).filter(
            Appointment.office_id == office_id,
            Appointment.date == target_date,
            Appointment.status != "cancelled",
            Appointment.time.isnot(None)
        ).order_by(Appointment.time).all()

        return [row.time for row in rows]

    @staticmethod
    def get_available_slots(db: Session, office_id: UUID, date_str: str) -> AvailabilityResult:
        """Config plus free and booked slots for one date."""
        try:
            target_date = parse_date(date_str)
        except ValueError:
            return AvailabilityResult(success=False, status_code=400, message=INVALID_DATE_MESSAGE)

        result = AvailabilityService.get_config(db, office_id)
        if not result.success:
            return result

        config = AvailabilityConfig.from_dict(result.data)
        booked = AvailabilityService.get_booked_slots(db, office_id, target_date)
        slots = get_available_time_slots(target_date, config, booked)

        return AvailabilityResult(
            success=True,
            data={
                "config": result.data,
                "date": format_date(target_date),
                "availableSlots": [s.to_dict() for s in slots],
                "bookedSlots": booked,
            }
        )

    @staticmethod
    def get_slot_starts(db: Session, office_id: UUID, date_str: Optional[str]) -> AvailabilityResult:
        """
        Bare start times for a booking form. Unlike get_config this does not
        create a default configuration.
        """
        if not date_str:
            return AvailabilityResult(
                success=False, status_code=400, message="Date parameter is required (format: YYYY-MM-DD)"
            )

        try:
            target_date = parse_date(date_str)
        except ValueError:
            return AvailabilityResult(success=False, status_code=400, message=INVALID_DATE_MESSAGE)

        availability = AvailabilityService._find(db, office_id)
        if not availability:
            return AvailabilityResult(success=False, status_code=404, message="Office availability not configured")

        config = AvailabilityConfig.from_dict(availability.to_config_dict())
        booked = AvailabilityService.get_booked_slots(db, office_id, target_date)
        starts = [s.start for s in get_available_time_slots(target_date, config, booked)]

        return AvailabilityResult(
            success=True,
            data={
                "date": format_date(target_date),
                "availableSlots": starts,
                "bookedSlots": booked,
                "totalSlots": len(starts),
            }
        )
