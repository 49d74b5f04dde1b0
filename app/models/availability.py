from sqlalchemy import Column, Integer, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.models.base import Base
import uuid


class OfficeAvailability(Base):
    """Bookable hours of an office (one row per office)"""
    __tablename__ = "office_availability"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    office_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("offices.id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )

    # {"0": {"start": "09:00", "end": "17:00", "available": false}, ...}  0=Sunday, 6=Saturday
    default_schedule = Column(JSON, nullable=False, default=dict)
    slot_duration = Column(Integer, nullable=False, default=30)  # minutes

    # [{"start": "2025-12-24", "end": "2025-12-31", "reason": "Holidays"}]
    unavailable_date_ranges = Column(JSON, nullable=False, default=list)
    # ["2025-10-10", ...]
    unavailable_dates = Column(JSON, nullable=False, default=list)
    # {"2025-10-15": {"start": "10:00", "end": "14:00", "available": true}}
    date_overrides = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    office = relationship("Office", back_populates="availability")

    def to_config_dict(self):
        """Convert to the camelCase config shape used by the API"""
        return {
            "defaultSchedule": self.default_schedule or {},
            "slotDuration": self.slot_duration,
            "unavailableDateRanges": self.unavailable_date_ranges or [],
            "unavailableDates": self.unavailable_dates or [],
            "dateOverrides": self.date_overrides or {},
        }
