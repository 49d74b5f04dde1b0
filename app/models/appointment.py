# ===== app/models/appointment.py =====
from sqlalchemy import Column, String, Text, Date, DateTime, ForeignKey, Uuid
from sqlalchemy.sql import func
from app.models.base import Base
import uuid


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    office_id = Column(Uuid(as_uuid=True), ForeignKey("offices.id", ondelete="CASCADE"), nullable=False, index=True)
    request_id = Column(String(64), nullable=True)  # service request owned by the request module

    # Appointment details
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=True)  # "HH:MM", start marker of the booked slot
    notes = Column(Text, nullable=True)

    # Status tracking
    status = Column(String, default="pending", nullable=False)  # pending, approved, cancelled, completed

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
