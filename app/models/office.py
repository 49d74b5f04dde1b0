# app/models/office.py
"""
Office and staff assignment models
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from app.models.base import Base


class Office(Base):
    __tablename__ = "offices"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    address = Column(String(255), nullable=True)
    phone_number = Column(String(20), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    roles = relationship("Role", back_populates="office")
    staff = relationship("Staff", back_populates="office")
    availability = relationship("OfficeAvailability", back_populates="office", uselist=False)

    def __repr__(self):
        return f"<Office(id={self.id}, name={self.name})>"


class Staff(Base):
    """Links a user account to the office they work for (staff or manager)"""
    __tablename__ = "staff"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    office_id = Column(Uuid(as_uuid=True), ForeignKey("offices.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="staff")
    office = relationship("Office", back_populates="staff")

    def __repr__(self):
        return f"<Staff(user_id={self.user_id}, office_id={self.office_id})>"
