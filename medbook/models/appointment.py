"""Appointment model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from medbook.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Appointment(Base):
    """Represents a patient's claim on one availability slot.

    ``date``, ``start_time`` and ``end_time`` are a snapshot of the slot taken
    at booking time. ``slot_id`` has no foreign key so that the record
    outlives the slot.
    """
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    doctor_id = Column(Integer, ForeignKey("doctor_profiles.id"), nullable=False)
    slot_id = Column(Integer, nullable=False)
    date = Column(String(10), nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    status = Column(String, nullable=False, default="pending")
    reason = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    patient = relationship("User", lazy="joined")
    doctor = relationship("DoctorProfile", lazy="joined")
