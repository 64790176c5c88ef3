"""Availability model definitions."""

from sqlalchemy import Column, Integer, Boolean, ForeignKey, String
from medbook.database import Base


class AvailabilitySlot(Base):
    """Represents a bookable window published by a doctor.

    Dates are stored as ``YYYY-MM-DD`` and times as zero-padded ``HH:MM`` so
    that string ordering matches chronological ordering.
    """
    __tablename__ = "availability_slots"

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("doctor_profiles.id"), nullable=False)
    date = Column(String(10), nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    is_booked = Column(Boolean, nullable=False, default=False)
