"""Doctor profile model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from medbook.database import Base


class DoctorProfile(Base):
    """Professional details and approval state of a doctor account."""
    __tablename__ = "doctor_profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    specialization = Column(String, nullable=False, index=True)
    hospital = Column(String, nullable=False, default="")
    location = Column(String, nullable=False, default="")
    fee = Column(Integer, nullable=False, default=0)
    experience = Column(Integer, nullable=False, default=0)
    about = Column(Text)
    status = Column(String, nullable=False, default="pending", index=True)

    user = relationship("User", lazy="joined")
