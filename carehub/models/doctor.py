from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, Text, Float, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base

class Specialization(str, enum.Enum):
    GENERAL_PRACTICE = "general_practice"
    CARDIOLOGY = "cardiology"
    DERMATOLOGY = "dermatology"
    NEUROLOGY = "neurology"
    ORTHOPEDICS = "orthopedics"
    PEDIATRICS = "pediatrics"
    PSYCHIATRY = "psychiatry"
    GYNECOLOGY = "gynecology"
    OPHTHALMOLOGY = "ophthalmology"
    ENT = "ent"

class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=True)

    # Personal information
    full_name = Column(String(200), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)

    # Professional information
    specialization = Column(String(50), nullable=False)
    qualifications = Column(Text, nullable=False, default="")
    experience_years = Column(Integer, nullable=False, default=0)
    consultation_fee = Column(Float, nullable=False, default=0)
    bio = Column(Text, nullable=True)

    # Availability
    available_days = Column(JSON, nullable=False, default=list)
    available_hours = Column(String(20), nullable=False, default="09:00-17:00")
    symptoms = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="doctor")
    appointments = relationship("Appointment", back_populates="doctor", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Doctor(id={self.id}, name='{self.full_name}', specialization='{self.specialization}')>"
