from datetime import date, time, datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.appointment import AppointmentStatus
from .doctor import DoctorSummary
from .patient import PatientSummary

class AppointmentCreate(BaseModel):
    doctor_id: int
    appointment_date: date
    appointment_time: time
    symptoms: str = Field(..., max_length=2000)

    @field_validator("symptoms")
    @classmethod
    def symptoms_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Symptoms are required")
        return v.strip()

    @field_validator("appointment_date")
    @classmethod
    def date_not_in_past(cls, v: date) -> date:
        if v < date.today():
            raise ValueError("Appointment date cannot be in the past")
        return v

class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus
    notes: Optional[str] = None

class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    doctor_id: int
    appointment_date: date
    appointment_time: time
    status: AppointmentStatus
    symptoms: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    doctor: Optional[DoctorSummary] = None
    patient: Optional[PatientSummary] = None
