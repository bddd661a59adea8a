from typing import List, Optional
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, joinedload

from ..core.security import UserRole, AuthorizationError
from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..models.user import User
from ..schemas.appointment import AppointmentCreate
from .session_service import SessionContext

logger = logging.getLogger(__name__)

def patient_name_for(user: User) -> str:
    """Name for a patient record created on the fly from a profile."""
    name = user.profile_name
    if name:
        return name
    if user.email:
        return user.email.split("@")[0]
    return "Patient"

class AppointmentService:
    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        return self.db.query(Appointment).options(
            joinedload(Appointment.doctor),
            joinedload(Appointment.patient),
        )

    def get_or_create_patient(self, user: User) -> Patient:
        patient = self.db.query(Patient).filter(Patient.user_id == user.id).first()
        if patient:
            return patient

        patient = Patient(
            user_id=user.id,
            full_name=patient_name_for(user),
            email=user.email or "",
            phone=user.phone,
            date_of_birth=user.birthdate,
            gender=user.gender,
        )
        self.db.add(patient)
        self.db.flush()
        logger.info(f"Created patient record {patient.id} for user {user.id}")
        return patient

    def book(self, user: User, data: AppointmentCreate) -> Appointment:
        doctor = self.db.query(Doctor).filter(Doctor.id == data.doctor_id).first()
        if not doctor or not doctor.is_active:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Doctor not found"
            )

        patient = self.get_or_create_patient(user)
        appointment = Appointment(
            patient_id=patient.id,
            doctor_id=doctor.id,
            appointment_date=data.appointment_date,
            appointment_time=data.appointment_time,
            symptoms=data.symptoms,
            status=AppointmentStatus.SCHEDULED,
        )
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)

        logger.info(
            f"Booked appointment {appointment.id}: patient {patient.id} with doctor {doctor.id} "
            f"on {appointment.appointment_date} {appointment.appointment_time}"
        )
        return appointment

    def list_for(self, session: SessionContext) -> List[Appointment]:
        query = self._base_query()

        if session.role == UserRole.PATIENT:
            patient = self.db.query(Patient).filter(Patient.user_id == session.user_id).first()
            if not patient:
                return []
            query = query.filter(Appointment.patient_id == patient.id)
        elif session.role == UserRole.DOCTOR:
            doctor = self.db.query(Doctor).filter(Doctor.user_id == session.user_id).first()
            if not doctor:
                return []
            query = query.filter(Appointment.doctor_id == doctor.id)
        # Admins see every appointment

        return query.order_by(
            Appointment.appointment_date.asc(),
            Appointment.appointment_time.asc(),
        ).all()

    def get_visible(self, session: SessionContext, appointment_id: int) -> Appointment:
        appointment = self._base_query().filter(Appointment.id == appointment_id).first()
        if appointment and self._can_see(session, appointment):
            return appointment
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found"
        )

    def cancel(self, session: SessionContext, appointment_id: int) -> Appointment:
        appointment = self.get_visible(session, appointment_id)

        if session.role == UserRole.DOCTOR:
            raise AuthorizationError("Doctors update appointment status instead of cancelling")

        if appointment.status != AppointmentStatus.SCHEDULED:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Only scheduled appointments can be cancelled (status is {appointment.status.value})"
            )

        appointment.status = AppointmentStatus.CANCELLED
        self.db.commit()
        self.db.refresh(appointment)
        logger.info(f"Appointment {appointment.id} cancelled by user {session.user_id}")
        return appointment

    def update_status(
        self,
        session: SessionContext,
        appointment_id: int,
        new_status: AppointmentStatus,
        notes: Optional[str] = None,
    ) -> Appointment:
        if not session.has_role(UserRole.DOCTOR, UserRole.ADMIN):
            raise AuthorizationError("Access denied. Required roles: ['doctor', 'admin']")

        appointment = self.get_visible(session, appointment_id)
        appointment.status = new_status
        if notes is not None:
            appointment.notes = notes

        self.db.commit()
        self.db.refresh(appointment)
        logger.info(f"Appointment {appointment.id} set to {new_status.value} by user {session.user_id}")
        return appointment

    def _can_see(self, session: SessionContext, appointment: Appointment) -> bool:
        if session.role == UserRole.ADMIN:
            return True
        if session.role == UserRole.DOCTOR:
            return appointment.doctor is not None and appointment.doctor.user_id == session.user_id
        return appointment.patient is not None and appointment.patient.user_id == session.user_id
