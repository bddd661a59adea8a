from datetime import date, datetime
from typing import Optional
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..core.security import UserRole
from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..models.user import UserRoleAssignment
from .session_service import SessionContext

logger = logging.getLogger(__name__)

QUICK_LINKS = {
    UserRole.PATIENT: [
        ("Appointments", "/appointments"),
        ("Medical Records", "/medical-records"),
        ("My Doctors", "/profile"),
        ("Messages", "/messaging"),
    ],
    UserRole.DOCTOR: [
        ("Today's Appointments", "/appointments"),
        ("Search Patients", "/patients"),
        ("Messages", "/messaging"),
        ("Profile", "/profile"),
    ],
    UserRole.ADMIN: [
        ("User Management", "/user-management"),
        ("All Appointments", "/appointments"),
        ("Patient Records", "/patient-records"),
        ("System Analytics", "/admin-panel"),
    ],
}

def greeting_for(hour: int) -> str:
    if hour < 12:
        return "Good Morning"
    if hour < 18:
        return "Good Afternoon"
    return "Good Evening"

class DashboardService:
    def __init__(self, db: Session, today: Optional[date] = None):
        self.db = db
        self.today = today or date.today()

    def admin_stats(self) -> dict:
        role_counts = dict(
            self.db.query(UserRoleAssignment.role, func.count(UserRoleAssignment.id))
            .group_by(UserRoleAssignment.role)
            .all()
        )
        total_appointments = self.db.query(func.count(Appointment.id)).scalar() or 0
        today_appointments = (
            self.db.query(func.count(Appointment.id))
            .filter(Appointment.appointment_date == self.today)
            .scalar()
            or 0
        )

        return {
            "totalUsers": sum(role_counts.values()),
            "totalPatients": role_counts.get(UserRole.PATIENT, 0),
            "totalDoctors": role_counts.get(UserRole.DOCTOR, 0),
            "totalAdmins": role_counts.get(UserRole.ADMIN, 0),
            "totalAppointments": total_appointments,
            "todayAppointments": today_appointments,
        }

    def doctor_stats(self, session: SessionContext) -> dict:
        doctor = self.db.query(Doctor).filter(Doctor.user_id == session.user_id).first()
        if not doctor:
            return {"todayAppointments": [], "upcomingCount": 0, "completedCount": 0, "patientCount": 0}

        appointments = (
            self.db.query(Appointment)
            .options(joinedload(Appointment.doctor), joinedload(Appointment.patient))
            .filter(Appointment.doctor_id == doctor.id)
            .order_by(Appointment.appointment_date, Appointment.appointment_time)
            .all()
        )

        return {
            "todayAppointments": [a for a in appointments if a.appointment_date == self.today],
            "upcomingCount": sum(
                1 for a in appointments
                if a.status == AppointmentStatus.SCHEDULED and a.appointment_date >= self.today
            ),
            "completedCount": sum(1 for a in appointments if a.status == AppointmentStatus.COMPLETED),
            "patientCount": len({a.patient_id for a in appointments}),
        }

    def patient_stats(self, session: SessionContext) -> dict:
        patient = self.db.query(Patient).filter(Patient.user_id == session.user_id).first()
        if not patient:
            return {"nextAppointment": None, "upcomingCount": 0, "completedCount": 0, "cancelledCount": 0}

        appointments = (
            self.db.query(Appointment)
            .options(joinedload(Appointment.doctor), joinedload(Appointment.patient))
            .filter(Appointment.patient_id == patient.id)
            .order_by(Appointment.appointment_date, Appointment.appointment_time)
            .all()
        )
        upcoming = [
            a for a in appointments
            if a.status == AppointmentStatus.SCHEDULED and a.appointment_date >= self.today
        ]

        return {
            "nextAppointment": upcoming[0] if upcoming else None,
            "upcomingCount": len(upcoming),
            "completedCount": sum(1 for a in appointments if a.status == AppointmentStatus.COMPLETED),
            "cancelledCount": sum(1 for a in appointments if a.status == AppointmentStatus.CANCELLED),
        }

    def home(self, session: SessionContext, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now()
        name = session.display_name
        if session.role == UserRole.DOCTOR:
            name = f"Dr. {name}"

        return {
            "greeting": greeting_for(now.hour),
            "display_name": name,
            "role": session.role.value.capitalize(),
            "quick_links": [{"name": label, "href": href} for label, href in QUICK_LINKS[session.role]],
        }
