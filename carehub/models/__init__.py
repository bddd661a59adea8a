from .user import User, UserRoleAssignment, RefreshToken
from .patient import Patient
from .doctor import Doctor, Specialization
from .appointment import Appointment, AppointmentStatus

__all__ = [
    "User",
    "UserRoleAssignment",
    "RefreshToken",
    "Patient",
    "Doctor",
    "Specialization",
    "Appointment",
    "AppointmentStatus",
]
