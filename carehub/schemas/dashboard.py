from typing import List, Optional
from pydantic import BaseModel

from .appointment import AppointmentResponse
from .session import NavigationItem

class AdminStats(BaseModel):
    totalUsers: int
    totalPatients: int
    totalDoctors: int
    totalAdmins: int
    totalAppointments: int
    todayAppointments: int

class DoctorStats(BaseModel):
    todayAppointments: List[AppointmentResponse]
    upcomingCount: int
    completedCount: int
    patientCount: int

class PatientStats(BaseModel):
    nextAppointment: Optional[AppointmentResponse] = None
    upcomingCount: int
    completedCount: int
    cancelledCount: int

class HomeDashboard(BaseModel):
    greeting: str
    display_name: str
    role: str
    quick_links: List[NavigationItem]
