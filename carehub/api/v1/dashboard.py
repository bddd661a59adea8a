from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...api.deps import get_admin_session, get_doctor_session, get_patient_session, get_session_context
from ...core.database import get_db
from ...schemas.dashboard import AdminStats, DoctorStats, HomeDashboard, PatientStats
from ...services.dashboard_service import DashboardService
from ...services.session_service import SessionContext

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

@router.get("/home", response_model=HomeDashboard)
async def home(session: SessionContext = Depends(get_session_context), db: Session = Depends(get_db)):
    return DashboardService(db).home(session)

@router.get("/admin", response_model=AdminStats)
async def admin_dashboard(_: SessionContext = Depends(get_admin_session), db: Session = Depends(get_db)):
    return DashboardService(db).admin_stats()

@router.get("/doctor", response_model=DoctorStats)
async def doctor_dashboard(session: SessionContext = Depends(get_doctor_session), db: Session = Depends(get_db)):
    return DashboardService(db).doctor_stats(session)

@router.get("/patient", response_model=PatientStats)
async def patient_dashboard(session: SessionContext = Depends(get_patient_session), db: Session = Depends(get_db)):
    return DashboardService(db).patient_stats(session)
