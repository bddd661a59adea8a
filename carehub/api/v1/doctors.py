from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...api.deps import get_current_user, get_doctor_session
from ...core.database import get_db
from ...schemas.doctor import DoctorResponse
from ...services.doctor_service import DoctorService
from ...services.session_service import SessionContext

router = APIRouter(prefix="/doctors", tags=["Doctors"], dependencies=[Depends(get_current_user)])

@router.get("", response_model=List[DoctorResponse])
async def list_doctors(
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Active doctors by name, optionally filtered by a search term."""
    return DoctorService(db).list_active(search)

@router.get("/me", response_model=DoctorResponse)
async def my_doctor_record(
    session: SessionContext = Depends(get_doctor_session),
    db: Session = Depends(get_db)
):
    doctor = DoctorService(db).for_user(session.user_id)
    if not doctor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No doctor record for this account"
        )
    return doctor

@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(doctor_id: int, db: Session = Depends(get_db)):
    return DoctorService(db).get(doctor_id)
