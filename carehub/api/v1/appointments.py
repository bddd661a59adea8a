from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...api.deps import get_session_context
from ...core.database import get_db
from ...schemas.appointment import AppointmentCreate, AppointmentResponse, AppointmentStatusUpdate
from ...services.appointment_service import AppointmentService
from ...services.session_service import SessionContext

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    data: AppointmentCreate,
    session: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db)
):
    """Book an appointment, creating the caller's patient record if needed."""
    return AppointmentService(db).book(session.user, data)

@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(
    session: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db)
):
    """Appointments visible to the caller's role."""
    return AppointmentService(db).list_for(session)

@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    session: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db)
):
    return AppointmentService(db).get_visible(session, appointment_id)

@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: int,
    session: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db)
):
    return AppointmentService(db).cancel(session, appointment_id)

@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: int,
    update: AppointmentStatusUpdate,
    session: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db)
):
    return AppointmentService(db).update_status(session, appointment_id, update.status, update.notes)
