from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...api.deps import get_staff_session
from ...core.database import get_db
from ...models.patient import Patient
from ...schemas.patient import PatientResponse

router = APIRouter(prefix="/patients", tags=["Patients"], dependencies=[Depends(get_staff_session)])

@router.get("", response_model=List[PatientResponse])
async def list_patients(
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Patient records for doctors and admins."""
    query = db.query(Patient)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Patient.full_name.ilike(pattern), Patient.email.ilike(pattern)))
    return query.order_by(Patient.full_name).all()
