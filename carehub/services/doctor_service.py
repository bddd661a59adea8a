from typing import List, Optional
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ..models.doctor import Doctor

logger = logging.getLogger(__name__)

def matches_search(doctor: Doctor, term: str) -> bool:
    """Case-insensitive match on name, specialization, qualifications or symptoms."""
    needle = term.lower()
    haystack = [
        doctor.full_name or "",
        doctor.specialization or "",
        doctor.qualifications or "",
        *(doctor.symptoms or []),
    ]
    return any(needle in value.lower() for value in haystack)

class DoctorService:
    def __init__(self, db: Session):
        self.db = db

    def list_active(self, search: Optional[str] = None) -> List[Doctor]:
        doctors = (
            self.db.query(Doctor)
            .filter(Doctor.is_active == True)  # noqa: E712
            .order_by(Doctor.full_name)
            .all()
        )
        if search and search.strip():
            doctors = [d for d in doctors if matches_search(d, search.strip())]
        return doctors

    def get(self, doctor_id: int) -> Doctor:
        doctor = self.db.query(Doctor).filter(Doctor.id == doctor_id).first()
        if not doctor:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Doctor not found"
            )
        return doctor

    def for_user(self, user_id: int) -> Optional[Doctor]:
        return self.db.query(Doctor).filter(Doctor.user_id == user_id).first()
