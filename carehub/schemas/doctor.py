from typing import List, Optional
from pydantic import BaseModel, ConfigDict

class DoctorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    specialization: str
    consultation_fee: float

class DoctorResponse(DoctorSummary):
    user_id: Optional[int] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    qualifications: str = ""
    experience_years: int = 0
    bio: Optional[str] = None
    available_days: List[str] = []
    available_hours: str
    symptoms: List[str] = []
    is_active: bool
