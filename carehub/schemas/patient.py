from datetime import date
from typing import Optional
from pydantic import BaseModel, ConfigDict

class PatientSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None

class PatientResponse(PatientSummary):
    user_id: Optional[int] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
