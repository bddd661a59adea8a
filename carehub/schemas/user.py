from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from ..core.security import UserRole
from ..models.doctor import Specialization
from .auth import validate_password_strength
from .doctor import DoctorSummary
from .patient import PatientSummary

class AdminUserCreate(BaseModel):
    email: EmailStr
    password: str
    first_name: str = ""
    last_name: str = ""
    phone: Optional[str] = Field(default=None, max_length=20)
    birthdate: Optional[date] = None
    gender: Optional[str] = Field(default=None, max_length=20)
    roles: List[UserRole] = Field(default_factory=lambda: [UserRole.PATIENT])
    specialization: Optional[Specialization] = None

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)

    @field_validator("roles")
    @classmethod
    def at_least_one_role(cls, v: List[UserRole]) -> List[UserRole]:
        if not v:
            raise ValueError("At least one role is required")
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def doctor_needs_specialization(self):
        if UserRole.DOCTOR in self.roles and self.specialization is None:
            raise ValueError("Please select a specialization for the doctor")
        return self

class AdminUserUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    roles: Optional[List[UserRole]] = None

    @field_validator("roles")
    @classmethod
    def dedupe_roles(cls, v):
        if v is None:
            return v
        return list(dict.fromkeys(v))

class ManagedUser(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    display_name: str
    phone: Optional[str] = None
    roles: List[str]
    is_active: bool
    created_at: Optional[datetime] = None
    patient: Optional[PatientSummary] = None
    doctor: Optional[DoctorSummary] = None

class CreateAdminRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phone: Optional[str] = None
    birthdate: Optional[date] = None
    gender: Optional[str] = None
