from typing import List, Optional
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload

from ..core.security import UserRole, get_password_hash
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..models.user import User, UserRoleAssignment, RefreshToken
from ..schemas.doctor import DoctorSummary
from ..schemas.patient import PatientSummary
from ..schemas.user import AdminUserCreate, AdminUserUpdate, ManagedUser

logger = logging.getLogger(__name__)

class EmailAlreadyExists(Exception):
    pass

def display_name(user: User) -> str:
    """Patient name, then doctor name, then profile name, then email."""
    if user.patient and user.patient.full_name:
        return user.patient.full_name
    if user.doctor and user.doctor.full_name:
        return user.doctor.full_name
    if user.profile_name:
        return user.profile_name
    return user.email

def display_phone(user: User) -> Optional[str]:
    if user.patient and user.patient.phone:
        return user.patient.phone
    if user.doctor and user.doctor.phone:
        return user.doctor.phone
    return user.phone

def to_managed_user(user: User) -> ManagedUser:
    return ManagedUser(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        display_name=display_name(user),
        phone=display_phone(user),
        roles=user.role_names,
        is_active=bool(user.is_active),
        created_at=user.created_at,
        patient=PatientSummary.model_validate(user.patient) if user.patient else None,
        doctor=DoctorSummary.model_validate(user.doctor) if user.doctor else None,
    )

def create_account(
    db: Session,
    email: str,
    password: str,
    roles: List[UserRole],
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    phone: Optional[str] = None,
    birthdate=None,
    gender: Optional[str] = None,
    is_verified: bool = False,
) -> User:
    """Add a user row with its role rows. The caller commits."""
    if db.query(User).filter(User.email == email).first():
        raise EmailAlreadyExists(email)

    user = User(
        email=email,
        password_hash=get_password_hash(password),
        first_name=first_name or None,
        last_name=last_name or None,
        phone=phone,
        birthdate=birthdate,
        gender=gender,
        is_active=True,
        is_verified=is_verified,
    )
    for role in roles:
        user.roles.append(UserRoleAssignment(role=role))
    db.add(user)
    db.flush()
    return user

class UserAdminService:
    def __init__(self, db: Session):
        self.db = db

    def _get(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )
        return user

    def list_users(self, search: Optional[str] = None) -> List[ManagedUser]:
        users = (
            self.db.query(User)
            .options(
                selectinload(User.roles),
                selectinload(User.patient),
                selectinload(User.doctor),
            )
            .order_by(User.created_at.desc(), User.id.desc())
            .all()
        )

        if search and search.strip():
            needle = search.strip().lower()
            users = [
                u for u in users
                if needle in u.profile_name.lower() or needle in u.email.lower()
            ]

        return [to_managed_user(u) for u in users]

    def create_user(self, data: AdminUserCreate) -> ManagedUser:
        try:
            user = create_account(
                self.db,
                email=data.email,
                password=data.password,
                roles=data.roles,
                first_name=data.first_name,
                last_name=data.last_name,
                phone=data.phone,
                birthdate=data.birthdate,
                gender=data.gender,
            )
        except EmailAlreadyExists:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A user with this email address already exists"
            )

        full_name = f"{data.first_name} {data.last_name}".strip() or data.email

        if UserRole.DOCTOR in data.roles:
            self.db.add(Doctor(
                user_id=user.id,
                full_name=full_name,
                email=data.email,
                phone=data.phone or None,
                specialization=data.specialization.value,
                qualifications="",
                experience_years=0,
                consultation_fee=0,
                available_days=[],
                available_hours="09:00-17:00",
                symptoms=[],
            ))

        if UserRole.PATIENT in data.roles:
            self.db.add(Patient(
                user_id=user.id,
                full_name=full_name,
                email=data.email,
                phone=data.phone or None,
                date_of_birth=data.birthdate,
                gender=data.gender,
            ))

        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Admin created user {user.id} with roles {user.role_names}")
        return to_managed_user(user)

    def update_user(self, user_id: int, data: AdminUserUpdate) -> ManagedUser:
        user = self._get(user_id)

        updates = data.model_dump(exclude_unset=True, exclude={"roles"})
        for field, value in updates.items():
            setattr(user, field, value)

        if data.roles is not None:
            # Old rows must be gone before the new ones hit the unique constraint
            user.roles.clear()
            self.db.flush()
            for role in data.roles:
                user.roles.append(UserRoleAssignment(role=role))

        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Admin updated user {user.id}; roles now {user.role_names}")
        return to_managed_user(user)

    def delete_user(self, current_user: User, user_id: int) -> None:
        if user_id == current_user.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot delete your own account"
            )

        user = self._get(user_id)

        self.db.query(RefreshToken).filter(RefreshToken.user_id == user.id).delete(
            synchronize_session=False
        )
        if user.patient:
            self.db.delete(user.patient)
        if user.doctor:
            self.db.delete(user.doctor)
        # Role rows go with the user through the relationship cascade
        self.db.delete(user)
        self.db.commit()
        logger.info(f"Admin {current_user.id} deleted user {user_id}")

    def set_active(self, user_id: int, is_active: bool) -> User:
        user = self._get(user_id)
        user.is_active = is_active
        self.db.commit()
        logger.info(f"User {user.id} {'activated' if is_active else 'deactivated'}")
        return user
