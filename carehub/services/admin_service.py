"""First-admin bootstrap, authorized by the service key instead of a session."""
import logging

from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from ..core.security import UserRole
from ..schemas.auth import UserResponse, validate_password_strength
from ..schemas.user import CreateAdminRequest
from .user_service import EmailAlreadyExists, create_account

logger = logging.getLogger(__name__)

class BootstrapError(Exception):
    """Carries the HTTP status and the machine readable code of a failure."""

    def __init__(self, status_code: int, error: str, code: str):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.code = code

    def to_dict(self):
        return {"error": self.error, "code": self.code}

def create_admin(db: Session, data: CreateAdminRequest) -> dict:
    if not data.email or not data.password or not data.firstName or not data.lastName:
        raise BootstrapError(
            400,
            "Missing required fields: email, password, firstName, lastName",
            "missing_required_fields",
        )

    try:
        TypeAdapter(EmailStr).validate_python(data.email)
    except ValidationError:
        raise BootstrapError(400, "Invalid email address", "invalid_email")

    try:
        validate_password_strength(data.password)
    except ValueError as exc:
        raise BootstrapError(400, str(exc), "weak_password")

    logger.info(f"Creating admin user {data.email}")
    try:
        user = create_account(
            db,
            email=data.email,
            password=data.password,
            roles=[UserRole.ADMIN],
            first_name=data.firstName,
            last_name=data.lastName,
            phone=data.phone,
            birthdate=data.birthdate,
            gender=data.gender,
            is_verified=True,
        )
    except EmailAlreadyExists:
        raise BootstrapError(409, "A user with this email address already exists", "email_exists")

    db.commit()
    db.refresh(user)
    logger.info(f"Admin role assigned to user {user.id}")

    return {
        "message": "Admin user created successfully",
        "user": UserResponse.model_validate(user).model_dump(mode="json"),
    }
