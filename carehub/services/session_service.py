"""Session loading: profile, role rows and the effective role of a user.

Every lookup goes through :func:`with_retry`, which retries transient
database failures a fixed number of times with a linearly growing pause.
"""
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TypeVar
import logging
import time

from sqlalchemy.exc import DisconnectionError, OperationalError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.security import UserRole, pick_primary_role
from ..models.user import User, UserRoleAssignment

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS = (OperationalError, DisconnectionError)

NAVIGATION = {
    UserRole.ADMIN: [
        ("Admin Dashboard", "/admin-panel"),
        ("User Management", "/user-management"),
        ("All Appointments", "/appointments"),
        ("Patient Records", "/patient-records"),
    ],
    UserRole.DOCTOR: [
        ("Home", "/"),
        ("Doctor Dashboard", "/doctor-dashboard"),
        ("Appointments", "/appointments"),
        ("Patient Records", "/patient-records"),
        ("Messages", "/messaging"),
        ("Profile", "/profile"),
    ],
    UserRole.PATIENT: [
        ("Patient Dashboard", "/patient-dashboard"),
        ("My Appointments", "/appointments"),
        ("Medical Records", "/medical-records"),
        ("Doctors", "/doctors"),
        ("Messages", "/messaging"),
        ("Profile", "/profile"),
    ],
}

def with_retry(
    operation: Callable[[], T],
    attempts: Optional[int] = None,
    backoff: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Optional[Callable[[], None]] = None,
) -> T:
    """Run ``operation``, retrying transient database errors.

    The pause before retry ``n`` is ``backoff * n`` seconds. Non-transient
    errors and the final transient error propagate unchanged.
    """
    attempts = settings.SESSION_RETRY_ATTEMPTS if attempts is None else attempts
    if attempts < 1:
        raise ValueError("attempts must be at least 1")
    backoff = settings.SESSION_RETRY_BACKOFF_SECONDS if backoff is None else backoff

    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except TRANSIENT_ERRORS as exc:
            if attempt == attempts:
                logger.error(f"Giving up after {attempts} attempts: {exc}")
                raise
            logger.warning(f"Transient database error (attempt {attempt}/{attempts}): {exc}")
            if on_retry:
                on_retry()
            sleep(backoff * attempt)

@dataclass
class SessionContext:
    user: User
    profile: Optional[User]
    roles: List[str] = field(default_factory=list)
    role: UserRole = UserRole.PATIENT

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def display_name(self) -> str:
        if self.profile and self.profile.profile_name:
            return self.profile.profile_name
        return self.user.email.split("@")[0]

    def has_role(self, *roles: UserRole) -> bool:
        return self.role in roles

    def navigation(self):
        return [{"name": name, "href": href} for name, href in NAVIGATION[self.role]]

class SessionService:
    def __init__(self, db: Session, sleep: Callable[[float], None] = time.sleep):
        self.db = db
        self.sleep = sleep

    def fetch_profile(self, user_id: int) -> Optional[User]:
        return with_retry(
            lambda: self.db.query(User).filter(User.id == user_id).one_or_none(),
            sleep=self.sleep,
            on_retry=self.db.rollback,
        )

    def fetch_roles(self, user_id: int) -> List[str]:
        rows = with_retry(
            lambda: self.db.query(UserRoleAssignment.role)
            .filter(UserRoleAssignment.user_id == user_id)
            .all(),
            sleep=self.sleep,
            on_retry=self.db.rollback,
        )
        return [row.role.value if isinstance(row.role, UserRole) else row.role for row in rows]

    def load(self, user: User) -> SessionContext:
        """Build the session context for an authenticated user."""
        profile = self.fetch_profile(user.id)
        if profile is None:
            logger.info(f"No profile row for user {user.id}")

        roles = self.fetch_roles(user.id)
        role = pick_primary_role(roles)
        if not roles:
            logger.info(f"No roles found for user {user.id}; defaulting to patient")
        else:
            logger.debug(f"User {user.id} roles {roles} resolved to {role.value}")

        return SessionContext(user=user, profile=profile, roles=roles, role=role)
