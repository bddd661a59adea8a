from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...api.deps import get_admin_session
from ...core.database import get_db
from ...schemas.user import AdminUserCreate, AdminUserUpdate, ManagedUser
from ...services.session_service import SessionContext
from ...services.user_service import UserAdminService

router = APIRouter(prefix="/users", tags=["User Management"])

@router.get("", response_model=List[ManagedUser])
async def list_users(
    search: Optional[str] = None,
    _: SessionContext = Depends(get_admin_session),
    db: Session = Depends(get_db)
):
    """List all users with their roles (admin only)."""
    return UserAdminService(db).list_users(search)

@router.post("", response_model=ManagedUser, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: AdminUserCreate,
    _: SessionContext = Depends(get_admin_session),
    db: Session = Depends(get_db)
):
    return UserAdminService(db).create_user(data)

@router.patch("/{user_id}", response_model=ManagedUser)
async def update_user(
    user_id: int,
    data: AdminUserUpdate,
    _: SessionContext = Depends(get_admin_session),
    db: Session = Depends(get_db)
):
    return UserAdminService(db).update_user(user_id, data)

@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    session: SessionContext = Depends(get_admin_session),
    db: Session = Depends(get_db)
):
    UserAdminService(db).delete_user(session.user, user_id)
    return {"message": "User deleted successfully"}

@router.patch("/{user_id}/status")
async def update_user_status(
    user_id: int,
    is_active: bool,
    _: SessionContext = Depends(get_admin_session),
    db: Session = Depends(get_db)
):
    """Update user active status (admin only)."""
    UserAdminService(db).set_active(user_id, is_active)
    return {"message": f"User {'activated' if is_active else 'deactivated'} successfully"}
