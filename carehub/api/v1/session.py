from fastapi import APIRouter, Depends

from ...api.deps import get_session_context
from ...schemas.auth import UserResponse
from ...schemas.session import SessionResponse
from ...services.session_service import SessionContext

router = APIRouter(prefix="/session", tags=["Session"])

@router.get("", response_model=SessionResponse)
async def current_session(
    session: SessionContext = Depends(get_session_context)
):
    """Profile, roles, effective role and navigation of the caller."""
    return SessionResponse(
        user_id=session.user_id,
        email=session.user.email,
        profile=UserResponse.model_validate(session.profile) if session.profile else None,
        roles=session.roles,
        role=session.role.value,
        display_name=session.display_name,
        navigation=session.navigation(),
    )
