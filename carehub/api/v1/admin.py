import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...core.config import settings
from ...core.database import get_db
from ...schemas.user import CreateAdminRequest
from ...services.admin_service import BootstrapError, create_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin bootstrap"])

@router.post("/create-admin")
async def create_admin_user(
    data: CreateAdminRequest,
    x_service_key: Optional[str] = Header(default=None),
    db: Session = Depends(get_db)
):
    """Create an admin account. Requires the server's service key."""
    try:
        if not settings.SERVICE_ROLE_KEY:
            logger.error("SERVICE_ROLE_KEY is not configured")
            raise BootstrapError(500, "Server configuration error", "missing_service_key")

        if not x_service_key or not secrets.compare_digest(x_service_key, settings.SERVICE_ROLE_KEY):
            raise BootstrapError(401, "Invalid service key", "invalid_service_key")

        return create_admin(db, data)
    except BootstrapError as exc:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
