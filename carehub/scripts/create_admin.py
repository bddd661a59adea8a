"""Create the first admin account from environment variables.

    ADMIN_EMAIL=... ADMIN_PASSWORD=... ADMIN_FIRST_NAME=... ADMIN_LAST_NAME=... \
        python -m carehub.scripts.create_admin
"""
import logging
import os
import sys

from ..core.database import SessionLocal, init_db
from ..schemas.user import CreateAdminRequest
from ..services.admin_service import BootstrapError, create_admin

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def request_from_env() -> CreateAdminRequest:
    return CreateAdminRequest(
        email=os.getenv("ADMIN_EMAIL"),
        password=os.getenv("ADMIN_PASSWORD"),
        firstName=os.getenv("ADMIN_FIRST_NAME"),
        lastName=os.getenv("ADMIN_LAST_NAME"),
        phone=os.getenv("ADMIN_PHONE"),
    )

def main() -> int:
    init_db()
    db = SessionLocal()
    try:
        result = create_admin(db, request_from_env())
    except BootstrapError as exc:
        logger.error(f"{exc.error} ({exc.code})")
        return 1
    finally:
        db.close()

    logger.info(f"{result['message']}: {result['user']['email']}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
