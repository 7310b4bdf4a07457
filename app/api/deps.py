import structlog
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotAuthenticated, UserNotFound
from app.db.session import get_db
from app.models.user import User

logger = structlog.get_logger()


def get_current_user_id(request: Request) -> int:
    """Read the caller's id from the identity header."""
    raw_user_id = request.headers.get(settings.USER_ID_HEADER)

    if not raw_user_id:
        raise NotAuthenticated()

    try:
        return int(raw_user_id.strip())
    except ValueError:
        raise NotAuthenticated("Invalid user identifier")


def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.info("unknown_user_header", user_id=user_id)
        raise UserNotFound()

    return user
