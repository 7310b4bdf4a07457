from typing import Any, Dict

import structlog
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import Conflict
from app.models.user import User
from app.schemas.user import ProfileUpdate, UserCreate
from app.utils.avatar import avatar_for

logger = structlog.get_logger()


def serialize_profile(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "address": user.address,
        "profile_pic": user.profile_pic,
        "avatar": avatar_for(user.username, user.profile_pic),
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


class ProfileService:

    @staticmethod
    def register(db: Session, data: UserCreate) -> User:
        existing = db.query(User).filter(
            or_(User.username == data.username, User.email == data.email)
        ).first()
        if existing:
            field = "Username" if existing.username == data.username else "Email"
            raise Conflict(f"{field} is already registered")

        user = User(
            username=data.username,
            email=data.email,
            address=data.address,
            profile_pic=data.profile_pic,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise Conflict("Username or email is already registered") from exc
        db.refresh(user)

        logger.info("user_registered", user_id=user.id)
        return user

    @staticmethod
    def update_profile(db: Session, user: User, data: ProfileUpdate) -> User:
        taken = db.query(User).filter(
            User.username == data.username,
            User.id != user.id,
        ).first()
        if taken:
            raise Conflict("Username is already taken")

        user.username = data.username
        user.address = data.address
        user.profile_pic = data.profile_pic

        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise Conflict("Username is already taken") from exc
        db.refresh(user)

        logger.info("profile_updated", user_id=user.id)
        return user
