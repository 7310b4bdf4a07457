from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.core.rate_limiter import limiter, WRITE_LIMIT
from app.db.session import get_db
from app.models.user import User
from app.schemas.user import ProfileUpdate, UserCreate
from app.services.profile_service import ProfileService, serialize_profile
from app.utils.response import success

router = APIRouter()


@router.post(
    "/register",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Register user account",
    description="""
Creates a marketplace user.

Validation:
1. Username must be unique and at least 3 characters
2. Email must be unique
3. Optional address must be at least 10 characters
""",
)
@limiter.limit("5/minute")
def register(
    request: Request,
    user_data: UserCreate,
    db: Session = Depends(get_db),
):
    user = ProfileService.register(db, user_data)
    return success(data={"user": serialize_profile(user)}, message="User registered successfully")


@router.get("/profile", response_model=dict)
def get_profile(current_user: User = Depends(get_current_user)):
    """Get current user profile"""
    return success(data={"user": serialize_profile(current_user)}, message="User profile retrieved")


@router.put("/profile", response_model=dict)
@limiter.limit(WRITE_LIMIT)
def update_profile(
    request: Request,
    profile_update: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update username, address and profile picture"""
    user = ProfileService.update_profile(db, current_user, profile_update)
    return success(data={"user": serialize_profile(user)}, message="Profile updated successfully")
