from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.api.deps import get_current_user
from app.models.user import User
from app.services.purchase_service import PurchaseService
from app.utils.response import success

router = APIRouter()


@router.get("/previous", response_model=dict)
def get_previous_purchases(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get the caller's purchase history"""
    return success(
        data=PurchaseService.get_previous_purchases(db, current_user.id),
        message="Purchases retrieved",
    )
