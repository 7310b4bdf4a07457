from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.api.deps import get_current_user
from app.core.rate_limiter import limiter
from app.models.user import User
from app.services.checkout_service import CheckoutService
from app.utils.response import success

router = APIRouter()


@router.post(
    "",
    response_model=dict,
    summary="Check out cart",
    description="""
Converts the caller's cart into purchases.

Process:
1. Rejects an empty cart
2. Rejects the whole cart when any listing is no longer available
3. Records one purchase per line and marks each listing sold
4. Clears the cart

Steps 3 and 4 commit together or not at all.
""",
    responses={
        200: {"description": "Checkout successful"},
        400: {"description": "Cart empty or listings unavailable"},
        401: {"description": "Identity header missing"},
        404: {"description": "User not found"},
        409: {"description": "A listing was sold to another buyer meanwhile"},
    },
)
@limiter.limit("10/minute")
def checkout(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = CheckoutService.checkout(db, current_user.id)
    return success(data=result, message="Checkout successful!")
