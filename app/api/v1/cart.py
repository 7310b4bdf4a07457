from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.api.deps import get_current_user
from app.core.rate_limiter import limiter, WRITE_LIMIT
from app.models.user import User
from app.schemas.cart import CartItemCreate, CartItemUpdate
from app.services.cart_service import CartService
from app.utils.response import success

router = APIRouter()


def _cart_item_payload(cart_item) -> dict:
    return {
        "id": cart_item.id,
        "cart_id": cart_item.cart_id,
        "product_id": cart_item.product_id,
        "quantity": cart_item.quantity,
    }


@router.get("", response_model=dict)
def get_cart(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get user's cart"""
    return success(data=CartService.list_items(db, current_user.id), message="Cart retrieved")


@router.post(
    "/add",
    responses={
        200: {"description": "Quantity of an existing line increased"},
        201: {"description": "New line added"},
        400: {"description": "Product unavailable or owned by the caller"},
        404: {"description": "Product not found"},
    },
)
@limiter.limit(WRITE_LIMIT)
def add_to_cart(
    request: Request,
    cart_item: CartItemCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add item to cart"""
    item, created = CartService.add_item(
        db,
        user_id=current_user.id,
        product_id=cart_item.product_id,
        quantity=cart_item.quantity,
    )

    if created:
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=success(
                data={"cart_item": _cart_item_payload(item)},
                message="Product added to cart successfully",
            ),
        )

    return success(
        data={"cart_item": _cart_item_payload(item)},
        message="Product quantity updated in cart",
    )


@router.put("/{item_id}")
def update_cart_item(
    item_id: int,
    update_data: CartItemUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update cart item quantity"""
    item = CartService.update_item(db, item_id, current_user.id, update_data.quantity)
    return success(data={"cart_item": _cart_item_payload(item)}, message="Cart item updated")


@router.delete("/{item_id}")
def remove_from_cart(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove item from cart"""
    deleted = CartService.remove_item(db, item_id, current_user.id)
    return success(data={"deleted_item": deleted}, message="Item removed from cart successfully")
