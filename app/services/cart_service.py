from typing import Any, Dict, List, Tuple

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import (
    BusinessRuleViolation,
    CartItemNotFound,
    Forbidden,
    ProductNotFound,
)
from app.models.cart import Cart, CartItem
from app.models.product import Product
from app.services.product_service import serialize_product
from app.services.validation import MAX_QUANTITY, is_available, normalize_status

logger = structlog.get_logger()


class CartService:

    @staticmethod
    def get_or_create_cart(db: Session, user_id: int) -> Cart:
        """Return the user's cart, creating it on first use.

        ``carts.user_id`` is unique, so a concurrent first insert loses inside the
        savepoint and the existing row is read back instead.
        """
        cart = db.query(Cart).filter(Cart.user_id == user_id).first()
        if cart:
            return cart

        try:
            with db.begin_nested():
                cart = Cart(user_id=user_id)
                db.add(cart)
        except IntegrityError:
            cart = db.query(Cart).filter(Cart.user_id == user_id).one()
        return cart

    @staticmethod
    def _increment(cart_item: CartItem, quantity: int) -> None:
        new_quantity = cart_item.quantity + quantity
        if new_quantity > MAX_QUANTITY:
            raise BusinessRuleViolation(
                f"Quantity cannot exceed {MAX_QUANTITY}",
                errors=[{"cart_item_id": cart_item.id, "quantity": cart_item.quantity}],
            )
        cart_item.quantity = new_quantity

    @staticmethod
    def add_item(db: Session, user_id: int, product_id: int, quantity: int = 1) -> Tuple[CartItem, bool]:
        """Add a product to the user's cart.

        Returns the cart line and whether it was newly created. Repeated adds of
        the same product increment the existing line.
        """
        product = db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise ProductNotFound()

        if not is_available(product.status):
            raise BusinessRuleViolation(
                "Product is no longer available",
                errors=[{"product_title": product.title, "status": product.status}],
            )

        if product.owner_id == user_id:
            raise BusinessRuleViolation("You cannot add your own product to cart")

        cart = CartService.get_or_create_cart(db, user_id)

        existing_item = db.query(CartItem).filter(
            CartItem.cart_id == cart.id,
            CartItem.product_id == product_id,
        ).first()

        created = False
        if existing_item:
            CartService._increment(existing_item, quantity)
            cart_item = existing_item
        else:
            try:
                with db.begin_nested():
                    cart_item = CartItem(cart_id=cart.id, product_id=product_id, quantity=quantity)
                    db.add(cart_item)
                created = True
            except IntegrityError:
                # Another request inserted the same line first
                cart_item = db.query(CartItem).filter(
                    CartItem.cart_id == cart.id,
                    CartItem.product_id == product_id,
                ).one()
                CartService._increment(cart_item, quantity)

        db.commit()
        db.refresh(cart_item)

        logger.info(
            "cart_item_added",
            user_id=user_id,
            product_id=product_id,
            cart_item_id=cart_item.id,
            quantity=cart_item.quantity,
            created=created,
        )
        return cart_item, created

    @staticmethod
    def _owned_item(db: Session, cart_item_id: int, user_id: int, action: str) -> CartItem:
        cart_item = db.query(CartItem).filter(CartItem.id == cart_item_id).first()
        if not cart_item:
            raise CartItemNotFound()

        if cart_item.cart.user_id != user_id:
            raise Forbidden(f"Unauthorized to {action} this cart item")
        return cart_item

    @staticmethod
    def update_item(db: Session, cart_item_id: int, user_id: int, quantity: int) -> CartItem:
        cart_item = CartService._owned_item(db, cart_item_id, user_id, "update")
        cart_item.quantity = quantity
        db.commit()
        db.refresh(cart_item)
        return cart_item

    @staticmethod
    def remove_item(db: Session, cart_item_id: int, user_id: int) -> Dict[str, Any]:
        cart_item = CartService._owned_item(db, cart_item_id, user_id, "remove")

        deleted = {
            "id": cart_item.id,
            "product": {"title": cart_item.product.title},
        }
        db.delete(cart_item)
        db.commit()

        logger.info("cart_item_removed", user_id=user_id, cart_item_id=cart_item_id)
        return deleted

    @staticmethod
    def list_items(db: Session, user_id: int) -> Dict[str, Any]:
        """Cart lines newest first, bucketed by whether their product can still be bought."""
        cart = CartService.get_or_create_cart(db, user_id)
        db.commit()

        cart_items: List[CartItem] = (
            db.query(CartItem)
            .options(
                selectinload(CartItem.product).selectinload(Product.owner),
                selectinload(CartItem.product).selectinload(Product.images),
            )
            .filter(CartItem.cart_id == cart.id)
            .order_by(CartItem.id.desc())
            .all()
        )

        items = []
        available_count = 0
        subtotal = 0.0
        for item in cart_items:
            product = item.product
            if is_available(product.status):
                available_count += 1
                subtotal += product.price * item.quantity

            items.append({
                "id": item.id,
                "product": serialize_product(product),
                "quantity": item.quantity,
                "status": normalize_status(product.status),
                "added_at": item.created_at,
            })

        return {
            "cart_id": cart.id,
            "cart_items": items,
            "total": len(items),
            "available_count": available_count,
            "unavailable_count": len(items) - available_count,
            "subtotal": subtotal,
        }
