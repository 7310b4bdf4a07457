import time
from datetime import datetime
from typing import Any, Dict, List

import structlog
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import BusinessRuleViolation, Conflict
from app.models.cart import Cart, CartItem
from app.models.product import Product, ProductStatus
from app.models.purchase import PreviousPurchase
from app.services.validation import is_available

logger = structlog.get_logger()


class CheckoutService:
    """Turns a cart into purchase records and sold listings in one unit of work.

    Flow:
    1. Reject an empty cart before any write.
    2. Reject the whole cart if any line's product is no longer available.
    3. In one transaction: record a purchase and mark the product sold per line,
       then clear the cart.

    The status write is conditional on the product still being available, so
    when two checkouts race for one listing the first committer wins and the
    other is rolled back with a conflict.
    """

    @staticmethod
    def _load_cart(db: Session, user_id: int):
        return (
            db.query(Cart)
            .options(selectinload(Cart.items).selectinload(CartItem.product))
            .filter(Cart.user_id == user_id)
            .first()
        )

    @staticmethod
    def unavailable_lines(cart_items: List[CartItem]) -> List[Dict[str, Any]]:
        return [
            {
                "id": item.product.id,
                "title": item.product.title,
                "status": item.product.status,
            }
            for item in cart_items
            if not is_available(item.product.status)
        ]

    @staticmethod
    def _mark_sold(db: Session, product_id: int) -> bool:
        updated = (
            db.query(Product)
            .filter(
                Product.id == product_id,
                or_(
                    Product.status == ProductStatus.AVAILABLE.value,
                    Product.status.is_(None),
                ),
            )
            .update({Product.status: ProductStatus.SOLD.value}, synchronize_session=False)
        )
        return updated == 1

    @staticmethod
    def checkout(db: Session, user_id: int) -> Dict[str, Any]:
        cart = CheckoutService._load_cart(db, user_id)
        if not cart or not cart.items:
            raise BusinessRuleViolation("Cart is empty")

        cart_items = list(cart.items)

        unavailable = CheckoutService.unavailable_lines(cart_items)
        if unavailable:
            logger.info(
                "checkout_rejected",
                user_id=user_id,
                unavailable_product_ids=[entry["id"] for entry in unavailable],
            )
            raise BusinessRuleViolation(
                "Some products are no longer available",
                errors=unavailable,
            )

        # Snapshot before the writes; totals cover the lines present at checkout.
        lines = [
            {
                "product_id": item.product.id,
                "title": item.product.title,
                "price": item.product.price,
                "quantity": item.quantity,
            }
            for item in cart_items
        ]
        cart_id = cart.id

        try:
            purchases: List[PreviousPurchase] = []
            lost: List[Dict[str, Any]] = []
            purchased_at = datetime.utcnow()

            for line in lines:
                purchase = PreviousPurchase(
                    user_id=user_id,
                    product_id=line["product_id"],
                    purchased_at=purchased_at,
                )
                db.add(purchase)
                purchases.append(purchase)

                if not CheckoutService._mark_sold(db, line["product_id"]):
                    lost.append({"id": line["product_id"], "title": line["title"]})

            if lost:
                raise Conflict(
                    "Some products were just purchased by someone else",
                    errors=lost,
                )

            db.query(CartItem).filter(CartItem.cart_id == cart_id).delete(synchronize_session=False)
            db.flush()
            db.commit()
        except Conflict as exc:
            db.rollback()
            logger.warning(
                "checkout_conflict",
                user_id=user_id,
                product_ids=[entry["id"] for entry in exc.errors],
            )
            raise
        except Exception:
            db.rollback()
            raise

        total_amount = sum(line["price"] * line["quantity"] for line in lines)
        order_id = f"ORDER-{int(time.time() * 1000)}"

        logger.info(
            "checkout_completed",
            user_id=user_id,
            order_id=order_id,
            total_items=len(lines),
            total_amount=total_amount,
        )

        return {
            "order_id": order_id,
            "total_items": len(lines),
            "total_amount": total_amount,
            "purchases": [
                {
                    "id": purchase.id,
                    "product_id": purchase.product_id,
                    "purchased_at": purchase.purchased_at,
                }
                for purchase in purchases
            ],
        }
