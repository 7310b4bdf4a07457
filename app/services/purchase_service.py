from typing import Any, Dict

from sqlalchemy.orm import Session, selectinload

from app.models.product import Product, ProductStatus
from app.models.purchase import PreviousPurchase
from app.services.product_service import serialize_product


class PurchaseService:

    @staticmethod
    def get_previous_purchases(db: Session, user_id: int) -> Dict[str, Any]:
        """Purchase history, most recent first."""
        purchases = (
            db.query(PreviousPurchase)
            .options(
                selectinload(PreviousPurchase.product).selectinload(Product.owner),
                selectinload(PreviousPurchase.product).selectinload(Product.images),
            )
            .filter(PreviousPurchase.user_id == user_id)
            .order_by(PreviousPurchase.purchased_at.desc(), PreviousPurchase.id.desc())
            .all()
        )

        return {
            "purchases": [
                {
                    "id": purchase.id,
                    "product": serialize_product(purchase.product, default_status=ProductStatus.SOLD.value),
                    "purchased_at": purchase.purchased_at,
                }
                for purchase in purchases
            ],
            "total": len(purchases),
        }
