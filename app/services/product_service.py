from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import Conflict, Forbidden, ProductNotFound
from app.models.product import Product, ProductImage, ProductStatus
from app.models.purchase import PreviousPurchase
from app.models.user import User
from app.schemas.product import ProductCreate
from app.services.validation import normalize_status

logger = structlog.get_logger()

DEFAULT_LOCATION = "Not specified"


def owner_summary(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "profile_pic": user.profile_pic,
    }


def serialize_product(product: Product, default_status: Optional[str] = None) -> Dict[str, Any]:
    """Flatten a product for the client: owner summary, image URLs with the main image first."""
    status = product.status or default_status or normalize_status(None)
    return {
        "id": product.id,
        "title": product.title,
        "description": product.description,
        "category": product.category,
        "price": product.price,
        "status": status,
        "owner_id": product.owner_id,
        "owner": owner_summary(product.owner) if product.owner else None,
        "images": [image.image_url for image in product.images],
        "location": (product.owner.address if product.owner else None) or DEFAULT_LOCATION,
        "created_at": product.created_at,
    }


class ProductService:

    @staticmethod
    def _base_query(db: Session):
        return db.query(Product).options(
            selectinload(Product.owner),
            selectinload(Product.images),
        )

    @staticmethod
    def get_product(db: Session, product_id: int) -> Product:
        product = ProductService._base_query(db).filter(Product.id == product_id).first()
        if not product:
            raise ProductNotFound()
        return product

    @staticmethod
    def create_product(db: Session, owner: User, data: ProductCreate) -> Product:
        """Create a listing owned by ``owner``; the first image becomes the main one."""
        product = Product(
            owner_id=owner.id,
            title=data.title,
            description=data.description,
            category=data.category,
            price=data.price,
            status=ProductStatus.AVAILABLE.value,
        )
        db.add(product)
        db.flush()

        db.add_all(
            ProductImage(product_id=product.id, image_url=url, is_main=index == 0)
            for index, url in enumerate(data.images)
        )
        db.commit()
        db.refresh(product)

        logger.info(
            "product_created",
            product_id=product.id,
            owner_id=owner.id,
            image_count=len(data.images),
        )
        return product

    @staticmethod
    def list_products(
        db: Session,
        page: int,
        limit: int,
        search: Optional[str] = None,
        category: Optional[str] = None,
    ) -> tuple[List[Product], int]:
        query = ProductService._base_query(db)

        if search:
            search_term = f"%{search}%"
            query = query.filter(
                or_(
                    Product.title.ilike(search_term),
                    Product.description.ilike(search_term),
                    Product.category.ilike(search_term),
                )
            )

        if category:
            query = query.filter(Product.category == category)

        total = query.count()
        products = (
            query.order_by(Product.created_at.desc(), Product.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return products, total

    @staticmethod
    def list_owner_products(db: Session, owner_id: int) -> List[Product]:
        return (
            ProductService._base_query(db)
            .filter(Product.owner_id == owner_id)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .all()
        )

    @staticmethod
    def delete_product(db: Session, product_id: int, user_id: int) -> Dict[str, Any]:
        """Delete a listing. Only the owner may delete; purchased listings are kept for history."""
        product = db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise ProductNotFound()

        if product.owner_id != user_id:
            raise Forbidden("Unauthorized to delete this product")

        has_purchases = (
            db.query(PreviousPurchase.id)
            .filter(PreviousPurchase.product_id == product_id)
            .first()
            is not None
        )
        if has_purchases:
            raise Conflict("Sold products cannot be deleted")

        deleted = {"id": product.id, "title": product.title}
        db.delete(product)
        db.commit()

        logger.info("product_deleted", product_id=product_id, owner_id=user_id)
        return deleted
