import argparse
import logging

from sqlalchemy.orm import Session

from app.models.cart import Cart, CartItem
from app.models.product import Product, ProductImage, ProductStatus
from app.models.purchase import PreviousPurchase
from app.models.user import User

logger = logging.getLogger(__name__)

DEMO_SELLER = {
    "username": "ecofinds-demo",
    "email": "demo@ecofinds.example",
    "address": "12 Green Street, Springfield",
}

SAMPLE_PRODUCTS = [
    {
        "title": "Organic Cotton Tote Bag",
        "description": "Eco-friendly reusable tote bag made from 100% organic cotton. Perfect for grocery shopping and daily use.",
        "category": "Fashion & Accessories",
        "price": 1299,
        "image": "https://images.unsplash.com/photo-1553062407-98eeb64c6a62?w=800&h=600&fit=crop",
    },
    {
        "title": "Bamboo Water Bottle",
        "description": "Sustainable bamboo water bottle with stainless steel interior. Keeps drinks cold for hours.",
        "category": "Lifestyle",
        "price": 1999,
        "image": "https://images.unsplash.com/photo-1594223274512-ad4803739b7c?w=800&h=600&fit=crop",
    },
    {
        "title": "Solar Phone Charger",
        "description": "Portable solar charger for phones and small devices. Perfect for outdoor adventures.",
        "category": "Electronics",
        "price": 3799,
        "image": "https://images.unsplash.com/photo-1584917865442-de9dfe0e4e0e?w=800&h=600&fit=crop",
    },
    {
        "title": "Compostable Food Containers",
        "description": "Set of 10 compostable food containers for meal prep. Made from plant-based materials.",
        "category": "Home & Garden",
        "price": 1099,
        "image": "https://images.unsplash.com/photo-1553062407-98eeb64c6a62?w=800&h=600&fit=crop",
    },
]


def seed_products(db: Session) -> int:
    """Create the demo seller and sample listings when the catalogue is empty."""
    if db.query(Product.id).first() is not None:
        logger.info("seed_skipped reason=products_exist")
        return 0

    seller = db.query(User).filter(User.email == DEMO_SELLER["email"]).first()
    if not seller:
        seller = User(**DEMO_SELLER)
        db.add(seller)
        db.flush()
        logger.info("demo_seller_created user_id=%s", seller.id)

    for data in SAMPLE_PRODUCTS:
        product = Product(
            owner_id=seller.id,
            title=data["title"],
            description=data["description"],
            category=data["category"],
            price=data["price"],
            status=ProductStatus.AVAILABLE.value,
        )
        product.images.append(ProductImage(image_url=data["image"], is_main=True))
        db.add(product)
        logger.info("product_seeded title=%s", data["title"])

    db.commit()
    return len(SAMPLE_PRODUCTS)


def reset_products(db: Session) -> int:
    """Put every listing back on sale and empty all carts."""
    updated = db.query(Product).update(
        {Product.status: ProductStatus.AVAILABLE.value}, synchronize_session=False
    )
    db.query(CartItem).delete(synchronize_session=False)
    db.query(Cart).delete(synchronize_session=False)
    db.commit()
    logger.info("products_reset count=%s", updated)
    return updated


def clear_purchases(db: Session) -> int:
    """Delete all purchase history."""
    deleted = db.query(PreviousPurchase).delete(synchronize_session=False)
    db.commit()
    remaining = db.query(PreviousPurchase).count()
    logger.info("purchases_cleared deleted=%s remaining=%s", deleted, remaining)
    return deleted


COMMANDS = {
    "seed": seed_products,
    "reset-products": reset_products,
    "clear-purchases": clear_purchases,
}


if __name__ == "__main__":
    from app.core.logging_config import configure_logging
    from app.db.session import SessionLocal

    parser = argparse.ArgumentParser(description="Marketplace data maintenance")
    parser.add_argument("command", choices=sorted(COMMANDS))
    args = parser.parse_args()

    configure_logging()
    db = SessionLocal()
    try:
        COMMANDS[args.command](db)
    finally:
        db.close()
