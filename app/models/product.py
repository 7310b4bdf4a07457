from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, DateTime, Text, Index, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from app.db.base_class import Base


class ProductStatus(str, enum.Enum):
    AVAILABLE = "available"
    SOLD = "sold"
    PENDING = "pending"


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_products_price_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    title = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, index=True)
    price = Column(Float, nullable=False)

    # NULL is read as available (rows predating the status column)
    status = Column(String(20), default=ProductStatus.AVAILABLE.value, nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("User", back_populates="products")
    images = relationship(
        "ProductImage",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by=lambda: [ProductImage.is_main.desc(), ProductImage.id],
    )
    cart_items = relationship("CartItem", back_populates="product", cascade="all, delete-orphan")
    purchases = relationship("PreviousPurchase", back_populates="product")

Index("ix_products_owner_created_at", Product.owner_id, Product.created_at)


class ProductImage(Base):
    __tablename__ = "product_images"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    image_url = Column(Text, nullable=False)
    is_main = Column(Boolean, default=False, nullable=False)

    # Relationships
    product = relationship("Product", back_populates="images")
