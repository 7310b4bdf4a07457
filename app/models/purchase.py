from sqlalchemy import Column, Integer, ForeignKey, DateTime, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.base_class import Base


class PreviousPurchase(Base):
    """Append-only record written by checkout."""

    __tablename__ = "previous_purchases"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    purchased_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="purchases")
    product = relationship("Product", back_populates="purchases")

Index("ix_previous_purchases_user_purchased_at", PreviousPurchase.user_id, PreviousPurchase.purchased_at)
