from app.db.base_class import Base


# IMPORT ALL MODELS HERE (THIS REGISTERS THEM WITH Base.metadata)
from app.models.user import User
from app.models.product import Product, ProductImage
from app.models.cart import Cart, CartItem
from app.models.purchase import PreviousPurchase
