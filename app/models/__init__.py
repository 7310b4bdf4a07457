from app.models.user import User
from app.models.product import Product, ProductImage, ProductStatus
from app.models.cart import Cart, CartItem
from app.models.purchase import PreviousPurchase
