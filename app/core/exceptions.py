from fastapi import status
from typing import Any, List, Optional


class APIError(Exception):
    def __init__(self, status_code: int, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class NotAuthenticated(APIError):
    def __init__(self, message: str = "User not authenticated"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, message)


class UserNotFound(APIError):
    def __init__(self):
        super().__init__(status.HTTP_404_NOT_FOUND, "User not found")


class ProductNotFound(APIError):
    def __init__(self):
        super().__init__(status.HTTP_404_NOT_FOUND, "Product not found")


class CartItemNotFound(APIError):
    def __init__(self):
        super().__init__(status.HTTP_404_NOT_FOUND, "Cart item not found")


class Forbidden(APIError):
    def __init__(self, message: str):
        super().__init__(status.HTTP_403_FORBIDDEN, message)


class Conflict(APIError):
    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(status.HTTP_409_CONFLICT, message, errors)


class BusinessRuleViolation(APIError):
    """A well-formed request that the marketplace rules refuse."""

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, message, errors)
