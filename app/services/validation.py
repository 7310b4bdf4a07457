"""Stateless input rules for listings, cart lines and profiles.

Each validator returns the cleaned value or raises ``ValueError`` with the
message shown to the client. Schemas call these from ``field_validator``s.
"""
from typing import List, Optional

from app.models.product import ProductStatus

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100
DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 1000
MAX_PRICE = 10000.0
MIN_IMAGES = 1
MAX_IMAGES = 5
USERNAME_MIN_LENGTH = 3
ADDRESS_MIN_LENGTH = 10
MAX_QUANTITY = 99


def validate_title(value: str) -> str:
    title = (value or "").strip()
    if not TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH:
        raise ValueError(
            f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters"
        )
    return title


def validate_description(value: str) -> str:
    description = (value or "").strip()
    if not DESCRIPTION_MIN_LENGTH <= len(description) <= DESCRIPTION_MAX_LENGTH:
        raise ValueError(
            f"Description must be between {DESCRIPTION_MIN_LENGTH} and {DESCRIPTION_MAX_LENGTH} characters"
        )
    return description


def validate_category(value: str) -> str:
    category = (value or "").strip()
    if not category:
        raise ValueError("Category is required")
    return category


def validate_price(value: float) -> float:
    # NaN fails both comparisons
    if not (value > 0 and value <= MAX_PRICE):
        raise ValueError("Price must be between $0.01 and $10,000")
    return float(value)


def validate_images(value: Optional[List[str]]) -> List[str]:
    images = [url.strip() for url in (value or [])]
    if len(images) < MIN_IMAGES:
        raise ValueError("At least one image is required")
    if len(images) > MAX_IMAGES:
        raise ValueError(f"Maximum {MAX_IMAGES} images allowed")
    if any(not url for url in images):
        raise ValueError("Image URLs cannot be empty")
    return images


def validate_username(value: str) -> str:
    username = (value or "").strip()
    if not username:
        raise ValueError("Username is required")
    if len(username) < USERNAME_MIN_LENGTH:
        raise ValueError(f"Username must be at least {USERNAME_MIN_LENGTH} characters long")
    return username


def validate_address(value: str) -> str:
    address = (value or "").strip()
    if not address:
        raise ValueError("Address is required")
    if len(address) < ADDRESS_MIN_LENGTH:
        raise ValueError(
            f"Please enter a complete address (at least {ADDRESS_MIN_LENGTH} characters)"
        )
    return address


def validate_quantity(value: int) -> int:
    if value < 1:
        raise ValueError("Quantity must be at least 1")
    if value > MAX_QUANTITY:
        raise ValueError(f"Quantity cannot exceed {MAX_QUANTITY}")
    return value


def normalize_status(status: Optional[str]) -> str:
    return status or ProductStatus.AVAILABLE.value


def is_available(status: Optional[str]) -> bool:
    return status is None or status == ProductStatus.AVAILABLE.value
