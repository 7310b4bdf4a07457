import html
from typing import List

import bleach
from pydantic import BaseModel, field_validator

from app.services.validation import (
    validate_category,
    validate_description,
    validate_images,
    validate_price,
    validate_title,
)


def _strip_markup(value: str) -> str:
    # bleach escapes entities; keep the plain text so "&" stays one character
    return html.unescape(bleach.clean(value or "", tags=[], attributes={}, strip=True))


class ProductCreate(BaseModel):
    title: str
    description: str
    category: str
    price: float
    images: List[str]

    @field_validator("title")
    @classmethod
    def check_title(cls, value: str) -> str:
        return validate_title(_strip_markup(value))

    @field_validator("description")
    @classmethod
    def check_description(cls, value: str) -> str:
        return validate_description(_strip_markup(value))

    @field_validator("category")
    @classmethod
    def check_category(cls, value: str) -> str:
        return validate_category(_strip_markup(value))

    @field_validator("price")
    @classmethod
    def check_price(cls, value: float) -> float:
        return validate_price(value)

    @field_validator("images")
    @classmethod
    def check_images(cls, value: List[str]) -> List[str]:
        return validate_images(value)
