from pydantic import BaseModel, field_validator

from app.services.validation import validate_quantity


class CartItemCreate(BaseModel):
    product_id: int
    quantity: int = 1

    @field_validator("quantity")
    @classmethod
    def check_quantity(cls, value: int) -> int:
        return validate_quantity(value)


class CartItemUpdate(BaseModel):
    quantity: int

    @field_validator("quantity")
    @classmethod
    def check_quantity(cls, value: int) -> int:
        return validate_quantity(value)
