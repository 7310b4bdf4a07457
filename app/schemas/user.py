from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional
import html

import bleach

from app.services.validation import validate_address, validate_username


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return html.unescape(bleach.clean(value, tags=[], attributes={}, strip=True)).strip()


class UserCreate(BaseModel):
    username: str
    email: EmailStr
    address: Optional[str] = None
    profile_pic: Optional[str] = None

    @field_validator("username")
    @classmethod
    def check_username(cls, value: str) -> str:
        return validate_username(_clean(value))

    @field_validator("address")
    @classmethod
    def check_address(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return validate_address(_clean(value))

    @field_validator("profile_pic")
    @classmethod
    def blank_profile_pic(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() or None if value else None


class ProfileUpdate(BaseModel):
    username: str
    address: str
    profile_pic: Optional[str] = None

    @field_validator("username")
    @classmethod
    def check_username(cls, value: str) -> str:
        return validate_username(_clean(value))

    @field_validator("address")
    @classmethod
    def check_address(cls, value: str) -> str:
        return validate_address(_clean(value))

    @field_validator("profile_pic")
    @classmethod
    def blank_profile_pic(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() or None if value else None
