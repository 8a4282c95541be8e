"""
RecipeShare Authentication Schemas
Pydantic models for authentication requests
"""

from typing import Optional
from pydantic import EmailStr, Field, field_validator, model_validator

from schemas.base import CamelModel, ImageUrl

PASSWORD_SPECIALS = "@$!%*?&"


def validate_password_strength(value: str) -> str:
    """Require a lowercase letter, an uppercase letter, a digit and a special character"""
    has_upper = any(c.isupper() for c in value)
    has_lower = any(c.islower() for c in value)
    has_digit = any(c.isdigit() for c in value)
    has_special = any(c in PASSWORD_SPECIALS for c in value)

    if not (has_upper and has_lower and has_digit and has_special):
        raise ValueError(
            "Password must contain at least one lowercase letter, one uppercase letter, "
            f"one number, and one special character ({PASSWORD_SPECIALS})"
        )
    return value


class UserRegister(CamelModel):
    """Schema for user registration"""
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_-]+$")
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    bio: Optional[str] = Field(default=None, max_length=500)
    profile_image_url: Optional[ImageUrl] = None

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return validate_password_strength(v)

class UserLogin(CamelModel):
    """Schema for user login by email or username"""
    email_or_username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class PasswordChange(CamelModel):
    """Schema for password change"""
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def check_new_password(cls, v):
        return validate_password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Password confirmation does not match new password")
        return self
