"""Authentication schemas."""

import re

from pydantic import BaseModel, EmailStr, Field, field_validator

REGISTER_PASSWORD_PATTERN = re.compile(r"^(?=.*[0-9])(?=.*[a-z])(?=.*[A-Z]).{8,}$")
LOGIN_PASSWORD_PATTERN = re.compile(r"^(?=.*[0-9])(?=.*[a-z])(?=.*[A-Z])(?=.*[@#$%^&+=]).{8,}$")


class RegisterRequest(BaseModel):
    """Register request schema."""

    email: EmailStr
    password: str
    name: str = Field(..., min_length=2, max_length=50)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if not REGISTER_PASSWORD_PATTERN.match(v):
            raise ValueError(
                "Password must be at least 8 characters long, and include one uppercase "
                "letter, one lowercase letter, and one digit."
            )
        return v

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        if not v.strip() or not all(ch.isalpha() or ch == " " for ch in v):
            raise ValueError("Name can only contain letters and spaces")
        return v


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if not LOGIN_PASSWORD_PATTERN.match(v):
            raise ValueError(
                "Password must be at least 8 characters long, and include one uppercase "
                "letter, one lowercase letter, one digit, and one special character."
            )
        return v


class AuthenticationResponse(BaseModel):
    token: str
