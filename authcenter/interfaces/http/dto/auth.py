from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic_core import PydanticCustomError


class RegisterRequestDTO(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
    first_name: str = Field(min_length=2, max_length=64)
    last_name: str = Field(min_length=2, max_length=64)
    role: str = Field(min_length=1, max_length=32)

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise PydanticCustomError(
                "name_too_short",
                "Name must be at least 2 characters long",
                {"min_length": 2},
            )
        return value


class LoginRequestDTO(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)  # No strength check on login


class PasswordResetRequestDTO(BaseModel):
    email: EmailStr


class ResetPasswordDTO(BaseModel):
    token: str = Field(min_length=1, max_length=256)
    new_password: str = Field(min_length=1, max_length=128)


class MessageDTO(BaseModel):
    message: str
    data: dict | None = None
