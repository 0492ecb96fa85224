import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from shopapi.models.users import UserRole

PASSWORD_PATTERN = re.compile(r'^[A-Za-z\d!@#$%^&*(),.?":{}|<>]{8,}$')


# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr


# Schema for registration and login credentials
class AuthRequest(UserBase):
    password: str

    @field_validator("password")
    @classmethod
    def password_rules(cls, value: str) -> str:
        if not PASSWORD_PATTERN.match(value):
            raise ValueError("password must be at least 8 letters, digits or symbols")
        return value


# Output schema for user profile details
class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    role: UserRole
    created_at: datetime


# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
