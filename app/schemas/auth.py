import re
from pydantic import EmailStr, Field, field_validator
from app.schemas.common import CamelModel
from app.schemas.user import UserResponse


class RegisterRequest(CamelModel):
    """Email/password registration request"""
    email: EmailStr
    password: str = Field(..., min_length=8)

    @field_validator('password')
    def password_strength(cls, v):
        """Password must contain uppercase, lowercase, digit, special char"""
        if not re.search(r'[A-Z]', v):
            raise ValueError('Password must contain uppercase letter')
        if not re.search(r'[a-z]', v):
            raise ValueError('Password must contain lowercase letter')
        if not re.search(r'[0-9]', v):
            raise ValueError('Password must contain digit')
        if not re.search(r'[^A-Za-z0-9]', v):
            raise ValueError('Password must contain special character')
        return v


class LoginRequest(CamelModel):
    """Email/password login request"""
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthResponse(CamelModel):
    """Body returned by register/login. The refresh token travels in a cookie."""
    access_token: str
    user: UserResponse


class AccessTokenResponse(CamelModel):
    access_token: str
