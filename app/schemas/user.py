"""
Pydantic schemas for authentication
"""

from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime

from app.schemas.common import CamelModel

class LoginRequest(BaseModel):
    """Schema for user login; presence is checked by the route so it can answer 400"""
    email: Optional[str] = Field(None, description="Account email (exact match)")
    password: Optional[str] = Field(None, description="Password")

    @validator('email', 'password')
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v

class UserResponse(CamelModel):
    """Public user profile (excludes the password hash)"""
    id: str
    role_id: Optional[str] = None
    role: Optional[str] = Field(None, validation_alias="role_name")
    email: str
    full_name: str
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class LoginData(BaseModel):
    user: UserResponse
    token: str

class LoginResponse(BaseModel):
    """Envelope returned by a successful login"""
    success: bool = True
    message: str
    data: LoginData

class CurrentUserResponse(BaseModel):
    success: bool = True
    data: UserResponse
