"""
Pydantic schemas for company operations
"""

from pydantic import BaseModel, Field, EmailStr, validator
from typing import Optional
from datetime import datetime

from app.schemas.common import CamelModel

class CompanyCreate(CamelModel):
    """Schema for creating a company; name and email are checked by the route"""
    name: Optional[str] = Field(None, max_length=200, description="Company name")
    email: Optional[EmailStr] = Field(None, description="Main contact email")
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=500)
    website: Optional[str] = Field(None, max_length=255)
    industry: Optional[str] = Field(None, max_length=100)
    employee_count: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    billing_contact_name: Optional[str] = Field(None, max_length=150)
    billing_contact_email: Optional[EmailStr] = None
    billing_contact_phone: Optional[str] = Field(None, max_length=30)

    @validator('name')
    def strip_name(cls, v):
        if v is None:
            return v
        return v.strip() or None

    @validator('email', pre=True)
    def blank_email_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

class CompanyCreated(CompanyCreate):
    """Echo of the submitted company plus server-generated fields"""
    id: str
    created_at: datetime

class CompanyCreateResponse(BaseModel):
    success: bool = True
    message: str
    data: CompanyCreated

class BillingContact(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

class CompanySummary(CamelModel):
    """Flat company record for list views"""
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    employee_count: Optional[int] = None
    is_active: bool
    billing_contact: Optional[BillingContact] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class CompanyListData(BaseModel):
    companies: list[CompanySummary]
    total: int

class CompanyListResponse(BaseModel):
    success: bool = True
    data: CompanyListData
