from typing import Optional
from pydantic import BaseModel
from datetime import datetime


class CompanyRegister(BaseModel):
    """Public signup: creates the company together with its first admin"""
    name: Optional[str] = None
    email: Optional[str] = None
    admin_name: Optional[str] = None
    admin_email: Optional[str] = None
    password: Optional[str] = None


class Company(BaseModel):
    id: int
    name: str
    email: str
    subscription_plan: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
