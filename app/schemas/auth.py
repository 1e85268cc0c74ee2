from typing import Optional
from pydantic import BaseModel

from app.schemas.company import Company
from app.schemas.user import User, UserWithCompany


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    company_email: Optional[str] = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserWithCompany


class CompanyRegistered(BaseModel):
    message: str
    company: Company
    admin_user: User


class UserRegistered(BaseModel):
    message: str
    user: User


class Message(BaseModel):
    message: str
