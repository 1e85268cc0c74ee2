from typing import Optional
from enum import Enum as PyEnum
from pydantic import BaseModel
from datetime import datetime


class UserRole(str, PyEnum):
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"


class UserCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: UserRole = UserRole.EMPLOYEE


class EmployeeCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class UserBrief(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class UserContact(UserBrief):
    email: str


class User(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    company_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserWithCompany(User):
    company_name: Optional[str] = None
