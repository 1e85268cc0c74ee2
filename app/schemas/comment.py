from typing import Optional
from pydantic import BaseModel
from datetime import datetime

from app.schemas.user import UserBrief


class CommentCreate(BaseModel):
    content: Optional[str] = None


class CommentUpdate(BaseModel):
    content: Optional[str] = None


class Comment(BaseModel):
    id: int
    content: str
    task_id: int
    author_id: int
    company_id: int
    created_at: Optional[datetime] = None
    author: Optional[UserBrief] = None

    class Config:
        from_attributes = True
