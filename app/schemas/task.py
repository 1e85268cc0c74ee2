from typing import Optional, List
from pydantic import BaseModel
from datetime import datetime
from enum import Enum as PyEnum

from app.schemas.comment import Comment
from app.schemas.user import UserBrief, UserContact


class TaskStatus(str, PyEnum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class TaskPriority(str, PyEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class TaskListType(str, PyEnum):
    ALL = "all"
    ASSIGNED_TO_ME = "assigned-to-me"
    CREATED_BY_ME = "created-by-me"


class TaskCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    assignee_id: Optional[int] = None
    parent_task_id: Optional[int] = None


class SubtaskCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    assignee_id: Optional[int] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assignee_id: Optional[int] = None


class TaskStatusUpdate(BaseModel):
    status: Optional[TaskStatus] = None


class TaskPriorityUpdate(BaseModel):
    priority: Optional[TaskPriority] = None


class ParentTaskBrief(BaseModel):
    id: int
    title: str

    class Config:
        from_attributes = True


class Subtask(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    assigner: Optional[UserBrief] = None
    assignee: Optional[UserBrief] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class Task(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    assigner_id: int
    assignee_id: int
    parent_task_id: Optional[int] = None
    company_id: int
    created_at: datetime
    updated_at: datetime
    assigner: Optional[UserContact] = None
    assignee: Optional[UserContact] = None
    parent_task: Optional[ParentTaskBrief] = None
    subtasks: List[Subtask] = []
    comments: List[Comment] = []

    class Config:
        from_attributes = True
