from typing import Optional, Literal, Union, Any, Annotated
from pydantic import BaseModel, Field, validator


class ChatRequest(BaseModel):
    message: Optional[str] = None

    @validator("message", pre=True)
    def message_must_be_text(cls, v):
        return v if isinstance(v, str) else None


class ChatResponse(BaseModel):
    response: str


class ChatError(BaseModel):
    error: str


def _coerce_text(value: Any) -> Optional[str]:
    """Model output is loosely typed: keep strings, stringify numbers, drop anything else"""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


class CommandBase(BaseModel):
    """Fields the model is not asked for are ignored rather than rejected"""
    model_config = {"extra": "ignore"}


class CreateTaskCommand(CommandBase):
    action: Literal["create_task"]
    title: Optional[str] = None
    description: Optional[str] = None
    assignee: Optional[str] = None
    priority: Optional[str] = None

    @validator("title", "description", "assignee", "priority", pre=True)
    def coerce_text(cls, v):
        return _coerce_text(v)


class DeleteTaskCommand(CommandBase):
    action: Literal["delete_task"]
    title: Optional[str] = None

    @validator("title", pre=True)
    def coerce_text(cls, v):
        return _coerce_text(v)


class UpdateTaskCommand(CommandBase):
    action: Literal["update_task"]
    title: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None

    @validator("title", "status", "priority", pre=True)
    def coerce_text(cls, v):
        return _coerce_text(v)


class ListTasksFilter(CommandBase):
    status: Optional[str] = None
    priority: Optional[str] = None
    assignee: Optional[str] = None

    @validator("status", "priority", "assignee", pre=True)
    def coerce_text(cls, v):
        return _coerce_text(v)


class ListTasksCommand(CommandBase):
    action: Literal["list_tasks"]
    filter: ListTasksFilter = Field(default_factory=ListTasksFilter)

    @validator("filter", pre=True)
    def default_filter(cls, v):
        if not isinstance(v, dict):
            return {}
        return v


TaskCommand = Annotated[
    Union[CreateTaskCommand, DeleteTaskCommand, UpdateTaskCommand, ListTasksCommand],
    Field(discriminator="action"),
]

COMMAND_ACTIONS = ("create_task", "delete_task", "update_task", "list_tasks")
