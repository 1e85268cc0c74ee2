from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.user import User
from app.services import task_service
from app.utils.logger import ai_logger

COMMAND_INSTRUCTIONS = """You are an AI assistant for a task management system.
If the user asks you to create, delete, update, or list tasks, output a JSON command (or an array of commands) in this format (on a new line):
{ "action": "create_task", "title": "...", "assignee": "...", "description": "...", "priority": "..." }
{ "action": "delete_task", "title": "..." }
{ "action": "update_task", "title": "...", "status": "...", "priority": "..." }
{ "action": "list_tasks", "filter": { "status": "...", "priority": "...", "assignee": "..." } }
- For multiple actions, output an array of JSON commands.
- For references like "last task you created" or "second task in my list", use the user's recent tasks (provided below) and include the resolved title in the command.
- Otherwise, just answer normally."""


@dataclass(frozen=True)
class Requester:
    """Plain snapshot of the authenticated user, safe to read after a rollback"""
    id: int
    name: str
    role: str
    company_id: int
    company_name: str = "Unknown Company"

    @classmethod
    def from_user(cls, user: User) -> "Requester":
        company = user.company
        return cls(
            id=user.id,
            name=user.name,
            role=user.role,
            company_id=user.company_id,
            company_name=company.name if company is not None else "Unknown Company",
        )


@dataclass(frozen=True)
class RecentTask:
    id: int
    title: str
    status: str
    priority: str
    assignee_name: Optional[str] = None
    assigner_name: Optional[str] = None

    def describe(self) -> str:
        assignee = self.assignee_name or "unassigned"
        return f"{self.title} ({self.status}, {self.priority} priority, assigned to {assignee})"


@dataclass
class ConversationContext:
    requester: Requester
    recent_tasks: List[RecentTask] = field(default_factory=list)

    @property
    def system_prompt(self) -> str:
        task_lines = "\n".join(
            f"#{index}: {task.describe()}" for index, task in enumerate(self.recent_tasks, start=1)
        )
        return (
            f"\n{COMMAND_INSTRUCTIONS}\n\n"
            f"Current User Context:\n"
            f"- Name: {self.requester.name}\n"
            f"- Role: {self.requester.role}\n"
            f"- Company: {self.requester.company_name}\n\n"
            f"Recent Tasks ({len(self.recent_tasks)}):\n"
            f"{task_lines}\n"
        )


async def build_conversation_context(
    db: AsyncSession,
    user: User,
    limit: int = None,
) -> ConversationContext:
    """Snapshot the requester and their most recently updated tasks"""
    requester = Requester.from_user(user)
    tasks = await task_service.get_recent_tasks(
        db,
        requester.id,
        requester.company_id,
        limit or settings.AI_RECENT_TASKS_LIMIT,
    )
    recent_tasks = [
        RecentTask(
            id=task.id,
            title=task.title,
            status=task.status,
            priority=task.priority,
            assignee_name=task.assignee.name if task.assignee else None,
            assigner_name=task.assigner.name if task.assigner else None,
        )
        for task in tasks
    ]
    ai_logger.info(f"Built chat context for user {requester.id} with {len(recent_tasks)} recent tasks")
    return ConversationContext(requester=requester, recent_tasks=recent_tasks)
