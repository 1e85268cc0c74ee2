from typing import Any, Dict, List, Optional, Sequence

from pydantic import TypeAdapter
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.schemas.ai import (
    COMMAND_ACTIONS,
    CreateTaskCommand,
    DeleteTaskCommand,
    ListTasksCommand,
    TaskCommand,
    UpdateTaskCommand,
)
from app.schemas.task import TaskPriority, TaskStatus
from app.services import task_service, user as user_service
from app.services.ai_context import ConversationContext
from app.utils.logger import ai_logger, log_command

DEFAULT_TITLE = "Untitled Task"
DEFAULT_PRIORITY = TaskPriority.MEDIUM.value
COMMAND_ERROR = "⚠️ Error processing command."
NO_MATCHING_TASKS = "No matching tasks found."

STATUSES = {status.value for status in TaskStatus}
PRIORITIES = {priority.value for priority in TaskPriority}

_command_adapter = TypeAdapter(TaskCommand)


def normalize_choice(value: Optional[str], allowed: set) -> Optional[str]:
    """Upper-cased value when it is one of ``allowed``, otherwise None"""
    if not value:
        return None
    candidate = value.strip().upper()
    return candidate if candidate in allowed else None


class CommandDispatcher:
    """
    Executes extracted chat commands for one requester, one at a time and in order.

    Each command yields at most one human readable line. A failing command is
    reported in its own slot and never stops the commands after it; there is no
    transaction spanning the batch.
    """

    def __init__(self, db: AsyncSession, context: ConversationContext, list_limit: int = None):
        self.db = db
        self.requester = context.requester
        self.recent_tasks = context.recent_tasks
        self.list_limit = list_limit or settings.AI_LIST_TASKS_LIMIT
        self._handlers = {
            CreateTaskCommand: self._create_task,
            DeleteTaskCommand: self._delete_task,
            UpdateTaskCommand: self._update_task,
            ListTasksCommand: self._list_tasks,
        }

    async def dispatch_all(self, commands: Sequence[Dict[str, Any]]) -> List[str]:
        results = []
        for raw_command in commands:
            try:
                result = await self.dispatch(raw_command)
            except Exception as e:
                ai_logger.error(f"❌ Error processing command {raw_command!r}: {e}", exc_info=True)
                await self.db.rollback()
                results.append(COMMAND_ERROR)
                continue
            if result:
                results.append(result)
        return results

    async def dispatch(self, raw_command: Dict[str, Any]) -> Optional[str]:
        action = raw_command.get("action") if isinstance(raw_command, dict) else None
        if not isinstance(action, str) or action not in COMMAND_ACTIONS:
            ai_logger.info(f"Ignoring command with unsupported action: {action!r}")
            return None

        command = _command_adapter.validate_python(raw_command)
        handler = self._handlers[type(command)]
        ai_logger.info(f"Dispatching {action} for user {self.requester.id}")
        result = await handler(command)
        log_command(self.requester.id, self.requester.company_id, action, result)
        return result

    def resolve_title(self, title: Optional[str]) -> Optional[str]:
        """Map "last task" / "second task" references onto the recent task snapshot"""
        if not title:
            return title
        lowered = title.lower()
        if "last task" in lowered:
            if self.recent_tasks:
                return self.recent_tasks[0].title
        elif "second task" in lowered:
            if len(self.recent_tasks) > 1:
                return self.recent_tasks[1].title
        return title

    async def _create_task(self, command: CreateTaskCommand) -> str:
        assignee = None
        if command.assignee and command.assignee.strip():
            assignee = await user_service.find_user_by_name(
                self.db, self.requester.company_id, command.assignee
            )

        title = command.title if command.title and command.title.strip() else DEFAULT_TITLE
        priority = normalize_choice(command.priority, PRIORITIES) or DEFAULT_PRIORITY

        task = await task_service.create_task(
            self.db,
            title=title,
            description=command.description or "",
            priority=priority,
            assigner_id=self.requester.id,
            assignee_id=assignee.id if assignee else self.requester.id,
            company_id=self.requester.company_id,
        )
        if assignee:
            return f'✅ Task "{task.title}" created and assigned to {assignee.name}.'
        return f'✅ Task "{task.title}" created.'

    async def _delete_task(self, command: DeleteTaskCommand) -> str:
        # Company scope only: any member may delete any company task by title
        title = command.title or ""
        task = await task_service.find_task_by_title(self.db, self.requester.company_id, title) if title else None
        if task is None:
            return f'⚠️ Task "{title}" not found.'

        task_title = task.title
        if await task_service.has_incomplete_subtasks(self.db, task.id):
            return f'⚠️ Task "{task_title}" has incomplete subtasks and cannot be deleted.'

        await task_service.delete_task(self.db, task)
        return f'🗑️ Task "{task_title}" deleted.'

    async def _update_task(self, command: UpdateTaskCommand) -> str:
        title = self.resolve_title(command.title) or ""
        task = await task_service.find_task_by_title(self.db, self.requester.company_id, title) if title else None
        if task is None:
            return f'⚠️ Task "{title}" not found.'

        update_data = {}
        status = normalize_choice(command.status, STATUSES)
        if status:
            update_data["status"] = status
        priority = normalize_choice(command.priority, PRIORITIES)
        if priority:
            update_data["priority"] = priority

        if not update_data:
            return f'⚠️ No valid fields to update for task "{task.title}".'

        task_title = task.title
        await task_service.update_task(self.db, task, update_data)
        changes = "".join(f" ({field}: {value})" for field, value in update_data.items())
        return f'✏️ Task "{task_title}" updated{changes}.'

    async def _list_tasks(self, command: ListTasksCommand) -> str:
        task_filter = command.filter
        assignee_id = None
        if task_filter.assignee:
            assignee = await user_service.find_user_by_name(
                self.db, self.requester.company_id, task_filter.assignee
            )
            if assignee:
                assignee_id = assignee.id

        tasks = await task_service.list_participant_tasks(
            self.db,
            self.requester.id,
            self.requester.company_id,
            status=task_filter.status.strip().upper() if task_filter.status else None,
            priority=task_filter.priority.strip().upper() if task_filter.priority else None,
            assignee_id=assignee_id,
            limit=self.list_limit,
        )
        if not tasks:
            return NO_MATCHING_TASKS
        return "Tasks:\n" + "\n".join(f"- {task.title} ({task.status}, {task.priority})" for task in tasks)
