from typing import List, Optional, Dict, Any
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select, update, delete, func, or_, and_

from app.models.comment import Comment
from app.models.task import Task
from app.models.user import User
from app.schemas.comment import Comment as CommentSchema
from app.schemas.task import Task as TaskSchema, Subtask, ParentTaskBrief, TaskListType
from app.schemas.user import UserContact
from app.utils.logger import logger


def _detail_options():
    """Eager loads for a task as the API returns it"""
    return (
        selectinload(Task.assigner),
        selectinload(Task.assignee),
        selectinload(Task.parent_task),
        selectinload(Task.subtasks).selectinload(Task.assigner),
        selectinload(Task.subtasks).selectinload(Task.assignee),
        selectinload(Task.comments).selectinload(Comment.author),
    )


def participant_clause(user_id: int):
    return or_(Task.assignee_id == user_id, Task.assigner_id == user_id)


def visibility_filters(user: User) -> list:
    """Company scope for everyone, participant scope on top of it for employees"""
    filters = [Task.company_id == user.company_id]
    if not user.is_admin:
        filters.append(participant_clause(user.id))
    return filters


def to_schema(task: Task, viewer_id: int) -> TaskSchema:
    """
    Serialize a fully loaded task for a viewer. Only the subtasks the viewer
    takes part in are listed, and the parent brief is dropped unless the viewer
    takes part in the parent.
    """
    parent = task.parent_task
    return TaskSchema(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        priority=task.priority,
        assigner_id=task.assigner_id,
        assignee_id=task.assignee_id,
        parent_task_id=task.parent_task_id,
        company_id=task.company_id,
        created_at=task.created_at,
        updated_at=task.updated_at,
        assigner=UserContact.model_validate(task.assigner) if task.assigner else None,
        assignee=UserContact.model_validate(task.assignee) if task.assignee else None,
        parent_task=ParentTaskBrief.model_validate(parent) if parent and parent.is_participant(viewer_id) else None,
        subtasks=[Subtask.model_validate(s) for s in task.subtasks if s.is_participant(viewer_id)],
        comments=[CommentSchema.model_validate(c) for c in task.comments],
    )


async def get_tasks(
    db: AsyncSession,
    user: User,
    *,
    list_type: TaskListType = TaskListType.ALL,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Task]:
    """Tasks visible to the user, newest first"""
    filters = visibility_filters(user)

    if list_type == TaskListType.ASSIGNED_TO_ME:
        filters.append(Task.assignee_id == user.id)
    elif list_type == TaskListType.CREATED_BY_ME:
        filters.append(Task.assigner_id == user.id)

    if status:
        filters.append(Task.status == status)
    if priority:
        filters.append(Task.priority == priority)
    if search:
        pattern = func.lower(f"%{search}%")
        filters.append(
            or_(func.lower(Task.title).like(pattern), func.lower(Task.description).like(pattern))
        )

    stmt = (
        select(Task)
        .options(*_detail_options())
        .filter(and_(*filters))
        .order_by(Task.created_at.desc(), Task.id.desc())
    )
    result = await db.execute(stmt)
    return result.scalars().all()


async def get_task_detail(db: AsyncSession, task_id: int) -> Optional[Task]:
    result = await db.execute(
        select(Task)
        .options(*_detail_options())
        .filter(Task.id == task_id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def get_visible_task(db: AsyncSession, user: User, task_id: int) -> Optional[Task]:
    result = await db.execute(
        select(Task)
        .options(*_detail_options())
        .filter(Task.id == task_id, *visibility_filters(user))
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def get_company_task(db: AsyncSession, company_id: int, task_id: int) -> Optional[Task]:
    result = await db.execute(
        select(Task).filter(Task.id == task_id, Task.company_id == company_id)
    )
    return result.scalars().first()


async def get_participant_task(db: AsyncSession, user: User, task_id: int) -> Optional[Task]:
    """A company task the user assigns or is assigned, whatever their role"""
    result = await db.execute(
        select(Task).filter(
            Task.id == task_id,
            Task.company_id == user.company_id,
            participant_clause(user.id),
        )
    )
    return result.scalars().first()


async def find_task_by_title(db: AsyncSession, company_id: int, title: str) -> Optional[Task]:
    """Case-insensitive exact title match within a company, oldest first"""
    result = await db.execute(
        select(Task)
        .filter(Task.company_id == company_id, func.lower(Task.title) == func.lower(title.strip()))
        .order_by(Task.id)
        .limit(1)
    )
    return result.scalars().first()


async def get_recent_tasks(db: AsyncSession, user_id: int, company_id: int, limit: int = 10) -> List[Task]:
    result = await db.execute(
        select(Task)
        .options(selectinload(Task.assignee), selectinload(Task.assigner))
        .filter(Task.company_id == company_id, participant_clause(user_id))
        .order_by(Task.updated_at.desc(), Task.id.desc())
        .limit(limit)
    )
    return result.scalars().all()


async def list_participant_tasks(
    db: AsyncSession,
    user_id: int,
    company_id: int,
    *,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    assignee_id: Optional[int] = None,
    limit: int = 20,
) -> List[Task]:
    """Tasks the user takes part in, most recently updated first; admin role does not widen this"""
    stmt = select(Task).filter(Task.company_id == company_id, participant_clause(user_id))
    if status:
        stmt = stmt.filter(Task.status == status)
    if priority:
        stmt = stmt.filter(Task.priority == priority)
    if assignee_id:
        stmt = stmt.filter(Task.assignee_id == assignee_id)
    result = await db.execute(stmt.order_by(Task.updated_at.desc(), Task.id.desc()).limit(limit))
    return result.scalars().all()


async def create_task(
    db: AsyncSession,
    *,
    title: str,
    assigner_id: int,
    assignee_id: int,
    company_id: int,
    description: Optional[str] = None,
    priority: str = "MEDIUM",
    parent_task_id: Optional[int] = None,
) -> Task:
    task = Task(
        title=title,
        description=description,
        status="TODO",
        priority=priority,
        assigner_id=assigner_id,
        assignee_id=assignee_id,
        parent_task_id=parent_task_id,
        company_id=company_id,
    )
    db.add(task)
    await db.commit()
    await db.refresh(task)
    logger.info(f"Task ID {task.id} created in company {company_id} by user {assigner_id}")
    return task


async def update_task(db: AsyncSession, task: Task, update_data: Dict[str, Any]) -> Task:
    for field, value in update_data.items():
        setattr(task, field, value)
    task.updated_at = datetime.utcnow()
    db.add(task)
    await db.commit()
    await db.refresh(task)
    return task


async def has_incomplete_subtasks(db: AsyncSession, task_id: int) -> bool:
    result = await db.execute(
        select(func.count(Task.id)).filter(Task.parent_task_id == task_id, Task.status != "COMPLETED")
    )
    return result.scalar_one() > 0


async def delete_task(db: AsyncSession, task: Task) -> None:
    """Delete a task with its comments; completed subtasks are kept as top-level tasks"""
    task_id = task.id
    await db.execute(update(Task).where(Task.parent_task_id == task_id).values(parent_task_id=None))
    await db.execute(delete(Comment).where(Comment.task_id == task_id))
    await db.execute(delete(Task).where(Task.id == task_id))
    await db.commit()
    logger.info(f"Task ID {task_id} deleted")
