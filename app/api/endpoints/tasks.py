from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user
from app.database.session import get_db
from app.models.user import User
from app.schemas.auth import Message
from app.schemas.task import (
    Task as TaskSchema,
    TaskCreate,
    SubtaskCreate,
    TaskUpdate,
    TaskStatus,
    TaskPriority,
    TaskListType,
    TaskStatusUpdate,
    TaskPriorityUpdate,
)
from app.services import task_service
from app.services import user as user_service
from app.utils.logger import logger

router = APIRouter()


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")


async def _require_company_assignee(db: AsyncSession, company_id: int, assignee_id: Optional[int]) -> None:
    if not assignee_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Assignee is required")
    if not await user_service.get_company_user(db, company_id, assignee_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Assignee not found in your company",
        )


async def _detail(db: AsyncSession, task_id: int, viewer: User) -> TaskSchema:
    task = await task_service.get_task_detail(db, task_id)
    return task_service.to_schema(task, viewer.id)


@router.get("/", response_model=List[TaskSchema])
async def read_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = None,
    search: Optional[str] = None,
    list_type: TaskListType = Query(TaskListType.ALL, alias="type"),
) -> Any:
    """
    Retrieve tasks visible to the current user. Admins see every company task,
    employees only the tasks they assign or are assigned.
    """
    tasks = await task_service.get_tasks(
        db,
        current_user,
        list_type=list_type,
        status=task_status.value if task_status else None,
        priority=priority.value if priority else None,
        search=search,
    )
    return [task_service.to_schema(task, current_user.id) for task in tasks]


@router.get("/{task_id}", response_model=TaskSchema)
async def read_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    task = await task_service.get_visible_task(db, current_user, task_id)
    if not task:
        raise _not_found()
    return task_service.to_schema(task, current_user.id)


@router.post("/", response_model=TaskSchema, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Create a task (any user). A parent task must be one the creator assigns or is assigned.
    """
    if not task_in.title:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")

    await _require_company_assignee(db, current_user.company_id, task_in.assignee_id)

    if task_in.parent_task_id:
        parent_task = await task_service.get_participant_task(db, current_user, task_in.parent_task_id)
        if not parent_task:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Parent task not found or you do not have permission to create subtasks for it",
            )

    task = await task_service.create_task(
        db,
        title=task_in.title,
        description=task_in.description,
        priority=task_in.priority.value,
        assigner_id=current_user.id,
        assignee_id=task_in.assignee_id,
        parent_task_id=task_in.parent_task_id or None,
        company_id=current_user.company_id,
    )
    return await _detail(db, task.id, current_user)


@router.post("/{task_id}/subtasks", response_model=TaskSchema, status_code=status.HTTP_201_CREATED)
async def create_subtask(
    task_id: int,
    subtask_in: SubtaskCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Create a subtask under a task the current user assigns or is assigned
    """
    if not subtask_in.title:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")
    if not subtask_in.assignee_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Assignee is required")

    parent_task = await task_service.get_participant_task(db, current_user, task_id)
    if not parent_task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Parent task not found or you do not have permission to create subtasks for it",
        )

    await _require_company_assignee(db, current_user.company_id, subtask_in.assignee_id)

    subtask = await task_service.create_task(
        db,
        title=subtask_in.title,
        description=subtask_in.description,
        priority=subtask_in.priority.value,
        assigner_id=current_user.id,
        assignee_id=subtask_in.assignee_id,
        parent_task_id=parent_task.id,
        company_id=current_user.company_id,
    )
    return await _detail(db, subtask.id, current_user)


@router.put("/{task_id}", response_model=TaskSchema)
async def update_task(
    task_id: int,
    task_in: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Update a task. Admins and the assigner may change every field, the assignee
    only the status.
    """
    task = await task_service.get_company_task(db, current_user.company_id, task_id)
    if not task:
        raise _not_found()

    is_assigner = task.assigner_id == current_user.id
    is_assignee = task.assignee_id == current_user.id
    if not current_user.is_admin and not is_assigner and not is_assignee:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to update this task",
        )

    update_data = task_in.model_dump(exclude_unset=True, exclude_none=True)
    if not current_user.is_admin and not is_assigner:
        update_data = {key: value for key, value in update_data.items() if key == "status"}

    if "assignee_id" in update_data:
        await _require_company_assignee(db, current_user.company_id, update_data["assignee_id"])

    update_data = {key: getattr(value, "value", value) for key, value in update_data.items()}
    await task_service.update_task(db, task, update_data)
    return await _detail(db, task_id, current_user)


@router.delete("/{task_id}", response_model=Message)
async def delete_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Delete a task (admin or assigner). Blocked while any subtask is not completed.
    """
    task = await task_service.get_company_task(db, current_user.company_id, task_id)
    if not task:
        raise _not_found()

    if not current_user.is_admin and task.assigner_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to delete this task",
        )

    if await task_service.has_incomplete_subtasks(db, task.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete task with incomplete subtasks. Please complete or delete all subtasks first.",
        )

    await task_service.delete_task(db, task)
    logger.info(f"Task ID {task_id} deleted by user {current_user.id}")
    return {"message": "Task deleted successfully"}


@router.patch("/{task_id}/status", response_model=TaskSchema)
async def update_task_status(
    task_id: int,
    status_in: TaskStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Change the status of a task (admin, assigner or assignee)
    """
    if not status_in.status:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Status is required")

    task = await task_service.get_company_task(db, current_user.company_id, task_id)
    if not task:
        raise _not_found()

    if not current_user.is_admin and not task.is_participant(current_user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to update this task status",
        )

    await task_service.update_task(db, task, {"status": status_in.status.value})
    return await _detail(db, task_id, current_user)


@router.patch("/{task_id}/priority", response_model=TaskSchema)
async def update_task_priority(
    task_id: int,
    priority_in: TaskPriorityUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Change the priority of a task (admin or assigner)
    """
    if not priority_in.priority:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Priority is required")

    task = await task_service.get_company_task(db, current_user.company_id, task_id)
    if not task:
        raise _not_found()

    if not current_user.is_admin and task.assigner_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to update this task priority",
        )

    await task_service.update_task(db, task, {"priority": priority_in.priority.value})
    return await _detail(db, task_id, current_user)
