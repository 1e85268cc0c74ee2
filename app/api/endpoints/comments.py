from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user, get_current_active_admin
from app.database.session import get_db
from app.models.user import User
from app.schemas.auth import Message
from app.schemas.comment import Comment as CommentSchema, CommentCreate, CommentUpdate
from app.services import comment as comment_service
from app.services import task_service

router = APIRouter()


def _task_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")


def _comment_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")


@router.get("/tasks/{task_id}/comments", response_model=List[CommentSchema])
async def read_comments(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Comments of a task visible to the current user, newest first
    """
    task = await task_service.get_visible_task(db, current_user, task_id)
    if not task:
        raise _task_not_found()
    return await comment_service.get_task_comments(db, task_id, current_user.company_id)


@router.post("/tasks/{task_id}/comments", response_model=CommentSchema, status_code=status.HTTP_201_CREATED)
async def create_comment(
    task_id: int,
    comment_in: CommentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    if not comment_in.content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Comment content is required")

    task = await task_service.get_visible_task(db, current_user, task_id)
    if not task:
        raise _task_not_found()

    return await comment_service.create_comment(
        db,
        content=comment_in.content,
        task_id=task_id,
        author_id=current_user.id,
        company_id=current_user.company_id,
    )


@router.put("/comments/{comment_id}", response_model=CommentSchema)
async def update_comment(
    comment_id: int,
    comment_in: CommentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_admin),
) -> Any:
    """
    Edit any comment of the company (admin only)
    """
    if not comment_in.content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Comment content is required")

    comment = await comment_service.get_company_comment(db, comment_id, current_user.company_id)
    if not comment:
        raise _comment_not_found()
    return await comment_service.update_comment(db, comment, comment_in.content)


@router.delete("/comments/{comment_id}", response_model=Message)
async def delete_comment(
    comment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_admin),
) -> Any:
    """
    Delete any comment of the company (admin only)
    """
    comment = await comment_service.get_company_comment(db, comment_id, current_user.company_id)
    if not comment:
        raise _comment_not_found()
    await comment_service.delete_comment(db, comment)
    return {"message": "Comment deleted successfully"}
