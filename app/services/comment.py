from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select, delete

from app.models.comment import Comment


async def get_task_comments(db: AsyncSession, task_id: int, company_id: int) -> List[Comment]:
    result = await db.execute(
        select(Comment)
        .options(selectinload(Comment.author))
        .filter(Comment.task_id == task_id, Comment.company_id == company_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    return result.scalars().all()


async def get_company_comment(db: AsyncSession, comment_id: int, company_id: int) -> Optional[Comment]:
    result = await db.execute(
        select(Comment)
        .options(selectinload(Comment.author))
        .filter(Comment.id == comment_id, Comment.company_id == company_id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def create_comment(db: AsyncSession, *, content: str, task_id: int, author_id: int, company_id: int) -> Comment:
    comment = Comment(content=content, task_id=task_id, author_id=author_id, company_id=company_id)
    db.add(comment)
    await db.commit()
    return await get_company_comment(db, comment.id, company_id)


async def update_comment(db: AsyncSession, comment: Comment, content: str) -> Comment:
    comment.content = content
    db.add(comment)
    await db.commit()
    return await get_company_comment(db, comment.id, comment.company_id)


async def delete_comment(db: AsyncSession, comment: Comment) -> None:
    await db.execute(delete(Comment).where(Comment.id == comment.id))
    await db.commit()
