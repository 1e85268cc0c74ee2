from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select, delete, func, or_

from app.core.security import get_password_hash
from app.models.task import Task
from app.models.user import User


async def get_user_with_company(db: AsyncSession, user_id: int) -> Optional[User]:
    result = await db.execute(
        select(User)
        .options(selectinload(User.company))
        .filter(User.id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def get_company_user(db: AsyncSession, company_id: int, user_id: int) -> Optional[User]:
    result = await db.execute(
        select(User).filter(User.id == user_id, User.company_id == company_id)
    )
    return result.scalars().first()


async def get_company_users(db: AsyncSession, company_id: int) -> List[User]:
    result = await db.execute(
        select(User).filter(User.company_id == company_id).order_by(User.created_at.desc(), User.id.desc())
    )
    return result.scalars().all()


async def get_company_employees(db: AsyncSession, company_id: int) -> List[User]:
    result = await db.execute(
        select(User).filter(User.company_id == company_id, User.role == "EMPLOYEE").order_by(User.name)
    )
    return result.scalars().all()


async def find_user_by_name(db: AsyncSession, company_id: int, name: str) -> Optional[User]:
    """Case-insensitive exact name match within a company"""
    result = await db.execute(
        select(User)
        .filter(User.company_id == company_id, func.lower(User.name) == func.lower(name.strip()))
        .order_by(User.id)
        .limit(1)
    )
    return result.scalars().first()


async def find_user_by_email(db: AsyncSession, email: str, company_id: Optional[int] = None) -> Optional[User]:
    stmt = select(User).filter(User.email == email)
    if company_id is not None:
        stmt = stmt.filter(User.company_id == company_id)
    result = await db.execute(stmt.order_by(User.id).limit(1))
    return result.scalars().first()


async def create_user(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    password: str,
    company_id: int,
    role: str = "EMPLOYEE",
) -> User:
    user = User(
        name=name,
        email=email,
        password=get_password_hash(password),
        role=role,
        company_id=company_id,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def has_tasks(db: AsyncSession, user_id: int) -> bool:
    """True while the user is assigner or assignee of any task"""
    result = await db.execute(
        select(func.count(Task.id)).filter(
            or_(Task.assignee_id == user_id, Task.assigner_id == user_id)
        )
    )
    return result.scalar_one() > 0


async def delete_user(db: AsyncSession, user: User) -> None:
    await db.execute(delete(User).where(User.id == user.id))
    await db.commit()
