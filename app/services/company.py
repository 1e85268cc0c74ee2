from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select, update, delete

from app.core.exceptions import DatabaseException
from app.core.security import get_password_hash
from app.models.comment import Comment
from app.models.company import Company
from app.models.task import Task
from app.models.user import User
from app.utils.logger import logger, log_important


async def get_company_by_email(db: AsyncSession, email: str) -> Company:
    result = await db.execute(select(Company).filter(Company.email == email))
    return result.scalars().first()


async def register_company(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    admin_name: str,
    admin_email: str,
    password: str,
) -> Tuple[Company, User]:
    """Create a company on the free plan together with its first ADMIN user"""
    hashed_password = get_password_hash(password)

    company = Company(
        name=name,
        email=email,
        password_hash=hashed_password,
        subscription_plan="free",
    )
    db.add(company)
    await db.flush()

    admin_user = User(
        name=admin_name,
        email=admin_email,
        password=hashed_password,
        role="ADMIN",
        company_id=company.id,
    )
    db.add(admin_user)
    await db.commit()
    await db.refresh(company)
    await db.refresh(admin_user)
    log_important(f"Company '{company.name}' (ID: {company.id}) registered with admin {admin_user.email}")
    return company, admin_user


async def delete_company_cascade(db: AsyncSession, company_id: int) -> None:
    """
    Remove a company with all of its comments, tasks and users.

    Every statement runs in the session's single transaction; any failure rolls
    the whole cascade back so a company is never left half deleted.
    """
    try:
        await db.execute(delete(Comment).where(Comment.company_id == company_id))
        await db.execute(
            update(Task).where(Task.company_id == company_id).values(parent_task_id=None)
        )
        await db.execute(delete(Task).where(Task.company_id == company_id))
        await db.execute(delete(User).where(User.company_id == company_id))
        await db.execute(delete(Company).where(Company.id == company_id))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"❌ Failed to delete company {company_id}: {e}", exc_info=True)
        raise DatabaseException(f"Failed to delete company {company_id}") from e

    log_important(f"Company ID {company_id} and all associated data deleted")
