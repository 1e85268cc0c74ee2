from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user, get_current_active_admin
from app.core.security import MAX_PASSWORD_BYTES, password_fits
from app.database.session import get_db
from app.models.user import User
from app.schemas.auth import Message
from app.schemas.user import User as UserSchema, UserContact, EmployeeCreate
from app.services import user as user_service
from app.utils.logger import logger

router = APIRouter()


@router.get("/employees", response_model=List[UserContact])
async def read_employees_for_assignment(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Employees of the current company, for task assignment (any authenticated user)
    """
    return await user_service.get_company_employees(db, current_user.company_id)


@router.get("/", response_model=List[UserSchema])
async def read_users(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_admin),
) -> Any:
    """
    Retrieve all users of the current company (admin only)
    """
    return await user_service.get_company_users(db, current_user.company_id)


@router.get("/{user_id}", response_model=UserSchema)
async def read_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_admin),
) -> Any:
    user = await user_service.get_company_user(db, current_user.company_id, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


@router.post("/", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
async def create_employee(
    employee_in: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_admin),
) -> Any:
    """
    Create a new employee in the current company (admin only)
    """
    if not employee_in.name or not employee_in.email or not employee_in.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name, email, and password are required",
        )

    if not password_fits(employee_in.password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
        )

    if await user_service.find_user_by_email(db, employee_in.email, company_id=current_user.company_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already exists in this company",
        )

    employee = await user_service.create_user(
        db,
        name=employee_in.name,
        email=employee_in.email,
        password=employee_in.password,
        role="EMPLOYEE",
        company_id=current_user.company_id,
    )
    logger.info(f"Employee {employee.email} (ID: {employee.id}) created in company {current_user.company_id}")
    return employee


@router.delete("/{user_id}", response_model=Message)
async def delete_employee(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_admin),
) -> Any:
    """
    Delete an employee that no longer assigns or holds any task (admin only)
    """
    employee = await user_service.get_company_user(db, current_user.company_id, user_id)
    if not employee or employee.role != "EMPLOYEE":
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found",
        )

    if await user_service.has_tasks(db, employee.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete employee with assigned tasks. Please reassign or complete all tasks first.",
        )

    await user_service.delete_user(db, employee)
    logger.info(f"Employee ID {user_id} deleted from company {current_user.company_id}")
    return {"message": "Employee deleted successfully"}
