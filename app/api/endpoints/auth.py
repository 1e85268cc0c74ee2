from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user, get_current_active_admin
from app.core.exceptions import DatabaseException
from app.core.rate_limiter import limiter
from app.core.config import settings
from app.core.security import MAX_PASSWORD_BYTES, create_access_token, password_fits, verify_password
from app.database.session import get_db
from app.models.user import User
from app.schemas.auth import LoginRequest, LoginResponse, CompanyRegistered, UserRegistered, Message
from app.schemas.company import CompanyRegister
from app.schemas.user import UserCreate, UserWithCompany
from app.services import company as company_service
from app.services import user as user_service
from app.utils.logger import logger

router = APIRouter()


def _with_company(user: User) -> UserWithCompany:
    data = UserWithCompany.model_validate(user)
    data.company_name = user.company.name if user.company else None
    return data


def _password_too_long() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
    )


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    login_in: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Authenticate with email and password. With a company email the user is looked
    up inside that company, otherwise the first user with the email is used.
    """
    if not login_in.email or not login_in.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )

    user = None
    if login_in.company_email:
        company = await company_service.get_company_by_email(db, login_in.company_email)
        if company:
            user = await user_service.find_user_by_email(db, login_in.email, company_id=company.id)
    else:
        user = await user_service.find_user_by_email(db, login_in.email)

    if not user or not verify_password(login_in.password, user.password):
        client_ip = request.client.host if request.client else "unknown"
        logger.warning(f"❌ LOGIN FAILED - {login_in.email}, IP: {client_ip}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await user_service.get_user_with_company(db, user.id)
    access_token = create_access_token(user.id, user.company_id, user.role)
    logger.info(f"✅ LOGIN SUCCESS - User {user.email} (ID: {user.id}), company {user.company_id}")
    return {"access_token": access_token, "token_type": "bearer", "user": _with_company(user)}


@router.post("/register-company", response_model=CompanyRegistered, status_code=status.HTTP_201_CREATED)
async def register_company(
    company_in: CompanyRegister,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Register a new company together with its admin account
    """
    if not all([company_in.name, company_in.email, company_in.admin_name, company_in.admin_email, company_in.password]):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Company name, company email, admin name, admin email, and password are required",
        )

    if not password_fits(company_in.password):
        raise _password_too_long()

    if await company_service.get_company_by_email(db, company_in.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Company with this email already exists",
        )

    if await user_service.find_user_by_email(db, company_in.admin_email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admin email already exists in another company",
        )

    company, admin_user = await company_service.register_company(
        db,
        name=company_in.name,
        email=company_in.email,
        admin_name=company_in.admin_name,
        admin_email=company_in.admin_email,
        password=company_in.password,
    )
    return {"message": "Company registered successfully", "company": company, "admin_user": admin_user}


@router.post("/register", response_model=UserRegistered, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_admin),
) -> Any:
    """
    Create a user inside the admin's company (admin only)
    """
    if not user_in.name or not user_in.email or not user_in.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name, email, and password are required",
        )

    if not password_fits(user_in.password):
        raise _password_too_long()

    if await user_service.find_user_by_email(db, user_in.email, company_id=current_user.company_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists in this company",
        )

    user = await user_service.create_user(
        db,
        name=user_in.name,
        email=user_in.email,
        password=user_in.password,
        role=user_in.role.value,
        company_id=current_user.company_id,
    )
    return {"message": "User created successfully", "user": user}


@router.get("/me", response_model=UserWithCompany)
async def read_me(
    current_user: User = Depends(get_current_user),
) -> Any:
    return _with_company(current_user)


@router.delete("/company", response_model=Message)
async def delete_company(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_admin),
) -> Any:
    """
    Delete the admin's company with all of its users, tasks and comments (admin only)
    """
    try:
        await company_service.delete_company_cascade(db, current_user.company_id)
    except DatabaseException:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )
    return {"message": "Company and all associated data deleted successfully"}
