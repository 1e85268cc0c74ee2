from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AuthenticationException
from app.core.security import decode_access_token
from app.database.session import get_db
from app.models.user import User
from app.services import user as user_service
from app.services.ollama_service import OllamaClient
from app.utils.logger import logger

# OAuth2 bearer token for authentication
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login"
)


def _invalid_token() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid token.",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    db: AsyncSession = Depends(get_db), token: str = Depends(oauth2_scheme)
) -> User:
    """
    Resolve the authenticated user (with their company loaded) from the bearer token.
    The user must still belong to the company the token was issued for.
    """
    try:
        token_data = decode_access_token(token)
    except AuthenticationException as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise _invalid_token()

    user = await user_service.get_user_with_company(db, token_data.sub)
    if not user or user.company_id != token_data.company_id:
        raise _invalid_token()

    return user


async def get_current_active_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Get the current user, ensuring they are a company admin
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin privileges required.",
        )
    return current_user


def get_ollama_client() -> OllamaClient:
    return OllamaClient()
