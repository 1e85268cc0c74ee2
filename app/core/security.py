from datetime import datetime, timedelta, timezone
import logging

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from app.core.config import settings
from app.core.exceptions import AuthenticationException
from app.schemas.token import TokenPayload

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt ignores everything past this many bytes
MAX_PASSWORD_BYTES = 72


def password_fits(password: str) -> bool:
    """True when bcrypt will hash the whole password"""
    return len(password.encode("utf-8")) <= MAX_PASSWORD_BYTES


def get_password_hash(password: str) -> str:
    if not password_fits(password):
        raise ValueError(f"Password longer than {MAX_PASSWORD_BYTES} bytes")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a login attempt; over-long passwords can never have been stored, so they never match"""
    if not password_fits(plain_password):
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError as e:
        logger.error(f"Unreadable password hash: {e}")
        return False


def create_access_token(
    user_id: int,
    company_id: int,
    role: str,
    expires_delta: timedelta = None,
) -> str:
    """
    Issue a bearer token for a user. The token names the user, their company
    and their role at the time of login.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = {
        "sub": str(user_id),
        "company_id": company_id,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> TokenPayload:
    """Verify signature and expiry and return the claims; raises AuthenticationException otherwise"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        token_data = TokenPayload(**payload)
    except (JWTError, ValidationError) as e:
        raise AuthenticationException(f"Invalid access token: {e}") from e

    if token_data.sub is None or token_data.company_id is None:
        raise AuthenticationException("Access token is missing its user or company")
    return token_data
