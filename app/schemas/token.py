from typing import Optional
from pydantic import BaseModel, validator
from datetime import datetime, timezone

class TokenPayload(BaseModel):
    sub: Optional[int] = None
    company_id: Optional[int] = None
    role: Optional[str] = None
    exp: Optional[datetime] = None

    @validator("exp")
    def check_expiration(cls, v):
        if v is not None:
            now_utc = datetime.now(timezone.utc)
            if v.tzinfo is None:
                v = v.replace(tzinfo=timezone.utc)

            if v < now_utc:
                raise ValueError("Token has expired")
        return v
