from typing import Annotated
import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import decode_token
from app.models.user import User

security = HTTPBearer()

ROLE_STAFF = "staff"
ROLE_SUPERVISOR = "supervisor"
ROLE_MANAGER = "manager"


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """User behind a valid access token. Refresh tokens are refused."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(credentials.credentials)
        if payload.get("type") != "access":
            raise credentials_exception
        user_id = uuid.UUID(payload["sub"])
    except (ValueError, KeyError):
        raise credentials_exception

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise credentials_exception
    return user


def require_roles(*roles: str, label: str):
    async def _check(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions – {label} required",
            )
        return current_user

    return _check


CurrentUser = Annotated[User, Depends(get_current_user)]
SupervisorOrManager = Annotated[
    User, Depends(require_roles(ROLE_SUPERVISOR, ROLE_MANAGER, label="supervisor or manager"))
]
ManagerUser = Annotated[User, Depends(require_roles(ROLE_MANAGER, label="manager"))]
DB = Annotated[AsyncSession, Depends(get_db)]
