# examplan/api/deps.py
import logging
from typing import AsyncGenerator, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AccessDeniedError
from ..core.security import decode_access_token
from ..database import get_db
from ..models.users import DomainUser, User

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")


async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get a database session."""
    async for session in get_db():
        yield session


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_current_user(
    token: str = Depends(oauth2_scheme), db: AsyncSession = Depends(db_session)
) -> User:
    """Resolve the user named by the bearer token's ``sub`` claim."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        user_id_str: Optional[str] = payload.get("sub")
        if user_id_str is None:
            raise credentials_exception
        user_id = UUID(user_id_str)
    except (JWTError, ValueError):
        raise credentials_exception

    user = await get_user_by_id(db, user_id=user_id)
    if user is None or not user.is_active:
        raise credentials_exception
    return user


async def current_user(user: User = Depends(get_current_user)) -> User:
    return user


async def require_admin(user: User = Depends(current_user)) -> User:
    """Administrators of an institution only."""
    if not (user.is_superuser or user.role == ADMIN_ROLE):
        logger.warning(f"User {user.id} denied access to an admin endpoint")
        raise AccessDeniedError(
            "Administrator role required", user_id=user.id, required_roles=[ADMIN_ROLE]
        )
    if user.institution_id is None:
        raise AccessDeniedError("User is not attached to an institution", user_id=user.id)
    return user


async def current_profile_id(
    user: User = Depends(current_user), db: AsyncSession = Depends(db_session)
) -> Optional[UUID]:
    """Id of the caller's domain profile, None when the account has none."""
    result = await db.execute(select(DomainUser.id).where(DomainUser.user_id == user.id))
    return result.scalar_one_or_none()
