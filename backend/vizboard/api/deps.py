"""
API dependencies for authentication and database access.
These functions are used with FastAPI's Depends() for dependency injection.
"""
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from vizboard.db.database import get_db
from vizboard.core.logger import logger
from vizboard.core.security import decode_access_token
from vizboard.models.user import User


# HTTP Bearer token scheme for Swagger docs
security = HTTPBearer()


async def _provision_user(db: AsyncSession, user_id: int, payload: dict) -> Optional[User]:
    """Mirror an identity-provider account the first time its token is seen."""
    email = payload.get("email")
    if not email:
        return None
    user = User(id=user_id, email=email, username=payload.get("username") or email)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"[AUTH] Provisioned user {user_id}")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Dependency to get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer credentials from Authorization header
        db: Database session

    Returns:
        User: The authenticated user object

    Raises:
        HTTPException: If token is invalid or user not found
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        logger.info("[AUTH] Token decode failed - invalid signature or expired")
        raise credentials_exception

    user_id_str = payload.get("sub")
    if user_id_str is None:
        raise credentials_exception

    try:
        user_id = int(user_id_str)
    except (ValueError, TypeError):
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        user = await _provision_user(db, user_id, payload)
    if user is None:
        raise credentials_exception

    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Dependency to ensure user is active.

    Raises:
        HTTPException: 403 if the account is disabled
    """
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )
    return current_user
