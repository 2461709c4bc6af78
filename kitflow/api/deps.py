from typing import Annotated, Optional
import uuid
import logging

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from kitflow.database import get_db
from kitflow.core.exceptions import Forbidden, Unauthorized
from kitflow.core.permissions import PermissionChecker
from kitflow.core.security import verify_access_token
from kitflow.core.storage import StorageClient
from kitflow.models.user import User
from kitflow.services.auth_service import AuthService
from kitflow.services.email_service import EmailService


logger = logging.getLogger(__name__)

# HTTP Bearer security scheme; a missing header is reported as Unauthorized
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Dependency to get the current authenticated user.
    Validates the JWT token and returns the user object.
    """
    if credentials is None:
        raise Unauthorized("Not authenticated")

    user_id = verify_access_token(credentials.credentials)
    if user_id is None:
        logger.warning("Token verification failed - invalid or expired token")
        raise Unauthorized("Could not validate credentials")

    try:
        user_uuid = uuid.UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid user_id in token: {user_id}")
        raise Unauthorized("Could not validate credentials")

    user = await AuthService(db).get_user(user_uuid)
    if user is None:
        logger.warning(f"User {user_id} not found")
        raise Unauthorized("Could not validate credentials")

    if not user.is_active:
        raise Forbidden("User account is deactivated")

    return user


async def require_admin(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency for admin-only operations."""
    PermissionChecker(user).require_admin()
    return user


def get_email_service() -> EmailService:
    return EmailService()


def get_storage():
    return StorageClient


# Type aliases for cleaner dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
DB = Annotated[AsyncSession, Depends(get_db)]
