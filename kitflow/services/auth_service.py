"""
Auth Service.

Passwordless sign-in: a six digit code is emailed to the user, only its hash
is stored, and a verified code is exchanged for a JWT access token. The
first account ever created becomes the admin; later accounts start as
members.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, List, Tuple

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from kitflow.config import settings
from kitflow.core.dates import as_utc
from kitflow.core.exceptions import Forbidden, NotFound, Unauthorized
from kitflow.core.security import (
    create_access_token,
    generate_sign_in_code,
    hash_sign_in_code,
    verify_sign_in_code,
)
from kitflow.models.user import User, UserRole, LoginCode
from kitflow.services.email_service import EmailService


logger = logging.getLogger(__name__)


class AuthService:
    """Sign-in codes, access tokens and user administration."""

    def __init__(self, db: AsyncSession, email_service: Optional[EmailService] = None):
        self.db = db
        self.email_service = email_service or EmailService()

    # =========================================================================
    # SIGN-IN
    # =========================================================================

    async def request_code(self, email: str) -> LoginCode:
        """Issue a new sign-in code for ``email`` and send it.

        Earlier unused codes for the address are discarded. Email failures
        propagate as EmailDeliveryError.
        """
        email = email.strip().lower()

        await self.db.execute(
            delete(LoginCode).where(
                LoginCode.email == email,
                LoginCode.is_used == False  # noqa: E712
            )
        )

        code = generate_sign_in_code()
        login_code = LoginCode(
            email=email,
            code_hash=hash_sign_in_code(code),
            expires_at=datetime.now(timezone.utc) + timedelta(minutes=settings.OTP_EXPIRY_MINUTES),
        )
        self.db.add(login_code)
        await self.db.commit()
        await self.db.refresh(login_code)

        await self.email_service.send_sign_in_code(email, code)
        logger.info(f"Sign-in code issued for {email}")
        return login_code

    async def verify_code(self, email: str, code: str) -> Tuple[str, User]:
        """
        Exchange a sign-in code for an access token.

        Returns:
            (access_token, user)
        """
        email = email.strip().lower()

        result = await self.db.execute(
            select(LoginCode)
            .where(LoginCode.email == email, LoginCode.is_used == False)  # noqa: E712
            .order_by(LoginCode.created_at.desc())
            .limit(1)
        )
        login_code = result.scalar_one_or_none()

        if not login_code or as_utc(login_code.expires_at) < datetime.now(timezone.utc):
            raise Unauthorized("Invalid or expired code")

        if login_code.attempts >= settings.OTP_MAX_ATTEMPTS:
            raise Unauthorized("Too many attempts. Request a new code.")

        if not verify_sign_in_code(code, login_code.code_hash):
            login_code.attempts += 1
            await self.db.commit()
            logger.warning(f"Wrong sign-in code for {email} (attempt {login_code.attempts})")
            raise Unauthorized("Invalid or expired code")

        login_code.is_used = True
        user = await self.get_user_by_email(email)
        if user is None:
            user = await self._create_user(email)
        elif not user.is_active:
            await self.db.commit()
            raise Forbidden("User account is deactivated")

        user.last_login_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(user)

        token = create_access_token(user.id, additional_claims={"role": user.role})
        logger.info(f"User signed in: {email}")
        return token, user

    async def _create_user(self, email: str) -> User:
        user_count = await self.db.scalar(select(func.count(User.id)))
        role = UserRole.ADMIN if not user_count else UserRole.MEMBER

        user = User(email=email, role=role.value)
        self.db.add(user)
        await self.db.flush()
        logger.info(f"User created: {email} as {role.value}")
        return user

    # =========================================================================
    # USERS
    # =========================================================================

    async def get_user(self, user_id: uuid.UUID) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def list_users(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.created_at))
        return list(result.scalars().all())

    async def update_role(self, actor: User, user_id: uuid.UUID, role: UserRole) -> User:
        """Change a user's role. Admins cannot demote themselves."""
        user = await self.get_user(user_id)
        if not user:
            raise NotFound("User not found")
        if user.id == actor.id and role != UserRole.ADMIN:
            raise Forbidden("You cannot remove your own admin role")

        user.role = role.value
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"User {user.email} role set to {role.value} by {actor.email}")
        return user

    async def delete_user(self, actor: User, user_id: uuid.UUID) -> None:
        user = await self.get_user(user_id)
        if not user:
            raise NotFound("User not found")
        if user.id == actor.id:
            raise Forbidden("You cannot delete your own account")

        await self.db.delete(user)
        await self.db.commit()
        logger.info(f"User {user.email} deleted by {actor.email}")
