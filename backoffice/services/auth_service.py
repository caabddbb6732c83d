# backoffice/services/auth_service.py
"""
Login identities, role grants and bearer sessions.

Tokens are random url-safe strings handed to the client once. The database
only keeps an HMAC-SHA256 of each token keyed by SECRET_KEY, so a leaked
sessions table cannot be replayed.
"""

import hashlib
import hmac
import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import bcrypt
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import get_settings
from backoffice.core.enums import AdminStatus
from backoffice.core.exceptions import DatabaseError, NotAuthenticatedError, ValidationError
from backoffice.models.admin import Admin
from backoffice.models.auth import AuthSession, AuthUser, UserRole

logger = logging.getLogger(__name__)

# bcrypt ignores (newer releases reject) anything past 72 bytes
BCRYPT_MAX_BYTES = 72


@dataclass(frozen=True)
class CurrentUser:
    """The caller of a request, with its admin record when one exists."""
    user_id: uuid.UUID
    email: str
    is_admin: bool
    admin_id: Optional[uuid.UUID] = None
    admin_code: Optional[str] = None
    admin_status: Optional[AdminStatus] = None

    @property
    def is_frozen(self) -> bool:
        return self.admin_status == AdminStatus.FROZEN


def hash_password(password: str) -> str:
    encoded = password.encode('utf-8')
    if len(encoded) > BCRYPT_MAX_BYTES:
        raise ValidationError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=get_settings().BCRYPT_ROUNDS)).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    encoded = password.encode('utf-8')
    if len(encoded) > BCRYPT_MAX_BYTES or not password_hash:
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode('utf-8'))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def hash_token(token: str) -> str:
    key = get_settings().SECRET_KEY.encode('utf-8')
    return hmac.new(key, token.encode('utf-8'), hashlib.sha256).hexdigest()


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()

    async def get_user_by_email(self, email: str) -> Optional[AuthUser]:
        result = await self.db.execute(select(AuthUser).where(AuthUser.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def login(self, email: str, password: str) -> Tuple[str, AuthSession]:
        """
        Check credentials and open a new session.

        Returns:
            (token, session). The token is only available here.

        Raises:
            NotAuthenticatedError: Unknown email or wrong password
        """
        user = await self.get_user_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info(f"Failed login for {email}")
            raise NotAuthenticatedError("Invalid email or password")

        token = secrets.token_urlsafe(32)
        session = AuthSession(
            user_id=user.id,
            token_hash=hash_token(token),
            expires_at=datetime.now(timezone.utc) + timedelta(hours=self.settings.SESSION_TTL_HOURS),
        )
        try:
            self.db.add(session)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to open session for {user.email}: {e}", exc_info=True)
            raise DatabaseError("Failed to open session") from e

        logger.info(f"Session opened for {user.email}")
        return token, session

    async def get_session_user(self, token: Optional[str]) -> Optional[AuthUser]:
        """The identity behind a live token, or None when unknown, expired or revoked."""
        if not token:
            return None
        now = datetime.now(timezone.utc)
        result = await self.db.execute(
            select(AuthUser)
            .join(AuthSession, AuthSession.user_id == AuthUser.id)
            .where(
                AuthSession.token_hash == hash_token(token),
                AuthSession.revoked_at.is_(None),
                AuthSession.expires_at > now,
            )
        )
        return result.scalar_one_or_none()

    async def has_role(self, user_id: uuid.UUID, role: str) -> bool:
        result = await self.db.execute(
            select(UserRole.id).where(UserRole.user_id == user_id, UserRole.role == role)
        )
        return result.first() is not None

    async def resolve_current_user(self, user: AuthUser) -> CurrentUser:
        is_admin = await self.has_role(user.id, self.settings.ADMIN_ROLE)
        result = await self.db.execute(select(Admin).where(Admin.email == user.email.lower()))
        admin = result.scalar_one_or_none()
        return CurrentUser(
            user_id=user.id,
            email=user.email,
            is_admin=is_admin,
            admin_id=admin.id if admin else None,
            admin_code=admin.admin_code if admin else None,
            admin_status=admin.status if admin else None,
        )

    async def logout(self, token: Optional[str]) -> bool:
        """Revoke a session. Returns False if the token was not a live session."""
        if not token:
            return False
        try:
            result = await self.db.execute(
                update(AuthSession)
                .where(AuthSession.token_hash == hash_token(token), AuthSession.revoked_at.is_(None))
                .values(revoked_at=datetime.now(timezone.utc))
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to revoke session: {e}", exc_info=True)
            raise DatabaseError("Failed to end session") from e
        return result.rowcount == 1
