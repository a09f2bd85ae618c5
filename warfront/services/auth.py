"""
Accounts, sessions and email verification.

Passwords are hashed with werkzeug. Sessions are opaque bearer tokens that
expire after `settings.session_ttl_days`; an unknown or expired token
resolves to no user.
"""

import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from warfront.config import settings
from warfront.db.accounts import (
    create_email_verification_token,
    create_session,
    create_user,
    delete_session,
    get_email_verification_token,
    get_session_by_token_hash,
    get_user,
    get_user_by_email,
    get_user_by_name,
)
from warfront.models.db import UserDB, utcnow
from warfront.models.failure import AuthError, ConflictError, ValidationError
from warfront.models.verification import TokenValidation
from warfront.services.email import Outbox, verification_email
from warfront.services.tokens import generate_token, hash_token

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
MAX_NAME_LENGTH = 32

NOT_AUTHENTICATED = "User not authenticated"


def hash_password(raw_password: str) -> str:
    return generate_password_hash(raw_password)


def check_password(user: UserDB, raw_password: str) -> bool:
    if not raw_password or not user.password_hash:
        return False
    return check_password_hash(user.password_hash, raw_password)


def _validate_signup(name: str, email: str, password: str) -> None:
    if not name or not name.strip():
        raise ValidationError("Name is required")
    if len(name.strip()) > MAX_NAME_LENGTH:
        raise ValidationError(f"Name must be at most {MAX_NAME_LENGTH} characters")
    if not email or "@" not in email:
        raise ValidationError("A valid email address is required")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


async def signup(
    session: AsyncSession,
    name: str,
    email: str,
    password: str,
    outbox: Outbox | None = None,
) -> tuple[UserDB, str]:
    """
    Register an account and log it in.

    A verification token is always issued; the email carrying it is queued
    on `outbox` when one is given.

    Returns:
        Tuple of (user, session token)

    Raises:
        ValidationError: Missing or malformed fields
        ConflictError: Email or name already taken (case-insensitive)
    """
    _validate_signup(name, email, password)

    if await get_user_by_email(session, email):
        raise ConflictError("User with this email already exists")
    if await get_user_by_name(session, name):
        raise ConflictError("This username is already taken")

    user = await create_user(session, name, email, hash_password(password))
    token = await start_session(session, user)

    verification_token = await issue_email_verification(session, user)
    if outbox is not None:
        outbox.add(verification_email(user.email, verification_token))

    logger.info("Registered user %s", user.id)
    return user, token


async def login(session: AsyncSession, email: str, password: str) -> str:
    """
    Exchange credentials for a session token.

    Raises:
        AuthError: Unknown email or wrong password
    """
    user = await get_user_by_email(session, email)
    if user is None or not check_password(user, password):
        raise AuthError("Invalid email or password")
    return await start_session(session, user)


async def start_session(session: AsyncSession, user: UserDB) -> str:
    """Create a session for `user` and return its plaintext token."""
    token = generate_token()
    expires_at = utcnow() + timedelta(days=settings.session_ttl_days)
    await create_session(session, user.id, hash_token(token), expires_at)
    return token


async def logout(session: AsyncSession, token: str) -> bool:
    """End a session. Returns True if it existed."""
    return await delete_session(session, hash_token(token))


async def resolve_session(session: AsyncSession, token: str | None) -> UserDB | None:
    """Return the user behind a live session token, or None."""
    if not token:
        return None
    record = await get_session_by_token_hash(session, hash_token(token))
    if record is None or record.expires_at < utcnow():
        return None
    return await get_user(session, record.user_id)


async def require_user(session: AsyncSession, token: str | None) -> UserDB:
    """
    Resolve a session token or fail.

    Raises:
        AuthError: No live session for the token
    """
    user = await resolve_session(session, token)
    if user is None:
        raise AuthError(NOT_AUTHENTICATED)
    return user


# --- Email verification ---


async def issue_email_verification(session: AsyncSession, user: UserDB) -> str:
    token = generate_token()
    expires_at = utcnow() + timedelta(hours=settings.email_verification_ttl_hours)
    await create_email_verification_token(session, user.id, hash_token(token), expires_at)
    return token


async def verify_email(session: AsyncSession, token: str) -> TokenValidation:
    """
    Confirm an account's email address.

    The token is deleted on success, so a link works once.
    """
    record = await get_email_verification_token(session, hash_token(token))
    if record is None:
        return TokenValidation.rejected("not found")
    if record.expires_at < utcnow():
        return TokenValidation.rejected("expired")

    user = await get_user(session, record.user_id)
    if user is None:
        return TokenValidation.rejected("not found")

    user.email_verified = True
    await session.delete(record)
    await session.flush()
    logger.info("Verified email for user %s", user.id)
    return TokenValidation.ok()
