from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    InactiveUserException,
    InsufficientPermissionsException,
)
from repositories.database import get_db
from services.user_service import UserService

# auto_error=False so a missing header surfaces as AuthenticationException
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Mint a session token signed with the configured key.

    Production sessions are issued by the identity provider; this is used by
    local development tooling and tests. Only valid for symmetric algorithms.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    if settings.AUTH_JWT_ISSUER:
        to_encode.setdefault("iss", settings.AUTH_JWT_ISSUER)
    return jwt.encode(
        to_encode, settings.AUTH_JWT_KEY, algorithm=settings.AUTH_JWT_ALGORITHM
    )


def decode_session_token(token: str) -> dict[str, Any]:
    """
    Verify a session JWT and return its claims.

    Raises:
        AuthenticationException: Expired, malformed or wrongly signed token.
    """
    options: dict[str, Any] = {"require": ["exp", "sub"]}
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_KEY,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            issuer=settings.AUTH_JWT_ISSUER,
            options=options,
        )
    except jwt.exceptions.ExpiredSignatureError:
        raise AuthenticationException("Session expired. Please sign in again.")
    except jwt.exceptions.InvalidTokenError:
        raise AuthenticationException("Could not validate credentials")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> db_models.User:
    """
    Resolve the signed-in user from the session token.

    First-time users are provisioned, and the super-admin role is resolved
    here once per request.

    Raises:
        AuthenticationException: Missing or invalid session.
        InactiveUserException: Account deactivated.
    """
    if credentials is None:
        raise AuthenticationException("Not authenticated")

    claims = decode_session_token(credentials.credentials)
    user = UserService.resolve_session_user(db, claims)
    if not bool(user.is_active):
        raise InactiveUserException("Account has been deactivated")
    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[db_models.User]:
    """
    Get current user if authenticated, otherwise return None.

    An expired token still raises so the client knows to re-authenticate;
    a malformed one is treated as anonymous.
    """
    if credentials is None:
        return None
    try:
        claims = decode_session_token(credentials.credentials)
    except AuthenticationException as e:
        if "expired" in e.message:
            raise
        return None

    user = UserService.resolve_session_user(db, claims)
    if not bool(user.is_active):
        return None
    return user


async def get_admin_user(
    current_user: db_models.User = Depends(get_current_user),
) -> db_models.User:
    """
    Require the admin or super-admin role.

    Raises:
        InsufficientPermissionsException: If user is not an admin.
    """
    if not current_user.is_admin:
        raise InsufficientPermissionsException("Admin permissions required")
    return current_user


async def get_super_admin_user(
    current_user: db_models.User = Depends(get_current_user),
) -> db_models.User:
    """
    Require the super-admin role.

    Raises:
        InsufficientPermissionsException: If user is not the super admin.
    """
    if not current_user.is_super_admin:
        raise InsufficientPermissionsException("Super admin permissions required")
    return current_user
