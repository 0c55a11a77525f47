"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt (passlib)
- JWT token creation/verification (python-jose)
- FastAPI dependencies for protected routes and role gates

Tokens are stateless: {"sub": "<user id>"} signed with the configured
secret. No exp claim is added unless jwt_expire_minutes is set, so by
default a token stays valid until the secret rotates.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import structlog
from bson import ObjectId
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pymongo.database import Database
from starlette.concurrency import run_in_threadpool

from careerconnect.core.config import Settings
from careerconnect.core.errors import (
    ForbiddenError,
    InvalidTokenError,
    MissingTokenError,
    TokenUserNotFoundError,
)
from careerconnect.db.mongodb import COLLECTIONS, get_db

logger = structlog.get_logger()

# Bearer token extractor; a missing header is reported by get_current_user
bearer_scheme = HTTPBearer(auto_error=False)

# Fields an authenticated request may see; never the password hash
IDENTITY_PROJECTION = {"email": 1, "first_name": 1, "last_name": 1, "role": 1}


@dataclass
class Identity:
    """The minimal authenticated user attached to a request."""

    id: str
    email: str
    first_name: str
    last_name: str
    role: str

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# ============================================================
# PASSWORDS
# ============================================================

def create_password_context(rounds: int = 12) -> CryptContext:
    """bcrypt context; hashes made with fewer rounds are flagged by needs_update()."""
    return CryptContext(
        schemes=["bcrypt"],
        deprecated="auto",
        bcrypt__rounds=rounds,
        bcrypt__min_rounds=rounds,
    )


def hash_password(context: CryptContext, password: str) -> str:
    """Hash password with a fresh random salt."""
    return context.hash(password)


def verify_password(context: CryptContext, plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return context.verify(plain_password, hashed_password)


def dummy_verify(context: CryptContext) -> None:
    """Spend one hash verification so unknown emails cost the same as wrong passwords."""
    context.dummy_verify()


# ============================================================
# TOKENS
# ============================================================

def create_access_token(user_id: str, settings: Settings) -> str:
    """Create JWT access token."""
    to_encode = {"sub": str(user_id)}
    if settings.jwt_expire_minutes:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
        to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> dict:
    """Decode and verify JWT token. Raises InvalidTokenError."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise InvalidTokenError()

    if not payload.get("sub"):
        raise InvalidTokenError()
    return payload


# ============================================================
# DEPENDENCIES
# ============================================================

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_password_context(request: Request) -> CryptContext:
    return request.app.state.pwd_context


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Identity:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        def route(user: Identity = Depends(get_current_user)):
            return user

    Async, so the user_id it binds reaches the route's log context;
    the pymongo lookup runs in the threadpool.
    """
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()

    payload = decode_token(credentials.credentials, settings)

    user_id = payload["sub"]
    if not ObjectId.is_valid(user_id):
        raise InvalidTokenError()

    # Verify user still exists
    doc = await run_in_threadpool(
        db[COLLECTIONS["users"]].find_one, {"_id": ObjectId(user_id)}, IDENTITY_PROJECTION
    )
    if not doc:
        logger.info("auth.token_user_missing", user_id=user_id)
        raise TokenUserNotFoundError()

    identity = Identity(
        id=str(doc["_id"]),
        email=doc["email"],
        first_name=doc["first_name"],
        last_name=doc["last_name"],
        role=doc["role"],
    )
    structlog.contextvars.bind_contextvars(user_id=identity.id)
    return identity


def require_roles(*roles: str) -> Callable[..., Identity]:
    """
    Dependency factory - Require the caller's role to be one of `roles`.

    Usage:
        @router.get("", dependencies=[Depends(require_roles("admin"))])
    """
    allowed = {getattr(role, "value", role) for role in roles}

    def role_gate(user: Identity = Depends(get_current_user)) -> Identity:
        if user.role not in allowed:
            logger.info("auth.role_denied", role=user.role, allowed=sorted(allowed))
            raise ForbiddenError()
        return user

    return role_gate
