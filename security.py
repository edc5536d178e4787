"""
Password hashing, JWT handling and the auth dependencies used by routers.

Passwords are hashed with bcrypt. Tokens are HS256 JWTs signed with
``settings.jwt_secret`` and carry ``userId``, ``email``, ``role`` and a
``type`` claim (``access`` or ``refresh``) so one kind can never be used
in place of the other.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from config import Settings, get_settings
from errors import Forbidden, Unauthenticated

ACCESS = "access"
REFRESH = "refresh"

# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72


class CurrentUser(BaseModel):
    user_id: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


# ---------- passwords ----------


def _pw_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int) -> str:
    return bcrypt.hashpw(_pw_bytes(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(_pw_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


# ---------- tokens ----------


def _create_token(
    claims: Dict[str, Any], token_type: str, lifetime: timedelta, settings: Settings
) -> str:
    now = datetime.now(timezone.utc)
    to_encode = dict(claims)
    to_encode.update({"type": token_type, "iat": now, "exp": now + lifetime})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def token_claims(user_id: str, email: str, role: str) -> Dict[str, Any]:
    return {"userId": user_id, "email": email, "role": role}


def create_access_token(claims: Dict[str, Any], settings: Settings) -> str:
    return _create_token(
        claims, ACCESS, timedelta(minutes=settings.access_token_expire_minutes), settings
    )


def create_refresh_token(claims: Dict[str, Any], settings: Settings) -> str:
    return _create_token(
        claims, REFRESH, timedelta(days=settings.refresh_token_expire_days), settings
    )


def decode_token(token: str, expected_type: str, settings: Settings) -> Optional[CurrentUser]:
    """Return the token's subject, or None if the token is invalid, expired or of another type."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if payload.get("type") != expected_type:
        return None
    try:
        return CurrentUser(
            user_id=payload["userId"], email=payload["email"], role=payload["role"]
        )
    except (KeyError, ValueError):
        return None


# ---------- dependencies ----------

bearer = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    if credentials is None:
        raise Unauthenticated("Not authenticated")
    user = decode_token(credentials.credentials, ACCESS, settings)
    if user is None:
        raise Unauthenticated("Invalid or expired token")
    return user


def require_role(*roles: str) -> Callable[..., CurrentUser]:
    """Dependency factory: ``Depends(require_role("admin"))``."""

    def _role_dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            raise Forbidden("Insufficient permissions")
        return current_user

    return _role_dependency


require_admin = require_role("admin")
