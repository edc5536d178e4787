"""
Registration, login and token refresh on top of ``UserService``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends

from config import Settings, get_settings
from errors import Forbidden, InvalidCredentials, Unauthenticated
from models import User
from schemas import RegisterRequest, UserCreate
from security import (
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    token_claims,
    verify_password,
)
from services.users import UserService, get_user_service

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    user: User
    access_token: str
    refresh_token: Optional[str] = None


class AuthService:
    def __init__(self, users: UserService, settings: Settings) -> None:
        self.users = users
        self.settings = settings

    def _claims(self, user: User):
        return token_claims(user.id, user.email, user.role)

    def register(self, data: RegisterRequest) -> AuthResult:
        # self-registration always yields a regular, active account
        user = self.users.create_user(UserCreate(**data.model_dump()))
        token = create_access_token(self._claims(user), self.settings)
        return AuthResult(user=user, access_token=token)

    def login(self, email: str, password: str) -> AuthResult:
        user = self.users.get_user_by_email(email)
        if user is None or not verify_password(password, user.password):
            logger.info("Failed login attempt")
            raise InvalidCredentials()
        if not user.is_active:
            raise Forbidden("Account disabled")

        claims = self._claims(user)
        access = create_access_token(claims, self.settings)
        refresh = create_refresh_token(claims, self.settings)
        self.users.set_refresh_token(user, refresh)
        logger.info("User logged in id=%s", user.id)
        return AuthResult(user=user, access_token=access, refresh_token=refresh)

    def refresh(self, refresh_token: str) -> str:
        subject = decode_token(refresh_token, REFRESH, self.settings)
        if subject is None:
            raise Unauthenticated("Invalid or expired refresh token")

        user = self.users.get_user_by_id(subject.user_id)
        if user is None or user.refresh_token != refresh_token:
            raise Unauthenticated("Invalid or expired refresh token")
        if not user.is_active:
            raise Forbidden("Account disabled")

        # role/email are re-read so a changed role takes effect on refresh
        return create_access_token(self._claims(user), self.settings)

    def logout(self, user_id: str) -> None:
        user = self.users.get_user_by_id(user_id)
        if user is not None and user.refresh_token is not None:
            self.users.set_refresh_token(user, None)


def get_auth_service(
    users: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(users, settings)
