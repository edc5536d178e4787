from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from errors import NotFound
from schemas import LoginRequest, RefreshRequest, RegisterRequest, UserOut, envelope
from security import CurrentUser, get_current_user
from services.auth import AuthService, get_auth_service
from services.users import UserService, get_user_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    req: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    result = auth.register(req)
    return envelope(
        {"user": UserOut.model_validate(result.user).dump(), "token": result.access_token},
        message="User registered successfully",
    )


@router.post("/login")
def login(
    req: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    result = auth.login(req.email, req.password)
    return envelope(
        {
            "user": UserOut.model_validate(result.user).dump(),
            "token": result.access_token,
            "refreshToken": result.refresh_token,
        },
        message="Login successful",
    )


@router.post("/refresh")
def refresh(
    req: RefreshRequest,
    auth: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    return envelope({"token": auth.refresh(req.refresh_token)})


@router.post("/logout")
def logout(
    current: CurrentUser = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Drops the stored refresh token; access tokens simply expire."""
    auth.logout(current.user_id)
    return envelope(message="Successfully logged out")


@router.get("/me")
def me(
    current: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    user = users.get_user_by_id(current.user_id)
    if user is None:
        raise NotFound("User not found")
    return envelope(UserOut.model_validate(user).dump())
