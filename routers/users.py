from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from errors import Forbidden, NotFound
from schemas import UserCreate, UserOut, UserUpdate, envelope
from security import CurrentUser, get_current_user, require_admin
from services.users import UserService, get_user_service

router = APIRouter(prefix="/api/users", tags=["users"])

USER_NOT_FOUND = "User not found"


def _ensure_self_or_admin(current: CurrentUser, user_id: str) -> None:
    if not current.is_admin and current.user_id != user_id:
        raise Forbidden("Insufficient permissions")


@router.get("")
def list_users(
    _: CurrentUser = Depends(require_admin),
    users: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    items = [UserOut.model_validate(u).dump() for u in users.get_all_users()]
    return envelope(items, message=f"Retrieved {len(items)} users")


@router.post("/add-user", status_code=status.HTTP_201_CREATED)
def add_user(
    req: UserCreate,
    _: CurrentUser = Depends(require_admin),
    users: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    user = users.create_user(req)
    return envelope(UserOut.model_validate(user).dump(), message="User created successfully")


@router.get("/{user_id}")
def get_user(
    user_id: str,
    current: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    _ensure_self_or_admin(current, user_id)
    user = users.get_user_by_id(user_id)
    if user is None:
        raise NotFound(USER_NOT_FOUND)
    return envelope(UserOut.model_validate(user).dump(), message="User retrieved successfully")


@router.put("/{user_id}")
def update_user(
    user_id: str,
    req: UserUpdate,
    current: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    _ensure_self_or_admin(current, user_id)
    # only admins may change privileges
    if not current.is_admin and req.model_fields_set & {"role", "is_active"}:
        raise Forbidden("Only admins can change role or active status")

    user = users.update_user(user_id, req)
    if user is None:
        raise NotFound(USER_NOT_FOUND)
    return envelope(UserOut.model_validate(user).dump(), message="User updated successfully")


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    _: CurrentUser = Depends(require_admin),
    users: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    if users.delete_user(user_id) is None:
        raise NotFound(USER_NOT_FOUND)
    return envelope(message="User deleted successfully")
