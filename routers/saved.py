from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from errors import NotFound
from models import SavedEvent
from schemas import SavedEventOut, SaveEventRequest, envelope
from security import CurrentUser, get_current_user
from services.users import UserService, get_user_service

# mounted before the users router so "saved-events" never matches /{user_id}
router = APIRouter(prefix="/api/users/saved-events", tags=["saved"])

USER_NOT_FOUND = "User not found"


def _saved_payload(events: List[SavedEvent]) -> Dict[str, Any]:
    return {"savedEvents": [SavedEventOut.model_validate(e).dump() for e in events]}


@router.get("")
def list_saved(
    current: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    events = users.get_saved_events(current.user_id)
    if events is None:
        raise NotFound(USER_NOT_FOUND)
    return envelope(_saved_payload(events), message="Saved events retrieved")


@router.post("")
def save_event(
    req: SaveEventRequest,
    current: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    events = users.save_event(current.user_id, req)
    if events is None:
        raise NotFound(USER_NOT_FOUND)
    return envelope(_saved_payload(events), message="Event saved successfully")


@router.delete("/{event_id}")
def remove_saved(
    event_id: str,
    current: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    events = users.remove_saved_event(current.user_id, event_id)
    if events is None:
        raise NotFound(USER_NOT_FOUND)
    return envelope(_saved_payload(events), message="Event removed from saved events")


@router.get("/{event_id}/check")
def check_saved(
    event_id: str,
    current: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    is_saved = users.is_event_saved(current.user_id, event_id)
    return envelope(
        {"isSaved": is_saved},
        message="Event is saved" if is_saved else "Event is not saved",
    )
