"""
User persistence and saved-event list management.

Lookups that find nothing return ``None``; the routers decide whether that
is a 404. Only invariant violations (duplicate email, duplicate saved
event) raise.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import Depends
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from config import Settings, get_settings
from db import get_session
from errors import DuplicateEvent, ValidationError
from models import SavedEvent, User, utcnow
from schemas import SaveEventRequest, UserCreate, UserUpdate
from security import hash_password

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Email already registered"


class UserService:
    def __init__(self, session: Session, settings: Settings) -> None:
        self.session = session
        self.settings = settings

    # ---------- users ----------

    def create_user(self, data: UserCreate) -> User:
        if self.get_user_by_email(data.email) is not None:
            raise ValidationError(EMAIL_TAKEN)

        user = User(
            name=data.name.strip(),
            email=data.email,
            password=hash_password(data.password, self.settings.bcrypt_rounds),
            age=data.age,
            city=data.city,
            role=data.role,
            is_active=data.is_active,
            interests=list(data.interests),
        )
        self.session.add(user)
        self._commit_unique_email()
        self.session.refresh(user)
        logger.info("User created id=%s role=%s", user.id, user.role)
        return user

    def get_all_users(self) -> List[User]:
        stmt = select(User).order_by(User.created_at.desc())
        return list(self.session.exec(stmt).all())

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email.strip().lower())
        return self.session.exec(stmt).first()

    def update_user(self, user_id: str, data: UserUpdate) -> Optional[User]:
        user = self.get_user_by_id(user_id)
        if user is None:
            return None

        changes = data.model_dump(exclude_unset=True)
        # explicit nulls on required columns are ignored
        for key in ("name", "email", "password", "role", "is_active", "interests"):
            if key in changes and changes[key] is None:
                del changes[key]

        email = changes.get("email")
        if email is not None and email != user.email:
            other = self.get_user_by_email(email)
            if other is not None and other.id != user.id:
                raise ValidationError(EMAIL_TAKEN)

        if "password" in changes:
            changes["password"] = hash_password(changes["password"], self.settings.bcrypt_rounds)

        for key, value in changes.items():
            setattr(user, key, value)
        user.updated_at = utcnow()

        self.session.add(user)
        self._commit_unique_email()
        self.session.refresh(user)
        return user

    def delete_user(self, user_id: str) -> Optional[User]:
        user = self.get_user_by_id(user_id)
        if user is None:
            return None
        self.session.delete(user)
        self.session.commit()
        logger.info("User deleted id=%s", user_id)
        return user

    def set_refresh_token(self, user: User, token: Optional[str]) -> None:
        user.refresh_token = token
        self.session.add(user)
        self.session.commit()

    def _commit_unique_email(self) -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            # lost a race against a concurrent insert with the same email
            self.session.rollback()
            raise ValidationError(EMAIL_TAKEN) from exc

    # ---------- saved events ----------

    def save_event(self, user_id: str, event: SaveEventRequest) -> Optional[List[SavedEvent]]:
        if self.get_user_by_id(user_id) is None:
            return None
        if self.is_event_saved(user_id, event.event_id):
            raise DuplicateEvent("Event already saved")

        self.session.add(
            SavedEvent(
                user_id=user_id,
                event_id=event.event_id,
                name=event.name,
                date=event.date,
                location=event.location,
                image_url=event.image_url,
                saved_at=utcnow(),
            )
        )
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise DuplicateEvent("Event already saved") from exc

        logger.info("Event saved user=%s event=%s", user_id, event.event_id)
        return self._saved_events(user_id)

    def get_saved_events(self, user_id: str) -> Optional[List[SavedEvent]]:
        if self.get_user_by_id(user_id) is None:
            return None
        return self._saved_events(user_id)

    def remove_saved_event(self, user_id: str, event_id: str) -> Optional[List[SavedEvent]]:
        if self.get_user_by_id(user_id) is None:
            return None
        result = self.session.execute(
            delete(SavedEvent).where(
                SavedEvent.user_id == user_id, SavedEvent.event_id == event_id
            )
        )
        self.session.commit()
        if result.rowcount:
            logger.info("Event removed user=%s event=%s", user_id, event_id)
        return self._saved_events(user_id)

    def is_event_saved(self, user_id: str, event_id: str) -> bool:
        return self.session.get(SavedEvent, (user_id, event_id)) is not None

    def _saved_events(self, user_id: str) -> List[SavedEvent]:
        stmt = (
            select(SavedEvent)
            .where(SavedEvent.user_id == user_id)
            .order_by(SavedEvent.saved_at)
        )
        return list(self.session.exec(stmt).all())


def get_user_service(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> UserService:
    return UserService(session, settings)
