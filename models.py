from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, Relationship, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid4().hex


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    password: str  # bcrypt hash
    age: Optional[int] = None
    city: Optional[str] = None
    role: str = "user"  # user/admin
    is_active: bool = True
    refresh_token: Optional[str] = None
    interests: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    saved_events: List["SavedEvent"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "SavedEvent.saved_at",
        },
    )


class SavedEvent(SQLModel, table=True):
    __tablename__ = "saved_events"

    # composite key: one entry per external event per user
    user_id: str = Field(foreign_key="users.id", primary_key=True)
    event_id: str = Field(primary_key=True)
    name: str
    date: str
    location: str
    image_url: Optional[str] = None
    saved_at: datetime = Field(default_factory=utcnow)

    user: Optional[User] = Relationship(back_populates="saved_events")
