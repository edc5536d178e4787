from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

Role = Literal["user", "admin"]

# surrounding blanks are dropped before the length check
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


def _as_utc(value: datetime) -> datetime:
    # SQLite hands datetimes back without tzinfo; they are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase, dumps camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def dump(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


def envelope(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return body


# ---------- Auth ----------


def _normalize_email(v: str) -> str:
    return v.strip().lower()


class RegisterRequest(CamelModel):
    name: Name
    email: EmailStr
    password: str = Field(..., min_length=1)
    city: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0, le=150)
    interests: List[str] = Field(default_factory=list)

    normalize_email = field_validator("email")(_normalize_email)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    normalize_email = field_validator("email")(_normalize_email)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


# ---------- Users ----------


class UserCreate(RegisterRequest):
    role: Role = "user"
    is_active: bool = True


class UserUpdate(CamelModel):
    name: Optional[Name] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=1)
    city: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0, le=150)
    interests: Optional[List[str]] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v) if v is not None else v


class SavedEventOut(CamelModel):
    event_id: str
    name: str
    date: str
    location: str
    image_url: Optional[str] = None
    saved_at: UtcDatetime


class UserOut(CamelModel):
    """Public view of a user; password hash and refresh token are never exposed."""

    id: str
    name: str
    email: str
    age: Optional[int] = None
    city: Optional[str] = None
    role: str
    is_active: bool
    interests: List[str] = Field(default_factory=list)
    saved_events: List[SavedEventOut] = Field(default_factory=list)
    created_at: UtcDatetime
    updated_at: UtcDatetime


# ---------- Saved events ----------


class SaveEventRequest(CamelModel):
    event_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    date: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1, max_length=300)
    image_url: Optional[str] = None


# ---------- External events ----------


class ProviderModel(BaseModel):
    """
    Base for provider payloads. Every field is optional, and a value of the
    wrong type is dropped to None instead of failing the whole event.
    """

    model_config = ConfigDict(
        extra="ignore", populate_by_name=True, coerce_numbers_to_str=True
    )

    @field_validator("*", mode="wrap")
    @classmethod
    def drop_invalid(cls, value: Any, handler: Any) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return None


class PlaceAddress(ProviderModel):
    line1: Optional[str] = None


class PlaceName(ProviderModel):
    name: Optional[str] = None


class UpcomingEvents(ProviderModel):
    total: Optional[int] = Field(default=None, alias="_total")


class PlaceImage(ProviderModel):
    url: Optional[str] = None


class Place(ProviderModel):
    address: Optional[PlaceAddress] = None
    postal_code: Optional[str] = Field(default=None, alias="postalCode")
    city: Optional[PlaceName] = None
    country: Optional[PlaceName] = None
    upcoming_events: Optional[UpcomingEvents] = Field(default=None, alias="upcomingEvents")
    images: Optional[List[PlaceImage]] = None


class PriceRange(ProviderModel):
    min: Optional[float] = None
    max: Optional[float] = None


class ExternalEvent(ProviderModel):
    """Raw event as returned by the ticketing provider. Every field may be missing."""

    id: Optional[str] = None
    name: Optional[str] = None
    date: Optional[str] = None
    place: Optional[List[Place]] = None
    price_ranges: Optional[List[PriceRange]] = Field(default=None, alias="priceRanges")
    ticket: Optional[str] = None


class FormattedEvent(BaseModel):
    ticketmaster_id: Optional[str] = None
    name: Optional[str] = None
    date: Optional[datetime] = Field(
        default=None, description="UTC start time, null when unparseable"
    )
    location: str
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    ticket_url: Optional[str] = None
    remaining_places: Optional[int] = None
    image_url: Optional[str] = None


class FetchEventsRequest(BaseModel):
    ville: str = Field(..., min_length=1, description="City to search in")
    interet: List[str] = Field(..., description="Interest keywords")
