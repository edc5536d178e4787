from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, TypeVar

from schemas import ExternalEvent, FormattedEvent

T = TypeVar("T")


def _first(items: Optional[list[T]]) -> Optional[T]:
    return items[0] if items else None


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """
    Best-effort parser for provider dates.
    Accepts ISO strings with or without 'Z' or a time part.
    Returns an aware UTC datetime, or None if parsing fails.
    """
    if not value or not isinstance(value, str):
        return None
    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_location(event: ExternalEvent) -> str:
    """
    "<line1>, <postal code> <city>, <country>" from the first place.
    Missing parts become empty strings, so an event without a place
    yields ",  ,".
    """
    place = _first(event.place)
    line1 = (place and place.address and place.address.line1) or ""
    postal = (place and place.postal_code) or ""
    city = (place and place.city and place.city.name) or ""
    country = (place and place.country and place.country.name) or ""
    return f"{line1}, {postal} {city}, {country}".strip()


def format_event(event: ExternalEvent) -> FormattedEvent:
    """
    Standardizes one provider event. Total: never raises, substitutes
    None for anything missing (zero prices and counts included).
    """
    place = _first(event.place)
    price = _first(event.price_ranges)
    image = _first(place.images) if place else None

    return FormattedEvent(
        ticketmaster_id=event.id,
        name=event.name,
        date=parse_date(event.date),
        location=format_location(event),
        price_min=(price and price.min) or None,
        price_max=(price and price.max) or None,
        ticket_url=event.ticket,
        remaining_places=(
            place and place.upcoming_events and place.upcoming_events.total
        ) or None,
        image_url=(image and image.url) or None,
    )
