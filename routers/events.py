from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from providers.base import format_event
from providers.ticketmaster import TicketmasterProvider, get_events_provider
from schemas import FetchEventsRequest, envelope
from security import CurrentUser, get_current_user

router = APIRouter(prefix="/api/events", tags=["events"])

logger = logging.getLogger(__name__)


@router.post("/fetch")
def fetch_events(
    req: FetchEventsRequest,
    _: CurrentUser = Depends(get_current_user),
    provider: TicketmasterProvider = Depends(get_events_provider),
) -> Dict[str, Any]:
    """
    Fetch events for a city and interests from the provider.

    - ExternalServiceError (500) if the provider call fails.
    - Each raw event goes through the total ``format_event`` mapping.
    """
    logger.info("events.fetch city=%s interests=%s", req.ville, req.interet)
    raw = provider.fetch_events(city=req.ville, interests=req.interet)
    items = [format_event(e).model_dump(mode="json") for e in raw]
    return envelope(items)
