from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, List, Optional

import requests
from fastapi import Depends

from config import Settings, get_settings
from errors import ExternalServiceError
from schemas import ExternalEvent
from utils.http_client import HttpClient

KEY = "ticketmaster"
NAME = "Ticketmaster"

logger = logging.getLogger(__name__)


def _parse_events(data: Any) -> List[ExternalEvent]:
    if not isinstance(data, list):
        raise ExternalServiceError("Unexpected response from events provider")
    events: List[ExternalEvent] = []
    for item in data:
        # bad fields inside an event degrade to None; only non-objects are skipped
        if not isinstance(item, dict):
            logger.warning("%s: skipping non-object item %r", NAME, item)
            continue
        events.append(ExternalEvent.model_validate(item))
    return events


class TicketmasterProvider:
    """
    Client for the external events API.

    One POST per call with ``{"ville": city, "interet": interests}``.
    Transport, status and body-shape problems raise
    ``ExternalServiceError``. Malformed fields inside one event do not.
    """

    name = KEY

    def __init__(
        self,
        url: str,
        api_key: Optional[str],
        client: Optional[HttpClient] = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.client = client or HttpClient()

    def fetch_events(self, *, city: str, interests: List[str]) -> List[ExternalEvent]:
        headers = {"x-api-key": self.api_key} if self.api_key else {}
        payload = {"ville": city, "interet": list(interests)}

        try:
            data = self.client.post_json(self.url, json=payload, headers=headers)
        except (requests.RequestException, ValueError) as exc:
            logger.error("%s request failed: %s", NAME, exc)
            raise ExternalServiceError("Failed to fetch external events") from exc

        events = _parse_events(data)
        logger.info("%s returned %d events for city=%s", NAME, len(events), city)
        return events


@lru_cache
def shared_client(timeout: float, max_retries: int) -> HttpClient:
    """One pooled client per timeout/retry setting, reused across requests."""
    return HttpClient(timeout=timeout, max_retries=max_retries)


def get_events_provider(settings: Settings = Depends(get_settings)) -> TicketmasterProvider:
    client = shared_client(settings.http_timeout_seconds, settings.http_max_retries)
    return TicketmasterProvider(settings.events_api_url, settings.events_api_token, client)
