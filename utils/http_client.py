from __future__ import annotations

from typing import Any, Dict, Mapping, Optional
import logging
import os

import requests
from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "fyd-api/1.0"
RETRY_STATUSES = (429, 500, 502, 503, 504, 522)


def retry_policy(retries: int, backoff_factor: float = 0.6) -> Retry:
    """
    urllib3 Retry for idempotent-safe upstream calls, POST included.
    ``retries=0`` disables retrying: the first failure is returned as is.
    """
    return Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=backoff_factor,
        status_forcelist=RETRY_STATUSES if retries else (),
        allowed_methods=None,
        raise_on_status=False,
    )


class HttpClient:
    """
    JSON-over-HTTP client for upstream APIs.

    Wraps one ``requests.Session`` so connections are pooled across calls.
    Every request gets a timeout; failures surface as ``requests`` exceptions
    (``HTTPError`` for non-2xx) or ``ValueError`` for a body that is not JSON.
    """

    def __init__(
        self,
        timeout: float = 15.0,
        max_retries: int = 0,
        user_agent: Optional[str] = None,
    ) -> None:
        self.timeout = timeout
        self._session = Session()
        adapter = HTTPAdapter(max_retries=retry_policy(max_retries))
        for scheme in ("http://", "https://"):
            self._session.mount(scheme, adapter)

        self._session.headers.update(
            {
                "User-Agent": user_agent or os.getenv("HTTP_USER_AGENT", DEFAULT_USER_AGENT),
                "Accept": "application/json",
            }
        )

    def post_json(
        self,
        url: str,
        *,
        json: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        extra: Dict[str, str] = dict(headers or {})
        resp = self._session.post(url, json=json, headers=extra, timeout=timeout or self.timeout)
        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            logger.warning("HTTP error %s for POST %s", e, resp.url)
            raise
        return resp.json()

    def close(self) -> None:
        self._session.close()
