"""
HTTP client for the external box-office provider.

The provider is looked up by title at ``GET {base_url}/boxoffice?title=...``
and authenticated with an ``X-API-Key`` header.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Protocol

import requests

from movies_api.database.types import BoxOffice, Revenue, as_utc, utcnow

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"
DEFAULT_SOURCE = "BoxOfficeAPI"


class BoxOfficeError(Exception):
    """The provider could not be reached or answered with something unusable."""


class BoxOfficeNotFound(BoxOfficeError):
    """The provider has no record for the requested title."""


@dataclass(frozen=True)
class BoxOfficeResult:
    """Data the provider returned for a title."""

    distributor: Optional[str]
    budget: Optional[int]
    mpa_rating: Optional[str]
    box_office: BoxOffice


class BoxOfficeProvider(Protocol):
    """Anything that can look up box-office data by title."""

    def fetch(self, title: str, timeout: Optional[float] = None) -> BoxOfficeResult:
        ...


def _optional_str(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise BoxOfficeError(f"field {key} must be a string")
    return value.strip() or None


def _optional_int(payload: Dict[str, Any], key: str) -> Optional[int]:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise BoxOfficeError(f"field {key} must be an integer")
    return value


def parse_box_office_payload(payload: Any) -> BoxOfficeResult:
    """
    Convert a provider response body into a BoxOfficeResult.

    Missing revenue defaults to 0, missing currency to USD, missing source to
    BoxOfficeAPI and missing lastUpdated to the current time.

    Raises:
        BoxOfficeError: If the payload has the wrong shape
    """
    if not isinstance(payload, dict):
        raise BoxOfficeError("box office response must be a JSON object")

    revenue = payload.get('revenue') or {}
    if not isinstance(revenue, dict):
        raise BoxOfficeError("field revenue must be an object")
    worldwide = _optional_int(revenue, 'worldwide')
    opening_weekend = _optional_int(revenue, 'openingWeekendUSA')

    last_updated = utcnow()
    raw_last_updated = payload.get('lastUpdated')
    if raw_last_updated:
        try:
            last_updated = as_utc(datetime.fromisoformat(str(raw_last_updated).replace('Z', '+00:00')))
        except ValueError as e:
            raise BoxOfficeError(f"invalid lastUpdated: {raw_last_updated}") from e

    try:
        box_office = BoxOffice(
            revenue=Revenue(worldwide=worldwide or 0, opening_weekend_usa=opening_weekend),
            currency=_optional_str(payload, 'currency') or DEFAULT_CURRENCY,
            source=_optional_str(payload, 'source') or DEFAULT_SOURCE,
            last_updated=last_updated,
        )
    except ValueError as e:
        raise BoxOfficeError(str(e)) from e

    budget = _optional_int(payload, 'budget')
    if budget is not None and budget < 0:
        raise BoxOfficeError("field budget must be non-negative")

    return BoxOfficeResult(
        distributor=_optional_str(payload, 'distributor'),
        budget=budget,
        mpa_rating=_optional_str(payload, 'mpaRating'),
        box_office=box_office,
    )


class BoxOfficeClient:
    """
    requests-based client for the box-office provider.

    Args:
        base_url: Provider root URL
        api_key: Value sent in the X-API-Key header
        timeout: Default per-request timeout in seconds
        session: Optional pre-configured requests.Session
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, title: str, timeout: Optional[float] = None) -> BoxOfficeResult:
        """
        Look up box-office data for a title.

        Args:
            title: Movie title
            timeout: Override for the default timeout, in seconds

        Returns:
            BoxOfficeResult

        Raises:
            BoxOfficeNotFound: If the provider answered 404
            BoxOfficeError: On transport errors, timeouts, other statuses or bad payloads
        """
        try:
            r = self.session.get(
                f"{self.base_url}/boxoffice",
                params={"title": title},
                headers={"X-API-Key": self.api_key, "Accept": "application/json"},
                timeout=timeout if timeout is not None else self.timeout,
            )
        except requests.RequestException as e:
            raise BoxOfficeError(f"box office request failed: {e}") from e

        if r.status_code == 404:
            raise BoxOfficeNotFound(title)
        if r.status_code != 200:
            logger.warning("Box office returned status %d for title %r", r.status_code, title)
            raise BoxOfficeError(f"box office upstream returned {r.status_code}")

        try:
            payload = r.json()
        except ValueError as e:
            raise BoxOfficeError("decode box office response") from e
        return parse_box_office_payload(payload)

    def close(self):
        """Release pooled HTTP connections."""
        self.session.close()
