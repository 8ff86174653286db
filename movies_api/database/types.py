"""
Column types and value objects that sit at the storage boundary.

``UTCDateTime`` keeps every timestamp timezone-aware on the way out of the
database, and ``BoxOfficeJSON`` translates the box-office sub-document between
its JSON wire form and the ``BoxOffice`` value object.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.types import DateTime, JSON, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB


# Keys every stored box-office document must carry
BOX_OFFICE_REQUIRED_KEYS = ('revenue', 'currency', 'source', 'lastUpdated')


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_timestamp(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return as_utc(raw)
    if not isinstance(raw, str):
        raise ValueError("lastUpdated must be an ISO-8601 timestamp")
    # fromisoformat() only learned the 'Z' suffix in 3.11
    if raw.endswith('Z'):
        raw = raw[:-1] + '+00:00'
    return as_utc(datetime.fromisoformat(raw))


@dataclass(frozen=True)
class Revenue:
    """Revenue figures reported by the box-office provider."""

    worldwide: int
    opening_weekend_usa: Optional[int] = None


@dataclass(frozen=True)
class BoxOffice:
    """
    Box-office sub-document of a movie.

    Attributes:
        revenue: Worldwide (required) and opening weekend (optional) revenue
        currency: Currency code of the revenue figures
        source: Provenance label of the data
        last_updated: When the provider last refreshed the figures
    """

    revenue: Revenue
    currency: str
    source: str
    last_updated: datetime

    def __post_init__(self):
        if isinstance(self.revenue.worldwide, bool) or not isinstance(self.revenue.worldwide, int):
            raise ValueError("revenue.worldwide must be an integer")
        if self.revenue.worldwide < 0:
            raise ValueError("revenue.worldwide must be non-negative")
        if not self.currency or not self.currency.strip():
            raise ValueError("currency must be non-empty")
        if not self.source or not self.source.strip():
            raise ValueError("source must be non-empty")
        if not isinstance(self.last_updated, datetime):
            raise ValueError("lastUpdated must be a timestamp")

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the JSON document stored in ``movies.box_office``."""
        revenue: Dict[str, Any] = {'worldwide': self.revenue.worldwide}
        if self.revenue.opening_weekend_usa is not None:
            revenue['openingWeekendUSA'] = self.revenue.opening_weekend_usa
        return {
            'revenue': revenue,
            'currency': self.currency,
            'source': self.source,
            'lastUpdated': as_utc(self.last_updated).isoformat(),
        }

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "BoxOffice":
        """
        Build a BoxOffice from its stored JSON document.

        Raises:
            ValueError: If a required key is missing or has the wrong shape
        """
        if not isinstance(document, dict):
            raise ValueError("box office document must be an object")
        missing = [key for key in BOX_OFFICE_REQUIRED_KEYS if key not in document]
        if missing:
            raise ValueError(f"box office document missing keys: {', '.join(missing)}")
        revenue = document['revenue']
        if not isinstance(revenue, dict) or 'worldwide' not in revenue:
            raise ValueError("box office document missing key: revenue.worldwide")
        return cls(
            revenue=Revenue(
                worldwide=revenue['worldwide'],
                opening_weekend_usa=revenue.get('openingWeekendUSA'),
            ),
            currency=document['currency'],
            source=document['source'],
            last_updated=_parse_timestamp(document['lastUpdated']),
        )


class UTCDateTime(TypeDecorator):
    """
    DateTime column stored as naive UTC and returned as aware UTC.

    SQLite has no timezone support, so values are normalized to UTC before
    binding; results always come back with ``tzinfo=timezone.utc``.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            value = as_utc(value).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            value = as_utc(value)
        return value


class BoxOfficeJSON(TypeDecorator):
    """JSON column holding a ``BoxOffice`` document (JSONB on PostgreSQL)."""

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB(none_as_null=True))
        return dialect.type_descriptor(JSON(none_as_null=True))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, dict):
            value = BoxOffice.from_document(value)
        if not isinstance(value, BoxOffice):
            raise TypeError(f"Expected BoxOffice, got {type(value).__name__}")
        return value.to_document()

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return BoxOffice.from_document(value)
