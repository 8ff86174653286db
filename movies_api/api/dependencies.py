"""
FastAPI dependency injection for settings, database sessions, the
enrichment coordinator and caller credentials.
"""

import hmac
import logging
from typing import Generator, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from movies_api.api.config import Settings, get_settings
from movies_api.clients.boxoffice import BoxOfficeClient
from movies_api.core.enrichment import EnrichmentCoordinator
from movies_api.database.connection import DatabaseManager, get_db_manager
from movies_api.exceptions import AuthorizationError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def get_database_manager(settings: Settings = Depends(get_settings)) -> DatabaseManager:
    """Get the process-wide database manager configured from settings."""
    return get_db_manager(
        database_url=settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle_secs,
        pool_timeout=settings.db_pool_timeout_secs,
    )


def get_db(db_manager: DatabaseManager = Depends(get_database_manager)) -> Generator[Session, None, None]:
    """Yield database session for FastAPI Depends()."""
    with db_manager.session_scope() as session:
        yield session


# Singleton box office client and enrichment coordinator
_boxoffice_client: BoxOfficeClient | None = None
_enrichment_coordinator: EnrichmentCoordinator | None = None


def get_boxoffice_client(settings: Settings = Depends(get_settings)) -> BoxOfficeClient:
    """Get or create singleton BoxOfficeClient."""
    global _boxoffice_client
    if _boxoffice_client is None:
        _boxoffice_client = BoxOfficeClient(
            base_url=settings.boxoffice_url,
            api_key=settings.boxoffice_api_key,
            timeout=settings.boxoffice_timeout_secs,
        )
    return _boxoffice_client


def get_enrichment_coordinator(
    settings: Settings = Depends(get_settings),
    client: BoxOfficeClient = Depends(get_boxoffice_client),
) -> EnrichmentCoordinator:
    """Get or create the singleton coordinator around the shared client."""
    global _enrichment_coordinator
    if _enrichment_coordinator is None:
        _enrichment_coordinator = EnrichmentCoordinator(client, timeout=settings.boxoffice_timeout_secs)
    return _enrichment_coordinator


def close_enrichment() -> None:
    """Close and forget the singleton coordinator and BoxOfficeClient."""
    global _boxoffice_client, _enrichment_coordinator
    if _enrichment_coordinator is not None:
        _enrichment_coordinator.close()
    if _boxoffice_client is not None:
        _boxoffice_client.close()
    _enrichment_coordinator = None
    _boxoffice_client = None


def verify_bearer(header: Optional[str], expected_token: str) -> bool:
    """
    Check an Authorization header against the configured token.

    The header must be ``Bearer <token>``; surrounding whitespace around the
    token is ignored and the comparison is constant-time.
    """
    if not header or not header.startswith(BEARER_PREFIX):
        return False
    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        return False
    return hmac.compare_digest(token.encode("utf-8"), expected_token.encode("utf-8"))


def require_bearer_token(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject the request unless it carries the configured bearer token."""
    if not verify_bearer(authorization, settings.auth_token):
        raise AuthorizationError()


def get_rater_id(x_rater_id: Optional[str] = Header(None)) -> str:
    """Return the caller's rater identity from the X-Rater-Id header."""
    rater_id = (x_rater_id or "").strip()
    if not rater_id:
        raise AuthorizationError()
    return rater_id
