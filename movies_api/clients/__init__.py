"""
Clients for external services.
"""

from movies_api.clients.boxoffice import (
    BoxOfficeClient,
    BoxOfficeError,
    BoxOfficeNotFound,
    BoxOfficeProvider,
    BoxOfficeResult,
)

__all__ = [
    "BoxOfficeClient",
    "BoxOfficeError",
    "BoxOfficeNotFound",
    "BoxOfficeProvider",
    "BoxOfficeResult",
]
