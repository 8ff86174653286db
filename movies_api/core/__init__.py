"""
Core engines: cursor codec, movie listing, rating upsert/aggregate and
box-office enrichment.
"""

from movies_api.core.cursor import MovieCursor, encode_cursor, decode_cursor
from movies_api.core.listing import MovieFilters, MoviePage, list_movies, clamp_limit
from movies_api.core.ratings import (
    RatingAggregate,
    aggregate_ratings,
    get_rating,
    upsert_rating,
    validate_rating_value,
)
from movies_api.core.enrichment import EnrichmentCoordinator

__all__ = [
    "MovieCursor",
    "encode_cursor",
    "decode_cursor",
    "MovieFilters",
    "MoviePage",
    "list_movies",
    "clamp_limit",
    "RatingAggregate",
    "aggregate_ratings",
    "get_rating",
    "upsert_rating",
    "validate_rating_value",
    "EnrichmentCoordinator",
]
