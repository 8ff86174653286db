"""
Filterable, cursor-paginated movie listing.

Movies are ordered by ``(created_at DESC, id DESC)``. A page continues from a
cursor by selecting rows whose ``(created_at, id)`` row value is strictly
less than the cursor, so rows inserted after the first page was served never
shift later pages.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional
from sqlalchemy import literal, or_, select, tuple_, String
from sqlalchemy.orm import Session

from movies_api.core.cursor import MovieCursor, encode_cursor
from movies_api.database.models import Movie
from movies_api.database.types import UTCDateTime

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

LIKE_ESCAPE = '\\'


def clamp_limit(limit: Optional[int]) -> int:
    """Default a missing or non-positive page size to 20 and cap it at 100."""
    if limit is None or limit <= 0:
        return DEFAULT_PAGE_SIZE
    return min(limit, MAX_PAGE_SIZE)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _contains_pattern(value: str) -> str:
    escaped = (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace('%', LIKE_ESCAPE + '%')
        .replace('_', LIKE_ESCAPE + '_')
    )
    return f"%{escaped}%"


@dataclass
class MovieFilters:
    """
    Search and pagination options for list_movies().

    Attributes:
        query: Substring matched against title or distributor
        year: Exact release year
        genre: Substring of the genre
        distributor: Substring of the distributor
        budget_lte: Inclusive budget ceiling
        mpa_rating: Substring of the MPA rating
        limit: Requested page size (clamped)
        cursor: Position after which the page starts
    """

    query: Optional[str] = None
    year: Optional[int] = None
    genre: Optional[str] = None
    distributor: Optional[str] = None
    budget_lte: Optional[int] = None
    mpa_rating: Optional[str] = None
    limit: Optional[int] = None
    cursor: Optional[MovieCursor] = None


@dataclass
class MoviePage:
    """One page of movies and the token for the next page, if any."""

    items: List[Movie] = field(default_factory=list)
    next_cursor: Optional[str] = None


def build_filter_clauses(filters: MovieFilters) -> list:
    """
    Translate filters into SQL predicates. Text filters are trimmed and
    matched case-insensitively as literal substrings; blank ones are ignored.
    """
    clauses = []

    query = _clean(filters.query)
    if query:
        pattern = _contains_pattern(query)
        clauses.append(or_(
            Movie.title.ilike(pattern, escape=LIKE_ESCAPE),
            Movie.distributor.ilike(pattern, escape=LIKE_ESCAPE),
        ))

    if filters.year is not None:
        clauses.append(Movie.release_year == filters.year)

    for column, value in (
        (Movie.genre, filters.genre),
        (Movie.distributor, filters.distributor),
        (Movie.mpa_rating, filters.mpa_rating),
    ):
        value = _clean(value)
        if value:
            clauses.append(column.ilike(_contains_pattern(value), escape=LIKE_ESCAPE))

    if filters.budget_lte is not None:
        clauses.append(Movie.budget <= filters.budget_lte)

    if filters.cursor is not None:
        clauses.append(
            tuple_(Movie.created_at, Movie.id)
            < tuple_(
                literal(filters.cursor.created_at, UTCDateTime()),
                literal(filters.cursor.id, String()),
            )
        )

    return clauses


def list_movies(session: Session, filters: MovieFilters) -> MoviePage:
    """
    Return one page of movies matching the filters.

    A next cursor is emitted only when the page is full. This is a heuristic:
    when the remaining rows exactly fill the page, the next page is empty.

    Args:
        session: Database session
        filters: Search and pagination options

    Returns:
        MoviePage with items and an optional next cursor
    """
    limit = clamp_limit(filters.limit)

    stmt = (
        select(Movie)
        .where(*build_filter_clauses(filters))
        .order_by(Movie.created_at.desc(), Movie.id.desc())
        .limit(limit)
    )
    items = list(session.scalars(stmt))

    next_cursor = None
    if len(items) == limit:
        next_cursor = encode_cursor(MovieCursor.from_movie(items[-1]))

    logger.debug("Listed %d movies (limit=%d, next=%s)", len(items), limit, next_cursor is not None)
    return MoviePage(items=items, next_cursor=next_cursor)
