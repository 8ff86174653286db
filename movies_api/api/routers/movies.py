"""
Movie API endpoints.
"""

import logging
import re
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from movies_api.api.dependencies import get_db, get_enrichment_coordinator, require_bearer_token
from movies_api.api.models.movie import MovieCreate, MovieResponse, MovieList
from movies_api.core.cursor import decode_cursor
from movies_api.core.enrichment import EnrichmentCoordinator
from movies_api.core.listing import MovieFilters, list_movies as list_movie_page
from movies_api.database import crud
from movies_api.exceptions import BadRequestError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/movies", tags=["movies"])

_INTEGER = re.compile(r"[+-]?\d+")


def _int_param(name: str, raw: str | None, minimum: int | None = None) -> int | None:
    """Parse an optional integer query parameter; bad values are a 400."""
    if raw is None or not raw.strip():
        return None
    raw = raw.strip()
    if not _INTEGER.fullmatch(raw):
        raise BadRequestError(f"invalid {name} value")
    value = int(raw)
    if minimum is not None and value < minimum:
        raise BadRequestError(f"invalid {name} value")
    return value


@router.get("", response_model=MovieList)
def list_movies(
    q: str | None = Query(None),
    year: str | None = Query(None),
    genre: str | None = Query(None),
    distributor: str | None = Query(None),
    budget: str | None = Query(None),
    mpa_rating: str | None = Query(None, alias="mpaRating"),
    limit: str | None = Query(None),
    cursor: str | None = Query(None),
    db: Session = Depends(get_db),
):
    """List movies newest first, with filters and cursor pagination."""
    filters = MovieFilters(
        query=q,
        year=_int_param("year", year),
        genre=genre,
        distributor=distributor,
        budget_lte=_int_param("budget", budget, minimum=0),
        mpa_rating=mpa_rating,
        limit=_int_param("limit", limit),
        cursor=decode_cursor(cursor),
    )
    page = list_movie_page(db, filters)
    return MovieList(
        items=[MovieResponse.model_validate(m) for m in page.items],
        next_cursor=page.next_cursor,
    )


@router.post(
    "",
    response_model=MovieResponse,
    status_code=201,
    dependencies=[Depends(require_bearer_token)],
)
def create_movie(
    movie_in: MovieCreate,
    response: Response,
    db: Session = Depends(get_db),
    coordinator: EnrichmentCoordinator = Depends(get_enrichment_coordinator),
):
    """Create a movie, then enrich it with box-office data."""
    movie = crud.create_movie(
        db,
        title=movie_in.title,
        release_date=movie_in.release_date,
        genre=movie_in.genre,
        distributor=movie_in.distributor,
        budget=movie_in.budget,
        mpa_rating=movie_in.mpa_rating,
    )
    logger.info("Created movie %s (%r)", movie.id, movie.title)

    movie = coordinator.enrich(
        db,
        movie,
        distributor=movie_in.distributor,
        budget=movie_in.budget,
        mpa_rating=movie_in.mpa_rating,
    )
    response.headers["Location"] = f"/movies/{quote(movie.title, safe='')}"
    return movie


@router.get("/{title}", response_model=MovieResponse)
def get_movie(title: str, db: Session = Depends(get_db)):
    """Get movie details by title."""
    return crud.get_movie_by_title(db, title)
