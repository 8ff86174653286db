"""
Rating upsert and aggregation.

A rater holds at most one rating per movie. Submissions are written with a
single ``INSERT ... ON CONFLICT DO UPDATE`` so concurrent raters never lose an
insert and concurrent submissions from one rater collapse into one row
(last committed wins).
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Tuple
from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from movies_api.database import crud
from movies_api.database.models import Rating, RATING_VALUES
from movies_api.database.types import utcnow
from movies_api.exceptions import AuthorizationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    'sqlite': sqlite.insert,
    'postgresql': postgresql.insert,
}


@dataclass(frozen=True)
class RatingAggregate:
    """Average (one decimal place) and count of a movie's ratings."""

    average: float
    count: int


def validate_rating_value(value) -> float:
    """
    Check that a value is one of the ten rating steps.

    Args:
        value: Submitted rating

    Returns:
        The value as a float

    Raises:
        ValidationError: If the value is not in {0.5, 1.0, ..., 5.0}
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ValidationError("rating must be one of {0.5, 1.0, ..., 5.0}")
    value = float(value)
    if value not in RATING_VALUES:
        raise ValidationError("rating must be one of {0.5, 1.0, ..., 5.0}")
    return value


def round_half_up(value: Decimal, places: str = '0.1') -> Decimal:
    """Round to one decimal place, ties away from zero (4.25 -> 4.3)."""
    return value.quantize(Decimal(places), rounding=ROUND_HALF_UP)


def _is_foreign_key_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, 'pgcode', None) == '23503' or getattr(orig, 'sqlstate', None) == '23503':
        return True
    return 'FOREIGN KEY' in str(orig).upper()


def upsert_rating(
    session: Session,
    movie_id: str,
    rater_id: str,
    value: float
) -> Tuple[Rating, bool]:
    """
    Insert or update a rater's rating for a movie.

    Args:
        session: Database session
        movie_id: Movie ID
        rater_id: Rater identity
        value: Rating value

    Returns:
        (rating, inserted) where inserted is True for a first submission

    Raises:
        ValidationError: If the value is not a valid rating step
        AuthorizationError: If the rater identity is blank
        NotFoundError: If the movie does not exist
    """
    value = validate_rating_value(value)
    if rater_id is None or not rater_id.strip():
        raise AuthorizationError()

    dialect = session.get_bind().dialect.name
    insert = _DIALECT_INSERTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"rating upsert is not supported on {dialect}")

    # On conflict the original created_at survives, so it only equals `now`
    # when this statement inserted the row.
    now = utcnow()
    stmt = insert(Rating).values(
        movie_id=movie_id,
        rater_id=rater_id,
        rating=value,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Rating.movie_id, Rating.rater_id],
        set_={
            'rating': stmt.excluded.rating,
            'updated_at': stmt.excluded.updated_at,
        },
    ).returning(
        Rating.movie_id,
        Rating.rater_id,
        Rating.rating,
        Rating.created_at,
        Rating.updated_at,
    )

    try:
        row = session.execute(stmt).one()
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if _is_foreign_key_violation(e):
            raise NotFoundError() from e
        raise

    inserted = row.created_at == now
    rating = Rating(
        movie_id=row.movie_id,
        rater_id=row.rater_id,
        rating=row.rating,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
    logger.debug(
        "Rating %s for movie %s by %s: %.1f",
        "inserted" if inserted else "updated", movie_id, rater_id, value
    )
    return rating, inserted


def get_rating(session: Session, movie_id: str, rater_id: str) -> Rating:
    """
    Get a rater's current rating for a movie.

    Raises:
        NotFoundError: If the rater has not rated the movie
    """
    rating = crud.get_rating_by_rater(session, movie_id, rater_id)
    if rating is None:
        raise NotFoundError()
    return rating


def aggregate_ratings(session: Session, movie_id: str) -> RatingAggregate:
    """
    Compute the average and count of a movie's ratings.

    Count and sum come from one statement, so both describe the same rows.
    The mean is rounded half-up to one decimal place; no ratings gives 0.0.

    Args:
        session: Database session
        movie_id: Movie ID

    Returns:
        RatingAggregate
    """
    row = session.execute(
        select(
            func.count().label('count'),
            func.coalesce(func.sum(Rating.rating), 0).label('total'),
        ).where(Rating.movie_id == movie_id)
    ).one()

    count = int(row.count or 0)
    if count == 0:
        return RatingAggregate(average=0.0, count=0)

    # Every rating is a multiple of 0.5, so the float sum is exact
    mean = Decimal(str(float(row.total))) / Decimal(count)
    return RatingAggregate(average=float(round_half_up(mean)), count=count)
