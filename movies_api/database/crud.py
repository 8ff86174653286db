"""
CRUD operations for Movie and Rating models.

Functions that write commit their own transaction, so a created movie is
durable before any enrichment work starts.
"""

from datetime import date
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from movies_api.database.models import Movie, Rating
from movies_api.database.types import BoxOffice, utcnow
from movies_api.exceptions import NotFoundError


# ==================== MOVIE CRUD OPERATIONS ====================

def create_movie(
    session: Session,
    title: str,
    release_date: date,
    genre: str,
    distributor: Optional[str] = None,
    budget: Optional[int] = None,
    mpa_rating: Optional[str] = None,
    box_office: Optional[BoxOffice] = None
) -> Movie:
    """
    Create a new movie.

    Args:
        session: Database session
        title: Movie title
        release_date: Calendar release date
        genre: Genre label
        distributor: Distributor name (optional)
        budget: Production budget (optional, non-negative)
        mpa_rating: MPA classification (optional)
        box_office: Box-office sub-document (optional)

    Returns:
        Created Movie object

    Raises:
        ValueError: If budget is negative
    """
    if budget is not None and budget < 0:
        raise ValueError("budget must be non-negative")

    movie = Movie(
        title=title,
        release_date=release_date,
        genre=genre,
        distributor=distributor,
        budget=budget,
        mpa_rating=mpa_rating,
        box_office=box_office
    )
    session.add(movie)
    session.commit()
    session.refresh(movie)
    return movie


def get_movie(session: Session, movie_id: str) -> Optional[Movie]:
    """
    Get a movie by ID.

    Args:
        session: Database session
        movie_id: Movie ID

    Returns:
        Movie object or None if not found
    """
    return session.get(Movie, movie_id)


def find_movies_by_keys(
    session: Session,
    title: str,
    release_date: Optional[date] = None,
    genre: Optional[str] = None
) -> List[Movie]:
    """
    Find movies with an exact title, optionally narrowed by release date and genre.

    Args:
        session: Database session
        title: Exact movie title
        release_date: Release date to disambiguate (optional)
        genre: Genre to disambiguate (optional)

    Returns:
        Matching movies, newest first
    """
    stmt = select(Movie).where(Movie.title == title)
    if release_date is not None:
        stmt = stmt.where(Movie.release_date == release_date)
    if genre is not None:
        stmt = stmt.where(Movie.genre == genre)
    stmt = stmt.order_by(Movie.created_at.desc(), Movie.id.desc())
    return list(session.scalars(stmt))


def get_movie_by_title(session: Session, title: str) -> Movie:
    """
    Resolve a title to exactly one movie.

    Args:
        session: Database session
        title: Exact movie title

    Returns:
        The single matching Movie

    Raises:
        NotFoundError: If no movie, or more than one movie, has this title
    """
    movies = find_movies_by_keys(session, title)
    if len(movies) != 1:
        raise NotFoundError()
    return movies[0]


def update_movie_metadata(
    session: Session,
    movie_id: str,
    distributor: Optional[str] = None,
    budget: Optional[int] = None,
    mpa_rating: Optional[str] = None,
    box_office: Optional[BoxOffice] = None
) -> Movie:
    """
    Update the optional metadata of a movie.

    Distributor, budget and MPA rating are left unchanged when None. The box
    office sub-document is always replaced, including with None.

    Args:
        session: Database session
        movie_id: Movie ID
        distributor: New distributor, or None to keep the current one
        budget: New budget, or None to keep the current one
        mpa_rating: New MPA rating, or None to keep the current one
        box_office: Replacement box-office sub-document

    Returns:
        Updated Movie object

    Raises:
        NotFoundError: If the movie does not exist
        ValueError: If budget is negative
    """
    if budget is not None and budget < 0:
        raise ValueError("budget must be non-negative")

    movie = get_movie(session, movie_id)
    if movie is None:
        raise NotFoundError()

    if distributor is not None:
        movie.distributor = distributor
    if budget is not None:
        movie.budget = budget
    if mpa_rating is not None:
        movie.mpa_rating = mpa_rating
    movie.box_office = box_office
    movie.updated_at = utcnow()

    session.commit()
    session.refresh(movie)
    return movie


# ==================== RATING CRUD OPERATIONS ====================

def get_rating_by_rater(
    session: Session,
    movie_id: str,
    rater_id: str
) -> Optional[Rating]:
    """
    Get the rating a rater gave a movie.

    Args:
        session: Database session
        movie_id: Movie ID
        rater_id: Rater identity

    Returns:
        Rating object or None if the rater has not rated the movie
    """
    return session.get(Rating, (movie_id, rater_id))
