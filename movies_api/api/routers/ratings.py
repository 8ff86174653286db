"""
Rating API endpoints.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from movies_api.api.dependencies import get_db, get_rater_id
from movies_api.api.models.rating import RatingSubmit, RatingResponse, RatingAggregateResponse
from movies_api.core import ratings as rating_engine
from movies_api.database import crud

router = APIRouter(prefix="/movies/{title}", tags=["ratings"])


@router.post("/ratings", response_model=RatingResponse)
def submit_rating(
    title: str,
    rating_in: RatingSubmit,
    response: Response,
    rater_id: str = Depends(get_rater_id),
    db: Session = Depends(get_db),
):
    """Add or replace the caller's rating (201 when new, 200 when updated)."""
    movie = crud.get_movie_by_title(db, title)
    rating, inserted = rating_engine.upsert_rating(db, movie.id, rater_id, rating_in.rating)
    response.status_code = 201 if inserted else 200
    return RatingResponse(movie_title=movie.title, rater_id=rating.rater_id, rating=rating.rating)


@router.get("/ratings/me", response_model=RatingResponse)
def get_my_rating(
    title: str,
    rater_id: str = Depends(get_rater_id),
    db: Session = Depends(get_db),
):
    """Get the caller's current rating for a movie."""
    movie = crud.get_movie_by_title(db, title)
    rating = rating_engine.get_rating(db, movie.id, rater_id)
    return RatingResponse(movie_title=movie.title, rater_id=rating.rater_id, rating=rating.rating)


@router.get("/rating", response_model=RatingAggregateResponse)
def get_rating_aggregate(title: str, db: Session = Depends(get_db)):
    """Get the average and count of a movie's ratings."""
    movie = crud.get_movie_by_title(db, title)
    aggregate = rating_engine.aggregate_ratings(db, movie.id)
    return RatingAggregateResponse(average=aggregate.average, count=aggregate.count)
