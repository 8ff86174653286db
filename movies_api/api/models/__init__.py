"""
Pydantic schemas for API request/response validation.
"""

from movies_api.api.models.movie import MovieCreate, MovieResponse, MovieList, BoxOfficeResponse
from movies_api.api.models.rating import RatingSubmit, RatingResponse, RatingAggregateResponse

__all__ = [
    "MovieCreate",
    "MovieResponse",
    "MovieList",
    "BoxOfficeResponse",
    "RatingSubmit",
    "RatingResponse",
    "RatingAggregateResponse",
]
