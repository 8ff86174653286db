"""
Pydantic schemas for Rating API.
"""

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from movies_api.database.models import RATING_VALUES


class RatingSubmit(BaseModel):
    """Request body for submitting a rating."""

    # strict: no bool or numeric-string coercion
    rating: float = Field(..., strict=True)

    class Config:
        extra = "forbid"

    @field_validator("rating")
    @classmethod
    def _rating_step(cls, value: float) -> float:
        if value not in RATING_VALUES:
            raise ValueError("rating must be one of {0.5, 1.0, ..., 5.0}")
        return value


class RatingResponse(BaseModel):
    """Response model for a rater's rating."""

    movie_title: str
    rater_id: str
    rating: float

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class RatingAggregateResponse(BaseModel):
    """Response model for a movie's rating summary."""

    average: float
    count: int
