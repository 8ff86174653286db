"""
Pydantic schemas for Movie API.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


RELEASE_DATE_FORMAT = "%Y-%m-%d"


class MovieCreate(BaseModel):
    """Request body for creating a movie."""

    title: str
    genre: str
    release_date: date
    distributor: str | None = None
    budget: int | None = Field(None, ge=0, strict=True)
    mpa_rating: str | None = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "forbid"

    @field_validator("title", "genre")
    @classmethod
    def _required_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title and genre are required")
        return value

    @field_validator("distributor", "mpa_rating")
    @classmethod
    def _optional_text(cls, value: str | None) -> str | None:
        # Blank strings mean "not supplied"
        if value is None:
            return None
        return value.strip() or None

    @field_validator("release_date", mode="before")
    @classmethod
    def _parse_release_date(cls, value):
        if isinstance(value, date):
            return value
        if not isinstance(value, str):
            raise ValueError("releaseDate must follow YYYY-MM-DD format")
        try:
            return datetime.strptime(value, RELEASE_DATE_FORMAT).date()
        except ValueError:
            raise ValueError("releaseDate must follow YYYY-MM-DD format")


class RevenueResponse(BaseModel):
    """Revenue figures inside a box-office document."""

    worldwide: int
    opening_weekend_usa: int | None = Field(None, alias="openingWeekendUSA")

    class Config:
        from_attributes = True
        populate_by_name = True


class BoxOfficeResponse(BaseModel):
    """Box-office sub-document of a movie."""

    revenue: RevenueResponse
    currency: str
    source: str
    last_updated: datetime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class MovieResponse(BaseModel):
    """Response model for a single movie."""

    id: str
    title: str
    release_date: date
    release_year: int
    genre: str
    distributor: str | None
    budget: int | None
    mpa_rating: str | None
    box_office: BoxOfficeResponse | None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class MovieList(BaseModel):
    """Response model for one page of movies."""

    items: list[MovieResponse]
    next_cursor: str | None = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
