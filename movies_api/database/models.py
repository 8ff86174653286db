"""
SQLAlchemy ORM models for the movies database.

This module defines the Movie and Rating tables with their relationships and
the constraints that guard record validity at the storage boundary.
"""

import uuid
from datetime import date, datetime
from typing import List, Optional
from sqlalchemy import (
    BigInteger, CheckConstraint, Date, Float, ForeignKey, Index, Integer, String, Text
)
from sqlalchemy.orm import DeclarativeBase, relationship, Mapped, mapped_column, validates

from movies_api.database.types import BoxOffice, BoxOfficeJSON, UTCDateTime, utcnow


# The ten discrete steps a rating may take
RATING_VALUES = (0.5, 1.0, 1.5, 2.0, 2.5, 3.0, 3.5, 4.0, 4.5, 5.0)


def new_movie_id() -> str:
    """Generate an opaque movie identifier."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class Movie(Base):
    """
    Movie table storing catalogue metadata.

    Attributes:
        id: Opaque primary key (UUID string)
        title: Movie title (required)
        release_date: Calendar release date (required)
        release_year: Year of release_date, maintained by the model
        genre: Genre label (required)
        distributor: Distributor name (optional)
        budget: Production budget, non-negative (optional)
        mpa_rating: MPA classification label (optional)
        box_office: Box-office sub-document (optional)
        created_at: Timestamp when record was created
        updated_at: Timestamp when record was last updated
    """
    __tablename__ = 'movies'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_movie_id)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    release_date: Mapped[date] = mapped_column(Date, nullable=False)
    release_year: Mapped[int] = mapped_column(Integer, nullable=False)
    genre: Mapped[str] = mapped_column(Text, nullable=False)
    distributor: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    budget: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    mpa_rating: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    box_office: Mapped[Optional[BoxOffice]] = mapped_column(
        BoxOfficeJSON(none_as_null=True),
        nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow
    )

    # Relationships
    ratings: Mapped[List["Rating"]] = relationship(
        "Rating",
        back_populates="movie",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("budget IS NULL OR budget >= 0", name='chk_movies_budget'),
        CheckConstraint(
            "box_office IS NULL OR ("
            "json_type(box_office, '$.revenue') IS NOT NULL "
            "AND json_type(box_office, '$.revenue.worldwide') IS NOT NULL "
            "AND json_type(box_office, '$.currency') IS NOT NULL "
            "AND json_type(box_office, '$.source') IS NOT NULL "
            "AND json_type(box_office, '$.lastUpdated') IS NOT NULL)",
            name='chk_movies_box_office_schema_sqlite'
        ).ddl_if(dialect='sqlite'),
        CheckConstraint(
            "box_office IS NULL OR ("
            "box_office ? 'revenue' "
            "AND (box_office -> 'revenue') ? 'worldwide' "
            "AND box_office ? 'currency' "
            "AND box_office ? 'source' "
            "AND box_office ? 'lastUpdated')",
            name='chk_movies_box_office_schema'
        ).ddl_if(dialect='postgresql'),
        Index('idx_movies_created_id', 'created_at', 'id'),
        Index('idx_movies_title', 'title'),
        Index('idx_movies_release_year', 'release_year'),
        Index('idx_movies_genre', 'genre'),
        Index('idx_movies_mpa_rating', 'mpa_rating'),
        Index('idx_movies_budget', 'budget'),
    )

    @validates('release_date')
    def _sync_release_year(self, key, value):
        # release_year is never assigned directly
        if value is not None:
            self.release_year = value.year
        return value

    def __repr__(self) -> str:
        return f"<Movie(id={self.id}, title='{self.title}', year={self.release_year})>"


class Rating(Base):
    """
    Rating table storing one rating per (movie, rater) pair.

    Attributes:
        movie_id: Foreign key to movies table
        rater_id: Free-form rater identity supplied by the caller
        rating: Rating value, one of RATING_VALUES
        created_at: Timestamp when rating was first submitted
        updated_at: Timestamp when rating was last changed
    """
    __tablename__ = 'ratings'

    movie_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey('movies.id', ondelete='CASCADE'),
        primary_key=True
    )
    rater_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    rating: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow
    )

    # Relationships
    movie: Mapped["Movie"] = relationship("Movie", back_populates="ratings")

    __table_args__ = (
        CheckConstraint(
            "rating IN ({})".format(", ".join(str(v) for v in RATING_VALUES)),
            name='chk_ratings_value'
        ),
        Index('idx_ratings_movie', 'movie_id'),
    )

    def __repr__(self) -> str:
        return f"<Rating(movie_id={self.movie_id}, rater_id='{self.rater_id}', rating={self.rating})>"
