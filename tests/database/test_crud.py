"""
Unit tests for database CRUD operations and storage constraints.

Uses an in-memory SQLite database for fast, isolated testing.
"""

import json
from datetime import date, datetime, timezone

import pytest
from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError

from movies_api.database import crud
from movies_api.database.models import Movie, Rating
from movies_api.database.types import BoxOffice, Revenue
from movies_api.exceptions import NotFoundError


def _box_office(worldwide=1000):
    return BoxOffice(
        revenue=Revenue(worldwide=worldwide),
        currency="USD",
        source="BoxOfficeAPI",
        last_updated=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
    )


class TestMovieCRUD:
    """Tests for Movie CRUD operations."""

    def test_create_movie(self, session):
        """Test creating a new movie."""
        movie = crud.create_movie(
            session,
            title="Inception",
            release_date=date(2010, 7, 16),
            genre="Sci-Fi",
            distributor="Warner Bros.",
            budget=160000000,
            mpa_rating="PG-13",
        )

        assert movie.id is not None
        assert movie.title == "Inception"
        assert movie.release_year == 2010
        assert movie.distributor == "Warner Bros."
        assert movie.box_office is None
        assert movie.created_at.tzinfo is not None
        assert movie.updated_at >= movie.created_at

    def test_create_movie_optional_fields_stay_absent(self, make_movie):
        """Test that unset optional fields are stored as NULL, not sentinels."""
        movie = make_movie()

        assert movie.distributor is None
        assert movie.budget is None
        assert movie.mpa_rating is None

    def test_create_movie_negative_budget(self, session):
        """Test that a negative budget is rejected."""
        with pytest.raises(ValueError):
            crud.create_movie(session, title="X", release_date=date(2020, 1, 1), genre="Drama", budget=-1)

    def test_release_year_follows_release_date(self, session, make_movie):
        """Test that release_year is derived from release_date."""
        movie = make_movie(release_date=date(1999, 3, 31))
        movie.release_date = date(2001, 1, 1)
        session.commit()

        assert crud.get_movie(session, movie.id).release_year == 2001

    def test_get_movie_not_found(self, session):
        """Test that getting a non-existent movie returns None."""
        assert crud.get_movie(session, "missing") is None

    def test_get_movie_by_title(self, session, make_movie):
        """Test resolving a unique title."""
        movie = make_movie(title="Heat")

        assert crud.get_movie_by_title(session, "Heat").id == movie.id

    def test_get_movie_by_title_missing(self, session):
        """Test that an unknown title is not found."""
        with pytest.raises(NotFoundError):
            crud.get_movie_by_title(session, "Nope")

    def test_get_movie_by_title_ambiguous(self, session, make_movie):
        """Test that two movies sharing a title resolve to not found."""
        make_movie(title="Dune", release_date=date(1984, 12, 14))
        make_movie(title="Dune", release_date=date(2021, 10, 22))

        with pytest.raises(NotFoundError):
            crud.get_movie_by_title(session, "Dune")

    def test_find_movies_by_keys_disambiguates(self, session, make_movie):
        """Test narrowing a shared title by release date."""
        make_movie(title="Dune", release_date=date(1984, 12, 14))
        newer = make_movie(title="Dune", release_date=date(2021, 10, 22))

        found = crud.find_movies_by_keys(session, "Dune", release_date=date(2021, 10, 22))
        assert [m.id for m in found] == [newer.id]

    def test_update_metadata_keeps_unsupplied_fields(self, session, make_movie):
        """Test that None leaves distributor, budget and MPA rating unchanged."""
        movie = make_movie(distributor="Legendary", budget=10, mpa_rating="R")
        before = movie.updated_at

        updated = crud.update_movie_metadata(session, movie.id, budget=20, box_office=_box_office())

        assert updated.distributor == "Legendary"
        assert updated.budget == 20
        assert updated.mpa_rating == "R"
        assert updated.box_office == _box_office()
        assert updated.updated_at >= before

    def test_update_metadata_replaces_box_office(self, session, make_movie):
        """Test that box office is replaced wholesale, including with None."""
        movie = make_movie(box_office=_box_office(worldwide=5))

        updated = crud.update_movie_metadata(session, movie.id, box_office=_box_office(worldwide=9))
        assert updated.box_office.revenue.worldwide == 9

        cleared = crud.update_movie_metadata(session, movie.id)
        assert cleared.box_office is None

    def test_update_metadata_missing_movie(self, session):
        """Test updating a non-existent movie."""
        with pytest.raises(NotFoundError):
            crud.update_movie_metadata(session, "missing", distributor="X")


class TestStorageConstraints:
    """Tests for constraints enforced by the database itself."""

    def test_box_office_round_trip(self, session, make_movie):
        """Test that the box office document survives storage intact."""
        movie = make_movie(box_office=_box_office(worldwide=42))
        session.expire_all()

        stored = crud.get_movie(session, movie.id).box_office
        assert stored == _box_office(worldwide=42)
        assert stored.last_updated.tzinfo is not None

    def test_box_office_missing_key_rejected_by_database(self, session, make_movie):
        """Test that a document without currency violates the table constraint."""
        movie = make_movie()
        document = {"revenue": {"worldwide": 1}, "source": "x", "lastUpdated": "2024-01-01T00:00:00+00:00"}

        with pytest.raises(IntegrityError):
            session.execute(
                text("UPDATE movies SET box_office = :doc WHERE id = :id"),
                {"doc": json.dumps(document), "id": movie.id},
            )
            session.commit()
        session.rollback()

    def test_box_office_missing_worldwide_rejected_by_database(self, session, make_movie):
        """Test that revenue without worldwide violates the table constraint."""
        movie = make_movie()
        document = {"revenue": {}, "currency": "USD", "source": "x", "lastUpdated": "2024-01-01T00:00:00+00:00"}

        with pytest.raises(IntegrityError):
            session.execute(
                text("UPDATE movies SET box_office = :doc WHERE id = :id"),
                {"doc": json.dumps(document), "id": movie.id},
            )
            session.commit()
        session.rollback()

    def test_invalid_rating_value_rejected_by_database(self, session, make_movie):
        """Test the rating CHECK constraint."""
        movie = make_movie()
        session.add(Rating(movie_id=movie.id, rater_id="alice", rating=3.3))

        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_deleting_movie_cascades_to_ratings(self, session, make_movie):
        """Test that ratings disappear with their movie."""
        movie = make_movie()
        session.add(Rating(movie_id=movie.id, rater_id="alice", rating=4.0))
        session.add(Rating(movie_id=movie.id, rater_id="bob", rating=2.5))
        session.commit()

        session.delete(movie)
        session.commit()

        assert session.scalar(select(func.count()).select_from(Rating)) == 0
        assert session.scalar(select(func.count()).select_from(Movie)) == 0


class TestRatingCRUD:
    """Tests for Rating read operations."""

    def test_get_rating_by_rater(self, session, make_movie):
        """Test fetching one rater's rating."""
        movie = make_movie()
        session.add(Rating(movie_id=movie.id, rater_id="alice", rating=4.5))
        session.commit()

        rating = crud.get_rating_by_rater(session, movie.id, "alice")
        assert rating.rating == 4.5
        assert crud.get_rating_by_rater(session, movie.id, "bob") is None
