"""
Box-office enrichment of freshly created movies.

Enrichment runs after the movie row is committed. Caller-supplied values
always win over provider values, and no provider or persistence failure is
allowed to reach the caller: the movie is returned as created instead.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from movies_api.clients.boxoffice import BoxOfficeError, BoxOfficeNotFound, BoxOfficeProvider, BoxOfficeResult
from movies_api.database import crud
from movies_api.database.models import Movie
from movies_api.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class EnrichmentCoordinator:
    """
    Merge provider data into a movie.

    The provider call runs on a small worker pool so that ``timeout`` bounds
    the whole call, not just each socket read. A call that overruns counts as
    a provider failure and its late result is discarded.

    Args:
        provider: Box-office lookup by title
        timeout: Seconds allowed for the provider call
        max_workers: Size of the provider worker pool
    """

    def __init__(self, provider: BoxOfficeProvider, timeout: float, max_workers: int = 4):
        self.provider = provider
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="boxoffice")

    def close(self):
        """Stop the worker pool without waiting for abandoned calls."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _fetch(self, title: str) -> Optional[BoxOfficeResult]:
        future = self._executor.submit(self.provider.fetch, title, timeout=self.timeout)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError:
            future.cancel()
            logger.warning("Box office fetch for %r exceeded %ss", title, self.timeout)
        except BoxOfficeNotFound:
            logger.debug("No box office data for %r", title)
        except BoxOfficeError as e:
            logger.warning("Box office fetch failed for %r: %s", title, e)
        except Exception:
            # Enrichment must never fail the create request
            logger.exception("Unexpected box office error for %r", title)
        return None

    def enrich(
        self,
        session: Session,
        movie: Movie,
        distributor: Optional[str] = None,
        budget: Optional[int] = None,
        mpa_rating: Optional[str] = None,
    ) -> Movie:
        """
        Enrich a movie with box-office data.

        Args:
            session: Database session
            movie: The movie as just created
            distributor: Distributor the caller supplied, if any
            budget: Budget the caller supplied, if any
            mpa_rating: MPA rating the caller supplied, if any

        Returns:
            The enriched movie, or the movie unchanged if enrichment was skipped
        """
        result = self._fetch(movie.title)
        if result is None:
            return movie

        try:
            return crud.update_movie_metadata(
                session,
                movie.id,
                distributor=distributor if distributor is not None else result.distributor,
                budget=budget if budget is not None else result.budget,
                mpa_rating=mpa_rating if mpa_rating is not None else result.mpa_rating,
                box_office=result.box_office,
            )
        except (SQLAlchemyError, NotFoundError, ValueError) as e:
            session.rollback()
            logger.warning("Storing box office data for movie %s failed: %s", movie.id, e)
            return movie
