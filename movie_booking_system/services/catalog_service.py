"""
Catalog administration: movie create/update/delete against the backend.
"""

import logging
from typing import List, Optional

from ..schemas.catalog import Movie, MovieForm
from ..utils.exceptions import BackendUnavailableError, MovieNotFoundError
from ..utils.logging_config import log_business_event
from .backend_client import BackendClient

logger = logging.getLogger(__name__)


class CatalogService:
    """Service class for administrative movie catalog operations."""

    def __init__(self, client: BackendClient, admin_email: Optional[str] = None):
        self.client = client
        self.admin_email = admin_email

    async def list_movies(self) -> List[Movie]:
        return await self.client.list_movies()

    async def create_movie(self, form: MovieForm) -> Optional[Movie]:
        """
        Add a movie to the catalog.

        Returns:
            The created movie when the backend echoes it back
        """
        movie = await self.client.create_movie(form)
        log_business_event("movie_created", {"title": form.title}, user_id=self.admin_email)
        return movie

    async def update_movie(self, movie_id: int, form: MovieForm) -> None:
        """
        Replace a movie's catalog entry.

        Raises:
            MovieNotFoundError: If the backend does not know the movie
        """
        try:
            await self.client.update_movie(movie_id, form)
        except BackendUnavailableError as e:
            raise self._not_found_or(e, movie_id)
        log_business_event("movie_updated", {"movie_id": movie_id}, user_id=self.admin_email)

    async def delete_movie(self, movie_id: int) -> None:
        """
        Remove a movie from the catalog.

        Raises:
            MovieNotFoundError: If the backend does not know the movie
        """
        try:
            await self.client.delete_movie(movie_id)
        except BackendUnavailableError as e:
            raise self._not_found_or(e, movie_id)
        log_business_event("movie_deleted", {"movie_id": movie_id}, user_id=self.admin_email)

    @staticmethod
    def _not_found_or(exc: BackendUnavailableError, movie_id: int) -> Exception:
        if exc.status_code == 404:
            return MovieNotFoundError(movie_id)
        return exc
