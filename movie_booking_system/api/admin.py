"""
Movie catalog administration endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from ..schemas.catalog import MovieForm
from ..schemas.common import SuccessResponse
from ..schemas.flow import MovieResponse
from ..services.backend_client import BackendClient
from ..services.catalog_service import CatalogService
from ..utils.dependencies import BookingSession, get_admin_session, get_backend_client

router = APIRouter(prefix="/admin", tags=["admin"])


def _catalog(client: BackendClient, session: BookingSession) -> CatalogService:
    return CatalogService(client, admin_email=session.controller.user_email)


@router.get("/movies", response_model=List[MovieResponse])
async def list_movies(
    session: BookingSession = Depends(get_admin_session),
    client: BackendClient = Depends(get_backend_client),
):
    """List the full catalog."""
    movies = await _catalog(client, session).list_movies()
    return [MovieResponse.model_validate(movie) for movie in movies]


@router.post("/movies", response_model=Optional[MovieResponse], status_code=status.HTTP_201_CREATED)
async def create_movie(
    form: MovieForm,
    session: BookingSession = Depends(get_admin_session),
    client: BackendClient = Depends(get_backend_client),
):
    """
    Add a movie to the catalog.

    Returns the created movie when the backend echoes it back.
    """
    movie = await _catalog(client, session).create_movie(form)
    return MovieResponse.model_validate(movie) if movie else None


@router.put("/movies/{movie_id}", response_model=SuccessResponse)
async def update_movie(
    movie_id: int,
    form: MovieForm,
    session: BookingSession = Depends(get_admin_session),
    client: BackendClient = Depends(get_backend_client),
):
    """Replace a movie's details."""
    await _catalog(client, session).update_movie(movie_id, form)
    return SuccessResponse(message=f"Movie {movie_id} updated")


@router.delete("/movies/{movie_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_movie(
    movie_id: int,
    session: BookingSession = Depends(get_admin_session),
    client: BackendClient = Depends(get_backend_client),
):
    """Remove a movie from the catalog."""
    await _catalog(client, session).delete_movie(movie_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
