"""API endpoints for the Movie Booking System."""

from fastapi import APIRouter

from ..schemas.common import ErrorResponse
from .auth import router as auth_router
from .flow import router as flow_router
from .admin import router as admin_router

ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Missing, invalid or ended session"},
    409: {"model": ErrorResponse, "description": "Action not allowed on the current step"},
    502: {"model": ErrorResponse, "description": "The backend did not accept the booking"},
    503: {"model": ErrorResponse, "description": "The backend could not be reached"},
}

api_router = APIRouter(prefix="/api/v1", responses=ERROR_RESPONSES)

api_router.include_router(auth_router)
api_router.include_router(flow_router)
api_router.include_router(admin_router)

__all__ = ["api_router"]
