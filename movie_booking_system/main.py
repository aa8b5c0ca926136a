"""FastAPI application setup and configuration."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from movie_booking_system import __version__
from movie_booking_system.config import settings
from movie_booking_system.api import api_router
from movie_booking_system.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from movie_booking_system.services.backend_client import BackendClient
from movie_booking_system.services.session_store import get_session_store
from movie_booking_system.utils.logging_config import setup_logging

is_production = settings.environment == "production"

setup_logging(
    log_level="DEBUG" if settings.debug else settings.log_level,
    log_file="logs/movie_booking.log" if is_production else None,
    enable_json_logging=settings.enable_json_logging or is_production,
)

logger = logging.getLogger(__name__)

DESCRIPTION = """
Guided movie ticket booking on top of an external booking backend.

A patron session walks `login -> movies -> seats -> payment -> ticket`;
the administrator lands on `admin` and edits the catalog. Log in through
`/api/v1/auth/login` and send the returned token as a bearer token.

Rejected actions leave the session untouched and come back as
`{"error": {"error_code", "message", "details"}, "error_id", "timestamp"}`.
"""

TAGS = [
    {"name": "authentication", "description": "Open and close booking sessions"},
    {"name": "flow", "description": "Booking wizard state and actions"},
    {"name": "admin", "description": "Movie catalog administration"},
    {"name": "health", "description": "Liveness"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the backend client for the lifetime of the application."""
    logger.info(f"Starting Movie Booking System {__version__}, backend at {settings.backend_api_url}")
    async with BackendClient(settings.backend_api_url, timeout=settings.backend_timeout_seconds) as client:
        app.state.backend_client = client
        yield
    get_session_store().clear()
    logger.info("Movie Booking System stopped")


app = FastAPI(
    title="Movie Booking System API",
    description=DESCRIPTION,
    version=__version__,
    openapi_tags=TAGS,
    lifespan=lifespan,
)

# Added last runs first: CORS, then error rendering, then request logging.
app.add_middleware(
    LoggingMiddleware,
    log_requests=settings.enable_request_logging,
    log_responses=settings.enable_request_logging,
)
app.add_middleware(ErrorHandlerMiddleware, debug=settings.debug)
app.add_middleware(
    CORSMiddleware,
    # Wildcard origins cannot be combined with credentials.
    allow_origins=["*"] if settings.debug else settings.cors_origins,
    allow_credentials=False if settings.debug else settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
    expose_headers=settings.cors_expose_headers,
)

app.include_router(api_router)


@app.get("/", tags=["health"])
async def root():
    return {"service": "movie-booking-system", "version": __version__, "docs_url": "/docs"}


@app.get("/health", tags=["health"])
async def health_check():
    """Report liveness and the number of open booking sessions."""
    return {"status": "healthy", "active_sessions": len(get_session_store())}
