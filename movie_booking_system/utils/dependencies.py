"""
FastAPI dependencies for backend access and booking sessions.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..config import Settings, get_settings
from ..models.flow import FlowStep
from ..services.backend_client import BackendClient
from ..services.flow_controller import FlowController
from ..services.pricing_service import PricingService
from ..services.seat_service import BookedSeatLedger, SeatService, SeededOccupancy
from ..services.session_store import SessionStore, get_session_store
from .auth import verify_session_token
from .exceptions import AuthenticationError, AuthorizationError


# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


@dataclass
class BookingSession:
    """A resolved session: its id and controller."""
    session_id: str
    controller: FlowController


def get_backend_client(request: Request) -> BackendClient:
    """The backend client opened by the application lifespan."""
    return request.app.state.backend_client


@lru_cache()
def get_seat_service() -> SeatService:
    """Process-wide seat service, shared so the booked-seat ledger is too."""
    settings = get_settings()
    return SeatService(
        row_length=settings.seats_per_row,
        occupancy=SeededOccupancy(settings.occupancy_seed, settings.occupancy_ratio),
        ledger=BookedSeatLedger(),
    )


def build_flow_controller(
    client: BackendClient,
    seat_service: SeatService,
    settings: Optional[Settings] = None,
) -> FlowController:
    """Create a controller configured from settings."""
    settings = settings or get_settings()
    return FlowController(
        client,
        seat_service,
        PricingService(settings.booking_fee, settings.currency_symbol),
        user_id=settings.default_user_id,
        payment_method=settings.default_payment_method,
        payment_status=settings.payment_status,
        admin_email=settings.admin_email,
        admin_password=settings.admin_password,
        min_password_length=settings.min_password_length,
        showtime_label_format=settings.showtime_label_format,
    )


async def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    store: SessionStore = Depends(get_session_store),
) -> BookingSession:
    """
    Resolve the booking session named by the bearer token.

    Raises:
        AuthenticationError: If the token is missing, invalid or its
            session no longer exists
    """
    if credentials is None:
        raise AuthenticationError("Session token required")

    token_data = verify_session_token(credentials.credentials)
    if token_data is None:
        raise AuthenticationError("Invalid or expired session token")

    controller = store.get(token_data.session_id)
    if controller is None:
        raise AuthenticationError("Session has ended")

    return BookingSession(session_id=token_data.session_id, controller=controller)


async def get_admin_session(
    session: BookingSession = Depends(get_current_session),
) -> BookingSession:
    """
    Resolve a session that is on the admin panel.

    Raises:
        AuthorizationError: If the session is not an admin session
    """
    if session.controller.step is not FlowStep.ADMIN:
        raise AuthorizationError("Administrator session required")
    return session
