"""
Authentication API endpoints.

Login is a stub: any well-formed credentials open a patron session and the
configured administrator credentials open the admin panel.
"""

from typing import Any

from fastapi import APIRouter, Depends, status

from ..config import Settings, get_settings
from ..models.flow import FlowStep
from ..schemas.auth import SessionResponse, UserLogin, UserRegistration
from ..schemas.common import SuccessResponse
from ..schemas.flow import FlowStateResponse
from ..services.backend_client import BackendClient
from ..services.flow_controller import FlowController, FlowOutcome
from ..services.seat_service import SeatService
from ..services.session_store import SessionStore, get_session_store
from ..utils.auth import create_session_token
from ..utils.dependencies import (
    BookingSession,
    build_flow_controller,
    get_backend_client,
    get_current_session,
    get_seat_service,
)
from ..utils.exceptions import AuthenticationError


router = APIRouter(prefix="/auth", tags=["authentication"])


def _open_session(
    outcome: FlowOutcome,
    session_id: str,
    controller: FlowController,
    store: SessionStore,
    settings: Settings,
) -> SessionResponse:
    if outcome.step is FlowStep.LOGIN:
        store.discard(session_id)
        message = outcome.violation.message if outcome.violation else "Login failed"
        raise AuthenticationError(message)

    return SessionResponse(
        access_token=create_session_token(session_id, controller.user_email),
        expires_in=settings.SESSION_TOKEN_EXPIRE_MINUTES * 60,
        state=FlowStateResponse.from_controller(
            controller,
            currency_symbol=settings.currency_symbol,
            time_format=settings.showtime_time_format,
        ),
    )


@router.post("/login", response_model=SessionResponse)
async def login_user(
    login_data: UserLogin,
    client: BackendClient = Depends(get_backend_client),
    seat_service: SeatService = Depends(get_seat_service),
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
) -> Any:
    """
    Open a booking session.

    Returns:
        Session token and the initial flow state (movies, or admin)

    Raises:
        AuthenticationError: If the credentials are malformed
    """
    session_id, controller = store.create(lambda: build_flow_controller(client, seat_service, settings))
    outcome = await controller.login(login_data.email, login_data.password)
    return _open_session(outcome, session_id, controller, store, settings)


@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: UserRegistration,
    client: BackendClient = Depends(get_backend_client),
    seat_service: SeatService = Depends(get_seat_service),
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
) -> Any:
    """
    Register a patron and open a booking session on the movies step.
    """
    session_id, controller = store.create(lambda: build_flow_controller(client, seat_service, settings))
    outcome = await controller.register(
        user_data.name,
        user_data.email,
        user_data.password,
        user_data.confirm_password,
    )
    return _open_session(outcome, session_id, controller, store, settings)


@router.post("/logout", response_model=SuccessResponse)
async def logout_user(
    session: BookingSession = Depends(get_current_session),
    store: SessionStore = Depends(get_session_store),
) -> Any:
    """
    End the session. The booking context is cleared and the token stops working.
    """
    outcome = session.controller.logout()
    store.discard(session.session_id)
    return SuccessResponse(message="Logged out", data={"step": outcome.step.value})
