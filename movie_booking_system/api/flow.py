"""
Booking flow API endpoints.

Each action delegates to the session's flow controller. Rejected actions
are rendered as structured errors; the session itself is left as it was.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..config import Settings, get_settings
from ..models.flow import FlowStep
from ..schemas.flow import (
    FlowActionResponse,
    FlowStateResponse,
    MovieResponse,
    PaymentRequest,
    PaymentSummaryResponse,
    SelectMovieRequest,
    SelectShowtimeRequest,
    TicketResponse,
    ToggleSeatRequest,
)
from ..services.flow_controller import FlowOutcome, ViolationKind
from ..utils.dependencies import BookingSession, get_current_session
from ..utils.exceptions import (
    BackendUnavailableError,
    BookingSubmissionError,
    NotFoundError,
    PreconditionFailedError,
)

router = APIRouter(prefix="/flow", tags=["flow"])


def ensure_accepted(outcome: FlowOutcome) -> None:
    """Raise the error matching a violated outcome."""
    violation = outcome.violation
    if violation is None:
        return
    if violation.kind is ViolationKind.FETCH_FAILURE:
        raise BackendUnavailableError(violation.message)
    if violation.kind is ViolationKind.SUBMISSION_FAILURE:
        raise BookingSubmissionError(violation.message)
    raise PreconditionFailedError(violation.message, step=outcome.step.value)


def _state(session: BookingSession, settings: Settings) -> FlowStateResponse:
    return FlowStateResponse.from_controller(
        session.controller,
        currency_symbol=settings.currency_symbol,
        time_format=settings.showtime_time_format,
    )


def _respond(outcome: FlowOutcome, session: BookingSession, settings: Settings) -> FlowActionResponse:
    ensure_accepted(outcome)
    return FlowActionResponse.from_outcome(outcome, _state(session, settings))


@router.get("", response_model=FlowStateResponse)
async def get_flow_state(
    session: BookingSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """
    Get the current step, booking context and step data of the session.
    """
    return _state(session, settings)


@router.get("/movies", response_model=List[MovieResponse])
async def list_movies(
    search: Optional[str] = Query(None, max_length=100, description="Filter by title or genre"),
    session: BookingSession = Depends(get_current_session),
):
    """
    List the loaded catalog, optionally filtered by title or genre.
    """
    return [MovieResponse.model_validate(movie) for movie in session.controller.search_movies(search or "")]


@router.post("/movies/reload", response_model=FlowActionResponse)
async def reload_movies(
    session: BookingSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """Fetch the catalog again, e.g. after a failed load."""
    outcome = await session.controller.load_movies()
    return _respond(outcome, session, settings)


@router.post("/movie", response_model=FlowActionResponse)
async def select_movie(
    request: SelectMovieRequest,
    session: BookingSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """
    Choose a movie and move to seat selection.

    The first showtime of the movie becomes active and its seats are loaded.
    """
    outcome = await session.controller.select_movie(request.movie_id)
    return _respond(outcome, session, settings)


@router.post("/showtime", response_model=FlowActionResponse)
async def select_showtime(
    request: SelectShowtimeRequest,
    session: BookingSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """Switch the active showtime. The seat selection is cleared."""
    outcome = await session.controller.select_showtime(request.showtime_id)
    return _respond(outcome, session, settings)


@router.post("/seats/toggle", response_model=FlowActionResponse)
async def toggle_seat(
    request: ToggleSeatRequest,
    session: BookingSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """
    Select or deselect a seat.

    Toggling an occupied seat is ignored and answered with ``accepted: false``.
    """
    outcome = session.controller.toggle_seat(request.label.upper())
    return _respond(outcome, session, settings)


@router.post("/seats/reload", response_model=FlowActionResponse)
async def reload_seats(
    session: BookingSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """Fetch the seats of the active showtime again."""
    outcome = await session.controller.reload_seats()
    return _respond(outcome, session, settings)


@router.post("/seats/confirm", response_model=FlowActionResponse)
async def confirm_seats(
    session: BookingSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """Continue to payment with the selected seats."""
    outcome = session.controller.confirm_seats()
    return _respond(outcome, session, settings)


@router.get("/payment", response_model=PaymentSummaryResponse)
async def get_payment_summary(
    session: BookingSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """Get the order summary of the payment step."""
    if session.controller.step is not FlowStep.PAYMENT:
        raise PreconditionFailedError("No payment in progress", step=session.controller.step.value)
    return _state(session, settings).payment


@router.post("/payment", response_model=FlowActionResponse)
async def submit_payment(
    request: Optional[PaymentRequest] = None,
    session: BookingSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """
    Submit the booking to the backend.

    On success the session moves to the ticket step. On failure it stays on
    payment and the same request can simply be sent again.
    """
    payment_method = request.payment_method if request else None
    outcome = await session.controller.submit_payment(payment_method)
    return _respond(outcome, session, settings)


@router.post("/back", response_model=FlowActionResponse)
async def go_back(
    session: BookingSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """Return to the previous step without discarding entered data."""
    outcome = session.controller.back()
    return _respond(outcome, session, settings)


@router.post("/return-home", response_model=FlowActionResponse)
async def return_home(
    session: BookingSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """Leave the ticket and start a fresh booking."""
    outcome = await session.controller.return_home()
    return _respond(outcome, session, settings)


@router.get("/ticket", response_model=TicketResponse)
async def get_ticket(
    session: BookingSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """Get the ticket of the completed booking."""
    ticket = _state(session, settings).ticket
    if ticket is None:
        raise NotFoundError("No ticket has been issued in this session", resource_type="ticket")
    return ticket
