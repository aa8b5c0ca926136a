"""
Flow controller: the guarded state machine behind the booking wizard.

The controller owns the booking context of one patron session. Every
change to it goes through one of the named actions below; each action
checks its guard first and answers with a ``FlowOutcome`` instead of
raising, so the presentation layer can render a rejected action as a
disabled control or an inline message.
"""

import hmac
import logging
import re
from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from ..models.booking_context import BookingContext
from ..models.flow import FlowStep, FlowTrigger, next_step
from ..models.seat import SeatGrid
from ..models.ticket import PaymentSummary, Ticket
from ..schemas.booking import BookingCreateRequest
from ..schemas.catalog import Movie, Showtime
from ..utils.exceptions import BackendUnavailableError, BookingSubmissionError
from ..utils.logging_config import log_business_event
from .backend_client import BackendClient
from .pricing_service import PricingService, compute_total
from .seat_service import SeatService
from .showtime_service import filter_by_movie, find_showtime, format_showtime, select_default

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class ViolationKind(str, Enum):
    """Why an action did not take effect."""
    PRECONDITION = "precondition"
    FETCH_FAILURE = "fetch_failure"
    SUBMISSION_FAILURE = "submission_failure"


@dataclass(frozen=True)
class Violation:
    kind: ViolationKind
    message: str


@dataclass(frozen=True)
class FlowOutcome:
    """
    Result of a flow action.

    ``accepted`` is true only when the action took full effect. ``step`` is
    the step the flow is on afterwards, which may have changed even when a
    follow-up load failed (for example a chosen movie whose showtimes could
    not be fetched).
    """

    accepted: bool
    step: FlowStep
    violation: Optional[Violation] = None
    discarded: bool = False


class FlowController:
    """State machine for one patron's booking session."""

    def __init__(
        self,
        client: BackendClient,
        seat_service: Optional[SeatService] = None,
        pricing: Optional[PricingService] = None,
        *,
        user_id: int = 1,
        payment_method: str = "credit",
        payment_status: str = "completed",
        admin_email: str = "admin@theater.com",
        admin_password: str = "admin123",
        min_password_length: int = 6,
        showtime_label_format: str = "%Y-%m-%d %H:%M",
    ):
        self.client = client
        self.seat_service = seat_service or SeatService()
        self.pricing = pricing or PricingService()
        self.user_id = user_id
        self.payment_method = payment_method
        self.payment_status = payment_status
        self._admin_email = admin_email
        self._admin_password = admin_password
        self._min_password_length = min_password_length
        self._label_format = showtime_label_format

        self.step = FlowStep.LOGIN
        self.user_email: Optional[str] = None
        self.is_admin = False
        self.movies: Tuple[Movie, ...] = ()
        self.errors: Dict[FlowStep, str] = {}
        self.last_payload: Optional[BookingCreateRequest] = None
        self._pending: Counter = Counter()
        self._epoch = 0
        self._clear_booking()

    # Read access

    @property
    def loading(self) -> List[str]:
        """Names of backend loads in flight for the current login."""
        return sorted(
            name for (name, epoch), count in self._pending.items() if epoch == self._epoch and count > 0
        )

    def is_loading(self, name: str) -> bool:
        return self._pending[(name, self._epoch)] > 0

    @property
    def can_confirm_seats(self) -> bool:
        return (
            self.step is FlowStep.SEATS
            and not self.is_loading("seats")
            and not self.context.missing_for(FlowStep.PAYMENT)
        )

    def search_movies(self, term: str = "") -> List[Movie]:
        """Loaded movies whose title or genre contains ``term``."""
        return [movie for movie in self.movies if movie.matches(term)]

    def payment_summary(self) -> PaymentSummary:
        return self.pricing.summarize_payment(self.context.total)

    # Login

    async def login(self, email: str, password: str) -> FlowOutcome:
        """Check credentials and enter the movie list, or the admin panel."""
        if self.step is not FlowStep.LOGIN:
            return self._reject("Already logged in")
        problem = self._credential_problem(email, password)
        if problem:
            return self._reject(problem)

        is_admin = (
            email.lower() == self._admin_email.lower()
            and hmac.compare_digest(password.encode(), self._admin_password.encode())
        )
        return await self._start_session(email, is_admin)

    async def register(self, name: str, email: str, password: str, confirm_password: str) -> FlowOutcome:
        """Create a patron account (stubbed) and enter the movie list."""
        if self.step is not FlowStep.LOGIN:
            return self._reject("Already logged in")
        if not name.strip():
            return self._reject("Please enter your name")
        problem = self._credential_problem(email, password)
        if problem:
            return self._reject(problem)
        if password != confirm_password:
            return self._reject("Passwords do not match")
        return await self._start_session(email, is_admin=False)

    def _credential_problem(self, email: str, password: str) -> Optional[str]:
        if not EMAIL_PATTERN.match(email or ""):
            return "Please enter a valid email address"
        if len(password or "") < self._min_password_length:
            return f"Password must be at least {self._min_password_length} characters"
        return None

    async def _start_session(self, email: str, is_admin: bool) -> FlowOutcome:
        self.user_email = email
        self.is_admin = is_admin
        self.context = BookingContext.reset()
        if is_admin:
            return self._transition(FlowTrigger.ADMIN_LOGIN)

        outcome = self._transition(FlowTrigger.LOGIN)
        loaded = await self.load_movies()
        return loaded if loaded.violation else outcome

    # Movies

    async def load_movies(self) -> FlowOutcome:
        """Fetch the catalog for the movies step."""
        if self.step is not FlowStep.MOVIES:
            return self._reject("Movies can only be loaded on the movies step")
        if self.is_loading("movies"):
            return self._reject("Movies are still loading")

        epoch = self._epoch
        self._pending[("movies", epoch)] += 1
        try:
            movies = await self.client.list_movies()
        except BackendUnavailableError as e:
            return self._fetch_failed(FlowStep.MOVIES, "Unable to load movies", e)
        finally:
            self._pending[("movies", epoch)] -= 1

        if epoch != self._epoch:
            return self._discard("movie list")

        self.movies = tuple(movies)
        self.errors.pop(FlowStep.MOVIES, None)
        logger.info(f"Loaded {len(self.movies)} movies")
        return FlowOutcome(True, self.step)

    async def select_movie(self, movie_id: int) -> FlowOutcome:
        """Choose a movie and move on to showtime and seat selection."""
        if self.step is not FlowStep.MOVIES:
            return self._reject("A movie can only be chosen on the movies step")
        if self.is_loading("movies"):
            return self._reject("Movies are still loading")
        movie = next((m for m in self.movies if m.movie_id == movie_id), None)
        if movie is None:
            return self._reject(f"Movie {movie_id} is not in the catalog")

        current = self.context.movie
        if current is not None and current.movie_id == movie_id and self.active_showtime is not None:
            # Same movie again: keep the showtime and seats already chosen.
            self.context = self.context.advance(FlowStep.SEATS)
            return self._transition(FlowTrigger.MOVIE_CHOSEN)

        self.context = self.context.advance(
            FlowStep.SEATS,
            movie=movie,
            showtime_id=None,
            showtime_label=None,
            seats=(),
            seat_ids=(),
            total=Decimal("0"),
        )
        self.showtimes = ()
        self.active_showtime = None
        self.grid = SeatGrid()
        outcome = self._transition(FlowTrigger.MOVIE_CHOSEN)
        loaded = await self._load_showtimes(movie)
        return loaded if loaded.violation or loaded.discarded else outcome

    # Showtimes and seats

    async def _load_showtimes(self, movie: Movie) -> FlowOutcome:
        epoch = self._epoch
        self._pending[("showtimes", epoch)] += 1
        try:
            showtimes = await self.client.list_showtimes()
        except BackendUnavailableError as e:
            return self._fetch_failed(FlowStep.SEATS, "Unable to load showtimes", e)
        finally:
            self._pending[("showtimes", epoch)] -= 1

        if epoch != self._epoch or self.context.movie is None or self.context.movie.movie_id != movie.movie_id:
            return self._discard(f"showtimes of movie {movie.movie_id}")

        self.showtimes = filter_by_movie(showtimes, movie.movie_id)
        self.errors.pop(FlowStep.SEATS, None)
        default = select_default(self.showtimes)
        if default is None:
            logger.info(f"Movie {movie.movie_id} has no showtimes")
            return FlowOutcome(True, self.step)
        return await self._activate_showtime(default)

    async def select_showtime(self, showtime_id: int) -> FlowOutcome:
        """Switch the active showtime. Any seat selection is cleared."""
        if self.step is not FlowStep.SEATS:
            return self._reject("A showtime can only be chosen on the seats step")
        if self.is_loading("showtimes"):
            return self._reject("Showtimes are still loading")
        showtime = find_showtime(self.showtimes, showtime_id)
        if showtime is None:
            return self._reject(f"Showtime {showtime_id} is not available for this movie")
        if self.active_showtime is not None and self.active_showtime.showtime_id == showtime_id:
            return FlowOutcome(True, self.step)
        return await self._activate_showtime(showtime)

    async def reload_seats(self) -> FlowOutcome:
        """
        Fetch the seat list of the active showtime again.

        The current grid and selection stay in place until the new list
        arrives; seats still free keep their selection. A failed fetch
        leaves both untouched.
        """
        if self.step is not FlowStep.SEATS or self.active_showtime is None:
            return self._reject("No showtime is active")
        showtime = self.active_showtime
        seats = await self._fetch_seats(showtime)
        if isinstance(seats, FlowOutcome):
            return seats

        grid = self.seat_service.grid_for(showtime, seats)
        for label in self.grid.selected_labels:
            seat = grid.find(label)
            if seat is not None and not seat.is_occupied:
                grid = grid.toggle(label)
        dropped = set(self.grid.selected_labels) - set(grid.selected_labels)
        if dropped:
            logger.info(f"Seats {', '.join(sorted(dropped))} were taken and left the selection")
        self.grid = grid
        self.context = self.context.merge(
            seats=grid.selected_labels,
            seat_ids=grid.selected_ids,
            total=compute_total(grid.selected, showtime.base_price),
        )
        self.errors.pop(FlowStep.SEATS, None)
        return FlowOutcome(True, self.step)

    async def _activate_showtime(self, showtime: Showtime) -> FlowOutcome:
        self.active_showtime = showtime
        self.grid = SeatGrid()
        self.context = self.context.merge(
            showtime_id=showtime.showtime_id,
            showtime_label=format_showtime(showtime, self._label_format),
            seats=(),
            seat_ids=(),
            total=compute_total(0, showtime.base_price),
        )
        logger.debug(f"Showtime {showtime.showtime_id} active, selection cleared")

        seats = await self._fetch_seats(showtime)
        if isinstance(seats, FlowOutcome):
            return seats
        self.grid = self.seat_service.grid_for(showtime, seats)
        self.errors.pop(FlowStep.SEATS, None)
        return FlowOutcome(True, self.step)

    async def _fetch_seats(self, showtime: Showtime):
        """The backend seat list, or the outcome to answer with instead."""
        epoch = self._epoch
        self._pending[("seats", epoch)] += 1
        try:
            seats = await self.client.list_seats()
        except BackendUnavailableError as e:
            return self._fetch_failed(FlowStep.SEATS, "Unable to load seats", e)
        finally:
            self._pending[("seats", epoch)] -= 1

        if (
            epoch != self._epoch
            or self.active_showtime is None
            or self.active_showtime.showtime_id != showtime.showtime_id
        ):
            return self._discard(f"seats of showtime {showtime.showtime_id}")
        return seats

    def toggle_seat(self, label: str) -> FlowOutcome:
        """Select or deselect a seat. Occupied seats are ignored."""
        if self.step is not FlowStep.SEATS:
            return self._reject("Seats can only be changed on the seats step")
        if self.is_loading("seats") or self.is_loading("showtimes"):
            return self._reject("Seats are still loading")
        seat = self.grid.find(label)
        if seat is None:
            return self._reject(f"Seat {label} is not part of this showtime")
        if seat.is_occupied:
            return FlowOutcome(False, self.step)

        self.grid = self.grid.toggle(label)
        self.context = self.context.merge(
            seats=self.grid.selected_labels,
            seat_ids=self.grid.selected_ids,
            total=compute_total(self.grid.selected, self.active_showtime.base_price),
        )
        return FlowOutcome(True, self.step)

    def confirm_seats(self) -> FlowOutcome:
        """Lock in the selection and go to payment."""
        if self.step is not FlowStep.SEATS:
            return self._reject("Seats can only be confirmed on the seats step")
        if self.is_loading("seats") or self.is_loading("showtimes"):
            return self._reject("Seats are still loading")
        missing = self.context.missing_for(FlowStep.PAYMENT)
        if "seats" in missing:
            return self._reject("Select at least one seat")
        if missing:
            return self._reject(f"Cannot continue to payment without {', '.join(missing)}")

        self.context = self.context.advance(FlowStep.PAYMENT)
        return self._transition(FlowTrigger.SEATS_CONFIRMED)

    # Payment and ticket

    def build_payment_payload(self, payment_method: Optional[str] = None) -> BookingCreateRequest:
        """The booking request for the current context."""
        return BookingCreateRequest(
            user_id=self.user_id,
            showtime_id=self.context.showtime_id,
            total_amount=self.payment_summary().total,
            payment_status=self.payment_status,
            payment_method=payment_method or self.payment_method,
            seat_ids=list(self.context.seat_ids),
        )

    async def submit_payment(self, payment_method: Optional[str] = None) -> FlowOutcome:
        """
        Submit the booking and, once the backend confirms it, issue the ticket.

        On failure the flow stays on the payment step with the context
        untouched, so submitting again sends the identical payload.
        """
        if self.step is not FlowStep.PAYMENT:
            return self._reject("Payment can only be submitted on the payment step")
        if self.is_loading("booking"):
            return self._reject("A payment is already being processed")
        missing = self.context.missing_for(FlowStep.TICKET)
        if missing:
            return self._reject(f"Cannot pay without {', '.join(missing)}")

        payload = self.build_payment_payload(payment_method)
        self.last_payload = payload
        epoch = self._epoch
        self._pending[("booking", epoch)] += 1
        try:
            created = await self.client.create_booking(payload)
        except BookingSubmissionError as e:
            self.errors[FlowStep.PAYMENT] = e.reason
            logger.warning(f"Booking submission failed: {e.reason}")
            return FlowOutcome(
                False,
                self.step,
                Violation(ViolationKind.SUBMISSION_FAILURE, "Payment failed. Please try again."),
            )
        finally:
            self._pending[("booking", epoch)] -= 1

        self.seat_service.record_booking(payload.showtime_id, payload.seat_ids)
        if epoch != self._epoch or self.step is not FlowStep.PAYMENT:
            logger.warning(f"Booking {created.booking_id} confirmed after the session left the payment step")
            return self._discard(f"booking {created.booking_id}")
        return self.complete_booking(created.booking_id, payment_method=payload.payment_method)

    def complete_booking(
        self,
        booking_id: Union[int, str],
        payment_method: Optional[str] = None,
    ) -> FlowOutcome:
        """Enter the ticket step for a booking the backend has accepted."""
        if self.step is not FlowStep.PAYMENT:
            return self._reject("Only a payment in progress can be completed")
        if booking_id in (None, "", 0):
            return self._reject("A booking id is required to issue a ticket")

        summary = self.payment_summary()
        self.context = self.context.advance(FlowStep.TICKET)
        self.ticket = Ticket(
            booking_id=str(booking_id),
            movie_title=self.context.movie.title,
            showtime_id=self.context.showtime_id,
            showtime_label=self.context.showtime_label or "",
            seats=self.context.seats,
            subtotal=summary.subtotal,
            booking_fee=summary.booking_fee,
            total_paid=summary.total,
            payment_method=payment_method or self.payment_method,
        )
        self.errors.pop(FlowStep.PAYMENT, None)
        log_business_event(
            "booking_completed",
            {
                "booking_id": self.ticket.booking_id,
                "showtime_id": self.ticket.showtime_id,
                "seat_count": len(self.ticket.seats),
                "total_paid": str(self.ticket.total_paid),
            },
            user_id=str(self.user_id),
        )
        return self._transition(FlowTrigger.PAYMENT_CONFIRMED)

    # Navigation

    def back(self) -> FlowOutcome:
        """Go to the previous step, keeping everything entered so far."""
        target = next_step(self.step, FlowTrigger.BACK)
        if target is self.step:
            return FlowOutcome(True, self.step)
        return self._transition(FlowTrigger.BACK)

    async def return_home(self) -> FlowOutcome:
        """Leave the ticket for a fresh booking with a freshly loaded catalog."""
        if self.step is not FlowStep.TICKET:
            return self._reject("Return to movies is only offered on the ticket step")
        self._clear_booking()
        outcome = self._transition(FlowTrigger.RETURN_HOME)
        loaded = await self.load_movies()
        return loaded if loaded.violation else outcome

    def logout(self) -> FlowOutcome:
        """End the session from any step."""
        if self.step is FlowStep.LOGIN:
            return FlowOutcome(True, self.step)
        outcome = self._transition(FlowTrigger.LOGOUT)
        self._epoch += 1
        # Loads of the ended login finish unobserved.
        self._pending = +self._pending
        self._clear_booking()
        self.movies = ()
        self.errors = {}
        self.user_email = None
        self.is_admin = False
        return outcome

    # Internals

    def _clear_booking(self) -> None:
        self.context = BookingContext.reset()
        self.showtimes: Tuple[Showtime, ...] = ()
        self.active_showtime: Optional[Showtime] = None
        self.grid = SeatGrid()
        self.ticket: Optional[Ticket] = None
        self.last_payload = None
        for step in (FlowStep.SEATS, FlowStep.PAYMENT):
            self.errors.pop(step, None)

    def _transition(self, trigger: FlowTrigger) -> FlowOutcome:
        target = next_step(self.step, trigger)
        if target is None:
            return self._reject(f"{trigger.value} is not allowed from {self.step.value}")
        previous, self.step = self.step, target
        log_business_event(
            "flow_transition",
            {"from_step": previous.value, "to_step": target.value, "trigger": trigger.value},
            user_id=str(self.user_id),
        )
        return FlowOutcome(True, self.step)

    def _reject(self, message: str) -> FlowOutcome:
        logger.info(f"Rejected on {self.step.value}: {message}")
        return FlowOutcome(False, self.step, Violation(ViolationKind.PRECONDITION, message))

    def _fetch_failed(self, step: FlowStep, message: str, exc: BackendUnavailableError) -> FlowOutcome:
        self.errors[step] = message
        logger.warning(f"{message}: {exc.reason}")
        return FlowOutcome(False, self.step, Violation(ViolationKind.FETCH_FAILURE, message))

    def _discard(self, what: str) -> FlowOutcome:
        logger.debug(f"Discarding stale response for {what}")
        return FlowOutcome(False, self.step, discarded=True)
