"""
HTTP client for the external booking backend.
"""

import logging
from typing import Any, List, Optional, Type, TypeVar

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..schemas.booking import BookingCreateRequest, BookingCreatedResponse
from ..schemas.catalog import BackendModel, BackendSeat, Movie, MovieForm, Showtime
from ..utils.exceptions import BackendUnavailableError, BookingSubmissionError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BackendModel)


class BackendClient:
    """
    Thin async wrapper over the backend's REST API.

    Every failure (transport error, timeout, non-success status or a body
    that does not match the expected shape) surfaces as
    ``BackendUnavailableError``. No call is retried.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def list_movies(self) -> List[Movie]:
        return self._parse_list(Movie, await self._request("GET", "/movies"))

    async def list_showtimes(self) -> List[Showtime]:
        return self._parse_list(Showtime, await self._request("GET", "/showtimes"))

    async def list_seats(self) -> List[BackendSeat]:
        return self._parse_list(BackendSeat, await self._request("GET", "/seats"))

    async def create_booking(self, booking: BookingCreateRequest) -> BookingCreatedResponse:
        """
        Submit a booking.

        Raises:
            BookingSubmissionError: If the backend rejects the booking or
                answers without a booking id
        """
        try:
            body = await self._request("POST", "/bookings", json=booking.to_wire())
        except BackendUnavailableError as e:
            raise BookingSubmissionError(e.reason, status_code=e.status_code) from e

        try:
            created = BookingCreatedResponse.model_validate(body or {})
        except PydanticValidationError as e:
            raise BookingSubmissionError(f"Unexpected booking response: {e.error_count()} errors") from e

        if not created.is_confirmed:
            raise BookingSubmissionError("Backend returned no booking id")

        logger.info(f"Booking {created.booking_id} created for showtime {booking.showtime_id}")
        return created

    async def create_movie(self, form: MovieForm) -> Optional[Movie]:
        body = await self._request("POST", "/movies", json=form.model_dump(mode="json", by_alias=True))
        return Movie.model_validate(body) if isinstance(body, dict) else None

    async def update_movie(self, movie_id: int, form: MovieForm) -> None:
        payload = {"movieId": movie_id, **form.model_dump(mode="json", by_alias=True)}
        await self._request("PUT", f"/movies/{movie_id}", json=payload)

    async def delete_movie(self, movie_id: int) -> None:
        await self._request("DELETE", f"/movies/{movie_id}")

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {path} timed out")
            raise BackendUnavailableError(f"{method} {path} timed out") from e
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise BackendUnavailableError(f"{method} {path} failed: {e}") from e

        if response.is_error:
            logger.warning(f"{method} {path} returned {response.status_code}")
            raise BackendUnavailableError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise BackendUnavailableError(f"{method} {path} returned invalid JSON") from e

    @staticmethod
    def _parse_list(model: Type[ModelT], body: Any) -> List[ModelT]:
        if not isinstance(body, list):
            raise BackendUnavailableError(f"Expected a list of {model.__name__}, got {type(body).__name__}")
        try:
            return [model.model_validate(item) for item in body]
        except PydanticValidationError as e:
            raise BackendUnavailableError(f"Malformed {model.__name__} data: {e.error_count()} errors") from e
