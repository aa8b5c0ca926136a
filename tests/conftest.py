import asyncio
import copy
import json
from collections import defaultdict

import httpx
import pytest
import pytest_asyncio

from movie_booking_system.services.backend_client import BackendClient
from movie_booking_system.services.flow_controller import FlowController
from movie_booking_system.services.seat_service import BookedSeatLedger, SeatService

from tests.util_constant import BACKEND_URL, PATRON_EMAIL, PATRON_PASSWORD

MOVIES = [
    {
        "movieId": 1,
        "title": "Inception",
        "genre": "Sci-Fi",
        "durationMin": 120,
        "rating": "PG-13",
        "releaseDate": "2010-07-16T00:00:00",
        "coverImageUrl": None,
        "description": "A thief who steals corporate secrets through dream-sharing.",
    },
    {
        "movieId": 2,
        "title": "The Notebook",
        "genre": "Romance",
        "durationMin": 123,
        "rating": "PG-13",
        "releaseDate": "2004-06-25",
        "coverImageUrl": "https://img.test/notebook.jpg",
        "description": None,
    },
    {
        "movieId": 3,
        "title": "Unscheduled",
        "genre": "Drama",
        "durationMin": 95,
        "rating": "R",
        "releaseDate": None,
    },
]

SHOWTIMES = [
    {
        "showtimeId": 10,
        "movieId": 1,
        "theaterId": 1,
        "screenNumber": 1,
        "showDateTime": "2026-11-01T19:30:00",
        "basePrice": 12.50,
    },
    {
        "showtimeId": 11,
        "movieId": 1,
        "theaterId": 1,
        "screenNumber": 2,
        "showDateTime": "2026-11-01T22:00:00",
        "basePrice": 10.0,
    },
    {
        "showtimeId": 20,
        "movieId": 2,
        "theaterId": 1,
        "screenNumber": 1,
        "showDateTime": "2026-11-02T18:00:00",
        "basePrice": 9.0,
    },
]

# Screen (1, 1) has 25 seats, screen (1, 2) has 12.
SEATS = [
    {"seatId": 100 + n, "theaterId": 1, "screenNumber": 1, "seatNumber": n, "seatType": "standard"}
    for n in range(1, 26)
] + [
    {"seatId": 200 + n, "theaterId": 1, "screenNumber": 2, "seatNumber": n, "seatType": "standard"}
    for n in range(1, 13)
]


class FakeBackend:
    """In-memory booking backend served through httpx.MockTransport."""

    def __init__(self):
        self.movies = copy.deepcopy(MOVIES)
        self.showtimes = copy.deepcopy(SHOWTIMES)
        self.seats = copy.deepcopy(SEATS)
        self.requests = []
        self.failures = {}
        self.booking_replies = []
        self.next_booking_id = 42
        self._gates = defaultdict(list)

    def fail(self, path: str, status_code: int = 500) -> None:
        self.failures[path] = status_code

    def recover(self, path: str) -> None:
        self.failures.pop(path, None)

    def hold(self, path: str) -> asyncio.Event:
        """Hold the next request to ``path`` until the returned event is set."""
        gate = asyncio.Event()
        self._gates[path].append(gate)
        return gate

    def requests_to(self, method: str, path: str) -> list:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        method = request.method

        if self._gates[path]:
            await self._gates[path].pop(0).wait()

        if path in self.failures:
            return httpx.Response(self.failures[path], json={"title": "Internal Server Error"})

        if path == "/api/movies":
            if method == "POST":
                created = {"movieId": 100 + len(self.movies), **json.loads(request.content)}
                self.movies.append(created)
                return httpx.Response(201, json=created)
            return httpx.Response(200, json=self.movies)

        if path == "/api/showtimes":
            return httpx.Response(200, json=self.showtimes)

        if path == "/api/seats":
            return httpx.Response(200, json=self.seats)

        if path == "/api/bookings":
            if self.booking_replies:
                status_code, body = self.booking_replies.pop(0)
                return httpx.Response(status_code, json=body)
            return httpx.Response(201, json={"bookingId": self.next_booking_id})

        if path.startswith("/api/movies/"):
            movie_id = int(path.rsplit("/", 1)[1])
            index = next((i for i, m in enumerate(self.movies) if m["movieId"] == movie_id), None)
            if index is None:
                return httpx.Response(404)
            if method == "PUT":
                self.movies[index] = json.loads(request.content)
            elif method == "DELETE":
                del self.movies[index]
            return httpx.Response(204)

        return httpx.Response(404)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest_asyncio.fixture
async def client(backend):
    async with BackendClient(BACKEND_URL, transport=httpx.MockTransport(backend.handler)) as client:
        yield client


@pytest.fixture
def seat_service():
    """Seat service without simulated occupancy, so every seat starts available."""
    return SeatService(row_length=10, ledger=BookedSeatLedger())


@pytest.fixture
def controller(client, seat_service):
    return FlowController(client, seat_service)


@pytest_asyncio.fixture
async def patron(controller):
    """A controller logged in as a patron, on the movies step."""
    await controller.login(PATRON_EMAIL, PATRON_PASSWORD)
    return controller


@pytest_asyncio.fixture
async def choosing_seats(patron):
    """A patron who picked Inception; showtime 10 (screen 1, $12.50) is active."""
    await patron.select_movie(1)
    return patron
