"""Business logic services for the Movie Booking System."""

from .backend_client import BackendClient
from .catalog_service import CatalogService
from .flow_controller import FlowController, FlowOutcome, Violation, ViolationKind
from .pricing_service import PricingService, compute_total
from .seat_service import SeatService, SeededOccupancy, BookedSeatLedger, build_grid
from .session_store import SessionStore, get_session_store

__all__ = [
    "BackendClient",
    "CatalogService",
    "FlowController",
    "FlowOutcome",
    "Violation",
    "ViolationKind",
    "PricingService",
    "compute_total",
    "SeatService",
    "SeededOccupancy",
    "BookedSeatLedger",
    "build_grid",
    "SessionStore",
    "get_session_store",
]
