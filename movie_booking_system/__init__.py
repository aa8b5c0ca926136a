"""Movie Booking System: guided movie ticket booking on top of a booking backend."""

__version__ = "1.0.0"
