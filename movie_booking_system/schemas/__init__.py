"""Pydantic schemas for the Movie Booking System."""
