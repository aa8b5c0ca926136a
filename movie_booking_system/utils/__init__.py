"""Utility helpers for the Movie Booking System."""
