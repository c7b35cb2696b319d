"""Booking validation and creation engine."""

__version__ = "0.1.0"
