"""Hostel room allotment service."""

__version__ = "0.1.0"
