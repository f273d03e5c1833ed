"""Minimal RESTful account API: user records, password hashing and authentication."""

__version__ = "3.0.0"
