"""
Core utilities shared across the account API.

This package hosts:
- configuration helpers (env vars, feature flags)
- password hashing and verification
- cross-cutting services such as logging setup and rate limit helpers

Domain and service modules depend on these primitives instead of reading the
environment or importing hashing libraries directly.
"""
