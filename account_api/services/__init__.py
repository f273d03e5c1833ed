"""
High-level use cases for the account API.

Each service module orchestrates repositories and core helpers to implement
business rules (register, authenticate, update a user, etc.).

Routers (FastAPI endpoints) call these services instead of touching the
database sessions directly.
"""
