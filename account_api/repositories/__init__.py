"""
Persistence adapters.

Services depend on these repositories rather than on SQLAlchemy sessions.
"""

from .user_repository import UserRepository

__all__ = ["UserRepository"]
