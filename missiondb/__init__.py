"""Interactive console for the moon mission and account database."""

from __future__ import annotations

from .config import ConfigurationError, DatabaseSettings
from .database import Database, DatabaseConnectionError, DatabaseError
from .sessions import AuthResult, Session

__all__ = [
    "AuthResult",
    "ConfigurationError",
    "Database",
    "DatabaseConnectionError",
    "DatabaseError",
    "DatabaseSettings",
    "Session",
]
