"""Database utilities - engine and sessions."""

from src.gatehouse.core.db.engine import create_engine, dispose_engine, get_engine, init_models
from src.gatehouse.core.db.session import get_session, get_session_factory

__all__ = [
    "create_engine",
    "dispose_engine",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_models",
]
