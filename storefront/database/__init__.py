"""
Database Module
"""
from .connection import (
    init_database,
    close_database,
    get_session_factory,
    create_session_factory,
    session_scope,
)
from .models import Base

__all__ = [
    "init_database",
    "close_database",
    "get_session_factory",
    "create_session_factory",
    "session_scope",
    "Base",
]
