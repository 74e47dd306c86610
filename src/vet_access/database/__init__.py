"""
Database connection and session management.

This module provides async SQLAlchemy engine configuration, session management
and the transaction primitive used by the grant store.
"""

from .connection import (
    DatabaseConfig,
    check_connection,
    close_engine,
    create_engine,
    get_database_url,
    wait_for_database,
)
from .session import (
    SessionManager,
    cleanup_database,
    get_engine,
    get_session,
    get_session_manager,
    get_transaction,
    health_check,
    initialize_database,
    initialize_session_manager,
)
from .types import JSONType

__all__ = [
    # Connection utilities
    "DatabaseConfig",
    "create_engine",
    "get_database_url",
    "check_connection",
    "close_engine",
    "wait_for_database",
    # Session management
    "SessionManager",
    "initialize_session_manager",
    "get_session_manager",
    "get_engine",
    "get_session",
    "get_transaction",
    "health_check",
    "initialize_database",
    "cleanup_database",
    # Column types
    "JSONType",
]
