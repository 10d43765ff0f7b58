"""Database engine, sessions and schema initialization."""

from campus_complaints.db.session import create_engine, create_session_factory, init_db

__all__ = ["create_engine", "create_session_factory", "init_db"]
