"""Database module."""

from db.cosmos_session import close_cosmos, get_database, is_cosmos_configured

__all__ = ["get_database", "close_cosmos", "is_cosmos_configured"]
