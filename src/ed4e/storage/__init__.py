"""
Storage layer for the workflow engine.

Provides:
- SQLite database for actor snapshots and the published roll log
"""

from src.ed4e.storage.database import Database, to_json, from_json, SCHEMA_VERSION

__all__ = [
    "Database",
    "to_json",
    "from_json",
    "SCHEMA_VERSION",
]
