"""
PostgreSQL access for the person table.
"""

from .connection import DatabaseConnectionPool
from .person_repository import DEFAULT_TABLE, PersonRepository

__all__ = [
    "DatabaseConnectionPool",
    "DEFAULT_TABLE",
    "PersonRepository",
]
