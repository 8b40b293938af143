"""
Core data models for the person import pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .person import PERSON_COLUMNS, PERSON_FIELD_NAMES, Person
from .run_result import (
    COMPLETED,
    FAILED,
    NOT_STARTED,
    RUNNING,
    RunError,
    RunResult,
    RunStatus,
)

__all__ = [
    "Person",
    "PERSON_COLUMNS",
    "PERSON_FIELD_NAMES",
    "RunError",
    "RunResult",
    "RunStatus",
    "NOT_STARTED",
    "RUNNING",
    "COMPLETED",
    "FAILED",
]
