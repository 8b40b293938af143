"""
RunResult model representing the outcome of one pipeline run (ephemeral).
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

RunStatus = Literal["NOT_STARTED", "RUNNING", "COMPLETED", "FAILED"]
ErrorKind = Literal["resource", "parse", "validation", "storage"]

NOT_STARTED: RunStatus = "NOT_STARTED"
RUNNING: RunStatus = "RUNNING"
COMPLETED: RunStatus = "COMPLETED"
FAILED: RunStatus = "FAILED"

TERMINAL_STATUSES: frozenset[str] = frozenset({COMPLETED, FAILED})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RunError(BaseModel):
    """
    Structured description of the error that halted a run.

    Attributes:
        kind: Error category (resource, parse, validation, storage)
        message: Human readable description
        chunk_index: 1-based index of the chunk being processed
        record_position: 1-based position of the offending record in the run
        line_number: Line number in the input file, for parse errors
        cause: Text of the underlying exception, if any
    """

    kind: ErrorKind
    message: str
    chunk_index: int | None = None
    record_position: int | None = None
    line_number: int | None = None
    cause: str | None = None


class RunResult(BaseModel):
    """
    Terminal status and counts of a run, returned to the trigger caller.

    Attributes:
        run_id: Uniqueness token distinguishing this run in logs
        job_name: Name of the job that ran
        status: NOT_STARTED, RUNNING, COMPLETED or FAILED
        total_read: Records pulled from the reader
        total_written: Records committed to the store
        filter_count: Records dropped by the processor
        chunk_count: Chunks committed
        started_at: When the run started
        ended_at: When the run reached a terminal status
        elapsed_seconds: Wall-clock duration of the run
        input_path: Resource the records were read from
        error: Error that halted the run (FAILED only)
    """

    run_id: str
    job_name: str = "importPersons"
    status: RunStatus = NOT_STARTED
    total_read: int = Field(0, ge=0)
    total_written: int = Field(0, ge=0)
    filter_count: int = Field(0, ge=0)
    chunk_count: int = Field(0, ge=0)
    started_at: datetime | None = None
    ended_at: datetime | None = None
    elapsed_seconds: float = Field(0.0, ge=0.0)
    input_path: str | None = None
    error: RunError | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == COMPLETED

    class Config:
        json_schema_extra = {
            "example": {
                "run_id": "20261018T143300Z-3f9a1c",
                "job_name": "importPersons",
                "status": "COMPLETED",
                "total_read": 1000,
                "total_written": 1000,
                "filter_count": 0,
                "chunk_count": 100,
                "elapsed_seconds": 1.284,
                "input_path": "data/people-1000.csv",
                "error": None,
            }
        }
