"""
Error taxonomy for the person import pipeline.

Every error raised while a run is in progress derives from PipelineError and
is fatal to the chunk it occurs in and to the run as a whole. None of them is
retried or skipped.
"""

from person_etl.core.models.run_result import ErrorKind, RunError


class PipelineError(Exception):
    """Base class for errors that halt a run."""

    kind: ErrorKind

    def __init__(self, message: str, chunk_index: int | None = None):
        self.message = message
        self.chunk_index = chunk_index
        super().__init__(message)

    def to_run_error(self) -> RunError:
        """Describe this error for a RunResult."""
        cause = self.__cause__
        return RunError(
            kind=self.kind,
            message=self.message,
            chunk_index=self.chunk_index,
            record_position=getattr(self, "record_position", None),
            line_number=getattr(self, "line_number", None),
            cause=f"{type(cause).__name__}: {cause}" if cause is not None else None,
        )


class ResourceError(PipelineError):
    """Raised when the input resource cannot be opened or read."""

    kind: ErrorKind = "resource"

    def __init__(self, resource: str, message: str):
        self.resource = resource
        super().__init__(f"{resource}: {message}")


class ParseError(PipelineError):
    """Raised when a line cannot be tokenized into the configured fields."""

    kind: ErrorKind = "parse"

    def __init__(
        self,
        message: str,
        line: str | None = None,
        line_number: int | None = None,
        expected: int | None = None,
        actual: int | None = None,
    ):
        self.line = line
        self.line_number = line_number
        self.expected = expected
        self.actual = actual
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class ValidationError(PipelineError):
    """Raised when a record violates a processing precondition."""

    kind: ErrorKind = "validation"

    def __init__(
        self,
        field_name: str,
        message: str,
        record_position: int | None = None,
    ):
        self.field_name = field_name
        self.record_position = record_position
        super().__init__(f"{field_name}: {message}")


class StorageError(PipelineError):
    """Raised when a chunk cannot be persisted; the chunk is rolled back."""

    kind: ErrorKind = "storage"

    def __init__(self, chunk_index: int | None, cause: Exception, message: str | None = None):
        self.cause = cause
        super().__init__(
            message or f"Failed to persist chunk {chunk_index}: {cause}",
            chunk_index=chunk_index,
        )
        self.__cause__ = cause
