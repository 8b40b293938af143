"""
Import persons job.

Assembles reader → processor → writer from settings and launches one
chunked run per call, turning pipeline errors into a FAILED RunResult.
"""

import secrets
import time
from typing import Callable

from person_etl.batch.chunk_runner import ChunkListener, ChunkRunner
from person_etl.batch.processors import BaseItemProcessor, PersonProcessor
from person_etl.batch.readers import (
    BaseItemReader,
    DelimitedLineTokenizer,
    FlatFileItemReader,
    PersonFieldSetMapper,
)
from person_etl.batch.writers import BaseItemWriter, PersonWarehouseWriter
from person_etl.config import PipelineSettings
from person_etl.core.errors import PipelineError
from person_etl.core.models import Person, RunResult
from person_etl.core.models.run_result import TERMINAL_STATUSES, utcnow
from person_etl.observability import metrics
from person_etl.observability.logger import get_logger, log_operation
from person_etl.warehouse.connection import DatabaseConnectionPool

logger = get_logger(__name__)


def new_run_id() -> str:
    """Timestamp-based token distinguishing runs in logs and results."""
    return f"{utcnow().strftime('%Y%m%dT%H%M%S%fZ')}-{secrets.token_hex(3)}"


class LoggingChunkListener(ChunkListener):
    """Logs and meters each chunk of a run."""

    def __init__(self, job_name: str, run_id: str):
        self.job_name = job_name
        self.run_id = run_id
        self._chunk_start: float | None = None

    def before_chunk(self, chunk_index: int) -> None:
        self._chunk_start = time.perf_counter()

    def after_chunk(self, chunk_index: int, written: int) -> None:
        if not written:
            return
        duration = time.perf_counter() - self._chunk_start if self._chunk_start else None
        metrics.record_chunk(self.job_name, committed=True, duration_seconds=duration)
        logger.debug(
            f"Committed chunk {chunk_index}",
            extra={"run_id": self.run_id, "chunk_index": chunk_index, "written": written},
        )

    def on_chunk_error(self, chunk_index: int, error: PipelineError) -> None:
        # chunk_index is 0 when the reader or writer failed to open
        if chunk_index > 0:
            metrics.record_chunk(self.job_name, committed=False)
        metrics.record_error(self.job_name, error.kind)


class ImportPersonsJob:
    """
    Imports persons from a delimited file into the warehouse.

    Flow:
    1. Open the input and skip the header
    2. Read up to chunk_size persons
    3. Uppercase first and last names
    4. Insert the chunk in one transaction
    5. Repeat until the input is exhausted
    """

    def __init__(
        self,
        reader_factory: Callable[[], BaseItemReader],
        writer: BaseItemWriter,
        processor: BaseItemProcessor | Callable[[Person], Person | None] | None = None,
        chunk_size: int = 10,
        job_name: str = "importPersons",
        input_path: str | None = None,
    ):
        """
        Initialize job.

        Args:
            reader_factory: Builds a fresh reader for each run
            writer: Chunk writer shared by runs
            processor: Record processor or plain function (defaults to PersonProcessor)
            chunk_size: Records per chunk
            job_name: Name used in results, logs and metrics
            input_path: Input resource reported in results
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")

        self.reader_factory = reader_factory
        self.writer = writer
        self.processor = processor or PersonProcessor()
        self.chunk_size = chunk_size
        self.job_name = job_name
        self.input_path = input_path

    @classmethod
    def from_settings(
        cls,
        settings: PipelineSettings,
        pool: DatabaseConnectionPool,
    ) -> "ImportPersonsJob":
        """
        Wire the job from settings.

        Args:
            settings: Resolved pipeline settings
            pool: Open database connection pool

        Returns:
            Configured ImportPersonsJob

        Raises:
            ValueError: If the tokenizer names do not bind to Person fields
        """
        tokenizer = DelimitedLineTokenizer(
            names=settings.tokenizer.names,
            delimiter=settings.tokenizer.delimiter,
            strict=settings.tokenizer.strict,
            quote_character=settings.tokenizer.quote_character,
        )
        mapper = PersonFieldSetMapper(tokenizer.names)

        def reader_factory() -> BaseItemReader:
            return FlatFileItemReader(
                settings.input_path,
                tokenizer=tokenizer,
                mapper=mapper,
                lines_to_skip=settings.lines_to_skip,
                encoding=settings.encoding,
            )

        writer = PersonWarehouseWriter(
            pool,
            table=settings.database.table,
            create_table=settings.create_table,
        )

        return cls(
            reader_factory=reader_factory,
            writer=writer,
            chunk_size=settings.chunk_size,
            job_name=settings.job_name,
            input_path=settings.input_path,
        )

    def launch(self, run_id: str | None = None) -> RunResult:
        """
        Run the job once.

        Args:
            run_id: Run identifier (generated when omitted)

        Returns:
            RunResult with status COMPLETED, or FAILED with the error and the
            counts reached before it

        Raises:
            Exception: Errors outside the pipeline taxonomy propagate after
                the run is marked FAILED
        """
        run_id = run_id or new_run_id()
        runner = ChunkRunner(
            reader=self.reader_factory(),
            processor=self.processor,
            writer=self.writer,
            chunk_size=self.chunk_size,
            listeners=[LoggingChunkListener(self.job_name, run_id)],
            run_id=run_id,
            input_path=self.input_path,
        )

        try:
            with log_operation(
                f"Job {self.job_name}",
                logger=logger,
                run_id=run_id,
                input_path=self.input_path,
                chunk_size=self.chunk_size,
            ) as operation:
                try:
                    runner.run()
                except PipelineError as e:
                    operation.extra_fields.update(
                        error_kind=e.kind,
                        chunk_index=e.chunk_index,
                        record_position=getattr(e, "record_position", None),
                        line_number=getattr(e, "line_number", None),
                    )
                    raise
        except PipelineError:
            # Logged by log_operation; reported through the FAILED result
            pass
        finally:
            if runner.status in TERMINAL_STATUSES:
                metrics.record_run(
                    self.job_name,
                    runner.status,
                    runner.total_read,
                    runner.total_written,
                    runner.filter_count,
                    runner.elapsed_seconds,
                )

        result = runner.result().model_copy(update={"job_name": self.job_name})
        logger.info(
            f"Run {run_id} finished with status {result.status}",
            extra={
                "run_id": run_id,
                "status": result.status,
                "total_read": result.total_read,
                "total_written": result.total_written,
                "filter_count": result.filter_count,
                "chunk_count": result.chunk_count,
                "elapsed_seconds": result.elapsed_seconds,
            },
        )
        return result
