"""
Chunk-oriented step execution.

Drives reader → processor → writer in fixed-size chunks, one transaction per
chunk. Memory is bounded by the chunk size and a failure only discards work
done since the last committed chunk.
"""

import time
from contextlib import ExitStack
from typing import Callable, Iterable

from person_etl.batch.processors import BaseItemProcessor
from person_etl.batch.readers import BaseItemReader
from person_etl.batch.writers import BaseItemWriter
from person_etl.core.errors import PipelineError, ValidationError
from person_etl.core.models import (
    COMPLETED,
    FAILED,
    NOT_STARTED,
    RUNNING,
    Person,
    RunResult,
    RunStatus,
)
from person_etl.core.models.run_result import utcnow

DEFAULT_CHUNK_SIZE = 10


class ChunkListener:
    """
    Callbacks around each chunk. Override the hooks you need.

    Hooks run inside the chunk loop; an exception raised by a hook fails
    the run.
    """

    def before_chunk(self, chunk_index: int) -> None:
        pass

    def after_chunk(self, chunk_index: int, written: int) -> None:
        pass

    def on_chunk_error(self, chunk_index: int, error: PipelineError) -> None:
        pass


class ChunkRunner:
    """
    Runs one chunked step to a terminal status.

    State machine: NOT_STARTED → RUNNING → COMPLETED | FAILED. A runner runs
    once; start a new runner for a new run.
    """

    def __init__(
        self,
        reader: BaseItemReader,
        processor: BaseItemProcessor | Callable[[Person], Person | None],
        writer: BaseItemWriter,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        listeners: Iterable[ChunkListener] = (),
        run_id: str = "run",
        input_path: str | None = None,
    ):
        """
        Initialize runner.

        Args:
            reader: Record source; opened and closed by the runner
            processor: Processor, or a plain function Person -> Person | None
            writer: Chunk sink; opened and closed by the runner
            chunk_size: Maximum records per chunk
            listeners: Chunk callbacks
            run_id: Identifier reported in the result
            input_path: Resource name reported in the result

        Raises:
            ValueError: If chunk_size is less than 1
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")

        self.reader = reader
        self.process = processor.process if isinstance(processor, BaseItemProcessor) else processor
        self.writer = writer
        self.chunk_size = chunk_size
        self.listeners = list(listeners)
        self.run_id = run_id
        self.input_path = input_path

        self.status: RunStatus = NOT_STARTED
        self.total_read = 0
        self.total_written = 0
        self.filter_count = 0
        self.chunk_count = 0
        self.error: PipelineError | None = None
        self.started_at = None
        self.ended_at = None
        self.elapsed_seconds = 0.0

    def run(self) -> RunResult:
        """
        Execute the step until the reader is exhausted.

        Returns:
            RunResult with status COMPLETED

        Raises:
            PipelineError: On the first resource, parse, validation or storage
                error; the runner is left FAILED and the error carries the
                chunk index
            RuntimeError: If the runner has already run
        """
        if self.status != NOT_STARTED:
            raise RuntimeError(f"Runner {self.run_id} already ran (status {self.status})")

        self.status = RUNNING
        self.started_at = utcnow()
        start = time.perf_counter()
        chunk_index = 0

        try:
            with ExitStack() as stack:
                stack.enter_context(self.reader)
                stack.enter_context(self.writer)

                while True:
                    chunk_index += 1
                    chunk = self._read_chunk()
                    if not chunk:
                        break

                    for listener in self.listeners:
                        listener.before_chunk(chunk_index)

                    processed = self._process_chunk(chunk)
                    written = []
                    if processed:
                        written = self.writer.write(processed, chunk_index)
                        self.chunk_count += 1

                    self.total_written += len(written)
                    for listener in self.listeners:
                        listener.after_chunk(chunk_index, len(written))
        except PipelineError as e:
            # chunk_index stays 0 when opening the reader or writer failed
            if e.chunk_index is None and chunk_index > 0:
                e.chunk_index = chunk_index
            self._finish(FAILED, start)
            self.error = e
            for listener in self.listeners:
                listener.on_chunk_error(chunk_index, e)
            raise
        except Exception:
            self._finish(FAILED, start)
            raise

        self._finish(COMPLETED, start)
        return self.result()

    def result(self) -> RunResult:
        """Snapshot the runner's counters and status."""
        return RunResult(
            run_id=self.run_id,
            status=self.status,
            total_read=self.total_read,
            total_written=self.total_written,
            filter_count=self.filter_count,
            chunk_count=self.chunk_count,
            started_at=self.started_at,
            ended_at=self.ended_at,
            elapsed_seconds=round(self.elapsed_seconds, 6),
            input_path=self.input_path,
            error=self.error.to_run_error() if self.error else None,
        )

    def _read_chunk(self) -> list[Person]:
        chunk = []
        while len(chunk) < self.chunk_size:
            person = self.reader.read()
            if person is None:
                break
            chunk.append(person)
            self.total_read += 1
        return chunk

    def _process_chunk(self, chunk: list[Person]) -> list[Person]:
        first_position = self.total_read - len(chunk) + 1
        processed = []
        for offset, person in enumerate(chunk):
            try:
                result = self.process(person)
            except ValidationError as e:
                e.record_position = first_position + offset
                raise
            if result is None:
                self.filter_count += 1
            else:
                processed.append(result)
        return processed

    def _finish(self, status: RunStatus, start: float) -> None:
        self.status = status
        self.ended_at = utcnow()
        self.elapsed_seconds = time.perf_counter() - start
