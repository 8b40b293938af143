"""
Pytest configuration and fixtures for person-etl tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
from pathlib import Path
from typing import Callable, Generator, Sequence

import pytest

from person_etl.batch.readers import DelimitedLineTokenizer, FlatFileItemReader
from person_etl.batch.writers import BaseItemWriter
from person_etl.core.errors import StorageError
from person_etl.core.models import PERSON_FIELD_NAMES, Person

HEADER = ",".join(PERSON_FIELD_NAMES)


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that test the full pipeline"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# IN-MEMORY WRITER
# =======================

class RecordingWriter(BaseItemWriter):
    """
    In-memory chunk writer.

    Commits chunks to ``stored`` and assigns sequential ids. When
    ``fail_on_chunk`` matches the chunk index, raises StorageError without
    storing anything from that chunk.
    """

    def __init__(self, fail_on_chunk: int | None = None):
        self.fail_on_chunk = fail_on_chunk
        self.stored: list[Person] = []
        self.batches: list[list[Person]] = []
        self.opened = False
        self.closed = False

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.closed = True

    def write(self, chunk: Sequence[Person], chunk_index: int) -> list[Person]:
        if chunk_index == self.fail_on_chunk:
            raise StorageError(chunk_index, RuntimeError("disk full"))
        saved = [
            person.model_copy(update={"id": len(self.stored) + offset + 1})
            for offset, person in enumerate(chunk)
        ]
        self.batches.append(list(chunk))
        self.stored.extend(saved)
        return saved


@pytest.fixture
def recording_writer() -> RecordingWriter:
    return RecordingWriter()


@pytest.fixture
def failing_writer() -> Callable[[int], RecordingWriter]:
    """Factory for writers that fail on the given chunk index"""
    return lambda chunk_index: RecordingWriter(fail_on_chunk=chunk_index)


# =======================
# FILE FIXTURES
# =======================

def person_line(index: int, first_name: str = "John", last_name: str = "Doe") -> str:
    return (
        f"U{index:05d},{first_name},{last_name},Male,user{index}@example.com,"
        f"555-{index:04d},1990-01-01,Engineer"
    )


@pytest.fixture
def write_people_csv(tmp_path) -> Callable[..., Path]:
    """
    Factory writing a people CSV with a header and ``rows`` data lines

    Extra raw lines can be appended with ``extra_lines``.
    """

    def _write(rows: int, extra_lines: Sequence[str] = (), name: str = "people.csv") -> Path:
        path = tmp_path / name
        lines = [HEADER] + [person_line(i) for i in range(1, rows + 1)] + list(extra_lines)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def person_tokenizer() -> DelimitedLineTokenizer:
    return DelimitedLineTokenizer(names=PERSON_FIELD_NAMES, strict=False)


@pytest.fixture
def make_reader(person_tokenizer) -> Callable[[Path], FlatFileItemReader]:
    return lambda path: FlatFileItemReader(path, tokenizer=person_tokenizer)


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container() -> Generator:
    """
    Start PostgreSQL container for integration tests

    Skips the requesting tests when Docker is unavailable.
    """
    from testcontainers.postgres import PostgresContainer

    container = PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_pipeline",
        password="test_password",
        dbname="test_people",
    )
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Docker is not available: {e}")

    try:
        yield container
    finally:
        container.stop()


@pytest.fixture
def db_settings(postgres_container):
    from person_etl.config import DatabaseSettings

    return DatabaseSettings(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        name="test_people",
        user="test_pipeline",
        password="test_password",
    )


@pytest.fixture
def db_pool(db_settings) -> Generator:
    """Open pool against the container with an empty person table"""
    from person_etl.warehouse import DatabaseConnectionPool, PersonRepository

    with DatabaseConnectionPool.from_settings(db_settings) as pool:
        repository = PersonRepository(pool)
        repository.create_table()
        repository.delete_all()
        yield pool
