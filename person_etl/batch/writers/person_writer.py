"""
Batch warehouse writer for person records.

Writes each chunk inside a single database transaction.
"""

from typing import Sequence

import psycopg

from person_etl.batch.writers.base_writer import BaseItemWriter
from person_etl.core.errors import StorageError
from person_etl.core.models import Person
from person_etl.warehouse.connection import DatabaseConnectionPool
from person_etl.warehouse.person_repository import DEFAULT_TABLE, PersonRepository


class PersonWarehouseWriter(BaseItemWriter):
    """
    Persists chunks of Person records to PostgreSQL.

    A chunk checks out one pooled connection and inserts all of its records
    inside one transaction. Any database error rolls the transaction back and
    is raised as StorageError, so a failed chunk leaves no rows behind while
    earlier chunks stay committed.
    """

    def __init__(
        self,
        pool: DatabaseConnectionPool,
        table: str = DEFAULT_TABLE,
        create_table: bool = False,
    ):
        """
        Initialize writer.

        Args:
            pool: Open database connection pool
            table: Target table
            create_table: Create the table on open() if it is missing
        """
        self.pool = pool
        self.repository = PersonRepository(pool, table=table)
        self.create_table = create_table

    def open(self) -> None:
        """
        Prepare the target table.

        Raises:
            StorageError: If the table cannot be created
        """
        if not self.create_table:
            return
        try:
            self.repository.create_table()
        except psycopg.Error as e:
            raise StorageError(
                None, e, message=f"Failed to prepare table {self.repository.table}: {e}"
            ) from e

    def write(self, chunk: Sequence[Person], chunk_index: int) -> list[Person]:
        """
        Insert a chunk in one transaction.

        Args:
            chunk: Records to persist
            chunk_index: 1-based chunk index, reported on failure

        Returns:
            Persisted records with generated ids

        Raises:
            StorageError: If any insert fails; the whole chunk is rolled back
        """
        if not chunk:
            return []

        try:
            with self.pool.get_connection() as conn:
                with conn.transaction():
                    return self.repository.insert_all(conn, chunk)
        except psycopg.Error as e:
            raise StorageError(chunk_index, e) from e
