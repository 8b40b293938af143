"""
Person table operations.

DDL and queries for the table the pipeline loads. Inserts run on a
caller-supplied connection so the caller owns the transaction boundary.
"""

from typing import Sequence

from psycopg import Connection, sql

from person_etl.core.models import PERSON_COLUMNS, Person

from .connection import DatabaseConnectionPool

DEFAULT_TABLE = "person"


class PersonRepository:
    """
    Reads and writes rows of the person table.

    One row per Person; ``id`` is generated by the database on insert and
    every other column maps 1:1 to a Person attribute.
    """

    def __init__(self, pool: DatabaseConnectionPool, table: str = DEFAULT_TABLE):
        """
        Initialize repository.

        Args:
            pool: Database connection pool
            table: Table name (quoted as an identifier in every statement)
        """
        self.pool = pool
        self.table = table
        self._table_sql = sql.Identifier(table)

    def create_table(self) -> None:
        """Create the person table if it does not exist."""
        columns = sql.SQL(", ").join(
            sql.SQL("{} TEXT").format(sql.Identifier(column)) for column in PERSON_COLUMNS
        )
        ddl = sql.SQL("CREATE TABLE IF NOT EXISTS {} (id BIGSERIAL PRIMARY KEY, {})").format(
            self._table_sql, columns
        )
        with self.pool.get_connection() as conn:
            conn.execute(ddl)
            conn.commit()

    def insert_all(self, conn: Connection, persons: Sequence[Person]) -> list[Person]:
        """
        Insert persons on an open connection without committing.

        Args:
            conn: Connection whose transaction the inserts join
            persons: Records to insert, in order

        Returns:
            Persisted copies carrying the generated ids, in input order
        """
        statement = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING id").format(
            self._table_sql,
            sql.SQL(", ").join(sql.Identifier(column) for column in PERSON_COLUMNS),
            sql.SQL(", ").join(sql.Placeholder() for _ in PERSON_COLUMNS),
        )

        saved = []
        with conn.cursor() as cur:
            for person in persons:
                cur.execute(statement, tuple(getattr(person, column) for column in PERSON_COLUMNS))
                row = cur.fetchone()
                generated_id = row["id"] if isinstance(row, dict) else row[0]
                saved.append(person.model_copy(update={"id": generated_id}))
        return saved

    def count(self) -> int:
        """Return the number of persisted persons."""
        with self.pool.get_cursor() as cur:
            cur.execute(sql.SQL("SELECT COUNT(*) AS count FROM {}").format(self._table_sql))
            return cur.fetchone()["count"]

    def find_all(self, limit: int | None = None) -> list[Person]:
        """Return persisted persons in insertion order."""
        query = sql.SQL("SELECT id, {} FROM {} ORDER BY id").format(
            sql.SQL(", ").join(sql.Identifier(column) for column in PERSON_COLUMNS),
            self._table_sql,
        )
        params = None
        if limit is not None:
            query = query + sql.SQL(" LIMIT %s")
            params = (limit,)

        with self.pool.get_cursor() as cur:
            cur.execute(query, params)
            return [Person.model_validate(row) for row in cur.fetchall()]

    def delete_all(self) -> int:
        """Delete every persisted person. Returns the number of rows removed."""
        with self.pool.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql.SQL("DELETE FROM {}").format(self._table_sql))
                rowcount = cur.rowcount
            conn.commit()
            return rowcount
