"""
Base writer interface for chunked pipelines.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from person_etl.core.models import Person


class BaseItemWriter(ABC):
    """
    Abstract base class for chunk writers.

    write() persists a whole chunk as one unit of work: either every record
    of the chunk is stored or none is.
    """

    def open(self) -> None:
        """Acquire writer resources before the first chunk."""

    def close(self) -> None:
        """Release writer resources after the last chunk."""

    @abstractmethod
    def write(self, chunk: Sequence[Person], chunk_index: int) -> list[Person]:
        """
        Persist one chunk atomically.

        Args:
            chunk: Records to persist, in order
            chunk_index: 1-based index of the chunk within the run

        Returns:
            Persisted copies of the records

        Raises:
            StorageError: If the chunk could not be persisted; nothing from
                the chunk is left behind
        """

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
