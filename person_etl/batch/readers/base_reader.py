"""
Base reader interface for chunked pipelines.

Readers are pulled one record at a time and own the resource they read from.
"""

from abc import ABC, abstractmethod
from typing import Iterator

from person_etl.core.models import Person


class BaseItemReader(ABC):
    """
    Abstract base class for record readers.

    Subclasses implement open(), read() and close(). The reader is a context
    manager (open on entry, close on exit) and an iterator over the records
    left in the resource.
    """

    @abstractmethod
    def open(self) -> None:
        """Acquire the underlying resource."""

    @abstractmethod
    def read(self) -> Person | None:
        """
        Read the next record.

        Returns:
            Next Person, or None once the resource is exhausted
        """

    @abstractmethod
    def close(self) -> None:
        """Release the underlying resource. Safe to call more than once."""

    def __iter__(self) -> Iterator[Person]:
        while True:
            item = self.read()
            if item is None:
                return
            yield item

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
