"""
Batch data sinks.
"""

from .base_writer import BaseItemWriter
from .person_writer import PersonWarehouseWriter

__all__ = [
    "BaseItemWriter",
    "PersonWarehouseWriter",
]
