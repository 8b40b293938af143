"""
Chunked batch processing: readers, processors, writers and the runner that drives them.
"""

from .chunk_runner import ChunkListener, ChunkRunner
from .job import ImportPersonsJob
from .processors import PersonProcessor
from .readers import DelimitedLineTokenizer, FlatFileItemReader, PersonFieldSetMapper
from .writers import PersonWarehouseWriter

__all__ = [
    "ChunkListener",
    "ChunkRunner",
    "DelimitedLineTokenizer",
    "FlatFileItemReader",
    "ImportPersonsJob",
    "PersonFieldSetMapper",
    "PersonProcessor",
    "PersonWarehouseWriter",
]
