"""
Batch data source readers.
"""

from .base_reader import BaseItemReader
from .field_set_mapper import PersonFieldSetMapper
from .flat_file_reader import FlatFileItemReader
from .line_tokenizer import DelimitedLineTokenizer

__all__ = [
    "BaseItemReader",
    "DelimitedLineTokenizer",
    "FlatFileItemReader",
    "PersonFieldSetMapper",
]
