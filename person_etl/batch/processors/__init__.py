"""
Record processors applied between reading and writing.
"""

from .person_processor import BaseItemProcessor, PersonProcessor, uppercase_names

__all__ = [
    "BaseItemProcessor",
    "PersonProcessor",
    "uppercase_names",
]
