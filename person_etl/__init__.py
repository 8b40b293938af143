"""
person-etl: chunked import of person records from a delimited file into PostgreSQL.
"""

__version__ = "0.1.0"
