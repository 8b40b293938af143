"""
Line-oriented flat file reader.

Reads a delimited text file one line at a time, skipping the header, and
parses each remaining line into a Person.
"""

import io
from pathlib import Path
from typing import Callable, Sequence, TextIO

from person_etl.batch.readers.base_reader import BaseItemReader
from person_etl.batch.readers.field_set_mapper import PersonFieldSetMapper
from person_etl.batch.readers.line_tokenizer import DelimitedLineTokenizer
from person_etl.core.errors import ParseError, ResourceError
from person_etl.core.models import Person


class FlatFileItemReader(BaseItemReader):
    """
    Reads Person records lazily from a delimited file or text stream.

    Only the current line is held in memory. A malformed line aborts the read
    with a ParseError carrying its line number. Comment lines are ignored.
    Blank lines are ignored only when skip_blank_lines is set, which by
    default follows the tokenizer: skipped when lenient, rejected when strict.
    Re-opening after close() reads from the start again.
    """

    def __init__(
        self,
        resource: str | Path | TextIO,
        tokenizer: DelimitedLineTokenizer,
        mapper: PersonFieldSetMapper | None = None,
        lines_to_skip: int = 1,
        encoding: str = "utf-8",
        comment_prefixes: Sequence[str] = ("#",),
        skipped_lines_callback: Callable[[str], None] | None = None,
        skip_blank_lines: bool | None = None,
    ):
        """
        Initialize reader.

        Args:
            resource: File path, or an open text stream (not closed by the reader)
            tokenizer: Tokenizer splitting each line into named fields
            mapper: Field set mapper (defaults to one built from the tokenizer's names)
            lines_to_skip: Leading lines to skip, typically the header
            encoding: Text encoding used when opening a path
            comment_prefixes: Lines starting with any of these are ignored
            skipped_lines_callback: Called with every skipped leading line
            skip_blank_lines: Ignore blank data lines (defaults to True for a
                non-strict tokenizer, False for a strict one)

        Raises:
            ValueError: If lines_to_skip is negative
        """
        if lines_to_skip < 0:
            raise ValueError(f"lines_to_skip must be >= 0, got {lines_to_skip}")

        self.resource = resource
        self.tokenizer = tokenizer
        self.mapper = mapper or PersonFieldSetMapper(tokenizer.names)
        self.lines_to_skip = lines_to_skip
        self.encoding = encoding
        self.comment_prefixes = tuple(comment_prefixes)
        self.skipped_lines_callback = skipped_lines_callback
        self.skip_blank_lines = not tokenizer.strict if skip_blank_lines is None else skip_blank_lines

        self._stream: TextIO | None = None
        self._owns_stream = False
        self.line_number = 0

    @property
    def resource_name(self) -> str:
        if isinstance(self.resource, (str, Path)):
            return str(self.resource)
        return getattr(self.resource, "name", "<stream>")

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    def open(self) -> None:
        """
        Open the resource and skip the leading lines.

        Raises:
            ResourceError: If the resource cannot be opened or read
        """
        self.close()
        self.line_number = 0

        if isinstance(self.resource, (str, Path)):
            path = Path(self.resource)
            try:
                self._stream = open(path, encoding=self.encoding, newline="")
            except OSError as e:
                raise ResourceError(str(path), f"Cannot open input: {e.strerror or e}") from e
            self._owns_stream = True
        else:
            self._stream = self.resource
            self._owns_stream = False
            if self._stream.seekable():
                self._stream.seek(0)

        try:
            for _ in range(self.lines_to_skip):
                line = self._next_line()
                if line is None:
                    break
                if self.skipped_lines_callback is not None:
                    self.skipped_lines_callback(line.rstrip("\r\n"))
        except Exception:
            self.close()
            raise

    def read(self) -> Person | None:
        """
        Read the next Person.

        Returns:
            Parsed Person, or None once the resource is exhausted

        Raises:
            ResourceError: If the reader is not open or the resource fails
            ParseError: If the line cannot be tokenized
        """
        if self._stream is None:
            raise ResourceError(self.resource_name, "Reader is not open. Call open() first.")

        while True:
            line = self._next_line()
            if line is None:
                return None

            stripped = line.strip()
            if not stripped:
                if self.skip_blank_lines:
                    continue
            elif stripped.startswith(self.comment_prefixes):
                continue

            try:
                fields = self.tokenizer.tokenize(line)
            except ParseError as e:
                raise ParseError(
                    e.message,
                    line=line.rstrip("\r\n"),
                    line_number=self.line_number,
                    expected=e.expected,
                    actual=e.actual,
                ) from e

            return self.mapper.map_field_set(fields)

    def close(self) -> None:
        """Close the resource if the reader opened it."""
        if self._stream is not None and self._owns_stream:
            self._stream.close()
        self._stream = None
        self._owns_stream = False

    def _next_line(self) -> str | None:
        try:
            line = self._stream.readline()
        except (OSError, UnicodeDecodeError, io.UnsupportedOperation) as e:
            raise ResourceError(
                self.resource_name, f"Cannot read line {self.line_number + 1}: {e}"
            ) from e

        if not line:
            return None
        self.line_number += 1
        return line
