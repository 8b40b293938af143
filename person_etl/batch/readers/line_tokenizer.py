"""
Delimited line tokenizer.

Splits one line of text into tokens and names them positionally.
"""

import csv
from typing import Sequence

from person_etl.core.errors import ParseError


class DelimitedLineTokenizer:
    """
    Tokenizes a delimited line and maps token i to field name i.

    Quoted tokens may contain the delimiter; the surrounding quotes are
    removed and every token is stripped of surrounding whitespace.

    In strict mode the token count must equal the number of names. In
    non-strict mode missing trailing tokens are filled with "" and excess
    tokens are dropped.
    """

    def __init__(
        self,
        names: Sequence[str],
        delimiter: str = ",",
        strict: bool = True,
        quote_character: str = '"',
    ):
        """
        Initialize tokenizer.

        Args:
            names: Ordered field names
            delimiter: Single-character token delimiter
            strict: Whether a token count mismatch is an error
            quote_character: Character that quotes tokens containing the delimiter

        Raises:
            ValueError: If names are empty or duplicated, or the delimiter is invalid
        """
        if not names:
            raise ValueError("At least one field name is required")
        if any(not name or not name.strip() for name in names):
            raise ValueError("Field names must be non-empty")
        if len(set(names)) != len(names):
            raise ValueError(f"Field names must be unique: {list(names)}")
        if len(delimiter) != 1:
            raise ValueError(f"Delimiter must be a single character, got {delimiter!r}")
        if delimiter == quote_character:
            raise ValueError("Delimiter and quote character must differ")

        self.names = tuple(names)
        self.delimiter = delimiter
        self.strict = strict
        self.quote_character = quote_character

    def split(self, line: str) -> list[str]:
        """
        Split a line into stripped tokens.

        Raises:
            ParseError: If the line has unbalanced quoting
        """
        try:
            rows = list(
                csv.reader(
                    [line.rstrip("\r\n")],
                    delimiter=self.delimiter,
                    quotechar=self.quote_character,
                    strict=True,
                )
            )
        except csv.Error as e:
            raise ParseError(f"Malformed quoting: {e}", line=line) from e

        tokens = rows[0] if rows else []
        return [token.strip() for token in tokens]

    def tokenize(self, line: str) -> dict[str, str]:
        """
        Tokenize a line into a field name to value mapping.

        Args:
            line: Raw text line

        Returns:
            Mapping of field name to token, in field name order

        Raises:
            ParseError: If strict and the token count differs from the name count
        """
        tokens = self.split(line)
        expected = len(self.names)
        actual = len(tokens)

        if actual != expected:
            if self.strict:
                raise ParseError(
                    f"Incorrect number of tokens: expected {expected}, found {actual}",
                    line=line,
                    expected=expected,
                    actual=actual,
                )
            if actual < expected:
                tokens = tokens + [""] * (expected - actual)
            else:
                tokens = tokens[:expected]

        return dict(zip(self.names, tokens))
