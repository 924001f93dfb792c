"""
Delimiter-aware parser for the tabular exports of proteomics software.
"""

import csv
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import List, Mapping, Tuple, Union

from proteovariant.core.validation import (
    EmptyTableError,
    MalformedRowError,
    MalformedTableError,
    ProteoVariantError,
    RowColumnMismatchError,
)
from proteovariant.utils.logger import get_logger

logger = get_logger(__name__)

RowRecord = Mapping[str, str]

TAB = "\t"
COMMA = ","
SEMICOLON = ";"

_LINE_BREAK = re.compile(r"\r?\n")
_DECIMAL_COMMA = re.compile(r"^[+-]?\d+,\d+(?:[eE][+-]?\d+)?$")


@dataclass(frozen=True)
class ParsedTable:
    """Rows of one table together with what the parser learned about it."""

    header: Tuple[str, ...]
    delimiter: str
    rows: Tuple[RowRecord, ...]
    skipped_rows: Tuple[ProteoVariantError, ...] = field(default_factory=tuple)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_rows)

    def __len__(self) -> int:
        return len(self.rows)


def detect_delimiter(header_line: str) -> str:
    """Pick tab, semicolon or comma from the delimiter counts of the header line."""
    tabs = header_line.count(TAB)
    commas = header_line.count(COMMA)
    semicolons = header_line.count(SEMICOLON)
    if tabs > commas and tabs > semicolons:
        return TAB
    if semicolons > commas:
        return SEMICOLON
    return COMMA


def _normalize_decimal(value: str) -> str:
    if _DECIMAL_COMMA.match(value):
        return value.replace(",", ".")
    return value


def split_line(line: str, delimiter: str) -> List[str]:
    """
    Split one line, ignoring delimiters inside a matched pair of double quotes.

    Quotes are removed by the splitter and doubled quotes become a literal
    quote; only surrounding whitespace is trimmed afterwards.

    Raises:
        csv.Error: If an unquoted cell holds a line break character
    """
    cells = next(
        csv.reader([line], delimiter=delimiter, quotechar='"', skipinitialspace=True),
        [],
    )
    return [cell.strip() for cell in cells]


def parse(text: str, normalize_decimals: bool = False) -> ParsedTable:
    """
    Parse the text of a delimited table into row mappings.

    Args:
        text: Full content of the file
        normalize_decimals: Turn decimal commas into dots in numeric-looking cells

    Returns:
        ParsedTable with one RowRecord per well-formed data line

    Raises:
        EmptyTableError: If the text has no non-blank line
        MalformedTableError: If the header line cannot be split
    """
    text = text.lstrip("\ufeff")
    lines = [
        (number, line)
        for number, line in enumerate(_LINE_BREAK.split(text), start=1)
        if line.strip()
    ]
    if not lines:
        raise EmptyTableError("input text")

    header_number, header_line = lines[0]
    delimiter = detect_delimiter(header_line)
    try:
        header = tuple(split_line(header_line, delimiter))
    except csv.Error as e:
        raise MalformedTableError(f"line {header_number}: {e}") from e
    logger.debug(
        f"Detected delimiter {delimiter!r} with {len(header)} columns on line {header_number}"
    )

    rows = []
    skipped = []
    for number, line in lines[1:]:
        try:
            cells = split_line(line, delimiter)
        except csv.Error as e:
            malformed = MalformedRowError(number, str(e))
            logger.warning(str(malformed))
            skipped.append(malformed)
            continue
        if len(cells) != len(header):
            mismatch = RowColumnMismatchError(number, len(header), len(cells))
            logger.warning(str(mismatch))
            skipped.append(mismatch)
            continue
        values = cells
        if normalize_decimals:
            values = [_normalize_decimal(value) for value in values]
        rows.append(MappingProxyType(dict(zip(header, values))))

    if skipped:
        logger.warning(f"Skipped {len(skipped)} malformed rows out of {len(lines) - 1}")

    return ParsedTable(
        header=header,
        delimiter=delimiter,
        rows=tuple(rows),
        skipped_rows=tuple(skipped),
    )


def read_text(file_path: Union[str, Path]) -> str:
    """Read a whole text file, tolerating a UTF-8 byte order mark."""
    with open(file_path, encoding="utf-8-sig") as f:
        return f.read()


def parse_file(file_path: Union[str, Path], normalize_decimals: bool = False) -> ParsedTable:
    """Read and parse a delimited file."""
    return parse(read_text(file_path), normalize_decimals=normalize_decimals)
