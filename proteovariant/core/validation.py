"""
Error taxonomy and validation utilities for proteovariant.
"""

from typing import Iterable, List, Mapping, Optional, Sequence

from proteovariant.utils.logger import get_logger

logger = get_logger(__name__)


class ProteoVariantError(Exception):
    """Base class for every error raised by proteovariant."""

    pass


class AdapterError(ProteoVariantError):
    """Raised when a format adapter cannot turn its input tables into results."""

    pass


class EmptyTableError(AdapterError):
    """A required table has no content or no data rows."""

    def __init__(self, table: str = "table"):
        self.table = table
        super().__init__(f"The {table} has no data rows")


class MissingColumnError(AdapterError):
    """One or more required columns are absent. Lists every missing column."""

    def __init__(self, missing: Sequence[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required columns: {', '.join(self.missing)}")


class UnsupportedFormatError(AdapterError):
    """The selected source software has no adapter implementation."""

    def __init__(self, software: str):
        self.software = software
        super().__init__(f"Source software '{software}' is not supported yet")


class RowColumnMismatchError(ProteoVariantError):
    """A data row does not have as many cells as the header.

    Recorded by the parser for every skipped row, never raised.
    """

    def __init__(self, line_number: int, expected: int, found: int):
        self.line_number = line_number
        self.expected = expected
        self.found = found
        super().__init__(
            f"Line {line_number}: expected {expected} cells, found {found}; row skipped"
        )


class MalformedRowError(ProteoVariantError):
    """A data row the delimiter splitter cannot read, e.g. a bare carriage return.

    Recorded by the parser for every skipped row, never raised.
    """

    def __init__(self, line_number: int, reason: str):
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Line {line_number}: {reason}; row skipped")


class MalformedTableError(ProteoVariantError):
    """The header line of a table cannot be split into columns."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Unreadable header line: {reason}")


class InvalidSampleConfigError(ProteoVariantError):
    """A sample input is missing its name or a file required by its adapter."""

    pass


class BatchProcessingError(ProteoVariantError):
    """Wraps the error that aborted a batch, naming the offending sample."""

    def __init__(self, sample_name: str, cause: Exception):
        self.sample_name = sample_name
        self.cause = cause
        super().__init__(f"Sample '{sample_name}': {cause}")


def find_missing_columns(
    header: Iterable[str], required: Iterable[str], table: Optional[str] = None
) -> List[str]:
    """
    Return the required columns absent from a header, in required order.

    Args:
        header: Column names present in the table
        required: Column names the caller needs
        table: Optional table label prefixed to each missing column

    Returns:
        List of missing columns (empty if validation passed)
    """
    present = set(header)
    missing = [column for column in required if column not in present]
    if table:
        missing = [f"{table}: {column}" for column in missing]
    return missing


def validate_required_columns(tables: Mapping[str, tuple]) -> None:
    """
    Validate several tables at once and fail with every missing column.

    Args:
        tables: Mapping of table label to a (header, required columns) pair

    Raises:
        MissingColumnError: If any table lacks any required column
    """
    missing = []
    for table, (header, required) in tables.items():
        missing.extend(find_missing_columns(header, required, table))
    if missing:
        logger.debug(f"Column validation failed: {missing}")
        raise MissingColumnError(missing)
