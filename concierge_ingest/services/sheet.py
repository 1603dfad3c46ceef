"""
Delimited-text sheet reader.

Turns the raw uploaded bytes into a RawSheet: an ordered grid of trimmed
string cells plus the 1-based source row number of every row. pandas does the
RFC-4180 quoting work; everything after this module works on plain tuples of
strings, never on DataFrames.

Concierge sheets are hand-maintained spreadsheet exports, not tables: section
headers sit in column 0, agent names sit in whatever row the editor put them,
and rows have ragged widths. The reader therefore never treats the first row
as a header and never drops blank rows, so row numbers always line up with
the editor's view of the file.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import csv
import io
import logging

import pandas as pd

logger = logging.getLogger(__name__)


DEFAULT_MAX_COLUMNS: int = 64


class SheetParseError(ValueError):
    """The uploaded bytes are not readable as delimited text."""


@dataclass(frozen=True)
class RawSheet:
    """
    Ordered rows of string cells.

    rows[i] is source row i + 1. Every row has the same width (short rows are
    padded with empty strings by the reader).
    """
    rows: Tuple[Tuple[str, ...], ...]
    columns: Optional[Tuple[str, ...]] = field(default=None)

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    def numbered_rows(self):
        """Yield (row_number, cells) pairs with 1-based row numbers."""
        for index, cells in enumerate(self.rows):
            yield index + 1, cells

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Sequence[str]],
        columns: Optional[Sequence[str]] = None,
    ) -> "RawSheet":
        """Build a sheet from in-memory rows, padding ragged rows."""
        width = max((len(r) for r in rows), default=0)
        normalized = tuple(
            tuple(_clean_cell(c) for c in r) + ('',) * (width - len(r))
            for r in rows
        )
        return cls(
            rows=normalized,
            columns=tuple(columns) if columns is not None else None,
        )


def _clean_cell(value: object) -> str:
    if value is None:
        return ''
    if isinstance(value, float) and pd.isna(value):
        return ''
    return str(value).strip()


def _decode(file_bytes: bytes) -> str:
    try:
        return file_bytes.decode('utf-8-sig')
    except UnicodeDecodeError as exc:
        raise SheetParseError(f"File is not valid UTF-8 text: {exc}") from exc


def parse_sheet(file_bytes: bytes, max_columns: int = DEFAULT_MAX_COLUMNS) -> RawSheet:
    """
    Parse delimited-text bytes into a RawSheet.

    Args:
        file_bytes: Raw upload content.
        max_columns: Widest row accepted; wider rows are a parse error.

    Returns:
        RawSheet with trailing all-empty columns removed. An empty file yields
        an empty sheet (the orchestrator rejects it as having no records).

    Raises:
        SheetParseError: On undecodable bytes, unbalanced quoting, or rows
            wider than max_columns.
    """
    text = _decode(file_bytes)
    if not text.strip():
        logger.info("Parsed empty sheet")
        return RawSheet(rows=())

    try:
        df = pd.read_csv(
            io.StringIO(text),
            header=None,
            names=list(range(max_columns)),
            index_col=False,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
            engine='python',
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, csv.Error) as exc:
        raise SheetParseError(str(exc)) from exc

    df = df.fillna('')
    rows: List[Tuple[str, ...]] = [
        tuple(_clean_cell(v) for v in values)
        for values in df.itertuples(index=False, name=None)
    ]

    # Trim trailing columns that are empty in every row
    width = 0
    for cells in rows:
        for i in range(len(cells) - 1, -1, -1):
            if cells[i]:
                width = max(width, i + 1)
                break
    rows = [cells[:width] for cells in rows]

    logger.info(f"Parsed sheet with {len(rows)} rows and {width} columns")
    return RawSheet(rows=tuple(rows))


__all__ = [
    'DEFAULT_MAX_COLUMNS',
    'SheetParseError',
    'RawSheet',
    'parse_sheet',
]
