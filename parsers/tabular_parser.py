"""
Tabular file reader for product uploads.

Turns an uploaded blob (CSV, XLSX or legacy XLS) into header-normalized
records. Workbooks are read from their first sheet only.

Marketplace templates often carry informational lines above the header
(eBay "#INFO" lines, Meta "# Required" lines). Leading rows whose first
cell starts with "#" are skipped; the next non-blank row is the header.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from io import BytesIO, StringIO
from typing import Optional
import structlog

import pandas as pd

from exceptions import ParseError
from utils.text_utils import normalize_header

logger = structlog.get_logger(__name__)


XLSX_MAGIC = b"PK\x03\x04"
XLS_MAGIC = b"\xd0\xcf\x11\xe0"

# Tried in order; latin-1 decodes any byte sequence so it goes last
TEXT_ENCODINGS = ["utf-8-sig", "cp1252", "latin-1"]

PREAMBLE_MARKER = "#"

WORKBOOK_ENGINES = {
    "xlsx": "openpyxl",
    "xls": "xlrd",
}


# ===================
# DATA CLASSES
# ===================

@dataclass
class TabularFile:
    """Parsed upload: normalized headers plus one dict per data row."""
    kind: str
    headers: list[str] = field(default_factory=list)
    records: list[dict[str, str]] = field(default_factory=list)
    header_row: int = 1
    # Spreadsheet row number of each record; blank rows between records still count
    row_numbers: list[int] = field(default_factory=list)

    @property
    def first_data_row(self) -> int:
        """Spreadsheet row number of the first record (1-based)."""
        return self.header_row + 1

    @property
    def has_data(self) -> bool:
        return len(self.records) > 0


# ===================
# MAIN READER
# ===================

def read_tabular_file(
    content: bytes,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
) -> TabularFile:
    """
    Parse an uploaded spreadsheet.

    Args:
        content: Raw file bytes
        filename: Original filename (logging only; detection uses content)
        content_type: Declared media type (logging only)

    Returns:
        TabularFile with at least one record

    Raises:
        ParseError: If the blob is not CSV/XLSX/XLS, cannot be read,
                    or contains no data rows
    """
    if not content:
        raise ParseError(details={"reason": "empty_upload"})

    kind = detect_file_kind(content)

    logger.info(
        "parsing_tabular_file",
        kind=kind,
        size_bytes=len(content),
        filename=filename,
        content_type=content_type,
    )

    try:
        if kind == "csv":
            grid, skipped = _load_csv(content)
        else:
            grid, skipped = _load_workbook(content, WORKBOOK_ENGINES[kind]), 0
    except ParseError:
        raise
    except Exception as e:
        logger.warning("tabular_file_read_failed", kind=kind, error=str(e))
        raise ParseError(details={"kind": kind, "original_error": str(e)})

    result = _grid_to_tabular(grid, kind, skipped)

    if not result.has_data:
        logger.warning("tabular_file_empty", kind=kind, headers=len(result.headers))
        raise ParseError(details={"kind": kind, "reason": "no_data_rows"})

    logger.info(
        "tabular_file_parsed",
        kind=kind,
        columns=len(result.headers),
        rows=len(result.records),
        header_row=result.header_row,
    )

    return result


def detect_file_kind(content: bytes) -> str:
    """
    Classify a blob as "xlsx", "xls" or "csv" from its leading bytes.

    Raises:
        ParseError: If the blob is binary but not a known workbook
    """
    if content.startswith(XLSX_MAGIC):
        return "xlsx"
    if content.startswith(XLS_MAGIC):
        return "xls"
    if b"\x00" in content[:4096]:
        raise ParseError(
            message="Unsupported file type. Please upload CSV or XLSX.",
            details={"reason": "binary_content"}
        )
    return "csv"


# ===================
# LOADERS
# ===================

def _decode_text(content: bytes) -> str:
    """Decode CSV bytes with the first encoding that fits."""
    for encoding in TEXT_ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ParseError(details={"reason": "undecodable_text"})


def _count_preamble_lines(text: str) -> int:
    """Number of leading blank or "#" lines ahead of the header."""
    count = 0
    for line in text.splitlines():
        stripped = line.strip().lstrip('"')
        if stripped and not stripped.startswith(PREAMBLE_MARKER):
            break
        count += 1
    return count


def _load_csv(content: bytes) -> tuple[list[list], int]:
    """
    Load delimited text into a grid of raw cells.

    Blank lines are kept as empty rows so grid positions stay aligned with
    the spreadsheet row numbers users see.
    """
    text = _decode_text(content)
    skipped = _count_preamble_lines(text)
    width = _header_width(text, skipped)

    df = pd.read_csv(
        StringIO(text),
        header=None,
        skiprows=skipped,
        dtype=object,
        keep_default_na=False,
        skip_blank_lines=False,
        engine="python",
        on_bad_lines=_overlong_row_handler(width),
    )
    return df.values.tolist(), skipped


def _header_width(text: str, skipped: int) -> int:
    """Number of cells in the header line."""
    header = pd.read_csv(
        StringIO(text),
        header=None,
        skiprows=skipped,
        nrows=1,
        dtype=object,
        keep_default_na=False,
        engine="python",
    )
    return header.shape[1]


def _overlong_row_handler(width: int):
    """
    Handler for data rows with more cells than the header.

    Extra cells that are all blank (a trailing comma) are dropped. Anything
    else is a ParseError naming the row's first cell so it can be found.
    """
    def handle(cells: list[str]) -> list[str]:
        extra = [c for c in cells[width:] if c is not None and str(c).strip()]
        if not extra:
            return cells[:width]
        first_cell = str(cells[0]).strip() if cells else ""
        raise ParseError(
            message=f'A row has more cells than the header ({len(cells)} vs {width}). '
                    f'Check the row starting with "{first_cell}".',
            details={
                "reason": "too_many_cells",
                "expected_cells": width,
                "cells": len(cells),
                "first_cell": first_cell,
            }
        )

    return handle


def _load_workbook(content: bytes, engine: str) -> list[list]:
    """Load the first sheet of a workbook into a grid of raw cells."""
    df = pd.read_excel(
        BytesIO(content),
        sheet_name=0,
        header=None,
        dtype=object,
        engine=engine,
    )
    return df.values.tolist()


# ===================
# HELPER FUNCTIONS
# ===================

def _grid_to_tabular(grid: list[list], kind: str, skipped: int) -> TabularFile:
    """Locate the header row and build normalized records beneath it."""
    header_idx = None
    header: list[str] = []

    for i, row in enumerate(grid):
        cells = [_cell_to_str(c) for c in row]
        if not any(cells):
            continue
        if cells[0].startswith(PREAMBLE_MARKER):
            continue
        header_idx = i
        header = cells
        break

    if header_idx is None:
        return TabularFile(kind=kind)

    # First occurrence wins for duplicate headers; blank headers are dropped
    columns: list[tuple[int, str]] = []
    seen: set[str] = set()
    for idx, raw in enumerate(header):
        key = normalize_header(raw)
        if not key or key in seen:
            continue
        seen.add(key)
        columns.append((idx, key))

    records = []
    row_numbers = []
    for i, raw_row in enumerate(grid[header_idx + 1:], start=header_idx + 1):
        cells = [_cell_to_str(c) for c in raw_row]
        if not any(cells):
            continue
        row_numbers.append(skipped + i + 1)
        records.append({
            key: cells[idx] if idx < len(cells) else ""
            for idx, key in columns
        })

    return TabularFile(
        kind=kind,
        headers=[key for _, key in columns],
        records=records,
        header_row=skipped + header_idx + 1,
        row_numbers=row_numbers,
    )


def _cell_to_str(value) -> str:
    """
    Normalize a raw cell to a stripped string.

    Workbook numbers arrive as floats: 5225.0 -> "5225", 12.5 -> "12.5".
    Empty cells (None/NaN) become "".
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if pd.isna(value):
        return ""
    if isinstance(value, datetime):
        if (value.hour, value.minute, value.second, value.microsecond) == (0, 0, 0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
