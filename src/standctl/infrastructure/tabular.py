"""Decode uploaded tabular files into rows of strings.

Two inputs are supported:

- delimiter-separated text (CSV/TSV) with standard double-quote escaping,
  decoded with the first encoding that works;
- spreadsheet workbooks (``.xlsx``/``.xlsm``), read from the first sheet
  with openpyxl.

Only decoding happens here. Header mapping and validation live in
:mod:`standctl.domain.bulk`.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime
from pathlib import PurePath
from typing import Any
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from standctl.domain.errors import ParseError

logger = logging.getLogger(__name__)

SPREADSHEET_SUFFIXES = frozenset({".xlsx", ".xlsm"})
_ZIP_MAGIC = b"PK\x03\x04"
_TEXT_ENCODINGS = ("utf-8-sig", "utf-8", "latin-1")
UNREADABLE_MESSAGE = "The spreadsheet could not be read."
MALFORMED_TEXT_MESSAGE = "The file could not be read as delimited text"


def is_spreadsheet(raw: bytes | str, filename: str | None = None) -> bool:
    """True when *raw* should be read as a workbook rather than text."""
    if filename and PurePath(filename).suffix.lower() in SPREADSHEET_SUFFIXES:
        return True
    return isinstance(raw, bytes) and raw.startswith(_ZIP_MAGIC)


def decode_text(raw: bytes | str) -> str:
    """Decode uploaded bytes, trying UTF-8 (with and without BOM) then Latin-1."""
    if isinstance(raw, str):
        return raw.lstrip("\ufeff")
    for encoding in _TEXT_ENCODINGS:
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            continue
    # latin-1 maps every byte, so this is unreachable in practice.
    raise ValueError("Could not decode upload content.")


def sniff_delimiter(text: str, filename: str | None = None) -> str:
    """Pick ``\\t`` for TSV files or tab-only header lines, else ``,``."""
    if filename and PurePath(filename).suffix.lower() == ".tsv":
        return "\t"
    first_line = text.lstrip().split("\n", 1)[0]
    if "\t" in first_line and "," not in first_line:
        return "\t"
    return ","


def read_delimited(text: str, delimiter: str = ",") -> list[list[str]]:
    """Split delimited text into rows; quoted fields may contain the delimiter.

    Cells are capped by ``csv.field_size_limit()`` (128 KiB by default); an
    unbalanced quote usually runs into it.

    Raises:
        ParseError: The csv module rejects the text.
    """
    reader = csv.reader(io.StringIO(text.strip()), delimiter=delimiter)
    try:
        return [list(row) for row in reader]
    except csv.Error as exc:
        raise ParseError("unreadable", f"{MALFORMED_TEXT_MESSAGE}: {exc}") from exc


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime | date):
        return value.isoformat()
    return str(value)


def read_workbook(raw: bytes) -> list[list[str]]:
    """Read every row of the first worksheet as strings.

    Raises:
        ParseError: The bytes are not a readable workbook.
    """
    try:
        workbook = load_workbook(filename=io.BytesIO(raw), read_only=True, data_only=True)
    except (BadZipFile, InvalidFileException, KeyError, OSError) as exc:
        raise ParseError("unreadable", UNREADABLE_MESSAGE) from exc
    try:
        sheet = workbook.worksheets[0] if workbook.worksheets else None
        if sheet is None:
            return []
        return [[_cell_text(value) for value in row] for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def read_rows(
    raw: bytes | str,
    *,
    filename: str | None = None,
    delimiter: str | None = None,
) -> list[list[str]]:
    """Decode *raw* into rows of cell strings.

    Args:
        raw: File content as uploaded.
        filename: Original file name, used for format detection.
        delimiter: Force a delimiter for text input; sniffed when None.
    """
    if is_spreadsheet(raw, filename):
        if isinstance(raw, str):
            raise ParseError("unreadable", UNREADABLE_MESSAGE)
        logger.debug("Reading workbook (%d bytes)", len(raw))
        return read_workbook(raw)

    text = decode_text(raw)
    if not text.strip():
        return []
    return read_delimited(text, delimiter or sniff_delimiter(text, filename))
