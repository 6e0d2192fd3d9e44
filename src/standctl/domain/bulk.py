"""Bulk record normalization — decoded rows to stand creation records.

Pure functions over ``list[list[str]]``; decoding raw bytes into rows is
the job of :mod:`standctl.infrastructure.tabular`. Every failure is a
:class:`ParseError` raised before anything is sent to the directory.
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from dataclasses import dataclass

from standctl.domain.errors import ParseError
from standctl.domain.lifecycle import normalize_status
from standctl.domain.models import StandCreationRecord

# Lowercased, trimmed header text -> canonical record field.
HEADER_ALIASES: dict[str, str] = {
    "standnumber": "stand_number",
    "stand number": "stand_number",
    "stand_number": "stand_number",
    "number": "stand_number",
    "id": "stand_number",
    "name": "name",
    "stand name": "name",
    "stand_name": "name",
    "type": "type",
    "stand type": "type",
    "price": "price",
    "size": "size",
    "stand size": "size",
    "location": "location",
    "stand location": "location",
    "status": "status",
    "description": "description",
    "details": "description",
}

NUMERIC_FIELDS = frozenset({"price", "size"})
TEXT_FIELDS = ("type", "location", "description")

_NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

EMPTY_MESSAGE = "The file is empty."
MISSING_ROWS_MESSAGE = "The file must include a header row and at least one data row."
NO_VALID_ROWS_MESSAGE = "No valid rows were found in the file."


@dataclass(frozen=True)
class BulkParseResult:
    """Accepted records plus their count, for reporting before submission."""

    count: int
    records: list[StandCreationRecord]

    def to_payload(self) -> dict[str, list[dict[str, object]]]:
        """Body for the bulk-create call."""
        return {"stands": [record.to_payload() for record in self.records]}


def resolve_header(cell: str) -> str | None:
    """Map a raw header cell to its canonical field, or None if unknown."""
    return HEADER_ALIASES.get(cell.strip().lower())


def parse_number(value: str) -> int | float | None:
    """Parse a numeric cell after dropping thousands separators.

    Returns None for blank, malformed, or non-finite values.

    Examples:
        >>> parse_number("1,250,000")
        1250000
        >>> parse_number("12.5")
        12.5
        >>> parse_number("n/a") is None
        True
    """
    cleaned = value.replace(",", "").strip()
    if not _NUMBER_PATTERN.match(cleaned):
        return None
    number = float(cleaned)
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def normalize_row(fields: Sequence[str | None], cells: Sequence[str]) -> StandCreationRecord | None:
    """Build a record from one data row, or None when it lacks name/number.

    *fields* holds the resolved header for each column (None for unknown
    columns). When two columns resolve to the same field, the first
    non-blank value wins.
    """
    values: dict[str, str] = {}
    for index, field_name in enumerate(fields):
        if field_name is None:
            continue
        value = cells[index].strip() if index < len(cells) else ""
        if value and not values.get(field_name):
            values[field_name] = value

    name = values.get("name", "")
    stand_number = values.get("stand_number", "")
    if not name or not stand_number:
        return None

    record: dict[str, object] = {
        "name": name,
        "stand_number": stand_number,
        "status": normalize_status(values.get("status")),
    }
    for field_name in TEXT_FIELDS:
        if values.get(field_name):
            record[field_name] = values[field_name]
    for field_name in NUMERIC_FIELDS:
        number = parse_number(values.get(field_name, ""))
        if number is not None:
            record[field_name] = number
    return StandCreationRecord.model_validate(record)


def _is_blank(row: Sequence[str]) -> bool:
    return not any(cell.strip() for cell in row)


def build_records(rows: Sequence[Sequence[str]]) -> BulkParseResult:
    """Normalize decoded rows (header first) into creation records.

    Raises:
        ParseError: ``empty`` when there are no rows, ``missing_rows`` when
            only a header is present, ``no_valid_rows`` when no data row has
            both a name and a stand number.
    """
    content_rows = [row for row in rows if not _is_blank(row)]
    if not content_rows:
        raise ParseError("empty", EMPTY_MESSAGE)
    if len(content_rows) < 2:
        raise ParseError("missing_rows", MISSING_ROWS_MESSAGE)

    header, *data_rows = content_rows
    fields = [resolve_header(cell) for cell in header]

    records: list[StandCreationRecord] = []
    for cells in data_rows:
        record = normalize_row(fields, cells)
        if record is not None:
            records.append(record)

    if not records:
        raise ParseError("no_valid_rows", NO_VALID_ROWS_MESSAGE)
    return BulkParseResult(count=len(records), records=records)
