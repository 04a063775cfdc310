# services/api/core/records.py
"""
Row matrix -> list of todo records.

Header cells become field names (lower-cased, trimmed). Two well-known
fields are coerced:

- ``id``: integer parsed from the leading digits of the cell; when nothing
  parses, the record's 1-based position among the data rows is used.
- ``completed``: True only for a case-insensitive "true".

Every other field stays the raw cell string.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence

Record = Dict[str, Any]

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def parse_int_prefix(value: Optional[str]) -> Optional[int]:
    """
    Lenient integer parse: optional leading whitespace and sign, then digits.
    Trailing garbage is ignored ("12abc" -> 12). Returns None when no digits.
    """
    if value is None:
        return None
    m = _INT_PREFIX.match(str(value))
    if not m:
        return None
    return int(m.group(1))


def coerce_completed(value: Optional[str]) -> bool:
    return str(value or "").lower() == "true"


def header_names(header_row: Sequence[str]) -> List[str]:
    return [h.lower().strip() for h in header_row]


def to_records(matrix: Sequence[Sequence[str]]) -> List[Record]:
    """
    Map a row matrix (row 0 = header) to records.

    Fewer than two rows means "no data" and yields []. Short data rows are
    padded with "", long ones lose their extra cells. Duplicate header names
    are allowed; the later column wins.
    """
    if not matrix or len(matrix) < 2:
        return []

    headers = header_names(matrix[0])
    records: List[Record] = []

    for position, row in enumerate(matrix[1:], start=1):
        record: Record = {}
        for i, name in enumerate(headers):
            record[name] = row[i] if i < len(row) else ""

        if "id" in record:
            parsed = parse_int_prefix(record["id"])
            record["id"] = parsed if parsed is not None else position
        if "completed" in record:
            record["completed"] = coerce_completed(record["completed"])

        records.append(record)

    return records


def next_id(records: Sequence[Record]) -> int:
    """max(id) + 1 over records with an integer id, or 1 when there are none."""
    ids = [
        r["id"] for r in records
        if isinstance(r.get("id"), int) and not isinstance(r.get("id"), bool)
    ]
    return max(ids) + 1 if ids else 1


def find_record(records: Sequence[Record], record_id: int) -> Optional[Record]:
    return next((r for r in records if r.get("id") == record_id), None)
