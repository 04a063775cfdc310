"""
CSV export -> row matrix.

The legacy tokenizer is deliberately naive: it splits on newlines and commas
and strips every double quote. Quoted cells containing commas or newlines are
NOT handled; a stricter RFC 4180 reader is available behind CSV_PARSER=rfc4180.
"""
import csv
import io
from typing import Callable, Dict, List

Row = List[str]
RowMatrix = List[Row]


def tokenize(raw_text: str) -> RowMatrix:
    """Split CSV text on '\\n' and ',' and drop all '"' characters."""
    return [
        [cell.replace('"', "") for cell in line.split(",")]
        for line in raw_text.split("\n")
    ]


def tokenize_rfc4180(raw_text: str) -> RowMatrix:
    """Strict tokenizer: quoted commas/newlines stay inside their cell."""
    return [list(row) for row in csv.reader(io.StringIO(raw_text))]


def is_blank_row(row: Row) -> bool:
    return all(cell.strip() == "" for cell in row)


def drop_blank_rows(matrix: RowMatrix) -> RowMatrix:
    """
    Remove rows whose cells are all empty or whitespace.
    Rows with at least one non-blank cell are kept as-is (ragged rows included).
    """
    return [row for row in matrix if not is_blank_row(row)]


PARSERS: Dict[str, Callable[[str], RowMatrix]] = {
    "legacy": tokenize,
    "rfc4180": tokenize_rfc4180,
}


def get_parser(name: str) -> Callable[[str], RowMatrix]:
    try:
        return PARSERS[(name or "legacy").strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown CSV parser '{name}', expected one of: {', '.join(PARSERS)}"
        )


def parse_csv(raw_text: str, strict: bool = False) -> RowMatrix:
    """Tokenize + sanitize in one go."""
    parser = tokenize_rfc4180 if strict else tokenize
    return drop_blank_rows(parser(raw_text))


def join_rows(matrix: RowMatrix) -> str:
    """Inverse of tokenize() for matrices without embedded commas/quotes."""
    return "\n".join(",".join(row) for row in matrix)
