"""
CSV text preprocessing and row reading.

Handles the export quirks every dialect shares: a UTF-8 BOM, Excel's
"sep=," hint line, blank lines and ragged rows.
"""

import csv
from dataclasses import dataclass, field
from io import StringIO

from omenpath.models.failure import FailureKind, KnownError


@dataclass(frozen=True, slots=True)
class CsvTable:
    """
    Header row plus data rows.

    Attributes:
        headers: Header cells, stripped, in file order
        rows: Data rows as header -> value, in file order
        row_numbers: 1-based source line on which each data row starts
    """

    headers: tuple[str, ...]
    rows: list[dict[str, str]] = field(default_factory=list)
    row_numbers: list[int] = field(default_factory=list)


def preprocess(text: str) -> str:
    """Strip a BOM and a leading "sep=" delimiter hint line."""
    text = text.lstrip("\ufeff")
    first_line, _newline, rest = text.partition("\n")
    if first_line.strip().lower().startswith("sep="):
        return rest
    return text


def read_table(text: str, delimiter: str = ",") -> CsvTable:
    """
    Parse CSV text into a header row and data rows.

    Blank lines are skipped. Short rows are padded with empty strings and
    cells beyond the header row are dropped. When a header repeats, the
    first column with that header wins.

    Raises:
        KnownError: If the text is not parseable CSV
    """
    cleaned = preprocess(text)
    # A dropped "sep=" hint line still counts toward source line numbers
    first_line = 1 + text.count("\n") - cleaned.count("\n")
    reader = csv.reader(StringIO(cleaned), delimiter=delimiter)
    lines: list[tuple[int, list[str]]] = []
    try:
        start = first_line
        for line in reader:
            if any(cell.strip() for cell in line):
                lines.append((start, line))
            start = first_line + reader.line_num
    except csv.Error as e:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="The file could not be read as CSV.",
            detail=str(e),
        ) from e

    if not lines:
        return CsvTable(headers=())

    headers = tuple(cell.strip() for cell in lines[0][1])
    rows = []
    row_numbers = []
    for line_number, line in lines[1:]:
        row: dict[str, str] = {}
        for index, header in enumerate(headers):
            if header in row:
                continue
            row[header] = line[index] if index < len(line) else ""
        rows.append(row)
        row_numbers.append(line_number)

    return CsvTable(headers=headers, rows=rows, row_numbers=row_numbers)


def read_headers(text: str, delimiter: str = ",") -> tuple[str, ...]:
    """Header row only."""
    return read_table(text, delimiter).headers
