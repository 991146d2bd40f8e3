"""
Row parsing.

Turns one CSV row into one or more ParsedRecords using a dialect's column
mapping, field transforms and post-processing hook.

Column lookup for a mapped field:
1. The expected header, exact match
2. The expected header, case-insensitive
3. Known aliases for the field, case-insensitive ("qty" -> count, "cn" ->
   collector number, ...)

INVARIANT: Every row yields at least one record, however incomplete.
Incompleteness is reported as warnings and resolved downstream.
"""

import logging
from collections.abc import Iterable, Mapping

from omenpath.formats.base import DialectDefinition, FieldTransform
from omenpath.formats.normalizers import (
    is_language_recognized,
    normalize_condition,
    normalize_finish,
    normalize_flag,
    normalize_language,
    parse_int,
)
from omenpath.models.record import ParsedRecord
from omenpath.parsers.csv_rows import CsvTable

logger = logging.getLogger(__name__)

COLLECTOR_SEARCH_ADVISORY = (
    "Will attempt to find correct printing using name + collector number during conversion"
)

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "count": ("quantity", "qty", "amount", "count"),
    "name": ("card name", "card", "title", "name"),
    "set_code": ("set", "set code", "edition code", "expansion", "edition"),
    "set_name": ("set name", "edition name", "expansion name"),
    "collector_number": (
        "collector number",
        "cn",
        "card number",
        "number",
        "collector_number",
        "collector-number",
    ),
    "finish": ("finish", "foil", "treatment", "premium", "printing"),
    "condition": ("condition", "cond", "grade"),
    "language": ("language", "lang", "locale"),
    "scryfall_id": ("scryfall id", "scryfall_id", "scryfallid"),
}

DEFAULT_TRANSFORMS: dict[str, FieldTransform] = {
    "condition": normalize_condition,
    "language": normalize_language,
    "finish": normalize_finish,
    "alter": normalize_flag,
    "proxy": normalize_flag,
    "signed": normalize_flag,
}

STRING_FIELDS = frozenset(
    {
        "name",
        "set_code",
        "set_name",
        "condition",
        "language",
        "finish",
        "collector_number",
        "purchase_price",
        "tags",
        "notes",
        "last_modified",
        "scryfall_id",
    }
)
FLAG_FIELDS = frozenset({"alter", "proxy", "signed"})
ID_FIELDS = frozenset({"multiverse_id", "mtgo_id"})


def lookup_value(
    row: Mapping[str, str],
    header: str,
    field_name: str,
    claimed: frozenset[str] = frozenset(),
) -> str | None:
    """
    Find the value for a mapped column.

    Aliases never resolve to a column in `claimed` (lowercased headers that
    the dialect maps to some other field).

    Returns:
        The raw cell value, or None if no matching column exists.
    """
    if header in row:
        return row[header]

    lowered = {key.strip().lower(): key for key in row}
    key = lowered.get(header.lower())
    if key is not None:
        return row[key]

    for alias in FIELD_ALIASES.get(field_name, ()):
        if alias in claimed:
            continue
        key = lowered.get(alias)
        if key is not None:
            return row[key]
    return None


class RowParser:
    """Per-dialect field extractor."""

    def __init__(self, dialect: DialectDefinition):
        self.dialect = dialect
        self._claimed = frozenset(h.lower() for h in dialect.expected_headers)

    def parse_table(self, table: CsvTable) -> list[ParsedRecord]:
        return self.parse_rows(zip(table.rows, table.row_numbers))

    def parse_rows(self, rows: Iterable[tuple[dict[str, str], int]]) -> list[ParsedRecord]:
        records: list[ParsedRecord] = []
        for row, row_number in rows:
            records.extend(self.parse_row(row, row_number))
        logger.info(
            "rows_parsed",
            extra={"dialect": self.dialect.id, "records": len(records)},
        )
        return records

    def parse_row(self, row: dict[str, str], row_number: int) -> list[ParsedRecord]:
        """Parse one row; returns one record, or several for split rows."""
        record = ParsedRecord(raw=dict(row), row_number=row_number)
        raw_count: str | None = None

        for field_name, header in self.dialect.columns:
            if not header:
                continue
            value = lookup_value(row, header, field_name, self._claimed - {header.lower()})
            if value is None:
                continue
            value = value.strip()
            if field_name == "count":
                raw_count = value
                continue
            transform = self.dialect.transforms.get(field_name) or DEFAULT_TRANSFORMS.get(
                field_name
            )
            if transform is not None:
                value = transform(value)
            self._assign(record, field_name, value)

        self._assign_count(record, raw_count)

        if self.dialect.post_process is not None:
            records = self.dialect.post_process(record)
        else:
            records = [record]

        for parsed in records:
            self._annotate(parsed)
        return records

    def _assign(self, record: ParsedRecord, field_name: str, value: str) -> None:
        if field_name in STRING_FIELDS:
            setattr(record, field_name, value)
        elif field_name in FLAG_FIELDS:
            setattr(record, field_name, bool(value))
        elif field_name in ID_FIELDS:
            setattr(record, field_name, parse_int(value))
        elif value:
            record.extras[field_name] = value

    def _assign_count(self, record: ParsedRecord, raw_count: str | None) -> None:
        if not raw_count:
            return
        count = parse_int(raw_count)
        if count is None or count < 1:
            record.add_warning(f'Invalid quantity "{raw_count}", defaulting to 1')
            return
        record.count = count

    def _annotate(self, record: ParsedRecord) -> None:
        if not is_language_recognized(record.language):
            record.add_warning(f'Unrecognized language "{record.language}"')
        # A set name is usually resolved to a code before lookup
        if record.needs_collector_search and not record.set_name:
            record.add_warning(COLLECTOR_SEARCH_ADVISORY)
