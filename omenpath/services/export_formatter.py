"""
Moxfield collection CSV export.

THIS MODULE HANDLES OUTPUT RENDERING ONLY.

Successful outcomes export the resolved printing (name, set, collector
number, language); failed outcomes export what the source row said so the
user can fix and re-import them. A trailing Notes column is added whenever
any outcome carries an error or a warning.
"""

import csv
from io import StringIO

from omenpath.formats.normalizers import (
    language_display_name,
    normalize_condition,
    normalize_language,
)
from omenpath.models.confidence import IdentificationMethod
from omenpath.models.outcome import ConversionOutcome

EXPORT_COLUMNS = (
    "Count",
    "Name",
    "Edition",
    "Condition",
    "Language",
    "Foil",
    "Last Modified",
    "Collector Number",
    "Alter",
    "Proxy",
    "Signed",
    "Purchase Price",
)
NOTES_COLUMN = "Notes"
DEFAULT_LANGUAGE = "English"


def _flag(value: bool) -> str:
    return "TRUE" if value else "FALSE"


def _language(outcome: ConversionOutcome) -> str:
    record = outcome.record
    source = normalize_language(record.language)
    if outcome.card is None or outcome.method == IdentificationMethod.NAME_ONLY:
        return source or DEFAULT_LANGUAGE
    return language_display_name(outcome.card.lang)


def build_row(outcome: ConversionOutcome) -> dict[str, str]:
    """Export field values for one outcome (Count excluded)."""
    record = outcome.record
    card = outcome.card
    return {
        "Name": card.name if card else record.name,
        "Edition": card.set_code if card else record.set_code.lower(),
        "Condition": normalize_condition(record.condition),
        "Language": _language(outcome),
        "Foil": record.finish,
        "Last Modified": record.last_modified,
        "Collector Number": card.collector_number if card else record.collector_number,
        "Alter": _flag(record.alter),
        "Proxy": _flag(record.proxy),
        "Signed": _flag(record.signed),
        "Purchase Price": record.purchase_price,
    }


def format_notes(outcome: ConversionOutcome) -> str:
    notes: list[str] = []
    if not outcome.success:
        notes.append(f"ERROR: {outcome.error or 'Conversion failed'}")
    notes.extend(f"WARNING: {warning}" for warning in outcome.warnings)
    return "; ".join(notes)


def format_outcomes_csv(outcomes: list[ConversionOutcome]) -> str:
    """
    Serialize outcomes as a Moxfield collection CSV.

    Outcomes are written in the order given; rows are built on demand for
    outcomes that do not carry one yet.
    """
    with_notes = any(outcome.has_issues for outcome in outcomes)
    headers = list(EXPORT_COLUMNS)
    if with_notes:
        headers.append(NOTES_COLUMN)

    buffer = StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for outcome in outcomes:
        row = outcome.row or build_row(outcome)
        values = [str(outcome.count)] + [row.get(column, "") for column in EXPORT_COLUMNS[1:]]
        if with_notes:
            values.append(format_notes(outcome))
        writer.writerow(values)
    return buffer.getvalue()
