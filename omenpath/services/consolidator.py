"""
Result consolidation.

Outcomes that would export identically are merged into one row: counts are
summed and source row numbers accumulated. Merged rows are then ordered
so problems surface first (failures, then warnings, then clean rows),
alphabetically by card name within each group, and output row numbers
are assigned.
"""

import logging

from omenpath.models.outcome import ConversionOutcome
from omenpath.services.export_formatter import build_row

logger = logging.getLogger(__name__)

ConsolidationKey = tuple[object, ...]


def consolidation_key(outcome: ConversionOutcome) -> ConsolidationKey:
    """Every exported field except the count, plus the outcome status."""
    row = outcome.row or build_row(outcome)
    return (
        tuple(sorted(row.items())),
        outcome.success,
        outcome.error,
        tuple(outcome.warnings),
    )


def sort_key(outcome: ConversionOutcome) -> tuple[int, str]:
    if not outcome.success:
        group = 0
    elif outcome.warnings:
        group = 1
    else:
        group = 2
    return group, outcome.name.casefold()


class ResultConsolidator:
    """Merges identical outcomes and orders them for export."""

    def consolidate(self, outcomes: list[ConversionOutcome]) -> list[ConversionOutcome]:
        merged: dict[ConsolidationKey, ConversionOutcome] = {}
        for outcome in outcomes:
            if not outcome.row:
                outcome.row = build_row(outcome)
            key = consolidation_key(outcome)
            existing = merged.get(key)
            if existing is None:
                merged[key] = outcome
                continue
            existing.count += outcome.count
            existing.source_rows.extend(outcome.source_rows)

        # Stable sort keeps first-seen order for equal names
        ordered = sorted(merged.values(), key=sort_key)
        for index, outcome in enumerate(ordered):
            outcome.output_row = index + 2
            outcome.source_rows.sort()

        logger.info(
            "results_consolidated",
            extra={"input": len(outcomes), "output": len(ordered)},
        )
        return ordered
