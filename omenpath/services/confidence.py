"""
Initial confidence assignment.

Deterministic table from the identifiers a record carries (after set
resolution) to its starting tier. The starting tier is a ceiling: later
stages may only lower it.

    direct id                          very_high
    multiverse / MTGO id               high
    set + collector number             high (medium if the set was corrected)
    name + collector number, no set    medium (pending name + number search)
    set name + collector number        medium
    name + set                         medium
    name only                          low
    nothing usable                     low, with a "will fail" warning
"""

import logging

from omenpath.models.confidence import Confidence
from omenpath.models.record import ParsedRecord

logger = logging.getLogger(__name__)

NAME_ONLY_WARNING = "Only card name available - correct version unlikely to be found"
NO_IDENTIFIER_WARNING = (
    "Will fail conversion - no usable identifiers available "
    "(need name, or set+collector#, or Scryfall/Multiverse/MTGO ID)"
)


def initial_confidence(record: ParsedRecord) -> tuple[Confidence, str | None]:
    """Return the starting tier for a record and an optional warning."""
    if record.has_direct_id:
        return Confidence.VERY_HIGH, None
    if record.has_numeric_id:
        return Confidence.HIGH, None
    if record.set_code and record.collector_number:
        warning = None
        if not record.name:
            warning = "Missing card name - using set + collector number for lookup"
        if record.set_code_corrected:
            return Confidence.MEDIUM, warning
        return Confidence.HIGH, warning
    if record.needs_collector_search:
        return Confidence.MEDIUM, None
    if record.set_name and record.collector_number:
        warning = None
        if not record.name:
            warning = "Missing card name - using set name + collector number for lookup"
        return Confidence.MEDIUM, warning
    if record.name and record.set_code:
        return Confidence.MEDIUM, None
    if record.name:
        return Confidence.LOW, None if record.set_name else NAME_ONLY_WARNING
    return Confidence.LOW, NO_IDENTIFIER_WARNING


class ConfidenceAssigner:
    """Applies the initial confidence table to records in place."""

    def assign(self, record: ParsedRecord) -> Confidence:
        tier, warning = initial_confidence(record)
        record.lower_confidence(tier)
        if warning:
            record.add_warning(warning)
        return record.confidence or tier

    def assign_all(self, records: list[ParsedRecord]) -> None:
        counts: dict[str, int] = {}
        for record in records:
            tier = self.assign(record)
            counts[tier.value] = counts.get(tier.value, 0) + 1
        logger.info("confidence_assigned", extra={"tiers": counts})
