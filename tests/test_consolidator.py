"""Tests for result consolidation."""

from omenpath.models.card import CanonicalCardRecord
from omenpath.models.confidence import Confidence, IdentificationMethod
from omenpath.models.failure import FailureKind
from omenpath.models.outcome import ConversionOutcome
from omenpath.models.record import ParsedRecord
from omenpath.services.consolidator import ResultConsolidator


def resolved(
    name: str, row_number: int, count: int = 1, **record_fields: object
) -> ConversionOutcome:
    record = ParsedRecord(raw={}, row_number=row_number, count=count, name=name)
    for key, value in record_fields.items():
        setattr(record, key, value)
    card = CanonicalCardRecord(
        id=f"id-{name}", name=name, set_code="lea", collector_number="1"
    )
    return ConversionOutcome(
        record=record,
        success=True,
        confidence=Confidence.HIGH,
        method=IdentificationMethod.SET_COLLECTOR,
        card=card,
        count=count,
        source_rows=[row_number],
    )


def failed(name: str, row_number: int) -> ConversionOutcome:
    record = ParsedRecord(raw={}, row_number=row_number, name=name)
    return ConversionOutcome(
        record=record,
        success=False,
        confidence=Confidence.LOW,
        method=IdentificationMethod.FAILED,
        error=f'Card "{name}" not found by name alone',
        failure_kind=FailureKind.NOT_FOUND,
        source_rows=[row_number],
    )


class TestResultConsolidator:
    def test_identical_rows_are_merged(self) -> None:
        """1 + 3 copies of the same printing export as one row of 4."""
        outcomes = [resolved("Lightning Bolt", 2), resolved("Lightning Bolt", 5, count=3)]

        (merged,) = ResultConsolidator().consolidate(outcomes)

        assert merged.count == 4
        assert merged.source_rows == [2, 5]
        assert merged.output_row == 2

    def test_differing_fields_are_kept_apart(self) -> None:
        outcomes = [
            resolved("Lightning Bolt", 2),
            resolved("Lightning Bolt", 3, condition="Lightly Played"),
            resolved("Lightning Bolt", 4, finish="foil"),
        ]

        assert len(ResultConsolidator().consolidate(outcomes)) == 3

    def test_warnings_prevent_merging(self) -> None:
        warned = resolved("Lightning Bolt", 3)
        warned.add_warning("Language mismatch")

        result = ResultConsolidator().consolidate([resolved("Lightning Bolt", 2), warned])

        assert len(result) == 2

    def test_ordering_puts_problems_first(self) -> None:
        warned = resolved("Ancestral Recall", 3)
        warned.add_warning("Set code corrected")
        outcomes = [
            resolved("Shivan Dragon", 2),
            warned,
            failed("Zzyzx", 4),
            resolved("Black Lotus", 5),
            failed("Aether Vial", 6),
        ]

        result = ResultConsolidator().consolidate(outcomes)

        assert [outcome.name for outcome in result] == [
            "Aether Vial",
            "Zzyzx",
            "Ancestral Recall",
            "Black Lotus",
            "Shivan Dragon",
        ]
        assert [outcome.output_row for outcome in result] == [2, 3, 4, 5, 6]

    def test_name_order_ignores_case(self) -> None:
        result = ResultConsolidator().consolidate(
            [resolved("island", 2), resolved("Forest", 3)]
        )

        assert [outcome.name for outcome in result] == ["Forest", "island"]
