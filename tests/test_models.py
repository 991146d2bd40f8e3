"""Tests for confidence tiers, parsed records, outcomes and the failure envelope."""

import pytest

from omenpath.models.card import CanonicalCardRecord, SetEntry
from omenpath.models.confidence import Confidence, IdentificationMethod
from omenpath.models.failure import (
    ApiResponse,
    ConversionCancelled,
    FailureKind,
    KnownError,
    OutcomeType,
)
from omenpath.models.outcome import ConversionOutcome
from omenpath.models.record import ParsedRecord


class TestConfidence:
    def test_downgrade_steps_one_tier(self) -> None:
        """Each downgrade drops exactly one tier."""
        assert Confidence.VERY_HIGH.downgrade() == Confidence.HIGH
        assert Confidence.HIGH.downgrade() == Confidence.MEDIUM
        assert Confidence.MEDIUM.downgrade() == Confidence.LOW

    def test_low_cannot_go_lower(self) -> None:
        assert Confidence.LOW.downgrade() == Confidence.LOW

    def test_cap_returns_lower_tier(self) -> None:
        """Capping never raises a tier."""
        assert Confidence.VERY_HIGH.cap(Confidence.MEDIUM) == Confidence.MEDIUM
        assert Confidence.LOW.cap(Confidence.VERY_HIGH) == Confidence.LOW
        assert Confidence.HIGH.cap(Confidence.HIGH) == Confidence.HIGH

    @pytest.mark.parametrize(
        ("method", "ceiling"),
        [
            (IdentificationMethod.DIRECT_ID, Confidence.VERY_HIGH),
            (IdentificationMethod.NUMERIC_ID, Confidence.HIGH),
            (IdentificationMethod.SET_COLLECTOR, Confidence.HIGH),
            (IdentificationMethod.SET_COLLECTOR_CORRECTED, Confidence.MEDIUM),
            (IdentificationMethod.FUZZY_SET, Confidence.MEDIUM),
            (IdentificationMethod.NAME_COLLECTOR_SEARCH, Confidence.MEDIUM),
            (IdentificationMethod.NAME_ONLY, Confidence.LOW),
        ],
    )
    def test_method_ceilings(self, method: IdentificationMethod, ceiling: Confidence) -> None:
        assert method.ceiling == ceiling


class TestParsedRecord:
    def test_defaults(self) -> None:
        """A bare record counts one copy with no finish."""
        record = ParsedRecord(raw={}, row_number=2)

        assert record.count == 1
        assert record.finish == ""
        assert record.confidence is None
        assert not record.has_usable_identifier

    def test_lower_confidence_never_raises(self) -> None:
        record = ParsedRecord(raw={}, row_number=2)
        record.lower_confidence(Confidence.MEDIUM)
        record.lower_confidence(Confidence.VERY_HIGH)

        assert record.confidence == Confidence.MEDIUM

    def test_needs_collector_search(self) -> None:
        """Name + collector number without a set or ids needs a search."""
        record = ParsedRecord(raw={}, row_number=2, name="Lightning Bolt", collector_number="161")
        assert record.needs_collector_search

        record.set_code = "lea"
        assert not record.needs_collector_search

    def test_warnings_are_deduplicated(self) -> None:
        record = ParsedRecord(raw={}, row_number=2)
        record.add_warning("Same thing")
        record.add_warning("Same thing")

        assert record.warnings == ["Same thing"]

    def test_split_copies_mutable_fields(self) -> None:
        """Split records never share extras or warnings with the original."""
        record = ParsedRecord(raw={"Name": "x"}, row_number=3, name="x", extras={"a": "1"})
        face = record.split(name="y")
        face.extras["b"] = "2"
        face.add_warning("face only")

        assert face.name == "y"
        assert face.row_number == 3
        assert record.extras == {"a": "1"}
        assert record.warnings == []


class TestCanonicalCardRecord:
    def test_from_scryfall(self) -> None:
        card = CanonicalCardRecord.from_scryfall(
            {
                "id": "abc",
                "name": "Fire // Ice",
                "set": "MH2",
                "collector_number": "290",
                "finishes": ["nonfoil", "foil"],
                "lang": "ja",
                "prices": {"usd": "1.00", "eur": None},
                "multiverse_ids": [522254],
                "mtgo_id": 91234,
            }
        )

        assert card.set_code == "mh2"
        assert card.finishes == ("nonfoil", "foil")
        assert card.prices == {"usd": "1.00"}
        assert card.multiverse_ids == (522254,)
        assert card.face_names == ("Fire", "Ice")

    def test_set_entry_round_trips_to_dict(self) -> None:
        entry = SetEntry.from_scryfall(
            {
                "code": "TDOM",
                "name": "Dominaria Tokens",
                "set_type": "token",
                "parent_set_code": "DOM",
            }
        )

        assert entry.code == "tdom"
        assert entry.parent_set_code == "dom"
        assert SetEntry.from_scryfall(entry.to_dict()) == entry


class TestConversionOutcome:
    def test_downgrade_adds_warning(self) -> None:
        outcome = ConversionOutcome(
            record=ParsedRecord(raw={}, row_number=2, name="Lightning Bolt"),
            success=True,
            confidence=Confidence.HIGH,
            method=IdentificationMethod.SET_COLLECTOR,
        )
        outcome.downgrade("Language mismatch")

        assert outcome.confidence == Confidence.MEDIUM
        assert outcome.warnings == ["Language mismatch"]
        assert outcome.has_issues

    def test_name_falls_back_to_record(self) -> None:
        outcome = ConversionOutcome(
            record=ParsedRecord(raw={}, row_number=2, name="Mystery Card"),
            success=False,
            confidence=Confidence.LOW,
            method=IdentificationMethod.FAILED,
        )

        assert outcome.name == "Mystery Card"


class TestFailureEnvelope:
    def test_success_response_structure(self) -> None:
        response = ApiResponse.success({"rows": 3})

        assert response.outcome == OutcomeType.SUCCESS
        assert response.data == {"rows": 3}
        assert response.failure is None

    def test_known_error_converts_to_response(self) -> None:
        """KnownError carries its kind and suggestion into the envelope."""
        error = KnownError(
            kind=FailureKind.UNKNOWN_FORMAT,
            message='Unknown format "foo".',
            suggestion="Use auto",
        )
        response = error.to_response()

        assert response.outcome == OutcomeType.KNOWN_FAILURE
        assert response.failure is not None
        assert response.failure.kind == FailureKind.UNKNOWN_FORMAT
        assert response.failure.suggestion == "Use auto"
        assert error.status_code == 400

    def test_unknown_failure_hides_message(self) -> None:
        """Only the exception type is exposed for unexpected errors."""
        response = ApiResponse.unknown_failure(RuntimeError("secret internals"))

        assert response.failure is not None
        assert response.failure.kind == FailureKind.UNKNOWN
        assert response.failure.detail == "RuntimeError"
        assert "secret" not in response.failure.message

    def test_cancellation_is_a_known_error(self) -> None:
        error = ConversionCancelled(detail="user request")

        assert isinstance(error, KnownError)
        assert error.kind == FailureKind.CANCELLED
        assert error.status_code == 499
