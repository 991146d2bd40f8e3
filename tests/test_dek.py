"""Tests for the MTGO .dek parser."""

import pytest

from omenpath.models.failure import FailureKind, KnownError
from omenpath.parsers.dek import is_dek_format, parse_dek

SAMPLE_DEK = """<?xml version="1.0" encoding="utf-8"?>
<Deck xmlns:xsd="http://www.w3.org/2001/XMLSchema">
  <NetDeckID>0</NetDeckID>
  <PreconstructedDeckID>0</PreconstructedDeckID>
  <Cards CatID="79038" Quantity="4" Sideboard="false" Name="Reaper King" />
  <Cards CatID="12345" Quantity="2" Sideboard="true" Name="Duress" />
  <Cards CatID="555" Quantity="zero" Sideboard="false" Name="Island" />
</Deck>
"""


class TestIsDekFormat:
    def test_detects_dek(self) -> None:
        assert is_dek_format(SAMPLE_DEK)

    def test_csv_is_not_dek(self) -> None:
        assert not is_dek_format("Count,Name\n1,Island\n")


class TestParseDek:
    def test_parses_cards_with_mtgo_ids(self) -> None:
        records = parse_dek(SAMPLE_DEK)

        assert [r.name for r in records] == ["Reaper King", "Duress", "Island"]
        assert records[0].mtgo_id == 79038
        assert records[0].count == 4

    def test_sideboard_entries_are_kept_and_marked(self) -> None:
        records = parse_dek(SAMPLE_DEK)

        assert records[1].extras == {"sideboard": "true"}
        assert "sideboard" not in records[0].extras

    def test_invalid_quantity_defaults_to_one(self) -> None:
        island = parse_dek(SAMPLE_DEK)[2]

        assert island.count == 1
        assert 'Invalid quantity "zero", defaulting to 1' in island.warnings

    def test_malformed_xml_raises_known_error(self) -> None:
        with pytest.raises(KnownError) as exc_info:
            parse_dek('<?xml version="1.0"?><Deck><Cards')

        assert exc_info.value.kind == FailureKind.INVALID_INPUT

    def test_deck_without_cards_raises(self) -> None:
        with pytest.raises(KnownError, match="no card entries"):
            parse_dek('<?xml version="1.0"?><Deck></Deck>')
