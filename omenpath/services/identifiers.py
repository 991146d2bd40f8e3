"""
Lookup identifiers for the Scryfall batch endpoint.

Each record is looked up by its single best identifier:

    direct id > multiverse id > MTGO id > set + collector number > name + set > name

Identifiers are frozen and hashable, so identical identifiers from different
rows collapse into one batch entry and the result fans back out.
"""

import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Any

from omenpath.models.card import CanonicalCardRecord
from omenpath.models.confidence import IdentificationMethod
from omenpath.models.record import SCRYFALL_ID_LENGTH, ParsedRecord


class IdentifierKind(str, Enum):
    """Which field of a record the lookup uses."""

    SCRYFALL_ID = "scryfall_id"
    MULTIVERSE_ID = "multiverse_id"
    MTGO_ID = "mtgo_id"
    SET_COLLECTOR = "set_collector"
    NAME_SET = "name_set"
    NAME = "name"


@dataclass(frozen=True, slots=True)
class CardIdentifier:
    """One entry of a batch request."""

    kind: IdentifierKind
    scryfall_id: str = ""
    numeric_id: int | None = None
    name: str = ""
    set_code: str = ""
    collector_number: str = ""

    def to_payload(self) -> dict[str, Any]:
        """Identifier object in Scryfall's request format."""
        if self.kind == IdentifierKind.SCRYFALL_ID:
            return {"id": self.scryfall_id}
        if self.kind == IdentifierKind.MULTIVERSE_ID:
            return {"multiverse_id": self.numeric_id}
        if self.kind == IdentifierKind.MTGO_ID:
            return {"mtgo_id": self.numeric_id}
        if self.kind == IdentifierKind.SET_COLLECTOR:
            return {"set": self.set_code, "collector_number": self.collector_number}
        if self.kind == IdentifierKind.NAME_SET:
            return {"name": self.name, "set": self.set_code}
        return {"name": self.name}

    def matches(self, card: CanonicalCardRecord) -> bool:
        """True if the card is a response to this identifier."""
        if self.kind == IdentifierKind.SCRYFALL_ID:
            return card.id.lower() == self.scryfall_id.lower()
        if self.kind == IdentifierKind.MULTIVERSE_ID:
            return self.numeric_id in card.multiverse_ids
        if self.kind == IdentifierKind.MTGO_ID:
            # Foil printings have their own MTGO id
            return self.numeric_id in (card.mtgo_id, card.mtgo_foil_id)
        if self.kind == IdentifierKind.SET_COLLECTOR:
            return card.set_code == self.set_code.lower() and collector_numbers_match(
                self.collector_number, card.collector_number
            )
        if self.kind == IdentifierKind.NAME_SET:
            return card.set_code == self.set_code.lower() and names_match(self.name, card)
        return names_match(self.name, card)

    def matches_payload(self, payload: dict[str, Any]) -> bool:
        """True if a not_found entry echoes this identifier."""
        expected = self.to_payload()
        if set(expected) != set(payload):
            return False
        return all(
            str(expected[key]).strip().lower() == str(payload[key]).strip().lower()
            for key in expected
        )

    def not_found_message(self) -> str:
        if self.kind == IdentifierKind.SCRYFALL_ID:
            return f'Card not found with Scryfall ID "{self.scryfall_id}"'
        if self.kind == IdentifierKind.MULTIVERSE_ID:
            return f"Card not found with Multiverse ID {self.numeric_id}"
        if self.kind == IdentifierKind.MTGO_ID:
            return f"Card not found with MTGO ID {self.numeric_id}"
        if self.kind == IdentifierKind.SET_COLLECTOR:
            return (
                f'Card not found with set "{self.set_code}" '
                f'and collector number "{self.collector_number}"'
            )
        if self.kind == IdentifierKind.NAME_SET:
            return f'Card "{self.name}" not found in set "{self.set_code}"'
        return f'Card "{self.name}" not found by name alone'


def best_identifier(record: ParsedRecord) -> tuple[CardIdentifier | None, str | None]:
    """
    Pick the strongest identifier a record carries.

    Returns:
        (identifier, warning). identifier is None when nothing is usable.
    """
    if record.scryfall_id:
        scryfall_id = record.scryfall_id.strip()
        warning = None
        if len(scryfall_id) > SCRYFALL_ID_LENGTH:
            scryfall_id = scryfall_id[:SCRYFALL_ID_LENGTH]
            warning = f"Scryfall ID was longer than {SCRYFALL_ID_LENGTH} characters and was trimmed"
        return CardIdentifier(IdentifierKind.SCRYFALL_ID, scryfall_id=scryfall_id), warning
    if record.multiverse_id is not None:
        return CardIdentifier(IdentifierKind.MULTIVERSE_ID, numeric_id=record.multiverse_id), None
    if record.mtgo_id is not None:
        return CardIdentifier(IdentifierKind.MTGO_ID, numeric_id=record.mtgo_id), None
    if record.set_code and record.collector_number:
        return (
            CardIdentifier(
                IdentifierKind.SET_COLLECTOR,
                set_code=record.set_code.lower(),
                collector_number=record.collector_number,
            ),
            None,
        )
    if record.name and record.set_code:
        return (
            CardIdentifier(
                IdentifierKind.NAME_SET, name=record.name, set_code=record.set_code.lower()
            ),
            None,
        )
    if record.name:
        return CardIdentifier(IdentifierKind.NAME, name=record.name), None
    return None, None


def method_for(identifier: CardIdentifier, record: ParsedRecord) -> IdentificationMethod:
    """Identification method that a hit on this identifier represents."""
    kind = identifier.kind
    if kind == IdentifierKind.SCRYFALL_ID:
        return IdentificationMethod.DIRECT_ID
    if kind in (IdentifierKind.MULTIVERSE_ID, IdentifierKind.MTGO_ID):
        return IdentificationMethod.NUMERIC_ID
    if kind == IdentifierKind.SET_COLLECTOR:
        if record.set_code_from_name:
            return IdentificationMethod.FUZZY_SET
        if record.set_code_corrected:
            return IdentificationMethod.SET_COLLECTOR_CORRECTED
        return IdentificationMethod.SET_COLLECTOR
    if kind == IdentifierKind.NAME_SET:
        if record.set_code_corrected:
            return IdentificationMethod.NAME_SET_CORRECTED
        return IdentificationMethod.NAME_SET
    return IdentificationMethod.NAME_ONLY


def normalize_name(name: str) -> str:
    """Casefold, strip accents, and unify "A/B" and "A // B" spellings."""
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    parts = [part.strip() for part in stripped.replace("//", "/").split("/")]
    return " // ".join(" ".join(part.split()) for part in parts if part).casefold()


def names_match(name: str, card: CanonicalCardRecord) -> bool:
    """
    Compare a source name with a card, allowing a single face of a
    multi-face card to stand for the whole card (and vice versa).
    """
    source = normalize_name(name)
    if not source:
        return True
    target = normalize_name(card.name)
    if source == target:
        return True
    target_faces = [normalize_name(face) for face in card.face_names]
    if source in target_faces:
        return True
    source_faces = source.split(" // ")
    return len(source_faces) > 1 and target in source_faces


def collector_numbers_match(expected: str, actual: str) -> bool:
    """Case-insensitive, ignoring leading zeros ("007" == "7")."""
    return _collector_key(expected) == _collector_key(actual)


def _collector_key(value: str) -> str:
    cleaned = value.strip().lower()
    return cleaned.lstrip("0") or cleaned
