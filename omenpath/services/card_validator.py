"""
Match validation.

A batch hit is only accepted if it agrees with what the source row said.

- Name, set and collector number mismatches invalidate the match (the
  record is then treated as not found).
- A requested finish the printing does not have is an error, except an
  etched finish inferred from free text, which is only a warning.
"""

from dataclasses import dataclass

from omenpath.models.card import CanonicalCardRecord
from omenpath.models.record import ParsedRecord
from omenpath.services.identifiers import collector_numbers_match, names_match

FINISH_LABELS = {"": "nonfoil", "foil": "foil", "etched": "etched"}


@dataclass(frozen=True, slots=True)
class MatchValidation:
    """
    Outcome of comparing a record with a candidate printing.

    Attributes:
        valid: The match may be accepted
        identity_mismatch: Name, set or collector number disagreed
        errors: Reasons the match was rejected
        warnings: Accepted discrepancies
    """

    valid: bool
    identity_mismatch: bool = False
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def error(self) -> str | None:
        return "; ".join(self.errors) if self.errors else None


def validate_match(
    record: ParsedRecord,
    card: CanonicalCardRecord,
    *,
    check_set: bool = True,
    check_collector_number: bool = True,
) -> MatchValidation:
    """Compare a record with the printing returned for it."""
    identity: list[str] = []
    warnings: list[str] = []

    if record.name and not names_match(record.name, card):
        identity.append(f'Name mismatch: expected "{record.name}", got "{card.name}"')

    if check_set and record.set_code and record.set_code.lower() != card.set_code:
        identity.append(
            f'Set code mismatch: expected "{record.set_code}", got "{card.set_code}"'
        )

    if record.collector_number and not collector_numbers_match(
        record.collector_number, card.collector_number
    ):
        message = (
            f'Collector number mismatch: expected "{record.collector_number}", '
            f'got "{card.collector_number}"'
        )
        if check_collector_number:
            identity.append(message)
        else:
            warnings.append(message)

    if identity:
        return MatchValidation(
            valid=False,
            identity_mismatch=True,
            errors=tuple(identity),
            warnings=tuple(warnings),
        )

    errors: list[str] = []
    if record.finish:
        available = ", ".join(card.finishes) or "none"
        if record.finish not in card.finishes:
            if record.finish == "etched" and record.finish_from_text:
                warnings.append(
                    f"Etched foil detected from name but not available in Scryfall "
                    f"(available: {available})"
                )
            else:
                errors.append(
                    f'Finish not available: "{FINISH_LABELS[record.finish]}" not available '
                    f"for this card (available: {available})"
                )

    return MatchValidation(valid=not errors, errors=tuple(errors), warnings=tuple(warnings))
