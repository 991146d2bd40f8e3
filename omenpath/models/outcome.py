"""
Conversion outcome models.

INVARIANTS:
- A successful outcome always carries a card
- A failed outcome always carries an error and a failure kind
- confidence never exceeds the originating record's confidence
"""

from dataclasses import dataclass, field

from omenpath.models.card import CanonicalCardRecord
from omenpath.models.confidence import Confidence, IdentificationMethod
from omenpath.models.failure import FailureKind
from omenpath.models.record import ParsedRecord


@dataclass
class ConversionOutcome:
    """
    Result of identifying one ParsedRecord.

    Attributes:
        record: The record this outcome was produced from
        card: Matched printing (None on failure)
        row: Exported field values, column -> value
        count: Copies represented (summed on consolidation)
        source_rows: Source line numbers merged into this outcome
        output_row: Line number in the exported file, assigned last
    """

    record: ParsedRecord
    success: bool
    confidence: Confidence
    method: IdentificationMethod
    card: CanonicalCardRecord | None = None
    row: dict[str, str] = field(default_factory=dict)
    count: int = 1
    error: str | None = None
    failure_kind: FailureKind | None = None
    warnings: list[str] = field(default_factory=list)
    language_mismatch: bool = False
    source_rows: list[int] = field(default_factory=list)
    output_row: int = 0

    @property
    def name(self) -> str:
        """Resolved name, falling back to the source name."""
        if self.card is not None:
            return self.card.name
        return self.record.name

    @property
    def has_issues(self) -> bool:
        return not self.success or bool(self.warnings)

    def add_warning(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)

    def downgrade(self, reason: str) -> None:
        """Drop one confidence tier and record why."""
        self.confidence = self.confidence.downgrade()
        self.add_warning(reason)
