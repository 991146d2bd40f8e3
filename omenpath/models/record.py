"""
Parsed collection record.

A ParsedRecord is the normalized view of one input row (or of one face of a
split double-sided token). It is created by the RowParser, mutated by the
SetResolver and ConfidenceAssigner, then read by the LookupPipeline.

INVARIANTS:
- count >= 1
- finish is one of "", "foil", "etched"
- confidence is only ever lowered once assigned
- records are never shared across rows
"""

from dataclasses import dataclass, field, replace

from omenpath.models.confidence import Confidence

FINISHES = ("", "foil", "etched")

# Length of a Scryfall UUID
SCRYFALL_ID_LENGTH = 36


@dataclass
class ParsedRecord:
    """
    Normalized card row.

    Attributes:
        raw: Original row, header -> value, in source column order
        row_number: 1-based line number in the source file (header is line 1)
        set_code: Set code as exported, lowercased once validated
        set_name: Set display name, used for fuzzy correction
        finish: "" (nonfoil), "foil" or "etched"
        finish_from_text: Finish was inferred from free text (set/product name)
        scryfall_id: Direct external id
        multiverse_id: Gatherer numeric id
        mtgo_id: Magic Online catalog id
        promo_query: Search filter for promo subtypes the batch API cannot express
        extras: Dialect-specific fields with no dedicated slot
        set_code_corrected: Set code was changed or added by the SetResolver
        set_code_from_name: Set code was derived from the set name alone
    """

    raw: dict[str, str]
    row_number: int
    count: int = 1
    name: str = ""
    set_code: str = ""
    set_name: str = ""
    condition: str = ""
    language: str = ""
    finish: str = ""
    finish_from_text: bool = False
    collector_number: str = ""
    purchase_price: str = ""
    tags: str = ""
    notes: str = ""
    last_modified: str = ""
    alter: bool = False
    proxy: bool = False
    signed: bool = False
    scryfall_id: str = ""
    multiverse_id: int | None = None
    mtgo_id: int | None = None
    is_token: bool = False
    is_art_card: bool = False
    promo_query: str = ""
    extras: dict[str, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    confidence: Confidence | None = None
    set_code_corrected: bool = False
    set_code_from_name: bool = False

    @property
    def has_direct_id(self) -> bool:
        return bool(self.scryfall_id)

    @property
    def has_numeric_id(self) -> bool:
        return self.multiverse_id is not None or self.mtgo_id is not None

    @property
    def has_any_id(self) -> bool:
        return self.has_direct_id or self.has_numeric_id

    @property
    def has_usable_identifier(self) -> bool:
        """True if at least one lookup strategy can be attempted."""
        return bool(
            self.has_any_id or self.name or (self.set_code and self.collector_number)
        )

    @property
    def needs_collector_search(self) -> bool:
        """Name and collector number known, but nothing that pins the set."""
        return bool(
            self.name
            and self.collector_number
            and not self.set_code
            and not self.has_any_id
        )

    def add_warning(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)

    def lower_confidence(self, tier: Confidence) -> None:
        """Lower the record's confidence to tier; never raises it."""
        if self.confidence is None:
            self.confidence = tier
        else:
            self.confidence = self.confidence.cap(tier)

    def split(self, **changes: object) -> "ParsedRecord":
        """Copy this record for a split row, with independent mutable fields."""
        copy = replace(
            self,
            raw=dict(self.raw),
            extras=dict(self.extras),
            warnings=list(self.warnings),
        )
        for key, value in changes.items():
            setattr(copy, key, value)
        return copy
