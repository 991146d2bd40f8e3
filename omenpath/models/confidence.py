"""
Confidence tiers and identification methods.

INVARIANTS:
- Tiers are totally ordered: very_high > high > medium > low
- A tier may only be lowered once assigned (see ParsedRecord.lower_confidence)
- Every identification method carries a ceiling tier
"""

from enum import Enum


class Confidence(str, Enum):
    """Trust level attached to a record or resolved outcome."""

    VERY_HIGH = "very_high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def downgrade(self) -> "Confidence":
        """Return the next lower tier (LOW stays LOW)."""
        return _ORDER[min(self.rank + 1, len(_ORDER) - 1)]

    def cap(self, ceiling: "Confidence") -> "Confidence":
        """Return the lower of this tier and the ceiling."""
        return self if self.rank >= ceiling.rank else ceiling


# Highest first
_ORDER = (Confidence.VERY_HIGH, Confidence.HIGH, Confidence.MEDIUM, Confidence.LOW)
_RANKS = {tier: index for index, tier in enumerate(_ORDER)}


class IdentificationMethod(str, Enum):
    """Which strategy actually produced a match."""

    DIRECT_ID = "direct_id"
    NUMERIC_ID = "numeric_id"
    SET_COLLECTOR = "set_collector"
    SET_COLLECTOR_CORRECTED = "set_collector_corrected"
    NAME_SET = "name_set"
    NAME_SET_CORRECTED = "name_set_corrected"
    NAME_COLLECTOR_SEARCH = "name_collector_search"
    FUZZY_SET = "fuzzy_set"
    NAME_ONLY = "name_only"
    FAILED = "failed"

    @property
    def ceiling(self) -> Confidence:
        return METHOD_CEILINGS[self]


METHOD_CEILINGS: dict[IdentificationMethod, Confidence] = {
    IdentificationMethod.DIRECT_ID: Confidence.VERY_HIGH,
    IdentificationMethod.NUMERIC_ID: Confidence.HIGH,
    IdentificationMethod.SET_COLLECTOR: Confidence.HIGH,
    IdentificationMethod.SET_COLLECTOR_CORRECTED: Confidence.MEDIUM,
    IdentificationMethod.NAME_SET: Confidence.MEDIUM,
    IdentificationMethod.NAME_SET_CORRECTED: Confidence.MEDIUM,
    IdentificationMethod.NAME_COLLECTOR_SEARCH: Confidence.MEDIUM,
    IdentificationMethod.FUZZY_SET: Confidence.MEDIUM,
    IdentificationMethod.NAME_ONLY: Confidence.LOW,
    IdentificationMethod.FAILED: Confidence.LOW,
}
