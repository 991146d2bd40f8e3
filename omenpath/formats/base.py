"""
Dialect definitions and header scoring.

A dialect is one vendor's CSV export layout: which header carries which
logical field, how to normalize each field, which headers only that vendor
emits, and any row post-processing its quirks require.

Scoring a header row against a dialect:

    base     = matched expected columns / expected columns  (case-insensitive)
    + 0.5    per strong indicator present
    + 0.1    per expected column matched with exact case
    + 0.3    per matched high-value identity column (external or numeric id)
    - 0.05   per unrecognized header beyond the first 5 (at most 0.3)
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

from omenpath.models.record import ParsedRecord

FieldTransform = Callable[[str], str]
PostProcessor = Callable[[ParsedRecord], list[ParsedRecord]]

# Headers that pin a printing by themselves, lowercased
HIGH_VALUE_COLUMNS = frozenset(
    {
        "scryfall id",
        "scryfall_id",
        "multiverse id",
        "multiverse_id",
        "mtgo id",
        "id #",
        "json id",
    }
)


@dataclass(frozen=True, slots=True)
class ScoreWeights:
    """Tunable weights for header scoring."""

    strong_bonus: float = 0.5
    exact_case_bonus: float = 0.1
    identity_bonus: float = 0.3
    extra_tolerance: int = 5
    extra_penalty: float = 0.05
    max_extra_penalty: float = 0.3


DEFAULT_WEIGHTS = ScoreWeights()


@dataclass(frozen=True, slots=True)
class DialectScore:
    """Breakdown of one dialect's score against a header row."""

    dialect_id: str
    score: float
    matched: tuple[str, ...] = ()
    strong: tuple[str, ...] = ()
    unmatched: int = 0

    @property
    def confidence(self) -> float:
        """Score clamped to [0, 1]."""
        return max(0.0, min(self.score, 1.0))


@dataclass(frozen=True, slots=True)
class DialectDefinition:
    """
    One registered export layout.

    Attributes:
        id: Stable identifier (e.g., "moxfield")
        name: Display name
        columns: Ordered (logical field, expected header) pairs. An empty
            header means the dialect has no column for that field.
        strong_indicators: Headers empirically unique to this dialect
        transforms: Per-field normalization, logical field -> function
        post_process: Row hook that may rewrite or split a record
        detectable: False for fallback dialects never chosen by detection
    """

    id: str
    name: str
    columns: tuple[tuple[str, str], ...]
    strong_indicators: tuple[str, ...] = ()
    transforms: Mapping[str, FieldTransform] = field(default_factory=dict)
    post_process: PostProcessor | None = None
    delimiter: str = ","
    description: str = ""
    detectable: bool = True

    @property
    def expected_headers(self) -> tuple[str, ...]:
        """Non-empty expected headers, deduplicated, in column order."""
        seen: set[str] = set()
        headers = []
        for _field, header in self.columns:
            if header and header.lower() not in seen:
                seen.add(header.lower())
                headers.append(header)
        return tuple(headers)

    def score(
        self,
        headers: Sequence[str],
        weights: ScoreWeights = DEFAULT_WEIGHTS,
    ) -> DialectScore:
        """Score a header row against this dialect."""
        present = [h.strip() for h in headers if h and h.strip()]
        exact = set(present)
        lowered = {h.lower() for h in present}

        expected = self.expected_headers
        if not expected or not present:
            return DialectScore(dialect_id=self.id, score=0.0)

        matched = tuple(h for h in expected if h.lower() in lowered)
        strong = tuple(s for s in self.strong_indicators if s.lower() in lowered)

        score = len(matched) / len(expected)
        score += weights.strong_bonus * len(strong)
        score += weights.exact_case_bonus * sum(1 for h in matched if h in exact)
        score += weights.identity_bonus * sum(
            1 for h in matched if h.lower() in HIGH_VALUE_COLUMNS
        )

        recognized = {h.lower() for h in matched} | {s.lower() for s in strong}
        unmatched = len(lowered - recognized)
        if unmatched > weights.extra_tolerance:
            score -= min(
                weights.max_extra_penalty,
                (unmatched - weights.extra_tolerance) * weights.extra_penalty,
            )

        return DialectScore(
            dialect_id=self.id,
            score=round(score, 6),
            matched=matched,
            strong=strong,
            unmatched=unmatched,
        )
