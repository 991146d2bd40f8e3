"""
Format detection.

Scores a header row against every detectable dialect and picks a winner
only when it clears an absolute floor AND beats the runner-up by a margin.
Structurally similar exports (Moxfield vs. Cardsphere, for example) share
most columns, so the margin rule matters as much as the floor.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from omenpath.config import settings
from omenpath.formats.base import DEFAULT_WEIGHTS, DialectDefinition, DialectScore, ScoreWeights
from omenpath.formats.registry import FormatRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DetectionResult:
    """
    A confident detection.

    Attributes:
        dialect: The winning dialect
        score: Raw score (may exceed 1.0)
        confidence: Score clamped to [0, 1]
        matching_headers: Expected headers of the dialect found in the file
        runner_up: Score of the second-best dialect, if any
    """

    dialect: DialectDefinition
    score: float
    confidence: float
    matching_headers: tuple[str, ...]
    runner_up: DialectScore | None = None


class FormatDetector:
    """Scoring-based dialect classifier."""

    def __init__(
        self,
        registry: FormatRegistry,
        *,
        min_score: float | None = None,
        min_margin: float | None = None,
        weights: ScoreWeights = DEFAULT_WEIGHTS,
    ):
        self._registry = registry
        self._min_score = settings.detection_min_score if min_score is None else min_score
        self._min_margin = settings.detection_min_margin if min_margin is None else min_margin
        self._weights = weights

    def rank(self, headers: Sequence[str]) -> list[DialectScore]:
        """Score every detectable dialect, best first (ties broken by id)."""
        scores = [dialect.score(headers, self._weights) for dialect in self._registry.detectable]
        return sorted(scores, key=lambda s: (-s.score, s.dialect_id))

    def detect(self, headers: Sequence[str]) -> DetectionResult | None:
        """
        Detect the dialect that produced a header row.

        Returns:
            DetectionResult, or None when no dialect is a confident match.
        """
        ranked = self.rank(headers)
        if not ranked:
            return None

        best = ranked[0]
        runner_up = ranked[1] if len(ranked) > 1 else None
        margin = round(best.score - runner_up.score if runner_up else best.score, 6)

        if best.score < self._min_score or margin < self._min_margin:
            logger.info(
                "format_not_detected",
                extra={
                    "best": best.dialect_id,
                    "best_score": best.score,
                    "runner_up": runner_up.dialect_id if runner_up else None,
                    "margin": margin,
                },
            )
            return None

        logger.info(
            "format_detected",
            extra={"dialect": best.dialect_id, "score": best.score, "margin": margin},
        )
        return DetectionResult(
            dialect=self._registry.get(best.dialect_id),
            score=best.score,
            confidence=best.confidence,
            matching_headers=best.matched,
            runner_up=runner_up,
        )
