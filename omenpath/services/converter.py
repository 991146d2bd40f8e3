"""
Conversion orchestration.

    text -> detection -> parsing -> set resolution -> confidence
         -> lookup -> consolidation -> ConversionResult

A ConversionContext holds everything that is loaded once per process (the
Scryfall client, the canonical set list, the dialect registry and the
detector). A Converter runs one conversion at a time against a context.

Progress is reported as integers 0-100 and never moves backwards:
parsing reaches 10, set resolution 20, lookup spans 20-95 and the finished
result reports 100.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from omenpath.formats.registry import FormatRegistry, UnknownDialectError, build_default_registry
from omenpath.models.failure import FailureKind, KnownError
from omenpath.models.outcome import ConversionOutcome
from omenpath.models.record import ParsedRecord
from omenpath.parsers.csv_rows import preprocess, read_headers, read_table
from omenpath.parsers.dek import is_dek_format, parse_dek
from omenpath.parsers.row_parser import RowParser
from omenpath.services.cancellation import CancellationToken
from omenpath.services.confidence import ConfidenceAssigner
from omenpath.services.consolidator import ResultConsolidator
from omenpath.services.export_formatter import format_outcomes_csv
from omenpath.services.format_detector import DetectionResult, FormatDetector
from omenpath.services.lookup_pipeline import LookupPipeline
from omenpath.services.scryfall_client import ScryfallClient
from omenpath.services.set_catalog import SetCatalog, load_set_catalog
from omenpath.services.set_resolver import SetResolver

logger = logging.getLogger(__name__)

AUTO_DETECT = "auto"
DEK_DIALECT_ID = "mtgo-dek"
FALLBACK_WARNING = "Could not confidently detect the file format, using generic column mapping"

ProgressCallback = Callable[[int], None]


@dataclass
class ConversionContext:
    """Long-lived collaborators shared by every conversion."""

    client: ScryfallClient
    catalog: SetCatalog
    registry: FormatRegistry
    detector: FormatDetector
    resolver: SetResolver

    @classmethod
    async def create(
        cls,
        *,
        client: ScryfallClient | None = None,
        catalog: SetCatalog | None = None,
        registry: FormatRegistry | None = None,
        sets_path: Path | None = None,
    ) -> "ConversionContext":
        """
        Build a context, loading the set list from cache or Scryfall.

        Raises:
            ScryfallError: If the set list is not cached and cannot be fetched
        """
        owns_client = client is None
        client = client or ScryfallClient()
        if catalog is None:
            try:
                catalog = await load_set_catalog(client, sets_path)
            except Exception:
                if owns_client:
                    await client.aclose()
                raise
        registry = registry or build_default_registry()
        logger.info(
            "conversion_context_ready",
            extra={"sets": len(catalog), "dialects": len(registry)},
        )
        return cls(
            client=client,
            catalog=catalog,
            registry=registry,
            detector=FormatDetector(registry),
            resolver=SetResolver(catalog),
        )

    async def aclose(self) -> None:
        await self.client.aclose()


@dataclass
class ParsedInput:
    """Records parsed from one file, before any lookup."""

    dialect_id: str
    records: list[ParsedRecord]
    detection: DetectionResult | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass
class ConversionResult:
    """
    Final, ordered result of a conversion.

    Attributes:
        dialect_id: Dialect used to parse the file
        detection: Detection details when the dialect was auto-detected
        outcomes: Consolidated outcomes in export order
        warnings: File-level warnings (not tied to a row)
    """

    dialect_id: str
    outcomes: list[ConversionOutcome]
    detection: DetectionResult | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def total_cards(self) -> int:
        return sum(outcome.count for outcome in self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)

    @property
    def with_warnings(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success and outcome.warnings)

    def summary(self) -> dict[str, int]:
        return {
            "rows": len(self.outcomes),
            "total_cards": self.total_cards,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "with_warnings": self.with_warnings,
        }

    def to_csv(self) -> str:
        return format_outcomes_csv(self.outcomes)


class ProgressReporter:
    """Forwards progress to a callback, clamped to 0-100 and never decreasing."""

    def __init__(self, callback: ProgressCallback | None):
        self._callback = callback
        self._last = -1

    def report(self, value: int) -> None:
        value = max(0, min(100, value))
        if value <= self._last:
            return
        self._last = value
        if self._callback is not None:
            self._callback(value)


class Converter:
    """Runs conversions against a ConversionContext."""

    def __init__(self, context: ConversionContext):
        self._context = context
        self._confidence = ConfidenceAssigner()
        self._consolidator = ResultConsolidator()

    async def convert(
        self,
        text: str,
        dialect: str = AUTO_DETECT,
        progress: ProgressCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ConversionResult:
        """
        Convert a collection export.

        Args:
            text: File contents
            dialect: Dialect id, or "auto" to detect it from the header row
            progress: Called with integers 0-100
            cancel_token: Checked before every Scryfall request

        Raises:
            KnownError: Empty or unreadable file, or unknown dialect id
            ConversionCancelled: If cancel_token is set mid-conversion
        """
        reporter = ProgressReporter(progress)
        reporter.report(0)

        parsed = self._parse(text, dialect)
        reporter.report(10)

        self._prepare(parsed.records)
        reporter.report(20)

        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        def on_lookup_progress(finished: int, total: int) -> None:
            reporter.report(20 + (75 * finished) // total)

        pipeline = LookupPipeline(
            self._context.client,
            progress=on_lookup_progress,
            cancel_token=cancel_token,
        )
        outcomes = await pipeline.run(parsed.records)
        reporter.report(95)

        ordered = self._consolidator.consolidate(outcomes)
        result = ConversionResult(
            dialect_id=parsed.dialect_id,
            outcomes=ordered,
            detection=parsed.detection,
            warnings=parsed.warnings,
        )
        reporter.report(100)
        logger.info("conversion_complete", extra={"dialect": parsed.dialect_id, **result.summary()})
        return result

    def preview(self, text: str, dialect: str = AUTO_DETECT) -> ParsedInput:
        """
        Detect, parse, resolve sets and assign confidence without any lookup.

        Raises:
            KnownError: Empty or unreadable file, or unknown dialect id
        """
        parsed = self._parse(text, dialect)
        self._prepare(parsed.records)
        return parsed

    def _prepare(self, records: list[ParsedRecord]) -> None:
        self._context.resolver.resolve_all(records)
        self._confidence.assign_all(records)

    def _parse(self, text: str, dialect: str) -> ParsedInput:
        if not text.strip():
            raise KnownError(
                kind=FailureKind.INVALID_INPUT,
                message="The uploaded file is empty.",
            )

        if is_dek_format(text):
            records = parse_dek(text)
            logger.info("dek_parsed", extra={"records": len(records)})
            return ParsedInput(dialect_id=DEK_DIALECT_ID, records=records)

        cleaned = preprocess(text)
        detection: DetectionResult | None = None
        warnings: list[str] = []

        if dialect == AUTO_DETECT:
            headers = read_headers(cleaned)
            detection = self._context.detector.detect(headers)
            if detection is not None:
                definition = detection.dialect
            else:
                definition = self._context.registry.fallback
                warnings.append(FALLBACK_WARNING)
        else:
            try:
                definition = self._context.registry.get(dialect)
            except UnknownDialectError as e:
                raise KnownError(
                    kind=FailureKind.UNKNOWN_FORMAT,
                    message=f'Unknown format "{dialect}".',
                    suggestion='Use "auto" or one of the ids listed by GET /formats.',
                ) from e

        table = read_table(cleaned, definition.delimiter)
        if not table.rows:
            raise KnownError(
                kind=FailureKind.INVALID_INPUT,
                message="The file has no card rows.",
                detail=f"Headers found: {', '.join(table.headers) or 'none'}",
            )

        records = RowParser(definition).parse_table(table)
        return ParsedInput(
            dialect_id=definition.id,
            records=records,
            detection=detection,
            warnings=warnings,
        )
