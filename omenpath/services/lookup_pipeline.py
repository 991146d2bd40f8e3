"""
Identity resolution against Scryfall.

The pipeline is a state machine over per-record statuses. Stages run in
order, each consuming only records still unresolved:

1. NEEDS_SEARCH  name + collector number with no set: one search per record.
   A unique hit resolves the record; otherwise it is demoted to a name-only
   lookup in stage 3.
2. NEEDS_PROMO   promo subtypes the batch endpoint cannot express: one
   search per record; no hit falls through to stage 3.
3. PENDING       batched lookup by best identifier, deduplicated, at most
   `batch_size` identifiers per request. Every hit is validated against
   the source row before it is accepted.
4. Language validation of every resolved record.

INVARIANTS:
- Per-record failures never abort siblings
- A failed batch request fails exactly the records in that batch
- Outcome confidence never exceeds the record's confidence
- Records without a usable identifier fail before any request is made
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from omenpath.config import settings
from omenpath.models.card import CanonicalCardRecord
from omenpath.models.confidence import Confidence, IdentificationMethod
from omenpath.models.failure import FailureKind
from omenpath.models.outcome import ConversionOutcome
from omenpath.models.record import ParsedRecord
from omenpath.services.cancellation import CancellationToken
from omenpath.services.card_validator import validate_match
from omenpath.services.identifiers import (
    CardIdentifier,
    IdentifierKind,
    best_identifier,
    method_for,
)
from omenpath.services.language import LanguageValidator
from omenpath.services.scryfall_client import ScryfallClient, ScryfallError

logger = logging.getLogger(__name__)

# Called with (records finished, total records)
ProgressCallback = Callable[[int, int], None]

NO_IDENTIFIER_ERROR = "No usable identifiers available for lookup"


class RecordStatus(str, Enum):
    """Where a record is in the pipeline."""

    NEEDS_SEARCH = "needs_search"
    NEEDS_PROMO = "needs_promo"
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass
class LookupState:
    """Mutable pipeline state of one record."""

    record: ParsedRecord
    status: RecordStatus
    outcome: ConversionOutcome | None = None
    # Name + collector number search failed; looked up by name alone
    demoted: bool = False


def success_outcome(
    record: ParsedRecord,
    card: CanonicalCardRecord,
    method: IdentificationMethod,
    warnings: Iterable[str] = (),
) -> ConversionOutcome:
    """Successful outcome, capped at the method's ceiling."""
    ceiling = method.ceiling
    confidence = record.confidence.cap(ceiling) if record.confidence else ceiling
    outcome = ConversionOutcome(
        record=record,
        success=True,
        confidence=confidence,
        method=method,
        card=card,
        count=record.count,
        warnings=list(record.warnings),
        source_rows=[record.row_number],
    )
    for warning in warnings:
        outcome.add_warning(warning)
    return outcome


def failure_outcome(record: ParsedRecord, error: str, kind: FailureKind) -> ConversionOutcome:
    return ConversionOutcome(
        record=record,
        success=False,
        confidence=Confidence.LOW,
        method=IdentificationMethod.FAILED,
        count=record.count,
        error=error,
        failure_kind=kind,
        warnings=list(record.warnings),
        source_rows=[record.row_number],
    )


def chunked(items: list[CardIdentifier], size: int) -> Iterable[list[CardIdentifier]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def _quoted(name: str) -> str:
    return name.replace('"', "")


class LookupPipeline:
    """Resolves parsed records to Scryfall printings."""

    def __init__(
        self,
        client: ScryfallClient,
        *,
        batch_size: int | None = None,
        progress: ProgressCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ):
        self._client = client
        self._batch_size = min(batch_size or settings.batch_size, client.batch_size)
        self._progress = progress
        self._cancel_token = cancel_token
        self._languages = LanguageValidator(client)
        self._finished = 0
        self._total = 0

    async def run(self, records: list[ParsedRecord]) -> list[ConversionOutcome]:
        """
        Resolve every record.

        Returns:
            One outcome per record, in input order.

        Raises:
            ConversionCancelled: If the cancellation token is set
        """
        states = [self._initial_state(record) for record in records]
        self._finished = sum(1 for state in states if state.status == RecordStatus.FAILED)
        self._total = len(states)
        self._report()

        await self._collector_number_searches(states)
        await self._promo_searches(states)
        await self._batched_lookup(states)
        await self._validate_languages(states)

        outcomes = [state.outcome for state in states if state.outcome is not None]
        logger.info(
            "lookup_complete",
            extra={
                "records": len(outcomes),
                "resolved": sum(1 for outcome in outcomes if outcome.success),
                "failed": sum(1 for outcome in outcomes if not outcome.success),
            },
        )
        return outcomes

    def _initial_state(self, record: ParsedRecord) -> LookupState:
        if not record.has_usable_identifier:
            return LookupState(
                record=record,
                status=RecordStatus.FAILED,
                outcome=failure_outcome(record, NO_IDENTIFIER_ERROR, FailureKind.NO_IDENTIFIER),
            )
        if record.needs_collector_search:
            return LookupState(record=record, status=RecordStatus.NEEDS_SEARCH)
        if record.promo_query and record.name and not record.has_any_id:
            return LookupState(record=record, status=RecordStatus.NEEDS_PROMO)
        return LookupState(record=record, status=RecordStatus.PENDING)

    def _report(self) -> None:
        if self._progress is not None and self._total:
            self._progress(self._finished, self._total)

    def _finish(self, state: LookupState, outcome: ConversionOutcome) -> None:
        state.outcome = outcome
        state.status = RecordStatus.RESOLVED if outcome.success else RecordStatus.FAILED
        self._finished += 1
        self._report()

    def _demote(self, state: LookupState, reason: str) -> None:
        state.record.add_warning(reason)
        state.record.lower_confidence(Confidence.LOW)
        state.demoted = True
        state.status = RecordStatus.PENDING

    async def _collector_number_searches(self, states: list[LookupState]) -> None:
        for state in states:
            if state.status != RecordStatus.NEEDS_SEARCH:
                continue
            record = state.record
            query = f'!"{_quoted(record.name)}" cn:{record.collector_number}'
            try:
                results = await self._client.search(query, cancel_token=self._cancel_token)
            except ScryfallError as e:
                logger.warning(
                    "collector_search_failed",
                    extra={"row": record.row_number, "error": str(e)},
                )
                self._demote(
                    state, "Name + collector number search error, using name-only lookup"
                )
                continue

            if len(results) != 1:
                amount = "multiple" if results else "no"
                self._demote(
                    state,
                    f"Name + collector number search returned {amount} results, "
                    "using name-only lookup",
                )
                continue

            card = results[0]
            validation = validate_match(record, card)
            if validation.identity_mismatch:
                self._demote(
                    state,
                    "Name + collector number search returned a different card, "
                    "using name-only lookup",
                )
                continue
            if not validation.valid:
                self._finish(
                    state,
                    failure_outcome(
                        record, validation.error or "", FailureKind.IDENTITY_MISMATCH
                    ),
                )
                continue

            record.set_code = card.set_code
            record.add_warning(f'Found set "{card.set_code}" via name + collector number search')
            self._finish(
                state,
                success_outcome(
                    record,
                    card,
                    IdentificationMethod.NAME_COLLECTOR_SEARCH,
                    validation.warnings,
                ),
            )

    async def _promo_searches(self, states: list[LookupState]) -> None:
        for state in states:
            if state.status != RecordStatus.NEEDS_PROMO:
                continue
            record = state.record
            query = f'"{_quoted(record.name)}" {record.promo_query} -is:extra'
            try:
                results = await self._client.search(
                    query, order="released", cancel_token=self._cancel_token
                )
            except ScryfallError as e:
                logger.warning(
                    "promo_search_failed",
                    extra={"row": record.row_number, "error": str(e)},
                )
                record.add_warning("Promo search error, using standard lookup")
                state.status = RecordStatus.PENDING
                continue

            card = next(
                (
                    result
                    for result in results
                    if validate_match(record, result, check_set=False).valid
                ),
                None,
            )
            if card is None:
                record.add_warning("Promo search found no matching printing, using standard lookup")
                state.status = RecordStatus.PENDING
                continue

            validation = validate_match(record, card, check_set=False)
            warnings = list(validation.warnings)
            if len(results) > 1:
                warnings.append(
                    f"Multiple promo printings found ({len(results)}), using "
                    f'"{card.set_code}" #{card.collector_number}; verify the printing'
                )
            record.set_code = card.set_code
            self._finish(
                state,
                success_outcome(record, card, IdentificationMethod.NAME_SET, warnings),
            )

    async def _batched_lookup(self, states: list[LookupState]) -> None:
        groups: dict[CardIdentifier, list[LookupState]] = {}
        for state in states:
            if state.status != RecordStatus.PENDING:
                continue
            identifier, warning = best_identifier(state.record)
            if warning:
                state.record.add_warning(warning)
            if identifier is None:
                self._finish(
                    state,
                    failure_outcome(state.record, NO_IDENTIFIER_ERROR, FailureKind.NO_IDENTIFIER),
                )
                continue
            groups.setdefault(identifier, []).append(state)

        identifiers = list(groups)
        for batch_number, batch in enumerate(chunked(identifiers, self._batch_size), start=1):
            try:
                result = await self._client.fetch_collection(
                    [identifier.to_payload() for identifier in batch],
                    cancel_token=self._cancel_token,
                )
            except ScryfallError as e:
                logger.warning(
                    "batch_failed",
                    extra={"batch": batch_number, "identifiers": len(batch), "error": str(e)},
                )
                for identifier in batch:
                    for state in groups[identifier]:
                        self._finish(
                            state,
                            failure_outcome(
                                state.record,
                                f"Scryfall API error during lookup: {e}",
                                FailureKind.UPSTREAM_ERROR,
                            ),
                        )
                continue

            logger.debug(
                "batch_complete",
                extra={
                    "batch": batch_number,
                    "found": len(result.cards),
                    "not_found": len(result.not_found),
                },
            )
            for identifier in batch:
                card = next((card for card in result.cards if identifier.matches(card)), None)
                for state in groups[identifier]:
                    if card is None:
                        self._finish(
                            state,
                            failure_outcome(
                                state.record,
                                identifier.not_found_message(),
                                FailureKind.NOT_FOUND,
                            ),
                        )
                    else:
                        self._accept(state, identifier, card)

    def _accept(
        self,
        state: LookupState,
        identifier: CardIdentifier,
        card: CanonicalCardRecord,
    ) -> None:
        record = state.record
        name_only = identifier.kind == IdentifierKind.NAME
        validation = validate_match(record, card, check_collector_number=not name_only)
        if validation.identity_mismatch:
            error = (
                f"{identifier.not_found_message()} "
                f"(identity mismatch with source data: {validation.error})"
            )
            self._finish(state, failure_outcome(record, error, FailureKind.IDENTITY_MISMATCH))
            return
        if not validation.valid:
            self._finish(
                state,
                failure_outcome(record, validation.error or "", FailureKind.IDENTITY_MISMATCH),
            )
            return
        self._finish(
            state,
            success_outcome(record, card, method_for(identifier, record), validation.warnings),
        )

    async def _validate_languages(self, states: list[LookupState]) -> None:
        for state in states:
            if state.status == RecordStatus.RESOLVED and state.outcome is not None:
                await self._languages.validate(state.outcome, self._cancel_token)
