"""
Language validation and secondary lookup.

The batch endpoint returns one printing per identifier, usually the English
one. When the source row asked for another language, the same set and
collector number are searched again filtered to that language.

- Found: the localized printing replaces the original, confidence unchanged
- Not found, lookup error, or unrecognized language: the original printing
  is kept, confidence drops one tier and a mismatch warning is added
- Name-only matches are not validated; the source language passes through
"""

import logging

from omenpath.formats.normalizers import language_code, languages_match
from omenpath.models.confidence import IdentificationMethod
from omenpath.models.outcome import ConversionOutcome
from omenpath.services.cancellation import CancellationToken
from omenpath.services.identifiers import collector_numbers_match
from omenpath.services.scryfall_client import ScryfallClient, ScryfallError

logger = logging.getLogger(__name__)


class LanguageValidator:
    """Checks resolved printings against the requested language."""

    def __init__(self, client: ScryfallClient):
        self._client = client

    async def validate(
        self,
        outcome: ConversionOutcome,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        """Validate one successful outcome in place."""
        card = outcome.card
        requested = outcome.record.language.strip()
        if not outcome.success or card is None or not requested:
            return
        if outcome.method == IdentificationMethod.NAME_ONLY:
            return
        if languages_match(requested, card.lang):
            return

        outcome.language_mismatch = True
        code = language_code(requested)
        if code is None:
            outcome.downgrade(
                f'Language mismatch: unrecognized language "{requested}", '
                f'using "{card.lang}" version'
            )
            return

        query = f"e:{card.set_code} cn:{card.collector_number} lang:{code}"
        try:
            results = await self._client.search(
                query, include_multilingual=True, cancel_token=cancel_token
            )
        except ScryfallError as e:
            logger.warning(
                "language_lookup_failed",
                extra={"row": outcome.record.row_number, "error": str(e)},
            )
            outcome.downgrade(
                f'Language mismatch: requested "{requested}", secondary lookup failed, '
                f'using "{card.lang}" version'
            )
            return

        localized = next(
            (
                result
                for result in results
                if result.lang == code
                and result.set_code == card.set_code
                and collector_numbers_match(result.collector_number, card.collector_number)
            ),
            None,
        )
        if localized is None:
            outcome.downgrade(
                f'Language mismatch: requested "{requested}", "{code}" version not available, '
                f'using "{card.lang}" version'
            )
            return

        outcome.card = localized
        outcome.language_mismatch = False
        logger.debug(
            "language_resolved",
            extra={"row": outcome.record.row_number, "lang": code},
        )
