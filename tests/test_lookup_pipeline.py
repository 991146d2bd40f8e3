"""Tests for the lookup pipeline (mocked Scryfall)."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
import respx

from omenpath.models.confidence import Confidence, IdentificationMethod
from omenpath.models.failure import FailureKind
from omenpath.models.record import ParsedRecord
from omenpath.services.confidence import ConfidenceAssigner
from omenpath.services.lookup_pipeline import NO_IDENTIFIER_ERROR, LookupPipeline, chunked
from omenpath.services.scryfall_client import ScryfallClient

CardFactory = Callable[..., dict[str, Any]]

COLLECTION_URL = "https://api.scryfall.com/cards/collection"
SEARCH_URL = "https://api.scryfall.com/cards/search"


def make_record(row_number: int = 2, **fields: Any) -> ParsedRecord:
    record = ParsedRecord(raw={}, row_number=row_number, **fields)
    ConfidenceAssigner().assign(record)
    return record


def sent_identifiers(request: httpx.Request) -> list[dict[str, Any]]:
    identifiers: list[dict[str, Any]] = json.loads(request.content)["identifiers"]
    return identifiers


class TestChunked:
    def test_splits_at_size(self) -> None:
        assert [len(chunk) for chunk in chunked(list(range(160)), 75)] == [75, 75, 10]


class TestBatchedLookup:
    @pytest.mark.asyncio
    @respx.mock
    async def test_batches_never_exceed_cap(self, make_card: CardFactory) -> None:
        """80 distinct identifiers need two requests."""

        def respond(request: httpx.Request) -> httpx.Response:
            cards = [
                make_card(set_code=item["set"], collector_number=item["collector_number"])
                for item in sent_identifiers(request)
            ]
            return httpx.Response(200, json={"data": cards, "not_found": []})

        route = respx.post(COLLECTION_URL).mock(side_effect=respond)
        records = [
            make_record(row, set_code="lea", collector_number=str(row)) for row in range(2, 82)
        ]

        async with ScryfallClient(request_delay=0) as client:
            outcomes = await LookupPipeline(client).run(records)

        assert route.call_count == 2
        sizes = [len(sent_identifiers(call.request)) for call in route.calls]
        assert sizes == [75, 5]
        assert len(outcomes) == 80
        assert all(outcome.success for outcome in outcomes)
        assert all(outcome.confidence == Confidence.HIGH for outcome in outcomes)

    @pytest.mark.asyncio
    @respx.mock
    async def test_duplicate_identifiers_share_one_entry(self, make_card: CardFactory) -> None:
        route = respx.post(COLLECTION_URL).mock(
            return_value=httpx.Response(200, json={"data": [make_card()], "not_found": []})
        )
        records = [
            make_record(2, name="Lightning Bolt", set_code="lea", collector_number="161"),
            make_record(3, name="Lightning Bolt", set_code="LEA", collector_number="161", count=3),
        ]

        async with ScryfallClient(request_delay=0) as client:
            outcomes = await LookupPipeline(client).run(records)

        assert sent_identifiers(route.calls.last.request) == [
            {"set": "lea", "collector_number": "161"}
        ]
        assert [outcome.success for outcome in outcomes] == [True, True]
        assert [outcome.count for outcome in outcomes] == [1, 3]

    @pytest.mark.asyncio
    @respx.mock
    async def test_not_found(self) -> None:
        respx.post(COLLECTION_URL).mock(
            return_value=httpx.Response(
                200, json={"data": [], "not_found": [{"name": "Nonexistent Card"}]}
            )
        )

        async with ScryfallClient(request_delay=0) as client:
            (outcome,) = await LookupPipeline(client).run([make_record(name="Nonexistent Card")])

        assert not outcome.success
        assert outcome.failure_kind == FailureKind.NOT_FOUND
        assert outcome.error == 'Card "Nonexistent Card" not found by name alone'
        assert outcome.method == IdentificationMethod.FAILED
        assert outcome.confidence == Confidence.LOW

    @pytest.mark.asyncio
    @respx.mock
    async def test_identity_mismatch_fails_record(self, make_card: CardFactory) -> None:
        """A hit that disagrees with the row's name is not accepted."""
        respx.post(COLLECTION_URL).mock(
            return_value=httpx.Response(200, json={"data": [make_card()], "not_found": []})
        )
        record = make_record(name="Shock", set_code="lea", collector_number="161")

        async with ScryfallClient(request_delay=0) as client:
            (outcome,) = await LookupPipeline(client).run([record])

        assert not outcome.success
        assert outcome.failure_kind == FailureKind.IDENTITY_MISMATCH
        assert outcome.error is not None
        assert "identity mismatch with source data" in outcome.error
        assert 'Name mismatch: expected "Shock"' in outcome.error

    @pytest.mark.asyncio
    @respx.mock
    async def test_failed_batch_does_not_abort_others(self, make_card: CardFactory) -> None:
        """Only the records of the failing batch are marked failed."""
        calls = {"count": 0}

        def respond(request: httpx.Request) -> httpx.Response:
            calls["count"] += 1
            if calls["count"] == 1:
                return httpx.Response(500, json={"object": "error", "details": "Overloaded"})
            cards = [
                make_card(set_code=item["set"], collector_number=item["collector_number"])
                for item in sent_identifiers(request)
            ]
            return httpx.Response(200, json={"data": cards, "not_found": []})

        respx.post(COLLECTION_URL).mock(side_effect=respond)
        records = [
            make_record(row, set_code="lea", collector_number=str(row)) for row in range(2, 6)
        ]

        async with ScryfallClient(request_delay=0) as client:
            outcomes = await LookupPipeline(client, batch_size=2).run(records)

        assert [outcome.success for outcome in outcomes] == [False, False, True, True]
        assert outcomes[0].failure_kind == FailureKind.UPSTREAM_ERROR
        assert outcomes[0].error is not None
        assert outcomes[0].error.startswith("Scryfall API error during lookup:")

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_identifier_fails_without_request(self) -> None:
        record = make_record(condition="Near Mint")

        async with ScryfallClient(request_delay=0) as client:
            (outcome,) = await LookupPipeline(client).run([record])

        assert not outcome.success
        assert outcome.failure_kind == FailureKind.NO_IDENTIFIER
        assert outcome.error == NO_IDENTIFIER_ERROR

    @pytest.mark.asyncio
    @respx.mock
    async def test_confidence_never_exceeds_record(self, make_card: CardFactory) -> None:
        """A direct-id hit on a medium record stays medium."""
        respx.post(COLLECTION_URL).mock(
            return_value=httpx.Response(200, json={"data": [make_card()], "not_found": []})
        )
        record = make_record(scryfall_id="4457ed35-7c10-48c8-9776-456485fdf070")
        record.lower_confidence(Confidence.MEDIUM)

        async with ScryfallClient(request_delay=0) as client:
            (outcome,) = await LookupPipeline(client).run([record])

        assert outcome.success
        assert outcome.method == IdentificationMethod.DIRECT_ID
        assert outcome.confidence == Confidence.MEDIUM

    @pytest.mark.asyncio
    @respx.mock
    async def test_reports_progress(self, make_card: CardFactory) -> None:
        respx.post(COLLECTION_URL).mock(
            return_value=httpx.Response(200, json={"data": [make_card()], "not_found": []})
        )
        seen: list[tuple[int, int]] = []

        def progress(done: int, total: int) -> None:
            seen.append((done, total))

        records = [make_record(name="Lightning Bolt", set_code="lea", collector_number="161")]

        async with ScryfallClient(request_delay=0) as client:
            await LookupPipeline(client, progress=progress).run(records)

        assert seen[0] == (0, 1)
        assert seen[-1] == (1, 1)


class TestCollectorNumberSearch:
    @pytest.mark.asyncio
    @respx.mock
    async def test_unique_hit_resolves_at_medium(self, make_card: CardFactory) -> None:
        route = respx.get(SEARCH_URL).mock(
            return_value=httpx.Response(200, json={"data": [make_card()]})
        )
        record = make_record(name="Lightning Bolt", collector_number="161")

        async with ScryfallClient(request_delay=0) as client:
            (outcome,) = await LookupPipeline(client).run([record])

        assert route.calls.last.request.url.params["q"] == '!"Lightning Bolt" cn:161'
        assert outcome.success
        assert outcome.method == IdentificationMethod.NAME_COLLECTOR_SEARCH
        assert outcome.confidence == Confidence.MEDIUM
        assert 'Found set "lea" via name + collector number search' in outcome.warnings

    @pytest.mark.asyncio
    @respx.mock
    async def test_ambiguous_hit_demotes_to_name_lookup(self, make_card: CardFactory) -> None:
        respx.get(SEARCH_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "data": [
                        make_card(),
                        make_card(set_code="leb", card_id="22222222-2222-2222-2222-222222222222"),
                    ]
                },
            )
        )
        route = respx.post(COLLECTION_URL).mock(
            return_value=httpx.Response(
                200, json={"data": [make_card(set_code="m10", collector_number="146")]}
            )
        )
        record = make_record(name="Lightning Bolt", collector_number="161")

        async with ScryfallClient(request_delay=0) as client:
            (outcome,) = await LookupPipeline(client).run([record])

        assert sent_identifiers(route.calls.last.request) == [{"name": "Lightning Bolt"}]
        assert outcome.success
        assert outcome.method == IdentificationMethod.NAME_ONLY
        assert outcome.confidence == Confidence.LOW
        assert (
            "Name + collector number search returned multiple results, using name-only lookup"
            in outcome.warnings
        )
        assert any("Collector number mismatch" in warning for warning in outcome.warnings)


class TestPromoSearch:
    @pytest.mark.asyncio
    @respx.mock
    async def test_promo_hit_skips_set_check(self, make_card: CardFactory) -> None:
        route = respx.get(SEARCH_URL).mock(
            return_value=httpx.Response(
                200, json={"data": [make_card(set_code="prm", collector_number="36304")]}
            )
        )
        record = make_record(
            name="Lightning Bolt", set_code="m10", promo_query="is:prerelease"
        )

        async with ScryfallClient(request_delay=0) as client:
            (outcome,) = await LookupPipeline(client).run([record])

        assert route.calls.last.request.url.params["q"] == (
            '"Lightning Bolt" is:prerelease -is:extra'
        )
        assert outcome.success
        assert outcome.card is not None
        assert outcome.card.set_code == "prm"
        assert outcome.method == IdentificationMethod.NAME_SET

    @pytest.mark.asyncio
    @respx.mock
    async def test_promo_miss_falls_back_to_batch(self, make_card: CardFactory) -> None:
        respx.get(SEARCH_URL).mock(return_value=httpx.Response(404, json={"object": "error"}))
        respx.post(COLLECTION_URL).mock(
            return_value=httpx.Response(
                200, json={"data": [make_card(set_code="m10", collector_number="146")]}
            )
        )
        record = make_record(name="Lightning Bolt", set_code="m10", promo_query="is:prerelease")

        async with ScryfallClient(request_delay=0) as client:
            (outcome,) = await LookupPipeline(client).run([record])

        assert outcome.success
        assert outcome.card is not None
        assert outcome.card.set_code == "m10"
        assert (
            "Promo search found no matching printing, using standard lookup" in outcome.warnings
        )
