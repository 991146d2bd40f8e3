"""Tests for the Scryfall client (mocked HTTP)."""

import json
import time
from collections.abc import Callable
from typing import Any

import httpx
import pytest
import respx

from omenpath.models.failure import ConversionCancelled
from omenpath.services.cancellation import CancellationToken
from omenpath.services.scryfall_client import RateLimiter, ScryfallClient, ScryfallError

CardFactory = Callable[..., dict[str, Any]]

API = "https://api.scryfall.com"


class TestFetchCollection:
    """Tests for the batch endpoint."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_returns_cards_and_not_found(self, make_card: CardFactory) -> None:
        route = respx.post(f"{API}/cards/collection").mock(
            return_value=httpx.Response(
                200,
                json={"data": [make_card()], "not_found": [{"name": "Nonexistent Card"}]},
            )
        )

        async with ScryfallClient(base_url=API, request_delay=0) as client:
            result = await client.fetch_collection(
                [{"set": "lea", "collector_number": "161"}, {"name": "Nonexistent Card"}]
            )

        assert [card.name for card in result.cards] == ["Lightning Bolt"]
        assert result.cards[0].set_code == "lea"
        assert result.not_found == [{"name": "Nonexistent Card"}]
        sent = json.loads(route.calls.last.request.content)
        assert sent == {
            "identifiers": [
                {"set": "lea", "collector_number": "161"},
                {"name": "Nonexistent Card"},
            ]
        }

    @pytest.mark.asyncio
    async def test_rejects_oversized_batch(self) -> None:
        """More than the cap never reaches the network."""
        async with ScryfallClient(base_url=API, request_delay=0, batch_size=2) as client:
            with pytest.raises(ValueError, match="exceeds cap"):
                await client.fetch_collection([{"name": "A"}, {"name": "B"}, {"name": "C"}])

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_raises(self) -> None:
        respx.post(f"{API}/cards/collection").mock(
            return_value=httpx.Response(
                500, json={"object": "error", "details": "Something broke"}
            )
        )

        async with ScryfallClient(base_url=API, request_delay=0) as client:
            with pytest.raises(ScryfallError, match="HTTP 500 - Something broke"):
                await client.fetch_collection([{"name": "Island"}])

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error_raises(self) -> None:
        respx.post(f"{API}/cards/collection").mock(side_effect=httpx.ConnectError("refused"))

        async with ScryfallClient(base_url=API, request_delay=0) as client:
            with pytest.raises(ScryfallError, match="Network error"):
                await client.fetch_collection([{"name": "Island"}])

    @pytest.mark.asyncio
    @respx.mock
    async def test_cancelled_token_stops_before_request(self) -> None:
        token = CancellationToken()
        token.cancel("user aborted")

        async with ScryfallClient(base_url=API, request_delay=0) as client:
            with pytest.raises(ConversionCancelled):
                await client.fetch_collection([{"name": "Island"}], cancel_token=token)


class TestSearch:
    """Tests for the search endpoint."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_passes_query_parameters(self, make_card: CardFactory) -> None:
        route = respx.get(f"{API}/cards/search").mock(
            return_value=httpx.Response(200, json={"data": [make_card(lang="ja")]})
        )

        async with ScryfallClient(base_url=API, request_delay=0) as client:
            cards = await client.search(
                "e:lea cn:161 lang:ja", order="released", include_multilingual=True
            )

        assert [card.lang for card in cards] == ["ja"]
        params = route.calls.last.request.url.params
        assert params["q"] == "e:lea cn:161 lang:ja"
        assert params["unique"] == "prints"
        assert params["order"] == "released"
        assert params["include_multilingual"] == "true"

    @pytest.mark.asyncio
    @respx.mock
    async def test_not_found_means_no_results(self) -> None:
        """Scryfall answers an empty search with 404."""
        respx.get(f"{API}/cards/search").mock(
            return_value=httpx.Response(404, json={"object": "error", "code": "not_found"})
        )

        async with ScryfallClient(base_url=API, request_delay=0) as client:
            assert await client.search('!"Nonexistent Card"') == []


class TestAvailability:
    @pytest.mark.asyncio
    @respx.mock
    async def test_available(self) -> None:
        respx.get(f"{API}/sets/lea").mock(return_value=httpx.Response(200, json={"code": "lea"}))

        async with ScryfallClient(base_url=API, request_delay=0) as client:
            assert await client.is_available() is True

    @pytest.mark.asyncio
    @respx.mock
    async def test_unavailable(self) -> None:
        respx.get(f"{API}/sets/lea").mock(return_value=httpx.Response(503))

        async with ScryfallClient(base_url=API, request_delay=0) as client:
            assert await client.is_available() is False

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_sets(self, sample_sets: list[dict[str, object]]) -> None:
        respx.get(f"{API}/sets").mock(return_value=httpx.Response(200, json={"data": sample_sets}))

        async with ScryfallClient(base_url=API, request_delay=0) as client:
            sets = await client.fetch_sets()

        assert len(sets) == len(sample_sets)


class TestRateLimiter:
    @pytest.mark.asyncio
    async def test_spaces_consecutive_requests(self) -> None:
        limiter = RateLimiter(delay=0.05)

        await limiter.wait()
        started = time.monotonic()
        await limiter.wait()

        assert time.monotonic() - started >= 0.04

    @pytest.mark.asyncio
    async def test_first_request_is_not_delayed(self) -> None:
        limiter = RateLimiter(delay=10.0)
        started = time.monotonic()

        await limiter.wait()

        assert time.monotonic() - started < 1.0
