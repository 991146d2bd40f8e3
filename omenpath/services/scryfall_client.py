"""
Scryfall API client.

One long-lived client is shared by every conversion. All requests pass
through a single RateLimiter, so the minimum spacing between consecutive
requests holds across concurrent conversions too.

Endpoints used:
- POST /cards/collection  batch lookup, at most 75 identifiers
- GET  /cards/search      single-card disambiguation (404 means no results)
- GET  /sets              canonical set list
- GET  /sets/lea          health probe
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from omenpath.config import settings
from omenpath.models.card import CanonicalCardRecord
from omenpath.services.cancellation import CancellationToken

logger = logging.getLogger(__name__)


class ScryfallError(Exception):
    """Raised when a Scryfall request fails (network or HTTP error)."""

    pass


class RateLimiter:
    """
    Global pacing rule: consecutive requests start at least `delay` seconds apart.

    Not a token bucket; there is no burst allowance.
    """

    def __init__(self, delay: float):
        self.delay = delay
        self._lock = asyncio.Lock()
        self._last_request: float | None = None

    async def wait(self) -> None:
        async with self._lock:
            if self._last_request is not None:
                remaining = self.delay - (time.monotonic() - self._last_request)
                if remaining > 0:
                    await asyncio.sleep(remaining)
            self._last_request = time.monotonic()


@dataclass(frozen=True, slots=True)
class CollectionResult:
    """
    Response of the batch endpoint.

    Attributes:
        cards: Matched printings, in response order
        not_found: Identifier objects Scryfall could not match
    """

    cards: list[CanonicalCardRecord] = field(default_factory=list)
    not_found: list[dict[str, Any]] = field(default_factory=list)


class ScryfallClient:
    """Async, rate-limited Scryfall client."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        request_delay: float | None = None,
        batch_size: int | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = (base_url or settings.scryfall_api_url).rstrip("/")
        self.batch_size = batch_size or settings.batch_size
        self.rate_limiter = RateLimiter(
            settings.request_delay if request_delay is None else request_delay
        )
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=timeout or settings.request_timeout,
            headers={
                "User-Agent": user_agent or settings.user_agent,
                "Accept": "application/json",
            },
        )

    async def __aenter__(self) -> "ScryfallClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def fetch_collection(
        self,
        identifiers: list[dict[str, Any]],
        cancel_token: CancellationToken | None = None,
    ) -> CollectionResult:
        """
        Look up a batch of identifiers.

        Raises:
            ValueError: If the batch exceeds the identifier cap
            ScryfallError: If the request fails
        """
        if len(identifiers) > self.batch_size:
            raise ValueError(
                f"Batch of {len(identifiers)} identifiers exceeds cap of {self.batch_size}"
            )
        response = await self._request(
            "POST",
            "/cards/collection",
            json={"identifiers": identifiers},
            cancel_token=cancel_token,
        )
        payload = _json(response)
        return CollectionResult(
            cards=[CanonicalCardRecord.from_scryfall(card) for card in payload.get("data", [])],
            not_found=list(payload.get("not_found", [])),
        )

    async def search(
        self,
        query: str,
        *,
        unique: str = "prints",
        order: str | None = None,
        include_multilingual: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> list[CanonicalCardRecord]:
        """
        Run a search query (first page only).

        Returns:
            Matching printings; empty when Scryfall reports no results.

        Raises:
            ScryfallError: If the request fails
        """
        params: dict[str, str] = {"q": query, "unique": unique}
        if order:
            params["order"] = order
        if include_multilingual:
            params["include_multilingual"] = "true"
        response = await self._request(
            "GET",
            "/cards/search",
            params=params,
            cancel_token=cancel_token,
            allow_not_found=True,
        )
        if response is None:
            return []
        return [CanonicalCardRecord.from_scryfall(card) for card in _json(response).get("data", [])]

    async def fetch_sets(self) -> list[dict[str, Any]]:
        """Fetch the canonical set list."""
        response = await self._request("GET", "/sets")
        data: list[dict[str, Any]] = _json(response).get("data", [])
        return data

    async def is_available(self) -> bool:
        """Health probe: can Scryfall answer a trivial request?"""
        try:
            await self._request("GET", "/sets/lea")
        except ScryfallError as e:
            logger.warning("scryfall_unavailable", extra={"error": str(e)})
            return False
        return True

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        cancel_token: CancellationToken | None = None,
        allow_not_found: bool = False,
    ) -> httpx.Response | None:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        await self.rate_limiter.wait()
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        url = f"{self.base_url}{path}"
        logger.debug("scryfall_request", extra={"method": method, "path": path})
        try:
            response = await self._http.request(method, url, params=params, json=json)
        except httpx.RequestError as e:
            raise ScryfallError(f"Network error contacting Scryfall: {e}") from e

        if allow_not_found and response.status_code == 404:
            return None
        if not response.is_success:
            raise ScryfallError(
                f"Scryfall request failed: HTTP {response.status_code} - {_error_details(response)}"
            )
        return response


def _json(response: httpx.Response | None) -> dict[str, Any]:
    if response is None:
        return {}
    try:
        payload: dict[str, Any] = response.json()
    except ValueError as e:
        raise ScryfallError(f"Invalid JSON from Scryfall: {response.text[:200]}") from e
    return payload


def _error_details(response: httpx.Response) -> str:
    """Scryfall error objects carry a human-readable "details" field."""
    try:
        details = response.json().get("details")
    except ValueError:
        details = None
    return details or response.reason_phrase or response.text[:200]
