from collections.abc import Callable
from typing import Any

import pytest

from omenpath.services.set_catalog import SetCatalog

CardFactory = Callable[..., dict[str, Any]]


@pytest.fixture
def sample_sets() -> list[dict[str, Any]]:
    """A slice of Scryfall's /sets response."""
    return [
        {"code": "lea", "name": "Limited Edition Alpha", "set_type": "core"},
        {"code": "leb", "name": "Limited Edition Beta", "set_type": "core"},
        {"code": "9ed", "name": "Ninth Edition", "set_type": "core"},
        {"code": "10e", "name": "Tenth Edition", "set_type": "core"},
        {"code": "m21", "name": "Core Set 2021", "set_type": "core"},
        {"code": "dom", "name": "Dominaria", "set_type": "expansion"},
        {
            "code": "tdom",
            "name": "Dominaria Tokens",
            "set_type": "token",
            "parent_set_code": "dom",
        },
        {"code": "2xm", "name": "Double Masters", "set_type": "masters"},
        {
            "code": "t2xm",
            "name": "Double Masters Tokens",
            "set_type": "token",
            "parent_set_code": "2xm",
        },
        {"code": "mh2", "name": "Modern Horizons 2", "set_type": "draft_innovation"},
        {
            "code": "amh2",
            "name": "Modern Horizons 2 Art Series",
            "set_type": "memorabilia",
            "parent_set_code": "mh2",
        },
        {
            "code": "pmh2",
            "name": "Modern Horizons 2 Promos",
            "set_type": "promo",
            "parent_set_code": "mh2",
        },
        {"code": "cmr", "name": "Commander Legends", "set_type": "draft_innovation"},
        {"code": "neo", "name": "Kamigawa: Neon Dynasty", "set_type": "expansion"},
        {"code": "khm", "name": "Kaldheim", "set_type": "expansion"},
        {"code": "jdg", "name": "Judge Gift Cards", "set_type": "promo"},
    ]


@pytest.fixture
def catalog(sample_sets: list[dict[str, Any]]) -> SetCatalog:
    return SetCatalog.from_scryfall(sample_sets)


@pytest.fixture
def make_card() -> CardFactory:
    """Factory for Scryfall card payloads."""

    def _make(
        name: str = "Lightning Bolt",
        set_code: str = "lea",
        collector_number: str = "161",
        *,
        card_id: str = "4457ed35-7c10-48c8-9776-456485fdf070",
        lang: str = "en",
        finishes: tuple[str, ...] = ("nonfoil",),
        **extra: Any,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "object": "card",
            "id": card_id,
            "name": name,
            "set": set_code,
            "set_name": "Limited Edition Alpha",
            "collector_number": collector_number,
            "lang": lang,
            "finishes": list(finishes),
            "rarity": "common",
            "layout": "normal",
            "prices": {"usd": None, "eur": None},
            "multiverse_ids": [],
        }
        payload.update(extra)
        return payload

    return _make

