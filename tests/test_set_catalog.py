"""Tests for the canonical set list."""

from pathlib import Path
from typing import Any

import httpx
import pytest
import respx

from omenpath.services.scryfall_client import ScryfallClient
from omenpath.services.set_catalog import (
    SetCatalog,
    load_set_catalog,
    read_set_catalog,
    write_set_catalog,
)

SETS_URL = "https://api.scryfall.com/sets"


class TestSetCatalog:
    def test_lookup_is_case_insensitive(self, catalog: SetCatalog) -> None:
        assert "LEA" in catalog
        assert catalog.is_valid_code("Dom")
        assert not catalog.is_valid_code("")
        assert not catalog.is_valid_code("xyz")

    def test_child_sets_keep_parent(self, catalog: SetCatalog) -> None:
        entry = catalog.get("tdom")

        assert entry is not None
        assert entry.parent_set_code == "dom"
        assert entry.set_type == "token"


class TestCache:
    def test_missing_cache_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="download_sets"):
            read_set_catalog(tmp_path / "sets.json")

    def test_write_then_read(self, catalog: SetCatalog, tmp_path: Path) -> None:
        path = write_set_catalog(catalog, tmp_path / "cache" / "sets.json")

        loaded = read_set_catalog(path)

        assert [entry.code for entry in loaded] == [entry.code for entry in catalog]
        assert loaded.get("2xm") == catalog.get("2xm")

    @pytest.mark.asyncio
    @respx.mock
    async def test_load_downloads_and_caches_when_missing(
        self, sample_sets: list[dict[str, Any]], tmp_path: Path
    ) -> None:
        route = respx.get(SETS_URL).mock(
            return_value=httpx.Response(200, json={"object": "list", "data": sample_sets})
        )
        path = tmp_path / "sets.json"

        async with ScryfallClient(request_delay=0) as client:
            first = await load_set_catalog(client, path)
            second = await load_set_catalog(client, path)

        assert route.call_count == 1
        assert path.exists()
        assert len(first) == len(second) == len(sample_sets)
