"""
Canonical set list.

Loaded once (from the on-disk cache, or from Scryfall when the cache is
missing), then read-only for the life of the process.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from omenpath.config import settings
from omenpath.models.card import SetEntry
from omenpath.services.scryfall_client import ScryfallClient

logger = logging.getLogger(__name__)


class SetCatalog:
    """Immutable code <-> name table of every known set."""

    def __init__(self, entries: Iterable[SetEntry]):
        self._entries = tuple(entries)
        self._by_code = {entry.code: entry for entry in self._entries}

    @classmethod
    def from_scryfall(cls, data: Iterable[dict[str, Any]]) -> "SetCatalog":
        return cls(SetEntry.from_scryfall(item) for item in data)

    def __iter__(self) -> Iterator[SetEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.strip().lower() in self._by_code

    def get(self, code: str) -> SetEntry | None:
        return self._by_code.get(code.strip().lower())

    def is_valid_code(self, code: str) -> bool:
        return bool(code) and code in self

    @property
    def entries(self) -> tuple[SetEntry, ...]:
        return self._entries


def read_set_catalog(path: Path | None = None) -> SetCatalog:
    """
    Load the set list from the JSON cache.

    Raises:
        FileNotFoundError: If the cache file doesn't exist
    """
    if path is None:
        path = settings.sets_cache_path

    if not path.exists():
        raise FileNotFoundError(
            f"Set list not found at {path}. "
            "Run `python -m omenpath.jobs.download_sets` first."
        )

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return SetCatalog.from_scryfall(data)


def write_set_catalog(catalog: SetCatalog, path: Path | None = None) -> Path:
    """Write the set list to the JSON cache."""
    if path is None:
        path = settings.sets_cache_path
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([entry.to_dict() for entry in catalog], f, ensure_ascii=False, indent=1)
    return path


async def fetch_set_catalog(client: ScryfallClient) -> SetCatalog:
    """Download the current set list from Scryfall."""
    catalog = SetCatalog.from_scryfall(await client.fetch_sets())
    logger.info("set_catalog_fetched", extra={"sets": len(catalog)})
    return catalog


async def load_set_catalog(client: ScryfallClient, path: Path | None = None) -> SetCatalog:
    """Load the cached set list, downloading and caching it when missing."""
    if path is None:
        path = settings.sets_cache_path
    try:
        catalog = read_set_catalog(path)
    except FileNotFoundError:
        catalog = await fetch_set_catalog(client)
        write_set_catalog(catalog, path)
    logger.info("set_catalog_loaded", extra={"sets": len(catalog), "path": str(path)})
    return catalog
