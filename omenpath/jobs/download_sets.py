"""
Download the Scryfall set list.

Run this job to refresh the cached set list used for set-code validation
and fuzzy set-name correction. Conversions load the cache at startup and
only download the list themselves when no cache exists.
"""

import argparse
import asyncio
import logging
from pathlib import Path

from omenpath.config import settings
from omenpath.services.scryfall_client import ScryfallClient
from omenpath.services.set_catalog import fetch_set_catalog, write_set_catalog

logger = logging.getLogger(__name__)


async def run_download(path: Path | None = None) -> Path:
    """Download the set list and write it to the cache file."""
    logger.info("Downloading Scryfall set list...")

    async with ScryfallClient() as client:
        catalog = await fetch_set_catalog(client)

    path = write_set_catalog(catalog, path)
    logger.info("Wrote %d sets to %s", len(catalog), path)
    return path


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Download the Scryfall set list")
    parser.add_argument(
        "--output",
        type=Path,
        default=settings.sets_cache_path,
        help="Cache file to write",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_download(args.output))


if __name__ == "__main__":
    main()
