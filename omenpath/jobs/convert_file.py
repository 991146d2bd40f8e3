"""
Convert a collection export file to a Moxfield collection CSV.

    python -m omenpath.jobs.convert_file export.csv -o moxfield.csv
    python -m omenpath.jobs.convert_file export.csv --format manabox

Rows that could not be identified are kept in the output with an ERROR
note so they can be fixed by hand and re-imported.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from omenpath.models.failure import KnownError
from omenpath.services.converter import AUTO_DETECT, ConversionContext, ConversionResult, Converter

logger = logging.getLogger(__name__)


async def run_conversion(input_path: Path, dialect: str = AUTO_DETECT) -> ConversionResult:
    """Convert one file with a fresh ConversionContext."""
    text = input_path.read_text(encoding="utf-8-sig")
    context = await ConversionContext.create()
    try:
        converter = Converter(context)

        def log_progress(percent: int) -> None:
            logger.debug("Progress: %d%%", percent)

        return await converter.convert(text, dialect, progress=log_progress)
    finally:
        await context.aclose()


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Convert a collection export to Moxfield CSV")
    parser.add_argument("input", type=Path, help="Collection export (CSV or MTGO .dek)")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file (default: stdout)",
    )
    parser.add_argument(
        "--format",
        default=AUTO_DETECT,
        help='Source dialect id, or "auto" to detect it (default)',
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        result = asyncio.run(run_conversion(args.input, args.format))
    except KnownError as e:
        logger.error("Conversion failed: %s", e.message)
        if e.suggestion:
            logger.error(e.suggestion)
        sys.exit(1)

    for warning in result.warnings:
        logger.warning(warning)
    logger.info(
        "Converted %d rows from %s: %d succeeded, %d failed, %d with warnings",
        len(result.outcomes),
        result.dialect_id,
        result.succeeded,
        result.failed,
        result.with_warnings,
    )

    output = result.to_csv()
    if args.output is None:
        sys.stdout.write(output)
    else:
        args.output.write_text(output, encoding="utf-8")
        logger.info("Wrote %s", args.output)


if __name__ == "__main__":
    main()
