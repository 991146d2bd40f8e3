"""
Omenpath services.

Detection, set resolution, Scryfall lookup and export of card collections.
"""

from omenpath.services.cancellation import CancellationToken
from omenpath.services.consolidator import ResultConsolidator
from omenpath.services.converter import (
    AUTO_DETECT,
    ConversionContext,
    ConversionResult,
    Converter,
    ParsedInput,
)
from omenpath.services.export_formatter import format_outcomes_csv
from omenpath.services.format_detector import DetectionResult, FormatDetector
from omenpath.services.lookup_pipeline import LookupPipeline
from omenpath.services.scryfall_client import ScryfallClient, ScryfallError
from omenpath.services.set_catalog import SetCatalog, load_set_catalog
from omenpath.services.set_resolver import SetMatch, SetResolver

__all__ = [
    "AUTO_DETECT",
    "CancellationToken",
    "ConversionContext",
    "ConversionResult",
    "Converter",
    "DetectionResult",
    "FormatDetector",
    "LookupPipeline",
    "ParsedInput",
    "ResultConsolidator",
    # Output rendering
    "format_outcomes_csv",
    # Scryfall access
    "ScryfallClient",
    "ScryfallError",
    "SetCatalog",
    "SetMatch",
    "SetResolver",
    "load_set_catalog",
]
