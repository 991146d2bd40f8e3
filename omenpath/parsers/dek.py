"""
Parser for Magic Online .dek deck files.

A .dek file is XML with one element per card:

    <Cards CatID="79038" Quantity="1" Sideboard="false" Name="Reaper King" />

CatID is the MTGO catalog id, which identifies the exact printing.
"""

import xml.etree.ElementTree as ET

from omenpath.formats.normalizers import parse_int
from omenpath.models.failure import FailureKind, KnownError
from omenpath.models.record import ParsedRecord


def is_dek_format(text: str) -> bool:
    """True for XML content with a <Deck> root element."""
    stripped = text.lstrip("\ufeff").strip()
    return stripped.startswith("<?xml") and "<Deck" in stripped


def parse_dek(text: str) -> list[ParsedRecord]:
    """
    Parse a .dek file into records keyed by MTGO id.

    Sideboard entries are kept and marked in extras.

    Raises:
        KnownError: If the XML is malformed or contains no cards
    """
    try:
        root = ET.fromstring(text.lstrip("\ufeff").strip())
    except ET.ParseError as e:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="The .dek file is not valid XML.",
            detail=str(e),
        ) from e

    records: list[ParsedRecord] = []
    for row_number, element in enumerate(root.iter("Cards"), start=1):
        attributes = dict(element.attrib)
        record = ParsedRecord(
            raw=attributes,
            row_number=row_number,
            name=attributes.get("Name", "").strip(),
            mtgo_id=parse_int(attributes.get("CatID", "")),
        )
        quantity = attributes.get("Quantity", "")
        count = parse_int(quantity)
        if count is None or count < 1:
            record.add_warning(f'Invalid quantity "{quantity}", defaulting to 1')
        else:
            record.count = count
        if attributes.get("Sideboard", "false").lower() == "true":
            record.extras["sideboard"] = "true"
        records.append(record)

    if not records:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="The .dek file contains no card entries.",
        )
    return records
