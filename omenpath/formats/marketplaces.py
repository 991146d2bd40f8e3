"""
Dialects exported by marketplaces: TCGplayer (app and seller portal) and
Magic Online.

TCGplayer product names carry information other exporters put in separate
columns: token and art-card markers, etched finishes, and both faces of
double-sided tokens. Promotional sets are not addressable through the batch
lookup, so those rows are tagged with a search filter instead.
"""

import re

from omenpath.formats.base import DialectDefinition
from omenpath.formats.normalizers import (
    clean_collector_number,
    normalize_condition,
)
from omenpath.models.record import ParsedRecord

# "Human (001) // Vampire (016) Double-Sided Token"
_SELLER_DFC_TOKEN = re.compile(
    r"^(.+?)\s+\((\d+)\)\s+//\s+(.+?)\s+\((\d+)\)\s+Double-Sided Token$", re.IGNORECASE
)
# "Illusion // Plant Double-sided Token"
_USER_DFC_TOKEN = re.compile(r"^(.+?)\s+//\s+(.+?)\s+Double-sided Token$", re.IGNORECASE)

_PARENTHETICAL = re.compile(r"\s+\([^)]*\)")
_SELLER_FOIL_CONDITION = re.compile(r"^(.+?)\s+Foil$", re.IGNORECASE)


def clean_product_name(name: str) -> str:
    """Strip " Art Card", " Token" and parenthetical suffixes from a product name."""
    cleaned = re.sub(r"\s+Art Card$", "", name)
    cleaned = re.sub(r"\s+Token$", "", cleaned)
    return _PARENTHETICAL.sub("", cleaned).strip()


def promo_filter(set_code: str, set_name: str) -> str:
    """Search filter for promo sets the batch endpoint cannot address, or ""."""
    code = set_code.lower()
    name = set_name.lower()
    if code == "jdg" or "judge promos" in name:
        return "is:judge ++"
    if code == "pre" or "prerelease" in name:
        return "is:prerelease ++"
    if "promo pack:" in name:
        return "is:promopack ++"
    return ""


def split_double_faced_token(record: ParsedRecord, product_name: str) -> list[ParsedRecord] | None:
    """
    Split a double-sided token product into one record per face.

    Returns None when the product is not a double-sided token.
    """
    if " // " not in product_name or "token" not in product_name.lower():
        return None

    faces: list[tuple[str, str]] = []
    seller = _SELLER_DFC_TOKEN.match(product_name)
    if seller:
        faces = [
            (seller.group(1).strip(), seller.group(2).lstrip("0") or "0"),
            (seller.group(3).strip(), seller.group(4).lstrip("0") or "0"),
        ]
    else:
        user = _USER_DFC_TOKEN.match(product_name)
        if user:
            faces = [(user.group(1).strip(), ""), (user.group(2).strip(), "")]
    if not faces:
        return None

    record.is_token = True
    records = []
    for index, (face_name, collector_number) in enumerate(faces, start=1):
        face = record.split(
            name=face_name,
            collector_number=collector_number or record.collector_number,
        )
        face.add_warning(f"Face {index} of {len(faces)}: {face_name}")
        face.add_warning(
            "Double-faced token detected, treating each face as a separate entry"
        )
        records.append(face)
    return records


def _apply_product_name(record: ParsedRecord, product_name: str) -> list[ParsedRecord]:
    if "(Foil Etched)" in product_name:
        record.finish = "etched"
        record.finish_from_text = True

    record.promo_query = promo_filter(record.set_code, record.set_name)

    split = split_double_faced_token(record, product_name)
    if split is not None:
        for face in split:
            _prefix_set_code(face, "t", "token")
        return split

    if re.search(r"\sToken\b", product_name):
        record.is_token = True
        _prefix_set_code(record, "t", "token")
    if product_name.endswith(" Art Card"):
        record.is_art_card = True
        _prefix_set_code(record, "a", "art card")

    record.name = clean_product_name(record.name or product_name)
    return [record]


def _prefix_set_code(record: ParsedRecord, prefix: str, kind: str) -> None:
    original = record.set_code
    if original and not original.lower().startswith(prefix):
        record.set_code = f"{prefix}{original}".lower()
        record.add_warning(
            f"Detected {kind}, adjusted set code from {original} to {record.set_code}"
        )


def _tcgplayer_user(record: ParsedRecord) -> list[ParsedRecord]:
    product_name = record.extras.get("product_name") or record.name
    return _apply_product_name(record, product_name)


def _tcgplayer_seller(record: ParsedRecord) -> list[ParsedRecord]:
    match = _SELLER_FOIL_CONDITION.match(record.condition)
    if match:
        record.condition = normalize_condition(match.group(1))
        if not record.finish:
            record.finish = "foil"
    else:
        record.condition = normalize_condition(record.condition)
    return _apply_product_name(record, record.name)


TCGPLAYER_USER = DialectDefinition(
    id="tcgplayer-user",
    name="TCGplayer (App)",
    description="TCGplayer app collection export",
    columns=(
        ("count", "Quantity"),
        ("product_name", "Name"),
        ("name", "Simple Name"),
        ("set_name", "Set"),
        ("set_code", "Set Code"),
        ("collector_number", "Card Number"),
        ("language", "Language"),
        ("finish", "Printing"),
        ("condition", "Condition"),
        ("rarity", "Rarity"),
        ("product_id", "Product ID"),
        ("sku", "SKU"),
    ),
    strong_indicators=("Simple Name", "Product ID", "SKU"),
    transforms={"collector_number": clean_collector_number},
    post_process=_tcgplayer_user,
)

TCGPLAYER_SELLER = DialectDefinition(
    id="tcgplayer-seller",
    name="TCGplayer (Seller)",
    description="TCGplayer seller portal inventory export",
    columns=(
        ("tcgplayer_id", "TCGplayer Id"),
        ("product_line", "Product Line"),
        ("set_name", "Set Name"),
        ("name", "Product Name"),
        ("title", "Title"),
        ("collector_number", "Number"),
        ("rarity", "Rarity"),
        ("condition", "Condition"),
        ("market_price", "TCG Market Price"),
        ("direct_low", "TCG Direct Low"),
        ("low_price_with_shipping", "TCG Low Price With Shipping"),
        ("low_price", "TCG Low Price"),
        ("count", "Total Quantity"),
        ("add_quantity", "Add to Quantity"),
        ("purchase_price", "TCG Marketplace Price"),
        ("photo_url", "Photo URL"),
    ),
    strong_indicators=(
        "TCGplayer Id",
        "Product Line",
        "TCG Market Price",
        "TCG Direct Low",
        "TCG Low Price With Shipping",
        "Add to Quantity",
    ),
    # Seller conditions carry the finish ("Near Mint Foil"); split after parsing
    transforms={"condition": str.strip, "collector_number": clean_collector_number},
    post_process=_tcgplayer_seller,
)

MTGO = DialectDefinition(
    id="mtgo",
    name="MTGO",
    description="Magic Online collection CSV export",
    columns=(
        ("name", "Card Name"),
        ("count", "Quantity"),
        ("mtgo_id", "ID #"),
        ("rarity", "Rarity"),
        ("set_code", "Set"),
        ("collector_number", "Collector #"),
        ("finish", "Premium"),
        ("annotation", "Annotation"),
    ),
    strong_indicators=("ID #", "Premium", "Collector #", "Annotation"),
    transforms={"collector_number": clean_collector_number},
)

DIALECTS = (TCGPLAYER_USER, TCGPLAYER_SELLER, MTGO)
