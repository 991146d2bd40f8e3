"""
Dialects exported by scanner and collection-tracking apps.

CardCastle, Decked Builder, Delver Lens, Dragon Shield, Helvault, ManaBox
and Urza's Gatherer. Several of these track regular and foil copies of a
printing in separate count columns on one row; those rows are split into
one record per finish.
"""

from omenpath.formats.base import DialectDefinition
from omenpath.formats.normalizers import parse_int
from omenpath.models.record import SCRYFALL_ID_LENGTH, ParsedRecord
from omenpath.parsers.tags import apply_tags, parse_tags


def split_by_finish(record: ParsedRecord, counts: dict[str, int]) -> list[ParsedRecord]:
    """
    Split a record into one record per finish with a positive count.

    Returns the record unchanged when no finish has a positive count.
    """
    positive = [(finish, count) for finish, count in counts.items() if count > 0]
    if not positive:
        return [record]
    if len(positive) == 1:
        finish, count = positive[0]
        record.finish = finish
        record.count = count
        return [record]
    return [record.split(finish=finish, count=count) for finish, count in positive]


def _cardcastle_json_id(record: ParsedRecord) -> list[ParsedRecord]:
    json_id = record.extras.pop("json_id", "")
    # Double-faced cards are exported with a stray trailing character
    if len(json_id) > SCRYFALL_ID_LENGTH:
        json_id = json_id[:SCRYFALL_ID_LENGTH]
        record.add_warning("Trimmed malformed JSON ID to Scryfall ID length")
    if json_id and not record.scryfall_id:
        record.scryfall_id = json_id
    return [record]


def _decked_builder_split(record: ParsedRecord) -> list[ParsedRecord]:
    regular = parse_int(record.extras.get("regular_count", "")) or 0
    foil = parse_int(record.extras.get("foil_count", "")) or 0
    return split_by_finish(record, {"": regular, "foil": foil})


def _helvault_extras(record: ParsedRecord) -> list[ParsedRecord]:
    extras = record.extras.get("helvault_extras", "")
    if extras:
        apply_tags(record, parse_tags(extras, "/"), use_finish=True)
    return [record]


def _urzas_gatherer_split(record: ParsedRecord) -> list[ParsedRecord]:
    foil = parse_int(record.extras.get("foil_count", "")) or 0
    etched = parse_int(record.extras.get("special_foil_count", "")) or 0
    regular = max(record.count - foil - etched, 0)
    return split_by_finish(record, {"": regular, "foil": foil, "etched": etched})


CARDCASTLE_FULL = DialectDefinition(
    id="cardcastle-full",
    name="CardCastle (Full)",
    description="CardCastle export including JSON IDs",
    columns=(
        ("name", "Card Name"),
        ("set_name", "Set Name"),
        ("condition", "Condition"),
        ("finish", "Foil"),
        ("language", "Language"),
        ("multiverse_id", "Multiverse ID"),
        ("json_id", "JSON ID"),
        ("purchase_price", "Price USD"),
    ),
    strong_indicators=("JSON ID",),
    post_process=_cardcastle_json_id,
)

CARDCASTLE_SIMPLE = DialectDefinition(
    id="cardcastle-simple",
    name="CardCastle (Simple)",
    description="CardCastle export without JSON IDs",
    columns=(
        ("count", "Count"),
        ("name", "Card Name"),
        ("set_name", "Set Name"),
        ("collector_number", "Collector Number"),
        ("finish", "Foil"),
    ),
)

DECKED_BUILDER = DialectDefinition(
    id="decked-builder",
    name="Decked Builder",
    description="Decked Builder collection export",
    columns=(
        ("count", "Total Qty"),
        ("regular_count", "Reg Qty"),
        ("foil_count", "Foil Qty"),
        ("name", "Card"),
        ("set_name", "Set"),
        ("multiverse_id", "Mvid"),
    ),
    strong_indicators=("Total Qty", "Reg Qty", "Foil Qty"),
    post_process=_decked_builder_split,
)

DELVER_LENS = DialectDefinition(
    id="delverlens",
    name="Delver Lens",
    description="Delver Lens scanner export",
    columns=(
        ("count", "Quantity"),
        ("name", "Name"),
        ("set_name", "Set"),
        ("collector_number", "Card Number"),
        ("condition", "Condition"),
        ("language", "Language"),
        ("finish", "Finish"),
    ),
)

DRAGON_SHIELD = DialectDefinition(
    id="dragonshield",
    name="Dragon Shield",
    description="Dragon Shield card manager export",
    columns=(
        ("folder_name", "Folder Name"),
        ("count", "Quantity"),
        ("trade_quantity", "Trade Quantity"),
        ("name", "Card Name"),
        ("set_code", "Set Code"),
        ("set_name", "Set Name"),
        ("collector_number", "Card Number"),
        ("condition", "Condition"),
        ("finish", "Printing"),
        ("language", "Language"),
        ("purchase_price", "Price Bought"),
        ("date_bought", "Date Bought"),
    ),
    strong_indicators=("Folder Name", "Trade Quantity", "Date Bought"),
)

HELVAULT = DialectDefinition(
    id="helvault",
    name="Helvault",
    description="Helvault collection export",
    columns=(
        ("cmc", "cmc"),
        ("collector_number", "collector_number"),
        ("color_identity", "color_identity"),
        ("colors", "colors"),
        ("purchase_price", "estimated_price"),
        ("helvault_extras", "extras"),
        ("language", "language"),
        ("mana_cost", "mana_cost"),
        ("name", "name"),
        ("oracle_id", "oracle_id"),
        ("count", "quantity"),
        ("rarity", "rarity"),
        ("scryfall_id", "scryfall_id"),
        ("set_code", "set_code"),
        ("set_name", "set_name"),
        ("type_line", "type_line"),
    ),
    strong_indicators=("extras", "estimated_price", "color_identity"),
    post_process=_helvault_extras,
)

MANABOX = DialectDefinition(
    id="manabox",
    name="ManaBox",
    description="ManaBox mobile app collection export",
    columns=(
        ("binder_name", "Binder Name"),
        ("binder_type", "Binder Type"),
        ("name", "Name"),
        ("set_code", "Set code"),
        ("set_name", "Set name"),
        ("collector_number", "Collector number"),
        ("finish", "Foil"),
        ("rarity", "Rarity"),
        ("count", "Quantity"),
        ("manabox_id", "ManaBox ID"),
        ("scryfall_id", "Scryfall ID"),
        ("purchase_price", "Purchase price"),
        ("misprint", "Misprint"),
        ("alter", "Altered"),
        ("condition", "Condition"),
        ("language", "Language"),
        ("purchase_price_currency", "Purchase price currency"),
    ),
    strong_indicators=("ManaBox ID", "Binder Name", "Binder Type", "Purchase price currency"),
)

URZAS_GATHERER = DialectDefinition(
    id="urzas-gatherer",
    name="Urza's Gatherer",
    description="Urza's Gatherer collection export",
    columns=(
        ("count", "Count"),
        ("name", "Name"),
        ("set_name", "Set"),
        ("collector_number", "Number"),
        ("condition", "Condition"),
        ("language", "Languages"),
        ("notes", "Comments"),
        ("multiverse_id", "Multiverse ID"),
        ("foil_count", "Foil count"),
        ("special_foil_count", "Special foil count"),
        ("scryfall_id", "Scryfall ID"),
    ),
    strong_indicators=("Foil count", "Special foil count", "TCG ID", "Cardmarket ID"),
    post_process=_urzas_gatherer_split,
)

DIALECTS = (
    CARDCASTLE_FULL,
    CARDCASTLE_SIMPLE,
    DECKED_BUILDER,
    DELVER_LENS,
    DRAGON_SHIELD,
    HELVAULT,
    MANABOX,
    URZAS_GATHERER,
)
