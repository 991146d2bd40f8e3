"""
Dialects exported by web collection and deckbuilding sites.

Archidekt, Cardsphere, CubeCobra, Deckbox, Deckstats, Moxfield and TappedOut.
"""

import re

from omenpath.formats.base import DialectDefinition
from omenpath.formats.normalizers import normalize_flag
from omenpath.models.record import ParsedRecord
from omenpath.parsers.tags import apply_tags, parse_tags

# "Commander Legends Retro Frame Etched Foil" -> "Commander Legends"
_CARDSPHERE_ETCHED = re.compile(
    r"\s+(Retro Frame|Extended Art|Borderless)?\s*Etched Foil", re.IGNORECASE
)


def _archidekt_tags(record: ParsedRecord) -> list[ParsedRecord]:
    if record.tags:
        flags = parse_tags(record.tags, ",")
        apply_tags(record, flags)
        record.tags = ", ".join(flags.remaining)
    return [record]


def _cardsphere_etched(record: ParsedRecord) -> list[ParsedRecord]:
    if "etched foil" in record.set_name.lower():
        record.finish = "etched"
        record.finish_from_text = True
        record.set_name = _CARDSPHERE_ETCHED.sub("", record.set_name).strip()
    return [record]


# Deckbox fills flag columns with the column's own word
_DECKBOX_FLAG_WORDS = frozenset({"signed", "altered"})


def _deckbox_flag(value: str) -> str:
    if value.strip().lower() in _DECKBOX_FLAG_WORDS:
        return "true"
    return normalize_flag(value)


def _deckbox_etched(record: ParsedRecord) -> list[ParsedRecord]:
    if record.set_code.upper().endswith("_E"):
        record.set_code = record.set_code[:-2]
        record.finish = "etched"
        record.finish_from_text = True
        record.add_warning("Removed _E suffix from set code for etched foil detection")
    if record.set_name.endswith(" Etched"):
        record.set_name = record.set_name[: -len(" Etched")]
        record.finish = "etched"
        record.finish_from_text = True
    return [record]


ARCHIDEKT = DialectDefinition(
    id="archidekt",
    name="Archidekt",
    description="Archidekt collection export",
    columns=(
        ("count", "Quantity"),
        ("name", "Name"),
        ("finish", "Finish"),
        ("condition", "Condition"),
        ("date_added", "Date Added"),
        ("language", "Language"),
        ("purchase_price", "Purchase Price"),
        ("tags", "Tags"),
        ("set_name", "Edition Name"),
        ("set_code", "Edition Code"),
        ("multiverse_id", "Multiverse Id"),
        ("scryfall_id", "Scryfall ID"),
        ("mtgo_id", "MTGO ID"),
        ("collector_number", "Collector Number"),
        ("mana_value", "Mana Value"),
        ("colors", "Colors"),
        ("identities", "Identities"),
        ("types", "Types"),
        ("rarity", "Rarity"),
        ("price_card_kingdom", "Price (Card Kingdom)"),
        ("price_tcg_player", "Price (TCG Player)"),
        ("oracle_id", "Scryfall Oracle ID"),
    ),
    strong_indicators=(
        "Date Added",
        "Scryfall Oracle ID",
        "Identities",
        "Price (Card Kingdom)",
        "Price (Card Hoarder)",
    ),
    post_process=_archidekt_tags,
)

CARDSPHERE = DialectDefinition(
    id="cardsphere",
    name="Cardsphere",
    description="Cardsphere haves/wants export",
    columns=(
        ("count", "Count"),
        ("tradelist_count", "Tradelist Count"),
        ("name", "Name"),
        ("set_name", "Edition"),
        ("condition", "Condition"),
        ("language", "Language"),
        ("finish", "Foil"),
        ("tags", "Tags"),
        ("scryfall_id", "Scryfall ID"),
        ("last_modified", "Last Modified"),
    ),
    strong_indicators=("Scryfall ID",),
    post_process=_cardsphere_etched,
)

CUBECOBRA = DialectDefinition(
    id="cubecobra",
    name="CubeCobra",
    description="CubeCobra cube list export",
    columns=(
        ("name", "name"),
        ("cmc", "CMC"),
        ("type_line", "Type"),
        ("color", "Color"),
        ("set_code", "Set"),
        ("collector_number", "Collector Number"),
        ("rarity", "Rarity"),
        ("color_category", "Color Category"),
        ("status", "status"),
        ("finish", "Finish"),
        ("maybeboard", "maybeboard"),
        ("image_url", "image URL"),
        ("image_back_url", "image Back URL"),
        ("tags", "tags"),
        ("notes", "Notes"),
        ("mtgo_id", "MTGO ID"),
    ),
    strong_indicators=("maybeboard", "Color Category", "image Back URL"),
)

DECKBOX = DialectDefinition(
    id="deckbox",
    name="Deckbox",
    description="Deckbox inventory export",
    columns=(
        ("count", "Count"),
        ("tradelist_count", "Tradelist Count"),
        ("name", "Name"),
        ("set_name", "Edition"),
        ("set_code", "Edition Code"),
        ("collector_number", "Card Number"),
        ("condition", "Condition"),
        ("language", "Language"),
        ("finish", "Foil"),
        ("signed", "Signed"),
        ("artist_proof", "Artist Proof"),
        ("alter", "Altered Art"),
        ("misprint", "Misprint"),
        ("promo", "Promo"),
        ("textless", "Textless"),
        ("printing_id", "Printing Id"),
        ("printing_note", "Printing Note"),
        ("tags", "Tags"),
        ("scryfall_id", "Scryfall ID"),
        ("purchase_price", "My Price"),
    ),
    strong_indicators=("Altered Art", "Artist Proof", "Textless", "Printing Id", "My Price"),
    transforms={"signed": _deckbox_flag, "alter": _deckbox_flag},
    post_process=_deckbox_etched,
)

DECKSTATS = DialectDefinition(
    id="deckstats",
    name="Deckstats",
    description="Deckstats.net collection export",
    columns=(
        ("count", "amount"),
        ("name", "card_name"),
        ("finish", "is_foil"),
        ("pinned", "is_pinned"),
        ("deckstats_set_id", "set_id"),
        ("set_code", "set_code"),
        ("set_name", "set_name"),
        ("collector_number", "collector_number"),
        ("language", "language"),
        ("condition", "condition"),
        ("notes", "comment"),
        ("added", "added"),
    ),
    strong_indicators=("card_name", "is_foil", "is_pinned", "set_id"),
)

MOXFIELD = DialectDefinition(
    id="moxfield",
    name="Moxfield",
    description="Moxfield collection export",
    columns=(
        ("count", "Count"),
        ("tradelist_count", "Tradelist Count"),
        ("name", "Name"),
        ("set_code", "Edition"),
        ("condition", "Condition"),
        ("language", "Language"),
        ("finish", "Foil"),
        ("tags", "Tags"),
        ("last_modified", "Last Modified"),
        ("collector_number", "Collector Number"),
        ("alter", "Alter"),
        ("proxy", "Proxy"),
        ("purchase_price", "Purchase Price"),
    ),
    strong_indicators=("Alter", "Proxy"),
)

TAPPEDOUT = DialectDefinition(
    id="tappedout",
    name="TappedOut",
    description="TappedOut inventory export",
    columns=(
        ("count", "Qty"),
        ("name", "Name"),
        ("set_code", "Set"),
        ("collector_number", "Set Number"),
        ("finish", "Foil"),
        ("alter", "Alter"),
        ("signed", "Signed"),
        ("condition", "Condition"),
        # Misspelled in TappedOut's own export
        ("language", "Languange"),
        ("proxy", "Proxy"),
    ),
    strong_indicators=("Languange", "Set Number"),
)

DIALECTS = (ARCHIDEKT, CARDSPHERE, CUBECOBRA, DECKBOX, DECKSTATS, MOXFIELD, TAPPEDOUT)
