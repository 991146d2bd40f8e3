"""
Scryfall-backed card and set models.

INVARIANTS:
- CanonicalCardRecord is TRUSTED data straight from Scryfall
- Construction implies the printing exists upstream
- All models are frozen (immutable after construction)
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class CanonicalCardRecord:
    """
    One Scryfall printing.

    Attributes:
        id: Scryfall UUID
        name: Full printed name ("Front // Back" for multi-face cards)
        set_code: Lowercase Scryfall set code
        collector_number: Collector number as printed
        finishes: Available finishes ("nonfoil", "foil", "etched")
        lang: Scryfall language code (e.g., "en", "ja")
        prices: Price snapshot, currency -> decimal string
        multiverse_ids: Gatherer ids for this printing
    """

    id: str
    name: str
    set_code: str
    collector_number: str
    set_name: str = ""
    finishes: tuple[str, ...] = ("nonfoil",)
    lang: str = "en"
    rarity: str = ""
    layout: str = ""
    prices: dict[str, str] = field(default_factory=dict)
    multiverse_ids: tuple[int, ...] = ()
    mtgo_id: int | None = None
    mtgo_foil_id: int | None = None
    tcgplayer_id: int | None = None
    cardmarket_id: int | None = None

    @classmethod
    def from_scryfall(cls, data: dict[str, Any]) -> "CanonicalCardRecord":
        """Build from a Scryfall card object."""
        prices = {key: value for key, value in (data.get("prices") or {}).items() if value}
        return cls(
            id=data["id"],
            name=data["name"],
            set_code=data.get("set", "").lower(),
            collector_number=data.get("collector_number", ""),
            set_name=data.get("set_name", ""),
            finishes=tuple(data.get("finishes") or ("nonfoil",)),
            lang=data.get("lang", "en"),
            rarity=data.get("rarity", ""),
            layout=data.get("layout", ""),
            prices=prices,
            multiverse_ids=tuple(data.get("multiverse_ids") or ()),
            mtgo_id=data.get("mtgo_id"),
            mtgo_foil_id=data.get("mtgo_foil_id"),
            tcgplayer_id=data.get("tcgplayer_id"),
            cardmarket_id=data.get("cardmarket_id"),
        )

    @property
    def face_names(self) -> tuple[str, ...]:
        """Individual face names of a multi-face card, or the name itself."""
        return tuple(part.strip() for part in self.name.split("//"))


@dataclass(frozen=True, slots=True)
class SetEntry:
    """
    One entry of the canonical set list.

    Attributes:
        code: Lowercase set code
        name: Display name (e.g., "Dominaria United")
        set_type: Scryfall set type (expansion, token, promo, ...)
        parent_set_code: Code of the parent set for child sets
    """

    code: str
    name: str
    set_type: str = ""
    parent_set_code: str | None = None
    released_at: str | None = None
    digital: bool = False

    @classmethod
    def from_scryfall(cls, data: dict[str, Any]) -> "SetEntry":
        parent = data.get("parent_set_code")
        return cls(
            code=data["code"].lower(),
            name=data["name"],
            set_type=data.get("set_type", ""),
            parent_set_code=parent.lower() if parent else None,
            released_at=data.get("released_at"),
            digital=bool(data.get("digital", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "set_type": self.set_type,
            "parent_set_code": self.parent_set_code,
            "released_at": self.released_at,
            "digital": self.digital,
        }
