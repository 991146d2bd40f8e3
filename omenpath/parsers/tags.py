"""
Composite tag parsing.

Several exporters pack finish and physical-state markers into one delimited
column (Archidekt "Tags", Helvault "extras"). This module splits those
columns into flags and applies them to a record.
"""

from dataclasses import dataclass

from omenpath.models.record import ParsedRecord

# token -> flag name, all lowercase
TAG_FLAGS: dict[str, str] = {
    "proxy": "proxy",
    "proxies": "proxy",
    "signed": "signed",
    "autographed": "signed",
    "alter": "alter",
    "altered": "alter",
    "custom": "alter",
    "foil": "foil",
    "etched": "etched",
    "etchedfoil": "etched",
    "etched foil": "etched",
}


@dataclass(frozen=True, slots=True)
class TagFlags:
    """Flags recovered from a composite tag column."""

    proxy: bool = False
    signed: bool = False
    alter: bool = False
    foil: bool = False
    etched: bool = False
    remaining: tuple[str, ...] = ()

    @property
    def finish(self) -> str:
        if self.etched:
            return "etched"
        if self.foil:
            return "foil"
        return ""


def parse_tags(value: str, separator: str = ",") -> TagFlags:
    """
    Split a composite tag column into flags.

    Tokens that are not recognized are kept, in order, in `remaining`.
    """
    flags: dict[str, bool] = {}
    remaining: list[str] = []
    for token in value.split(separator):
        cleaned = token.strip()
        if not cleaned:
            continue
        flag = TAG_FLAGS.get(cleaned.lower())
        if flag is None:
            remaining.append(cleaned)
        else:
            flags[flag] = True
    return TagFlags(remaining=tuple(remaining), **flags)


def apply_tags(record: ParsedRecord, flags: TagFlags, *, use_finish: bool = False) -> None:
    """Set the record's proxy/signed/alter flags (and optionally finish) from tags."""
    record.proxy = record.proxy or flags.proxy
    record.signed = record.signed or flags.signed
    record.alter = record.alter or flags.alter
    if use_finish and flags.finish:
        record.finish = flags.finish
