"""
Format registry.

The registry is an immutable catalog of every dialect, built once at
startup. Detection only considers detectable dialects; the generic dialect
is reserved as the fallback when no dialect wins with confidence.
"""

from collections.abc import Iterator

from omenpath.formats import collection_sites, marketplaces, scanner_apps
from omenpath.formats.base import DialectDefinition

GENERIC = DialectDefinition(
    id="generic",
    name="Generic CSV",
    description="Common column names; used when no specific exporter is recognized",
    columns=(
        ("count", "Quantity"),
        ("name", "Name"),
        ("set_code", "Set"),
        ("set_name", "Set Name"),
        ("collector_number", "Collector Number"),
        ("condition", "Condition"),
        ("language", "Language"),
        ("finish", "Foil"),
        ("scryfall_id", "Scryfall ID"),
    ),
    detectable=False,
)


class UnknownDialectError(KeyError):
    """Raised when a dialect id is not registered."""

    pass


class FormatRegistry:
    """Immutable, ordered catalog of dialect definitions."""

    def __init__(self, dialects: tuple[DialectDefinition, ...]):
        ids = [dialect.id for dialect in dialects]
        duplicates = {dialect_id for dialect_id in ids if ids.count(dialect_id) > 1}
        if duplicates:
            raise ValueError(f"Duplicate dialect ids: {sorted(duplicates)}")
        self._dialects = dialects
        self._by_id = {dialect.id: dialect for dialect in dialects}

    def __iter__(self) -> Iterator[DialectDefinition]:
        return iter(self._dialects)

    def __len__(self) -> int:
        return len(self._dialects)

    def __contains__(self, dialect_id: object) -> bool:
        return dialect_id in self._by_id

    def get(self, dialect_id: str) -> DialectDefinition:
        """Look up a dialect by id."""
        try:
            return self._by_id[dialect_id]
        except KeyError:
            raise UnknownDialectError(dialect_id) from None

    @property
    def detectable(self) -> tuple[DialectDefinition, ...]:
        return tuple(dialect for dialect in self._dialects if dialect.detectable)

    @property
    def fallback(self) -> DialectDefinition:
        return self._by_id[GENERIC.id]


def build_default_registry() -> FormatRegistry:
    """Registry with every supported exporter plus the generic fallback."""
    return FormatRegistry(
        (
            *collection_sites.DIALECTS,
            *scanner_apps.DIALECTS,
            *marketplaces.DIALECTS,
            GENERIC,
        )
    )
