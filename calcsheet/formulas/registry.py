from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from ..models.items import Item
from ..models.sheet import CellFormulas

"""Tagged dispatch tables for formula generation.

Each domain area owns one FormulaTable. Generators register for the category
tags they handle; ``validate`` is called at import time with the tags the
area's parsers can produce, so an unhandled tag fails loudly instead of
leaving blank cells.
"""

__all__ = [
    "RegistryError",
    "FormulaGenerator",
    "FormulaTable",
    "TABLES",
    "table_for",
    "generate",
    "DERIVED_FIELDS",
    "sum_fields",
]


FormulaGenerator = Callable[[int, "Item | None", Mapping[str, Any]], CellFormulas]

DERIVED_FIELDS = ("ft", "sq_ft", "lbs", "cy", "qty_final")


class RegistryError(Exception):
    """Raised when a dispatch table is incomplete or registers a tag twice."""


class FormulaTable:
    def __init__(self, section: str) -> None:
        self.section = section
        self._entries: dict[str, FormulaGenerator] = {}

    def register(self, *tags: str) -> Callable[[FormulaGenerator], FormulaGenerator]:
        def deco(fn: FormulaGenerator) -> FormulaGenerator:
            for tag in tags:
                if tag in self._entries:
                    raise RegistryError(f"{self.section}: duplicate formula generator for '{tag}'")
                self._entries[tag] = fn
            return fn

        return deco

    @property
    def tags(self) -> frozenset[str]:
        return frozenset(self._entries)

    def __contains__(self, tag: object) -> bool:
        return tag in self._entries

    def validate(self, expected: Iterable[str]) -> None:
        missing = sorted(set(expected) - set(self._entries))
        if missing:
            raise RegistryError(f"{self.section}: no formula generator for {', '.join(missing)}")

    def generate(self, tag: str, row: int, item: Item | None = None, refs: Mapping[str, Any] | None = None) -> CellFormulas:
        try:
            fn = self._entries[tag]
        except KeyError as e:
            raise RegistryError(f"{self.section}: unknown item type '{tag}'") from e
        return fn(row, item, refs or {})


TABLES: dict[str, FormulaTable] = {}


def table_for(section: str) -> FormulaTable:
    """Return (creating on first use) the table for ``section``."""
    table = TABLES.get(section)
    if table is None:
        table = FormulaTable(section)
        TABLES[section] = table
    return table


def generate(section: str, tag: str, row: int, item: Item | None = None, refs: Mapping[str, Any] | None = None) -> CellFormulas:
    table = TABLES.get(section)
    if table is None:
        raise RegistryError(f"no formula table for section '{section}'")
    return table.generate(tag, row, item, refs)


def sum_fields(section: str, items: Iterable[Item]) -> tuple[str, ...]:
    """Derived columns any of ``items`` fills; a group's sum row totals exactly these.

    Items are dispatched on ``parsed.type`` (falling back to ``item_type``).
    """
    table = TABLES.get(section)
    if table is None:
        return ()
    used: set[str] = set()
    for item in items:
        tag = item.parsed.type or item.item_type
        if tag not in table:
            continue
        formulas = table.generate(tag, 1, item, {"tag": tag})
        used.update(name for name, _ in formulas.items() if name in DERIVED_FIELDS)
    return tuple(name for name in DERIVED_FIELDS if name in used)
