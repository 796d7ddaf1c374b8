from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence

from ..models.items import Group, Item

"""Reusable grouping algorithms.

- group_items_by_key: bucket by derived key, singletons collapse into MERGED_SINGLES
- merge_single_item_groups_if_all: all-singleton group lists collapse into one group
- merge_similar_single_item_groups: singletons sharing a base description merge
- group_in_order: plain order-of-first-appearance bucketing (no merging)

All functions are deterministic for a given input order.
"""

__all__ = [
    "MERGED_SINGLES",
    "extract_grouping_key",
    "group_in_order",
    "group_items_by_key",
    "merge_single_item_groups_if_all",
    "merge_similar_single_item_groups",
    "merge_singletons_flat",
]

MERGED_SINGLES = "MERGED_SINGLES"

_H_TOKEN = re.compile(r"H=([0-9'\"\-]+)", re.IGNORECASE)
_FIRST_BRACKET = re.compile(r"\(([^x)]+)")

_BRACKET_KEYED = (
    "pier",
    "corbel",
    "concrete liner wall",
    "fw",
    "foundation wall",
    "vehicle barrier wall",
    "barrier wall",
    "retaining wall",
    "demo fw",
    "demo isolated footing",
)


def _h_key(text: str) -> str | None:
    m = _H_TOKEN.search(text)
    return f"H_{m.group(1).strip()}" if m else None


def _bracket_key(text: str) -> str | None:
    m = _FIRST_BRACKET.search(text)
    return f"DIM_{m.group(1).strip()}" if m else None


def extract_grouping_key(description: object) -> str:
    """Fallback grouping key derived from the item text alone."""
    if not isinstance(description, str) or not description:
        return "OTHER"
    lower = description.lower()

    if ("demo sog" in lower or "demo rog" in lower) and '"' in lower:
        m = re.search(r"(\d+)[\"']?\s*thick", description, re.IGNORECASE)
        if m:
            return f"THICK_{m.group(1)}"

    if "detention tank" in lower and "lid slab" in lower:
        m = re.search(r"(\d+)[\"']?\s*$", description)
        if m:
            return f"THICK_{m.group(1)}"

    if any(k in lower for k in ("demo sf", "demo fw", "demo rw")) and "(" in description:
        key = _bracket_key(description)
        if key:
            return key

    if "rock bolt" in lower and "@" in description:
        m = re.search(r"@\s*([0-9'\"\-]+)\s*o\.?c", description, re.IGNORECASE)
        if m:
            return f"SPACING_{m.group(1).strip()}"

    if ("shotcrete" in lower or "rock stabilization" in lower) and "H=" in description:
        key = _h_key(description)
        if key:
            return key

    if "form board" in lower:
        m = re.match(r"^(\d+[\"'])", description)
        if m:
            return f"THICK_{m.group(1)}"

    for kind in _BRACKET_KEYED:
        if kind in lower and "(" in description:
            key = _bracket_key(description)
            if key:
                return key

    if "H=" in description:
        key = _h_key(description)
        if key:
            return key

    if "(" in description and "x" in description:
        key = _bracket_key(description)
        if key:
            return key

    return "OTHER"


def _default_key(item: Item) -> str:
    if item.parsed.group_key:
        return item.parsed.group_key
    return extract_grouping_key(item.particulars)


def group_in_order(items: Iterable[Item], key: Callable[[Item], str] = _default_key) -> list[Group]:
    buckets: dict[str, list[Item]] = {}
    for item in items:
        buckets.setdefault(key(item), []).append(item)
    return [Group(group_key=k, items=tuple(v), parsed=v[0].parsed) for k, v in buckets.items()]


def group_items_by_key(items: Sequence[Item], key: Callable[[Item], str] | None = None) -> list[Group]:
    """Bucket by key; more than one singleton group -> multi-item groups + one MERGED_SINGLES group."""
    if not items:
        return []
    groups = group_in_order(items, key or _default_key)
    singles = [g for g in groups if len(g.items) == 1]
    multis = [g for g in groups if len(g.items) > 1]
    if len(singles) > 1:
        merged = tuple(g.items[0] for g in singles)
        return [*multis, Group(group_key=MERGED_SINGLES, items=merged, parsed=merged[0].parsed, is_merged=True)]
    return groups


def merge_single_item_groups_if_all(groups: Sequence[Group]) -> list[Group]:
    """When every group holds exactly one item, collapse them into one group."""
    if len(groups) <= 1:
        return list(groups)
    if not all(len(g.items) == 1 for g in groups):
        return list(groups)
    first = groups[0]
    key = f"{first.group_key}_MERGED" if first.group_key else MERGED_SINGLES
    items = tuple(i for g in groups for i in g.items)
    return [first.with_(group_key=key, items=items, parsed=first.parsed, is_merged=True)]


def _base_type(particulars: str) -> str:
    base = re.sub(r"\([^)]*\)", "", particulars)
    base = re.sub(r"H=.*$", "", base, flags=re.IGNORECASE).strip()
    return re.sub(r"\s+\d+[\"'].*$", "", base).strip()


def merge_similar_single_item_groups(groups: Sequence[Group]) -> list[Group]:
    """Singleton groups whose descriptions differ only in dimensions merge into ``<base>_MERGED``."""
    if not groups:
        return []
    singles = [g for g in groups if len(g.items) == 1]
    multis = [g for g in groups if len(g.items) > 1]
    if len(singles) <= 1:
        return list(groups)

    by_base: dict[str, list[Group]] = {}
    for g in singles:
        by_base.setdefault(_base_type(g.items[0].particulars or ""), []).append(g)

    merged: list[Group] = []
    for base, members in by_base.items():
        if len(members) > 1:
            items = tuple(g.items[0] for g in members)
            merged.append(
                Group(
                    group_key=f"{base}_MERGED",
                    items=items,
                    parsed=items[0].parsed,
                    is_merged=True,
                    extra={"base_type": base},
                )
            )
        else:
            merged.append(members[0])
    return [*multis, *merged]


def merge_singletons_flat(items: Sequence[Item], key: Callable[[Item], str], merged_key: str = "MERGED") -> list[Item]:
    """Flat variant used by demolition and waterproofing lists.

    Items are bucketed by key; when more than one bucket is a singleton, the
    multi-item buckets come first (flattened) followed by the singletons with
    their group key rewritten to ``merged_key``.
    """
    buckets: dict[str, list[Item]] = {}
    for item in items:
        buckets.setdefault(key(item), []).append(item)
    singles = [b for b in buckets.values() if len(b) == 1]
    multis = [b for b in buckets.values() if len(b) > 1]
    if len(singles) > 1:
        relabeled = [b[0].with_(parsed=b[0].parsed.with_(group_key=merged_key)) for b in singles]
        return [i for b in multis for i in b] + relabeled
    return [i for b in buckets.values() for i in b]
