from __future__ import annotations

from .base import classifier

__all__ = [
    "DEMOLITION_SUBSECTION_KEYWORDS",
    "is_demolition_item",
    "demolition_subsection",
]

# keyword -> template subsection, first match wins
DEMOLITION_SUBSECTION_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("demo sog", "Demo slab on grade"),
    ("demo rog", "Demo Ramp on grade"),
    ("demo sf", "Demo strip footing"),
    ("demo fw", "Demo foundation wall"),
    ("demo rw", "Demo retaining wall"),
    ("demo isolated footing", "Demo isolated footing"),
    ("demo stair", "Demo stair on grade"),
)


@classifier
def is_demolition_item(text: str) -> bool:
    return text.startswith("demo ")


def demolition_subsection(text: object) -> str | None:
    if not isinstance(text, str):
        return None
    lower = text.lower()
    for keyword, subsection in DEMOLITION_SUBSECTION_KEYWORDS:
        if keyword in lower:
            return subsection
    return None
