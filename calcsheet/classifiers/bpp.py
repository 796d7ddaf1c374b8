from __future__ import annotations

import re

from .base import classifier

__all__ = [
    "BPP_ESTIMATE",
    "BPP_SUBSECTION_KEYWORDS",
    "is_bpp_alternate_item",
    "has_bpp_street",
    "extract_street_name",
    "bpp_subsection",
]

BPP_ESTIMATE = "B.P.P. Alternate #2 scope"

# keyword -> subsection, first match wins; flush and drop curbs share the curb list
BPP_SUBSECTION_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("bpp concrete sidewalk", "Concrete sidewalk"),
    ("bpp concrete driveway", "Concrete driveway"),
    ("bpp concrete curb", "Concrete curb"),
    ("bpp concrete flush curb", "Concrete curb"),
    ("bpp concrete drop curb", "Concrete curb"),
    ("bpp expansion joint", "Expansion joint"),
    ("bpp full depth asphalt", "Full depth asphalt pavement"),
    ("bpp asphalt", "Full depth asphalt pavement"),
    ("bpp roadway", "Full depth asphalt pavement"),
)

_STREET_RE = re.compile(r"^(.+?)\s*-\s*BPP\s", re.IGNORECASE)


@classifier
def is_bpp_alternate_item(text: str) -> bool:
    return "- bpp " in text


@classifier
def has_bpp_street(text: str) -> bool:
    return _STREET_RE.search(text) is not None and bpp_subsection(text) is not None


def extract_street_name(text: object) -> str | None:
    """``"West Street - BPP ..."`` -> ``"West Street"``."""
    if not isinstance(text, str):
        return None
    m = _STREET_RE.search(text)
    return m.group(1).strip() if m else None


def bpp_subsection(text: object) -> str | None:
    if not isinstance(text, str):
        return None
    lower = text.lower()
    for keyword, subsection in BPP_SUBSECTION_KEYWORDS:
        if keyword in lower:
            return subsection
    return None
