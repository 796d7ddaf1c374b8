from __future__ import annotations

import re

from .dimensions import format_number

"""Static steel unit-weight tables and their lookups.

ANGLE_WEIGHTS: lbs/ft of equal and unequal leg angles keyed ``"{d1}x{d2}x{t:.3f}"``
(legs in inches, thickness in decimal inches).
SHEET_PILE_WEIGHTS: lbs per square foot of wall keyed by section name.
"""

__all__ = [
    "ANGLE_WEIGHTS",
    "SHEET_PILE_WEIGHTS",
    "angle_weight_keys",
    "lookup_angle_weight",
    "lookup_sheet_pile_weight",
]

ANGLE_WEIGHTS: dict[str, float] = {
    "8x8x1.125": 56.9,
    "8x8x1.000": 51.0,
    "8x8x0.875": 45.0,
    "8x8x0.750": 38.9,
    "8x8x0.625": 32.7,
    "8x8x0.500": 26.4,
    "8x6x1.000": 44.2,
    "8x6x0.750": 33.8,
    "8x6x0.500": 23.0,
    "8x4x1.000": 37.4,
    "8x4x0.750": 28.7,
    "8x4x0.500": 19.6,
    "7x4x0.750": 26.2,
    "7x4x0.500": 17.9,
    "7x4x0.375": 13.6,
    "6x6x1.000": 37.4,
    "6x6x0.750": 28.7,
    "6x6x0.625": 24.2,
    "6x6x0.500": 19.6,
    "6x6x0.375": 14.9,
    "6x4x0.750": 23.6,
    "6x4x0.625": 20.0,
    "6x4x0.500": 16.2,
    "6x4x0.375": 12.3,
    "5x5x0.750": 23.6,
    "5x5x0.500": 16.2,
    "5x5x0.375": 12.3,
    "5x3x0.500": 12.8,
    "5x3x0.375": 9.8,
    "4x4x0.750": 18.5,
    "4x4x0.500": 12.8,
    "4x4x0.375": 9.8,
    "4x4x0.250": 6.6,
    "4x3x0.500": 11.1,
    "4x3x0.375": 8.5,
    "4x3x0.250": 5.8,
    "3x3x0.500": 9.4,
    "3x3x0.375": 7.2,
    "3x3x0.250": 4.9,
}

SHEET_PILE_WEIGHTS: dict[str, float] = {
    "PZC 12": 21.3,
    "PZC 13": 22.2,
    "PZC 14": 23.5,
    "PZC 17": 26.5,
    "PZC 18": 27.5,
    "PZC 19": 28.7,
    "PZC 25": 33.2,
    "PZC 26": 35.0,
    "PZ 22": 22.0,
    "PZ 27": 27.0,
    "PZ 35": 35.0,
    "PZ 40": 40.0,
    "AZ 18-700": 23.9,
    "AZ 26-700": 31.3,
}

_SHEET_PILE_PATTERNS = [
    (name, re.compile("[- ]?".join(re.escape(p) for p in re.split(r"[-\s]", name)), re.IGNORECASE))
    for name in sorted(SHEET_PILE_WEIGHTS, key=len, reverse=True)
]


def angle_weight_keys(d1: float, d2: float, thickness: float) -> tuple[str, str]:
    """(padded, simple) keys: ``8x4x0.500`` then ``8x4x0.5``."""
    legs = f"{format_number(d1)}x{format_number(d2)}"
    return (f"{legs}x{thickness:.3f}", f"{legs}x{format_number(thickness)}")


def lookup_angle_weight(d1: float, d2: float, thickness: float) -> float:
    padded, simple = angle_weight_keys(d1, d2, thickness)
    if padded in ANGLE_WEIGHTS:
        return ANGLE_WEIGHTS[padded]
    return ANGLE_WEIGHTS.get(simple, 0.0)


def lookup_sheet_pile_weight(text: object) -> float:
    """Weight of the longest section name found in ``text``; spaces and dashes are interchangeable."""
    if not isinstance(text, str):
        return 0.0
    for name, pattern in _SHEET_PILE_PATTERNS:
        if pattern.search(text):
            return SHEET_PILE_WEIGHTS[name]
    return 0.0
