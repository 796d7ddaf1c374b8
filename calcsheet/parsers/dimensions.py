from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal

"""Engineering-notation dimension parsing.

Converts substrings such as ``27'-10"``, ``5'``, ``10"``, ``4'-6½"`` into
decimal feet, and provides the small numeric helpers shared by every item
parser (procurement rounding, pile unit weights, compact number
rendering for formula strings).

All functions are pure and tolerate ``None``/non-string input.
"""

__all__ = [
    "FRACTION_GLYPHS",
    "normalize_fractions",
    "parse_dimension",
    "dimension_parts",
    "dimension_formula",
    "convert_to_feet",
    "round_to_multiple_of_5",
    "extract_dimensions",
    "extract_bracket_parts",
    "extract_thickness",
    "extract_h_value",
    "extract_labeled_dimension",
    "concrete_pile_weight",
    "format_number",
    "to_fixed",
    "normalize_unit",
    "parse_number",
]

FRACTION_GLYPHS: dict[str, float] = {
    "½": 0.5,
    "⅓": 1 / 3,
    "⅔": 2 / 3,
    "¼": 0.25,
    "¾": 0.75,
    "⅕": 0.2,
    "⅖": 0.4,
    "⅗": 0.6,
    "⅘": 0.8,
    "⅙": 1 / 6,
    "⅚": 5 / 6,
    "⅛": 0.125,
    "⅜": 0.375,
    "⅝": 0.625,
    "⅞": 0.875,
}

_GLYPH_CLASS = "".join(FRACTION_GLYPHS)
_NUM = r"\d+(?:\.\d+)?"

# "6½" / "6 ½" / "½"
_GLYPH_RE = re.compile(rf"(\d+(?:\.\d+)?)?\s?([{_GLYPH_CLASS}])")
# "6 1/2" / "6-1/2" (mixed number) and lone "3/8"
_MIXED_RE = re.compile(r"(\d+)[\s-](\d+)/(\d+)")
_SLASH_RE = re.compile(r"(?<![\d.])(\d+)/(\d+)")

_FEET_INCHES_RE = re.compile(rf"({_NUM})\s*'\s*-?\s*({_NUM})\s*\"?")
_FEET_RE = re.compile(rf"({_NUM})\s*'")
_INCHES_RE = re.compile(rf"({_NUM})\s*\"")
_BARE_RE = re.compile(rf"({_NUM})")

_BRACKET_RE = re.compile(r"\(([^)]+)\)")
_THICK_RE = re.compile(rf"({_NUM})\s*([\"'])\s*thick", re.IGNORECASE)
_H_RE = re.compile(r"H\s*=\s*([^,)]+)")


def _fmt_fraction(value: float) -> str:
    return format_number(round(value, 4))


def normalize_fractions(text: str) -> str:
    """Rewrite fraction glyphs and slash fractions as decimal literals.

    ``"4'-6½\""`` -> ``"4'-6.5\""``, ``"6 1/2\""`` -> ``"6.5\""``, ``"3/8\""`` -> ``"0.375\""``.
    """
    if not text:
        return ""

    def _glyph(m: re.Match[str]) -> str:
        whole = float(m.group(1)) if m.group(1) else 0.0
        return _fmt_fraction(whole + FRACTION_GLYPHS[m.group(2)])

    def _mixed(m: re.Match[str]) -> str:
        den = int(m.group(3))
        if den == 0:
            return m.group(0)
        return _fmt_fraction(int(m.group(1)) + int(m.group(2)) / den)

    def _slash(m: re.Match[str]) -> str:
        den = int(m.group(2))
        if den == 0:
            return m.group(0)
        return _fmt_fraction(int(m.group(1)) / den)

    out = _GLYPH_RE.sub(_glyph, text)
    out = _MIXED_RE.sub(_mixed, out)
    return _SLASH_RE.sub(_slash, out)


def dimension_parts(text: object) -> tuple[float, float]:
    """Return ``(feet, inches)`` for a dimension string; ``(0, 0)`` when unparseable.

    A bare number without unit marks is read as feet.
    """
    if not isinstance(text, str) or not text.strip():
        return (0.0, 0.0)
    s = normalize_fractions(text.strip())
    m = _FEET_INCHES_RE.search(s)
    if m:
        return (float(m.group(1)), float(m.group(2)))
    m = _FEET_RE.search(s)
    if m:
        return (float(m.group(1)), 0.0)
    m = _INCHES_RE.search(s)
    if m:
        return (0.0, float(m.group(1)))
    m = _BARE_RE.search(s)
    if m:
        return (float(m.group(1)), 0.0)
    return (0.0, 0.0)


def parse_dimension(text: object) -> float:
    """Decimal feet for ``27'-10"``, ``5'``, ``10"``, ``4'-6½"``; ``0`` when unparseable."""
    feet, inches = dimension_parts(text)
    return feet + inches / 12


def dimension_formula(text: object) -> str:
    """Exact spreadsheet expression for a dimension: ``4'-6½"`` -> ``"4+(6.5/12)"``."""
    feet, inches = dimension_parts(text)
    if inches == 0:
        return format_number(feet)
    if feet == 0:
        return f"{format_number(inches)}/12"
    return f"{format_number(feet)}+({format_number(inches)}/12)"


def convert_to_feet(text: object) -> float:
    # alias kept for bracket parts, which are always feet-inch strings
    return parse_dimension(text)


def round_to_multiple_of_5(value: float) -> float:
    return math.ceil(value / 5) * 5


def extract_bracket_parts(text: object) -> list[str]:
    """Split the first ``(...)`` group of ``text`` on ``x``; empty list when absent."""
    if not isinstance(text, str):
        return []
    m = _BRACKET_RE.search(text)
    if not m:
        return []
    return [p.strip() for p in re.split(r"\s*[xX×]\s*", m.group(1)) if p.strip()]


def extract_dimensions(text: object) -> dict[str, float]:
    """Bracket dimensions: two parts -> width/height, three parts -> length/width/height."""
    parts = extract_bracket_parts(text)
    if len(parts) == 2:
        return {"width": parse_dimension(parts[0]), "height": parse_dimension(parts[1])}
    if len(parts) == 3:
        return {
            "length": parse_dimension(parts[0]),
            "width": parse_dimension(parts[1]),
            "height": parse_dimension(parts[2]),
        }
    return {}


def extract_thickness(text: object) -> float:
    """``N" thick`` -> N/12 feet, ``N' thick`` -> N feet, else 0."""
    if not isinstance(text, str):
        return 0.0
    m = _THICK_RE.search(normalize_fractions(text))
    if not m:
        return 0.0
    value = float(m.group(1))
    return value / 12 if m.group(2) == '"' else value


def extract_h_value(text: object) -> float:
    """Decimal feet of the ``H=...`` notation, 0 when absent."""
    if not isinstance(text, str):
        return 0.0
    m = _H_RE.search(text)
    return parse_dimension(m.group(1)) if m else 0.0


def extract_labeled_dimension(text: object, label: str) -> float | None:
    """Decimal feet following ``<label>=`` (case-insensitive), ``None`` when absent."""
    if not isinstance(text, str):
        return None
    m = re.search(rf"{label}\s*=\s*([^,)+]+)", text, re.IGNORECASE)
    if not m:
        return None
    return parse_dimension(m.group(1))


def concrete_pile_weight(diameter_inches: float) -> float:
    """Unit weight (lbs/ft) of a circular concrete section at 150 pcf."""
    return math.pi * (diameter_inches / 12) ** 2 / 4 * 150


def format_number(value: float | int) -> str:
    """Render a number the way it appears inside formula text (``30.0`` -> ``"30"``)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def to_fixed(value: float, digits: int) -> str:
    """Fixed-point rendering with half-up rounding of the exact binary value."""
    quant = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(quant, rounding=ROUND_HALF_UP))


def normalize_unit(unit: object) -> str:
    if not isinstance(unit, str):
        return ""
    u = unit.strip().upper()
    if u in ("SF", "SQFT", "SQ.FT", "SQ. FT"):
        return "SQ FT"
    if u in ("LF", "FT."):
        return "FT"
    return u


def parse_number(value: object) -> float | None:
    """Leading-number parse of a cell value; ``None`` when no number is present."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return float(value)
    m = re.match(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))", str(value))
    return float(m.group(1)) if m else None
