from __future__ import annotations

import math
import re

from ..models.items import Item, ParsedItem
from .dimensions import (
    dimension_formula,
    extract_bracket_parts,
    extract_dimensions,
    extract_labeled_dimension,
    extract_thickness,
    format_number,
    normalize_fractions,
    parse_dimension,
    round_to_multiple_of_5,
)
from .weights import lookup_angle_weight, lookup_sheet_pile_weight

"""Parsers for shoring of excavation items.

Soldier piles come in two shapes: rolled HP sections (``HP12x63 H=25'-0"``)
and drilled pipe piles (``24Ø x1.0 ... H=27'-6" E=5'-0" RS=3'-0"``). The
group key of a drilled pile encodes diameter, wall thickness, which of
embedment/rock socket is given and both lengths in whole inches, so piles
that would be ordered together share a sum row.
"""

__all__ = [
    "PATTERN_ORDER",
    "GENERIC_TYPES",
    "ITEM_TYPES",
    "parse_soldier_pile",
    "calculate_pile_weight",
    "parse_soe_item",
    "parse_supporting_angle",
    "parse_anchor",
    "parse_rock_bolt",
    "parse_guide_wall",
    "parse_bracket_item",
    "parse_dowel",
    "parse_surface_item",
    "format_drilled_soldier_pile_proposal_text",
]

PATTERN_ORDER = {"E": 1, "E+RS": 2, "RS": 3, "H": 4}

_DIM_TOKEN = r"([0-9'\"\-]+)"
_H_RE = re.compile(rf"H={_DIM_TOKEN}")
_E_RE = re.compile(rf"E={_DIM_TOKEN}")
_RS_RE = re.compile(rf"RS={_DIM_TOKEN}")
_LF_RE = re.compile(rf"LF={_DIM_TOKEN}")
_HP_RE = re.compile(r"HP(\d+)x(\d+)", re.IGNORECASE)
_DRILLED_RE = re.compile(r"([0-9.]+)Ø\s*x\s*([0-9.]+)", re.IGNORECASE)
_SHAPE_WEIGHT_RE = re.compile(r"(?:W|MC|WT)\d+(?:\.\d+)?x([0-9.]+)", re.IGNORECASE)

# first keyword wins; timber members and upper/lower rakers are checked before
# the plain steel forms
_GENERIC_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("primary secant", "primary_secant"),
    ("secondary secant", "secondary_secant"),
    ("tangent pile", "tangent"),
    ("sheet pile", "sheet_pile"),
    ("timber lagging", "timber_lagging"),
    ("vertical timber sheet", "vertical_timber_sheets"),
    ("horizontal timber sheet", "horizontal_timber_sheets"),
    ("timber sheeting", "timber_sheeting"),
    ("timber soldier pile", "timber_soldier_pile"),
    ("timber plank", "timber_plank"),
    ("timber waler", "timber_waler"),
    ("timber raker", "timber_raker"),
    ("timber brace", "timber_brace"),
    ("timber post", "timber_post"),
    ("timber stringer", "timber_stringer"),
    ("waler", "waler"),
    ("upper raker", "upper_raker"),
    ("lower raker", "lower_raker"),
    ("raker", "raker"),
    ("stand off", "stand_off"),
    ("kicker", "kicker"),
    ("channel", "channel"),
    ("roll chock", "roll_chock"),
    ("stud beam", "stud_beam"),
    ("inner corner brace", "inner_corner_brace"),
    ("knee brace", "knee_brace"),
)
_ROUNDED_TYPES = frozenset({"primary_secant", "secondary_secant", "tangent", "sheet_pile"})
_RAW_HEIGHT_TYPES = frozenset(tag for _, tag in _GENERIC_KEYWORDS if "timber" in tag)

GENERIC_TYPES = frozenset(tag for _, tag in _GENERIC_KEYWORDS)

ITEM_TYPES = GENERIC_TYPES | frozenset({
    "hp",
    "drilled",
    "soldier_pile",
    "backpacking_item",
    "supporting_angle",
    "parging",
    "heel_block",
    "underpinning",
    "shims",
    "rock_anchor",
    "rock_bolt",
    "anchor",
    "tie_back",
    "concrete_soil_retention_pier",
    "guide_wall",
    "dowel_bar",
    "rock_pin",
    "shotcrete",
    "permission_grouting",
    "button",
    "rock_stabilization",
    "form_board",
    "drilled_hole_grout",
})


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _dim(pattern: re.Pattern[str], text: str) -> float:
    m = pattern.search(text)
    return parse_dimension(m.group(1)) if m else 0.0


def parse_soldier_pile(text: str) -> ParsedItem:
    """Shape, height and group key of a soldier pile; ``type`` is None when
    neither an HP section nor a drilled ``<d>Ø x<t>`` shape is present."""
    m = _HP_RE.search(text)
    if m:
        height_raw = _dim(_H_RE, text)
        return ParsedItem(
            type="hp",
            hp_size=f"HP{m.group(1)}x{m.group(2)}",
            hp_weight=float(m.group(2)),
            height_raw=height_raw,
            calculated_height=round_to_multiple_of_5(height_raw) if height_raw else 0.0,
            group_key=f"HP-{format_number(height_raw)}",
        )

    m = _DRILLED_RE.search(text)
    if not m:
        return ParsedItem()

    diameter = float(m.group(1))
    thickness = float(m.group(2))
    height_raw = _dim(_H_RE, text)
    embedment = _dim(_E_RE, text) or None
    rock_socket = _dim(_RS_RE, text) or None

    # E is informational only
    if rock_socket and height_raw:
        calculated = round_to_multiple_of_5(height_raw + rock_socket)
    elif height_raw:
        calculated = round_to_multiple_of_5(height_raw)
    else:
        calculated = 0.0

    if embedment and rock_socket:
        pattern = "E+RS"
    elif embedment:
        pattern = "E"
    elif rock_socket:
        pattern = "RS"
    else:
        pattern = "H"
    e_in = _round_half_up(embedment * 12) if embedment else 0
    rs_in = _round_half_up(rock_socket * 12) if rock_socket else 0

    return ParsedItem(
        type="drilled",
        diameter=diameter,
        thickness=thickness,
        height_raw=height_raw,
        calculated_height=calculated,
        embedment=embedment,
        rock_socket=rock_socket,
        pattern=pattern,
        group_key=f"{format_number(diameter)}-{format_number(thickness)}-{pattern}-{e_in}-{rs_in}",
    )


def calculate_pile_weight(parsed: ParsedItem) -> float:
    """lbs/ft: the HP section weight, or ``(d - t) * t * 10.69`` for a pipe."""
    if parsed.type == "hp":
        return parsed.hp_weight or 0.0
    if parsed.type == "drilled":
        return (parsed.diameter - parsed.thickness) * parsed.thickness * 10.69
    return 0.0


def parse_soe_item(text: str) -> ParsedItem:
    """Height (``H=`` or ``LF=``), rolled shape weight and type of a generic SOE member."""
    lower = text.lower()
    if _H_RE.search(text):
        height_raw = _dim(_H_RE, text)
    else:
        height_raw = _dim(_LF_RE, text)

    m = _SHAPE_WEIGHT_RE.search(text)
    weight = float(m.group(1)) if m else 0.0

    item_type = next((tag for keyword, tag in _GENERIC_KEYWORDS if keyword in lower), None)
    if item_type in _ROUNDED_TYPES:
        calculated = round_to_multiple_of_5(height_raw)
    elif item_type in _RAW_HEIGHT_TYPES:
        calculated = height_raw
    else:
        calculated = 0.0

    if item_type == "sheet_pile":
        weight = lookup_sheet_pile_weight(text)

    return ParsedItem(type=item_type, height_raw=height_raw, calculated_height=calculated, weight=weight)


_LEADING_QTY_RE = re.compile(r"^\s*\(?(\d+)\)?\s*-")
_ANGLE_RE = re.compile(r"L\s*(\d+(?:\.\d+)?)\s*x\s*(\d+(?:\.\d+)?)\s*x\s*(\d+(?:\.\d+)?)", re.IGNORECASE)


def parse_supporting_angle(text: str) -> ParsedItem:
    """``(2) - L8x4x½ Supporting angle @ waler line`` -> qty 2, angle weight, group ``waler line``."""
    m = _LEADING_QTY_RE.search(text)
    qty = float(m.group(1)) if m else None

    weight = 0.0
    angle_size = None
    m = _ANGLE_RE.search(normalize_fractions(text))
    if m:
        d1, d2, t = (float(g) for g in m.groups())
        angle_size = f"L{format_number(d1)}x{format_number(d2)}x{format_number(t)}"
        weight = lookup_angle_weight(d1, d2, t)

    group_key = text.split("@", 1)[1].strip() if "@" in text else None
    return ParsedItem(
        type="supporting_angle",
        qty=qty,
        angle_size=angle_size,
        weight=weight,
        height_raw=_dim(_H_RE, text),
        group_key=group_key or None,
    )


def parse_anchor(text: str, item_type: str) -> ParsedItem:
    """Rock anchors, anchors and tie backs: free + bond length rounded up to a
    multiple of 5, plus 5 ft of stick-out."""
    free = extract_labeled_dimension(text, "Free length")
    bond = extract_labeled_dimension(text, "Bond length")
    if free is None and bond is None:
        calculated = 0.0
    else:
        calculated = round_to_multiple_of_5((free or 0.0) + (bond or 0.0)) + 5
    return ParsedItem(type=item_type, free_length=free, bond_length=bond, calculated_height=calculated)


_OC_RE = re.compile(r"@\s*([0-9'\"\-\s.]+?)\s*O\.?\s*C", re.IGNORECASE)


def parse_rock_bolt(text: str) -> ParsedItem:
    """``Rock bolt @ 7'-0" O.C. (Bond length=10'-0")``: spacing and bond length.
    The installed length is bond + 5 ft, no rounding."""
    m = _OC_RE.search(text)
    oc = parse_dimension(m.group(1)) if m else None
    bond = extract_labeled_dimension(text, "Bond length")
    return ParsedItem(
        type="rock_bolt",
        oc_spacing=oc or None,
        bond_length=bond,
        calculated_length=bond + 5 if bond is not None else None,
    )


def parse_guide_wall(text: str) -> ParsedItem:
    """Two bracket values, width x height. The width keeps its exact
    spreadsheet expression (``4'-6½"`` -> ``4+(6.5/12)``)."""
    parts = extract_bracket_parts(text)
    if len(parts) < 2:
        return ParsedItem(type="guide_wall")
    return ParsedItem(
        type="guide_wall",
        width=parse_dimension(parts[0]),
        width_formula=dimension_formula(parts[0]),
        height_raw=parse_dimension(parts[1]),
    )


def parse_bracket_item(text: str, item_type: str) -> ParsedItem:
    """Heel blocks, underpinning, soil retention piers, buttons: ``(LxWxH)``."""
    dims = extract_dimensions(text)
    return ParsedItem(
        type=item_type,
        length=dims.get("length"),
        width=dims.get("width"),
        height=dims.get("height"),
    )


_COUNT_RE = re.compile(r"\((\d+)\)")


def parse_dowel(text: str, item_type: str) -> ParsedItem:
    """Dowel bars and rock pins: count in ``(N)``, height is H plus rock socket."""
    height = _dim(_H_RE, text) + _dim(_RS_RE, text)
    if item_type == "rock_pin":
        qty = 1.0
    else:
        m = _COUNT_RE.search(text) or _LEADING_QTY_RE.search(text)
        qty = float(m.group(1)) if m else None
    return ParsedItem(type=item_type, qty=qty, height_raw=height)


def parse_surface_item(text: str, item_type: str) -> ParsedItem:
    """Shotcrete, grouting, stabilization, form board, parging, hole grout:
    height from ``H=`` or a ``N" thick`` note."""
    height = _dim(_H_RE, text) or extract_thickness(text)
    return ParsedItem(type=item_type, height_raw=height)


def _feet_inches(value: float) -> str:
    feet = math.floor(value)
    inches = _round_half_up((value - feet) * 12)
    return f"{feet}'-{inches}\""


def format_drilled_soldier_pile_proposal_text(items: list[Item]) -> str | None:
    """One proposal line summarising every drilled soldier pile."""
    drilled = [i for i in items if i.parsed.type == "drilled"]
    if not drilled:
        return None
    heights = [i.parsed.height_raw for i in drilled if i.parsed.height_raw]
    if not heights:
        return None

    first = drilled[0].parsed
    avg_height = _round_half_up(sum(heights) / len(heights))
    embedment = next((i.parsed.embedment for i in drilled if i.parsed.embedment), None)
    embedment_text = _feet_inches(embedment) if embedment else "0'-0\""
    count = _round_half_up(sum(i.takeoff_value for i in drilled))

    return (
        f"F&I new ({count})no [{format_number(first.diameter)}\" Øx{format_number(first.thickness)}\" thick] "
        f"drilled soldier piles (H={avg_height}'-0\", {embedment_text} embedment) as per SOE-101.00"
    )
