from __future__ import annotations

import re

from ..models.items import ParsedItem
from .dimensions import (
    format_number,
    parse_dimension,
    parse_number,
    round_to_multiple_of_5,
    to_fixed,
)

"""Foundation item parsers.

Bracket dimensions follow the takeoff convention: ``(W x H)`` for linear
elements, ``(L x W x H)`` for blocks. Bare integers inside a bracket are
inches. Pit parsers tag an ``item_sub_type`` (slab, mat, wall, ...) that both
the processor and the formula table key on.
"""

__all__ = [
    "ITEM_TYPES",
    "PILE_TYPES",
    "EXTRA_TAGS",
    "foundation_pile_weight",
    "parse_diameter_thickness",
    "parse_bracket_dimensions",
    "parse_drilled_foundation_pile",
    "parse_helical_foundation_pile",
    "parse_driven_foundation_pile",
    "parse_stelcor_pile",
    "parse_cfa_pile",
    "try_match_pile_structure",
    "parse_pile_cap",
    "parse_strip_footing",
    "parse_isolated_footing",
    "parse_pilaster",
    "parse_grade_beam",
    "parse_tie_beam",
    "parse_strap_beam",
    "parse_thickened_slab",
    "parse_buttress",
    "parse_pier",
    "parse_corbel",
    "parse_linear_wall",
    "parse_foundation_wall",
    "parse_retaining_wall",
    "parse_barrier_wall",
    "parse_stem_wall",
    "parse_elevator_pit",
    "parse_service_elevator_pit",
    "parse_detention_tank",
    "parse_duplex_sewage_ejector_pit",
    "parse_deep_sewage_ejector_pit",
    "parse_sump_pump_pit",
    "parse_grease_trap",
    "parse_house_trap",
    "parse_mat_slab",
    "parse_mud_slab_foundation",
    "parse_sog",
    "parse_rog",
    "parse_stairs_on_grade",
    "parse_electric_conduit",
]

PILE_TYPES = (
    "drilled_foundation_pile",
    "helical_foundation_pile",
    "driven_foundation_pile",
    "stelcor_drilled_displacement_pile",
    "cfa_pile",
)

EXTRA_TAGS = ("foundation_extra_sqft", "foundation_extra_ft", "foundation_extra_ea")

ITEM_TYPES = frozenset({
    *PILE_TYPES,
    *EXTRA_TAGS,
    "pile_cap",
    "strip_footing",
    "isolated_footing",
    "pilaster",
    "grade_beam",
    "tie_beam",
    "strap_beam",
    "thickened_slab",
    "buttress_takeoff",
    "pier",
    "corbel",
    "linear_wall",
    "foundation_wall",
    "retaining_wall",
    "barrier_wall",
    "stem_wall",
    "elevator_pit",
    "service_elevator_pit",
    "detention_tank",
    "duplex_sewage_ejector_pit",
    "deep_sewage_ejector_pit",
    "sump_pump_pit",
    "grease_trap",
    "house_trap",
    "mat_slab",
    "mud_slab_foundation",
    "sog",
    "rog",
    "stairs_on_grade",
    "electric_conduit",
})

_FT_IN = r"(\d+'-\d+\")"
_H_FT_IN_RE = re.compile(rf"H\s*=\s*{_FT_IN}", re.IGNORECASE)
_H_LOOSE_RE = re.compile(r"H=([0-9'\"\-]+)", re.IGNORECASE)
_H_RS_RE = re.compile(rf"H\s*=\s*{_FT_IN}\s*(?:\+\s*{_FT_IN}\s*RS\b)?", re.IGNORECASE)
_RS_EQ_RE = re.compile(rf"RS\s*=\s*{_FT_IN}", re.IGNORECASE)
_RS_PLUS_RE = re.compile(rf"\+\s*{_FT_IN}\s*RS\b", re.IGNORECASE)
_DUAL_RE = re.compile(r"([^&]+)\s*&\s*([^&]+)")
_DIAM_THICK_RE = re.compile(r"(\d+(?:-\d+/\d+)?)[\"']?\s*[Øø]\s*x\s*([0-9.]+)", re.IGNORECASE)
_DIAM_RE = re.compile(r"(\d+(?:-\d+/\d+)?)[\"']?\s*[Øø]", re.IGNORECASE)
_HP_RE = re.compile(r"HP(\d+)x(\d+)", re.IGNORECASE)
_BRACKETS_RE = re.compile(r"\(([^)]+)\)")
_INCHES_ONLY_RE = re.compile(r"^\d+[\"']?$")
_INCH_TYP_RE = re.compile(r"(\d+)\"\s*(?:typ\.)?", re.IGNORECASE)
_INCH_THICK_RE = re.compile(r"(\d+)\"\s*(?:thick)?", re.IGNORECASE)
_MAT_INCH_RE = re.compile(r"mat\s+(\d+)\"?", re.IGNORECASE)
_MAT_SLAB_INCH_RE = re.compile(r"mat(?:[-\s]+slab)?[-\s]*(\d+)\"", re.IGNORECASE)
_AT_RE = re.compile(r"@\s*(.+)$")
_WIDE_RE = re.compile(r"(\d+'-?\d*\")\s*wide", re.IGNORECASE)
_RISER_RE = re.compile(r"(\d+(?:\.\d+)?)\s*[\"']?\s*riser", re.IGNORECASE)

_GLYPH_FRACTIONS = {
    "½": "1/2", "⅓": "1/3", "⅔": "2/3", "¼": "1/4", "¾": "3/4",
    "⅕": "1/5", "⅖": "2/5", "⅗": "3/5", "⅘": "4/5", "⅙": "1/6",
    "⅚": "5/6", "⅛": "1/8", "⅜": "3/8", "⅝": "5/8", "⅞": "7/8",
}


def foundation_pile_weight(diameter: float, thickness: float = 0.5) -> float:
    """Steel pipe section weight (lbs/ft)."""
    return (diameter - thickness) * thickness * 10.69


def _mixed_inches(token: str) -> float:
    """``"9-5/8"`` -> 9.625, ``"24"`` -> 24."""
    whole, _, frac = token.partition("-")
    value = float(whole or 0)
    if frac:
        num, _, den = frac.partition("/")
        if den and float(den):
            value += float(num) / float(den)
    return value


def _glyphs_to_slash(text: str) -> str:
    for glyph, fraction in _GLYPH_FRACTIONS.items():
        text = re.sub(rf"(\d+){glyph}", rf"\g<1>-{fraction}", text)
    return text


def parse_diameter_thickness(text: str) -> tuple[float, float] | None:
    """``9⅝"Ø x0.545`` -> ``(9.625, 0.545)``; integer thickness 100..999 is read as thousandths."""
    m = _DIAM_THICK_RE.search(_glyphs_to_slash(text))
    if not m:
        return None
    thickness = parse_number(m.group(2)) or 0.0
    if 100 <= thickness < 1000 and thickness.is_integer():
        thickness /= 1000
    return _mixed_inches(m.group(1)), thickness


def _single_diameter(text: str) -> float | None:
    m = _DIAM_RE.search(_glyphs_to_slash(text))
    return _mixed_inches(m.group(1)) if m else None


def _ft_in(pattern: re.Pattern[str], text: str) -> float | None:
    m = pattern.search(text)
    return parse_dimension(m.group(1)) if m else None


def _loose_height(text: str) -> float:
    m = _H_LOOSE_RE.search(text)
    return parse_dimension(m.group(1)) if m else 0.0


def _drilled_group_key(height: float, rock_socket: float | None, dual: bool, influence: bool) -> str:
    prefix = "DUAL" if dual else "SINGLE"
    if influence:
        prefix = f"INFLU-{prefix}"
    parts = []
    if height > 0:
        parts.append(f"H{to_fixed(height, 2)}")
    if rock_socket:
        parts.append(f"RS{to_fixed(rock_socket, 2)}")
    return f"{prefix}-{'-'.join(parts)}" if parts else f"{prefix}-OTHER"


def parse_drilled_foundation_pile(text: str) -> ParsedItem:
    """Drilled (caisson) pile: ``H=``, optional rock socket, single or dual (``&``) section.

    The second section of a dual pile only carries a diameter; its weight
    uses the default 0.5" wall.
    """
    influence = "influence" in text.lower()
    height = 0.0
    rock_socket = None
    m = _H_RS_RE.search(text)
    if m:
        height = parse_dimension(m.group(1))
        if m.group(2):
            rock_socket = parse_dimension(m.group(2))
    if rock_socket is None:
        rock_socket = _ft_in(_RS_EQ_RE, text)
    if rock_socket is None:
        rock_socket = _ft_in(_RS_PLUS_RE, text)

    calculated = 0.0
    if rock_socket and height:
        calculated = round_to_multiple_of_5(height + rock_socket)
    elif height:
        calculated = round_to_multiple_of_5(height)

    section: dict[str, float] = {}
    dual = _DUAL_RE.search(text)
    if dual:
        dt = parse_diameter_thickness(dual.group(1).strip())
        if dt:
            section.update(diameter=dt[0], thickness=dt[1], weight=foundation_pile_weight(*dt))
        d2 = _single_diameter(dual.group(2).strip())
        if d2:
            section.update(diameter2=d2, weight2=foundation_pile_weight(d2, 0.5))
    else:
        dt = parse_diameter_thickness(text)
        if dt:
            section.update(diameter=dt[0], thickness=dt[1], weight=foundation_pile_weight(*dt))

    return ParsedItem(
        type="drilled_foundation_pile",
        height_raw=height,
        rock_socket=rock_socket,
        calculated_height=calculated,
        is_dual_diameter=dual is not None,
        has_influence=influence,
        group_key=_drilled_group_key(height, rock_socket, dual is not None, influence),
        **section,
    )


def _pipe_pile(text: str, pile_type: str) -> ParsedItem:
    influence = "influence" in text.lower()
    height = _loose_height(text)
    parsed = ParsedItem(
        type=pile_type,
        height_raw=height,
        calculated_height=round_to_multiple_of_5(height) if height else 0.0,
        has_influence=influence,
    )
    dt = parse_diameter_thickness(text)
    if dt:
        key = f"{to_fixed(dt[0], 3)}x{format_number(dt[1])}"
        parsed = parsed.with_(
            diameter=dt[0],
            thickness=dt[1],
            weight=foundation_pile_weight(*dt),
            group_key=f"INFLU-{key}" if influence else key,
        )
    return parsed


def parse_helical_foundation_pile(text: str) -> ParsedItem:
    return _pipe_pile(text, "helical_foundation_pile")


def parse_stelcor_pile(text: str) -> ParsedItem:
    return _pipe_pile(text, "stelcor_drilled_displacement_pile")


def parse_driven_foundation_pile(text: str) -> ParsedItem:
    """Driven H-pile: ``HP12x74`` gives the section and its lbs/ft."""
    influence = "influence" in text.lower()
    m = _HP_RE.search(text)
    hp_size = m.group(0) if m else None
    height = _loose_height(text)
    key = hp_size or "OTHER"
    return ParsedItem(
        type="driven_foundation_pile",
        hp_size=hp_size,
        weight=float(m.group(2)) if m else 0.0,
        height_raw=height,
        calculated_height=round_to_multiple_of_5(height) if height else 0.0,
        has_influence=influence,
        group_key=f"INFLU-{key}" if influence else key,
    )


def parse_cfa_pile(text: str) -> ParsedItem:
    height = _loose_height(text)
    return ParsedItem(
        type="cfa_pile",
        height_raw=height,
        calculated_height=round_to_multiple_of_5(height) if height else 0.0,
        has_influence="influence" in text.lower(),
    )


def try_match_pile_structure(text: object) -> ParsedItem | None:
    """Parse a loosely described pile with the first family whose notation fits."""
    if not isinstance(text, str) or not text:
        return None
    drilled = parse_drilled_foundation_pile(text)
    if (drilled.diameter or drilled.is_dual_diameter) and drilled.calculated_height:
        return drilled
    driven = parse_driven_foundation_pile(text)
    if driven.hp_size and driven.calculated_height:
        return driven
    helical = parse_helical_foundation_pile(text)
    if helical.diameter and helical.calculated_height:
        return helical
    stelcor = parse_stelcor_pile(text)
    if stelcor.diameter and stelcor.calculated_height:
        return stelcor
    cfa = parse_cfa_pile(text)
    if cfa.calculated_height:
        return cfa
    return None


def _bracket_part(part: str) -> float:
    token = re.sub(r"^'+(?=\d)", "", part.strip())
    if "'" in token:
        return parse_dimension(token)
    if _INCHES_ONLY_RE.match(token):
        return float(token.strip("\"'")) / 12
    return parse_dimension(token)


def parse_bracket_dimensions(text: str) -> list[float]:
    """Dimensions of the last bracket containing ``x`` (else the first bracket)."""
    candidates = [m.group(1).strip() for m in _BRACKETS_RE.finditer(text)]
    candidates = [c for c in candidates if c]
    if not candidates:
        return []
    content = next((c for c in reversed(candidates) if "x" in c.lower()), candidates[0])
    return [_bracket_part(p) for p in content.split("x")]


def _block(text: str, item_type: str) -> ParsedItem:
    dims = parse_bracket_dimensions(text)
    if len(dims) >= 3:
        return ParsedItem(type=item_type, length=dims[0], width=dims[1], height=dims[2])
    return ParsedItem(type=item_type, length=0.0, width=0.0, height=0.0)


def _linear(text: str, item_type: str) -> ParsedItem:
    dims = parse_bracket_dimensions(text)
    if len(dims) >= 2:
        return ParsedItem(type=item_type, width=dims[0], height=dims[1], group_key=to_fixed(dims[0], 2))
    return ParsedItem(type=item_type, width=0.0, height=0.0)


def parse_pile_cap(text: str) -> ParsedItem:
    return _block(text, "pile_cap")


def parse_isolated_footing(text: str) -> ParsedItem:
    return _block(text, "isolated_footing")


def parse_pilaster(text: str) -> ParsedItem:
    return _block(text, "pilaster")


def parse_buttress(text: str) -> ParsedItem:
    # dimensions are entered on the sheet
    return ParsedItem(type="buttress_takeoff")


def parse_strip_footing(text: str) -> ParsedItem:
    """Strip footing; ``ST-`` footings swap the width and height roles in their formulas."""
    lower = text.lower()
    sub_type = None
    if lower.startswith("sf") or "strip footing" in lower:
        sub_type = "SF"
    elif lower.startswith("wf-"):
        sub_type = "WF"
    elif lower.startswith("st-"):
        sub_type = "ST"
    return _linear(text, "strip_footing").with_(item_sub_type=sub_type)


def parse_grade_beam(text: str) -> ParsedItem:
    return _linear(text, "grade_beam")


def parse_tie_beam(text: str) -> ParsedItem:
    return _linear(text, "tie_beam")


def parse_strap_beam(text: str) -> ParsedItem:
    return _linear(text, "strap_beam")


def parse_thickened_slab(text: str) -> ParsedItem:
    return _linear(text, "thickened_slab")


def parse_pier(text: str) -> ParsedItem:
    dims = parse_bracket_dimensions(text)
    if len(dims) >= 3:
        return ParsedItem(type="pier", length=dims[0], width=dims[1], height=dims[2], group_key=to_fixed(dims[0], 2))
    return ParsedItem(type="pier", length=0.0, width=0.0, height=0.0)


def parse_corbel(text: str) -> ParsedItem:
    return _linear(text, "corbel")


def parse_linear_wall(text: str) -> ParsedItem:
    return _linear(text, "linear_wall")


def parse_foundation_wall(text: str) -> ParsedItem:
    return _linear(text, "foundation_wall")


def parse_retaining_wall(text: str) -> ParsedItem:
    return _linear(text, "retaining_wall")


def parse_barrier_wall(text: str) -> ParsedItem:
    return _linear(text, "barrier_wall")


def parse_stem_wall(text: str) -> ParsedItem:
    return _linear(text, "stem_wall")


def _inches(pattern: re.Pattern[str], text: str) -> float | None:
    m = pattern.search(text)
    return float(m.group(1)) / 12 if m else None


def _pit_wall(text: str, item_type: str, sub_type: str, *, key_by_height: bool) -> ParsedItem:
    dims = parse_bracket_dimensions(text)
    if len(dims) < 2:
        return ParsedItem(type=item_type, item_sub_type=sub_type, width=0.0, height=0.0)
    key = to_fixed(dims[0], 2)
    if key_by_height:
        key = f"{key}x{to_fixed(dims[1], 2)}"
    return ParsedItem(type=item_type, item_sub_type=sub_type, width=dims[0], height=dims[1], group_key=key)


def _elevator_pit(text: str, item_type: str, sump_markers: tuple[str, ...]) -> ParsedItem:
    lower = text.lower()
    base = ParsedItem(type=item_type)
    if any(marker in lower for marker in sump_markers):
        return base.with_(item_sub_type="sump_pit")
    if "mat slab" in lower:
        return base.with_(item_sub_type="mat_slab", height_from_h=_ft_in(_H_FT_IN_RE, text))
    if "mat" in lower:
        height = _ft_in(_H_FT_IN_RE, text)
        if height is None:
            height = _inches(_MAT_INCH_RE, text)
        return base.with_(item_sub_type="mat", height_from_h=height)
    if "slab" in lower:
        return base.with_(item_sub_type="slab", height_from_h=_ft_in(_H_FT_IN_RE, text))
    if "wall" in lower:
        return _pit_wall(text, item_type, "wall", key_by_height=False)
    if "slope transition" in lower or "haunch" in lower:
        return _pit_wall(text, item_type, "slope_transition", key_by_height=False)
    return base


def parse_elevator_pit(text: str) -> ParsedItem:
    return _elevator_pit(text, "elevator_pit", ("sump pit",))


def parse_service_elevator_pit(text: str) -> ParsedItem:
    return _elevator_pit(text, "service_elevator_pit", ("sump pit @ service elevator",))


def parse_detention_tank(text: str) -> ParsedItem:
    lower = text.lower()
    if "slab" in lower:
        sub_type = "lid_slab" if "lid" in lower else "slab"
        return ParsedItem(type="detention_tank", item_sub_type=sub_type, height_from_name=_inches(_INCH_TYP_RE, text))
    if "wall" in lower:
        wall = _pit_wall(text, "detention_tank", "wall", key_by_height=False)
        return wall.with_(length=wall.width)
    return ParsedItem(type="detention_tank")


def _sewage_pit(text: str, item_type: str, *, wall_first: bool = False) -> ParsedItem:
    lower = text.lower()
    base = ParsedItem(type=item_type)
    if "mat slab" in lower:
        return base.with_(item_sub_type="mat_slab", height_from_name=_ft_in(_H_FT_IN_RE, text))
    if "mat" in lower:
        height = _ft_in(_H_FT_IN_RE, text)
        if height is None:
            height = _inches(_INCH_TYP_RE, text)
        return base.with_(item_sub_type="mat", height_from_name=height)
    if "slab" in lower:
        return base.with_(item_sub_type="slab", height_from_name=_inches(_INCH_TYP_RE, text))
    sloped = "slope transition" in lower or "haunch" in lower
    if "wall" in lower or sloped:
        sub_type = "slope_transition" if sloped and not (wall_first and "wall" in lower) else "wall"
        return _pit_wall(text, item_type, sub_type, key_by_height=True)
    return base


def parse_duplex_sewage_ejector_pit(text: str) -> ParsedItem:
    return _sewage_pit(text, "duplex_sewage_ejector_pit", wall_first=True)


def parse_deep_sewage_ejector_pit(text: str) -> ParsedItem:
    return _sewage_pit(text, "deep_sewage_ejector_pit")


def parse_sump_pump_pit(text: str) -> ParsedItem:
    return _sewage_pit(text, "sump_pump_pit")


def parse_grease_trap(text: str) -> ParsedItem:
    return _sewage_pit(text, "grease_trap")


def parse_house_trap(text: str) -> ParsedItem:
    return _sewage_pit(text, "house_trap")


def parse_mat_slab(text: str) -> ParsedItem:
    """Mat (grouped by height) or haunch (grouped into the preceding mat by the processor)."""
    lower = text.lower()
    if "haunch" in lower:
        return _pit_wall(text, "mat_slab", "haunch", key_by_height=True)
    if "mat" in lower:
        height = _ft_in(_H_FT_IN_RE, text)
        if height is None:
            height = _ft_in(_H_LOOSE_RE, text) or _inches(_MAT_SLAB_INCH_RE, text)
        if height is None:
            return ParsedItem(type="mat_slab", item_sub_type="mat")
        return ParsedItem(type="mat_slab", item_sub_type="mat", height_from_h=height, group_key=f"H{to_fixed(height, 2)}")
    return ParsedItem(type="mat_slab")


def parse_mud_slab_foundation(text: str) -> ParsedItem:
    return ParsedItem(type="mud_slab_foundation", item_sub_type="mud_slab", width=0.0, height=0.0)


def _slab_key(prefix: str, height: float | None) -> str:
    return f"{prefix}_{to_fixed(height, 2) if height else 'other'}"


def parse_sog(text: str) -> ParsedItem:
    lower = text.lower()
    if "gravel backfill" in lower:
        return ParsedItem(
            type="sog",
            item_sub_type="gravel_backfill",
            height_from_h=_ft_in(_H_FT_IN_RE, text),
            group_key="gravel_backfill",
        )
    if "gravel" in lower:
        return ParsedItem(type="sog", item_sub_type="gravel", group_key="gravel")
    if "geotextile filter fabric" in lower:
        return ParsedItem(type="sog", item_sub_type="geotextile", group_key="geotextile")
    if "step" in lower:
        return _pit_wall(text, "sog", "sog_step", key_by_height=True)
    if "sog" in lower or "slab on grade" in lower or "pressure slab" in lower:
        height = _inches(_INCH_THICK_RE, text)
        prefix = "sog"
        if "patio" in lower:
            prefix = "patio_sog"
        elif "patch" in lower:
            prefix = "patch_sog"
        elif "pressure" in lower:
            prefix = "pressure_sog"
        return ParsedItem(type="sog", item_sub_type="sog_slab", height_from_name=height, group_key=_slab_key(prefix, height))
    return ParsedItem(type="sog")


def parse_rog(text: str) -> ParsedItem:
    height = _inches(_INCH_THICK_RE, text)
    return ParsedItem(type="rog", item_sub_type="rog_slab", height_from_name=height, group_key=_slab_key("rog", height))


def parse_stairs_on_grade(text: str) -> ParsedItem:
    lower = text.lower()
    m = _AT_RE.search(text)
    parsed = ParsedItem(type="stairs_on_grade", group_key=m.group(1).strip() if m else "NO_AT")
    if "landings" in lower:
        return parsed.with_(item_sub_type="landings")
    if "stairs on grade" in lower:
        return parsed.with_(
            item_sub_type="stairs",
            width_from_name=_ft_in(_WIDE_RE, text),
            height_from_name=_inches(_RISER_RE, text),
        )
    return parsed


def parse_electric_conduit(text: str) -> ParsedItem:
    return ParsedItem(type="electric_conduit")
