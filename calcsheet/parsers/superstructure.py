from __future__ import annotations

import re
from collections.abc import Callable

from ..models.items import ParsedItem
from .dimensions import convert_to_feet, format_number, normalize_fractions

"""Superstructure item typing.

``parse_superstructure_item`` runs an ordered list of keyword rules; the
first rule that recognises the text decides the template subsection, the
category tag and the group key. Rules are ordered most specific first
(``slab step`` before any ``slab``, knee walls at ramps before raised slab
knee walls, and so on). Text no rule recognises yields ``None``.
"""

__all__ = [
    "ITEM_TYPES",
    "GROUP_UNITS",
    "SLAB_TYPES",
    "unit_for",
    "parse_thermal_break_qty",
    "parse_somd_inches",
    "parse_superstructure_item",
]

SLAB_TYPES = ("slab_8", "cast_in_place_slab_8", "cip_slab_var", "roof_slab_8", "slab_var")

ITEM_TYPES = frozenset({
    *SLAB_TYPES,
    "balcony",
    "terrace",
    "patch",
    "slab_step",
    "lw_concrete_fill",
    "somd",
    "infilled_landing",
    "topping_slab",
    "thermal_break",
    "raised_knee_wall",
    "raised_slab",
    "built_up_knee_wall",
    "built_up_slab",
    "builtup_ramps_knee_wall",
    "builtup_ramp",
    "built_up_stairs",
    "concrete_hanger",
    "shear_walls",
    "parapet_walls",
    "columns_takeoff",
    "concrete_post",
    "concrete_encasement",
    "drop_panel_bracket",
    "drop_panel_h",
    "beams",
    "curbs",
    "concrete_pad",
    "concrete_pad_no_bracket",
    "non_shrink_grout",
    "repair_scope",
})

GROUP_UNITS: dict[str, str] = {
    "slab_step": "FT",
    "lw_concrete_fill": "SQ FT",
    "topping_slab": "SQ FT",
    "thermal_break": "FT",
    "raised_knee_wall": "FT",
    "raised_slab": "SQ FT",
    "built_up_knee_wall": "FT",
    "built_up_slab": "SQ FT",
    "builtup_ramps_knee_wall": "FT",
    "builtup_ramp": "SQ FT",
    "built_up_stairs": "Treads",
    "concrete_hanger": "EA",
    "shear_walls": "FT",
    "parapet_walls": "FT",
    "columns_takeoff": "EA",
    "concrete_post": "EA",
    "concrete_encasement": "EA",
    "drop_panel_bracket": "EA",
    "drop_panel_h": "SQ FT",
    "beams": "FT",
    "curbs": "FT",
    "non_shrink_grout": "EA",
}

_EXCLUDED = ("detention tank lid slab", "duplex sewage ejector pit slab")

_BRACKET_RE = re.compile(r"\(([^)]+)\)")
_BRACKET_WITH_X_RE = re.compile(r"\(([^)]*x[^)]+)\)", re.IGNORECASE)
_TRAILING_ID_RE = re.compile(r"\(\s*(\d+)\s*\)\s*$")
_TRAILING_ID_AFTER_BRACKET_RE = re.compile(r"\)\s*\(\d+\)\s*$")
_HEIGHT_RE = re.compile(r"(?:Height|Ht\.?|H)\s*=\s*([^,\s]+)", re.IGNORECASE)
_HAS_HEIGHT_RE = re.compile(r"(?:Height|Ht|H)\s*=", re.IGNORECASE)
_FLOOR_RANGE_RE = re.compile(r"(\d+)(?:st|nd|rd|th)\s*FL\s*to\s*(\d+)(?:st|nd|rd|th)\s*FL", re.IGNORECASE)
_BRACKET_QTY_RE = re.compile(r"\(\s*(\d+)\s*(?:No\.?|EA)?\s*\)", re.IGNORECASE)
_INCH_TOKEN_RE = re.compile(r"(\d+(?:\s*[½¼¾]|\s*\d+/\d+)?)\s*$")
_INCHES_QUOTED_RE = re.compile(r"(\d+(?:\.\d+)?)\s*\"")
_INCHES_THICK_RE = re.compile(r"(\d+(?:\.\d+)?)\s*\"\s*(?:thick|thk)", re.IGNORECASE)
_INCHES_BARE_THICK_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:thick|thk)", re.IGNORECASE)
_TWO_PART_BEAM_RE = re.compile(r"\([^)]+x[^)]+\)", re.IGNORECASE)
_THREE_PART_RE = re.compile(r"\([^)]+x[^)]+x[^)]+\)", re.IGNORECASE)
_BEAM_MARK_RE = re.compile(r"^(?:'?\s*)?(\d+B-\d+|RB-\d+|BHB-\d+)", re.IGNORECASE)
_SLAB_THICK_RE = re.compile(r"^slab\s+([0-9'\"\-]+)\"?\s*(?:thick|thk)?\.?", re.IGNORECASE)
_LEADING_SLAB_RE = re.compile(r"^slab\s+[0-9'\"\-]")
_DIM = r"([0-9'\"\-]+)"


def _wide_re(prefix: str) -> re.Pattern[str]:
    # "<prefix> 8" wide, H=3'-0""
    return re.compile(rf"(?:{prefix})\s*{_DIM}\s*(?:wide|width)\s*,?\s*(?:Height|Ht|H)={_DIM}", re.IGNORECASE)


def _lwh_wide_re(prefix: str) -> re.Pattern[str]:
    # "<prefix> 12"x12" wide, H=10'-0""
    return re.compile(rf"(?:{prefix})\s*{_DIM}\s*x\s*{_DIM}\s*(?:wide|width)\s*,?\s*(?:Height|Ht|H)={_DIM}", re.IGNORECASE)


def _thick_re(prefix: str) -> re.Pattern[str]:
    return re.compile(rf"(?:{prefix})\s*{_DIM}\"?\s*(?:thick|thk)?", re.IGNORECASE)


def _height_token(raw: str) -> float:
    return convert_to_feet(re.sub(r"[\"\s]+$", "", raw.strip()).strip())


def _thickness(raw: str) -> float:
    # bare numbers after a slab keyword are inches
    raw = raw.strip()
    if "'" in raw or '"' in raw:
        return convert_to_feet(raw)
    return convert_to_feet(f'{raw}"')


def _bracket_pair(text: str, pattern: re.Pattern[str] = _BRACKET_RE) -> tuple[float, float] | None:
    m = pattern.search(text)
    if not m:
        return None
    parts = [s.strip() for s in re.split(r"x", m.group(1), flags=re.IGNORECASE)]
    if len(parts) < 2:
        return None
    return convert_to_feet(parts[0]), convert_to_feet(parts[1])


def _bracket_triple(text: str) -> tuple[float, float, float] | None:
    m = _BRACKET_RE.search(text)
    if not m:
        return None
    parts = [s.strip() for s in re.split(r"x", m.group(1), flags=re.IGNORECASE)]
    if len(parts) < 3:
        return None
    return convert_to_feet(parts[0]), convert_to_feet(parts[1]), convert_to_feet(parts[2])


def _trailing_id(text: str) -> int | None:
    m = _TRAILING_ID_RE.search(text.strip())
    return int(m.group(1)) if m else None


def _height_from_name(text: str) -> float | None:
    m = _HEIGHT_RE.search(text)
    if not m:
        return None
    return convert_to_feet(m.group(1).strip())


def parse_thermal_break_qty(text: object) -> int | None:
    """Floor count of a ``3rd FL to 7th FL`` range (inclusive); ``None`` for a single floor."""
    if not isinstance(text, str):
        return None
    m = _FLOOR_RANGE_RE.search(text)
    if not m:
        return None
    first, second = int(m.group(1)), int(m.group(2))
    return second - first + 1 if second >= first else None


def _inches(token: str) -> float:
    s = normalize_fractions(token.strip()).replace(" ", "")
    try:
        return float(re.sub(r"[^\d.\-]", "", s))
    except ValueError:
        return 0.0


def parse_somd_inches(text: object) -> tuple[float, float] | None:
    """Topping and deck depths (inches) of ``SOMD 4 ½" LW concrete topping over 2" MD``."""
    if not isinstance(text, str):
        return None
    parts = text.split('"')
    if len(parts) < 3:
        return None
    first = _INCH_TOKEN_RE.search(parts[0].strip())
    second = _INCH_TOKEN_RE.search(parts[1].strip())
    if not first or not second:
        return None
    a, b = _inches(first.group(1)), _inches(second.group(1))
    if a <= 0 or b <= 0:
        return None
    return a, b


def _somd_key(a: float, b: float) -> str:
    return f"somd_{format_number(a)}_{format_number(b)}"


def _item(subsection: str, tag: str, **fields) -> ParsedItem:
    fields.setdefault("group_key", tag)
    return ParsedItem(type=tag, subsection=subsection, **fields)


Rule = Callable[[str, str], "ParsedItem | None"]


def _slab_step(text: str, lower: str) -> ParsedItem | None:
    if "slab step" not in lower:
        return None
    pair = _bracket_pair(text)
    if pair:
        return _item("Slab steps", "slab_step", width=pair[0], height=pair[1], qty=2)
    m = _wide_re("slab step").search(text)
    if m:
        return _item("Slab steps", "slab_step", width=convert_to_feet(m.group(1).strip()), height=_height_token(m.group(2)), qty=2)
    return None


_LW_FILL_THICK_RE = re.compile(r"lw concrete fill\s*([0-9'\"\-]+)\"?\s*(?:thick|thk)?\.?", re.IGNORECASE)


def _lw_concrete_fill(text: str, lower: str) -> ParsedItem | None:
    if "lw concrete fill" not in lower and "light weight concrete fill" not in lower:
        return None
    height = _height_from_name(text)
    if height is None:
        m = _LW_FILL_THICK_RE.search(text)
        if m:
            height = _thickness(m.group(1))
    return _item("LW concrete fill", "lw_concrete_fill", height=1 + 1 / 12 if height is None else height)


def _infilled_landing(text: str, lower: str) -> ParsedItem | None:
    if "landing" not in lower or "lw concrete topping" not in lower:
        return None
    if "somd" not in lower and "slab on metal deck" not in lower:
        return None
    dims = parse_somd_inches(text)
    if dims is None:
        return None
    return _item(
        "Stairs – Infilled tads",
        "infilled_landing",
        group_key=_somd_key(*dims),
        height=0.67,
        extra={"topping_inches": dims[0], "deck_inches": dims[1]},
    )


def _slab_on_metal_deck(text: str, lower: str) -> ParsedItem | None:
    if "slab on metal deck" not in lower and "somd" not in lower:
        return None
    dims = parse_somd_inches(text)
    if dims is None:
        return None
    return _item(
        "Slab on metal deck",
        "somd",
        group_key=_somd_key(*dims),
        extra={"topping_inches": dims[0], "deck_inches": dims[1]},
    )


# keyword -> (subsection, tag); all are 8" slabs
_EIGHT_INCH_SLABS = (
    ('cast in place slab 8"', "CIP Slabs", "cast_in_place_slab_8"),
    ('cip slab 8"', "CIP Slabs", "cip_slab_var"),
    ('roof slab 8"', "CIP Slabs", "roof_slab_8"),
    ('balcony slab 8"', "Balcony slab", "balcony"),
    ('terrace slab 8"', "Terrace slab", "terrace"),
)


def _eight_inch_slab(text: str, lower: str) -> ParsedItem | None:
    for keyword, subsection, tag in _EIGHT_INCH_SLABS:
        if keyword in lower:
            return _item(subsection, tag, height_formula="8/12")
    return None


_NOT_PLAIN_SLAB = ("slab step", "patch slab", "balcony slab", "terrace slab", "topping slab", "overpour slab", "slab on ")


def _plain_slab(text: str, lower: str) -> ParsedItem | None:
    if not _LEADING_SLAB_RE.search(lower) or any(k in lower for k in _NOT_PLAIN_SLAB):
        return None
    m = _SLAB_THICK_RE.search(text.strip())
    if not m:
        return None
    height = _thickness(m.group(1))
    tag = "slab_8" if abs(height - 8 / 12) < 0.001 else "slab_var"
    return _item("CIP Slabs", tag, height=height)


def _slab_8(text: str, lower: str) -> ParsedItem | None:
    if 'slab 8"' in lower:
        return _item("CIP Slabs", "slab_8", height_formula="8/12")
    return None


def _patch_slab(text: str, lower: str) -> ParsedItem | None:
    if "patch slab" in lower:
        return _item("Patch slab", "patch", height=0.5)
    return None


def _topping_slab(text: str, lower: str) -> ParsedItem | None:
    if "topping slab" not in lower and "overpour slab" not in lower:
        return None
    if not any(k in lower for k in ("thick", "thk", '"')):
        return None
    m = _INCHES_THICK_RE.search(text) or _INCHES_QUOTED_RE.search(text)
    inches = float(m.group(1)) if m else 2
    return _item("Topping slab", "topping_slab", height=inches / 12)


def _thermal_break(text: str, lower: str) -> ParsedItem | None:
    if "thermal break" in lower:
        return _item("Thermal break", "thermal_break", qty=parse_thermal_break_qty(text))
    return None


def _built_up_knee_wall(text: str, lower: str) -> ParsedItem | None:
    if "knee wall" not in lower or not any(k in lower for k in ("builtup", "built up")):
        return None
    pair = _bracket_pair(text)
    if pair is None:
        return None
    return _item("Built-up slab", "built_up_knee_wall", width=pair[0], height=pair[1])


_HANGER_WIDE_RE = _lwh_wide_re("concrete hanger")


def _lwh(subsection: str, tag: str, keyword: str, wide: re.Pattern[str]) -> Rule:
    def rule(text: str, lower: str) -> ParsedItem | None:
        if keyword not in lower:
            return None
        dims = _bracket_triple(text)
        if dims:
            return _item(subsection, tag, length=dims[0], width=dims[1], height=dims[2])
        m = wide.search(text)
        if m:
            return _item(
                subsection,
                tag,
                length=convert_to_feet(m.group(1).strip()),
                width=convert_to_feet(m.group(2).strip()),
                height=_height_token(m.group(3)),
            )
        return None

    return rule


def _built_up_stairs(text: str, lower: str) -> ParsedItem | None:
    if "built up stairs" in lower or ("built up stair" in lower and "@" not in lower):
        # 11" tread, 7" riser, 3'-0" wide
        return _item("Built-up stair", "built_up_stairs", height_formula="7/12", width_formula="11/12", length=3)
    return None


_RAMP_THICK_RE = _thick_re("builtup ramp|built up ramp")


def _builtup_ramp(text: str, lower: str) -> ParsedItem | None:
    if "builtup ramp" not in lower and "built up ramp" not in lower:
        return None
    height = 3 / 12
    m = _RAMP_THICK_RE.search(text)
    if m:
        height = _thickness(m.group(1))
    else:
        m = _INCHES_THICK_RE.search(text) or _INCHES_QUOTED_RE.search(text)
        if m:
            height = float(m.group(1)) / 12
    group_id = _trailing_id(text) or 1
    return _item("Builtup ramps", "builtup_ramp", height=height, extra={"group_id": group_id})


def _ramp_knee_wall(text: str, lower: str) -> ParsedItem | None:
    if "knee wall" not in lower or "x" not in lower or not _TRAILING_ID_AFTER_BRACKET_RE.search(text.strip()):
        return None
    pair = _bracket_pair(text)
    if pair is None:
        return None
    group_id = _trailing_id(text) or 1
    return _item("Builtup ramps", "builtup_ramps_knee_wall", width=pair[0], height=pair[1], extra={"group_id": group_id})


def _raised_knee_wall(text: str, lower: str) -> ParsedItem | None:
    if "knee wall" not in lower or "x" not in lower:
        return None
    pair = _bracket_pair(text)
    if pair is None:
        return None
    return _item("Raised slab", "raised_knee_wall", width=pair[0], height=pair[1])


def _thick_slab(subsection: str, tag: str, prefix: str, default_inches: int, bare_thick_fallback: bool) -> Rule:
    keywords = prefix.split("|")
    thick = _thick_re(prefix)

    def rule(text: str, lower: str) -> ParsedItem | None:
        if not any(k in lower for k in keywords):
            return None
        height = default_inches / 12
        m = thick.search(text)
        if m:
            height = _thickness(m.group(1))
        else:
            fallbacks = [_INCHES_THICK_RE, _INCHES_QUOTED_RE]
            if bare_thick_fallback:
                fallbacks.append(_INCHES_BARE_THICK_RE)
            for pattern in fallbacks:
                m = pattern.search(text)
                if m:
                    height = float(m.group(1)) / 12
                    break
        return _item(subsection, tag, height=height)

    return rule


def _wall_like(subsection: str, tag: str, keywords: tuple[str, ...], wide: re.Pattern[str]) -> Rule:
    def rule(text: str, lower: str) -> ParsedItem | None:
        if not any(k in lower for k in keywords):
            return None
        pair = _bracket_pair(text)
        if pair:
            return _item(subsection, tag, width=pair[0], height=pair[1])
        m = wide.search(text)
        if m:
            return _item(subsection, tag, width=convert_to_feet(m.group(1).strip()), height=_height_token(m.group(2)))
        return None

    return rule


def _columns(text: str, lower: str) -> ParsedItem | None:
    if "as per takeoff count" in lower or ("column" in lower and "count" in lower):
        return _item("Columns", "columns_takeoff")
    return None


_DROP_LWH = _lwh("Drop panel", "drop_panel_bracket", "drop panel", _lwh_wide_re("drop panel"))
_DROP_H_BRACKET_RE = re.compile(r"drop panel\s*\(\s*(?:Height|Ht|H)\s*=\s*([^)]+)\)", re.IGNORECASE)


def _drop_panel(text: str, lower: str) -> ParsedItem | None:
    if "drop panel" not in lower:
        return None
    parsed = _DROP_LWH(text, lower)
    if parsed is not None:
        return parsed
    m = _DROP_H_BRACKET_RE.search(text)
    if m:
        return _item("Drop panel", "drop_panel_h", height=convert_to_feet(m.group(1).strip()))
    if _HAS_HEIGHT_RE.search(text):
        height = _height_from_name(text)
        return _item("Drop panel", "drop_panel_h", height=0.67 if height is None else height)
    return None


def _beams(text: str, lower: str) -> ParsedItem | None:
    if any(k in lower for k in ("secant pile", "core beam", "pile w/")):
        return None
    stripped = text.strip()
    if not _BEAM_MARK_RE.search(stripped) or not _TWO_PART_BEAM_RE.search(text) or _THREE_PART_RE.search(text):
        return None
    # "2B-1 (Upturned) (10"x1'-6")" reads the bracket holding the x
    pair = _bracket_pair(text, _BRACKET_WITH_X_RE)
    if pair is None:
        return None
    return _item("Beams", "beams", width=pair[0], height=pair[1])


_PAD_NO_RE = re.compile(r"(?:concrete pad|pad|housekeeping pad)\s*\(\s*(\d+)\s*\)\s*no\.?", re.IGNORECASE)
_PAD_THICK_RE = re.compile(r"(?:concrete pad|pad|housekeeping pad)\s*([0-9'\"\-]+)\"?\s*(?:thick|thk)?", re.IGNORECASE)
_ANY_INCHES_RE = re.compile(r"(\d+)\s*\"")


def _concrete_pad(text: str, lower: str) -> ParsedItem | None:
    if "pad" not in lower or "transformer" in lower:
        return None
    m = _PAD_NO_RE.search(text)
    if m:
        return _item("Concrete pad", "concrete_pad", height=4 / 12, qty=int(m.group(1)))
    m = _PAD_THICK_RE.search(text) or _ANY_INCHES_RE.search(text)
    if not m:
        return None
    raw = m.group(1).strip()
    height = 4 / 12
    if "'" in raw or '"' in raw:
        height = convert_to_feet(raw)
    elif re.fullmatch(r"\d+(\.\d+)?", raw):
        height = float(raw) / 12
    qty = _BRACKET_QTY_RE.search(text)
    if qty:
        return _item("Concrete pad", "concrete_pad", height=height, qty=int(qty.group(1)))
    return _item("Concrete pad", "concrete_pad_no_bracket", height=height, no_bracket=True)


def _non_shrink_grout(text: str, lower: str) -> ParsedItem | None:
    if "non-shrink grout" in lower or "non shrink grout" in lower:
        return _item("Non-shrink grout", "non_shrink_grout")
    return None


_REPAIRS = (
    ("concrete wall crack repair", "wall"),
    ("slab crack repair", "slab"),
    ("column crack repair", "column"),
)


def _repair_scope(text: str, lower: str) -> ParsedItem | None:
    for keyword, sub_type in _REPAIRS:
        if keyword in lower:
            return _item("Repair scope", "repair_scope", item_sub_type=sub_type)
    return None


_RULES: tuple[Rule, ...] = (
    _slab_step,
    _lw_concrete_fill,
    _infilled_landing,
    _slab_on_metal_deck,
    _eight_inch_slab,
    _plain_slab,
    _slab_8,
    _patch_slab,
    _topping_slab,
    _thermal_break,
    _built_up_knee_wall,
    _lwh("Concrete hanger", "concrete_hanger", "concrete hanger", _HANGER_WIDE_RE),
    _built_up_stairs,
    _builtup_ramp,
    _ramp_knee_wall,
    _raised_knee_wall,
    _thick_slab("Raised slab", "raised_slab", "raised slab", 4, bare_thick_fallback=True),
    _thick_slab("Built-up slab", "built_up_slab", "builtup slab|built up slab", 3, bare_thick_fallback=True),
    _wall_like("Shear Walls", "shear_walls", ("sw ", "shear wall", "concrete wall"), _wide_re("shear wall|sw|concrete wall")),
    _wall_like("Parapet walls", "parapet_walls", ("parapet wall",), _wide_re("parapet wall")),
    _columns,
    _lwh("Concrete post", "concrete_post", "concrete post", _lwh_wide_re("concrete post")),
    _lwh("Concrete encasement", "concrete_encasement", "concrete encasement", _lwh_wide_re("concrete encasement")),
    _drop_panel,
    _beams,
    _wall_like("Curbs", "curbs", ("curb",), _wide_re("concrete curb|curb")),
    _concrete_pad,
    _non_shrink_grout,
    _repair_scope,
)


def parse_superstructure_item(text: object) -> ParsedItem | None:
    if not isinstance(text, str) or not text:
        return None
    lower = text.strip().lower()
    if any(k in lower for k in _EXCLUDED):
        return None
    for rule in _RULES:
        parsed = rule(text, lower)
        if parsed is not None:
            return parsed
        # sump pump pit slabs sit between the 8" slab rules and the plain slab rule
        if rule is _eight_inch_slab and "sump pump pit slab 8" in lower:
            return None
    return None


def unit_for(tag: str, unit: str) -> str:
    """Output unit for a category; pads and repairs keep the row's own unit."""
    if tag in ("concrete_pad", "concrete_pad_no_bracket"):
        return unit or "SQ FT"
    if tag == "repair_scope":
        return unit or "FT"
    return GROUP_UNITS.get(tag, unit or "SQ FT")
