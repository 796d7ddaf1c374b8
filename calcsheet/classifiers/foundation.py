from __future__ import annotations

import re

from .base import classifier, contains_any

"""Foundation classifiers.

Pile families are checked from the most specific notation down; the
miscellaneous pile predicate is whatever mentions a pile and none of the
named families (shoring piles included in the exclusions).
"""

__all__ = [
    "is_drilled_foundation_pile",
    "is_helical_foundation_pile",
    "is_driven_foundation_pile",
    "is_stelcor_pile",
    "is_cfa_pile",
    "is_misc_foundation_pile",
    "is_pile_cap",
    "is_strip_footing",
    "is_isolated_footing",
    "is_pilaster",
    "is_grade_beam",
    "is_tie_beam",
    "is_strap_beam",
    "is_thickened_slab",
    "is_buttress",
    "is_pier",
    "is_corbel",
    "is_linear_wall",
    "is_foundation_wall",
    "is_retaining_wall",
    "is_barrier_wall",
    "is_stem_wall",
    "is_elevator_pit",
    "is_service_elevator_pit",
    "is_detention_tank",
    "is_duplex_sewage_ejector_pit",
    "is_deep_sewage_ejector_pit",
    "is_sump_pump_pit",
    "is_grease_trap",
    "is_house_trap",
    "is_mat_slab",
    "is_mud_slab_foundation",
    "is_sog",
    "is_rog",
    "is_stairs_on_grade",
    "is_electric_conduit",
]

_PIT_PARTS = r"(slab|mat|wall|slope|haunch|sump)"
_DRILLED_WORD_RE = re.compile(r"\b(drilled|structural|foundation|fndt)\s+piles?\b")
_ELEV_RE = re.compile(rf"(elev\.?|elevator)\s+{_PIT_PARTS}")
_SERVICE_ELEV_RE = re.compile(rf"service\s+(elev\.?|elevator)\s+{_PIT_PARTS}")
_DUPLEX_RE = re.compile(rf"duplex\s+sewage\s+ejector\s+{_PIT_PARTS}")
_DEEP_RE = re.compile(r"(?:deep\s+sewage\s+)?ejector\s+(slab|mat|wall|slope|haunch|sump|pit)")
_SUMP_PUMP_RE = re.compile(r"sump\s+pump(?:\s+pit)?\s+(slab|mat|wall|slope|haunch)")
_GREASE_RE = re.compile(r"grease\s+trap(?:\s+pit)?\s+(slab|mat|wall|slope|haunch)")
_HOUSE_RE = re.compile(r"house\s+trap(?:\s+pit)?\s+(slab|mat|wall|slope|haunch)")
_MAT_THICK_RE = re.compile(r"mat(?:[-\s]+slab)?[-\s]*\d+")
_STRAP_RE = re.compile(r"^st\s*\(")

_PIT_WORDS = (
    "elevator pit",
    "elev. pit",
    "service elevator pit",
    "duplex sewage ejector",
    "deep sewage ejector",
    "sump pump pit",
    "grease trap",
    "house trap",
)


@classifier
def is_drilled_foundation_pile(text: str) -> bool:
    if "drilled" in text and contains_any(text, "foundation pile", "cassion pile"):
        return True
    return _DRILLED_WORD_RE.search(text) is not None


@classifier
def is_helical_foundation_pile(text: str) -> bool:
    return "helical" in text and "pile" in text


@classifier
def is_driven_foundation_pile(text: str) -> bool:
    return "driven" in text and "pile" in text


@classifier
def is_stelcor_pile(text: str) -> bool:
    return "stelcor" in text and "drilled displacement pile" in text


@classifier
def is_cfa_pile(text: str) -> bool:
    return "cfa pile" in text


@classifier
def is_misc_foundation_pile(text: str) -> bool:
    if "pile" not in text:
        return False
    named = (
        is_drilled_foundation_pile,
        is_helical_foundation_pile,
        is_driven_foundation_pile,
        is_stelcor_pile,
        is_cfa_pile,
    )
    if any(pred(text) for pred in named):
        return False
    return not contains_any(text, "soldier pile", "secant pile", "tangent pile", "sheet pile")


@classifier
def is_pile_cap(text: str) -> bool:
    return "pile cap" in text or text.startswith("pc-")


@classifier
def is_strip_footing(text: str) -> bool:
    if contains_any(text, "strip footing", "wall footing"):
        return True
    return text.startswith(("sf", "st-", "wf-"))


@classifier
def is_isolated_footing(text: str) -> bool:
    return (text.startswith("f-") or "footing" in text) and "foundation" not in text


@classifier
def is_pilaster(text: str) -> bool:
    return "pilaster" in text


@classifier
def is_grade_beam(text: str) -> bool:
    return "grade beam" in text or text.startswith("gb")


@classifier
def is_tie_beam(text: str) -> bool:
    return "tie beam" in text or text.startswith("tb")


@classifier
def is_strap_beam(text: str) -> bool:
    if text.startswith("st-"):
        return False
    return text.startswith("st ") or _STRAP_RE.match(text) is not None or "strap beam" in text


@classifier
def is_thickened_slab(text: str) -> bool:
    return "thickened slab" in text


@classifier
def is_buttress(text: str) -> bool:
    return "buttress" in text


@classifier
def is_pier(text: str) -> bool:
    return text.startswith("pier") or "concrete pier" in text


@classifier
def is_corbel(text: str) -> bool:
    return "corbel" in text


@classifier
def is_linear_wall(text: str) -> bool:
    return contains_any(text, "linear wall", "liner wall")


@classifier
def is_foundation_wall(text: str) -> bool:
    if "retaining" in text:
        return False
    return "foundation wall" in text or text.startswith("fw") or "fndt wall" in text


@classifier
def is_retaining_wall(text: str) -> bool:
    return "retaining wall" in text or text.startswith("rw")


@classifier
def is_barrier_wall(text: str) -> bool:
    return contains_any(text, "barrier wall", "vehicle barrier")


@classifier
def is_stem_wall(text: str) -> bool:
    return "stem wall" in text


@classifier
def is_elevator_pit(text: str) -> bool:
    if contains_any(text, "sump pit @ service elevator", "service elev.", "service elevator"):
        return False
    if contains_any(text, "elev. pit", "elevator pit", "sump pit"):
        return True
    return _ELEV_RE.search(text) is not None


@classifier
def is_service_elevator_pit(text: str) -> bool:
    if contains_any(text, "sump pit @ service elevator", "service elev. pit", "service elevator pit"):
        return True
    return _SERVICE_ELEV_RE.search(text) is not None


@classifier
def is_detention_tank(text: str) -> bool:
    return "detention tank" in text


@classifier
def is_duplex_sewage_ejector_pit(text: str) -> bool:
    return "duplex sewage ejector pit" in text or _DUPLEX_RE.search(text) is not None


@classifier
def is_deep_sewage_ejector_pit(text: str) -> bool:
    return "deep sewage ejector pit" in text or _DEEP_RE.search(text) is not None


@classifier
def is_sump_pump_pit(text: str) -> bool:
    if "sump pump" in text and "pit" not in text:
        return _SUMP_PUMP_RE.search(text) is not None
    return "sump pump" in text


@classifier
def is_grease_trap(text: str) -> bool:
    return "grease trap" in text or _GREASE_RE.search(text) is not None


@classifier
def is_house_trap(text: str) -> bool:
    return "house trap" in text or _HOUSE_RE.search(text) is not None


@classifier
def is_mat_slab(text: str) -> bool:
    if contains_any(text, *_PIT_WORDS):
        return False
    return "mat" in text and ("haunch" in text or _MAT_THICK_RE.search(text) is not None)


@classifier
def is_mud_slab_foundation(text: str) -> bool:
    return text.strip() in ("mud slab", "mud mat")


@classifier
def is_sog(text: str) -> bool:
    if "demo" in text:
        return False
    return contains_any(text, "sog", "gravel", "geotextile filter fabric", "slab on grade")


@classifier
def is_rog(text: str) -> bool:
    if "demo" in text:
        return False
    return contains_any(text, "rog", "ramp on grade")


@classifier
def is_stairs_on_grade(text: str) -> bool:
    return contains_any(text, "stairs on grade", "landings on grade")


@classifier
def is_electric_conduit(text: str) -> bool:
    return contains_any(
        text,
        "underground electric conduit",
        "electric conduit in slab",
        "trench drain",
        "perforated pipe",
    )
