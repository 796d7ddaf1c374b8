from __future__ import annotations

from .base import classifier, contains_any

__all__ = [
    "CIVIL_ESTIMATE",
    "is_civil_demo_text",
    "is_civil_demo_item",
    "demo_sub_subsection",
    "fence_type",
    "pipe_type",
    "sign_type",
    "inlet_type",
]

CIVIL_ESTIMATE = "Civil / Sitework"


@classifier
def is_civil_demo_text(text: str) -> bool:
    """Remove / protect / relocate wording that marks civil demolition without an Estimate."""
    if "(add/alt)" in text and "utility pole" in text:
        return False
    if contains_any(text, "remove existing", "protect existing", "relocate existing"):
        return True
    return text.startswith("remove ") and contains_any(text, "wall", "rail")


def _sub_subsection(lower: str) -> str | None:
    if "asphalt pavement" in lower or ("remove" in lower and "asphalt" in lower and "curb" not in lower):
        return "Demo asphalt"
    if "curb" in lower:
        return "Demo curb"
    if "fence" in lower:
        return "Demo fence"
    if "wall" in lower and "stormwater" not in lower:
        return "Demo wall"
    if contains_any(lower, "pipe", "hdpe", "rcp", "stormwater main"):
        return "Demo pipe"
    if "rail" in lower:
        return "Demo rail"
    if "sign" in lower:
        return "Demo sign"
    if "manhole" in lower:
        return "Demo manhole"
    if "fire hydrant" in lower:
        return "Demo fire hydrant"
    if ("utility pole" in lower or ("pole" in lower and "hydrant" not in lower)) and "(add/alt)" not in lower:
        return "Demo utility pole"
    if "valve" in lower:
        return "Demo valve"
    if "inlet" in lower:
        return "Demo inlet"
    return None


def demo_sub_subsection(text: object) -> str | None:
    if not isinstance(text, str) or not text:
        return None
    return _sub_subsection(text.lower())


@classifier
def is_civil_demo_item(text: str) -> bool:
    return _sub_subsection(text) is not None


def fence_type(text: object) -> str:
    lower = text.lower() if isinstance(text, str) else ""
    if contains_any(lower, "chain link", "vinyl"):
        return "chain_link_vinyl"
    if "wood" in lower:
        return "wood"
    return "other"


def pipe_type(text: object) -> str:
    lower = text.lower() if isinstance(text, str) else ""
    if "remove" in lower and "pipe" in lower:
        return "remove_pipe"
    if "protect" in lower:
        return "protect"
    return "other"


def sign_type(text: object) -> str:
    lower = text.lower() if isinstance(text, str) else ""
    return "row_of_signs" if "row of sign" in lower else "single_sign"


def inlet_type(text: object) -> str:
    lower = text.lower() if isinstance(text, str) else ""
    if "protect" in lower:
        return "protect"
    if "remove" in lower:
        return "remove"
    return "other"
