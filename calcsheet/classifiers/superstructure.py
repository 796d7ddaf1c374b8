from __future__ import annotations

from ..parsers.superstructure import parse_superstructure_item
from .base import classifier

__all__ = [
    "is_superstructure_item",
]


@classifier
def is_superstructure_item(text: str) -> bool:
    # typing and classification share one ordered rule list
    return parse_superstructure_item(text) is not None
