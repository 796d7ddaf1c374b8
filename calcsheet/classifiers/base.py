from __future__ import annotations

import functools
import re
from collections.abc import Callable

"""Shared helpers for item classifiers.

Every classifier is ``is_x(text) -> bool``. The ``classifier`` decorator
handles the non-string guard and lower-casing so the predicates themselves
only state their keyword rules.
"""

__all__ = [
    "Classifier",
    "classifier",
    "contains_any",
    "matches",
]

Classifier = Callable[[object], bool]


def classifier(fn: Callable[[str], bool]) -> Classifier:
    """Wrap ``fn(lowered_text)`` so that ``None``/non-string input yields False."""

    @functools.wraps(fn)
    def wrapper(text: object) -> bool:
        if not isinstance(text, str) or not text:
            return False
        return bool(fn(text.lower()))

    return wrapper


def contains_any(text: str, *needles: str) -> bool:
    return any(n in text for n in needles)


def matches(pattern: str, text: str) -> bool:
    return re.search(pattern, text, re.IGNORECASE) is not None
