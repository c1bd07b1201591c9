from __future__ import annotations

import re

_SENTENCE_BOUNDARY = re.compile(r"[.!?]\s+")


def segment(text: str, min_length: int = 20) -> tuple[str, ...]:
    """Split extracted text into candidate sentence units.

    Whitespace inside a unit is collapsed, terminal punctuation is dropped and
    units no longer than ``min_length`` characters are discarded.
    """
    units: list[str] = []
    for raw in _SENTENCE_BOUNDARY.split(text or ""):
        unit = " ".join(raw.split()).rstrip(".!?")
        if len(unit) > min_length:
            units.append(unit)
    return tuple(units)


def is_clause_candidate(unit: str, min_clause_length: int = 30) -> bool:
    return len(unit) > min_clause_length
