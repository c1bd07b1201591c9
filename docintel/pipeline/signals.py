"""Per-clause signal extractors.

Each extractor runs independently over one clause unit and returns zero or
more matches. Finding nothing is the common case and never an error.
"""
from __future__ import annotations

import re
from datetime import date

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from docintel.domain.models import AmbiguityFlag, ExtractedActor, ExtractedDeadline, ExtractedDependency

_I = re.IGNORECASE

ACTION_UNDETERMINED = "Action to be determined"

ACTOR_PATTERNS: list[tuple[re.Pattern[str], str, float]] = [
    (re.compile(r"\b(contractor|vendor|supplier|service provider)s?\b", _I), "Contractor", 0.8),
    (re.compile(r"\b(client|customer|buyer|purchaser)s?\b", _I), "Client", 0.8),
    (re.compile(r"\b(regulator|regulatory|authority|agency)\b", _I), "Regulator", 0.75),
    (re.compile(r"\b(party|parties|entity|entities)\b", _I), "Party", 0.6),
]

ACTION_PATTERN = re.compile(
    r"\b(?:shall ensure|must provide|must maintain|must implement|shall|must|required to|obligated to)"
    r"\s+(?:that\s+)?([^.;:]{5,})",
    _I,
)

MAX_ACTION_LENGTH = 120

_UNIT = r"(day|week|month|year)s?"
RELATIVE_DEADLINE = re.compile(
    r"\b(within|no later than|by)\s+(?:[a-z-]+\s+)?\(?(\d+)\)?\s+(?:(?:business|calendar|working)\s+)?" + _UNIT
    + r"\b(?:\s+(?:of|from|after)\s+(?P<ref>[^.,;]{3,40}?)(?=[.,;]|\s+(?:or|and|unless|if)\b|$))?",
    _I,
)
ABSOLUTE_DEADLINE = re.compile(
    r"\b(?i:on or before|by|no later than)\s+([A-Z][a-z]+\s+\d{1,2},?\s+\d{4}|\d{4}-\d{2}-\d{2})"
)

DEPENDENCY_PATTERNS: list[tuple[re.Pattern[str], str, float]] = [
    (
        re.compile(
            r"\b(?:this|the foregoing|the above)\s+(?:applies|is subject to|is conditional upon)\s+"
            r"(?:only if|if|provided that)\s+(?:section|clause|paragraph)\s+(\d+(?:\.\d+)*)",
            _I,
        ),
        "conditional",
        0.8,
    ),
    (
        re.compile(
            r"\b(?:subject to|in accordance with|as per|pursuant to|as defined in)\s+"
            r"(?:section|clause|paragraph|article)\s+(\d+(?:\.\d+)*)",
            _I,
        ),
        "reference",
        0.75,
    ),
    (
        re.compile(
            r"\b(?:unless|except)\s+(?:as\s+)?(?:section|clause|paragraph)\s+(\d+(?:\.\d+)*)\s+"
            r"(?:provides|states|specifies|otherwise provides)",
            _I,
        ),
        "exception",
        0.7,
    ),
]

VAGUE_TERMS: list[tuple[str, str]] = [
    ("adequate", 'Specify measurable criteria for "adequate"'),
    ("reasonable", 'Define what constitutes "reasonable" in this context'),
    ("sufficient", 'Specify minimum requirements for "sufficient"'),
    ("appropriate", 'Clarify what is considered "appropriate"'),
    ("timely", 'Define specific timeframes for "timely"'),
    ("best efforts", 'Specify concrete actions required, not just "best efforts"'),
    ("as needed", "Define criteria for when action is needed"),
    ("when necessary", "Specify conditions that make action necessary"),
    ("material", 'Define what constitutes "material" impact or change'),
    ("significant", 'Specify thresholds for "significant" events'),
]


def _first_action(unit: str) -> str | None:
    m = ACTION_PATTERN.search(unit)
    if not m:
        return None
    action = m.group(1).strip()
    if len(action) > MAX_ACTION_LENGTH:
        action = action[:MAX_ACTION_LENGTH].rsplit(" ", 1)[0]
    return action


def extract_actors(unit: str) -> list[ExtractedActor]:
    actors: list[ExtractedActor] = []
    action = _first_action(unit)
    for pattern, role, base in ACTOR_PATTERNS:
        m = pattern.search(unit)
        if not m:
            continue
        if action:
            actors.append(ExtractedActor(actor=m.group(0), role=role, action=action, confidence=round(base * 0.8, 3)))
        else:
            actors.append(ExtractedActor(actor=m.group(0), role=role, action=ACTION_UNDETERMINED, confidence=round(base * 0.6, 3)))
    return actors


def _offset(amount: int, unit: str) -> relativedelta:
    unit = unit.lower()
    if unit.startswith("week"):
        return relativedelta(weeks=amount)
    if unit.startswith("month"):
        return relativedelta(months=amount)
    if unit.startswith("year"):
        return relativedelta(years=amount)
    return relativedelta(days=amount)


def extract_deadlines(unit: str, base_date: date | None = None) -> list[ExtractedDeadline]:
    base = base_date or date.today()
    deadlines: list[ExtractedDeadline] = []

    for m in RELATIVE_DEADLINE.finditer(unit):
        amount = int(m.group(2))
        unit_name = m.group(3).lower() + ("s" if amount != 1 else "")
        reference = (m.group("ref") or "").strip() or None
        try:
            due: date | None = base + _offset(amount, unit_name)
        except (ValueError, OverflowError):
            # Past the calendar range; keep the phrase unresolved.
            due = None
        deadlines.append(
            ExtractedDeadline(
                text=m.group(0).strip(),
                action=reference or "immediate",
                deadline=due,
                relative=f"{amount} {unit_name} from {reference or 'now'}",
                confidence=0.8 if reference else 0.75,
            )
        )

    for m in ABSOLUTE_DEADLINE.finditer(unit):
        raw = m.group(1)
        try:
            resolved: date | None = date_parser.parse(raw).date()
        except (ValueError, OverflowError):
            resolved = None
        deadlines.append(
            ExtractedDeadline(
                text=m.group(0).strip(),
                action="specified date",
                deadline=resolved,
                relative=raw,
                confidence=0.9,
            )
        )

    return deadlines


def extract_dependencies(unit: str) -> list[ExtractedDependency]:
    dependencies: list[ExtractedDependency] = []
    for pattern, condition, confidence in DEPENDENCY_PATTERNS:
        for m in pattern.finditer(unit):
            dependencies.append(
                ExtractedDependency(
                    clause_text=m.group(0),
                    depends_on=m.group(1) or "unknown",
                    condition=condition,
                    confidence=confidence,
                )
            )
    return dependencies


def detect_ambiguity(unit: str) -> list[AmbiguityFlag]:
    flags: list[AmbiguityFlag] = []
    for term, recommendation in VAGUE_TERMS:
        escaped = re.escape(term)
        if not re.search(rf"\b{escaped}\b", unit, _I):
            continue
        ctx = re.search(rf".{{0,50}}\b{escaped}\b.{{0,50}}", unit, _I)
        flags.append(
            AmbiguityFlag(
                text=ctx.group(0) if ctx else unit[:100],
                vague_terms=[term],
                recommendation=recommendation,
                confidence=0.9,
            )
        )
    return flags
