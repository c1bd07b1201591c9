from __future__ import annotations

import re
from dataclasses import dataclass

from docintel.domain.states import ClauseType

BASE_CONFIDENCE: dict[ClauseType, float] = {
    ClauseType.PROHIBITION: 0.85,
    ClauseType.OBLIGATION: 0.8,
    ClauseType.PENALTY: 0.75,
    ClauseType.CONDITION: 0.7,
    ClauseType.RIGHT: 0.7,
    ClauseType.DEFINITION: 0.65,
    ClauseType.OTHER: 0.5,
}

_I = re.IGNORECASE

# Ordered by specificity: the first rule with any hit decides the type.
CLAUSE_RULES: list[tuple[ClauseType, list[re.Pattern[str]]]] = [
    (
        ClauseType.PROHIBITION,
        [
            re.compile(r"\b(shall not|must not|prohibited|forbidden|not allowed|not permitted)\b", _I),
            re.compile(r"\b(no\s+(?:\w+\s+){1,3}shall|cannot|may not|shall never)\b", _I),
            re.compile(r"\b(restricted from|barred from|precluded from)\b", _I),
        ],
    ),
    (
        ClauseType.OBLIGATION,
        [
            re.compile(r"\b(shall|must|required|mandatory|obligated|obliged|duty|responsible for)\b", _I),
            re.compile(r"\b(shall ensure|must provide|required to|mandated to)\b", _I),
        ],
    ),
    (
        ClauseType.PENALTY,
        [
            re.compile(r"\b(penalty|penalties|fine|fines|sanction|sanctions|consequence|consequences|breach|violation|non-compliance)\b", _I),
            re.compile(r"\b(shall pay|liable for|subject to fine|penalty of)\b", _I),
            re.compile(r"(\$[\d,]+|\bUSD\s?[\d,]+|\bpenalty amount\b)", _I),
        ],
    ),
    (
        ClauseType.CONDITION,
        [
            re.compile(r"\b(if|when|provided that|subject to|conditional upon)\b", _I),
            re.compile(r"\b(unless|except|in the event that)\b", _I),
            re.compile(r"\b(only if|as long as|so long as)\b", _I),
        ],
    ),
    (
        ClauseType.RIGHT,
        [
            re.compile(r"\b(may|entitled to|right to|permitted to|allowed to)\b", _I),
            re.compile(r"\b(has the right|shall have the right|may elect)\b", _I),
        ],
    ),
    (
        ClauseType.DEFINITION,
        [
            re.compile(r"\b(means|refers to|defined as|shall mean|for the purposes of)\b", _I),
            re.compile(r"\b(hereinafter|herein|hereafter referred to)\b", _I),
        ],
    ),
]


@dataclass(frozen=True)
class ClauseClassification:
    type: ClauseType
    confidence: float
    indicators: tuple[str, ...] = ()

    @property
    def is_clause(self) -> bool:
        return self.type is not ClauseType.OTHER


def classify_clause(unit: str) -> ClauseClassification:
    """Assign a clause type from lexical signals alone."""
    for clause_type, patterns in CLAUSE_RULES:
        hits = [m.group(0).lower() for p in patterns for m in [p.search(unit)] if m]
        if hits:
            return ClauseClassification(
                type=clause_type,
                confidence=BASE_CONFIDENCE[clause_type],
                indicators=tuple(dict.fromkeys(hits)),
            )
    return ClauseClassification(type=ClauseType.OTHER, confidence=BASE_CONFIDENCE[ClauseType.OTHER])
