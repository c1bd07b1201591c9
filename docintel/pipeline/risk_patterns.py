from __future__ import annotations

import json
import re
from dataclasses import dataclass, replace

from docintel.domain.models import ExtractedRisk

_I = re.IGNORECASE

TITLE_MAX_LENGTH = 100
SOURCE_CLAUSE_MAX_LENGTH = 200


@dataclass(frozen=True)
class RiskPattern:
    category: str
    pattern: re.Pattern[str]
    confidence: float


# Checked in this order; the first hit wins.
RISK_PATTERNS: tuple[RiskPattern, ...] = (
    RiskPattern("Security", re.compile(r"risk|threat|vulnerability|exposure|breach|attack|compromise", _I), 0.6),
    RiskPattern("Compliance", re.compile(r"non.?compliance|violation|penalty|fine|sanction", _I), 0.7),
    RiskPattern("Privacy", re.compile(r"data.?loss|data.?breach|privacy.?violation", _I), 0.75),
    RiskPattern("Availability", re.compile(r"system.?failure|outage|downtime|availability", _I), 0.65),
)

THREAT_KEYWORDS = ("attack", "breach", "compromise", "threat", "malicious")
VULNERABILITY_KEYWORDS = ("vulnerability", "weakness", "gap", "deficiency", "exposure")

IMPACT_DESCRIPTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"penalty|fine|sanction", _I), "Financial and compliance impact"),
    (re.compile(r"data.?loss|breach", _I), "Data breach and privacy impact"),
    (re.compile(r"outage|downtime", _I), "Operational disruption"),
)

LIKELIHOOD_LADDER: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"\b(high|likely|probable|frequent)\b", _I), 4),
    (re.compile(r"\b(medium|moderate|possible)\b", _I), 3),
    (re.compile(r"\b(low|unlikely|rare)\b", _I), 2),
)

IMPACT_LADDER: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"\b(critical|severe|major|significant)\b", _I), 5),
    (re.compile(r"\b(high|substantial)\b", _I), 4),
    (re.compile(r"\b(medium|moderate)\b", _I), 3),
    (re.compile(r"\b(low|minor|minimal)\b", _I), 2),
)

DEFAULT_SCORE = 3


def build_risk_patterns(raw_confidences: str = "") -> tuple[RiskPattern, ...]:
    """Apply per-category confidence overrides.

    RISK_PATTERN_CONFIDENCES example:
    {"Security":0.6,"Compliance":0.7,"Privacy":0.75,"Availability":0.65}
    """
    if not raw_confidences:
        return RISK_PATTERNS
    parsed = json.loads(raw_confidences)
    if not isinstance(parsed, dict):
        raise ValueError("RISK_PATTERN_CONFIDENCES must be a JSON object")
    out: list[RiskPattern] = []
    for rp in RISK_PATTERNS:
        if rp.category in parsed:
            value = float(parsed[rp.category])
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Confidence for {rp.category} must be within [0, 1]")
            rp = replace(rp, confidence=value)
        out.append(rp)
    return tuple(out)


def extract_threat(text: str) -> str:
    lowered = text.lower()
    for keyword in THREAT_KEYWORDS:
        if keyword in lowered:
            return f"Potential {keyword} identified in document"
    return "Threat identified in document"


def extract_vulnerability(text: str) -> str:
    lowered = text.lower()
    for keyword in VULNERABILITY_KEYWORDS:
        if keyword in lowered:
            return f"{keyword.capitalize()} identified"
    return "Vulnerability identified in document"


def extract_impact(text: str) -> str:
    for pattern, description in IMPACT_DESCRIPTIONS:
        if pattern.search(text):
            return description
    return "Impact to be assessed"


def _ladder(text: str, ladder: tuple[tuple[re.Pattern[str], int], ...]) -> int:
    for pattern, score in ladder:
        if pattern.search(text):
            return score
    return DEFAULT_SCORE


def estimate_likelihood(text: str) -> int:
    return _ladder(text, LIKELIHOOD_LADDER)


def estimate_impact(text: str) -> int:
    return _ladder(text, IMPACT_LADDER)


def match_risk_indicators(
    unit: str,
    patterns: tuple[RiskPattern, ...] = RISK_PATTERNS,
    review_threshold: float = 0.8,
) -> ExtractedRisk | None:
    for rp in patterns:
        if not rp.pattern.search(unit):
            continue
        return ExtractedRisk(
            title=unit[:TITLE_MAX_LENGTH] or "Risk identified in document",
            description=unit,
            threat=extract_threat(unit),
            vulnerability=extract_vulnerability(unit),
            impact_description=extract_impact(unit),
            category=rp.category,
            likelihood=estimate_likelihood(unit),
            impact=estimate_impact(unit),
            source_clause=unit[:SOURCE_CLAUSE_MAX_LENGTH],
            confidence=rp.confidence,
            requires_review=rp.confidence < review_threshold,
        )
    return None
