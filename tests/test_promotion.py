from __future__ import annotations

from dataclasses import replace
from typing import Any

import pytest

from docintel.config import Settings
from docintel.domain.errors import PromotionFailed
from docintel.domain.models import ExtractedRisk
from docintel.domain.states import RiskCategory
from docintel.infra.risk_register import InMemoryRiskRegister
from docintel.services.promotion import PromotionGate, map_category, promotion_key


def _risk(**overrides: Any) -> ExtractedRisk:
    values: dict[str, Any] = {
        "title": "Late filing results in a sanction",
        "description": "Late filing results in a sanction",
        "threat": "Threat identified in document",
        "vulnerability": "Vulnerability identified in document",
        "impact_description": "Financial and compliance impact",
        "category": "Compliance",
        "likelihood": 3,
        "impact": 3,
        "source_clause": "Late filing results in a sanction",
        "confidence": 0.9,
        "requires_review": False,
    }
    values.update(overrides)
    return ExtractedRisk(**values)


@pytest.mark.parametrize(
    ("category", "expected"),
    [
        ("Compliance", RiskCategory.COMPLIANCE),
        ("Privacy", RiskCategory.CONFIDENTIALITY),
        ("Availability", RiskCategory.AVAILABILITY),
        ("Revenue leakage", RiskCategory.FINANCIAL),
        ("Brand damage", RiskCategory.REPUTATION),
        ("Security", RiskCategory.COMPLIANCE),
    ],
)
def test_map_category(category: str, expected: RiskCategory) -> None:
    assert map_category(category) is expected


def test_should_promote_threshold() -> None:
    gate = PromotionGate(InMemoryRiskRegister(), Settings())
    assert gate.should_promote(_risk(confidence=0.7))
    assert not gate.should_promote(_risk(confidence=0.69))
    assert not gate.should_promote(_risk(confidence=0.95, requires_review=True))


def test_promote_builds_register_payload() -> None:
    register = InMemoryRiskRegister()
    gate = PromotionGate(register, replace(Settings(), default_owner_role="Compliance Lead"))
    risk_id = gate.promote(_risk(category="Privacy"), "org-1", "user-1")
    stored = register.risks[risk_id]
    assert stored["category"] == "confidentiality"
    assert stored["impact_type"] == "Compliance"
    assert stored["owner_role"] == "Compliance Lead"
    assert stored["response_type"] == "mitigate"
    assert stored["created_by"] == "user-1"


def test_promote_wraps_register_rejection() -> None:
    gate = PromotionGate(InMemoryRiskRegister(), Settings())
    with pytest.raises(PromotionFailed) as excinfo:
        gate.promote(_risk(likelihood=9), "org-1", "user-1")
    assert excinfo.value.cause is not None


def test_promote_with_document_is_idempotent() -> None:
    register = InMemoryRiskRegister()
    gate = PromotionGate(register, Settings())
    risk = _risk()

    first = gate.promote(risk, "org-1", "user-1", "doc-1")
    again = gate.promote(risk, "org-1", "user-1", "doc-1")
    other_doc = gate.promote(risk, "org-1", "user-1", "doc-2")

    assert first == again
    assert other_doc != first
    assert register.risks[first]["external_ref"] == promotion_key("doc-1", risk)
    assert len(register.risks) == 2


def test_payload_without_document_has_no_key() -> None:
    gate = PromotionGate(InMemoryRiskRegister(), Settings())
    assert gate.build_payload(_risk())["external_ref"] is None
    assert promotion_key("doc-1", _risk()) != promotion_key("doc-1", _risk(description="Other clause text"))
