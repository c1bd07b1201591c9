from __future__ import annotations

import hashlib
from typing import Any

from docintel.config import Settings, settings as default_settings
from docintel.domain.errors import PromotionFailed
from docintel.domain.models import ExtractedRisk
from docintel.domain.states import RiskCategory
from docintel.infra.risk_register import RiskRegister

CATEGORY_KEYWORDS: tuple[tuple[tuple[str, ...], RiskCategory], ...] = (
    (("compliance",), RiskCategory.COMPLIANCE),
    (("privacy", "confidential"), RiskCategory.CONFIDENTIALITY),
    (("availability", "uptime"), RiskCategory.AVAILABILITY),
    (("financial", "revenue"), RiskCategory.FINANCIAL),
    (("reputation", "brand"), RiskCategory.REPUTATION),
)


def promotion_key(document_id: str, risk: ExtractedRisk) -> str:
    """Stable key for one risk candidate of one document across re-runs."""
    digest = hashlib.sha256(f"{document_id}\n{risk.category}\n{risk.description}".encode("utf-8"))
    return digest.hexdigest()[:32]


def map_category(category: str) -> RiskCategory:
    lowered = (category or "").lower()
    for keywords, mapped in CATEGORY_KEYWORDS:
        if any(k in lowered for k in keywords):
            return mapped
    return RiskCategory.COMPLIANCE


class PromotionGate:
    """Turns confident, unflagged risk candidates into Risk Register records."""

    def __init__(self, register: RiskRegister, cfg: Settings | None = None) -> None:
        self.register = register
        self.cfg = cfg or default_settings

    def should_promote(self, risk: ExtractedRisk) -> bool:
        return risk.confidence >= self.cfg.promotion_min_confidence and not risk.requires_review

    def build_payload(self, risk: ExtractedRisk, document_id: str | None = None) -> dict[str, Any]:
        return {
            "title": risk.title,
            "description": risk.description,
            "threat": risk.threat,
            "vulnerability": risk.vulnerability,
            "impact_description": risk.impact_description,
            "impact_type": "Compliance",
            "likelihood": risk.likelihood,
            "impact": risk.impact,
            "category": map_category(risk.category).value,
            "owner_role": self.cfg.default_owner_role,
            "response_type": "mitigate",
            "external_ref": promotion_key(document_id, risk) if document_id else None,
        }

    def promote(
        self,
        risk: ExtractedRisk,
        organization_id: str,
        uploaded_by: str,
        document_id: str | None = None,
    ) -> str:
        payload = self.build_payload(risk, document_id)
        try:
            created = self.register.create_risk(organization_id, uploaded_by, payload)
        except Exception as exc:
            raise PromotionFailed(f"Risk register rejected '{risk.title[:60]}': {exc}", cause=exc) from exc
        risk_id = created.get("id") if isinstance(created, dict) else None
        if not risk_id:
            raise PromotionFailed(f"Risk register returned no id for '{risk.title[:60]}'")
        return str(risk_id)
