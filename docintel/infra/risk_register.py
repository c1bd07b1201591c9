from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Protocol
from uuid import uuid4

import requests
from pydantic import ValidationError

from docintel.config import Settings, settings as default_settings
from docintel.contracts.payloads import RiskPayload

logger = logging.getLogger(__name__)


class RiskRegisterError(RuntimeError):
    pass


class RiskRegister(Protocol):
    def create_risk(self, organization_id: str, user_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        ...


class InMemoryRiskRegister:
    """Local register used in dev and tests.

    Rejects payloads that fail ``RiskPayload`` validation the same way the
    hosted register does. A repeated ``external_ref`` within an organization
    returns the risk already created for it.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self.risks: dict[str, dict[str, Any]] = {}

    def create_risk(self, organization_id: str, user_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            validated = RiskPayload.model_validate(payload)
        except ValidationError as exc:
            raise RiskRegisterError(f"Invalid risk payload: {exc}") from exc

        with self._lock:
            if validated.external_ref:
                for existing in self.risks.values():
                    if (
                        existing["organization_id"] == organization_id
                        and existing["external_ref"] == validated.external_ref
                    ):
                        return dict(existing)
            risk_id = f"RISK-{uuid4().hex[:8].upper()}"
            row = {
                "id": risk_id,
                "organization_id": organization_id,
                "created_by": user_id,
                **validated.model_dump(),
            }
            self.risks[risk_id] = row
            return dict(row)

    def list_risks(self, organization_id: str) -> list[dict[str, Any]]:
        with self._lock:
            return [dict(r) for r in self.risks.values() if r["organization_id"] == organization_id]


class HTTPRiskRegister:
    """Risk Register over HTTP.

    Expected endpoint:
    POST {RISK_REGISTER_BASE_URL}/organizations/{organization_id}/risks
    payload: RiskPayload fields
    response: {"id": ...}

    ``external_ref`` is also sent as ``Idempotency-Key`` so a retried call
    resolves to the risk created the first time.
    """

    def __init__(self, base_url: str, token: str = "", timeout_seconds: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout_seconds = timeout_seconds

    def _headers(self, user_id: str, idempotency_key: str | None = None) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "X-User-ID": user_id}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key
        return headers

    def create_risk(self, organization_id: str, user_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        body = RiskPayload.model_validate(payload).model_dump()
        try:
            res = requests.post(
                f"{self.base_url}/organizations/{organization_id}/risks",
                headers=self._headers(user_id, body.get("external_ref")),
                json=body,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise RiskRegisterError(f"Risk register request failed: {exc}") from exc

        if res.status_code >= 400:
            raise RiskRegisterError(f"Risk register rejected risk ({res.status_code}): {res.text[:300]}")
        data = res.json() or {}
        if not isinstance(data, dict) or not data.get("id"):
            raise RiskRegisterError("Risk register response missing id")
        return data


def build_risk_register(cfg: Settings | None = None) -> RiskRegister:
    cfg = cfg or default_settings
    if cfg.risk_register_base_url:
        return HTTPRiskRegister(
            cfg.risk_register_base_url,
            token=cfg.risk_register_token,
            timeout_seconds=cfg.risk_register_timeout_seconds,
        )
    logger.info("RISK_REGISTER_BASE_URL not set; using in-memory risk register")
    return InMemoryRiskRegister()
