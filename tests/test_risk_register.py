from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import requests

from docintel.infra.risk_register import HTTPRiskRegister, InMemoryRiskRegister, RiskRegisterError


def _payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "title": "Late filing penalty",
        "description": "Late filing results in a penalty",
        "threat": "Threat identified in document",
        "vulnerability": "Vulnerability identified in document",
        "impact_description": "Financial and compliance impact",
        "impact_type": "Compliance",
        "likelihood": 3,
        "impact": 4,
        "category": "compliance",
        "owner_role": "Risk Manager",
        "response_type": "mitigate",
    }
    payload.update(overrides)
    return payload


def test_in_memory_register_issues_ids() -> None:
    register = InMemoryRiskRegister()
    created = register.create_risk("org-1", "user-1", _payload())
    assert created["id"].startswith("RISK-")
    assert len(created["id"]) == len("RISK-") + 8
    assert register.list_risks("org-1")[0]["created_by"] == "user-1"
    assert register.list_risks("org-2") == []


@pytest.mark.parametrize("overrides", [{"likelihood": 0}, {"impact": 6}, {"title": ""}])
def test_in_memory_register_rejects_invalid_payload(overrides: dict[str, Any]) -> None:
    with pytest.raises(RiskRegisterError):
        InMemoryRiskRegister().create_risk("org-1", "user-1", _payload(**overrides))


def test_http_register_posts_payload() -> None:
    response = MagicMock(status_code=201)
    response.json.return_value = {"id": "RISK-0001"}
    with patch("docintel.infra.risk_register.requests.post", return_value=response) as mock_post:
        register = HTTPRiskRegister("https://risks.example.com/api/", token="secret", timeout_seconds=5)
        created = register.create_risk("org-1", "user-1", _payload())

    assert created == {"id": "RISK-0001"}
    args, kwargs = mock_post.call_args
    assert args[0] == "https://risks.example.com/api/organizations/org-1/risks"
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["timeout"] == 5
    assert kwargs["json"]["likelihood"] == 3


def test_http_register_error_status() -> None:
    response = MagicMock(status_code=422, text="invalid")
    with patch("docintel.infra.risk_register.requests.post", return_value=response):
        with pytest.raises(RiskRegisterError, match="422"):
            HTTPRiskRegister("https://risks.example.com").create_risk("org-1", "user-1", _payload())


def test_http_register_connection_error() -> None:
    with patch(
        "docintel.infra.risk_register.requests.post",
        side_effect=requests.ConnectionError("refused"),
    ):
        with pytest.raises(RiskRegisterError, match="refused"):
            HTTPRiskRegister("https://risks.example.com").create_risk("org-1", "user-1", _payload())


def test_in_memory_register_reuses_external_ref() -> None:
    register = InMemoryRiskRegister()
    first = register.create_risk("org-1", "user-1", _payload(external_ref="ref-1"))
    again = register.create_risk("org-1", "user-2", _payload(external_ref="ref-1"))
    other_org = register.create_risk("org-2", "user-1", _payload(external_ref="ref-1"))

    assert again["id"] == first["id"]
    assert other_org["id"] != first["id"]
    assert len(register.list_risks("org-1")) == 1


def test_http_register_sends_idempotency_key() -> None:
    response = MagicMock(status_code=200)
    response.json.return_value = {"id": "RISK-0001"}
    with patch("docintel.infra.risk_register.requests.post", return_value=response) as mock_post:
        HTTPRiskRegister("https://risks.example.com").create_risk("org-1", "user-1", _payload(external_ref="ref-1"))
        HTTPRiskRegister("https://risks.example.com").create_risk("org-1", "user-1", _payload())

    keyed, plain = mock_post.call_args_list
    assert keyed.kwargs["headers"]["Idempotency-Key"] == "ref-1"
    assert keyed.kwargs["json"]["external_ref"] == "ref-1"
    assert "Idempotency-Key" not in plain.kwargs["headers"]
