from __future__ import annotations

from typing import Any

from docintel.domain.models import utc_now

EVENT_REQUIRED_KEYS: dict[str, set[str]] = {
    "document.received": {"file_name", "file_hash", "version_number"},
    "document.state.changed": {"from_status", "to_status"},
    "document.failed": {"error"},
    "document.completed": {"extracted_clauses_count", "extracted_risks_count", "review_queue_count"},
    "risk.promoted": {"risk_id", "category", "confidence"},
    "risk.promotion.skipped": {"title", "error"},
}

CORE_EVENTS = set(EVENT_REQUIRED_KEYS)


def is_valid_event_type(event_type: str) -> bool:
    return event_type in CORE_EVENTS


def validate_event_payload(event_type: str, payload: dict[str, Any]) -> None:
    if not is_valid_event_type(event_type):
        raise ValueError(f"Unsupported event type: {event_type}")

    missing = sorted(k for k in EVENT_REQUIRED_KEYS[event_type] if k not in payload)
    if missing:
        raise ValueError(f"Event payload missing required keys for {event_type}: {missing}")


def build_event_envelope(
    *,
    event_type: str,
    organization_id: str,
    document_id: str,
    actor_id: str | None,
    payload: dict[str, Any],
    correlation_id: str | None = None,
) -> dict[str, Any]:
    validate_event_payload(event_type, payload)
    return {
        "event_type": event_type,
        "organization_id": organization_id,
        "document_id": document_id,
        "actor_id": actor_id,
        "payload": payload,
        "correlation_id": correlation_id,
        "occurred_at": utc_now(),
    }
