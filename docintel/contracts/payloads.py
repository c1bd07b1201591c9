from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RiskPayload(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    threat: str = Field(min_length=1)
    vulnerability: str = Field(min_length=1)
    impact_description: str = Field(min_length=1)
    impact_type: str = "Compliance"
    likelihood: int = Field(ge=1, le=5)
    impact: int = Field(ge=1, le=5)
    category: str = "compliance"
    owner_role: str = "Risk Manager"
    response_type: str = "mitigate"
    external_ref: str | None = Field(default=None, max_length=128)


class ProcessingSummary(BaseModel):
    document_id: str
    processing_status: str
    extracted_risks_count: int
    extracted_clauses_count: int
    created_risks: list[str] = Field(default_factory=list)
    review_queue_count: int


class UploadResponse(BaseModel):
    document: dict[str, Any]
    processing_result: ProcessingSummary
