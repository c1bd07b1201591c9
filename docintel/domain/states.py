from __future__ import annotations

from enum import Enum


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ClauseType(str, Enum):
    OBLIGATION = "obligation"
    PROHIBITION = "prohibition"
    PENALTY = "penalty"
    CONDITION = "condition"
    RIGHT = "right"
    DEFINITION = "definition"
    OTHER = "other"


class ReviewStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    MODIFIED = "modified"


class DocumentType(str, Enum):
    COMPLIANCE_REPORT = "compliance_report"
    AUDIT_FINDING = "audit_finding"
    CONTRACT = "contract"
    POLICY = "policy"
    RISK_ASSESSMENT = "risk_assessment"
    OTHER = "other"


class RiskCategory(str, Enum):
    CONFIDENTIALITY = "confidentiality"
    INTEGRITY = "integrity"
    AVAILABILITY = "availability"
    COMPLIANCE = "compliance"
    REPUTATION = "reputation"
    FINANCIAL = "financial"


ALLOWED_TRANSITIONS: dict[ProcessingStatus, set[ProcessingStatus]] = {
    ProcessingStatus.PENDING: {ProcessingStatus.PROCESSING, ProcessingStatus.FAILED},
    ProcessingStatus.PROCESSING: {ProcessingStatus.COMPLETED, ProcessingStatus.FAILED},
    # Terminal states may be re-run from scratch.
    ProcessingStatus.COMPLETED: {ProcessingStatus.PROCESSING},
    ProcessingStatus.FAILED: {ProcessingStatus.PROCESSING},
}
