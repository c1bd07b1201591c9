from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime, timezone
from typing import Any
from uuid import uuid4

from docintel.domain.states import ClauseType, DocumentType, ProcessingStatus, ReviewStatus


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid4())


@dataclass
class Document:
    organization_id: str
    file_name: str
    file_path: str
    file_hash: str
    file_type: str
    uploaded_by: str
    document_type: DocumentType | None = None
    version_number: int = 1
    parent_document_id: str | None = None
    processing_status: ProcessingStatus = ProcessingStatus.PENDING
    processing_error: str | None = None
    id: str = field(default_factory=_new_id)
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)

    def to_row(self) -> dict[str, Any]:
        row = asdict(self)
        row["document_type"] = self.document_type.value if self.document_type else None
        row["processing_status"] = self.processing_status.value
        return row

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Document":
        known = {f.name for f in fields(cls)}
        data = {k: v for k, v in row.items() if k in known}
        dtype = data.get("document_type")
        data["document_type"] = DocumentType(dtype) if dtype else None
        data["processing_status"] = ProcessingStatus(data.get("processing_status") or "pending")
        data["version_number"] = int(data.get("version_number") or 1)
        return cls(**data)


@dataclass(frozen=True)
class ExtractedActor:
    actor: str
    action: str
    confidence: float
    role: str | None = None


@dataclass(frozen=True)
class ExtractedDeadline:
    text: str
    action: str
    deadline: date | None
    relative: str | None
    confidence: float


@dataclass(frozen=True)
class ExtractedDependency:
    clause_text: str
    depends_on: str
    condition: str
    confidence: float


@dataclass(frozen=True)
class AmbiguityFlag:
    text: str
    vague_terms: list[str]
    recommendation: str
    confidence: float


@dataclass
class ExtractedClause:
    document_id: str
    clause_text: str
    clause_number: str
    clause_type: ClauseType | None
    confidence_score: float
    requires_review: bool
    review_status: ReviewStatus = ReviewStatus.PENDING
    reviewed_by: str | None = None
    reviewed_at: str | None = None
    id: str = field(default_factory=_new_id)
    created_at: str = field(default_factory=utc_now)
    # Run-scoped enrichment, never persisted.
    actors: list[ExtractedActor] = field(default_factory=list)
    deadlines: list[ExtractedDeadline] = field(default_factory=list)
    dependencies: list[ExtractedDependency] = field(default_factory=list)
    ambiguities: list[AmbiguityFlag] = field(default_factory=list)

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "document_id": self.document_id,
            "clause_text": self.clause_text,
            "clause_number": self.clause_number,
            "clause_type": self.clause_type.value if self.clause_type else None,
            "confidence_score": self.confidence_score,
            "requires_review": self.requires_review,
            "reviewed_by": self.reviewed_by,
            "reviewed_at": self.reviewed_at,
            "review_status": self.review_status.value,
            "created_at": self.created_at,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ExtractedClause":
        ctype = row.get("clause_type")
        return cls(
            id=str(row["id"]),
            document_id=str(row["document_id"]),
            clause_text=str(row.get("clause_text") or ""),
            clause_number=str(row.get("clause_number") or ""),
            clause_type=ClauseType(ctype) if ctype else None,
            confidence_score=float(row.get("confidence_score") or 0.0),
            requires_review=bool(row.get("requires_review")),
            reviewed_by=row.get("reviewed_by"),
            reviewed_at=row.get("reviewed_at"),
            review_status=ReviewStatus(row.get("review_status") or "pending"),
            created_at=str(row.get("created_at") or utc_now()),
        )


@dataclass
class ComplianceObligation:
    document_id: str
    clause_id: str
    obligation_text: str
    extracted_action: str
    owner_role: str
    deadline_date: str | None = None
    status: str = "pending"
    evidence_required: bool = False
    id: str = field(default_factory=_new_id)
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)

    def to_row(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ExtractedRisk:
    title: str
    description: str
    threat: str
    vulnerability: str
    impact_description: str
    category: str
    likelihood: int
    impact: int
    source_clause: str
    confidence: float
    requires_review: bool


@dataclass
class ProcessingResult:
    document: Document
    extracted_risks: list[ExtractedRisk]
    extracted_clauses: list[ExtractedClause]
    created_risk_ids: list[str]
    review_queue_count: int

    def summary(self) -> dict[str, Any]:
        return {
            "document_id": self.document.id,
            "processing_status": self.document.processing_status.value,
            "extracted_risks_count": len(self.extracted_risks),
            "extracted_clauses_count": len(self.extracted_clauses),
            "created_risks": list(self.created_risk_ids),
            "review_queue_count": self.review_queue_count,
        }
