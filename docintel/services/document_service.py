from __future__ import annotations

import logging
from datetime import date
from threading import Lock, Thread
from typing import Any, Callable, Hashable, TypeVar
from weakref import WeakValueDictionary

from docintel.config import Settings, settings as default_settings
from docintel.domain.errors import DocumentNotFound, PromotionFailed, StageTimeout
from docintel.domain.models import Document, ExtractedClause, ProcessingResult
from docintel.domain.state_machine import StateMachine
from docintel.domain.states import DocumentType, ProcessingStatus
from docintel.events.bus import EventBus, InMemoryEventBus
from docintel.events.contracts import build_event_envelope
from docintel.infra.content_store import LocalContentStore, sha256_bytes
from docintel.infra.repositories import DocumentRepository, build_repository
from docintel.infra.risk_register import RiskRegister, build_risk_register
from docintel.infra.text_extractor import DocumentTextExtractor, TextExtractor
from docintel.pipeline.nodes import analyze_text
from docintel.services.promotion import PromotionGate

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DocumentService:
    """Ingest, process and query documents for one deployment.

    Collaborators are injected; anything left as ``None`` is built from
    settings. ``process`` is serialized per document and ``ingest`` per
    (organization, content hash); unrelated documents run in parallel.
    """

    def __init__(
        self,
        repo: DocumentRepository | None = None,
        extractor: TextExtractor | None = None,
        content_store: LocalContentStore | None = None,
        risk_register: RiskRegister | None = None,
        event_bus: EventBus | None = None,
        cfg: Settings | None = None,
    ) -> None:
        self.cfg = cfg or default_settings
        self.using_supabase = False
        self.persistence_reason: str | None = None
        if repo is None:
            repo, self.using_supabase, self.persistence_reason = build_repository(self.cfg)
            if self.persistence_reason:
                logger.warning(self.persistence_reason)
        self.repo = repo
        self.extractor = extractor or DocumentTextExtractor(max_pdf_pages=self.cfg.max_pdf_pages)
        self.content_store = content_store or LocalContentStore(self.cfg.upload_dir)
        self.promotion = PromotionGate(risk_register or build_risk_register(self.cfg), self.cfg)
        self.event_bus = event_bus or InMemoryEventBus()
        self.sm = StateMachine()
        self._locks_guard = Lock()
        # Entries live only while some caller holds or waits on the lock.
        self._document_locks: WeakValueDictionary[str, Lock] = WeakValueDictionary()
        self._ingest_locks: WeakValueDictionary[Hashable, Lock] = WeakValueDictionary()

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ingest(
        self,
        *,
        organization_id: str,
        file_name: str,
        file_bytes: bytes,
        file_type: str,
        uploaded_by: str,
        document_type: DocumentType | str | None = None,
    ) -> Document:
        dtype = DocumentType(document_type) if document_type else None
        file_hash = sha256_bytes(file_bytes)

        with self._lock_for(self._ingest_locks, (organization_id, file_hash)):
            parent = self.repo.find_latest_by_hash(organization_id, file_hash)
            doc = Document(
                organization_id=organization_id,
                file_name=file_name,
                file_path="",
                file_hash=file_hash,
                file_type=file_type,
                uploaded_by=uploaded_by,
                document_type=dtype,
            )
            if parent:
                doc.parent_document_id = str(parent["id"])
                doc.version_number = int(parent.get("version_number") or 1) + 1

            doc.file_path = self.content_store.write(doc.id, file_name, file_bytes)
            try:
                row = self.repo.create_document(doc.to_row())
            except Exception:
                self.content_store.delete(doc.file_path)
                raise

        doc = Document.from_row(row)
        logger.info(
            "Ingested document %s (%s) org=%s version=%d",
            doc.id,
            file_name,
            organization_id,
            doc.version_number,
        )
        self._event(
            doc,
            uploaded_by,
            "document.received",
            {"file_name": file_name, "file_hash": file_hash, "version_number": doc.version_number},
        )
        return doc

    def upload(
        self,
        *,
        organization_id: str,
        file_name: str,
        file_bytes: bytes,
        file_type: str,
        uploaded_by: str,
        document_type: DocumentType | str | None = None,
    ) -> Document:
        doc = self.ingest(
            organization_id=organization_id,
            file_name=file_name,
            file_bytes=file_bytes,
            file_type=file_type,
            uploaded_by=uploaded_by,
            document_type=document_type,
        )
        return self.process(doc.id).document

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def process(self, document_id: str, base_date: date | None = None) -> ProcessingResult:
        with self._lock_for(self._document_locks, document_id):
            doc = self.get_document(document_id)
            doc = self._transition(doc, ProcessingStatus.PROCESSING, {"processing_error": None})
            try:
                return self._run(doc, base_date)
            except Exception as exc:
                logger.exception("Processing failed for document %s", doc.id)
                self._record_failure(doc, exc)
                raise

    def _run(self, doc: Document, base_date: date | None) -> ProcessingResult:
        text = self._run_stage(
            "text_extraction",
            self.cfg.text_extraction_timeout_seconds,
            self.extractor.extract_text,
            doc.file_path,
        )
        analysis = analyze_text(text, doc.id, cfg=self.cfg, base_date=base_date)
        clauses = analysis["clauses"]
        obligations = analysis["obligations"]
        risks = analysis["risks"]

        self.repo.replace_extractions(
            doc.id,
            [c.to_row() for c in clauses],
            [o.to_row() for o in obligations],
        )

        created_risk_ids: list[str] = []
        for risk in risks:
            if not self.promotion.should_promote(risk):
                continue
            try:
                risk_id = self._run_stage(
                    "risk_promotion",
                    self.cfg.risk_register_timeout_seconds,
                    self.promotion.promote,
                    risk,
                    doc.organization_id,
                    doc.uploaded_by,
                    doc.id,
                )
            except PromotionFailed as exc:
                logger.warning("Skipping risk promotion for document %s: %s", doc.id, exc)
                self._event(doc, doc.uploaded_by, "risk.promotion.skipped", {"title": risk.title, "error": str(exc)})
                continue
            created_risk_ids.append(risk_id)
            self._event(
                doc,
                doc.uploaded_by,
                "risk.promoted",
                {"risk_id": risk_id, "category": risk.category, "confidence": risk.confidence},
            )

        doc = self._transition(doc, ProcessingStatus.COMPLETED)
        review_queue_count = sum(1 for r in risks if r.requires_review) + sum(1 for c in clauses if c.requires_review)
        result = ProcessingResult(
            document=doc,
            extracted_risks=risks,
            extracted_clauses=clauses,
            created_risk_ids=created_risk_ids,
            review_queue_count=review_queue_count,
        )
        logger.info(
            "Processed document %s: clauses=%d obligations=%d risks=%d promoted=%d review=%d durations_ms=%s",
            doc.id,
            len(clauses),
            len(obligations),
            len(risks),
            len(created_risk_ids),
            review_queue_count,
            analysis["stage_durations_ms"],
        )
        self._event(
            doc,
            doc.uploaded_by,
            "document.completed",
            {
                "extracted_clauses_count": len(clauses),
                "extracted_risks_count": len(risks),
                "review_queue_count": review_queue_count,
                "created_risks": created_risk_ids,
            },
        )
        return result

    def _run_stage(self, stage: str, timeout_seconds: float, fn: Callable[..., T], *args: Any) -> T:
        # One daemon thread per call: an abandoned call can never hold a slot
        # another document needs.
        outcome: dict[str, Any] = {}

        def target() -> None:
            try:
                outcome["value"] = fn(*args)
            except BaseException as exc:
                outcome["error"] = exc

        worker = Thread(target=target, name=f"docintel-{stage}", daemon=True)
        worker.start()
        worker.join(timeout_seconds if timeout_seconds > 0 else None)
        if worker.is_alive():
            logger.warning("Stage %s abandoned after %gs", stage, timeout_seconds)
            raise StageTimeout(stage, float(timeout_seconds))
        if "error" in outcome:
            raise outcome["error"]
        return outcome["value"]

    def _transition(
        self,
        doc: Document,
        target: ProcessingStatus,
        extra: dict[str, Any] | None = None,
    ) -> Document:
        previous = doc.processing_status
        self.sm.transition(previous, target)
        row = self.repo.update_document(doc.id, {"processing_status": target.value, **(extra or {})})
        logger.info("Document %s: %s -> %s", doc.id, previous.value, target.value)
        self._event(
            doc,
            doc.uploaded_by,
            "document.state.changed",
            {"from_status": previous.value, "to_status": target.value},
        )
        return Document.from_row(row)

    def _record_failure(self, doc: Document, exc: BaseException) -> None:
        # The caller re-raises exc; a failure here must not mask it.
        try:
            self._transition(doc, ProcessingStatus.FAILED, {"processing_error": str(exc)})
            self._event(doc, doc.uploaded_by, "document.failed", {"error": str(exc)})
        except Exception:
            logger.exception("Could not record failure for document %s", doc.id)

    def _event(self, doc: Document, actor_id: str | None, event_type: str, payload: dict[str, Any]) -> None:
        envelope = build_event_envelope(
            event_type=event_type,
            organization_id=doc.organization_id,
            document_id=doc.id,
            actor_id=actor_id,
            payload=payload,
        )
        # Events describe state that is already stored; a subscriber error
        # must not undo or fail it.
        try:
            self.event_bus.publish(event_type, envelope)
        except Exception:
            logger.exception("Event subscriber failed on %s for document %s", event_type, doc.id)

    def _lock_for(self, registry: WeakValueDictionary[Any, Lock], key: Hashable) -> Lock:
        with self._locks_guard:
            lock = registry.get(key)
            if lock is None:
                lock = registry[key] = Lock()
            return lock

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_document(self, document_id: str) -> Document:
        row = self.repo.get_document(document_id)
        if not row:
            raise DocumentNotFound(document_id)
        return Document.from_row(row)

    def list_documents(self, organization_id: str) -> list[Document]:
        return [Document.from_row(r) for r in self.repo.list_documents(organization_id)]

    def list_failed_documents(self, organization_id: str) -> list[Document]:
        return [d for d in self.list_documents(organization_id) if d.processing_status is ProcessingStatus.FAILED]

    def list_clauses(self, document_id: str) -> list[ExtractedClause]:
        self.get_document(document_id)
        return [ExtractedClause.from_row(r) for r in self.repo.list_clauses(document_id)]

    def list_obligations(self, document_id: str) -> list[dict[str, Any]]:
        self.get_document(document_id)
        return self.repo.list_obligations(document_id)

    def list_pending_review(self, organization_id: str) -> list[ExtractedClause]:
        return [ExtractedClause.from_row(r) for r in self.repo.list_pending_review(organization_id)]
