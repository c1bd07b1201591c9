from __future__ import annotations

from typing import Any

from fastapi import Depends, FastAPI, File, Form, Header, Request, UploadFile
from fastapi.responses import JSONResponse

from docintel import __version__
from docintel.config import settings
from docintel.contracts.payloads import ProcessingSummary, UploadResponse
from docintel.domain.errors import DocError, DocumentNotFound
from docintel.logging_config import configure_logging
from docintel.services.document_service import DocumentService


configure_logging(settings.log_level)

app = FastAPI(title="Document Intelligence API", version=__version__)
service = DocumentService()


def get_service() -> DocumentService:
    return service


def _organization_id(x_organization_id: str = Header(..., alias="X-Organization-ID")) -> str:
    return x_organization_id.strip()


def _user_id(x_user_id: str = Header(..., alias="X-User-ID")) -> str:
    return x_user_id.strip()


@app.exception_handler(DocumentNotFound)
async def not_found_handler(_request: Request, exc: DocumentNotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValueError)
async def value_error_handler(_request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(DocError)
async def doc_error_handler(_request: Request, exc: DocError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc), "error": type(exc).__name__})


@app.get("/health")
def health(svc: DocumentService = Depends(get_service)) -> dict[str, Any]:
    return {
        "status": "ok",
        "version": __version__,
        "persistence": "supabase" if svc.using_supabase else "memory",
        "persistence_reason": svc.persistence_reason,
    }


@app.get("/documents")
def list_documents(
    organization_id: str = Depends(_organization_id),
    svc: DocumentService = Depends(get_service),
) -> list[dict[str, Any]]:
    return [d.to_row() for d in svc.list_documents(organization_id)]


@app.get("/documents/{document_id}")
def get_document(document_id: str, svc: DocumentService = Depends(get_service)) -> dict[str, Any]:
    return svc.get_document(document_id).to_row()


@app.post("/documents", status_code=201, response_model=UploadResponse)
def upload_document(
    file: UploadFile = File(...),
    document_type: str | None = Form(default=None),
    organization_id: str = Depends(_organization_id),
    user_id: str = Depends(_user_id),
    svc: DocumentService = Depends(get_service),
) -> UploadResponse:
    data = file.file.read()
    if not data:
        raise ValueError("Uploaded file is empty")

    doc = svc.ingest(
        organization_id=organization_id,
        file_name=file.filename or "upload.bin",
        file_bytes=data,
        file_type=file.content_type or "application/octet-stream",
        uploaded_by=user_id,
        document_type=document_type or None,
    )
    result = svc.process(doc.id)
    return UploadResponse(
        document=result.document.to_row(),
        processing_result=ProcessingSummary(**result.summary()),
    )


@app.post("/documents/{document_id}/process", response_model=ProcessingSummary)
def process_document(document_id: str, svc: DocumentService = Depends(get_service)) -> ProcessingSummary:
    return ProcessingSummary(**svc.process(document_id).summary())


@app.get("/documents/{document_id}/clauses")
def list_clauses(document_id: str, svc: DocumentService = Depends(get_service)) -> list[dict[str, Any]]:
    return [c.to_row() for c in svc.list_clauses(document_id)]


@app.get("/review/queue")
def review_queue(
    organization_id: str = Depends(_organization_id),
    svc: DocumentService = Depends(get_service),
) -> list[dict[str, Any]]:
    return [c.to_row() for c in svc.list_pending_review(organization_id)]
