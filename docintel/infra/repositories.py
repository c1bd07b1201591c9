from __future__ import annotations

from datetime import datetime, timezone
from threading import RLock
from typing import Any
from uuid import uuid4

from docintel.config import Settings, settings as default_settings
from docintel.infra.supabase_client import get_supabase_client

DOCUMENTS_TABLE = "documents"
CLAUSES_TABLE = "extracted_clauses"
OBLIGATIONS_TABLE = "compliance_obligations"


class RepositoryError(RuntimeError):
    pass


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class DocumentRepository:
    def create_document(self, row: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    def update_document(self, document_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    def get_document(self, document_id: str) -> dict[str, Any] | None:
        raise NotImplementedError

    def find_latest_by_hash(self, organization_id: str, file_hash: str) -> dict[str, Any] | None:
        raise NotImplementedError

    def list_documents(self, organization_id: str, limit: int = 500) -> list[dict[str, Any]]:
        raise NotImplementedError

    def replace_extractions(
        self,
        document_id: str,
        clauses: list[dict[str, Any]],
        obligations: list[dict[str, Any]],
    ) -> None:
        raise NotImplementedError

    def list_clauses(self, document_id: str) -> list[dict[str, Any]]:
        raise NotImplementedError

    def list_obligations(self, document_id: str) -> list[dict[str, Any]]:
        raise NotImplementedError

    def list_pending_review(self, organization_id: str) -> list[dict[str, Any]]:
        raise NotImplementedError


class InMemoryRepository(DocumentRepository):
    def __init__(self) -> None:
        self._lock = RLock()
        self._documents: dict[str, dict[str, Any]] = {}
        self._clauses: dict[str, dict[str, Any]] = {}
        self._obligations: dict[str, dict[str, Any]] = {}

    def create_document(self, row: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            now = _utc_now()
            item = {
                "id": row.get("id") or str(uuid4()),
                "created_at": row.get("created_at") or now,
                "updated_at": row.get("updated_at") or now,
                **row,
            }
            if str(item["id"]) in self._documents:
                raise RepositoryError(f"Document already exists: {item['id']}")
            self._documents[str(item["id"])] = item
            return dict(item)

    def update_document(self, document_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            existing = self._documents.get(document_id)
            if not existing:
                raise RepositoryError(f"Document not found: {document_id}")
            existing.update(updates)
            existing["updated_at"] = _utc_now()
            return dict(existing)

    def get_document(self, document_id: str) -> dict[str, Any] | None:
        with self._lock:
            row = self._documents.get(document_id)
            return dict(row) if row else None

    def find_latest_by_hash(self, organization_id: str, file_hash: str) -> dict[str, Any] | None:
        with self._lock:
            rows = [
                r
                for r in self._documents.values()
                if r.get("organization_id") == organization_id and r.get("file_hash") == file_hash
            ]
            if not rows:
                return None
            return dict(max(rows, key=lambda r: int(r.get("version_number") or 1)))

    def list_documents(self, organization_id: str, limit: int = 500) -> list[dict[str, Any]]:
        with self._lock:
            rows = [r for r in self._documents.values() if r.get("organization_id") == organization_id]
            rows.sort(key=lambda r: str(r.get("created_at", "")), reverse=True)
            return [dict(r) for r in rows[:limit]]

    def replace_extractions(
        self,
        document_id: str,
        clauses: list[dict[str, Any]],
        obligations: list[dict[str, Any]],
    ) -> None:
        with self._lock:
            self._obligations = {k: v for k, v in self._obligations.items() if v.get("document_id") != document_id}
            self._clauses = {k: v for k, v in self._clauses.items() if v.get("document_id") != document_id}
            for row in clauses:
                self._clauses[str(row["id"])] = dict(row)
            for row in obligations:
                self._obligations[str(row["id"])] = dict(row)

    def list_clauses(self, document_id: str) -> list[dict[str, Any]]:
        with self._lock:
            rows = [r for r in self._clauses.values() if r.get("document_id") == document_id]
            rows.sort(key=lambda r: int(r.get("clause_number") or 0))
            return [dict(r) for r in rows]

    def list_obligations(self, document_id: str) -> list[dict[str, Any]]:
        with self._lock:
            return [dict(r) for r in self._obligations.values() if r.get("document_id") == document_id]

    def list_pending_review(self, organization_id: str) -> list[dict[str, Any]]:
        with self._lock:
            org_docs = {
                doc_id for doc_id, doc in self._documents.items() if doc.get("organization_id") == organization_id
            }
            rows = [
                r
                for r in self._clauses.values()
                if r.get("document_id") in org_docs
                and bool(r.get("requires_review"))
                and r.get("review_status") == "pending"
            ]
            rows.sort(key=lambda r: str(r.get("created_at", "")), reverse=True)
            return [dict(r) for r in rows]


class SupabaseRepository(DocumentRepository):
    def __init__(self, client: Any) -> None:
        self.client = client

    def _insert(self, table: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not rows:
            return []
        try:
            res = self.client.table(table).insert(rows).execute()
        except Exception as exc:
            raise RepositoryError(f"Insert failed for {table}: {exc}") from exc
        if not res.data:
            raise RepositoryError(f"Insert failed for {table}")
        return [dict(r) for r in res.data]

    def create_document(self, row: dict[str, Any]) -> dict[str, Any]:
        payload = dict(row)
        payload.setdefault("id", str(uuid4()))
        return self._insert(DOCUMENTS_TABLE, [payload])[0]

    def update_document(self, document_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        payload = dict(updates)
        payload["updated_at"] = _utc_now()
        try:
            res = self.client.table(DOCUMENTS_TABLE).update(payload).eq("id", document_id).execute()
        except Exception as exc:
            raise RepositoryError(f"Update failed for document {document_id}: {exc}") from exc
        if not res.data:
            raise RepositoryError(f"Update failed for document {document_id}")
        return dict(res.data[0])

    def get_document(self, document_id: str) -> dict[str, Any] | None:
        res = self.client.table(DOCUMENTS_TABLE).select("*").eq("id", document_id).limit(1).execute()
        if not res.data:
            return None
        return dict(res.data[0])

    def find_latest_by_hash(self, organization_id: str, file_hash: str) -> dict[str, Any] | None:
        res = (
            self.client.table(DOCUMENTS_TABLE)
            .select("*")
            .eq("organization_id", organization_id)
            .eq("file_hash", file_hash)
            .order("version_number", desc=True)
            .limit(1)
            .execute()
        )
        if not res.data:
            return None
        return dict(res.data[0])

    def list_documents(self, organization_id: str, limit: int = 500) -> list[dict[str, Any]]:
        res = (
            self.client.table(DOCUMENTS_TABLE)
            .select("*")
            .eq("organization_id", organization_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [dict(r) for r in (res.data or [])]

    def replace_extractions(
        self,
        document_id: str,
        clauses: list[dict[str, Any]],
        obligations: list[dict[str, Any]],
    ) -> None:
        # PostgREST has no multi-statement transaction; obligations go first
        # because they reference clauses.
        try:
            self.client.table(OBLIGATIONS_TABLE).delete().eq("document_id", document_id).execute()
            self.client.table(CLAUSES_TABLE).delete().eq("document_id", document_id).execute()
        except Exception as exc:
            raise RepositoryError(f"Clearing extractions failed for document {document_id}: {exc}") from exc
        self._insert(CLAUSES_TABLE, clauses)
        self._insert(OBLIGATIONS_TABLE, obligations)

    def list_clauses(self, document_id: str) -> list[dict[str, Any]]:
        res = self.client.table(CLAUSES_TABLE).select("*").eq("document_id", document_id).execute()
        rows = [dict(r) for r in (res.data or [])]
        rows.sort(key=lambda r: int(r.get("clause_number") or 0))
        return rows

    def list_obligations(self, document_id: str) -> list[dict[str, Any]]:
        res = self.client.table(OBLIGATIONS_TABLE).select("*").eq("document_id", document_id).execute()
        return [dict(r) for r in (res.data or [])]

    def list_pending_review(self, organization_id: str) -> list[dict[str, Any]]:
        res = (
            self.client.table(CLAUSES_TABLE)
            .select("*, documents!inner(organization_id)")
            .eq("documents.organization_id", organization_id)
            .eq("requires_review", True)
            .eq("review_status", "pending")
            .order("created_at", desc=True)
            .execute()
        )
        rows: list[dict[str, Any]] = []
        for r in res.data or []:
            row = dict(r)
            row.pop("documents", None)
            rows.append(row)
        return rows


def build_repository(cfg: Settings | None = None) -> tuple[DocumentRepository, bool, str | None]:
    cfg = cfg or default_settings
    if cfg.persistence_backend != "supabase":
        return InMemoryRepository(), False, None

    client, err = get_supabase_client(cfg)
    if client is None:
        return InMemoryRepository(), False, f"Supabase client unavailable ({err}); using in-memory repository."

    try:
        # Connectivity + schema check on the tables this pipeline writes.
        for table in (DOCUMENTS_TABLE, CLAUSES_TABLE, OBLIGATIONS_TABLE):
            client.table(table).select("id").limit(1).execute()
        return SupabaseRepository(client), True, None
    except Exception as exc:
        return (
            InMemoryRepository(),
            False,
            f"Supabase unavailable or schema mismatch ({exc}). Using in-memory repository.",
        )
