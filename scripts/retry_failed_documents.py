#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
from typing import Any

from docintel.config import settings
from docintel.domain.errors import DocError
from docintel.logging_config import configure_logging
from docintel.services.document_service import DocumentService

logger = logging.getLogger("docintel.scripts.retry_failed_documents")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Re-run processing for an organization's failed documents")
    parser.add_argument("--organization-id", required=True, help="Organization whose failed documents are retried")
    parser.add_argument("--limit", type=int, default=50, help="Max documents retried in this run")
    parser.add_argument("--dry-run", action="store_true", help="List candidates without processing them")
    return parser.parse_args()


def retry_failed(service: DocumentService, organization_id: str, limit: int, dry_run: bool = False) -> dict[str, Any]:
    failed = service.list_failed_documents(organization_id)[: max(0, limit)]
    results: list[dict[str, Any]] = []
    for doc in failed:
        if dry_run:
            results.append({"document_id": doc.id, "status": "candidate", "previous_error": doc.processing_error})
            continue
        try:
            summary = service.process(doc.id).summary()
            results.append({"document_id": doc.id, "status": "completed", **summary})
        except DocError as exc:
            results.append({"document_id": doc.id, "status": "failed", "error": str(exc)})

    return {
        "organization_id": organization_id,
        "candidates": len(failed),
        "completed": sum(1 for r in results if r["status"] == "completed"),
        "failed": sum(1 for r in results if r["status"] == "failed"),
        "dry_run": dry_run,
        "results": results,
    }


def main() -> None:
    args = parse_args()
    configure_logging(settings.log_level)
    service = DocumentService()
    if not service.using_supabase:
        logger.warning("In-memory persistence has no documents from earlier runs; set PERSISTENCE_BACKEND=supabase")
    summary = retry_failed(service, args.organization_id, args.limit, dry_run=args.dry_run)
    print(json.dumps(summary, indent=2, default=str))


if __name__ == "__main__":
    main()
