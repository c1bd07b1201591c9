from __future__ import annotations

from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from docintel.config import Settings
from docintel.events.bus import InMemoryEventBus
from docintel.infra.content_store import LocalContentStore
from docintel.infra.repositories import InMemoryRepository
from docintel.infra.risk_register import InMemoryRiskRegister
from docintel.services.document_service import DocumentService

BASE_DATE = date(2024, 1, 15)

SCENARIO_TEXT = "Vendor shall remediate critical vulnerabilities within 30 days or incur a penalty."


@pytest.fixture
def cfg(tmp_path: Path) -> Settings:
    return replace(Settings(), upload_dir=str(tmp_path / "uploads"))


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def register() -> InMemoryRiskRegister:
    return InMemoryRiskRegister()


@pytest.fixture
def events() -> list[dict[str, Any]]:
    return []


@pytest.fixture
def make_service(repo: InMemoryRepository, register: InMemoryRiskRegister, events: list[dict[str, Any]]):
    def _make(cfg: Settings, **overrides: Any) -> DocumentService:
        bus = InMemoryEventBus()
        bus.subscribe("*", events.append)
        kwargs: dict[str, Any] = {
            "repo": repo,
            "content_store": LocalContentStore(cfg.upload_dir),
            "risk_register": register,
            "event_bus": bus,
            "cfg": cfg,
        }
        kwargs.update(overrides)
        return DocumentService(**kwargs)

    return _make


@pytest.fixture
def service(make_service, cfg: Settings) -> DocumentService:
    return make_service(cfg)


def _pdf_string(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(pages: list[str]) -> bytes:
    """Minimal text PDF with one line of Helvetica per page."""
    page_ids = [4 + 2 * i for i in range(len(pages))]
    objects: dict[int, bytes] = {
        1: b"<< /Type /Catalog /Pages 2 0 R >>",
        2: (
            "<< /Type /Pages /Kids [" + " ".join(f"{p} 0 R" for p in page_ids) + f"] /Count {len(pages)} >>"
        ).encode("latin-1"),
        3: b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>",
    }
    for page_id, text in zip(page_ids, pages):
        stream = f"BT /F1 10 Tf 36 720 Td ({_pdf_string(text)}) Tj ET".encode("latin-1")
        objects[page_id] = (
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {page_id + 1} 0 R >>"
        ).encode("latin-1")
        objects[page_id + 1] = b"<< /Length %d >>\nstream\n%s\nendstream" % (len(stream), stream)

    out = bytearray(b"%PDF-1.4\n")
    offsets: dict[int, int] = {}
    for obj_id in sorted(objects):
        offsets[obj_id] = len(out)
        out += b"%d 0 obj\n%s\nendobj\n" % (obj_id, objects[obj_id])
    xref_at = len(out)
    size = max(objects) + 1
    out += b"xref\n0 %d\n0000000000 65535 f \n" % size
    for obj_id in range(1, size):
        out += b"%010d 00000 n \n" % offsets[obj_id]
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (size, xref_at)
    return bytes(out)
