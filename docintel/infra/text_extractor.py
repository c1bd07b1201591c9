from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol

from pypdf import PdfReader

from docintel.domain.errors import TextExtractionFailed

try:
    import pytesseract
    from PIL import Image
except Exception:  # pragma: no cover
    pytesseract = None  # type: ignore[assignment]
    Image = None  # type: ignore[assignment]

TEXT_SUFFIXES = {".txt", ".md", ".csv", ".json"}
IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".bmp", ".tiff", ".webp"}


class TextExtractor(Protocol):
    def extract_text(self, file_path: str) -> str:
        ...


def _normalize_text(text: str) -> str:
    # Drop control chars but keep line breaks; sentence splitting needs them.
    text = re.sub(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]", "", text)
    text = re.sub(r"[ \t]+", " ", text)
    return text.strip()


class DocumentTextExtractor:
    """Plain text from stored uploads, dispatched on file extension."""

    def __init__(self, max_pdf_pages: int = 0, ocr_lang: str = "eng") -> None:
        self.max_pdf_pages = max_pdf_pages
        self.ocr_lang = ocr_lang

    def _extract_pdf_text(self, path: Path) -> str:
        reader = PdfReader(str(path))
        pages = reader.pages
        if self.max_pdf_pages > 0:
            pages = pages[: self.max_pdf_pages]
        return "\n".join((page.extract_text() or "") for page in pages)

    def _extract_image_text(self, path: Path) -> str:
        if pytesseract is None or Image is None:
            raise RuntimeError("pytesseract/Pillow not installed; install the 'ocr' extra for image uploads")
        with Image.open(path) as image:
            return str(pytesseract.image_to_string(image.convert("RGB"), lang=self.ocr_lang))

    def extract_text(self, file_path: str) -> str:
        path = Path(file_path)
        suffix = path.suffix.lower()
        try:
            if suffix in TEXT_SUFFIXES:
                raw = path.read_text(encoding="utf-8", errors="ignore")
            elif suffix == ".pdf":
                raw = self._extract_pdf_text(path)
            elif suffix in IMAGE_SUFFIXES:
                raw = self._extract_image_text(path)
            else:
                raise ValueError(f"Unsupported file type: {suffix or '<none>'}")
        except Exception as exc:
            raise TextExtractionFailed(f"Failed to extract text from {path.name}: {exc}", cause=exc) from exc
        return _normalize_text(raw)
