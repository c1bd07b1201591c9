from __future__ import annotations

import hashlib
import os
import tempfile
from pathlib import Path

from docintel.domain.errors import ContentPersistenceFailed


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def file_extension(file_name: str) -> str:
    _, dot, ext = file_name.rpartition(".")
    ext = ext.strip().lower() if dot else ""
    if not ext or not ext.isalnum():
        return "bin"
    return ext


class LocalContentStore:
    """Stores uploaded bytes under ``<root>/<document id>.<ext>``.

    Writes land in a temporary sibling first and are renamed into place after
    flush + fsync, so a stored path is either complete or absent.
    """

    def __init__(self, root: str) -> None:
        self.root = Path(root)

    def path_for(self, document_id: str, file_name: str) -> Path:
        return self.root / f"{document_id}.{file_extension(file_name)}"

    def write(self, document_id: str, file_name: str, data: bytes) -> str:
        target = self.path_for(document_id, file_name)
        tmp_name: str | None = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{document_id}.", suffix=".part", dir=self.root)
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, target)
            tmp_name = None
        except OSError as exc:
            raise ContentPersistenceFailed(f"Failed to save document file: {exc}") from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
        return str(target)

    def delete(self, file_path: str) -> None:
        Path(file_path).unlink(missing_ok=True)
