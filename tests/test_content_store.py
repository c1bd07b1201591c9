from __future__ import annotations

from pathlib import Path

import pytest

from docintel.domain.errors import ContentPersistenceFailed
from docintel.infra.content_store import LocalContentStore, file_extension, sha256_bytes


def test_sha256_is_stable() -> None:
    data = b"%PDF-1.4 sample"
    assert sha256_bytes(data) == sha256_bytes(bytes(data))
    assert sha256_bytes(data) != sha256_bytes(data + b" ")
    assert len(sha256_bytes(b"")) == 64


@pytest.mark.parametrize(
    ("name", "ext"),
    [("Contract.PDF", "pdf"), ("notes.txt", "txt"), ("README", "bin"), ("archive.tar.gz", "gz"), ("weird.", "bin")],
)
def test_file_extension(name: str, ext: str) -> None:
    assert file_extension(name) == ext


def test_write_places_file_atomically(tmp_path: Path) -> None:
    store = LocalContentStore(str(tmp_path / "docs"))
    path = store.write("doc-1", "policy.TXT", b"hello world")
    assert path == str(tmp_path / "docs" / "doc-1.txt")
    assert Path(path).read_bytes() == b"hello world"
    assert [p.name for p in (tmp_path / "docs").iterdir()] == ["doc-1.txt"]


def test_write_failure_raises_persistence_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    store = LocalContentStore(str(blocker))
    with pytest.raises(ContentPersistenceFailed):
        store.write("doc-1", "a.txt", b"data")


def test_delete_is_idempotent(tmp_path: Path) -> None:
    store = LocalContentStore(str(tmp_path))
    path = store.write("doc-1", "a.txt", b"data")
    store.delete(path)
    store.delete(path)
    assert not Path(path).exists()
