from datetime import datetime

import pytest

from homevault.blobs import (
    BlobNotFound,
    BlobStore,
    DigestCollision,
    InvalidBlobPath,
    PayloadTooLarge,
    content_digest,
)
from homevault.core.clock import fixed_clock

MARCH = datetime(2025, 3, 14, 9, 30)


def _store(tmp_path, **kwargs):
    kwargs.setdefault("clock", fixed_clock(MARCH))
    return BlobStore(tmp_path / "uploads", **kwargs)


def test_store_writes_sharded_file(tmp_path):
    store = _store(tmp_path)
    result = store.store(b"warranty card", mime_type="application/pdf", filename="warranty.pdf")

    digest = content_digest(b"warranty card")
    assert result.relative_path == f"2025/03/{digest}.pdf"
    assert result.byte_size == len(b"warranty card")
    assert result.was_deduplicated is False
    assert result.digest == digest
    assert result.mime_type == "application/pdf"
    assert (tmp_path / "uploads" / "2025" / "03" / f"{digest}.pdf").read_bytes() == b"warranty card"


def test_identical_content_is_deduplicated(tmp_path):
    store = _store(tmp_path)
    first = store.store(b"same bytes", filename="a.txt")
    second = store.store(b"same bytes", filename="b.txt")

    assert second.relative_path == first.relative_path
    assert second.was_deduplicated is True
    assert second.byte_size == first.byte_size
    assert store.count_stored_files() == 1


def test_different_content_gets_different_paths(tmp_path):
    store = _store(tmp_path)
    a = store.store(b"one", mime_type="text/plain")
    b = store.store(b"two", mime_type="text/plain")
    assert a.relative_path != b.relative_path
    assert store.retrieve(a.relative_path) == b"one"
    assert store.retrieve(b.relative_path) == b"two"


def test_same_content_different_extension_is_stored_twice(tmp_path):
    store = _store(tmp_path)
    a = store.store(b"payload", filename="x.txt")
    b = store.store(b"payload", filename="x.dat")
    assert a.relative_path != b.relative_path
    assert not b.was_deduplicated


def test_same_content_in_another_month_is_stored_again(tmp_path):
    store = _store(tmp_path)
    first = store.store(b"monthly", filename="r.txt")
    april = BlobStore(tmp_path / "uploads", clock=fixed_clock(datetime(2025, 4, 1)))
    second = april.store(b"monthly", filename="r.txt")
    assert second.relative_path.startswith("2025/04/")
    assert not second.was_deduplicated
    assert first.relative_path != second.relative_path


def test_round_trip_preserves_bytes(tmp_path):
    store = _store(tmp_path)
    payload = bytes(range(256)) * 4
    result = store.store(payload)
    assert result.relative_path.endswith(".dat")
    assert result.mime_type == "application/octet-stream"
    assert store.retrieve(result.relative_path) == payload


def test_empty_payload_is_storable(tmp_path):
    store = _store(tmp_path)
    result = store.store(b"", mime_type="text/plain")
    assert result.byte_size == 0
    assert store.retrieve(result.relative_path) == b""


def test_size_limit_is_inclusive(tmp_path):
    store = _store(tmp_path, max_blob_size=10)
    ok = store.store(b"x" * 10)
    assert ok.byte_size == 10

    with pytest.raises(PayloadTooLarge) as excinfo:
        store.store(b"y" * 11)
    assert excinfo.value.actual_size == 11
    assert excinfo.value.limit == 10
    assert "exceeds maximum" in str(excinfo.value)
    assert store.count_stored_files() == 1


def test_fresh_store_stats(tmp_path):
    store = _store(tmp_path)
    assert store.total_bytes_used() == 0
    assert store.count_stored_files() == 0

    for size in (10, 20, 30):
        store.store(bytes([size]) * size, mime_type="text/plain")

    assert store.count_stored_files() == 3
    assert store.total_bytes_used() == 60
    stats = store.stats()
    assert stats.file_count == 3
    assert stats.total_bytes == 60


def test_stats_ignore_in_flight_temp_files(tmp_path):
    store = _store(tmp_path)
    store.store(b"real", mime_type="text/plain")
    month = tmp_path / "uploads" / "2025" / "03"
    (month / ".abc.txt.xyz.tmp").write_bytes(b"partial")
    assert store.count_stored_files() == 1
    assert store.total_bytes_used() == 4


def test_delete_removes_file_but_keeps_directories(tmp_path):
    store = _store(tmp_path)
    result = store.store(b"to delete", mime_type="text/plain")
    assert store.exists(result.relative_path)

    store.delete(result.relative_path)

    assert not store.exists(result.relative_path)
    assert (tmp_path / "uploads" / "2025" / "03").is_dir()
    with pytest.raises(BlobNotFound):
        store.delete(result.relative_path)


def test_store_after_delete_writes_again(tmp_path):
    store = _store(tmp_path)
    first = store.store(b"again", mime_type="text/plain")
    store.delete(first.relative_path)
    second = store.store(b"again", mime_type="text/plain")
    assert second.relative_path == first.relative_path
    assert second.was_deduplicated is False


def test_retrieve_missing_raises(tmp_path):
    store = _store(tmp_path)
    with pytest.raises(BlobNotFound) as excinfo:
        store.retrieve("2025/03/0000000000000000.jpg")
    assert excinfo.value.path == "2025/03/0000000000000000.jpg"


@pytest.mark.parametrize("bad", ["../outside.txt", "/etc/hosts", "2025/../../x.dat"])
def test_paths_outside_root_are_rejected(tmp_path, bad):
    store = _store(tmp_path)
    with pytest.raises(InvalidBlobPath):
        store.retrieve(bad)
    with pytest.raises(InvalidBlobPath):
        store.delete(bad)


def test_verified_dedup_detects_collision(tmp_path):
    store = _store(tmp_path, verify_dedup=True)
    digest = content_digest(b"genuine")
    target = tmp_path / "uploads" / "2025" / "03" / f"{digest}.txt"
    target.parent.mkdir(parents=True)
    target.write_bytes(b"impostor")

    with pytest.raises(DigestCollision):
        store.store(b"genuine", mime_type="text/plain")
    assert target.read_bytes() == b"impostor"


def test_unverified_dedup_trusts_existing_file(tmp_path):
    store = _store(tmp_path)
    digest = content_digest(b"genuine")
    target = tmp_path / "uploads" / "2025" / "03" / f"{digest}.txt"
    target.parent.mkdir(parents=True)
    target.write_bytes(b"impostor!")

    result = store.store(b"genuine", mime_type="text/plain")
    assert result.was_deduplicated
    assert result.byte_size == len(b"impostor!")


def test_constructor_validates_limits(tmp_path):
    with pytest.raises(ValueError):
        BlobStore(tmp_path, max_blob_size=0)
    with pytest.raises(ValueError):
        BlobStore(tmp_path, jpeg_quality=0)
    with pytest.raises(ValueError):
        BlobStore(tmp_path, digest_length=2)
    with pytest.raises(ValueError):
        BlobStore(tmp_path, jpeg_quality=96)
    with pytest.raises(ValueError):
        BlobStore(tmp_path, digest_length=17)


def test_root_is_created(tmp_path):
    root = tmp_path / "nested" / "uploads"
    BlobStore(root)
    assert root.is_dir()
