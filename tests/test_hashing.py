import hashlib

import pytest

from homevault.blobs.hashing import DIGEST_LENGTH, content_digest, validate_digest_length


def test_digest_is_sha256_prefix():
    data = b"furnace filter receipt"
    expected = hashlib.sha256(data).hexdigest()[:DIGEST_LENGTH]
    assert content_digest(data) == expected
    assert len(content_digest(data)) == 16


def test_digest_of_empty_payload_is_defined():
    assert content_digest(b"") == "e3b0c44298fc1c14"


def test_digest_is_deterministic_and_lowercase_hex():
    first = content_digest(b"abc")
    assert first == content_digest(bytearray(b"abc"))
    assert all(ch in "0123456789abcdef" for ch in first)
    assert content_digest(b"abd") != first


def test_custom_length_and_bounds():
    assert len(content_digest(b"x", length=64)) == 64
    assert content_digest(b"x", length=8) == content_digest(b"x")[:8]
    with pytest.raises(ValueError):
        content_digest(b"x", length=4)
    with pytest.raises(ValueError):
        validate_digest_length(65)
    with pytest.raises(ValueError):
        content_digest(b"x", length=9)
