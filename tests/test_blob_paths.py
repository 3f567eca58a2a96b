from datetime import datetime

import pytest

from homevault.blobs.errors import InvalidBlobPath
from homevault.blobs.paths import (
    extension_for_mime,
    mime_for_extension,
    path_for,
    resolve_extension,
    validate_relative_path,
)


def test_path_is_sharded_by_year_and_zero_padded_month():
    assert path_for("a1b2c3d4e5f60718", "pdf", datetime(2025, 3, 9)) == "2025/03/a1b2c3d4e5f60718.pdf"
    assert path_for("a1b2c3d4e5f60718", ".jpg", datetime(2024, 12, 1)) == "2024/12/a1b2c3d4e5f60718.jpg"


def test_path_requires_digest():
    with pytest.raises(ValueError):
        path_for("", "jpg", datetime(2025, 1, 1))


@pytest.mark.parametrize(
    ("mime", "ext"),
    [
        ("image/jpeg", "jpg"),
        ("image/png", "png"),
        ("image/heic", "heic"),
        ("application/pdf", "pdf"),
        ("text/plain", "txt"),
        ("application/x-unknown", "dat"),
        (None, "dat"),
    ],
)
def test_extension_for_mime(mime, ext):
    assert extension_for_mime(mime) == ext


def test_filename_suffix_wins_over_mime():
    assert resolve_extension("manual.pdf", "image/png") == "pdf"
    assert resolve_extension("no_suffix", "image/png") == "png"
    assert resolve_extension(None, None) == "dat"
    assert resolve_extension("trailing.", "text/plain") == "txt"


def test_mime_for_extension_prefers_known_map():
    assert mime_for_extension("jpg") == "image/jpeg"
    assert mime_for_extension(".PDF") == "application/pdf"
    assert mime_for_extension("zzz-unknown") == "application/octet-stream"


@pytest.mark.parametrize("bad", ["", "   ", "/etc/passwd", "../secret", "2025/../../x", ".", "C:/x"])
def test_validate_relative_path_rejects_escapes(bad):
    with pytest.raises(InvalidBlobPath):
        validate_relative_path(bad)


def test_validate_relative_path_accepts_store_paths():
    assert validate_relative_path("2025/03/abc.jpg").parts == ("2025", "03", "abc.jpg")
