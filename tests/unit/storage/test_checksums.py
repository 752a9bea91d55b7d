from __future__ import annotations

import gzip
import hashlib
from pathlib import Path

from cpan_faker.storage.checksums import (
    CHECKSUMS_FILENAME,
    file_checksums,
    render_checksums_body,
    update_author_checksums,
    update_directory,
)


def test_file_checksums_include_ungz_digests_for_gzip(tmp_path: Path) -> None:
    payload = b"hello world\n"
    archive = tmp_path / "Foo-1.00.tar.gz"
    archive.write_bytes(gzip.compress(payload, mtime=0))

    entry = file_checksums(archive)

    assert entry["sha256"] == hashlib.sha256(archive.read_bytes()).hexdigest()
    assert entry["md5-ungz"] == hashlib.md5(payload).hexdigest()
    assert entry["sha256-ungz"] == hashlib.sha256(payload).hexdigest()
    assert entry["size"] == archive.stat().st_size
    assert len(str(entry["mtime"])) == len("2026-10-17")


def test_render_body_is_perl_hash_literal() -> None:
    body = render_checksums_body({"a'b.tar.gz": {"size": 3, "md5": "abc"}, "sub": {"isdir": 1}})
    assert body == (
        "$cksum = {\n"
        "  'a\\'b.tar.gz' => {\n"
        "    'md5' => 'abc',\n"
        "    'size' => 3\n"
        "  },\n"
        "  'sub' => {\n"
        "    'isdir' => 1\n"
        "  }\n"
        "};\n"
    )


def test_update_directory_skips_hidden_files_and_is_stable(tmp_path: Path) -> None:
    (tmp_path / "Foo-1.00.tar.gz").write_bytes(gzip.compress(b"foo", mtime=0))
    (tmp_path / ".Foo-2.00.tar.gz.tmp").write_bytes(b"partial")

    assert update_directory(tmp_path) is True
    text = (tmp_path / CHECKSUMS_FILENAME).read_text(encoding="utf-8")
    assert text.startswith("# CHECKSUMS file written on ")
    assert "'Foo-1.00.tar.gz' => {" in text
    assert ".tmp" not in text

    assert update_directory(tmp_path) is False
    assert (tmp_path / CHECKSUMS_FILENAME).read_text(encoding="utf-8") == text


def test_only_touched_directories_are_refreshed(tmp_path: Path) -> None:
    touched = tmp_path / "R" / "RJ" / "RJBS"
    untouched = tmp_path / "O" / "OT" / "OTHER"
    for d in (touched, untouched):
        d.mkdir(parents=True)
        (d / "Dist-1.0.tar.gz").write_bytes(gzip.compress(b"x", mtime=0))
    (untouched / CHECKSUMS_FILENAME).write_text("sentinel\n", encoding="utf-8")

    changed = update_author_checksums(tmp_path, {"R/RJ/RJBS"})

    assert changed == ["R/RJ/RJBS"]
    assert (touched / CHECKSUMS_FILENAME).exists()
    assert (untouched / CHECKSUMS_FILENAME).read_text(encoding="utf-8") == "sentinel\n"
