"""
CPAN-style CHECKSUMS manifests for author directories.
"""
from __future__ import annotations

import gzip
import hashlib
import logging
import os
import zlib
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from cpan_faker import __version__
from cpan_faker.core.exceptions import ChecksumError

logger = logging.getLogger(__name__)


CHECKSUMS_FILENAME = "CHECKSUMS"

_CHUNK_SIZE = 8192


def _digests(stream) -> Dict[str, str]:
    md5 = hashlib.md5()
    sha256 = hashlib.sha256()
    for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b""):
        md5.update(chunk)
        sha256.update(chunk)
    return {"md5": md5.hexdigest(), "sha256": sha256.hexdigest()}


def file_checksums(path: Path) -> Dict[str, Union[str, int]]:
    """
    Checksum entry for one file: md5, sha256, size and mtime, plus the
    digests of the uncompressed content for gzip files.
    """
    stat = path.stat()
    with path.open("rb") as f:
        entry: Dict[str, Union[str, int]] = dict(_digests(f))
    if path.name.endswith(".gz"):
        with gzip.open(path, "rb") as f:
            ungz = _digests(f)
        entry["md5-ungz"] = ungz["md5"]
        entry["sha256-ungz"] = ungz["sha256"]
    entry["size"] = stat.st_size
    entry["mtime"] = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).strftime("%Y-%m-%d")
    return entry


def _manifest_members(directory: Path) -> Iterable[Path]:
    for child in sorted(directory.iterdir(), key=lambda p: p.name):
        if child.name.startswith(".") or child.name == CHECKSUMS_FILENAME:
            continue
        yield child


def _perl_value(value: Union[str, int]) -> str:
    if isinstance(value, int):
        return str(value)
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def render_checksums_body(entries: Dict[str, Dict[str, Union[str, int]]]) -> str:
    """
    Render entries in the Data::Dumper layout CPAN clients expect.
    """
    lines: List[str] = ["$cksum = {"]
    names = sorted(entries)
    for i, name in enumerate(names):
        lines.append(f"  {_perl_value(name)} => {{")
        fields = sorted(entries[name])
        for j, key in enumerate(fields):
            sep = "," if j < len(fields) - 1 else ""
            lines.append(f"    {_perl_value(key)} => {_perl_value(entries[name][key])}{sep}")
        lines.append("  }," if i < len(names) - 1 else "  }")
    lines.append("};")
    return "\n".join(lines) + "\n"


def _header(now: datetime) -> str:
    return (
        f"# CHECKSUMS file written on {now.strftime('%a %b %d %H:%M:%S %Y')} GMT "
        f"by cpan-faker (v{__version__})\n"
    )


def _existing_body(manifest: Path) -> Optional[str]:
    if not manifest.exists():
        return None
    text = manifest.read_text(encoding="utf-8")
    if text.startswith("#"):
        _, _, text = text.partition("\n")
    return text


def update_directory(directory: Path, now: Optional[datetime] = None) -> bool:
    """
    Recompute ``directory/CHECKSUMS``.

    Returns True if the manifest was (re)written, False if its content was
    already current and the file was left alone.
    """
    manifest = directory / CHECKSUMS_FILENAME
    try:
        entries: Dict[str, Dict[str, Union[str, int]]] = {}
        for child in _manifest_members(directory):
            if child.is_dir():
                entries[child.name] = {"isdir": 1}
            elif child.is_file():
                entries[child.name] = file_checksums(child)

        body = render_checksums_body(entries)
        if _existing_body(manifest) == body:
            logger.debug(f"{manifest} is current")
            return False

        stamp = now or datetime.now(timezone.utc)
        tmp = directory / f".{CHECKSUMS_FILENAME}.tmp"
        tmp.write_text(_header(stamp) + body, encoding="utf-8")
        os.replace(tmp, manifest)
    except (OSError, EOFError, UnicodeDecodeError, zlib.error) as e:
        logger.error(f"Failed to update {manifest}: {e}")
        raise ChecksumError(f"cannot update checksums: {e}", manifest) from e

    logger.info(f"Updated {manifest} ({len(entries)} entries)")
    return True


def update_author_checksums(dist_dest: Path, author_dirs: Iterable[str]) -> List[str]:
    """
    Refresh CHECKSUMS for each touched author directory (relative to
    ``dist_dest``). Returns the directories whose manifest changed.
    """
    changed: List[str] = []
    for rel_dir in sorted(author_dirs):
        if update_directory(dist_dest / rel_dir):
            changed.append(rel_dir)
    return changed
