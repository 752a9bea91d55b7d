"""
Writes the three CPAN index files:

* authors/01mailrc.txt.gz
* modules/02packages.details.txt.gz
* modules/03modlist.data.gz

Each file is gzip'd to a hidden temporary sibling first. Nothing appears at
the final paths until every file has been written; then they are renamed
into place together. A failed rename puts the previous files back.
"""
from __future__ import annotations

import gzip
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from cpan_faker import __version__
from cpan_faker.core.exceptions import WriteError
from cpan_faker.domain.models import AuthorIndex, FakerConfig, PackageIndex
from cpan_faker.storage import templates

logger = logging.getLogger(__name__)


AUTHOR_INDEX_PATH = Path("authors") / "01mailrc.txt.gz"
PACKAGE_INDEX_PATH = Path("modules") / "02packages.details.txt.gz"
MODLIST_INDEX_PATH = Path("modules") / "03modlist.data.gz"


def format_author_lines(index: AuthorIndex) -> List[str]:
    return [
        f'alias {pause_id} "{index.authors[pause_id]}"\n'
        for pause_id in sorted(index.authors)
    ]


def format_package_lines(index: PackageIndex) -> List[str]:
    lines: List[str] = []
    for pkg_name in sorted(index.entries):
        entry = index.entries[pkg_name]
        version = entry.package.version if entry.package.version is not None else "undef"
        lines.append(
            f"{entry.package.name:<34} {version:>5}  {entry.dist.archive_path(author_prefix=True)}\n"
        )
    return lines


def format_timestamp(now: datetime) -> str:
    """Same shape as Perl's ``scalar localtime``: 'Sat Oct 17 12:00:00 2026'."""
    return now.ctime()


def render_package_index(index: PackageIndex, url: str, now: datetime) -> str:
    lines = format_package_lines(index)
    front = templates.render(
        "packages",
        url=url,
        generator_version=__version__,
        lines=len(lines),
        timestamp=format_timestamp(now),
    )
    return front + "\n" + "".join(lines)


def render_modlist_index(now: datetime) -> str:
    return templates.render(
        "modlist",
        generator_version=__version__,
        timestamp=format_timestamp(now),
    )


class IndexWriter:
    """
    Stages index files under temporary names and publishes them on commit().
    """

    def __init__(self, config: FakerConfig, now: Optional[datetime] = None):
        self.config = config
        self.now = now or datetime.now()
        self._staged: List[Tuple[Path, Path]] = []

    def _stage_gzip(self, rel_path: Path, text: str) -> Path:
        final = self.config.dest / rel_path
        tmp = final.with_name(f".{final.name}.tmp")
        try:
            final.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "wb") as raw, gzip.GzipFile(
                filename=final.name[: -len(".gz")],
                mode="wb",
                fileobj=raw,
                mtime=0,
            ) as gz:
                gz.write(text.encode("utf-8"))
        except OSError as e:
            if tmp.exists():
                tmp.unlink()
            logger.error(f"Error writing {final}: {e}")
            raise WriteError(f"error writing index: {e}", final) from e

        self._staged.append((tmp, final))
        logger.debug(f"Staged {rel_path} ({len(text)} bytes uncompressed)")
        return final

    def stage_author_index(self, index: AuthorIndex) -> Path:
        return self._stage_gzip(AUTHOR_INDEX_PATH, "".join(format_author_lines(index)))

    def stage_package_index(self, index: PackageIndex) -> Path:
        text = render_package_index(index, self.config.base_url, self.now)
        return self._stage_gzip(PACKAGE_INDEX_PATH, text)

    def stage_modlist_index(self) -> Path:
        return self._stage_gzip(MODLIST_INDEX_PATH, render_modlist_index(self.now))

    def commit(self) -> List[Path]:
        """
        Rename every staged file into place.

        Index files that already exist are moved aside first. If any rename
        fails they are put back, so readers never see a mix of old and new.
        """
        published: List[Path] = []
        replaced: List[Tuple[Path, Optional[Path]]] = []
        try:
            for tmp, final in self._staged:
                backup = None
                if final.exists():
                    backup = final.with_name(f".{final.name}.bak")
                    os.replace(final, backup)
                replaced.append((final, backup))
                os.replace(tmp, final)
                published.append(final)
        except OSError as e:
            logger.error(f"Error publishing {final}: {e}")
            self._restore(replaced)
            self.discard()
            raise WriteError(f"error publishing index: {e}", final) from e

        for final, backup in replaced:
            if backup is not None:
                backup.unlink(missing_ok=True)
            logger.info(f"Wrote {final}")
        self._staged = []
        return published

    def _restore(self, replaced: List[Tuple[Path, Optional[Path]]]) -> None:
        for final, backup in reversed(replaced):
            try:
                if backup is None:
                    final.unlink(missing_ok=True)
                else:
                    os.replace(backup, final)
            except OSError as e:
                logger.error(f"Could not restore {final}: {e}")

    def discard(self) -> None:
        for tmp, _final in self._staged:
            tmp.unlink(missing_ok=True)
        self._staged = []


def write_indices(
    config: FakerConfig,
    package_index: PackageIndex,
    author_index: AuthorIndex,
    now: Optional[datetime] = None,
) -> List[Path]:
    """
    Write the author, package and modlist indices, in that order.

    Either all three are published or none is.
    """
    writer = IndexWriter(config, now=now)
    try:
        writer.stage_author_index(author_index)
        writer.stage_package_index(package_index)
        writer.stage_modlist_index()
    except WriteError:
        writer.discard()
        raise
    return writer.commit()
