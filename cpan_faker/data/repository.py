from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional, Set

from cpan_faker.core.dependencies import get_dist_builder
from cpan_faker.core.exceptions import ConfigurationError, DistributionBuildError
from cpan_faker.data.author_index import learn
from cpan_faker.data.package_index import index_dist
from cpan_faker.domain.models import (
    AuthorIndex,
    BuildResult,
    DistributionRecord,
    FakerConfig,
    PackageIndex,
)
from cpan_faker.services.builders.base import DistributionBuilder
from cpan_faker.storage.checksums import update_author_checksums
from cpan_faker.storage.layout_writer import write_indices

logger = logging.getLogger(__name__)


# Version-control metadata is never a dist description.
SKIP_DIRS = {".git", ".svn", ".hg", ".bzr", "CVS", "_darcs"}


def validate_directories(config: FakerConfig) -> None:
    """
    Check that source and dest exist, are directories, and are writable.
    """
    for label, directory in (("source", config.source), ("dest", config.dest)):
        if not directory.exists():
            raise ConfigurationError(f"{label} directory does not exist", directory)
        if not directory.is_dir():
            raise ConfigurationError(f"{label} directory is not a directory", directory)
        if not os.access(directory, os.W_OK):
            raise ConfigurationError(f"{label} directory is not writeable", directory)


def discover_source_files(source: Path) -> Iterator[Path]:
    """
    Yield every regular, non-hidden file under ``source`` in a stable order.
    """
    for root, dirs, files in os.walk(source):
        dirs[:] = sorted(d for d in dirs if d not in SKIP_DIRS and not d.startswith("."))
        for name in sorted(files):
            if name.startswith("."):
                continue
            path = Path(root) / name
            if path.is_file():
                yield path


def add_dist(
    dist: DistributionRecord,
    builder: DistributionBuilder,
    dist_dest: Path,
    package_index: PackageIndex,
    author_index: AuthorIndex,
    touched_dirs: Set[str],
) -> Path:
    """
    Write the dist's archive and fold it into the indices.

    Returns the path of the archive that was written.
    """
    archive = builder.make_archive(dist, dist_dest)

    learn(author_index, dist)
    owned = index_dist(package_index, dist)
    touched_dirs.add(dist.author_dir())

    logger.info(
        f"Added {dist.archive_path(author_prefix=True)} "
        f"({owned}/{len(dist.provides)} package(s) indexed)"
    )
    return archive


def build(
    config: FakerConfig,
    builder: Optional[DistributionBuilder] = None,
    now: Optional[datetime] = None,
) -> BuildResult:
    """
    Build a complete fake CPAN in ``config.dest`` from ``config.source``.

    Every source file becomes a dist; any failure aborts the whole run. After
    discovery, CHECKSUMS are refreshed for the author directories that got an
    archive, then the author, package and modlist indices are written.
    """
    validate_directories(config)

    if builder is None:
        builder = get_dist_builder(config.dist_builder)

    dist_dest = config.dist_dest
    package_index = PackageIndex()
    author_index = AuthorIndex()
    touched_dirs: Set[str] = set()
    archives = []

    logger.info(f"Building fake CPAN from {config.source} into {config.dest}")

    for source_file in discover_source_files(config.source):
        dist = builder.from_file(source_file)
        if not isinstance(dist, DistributionRecord):
            raise DistributionBuildError("builder did not return a distribution", source_file)
        archives.append(
            add_dist(dist, builder, dist_dest, package_index, author_index, touched_dirs)
        )

    checksums_changed = update_author_checksums(dist_dest, touched_dirs)
    index_files = write_indices(config, package_index, author_index, now=now)

    logger.info(
        f"Done: {len(archives)} dist(s), {len(package_index)} package(s), "
        f"{len(author_index.authors)} author(s)"
    )

    return BuildResult(
        package_index=package_index,
        author_index=author_index,
        touched_dirs=sorted(touched_dirs),
        archives=archives,
        index_files=index_files,
        checksums_changed=checksums_changed,
        finished_at=now or datetime.now(),
    )
