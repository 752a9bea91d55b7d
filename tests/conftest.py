from __future__ import annotations

import gzip
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from cpan_faker.core.exceptions import DistributionBuildError
from cpan_faker.domain.models import (
    DEFAULT_AUTHOR,
    AuthorCredit,
    DistributionRecord,
    PackageDescriptor,
)
from cpan_faker.services.builders.base import DistributionBuilder


def _make_dist(
    name: str,
    version: Optional[str] = "1.00",
    packages: Optional[Dict[str, Optional[str]]] = None,
    author: Optional[str] = "LOCAL",
    display_name: Optional[str] = None,
) -> DistributionRecord:
    if packages is None:
        packages = {name.replace("-", "::"): version}
    authors: List[AuthorCredit] = []
    if author is not None:
        authors.append(
            AuthorCredit(
                pause_id=author,
                display_name=display_name or f"{author} <{author}@cpan.local>",
            )
        )
    return DistributionRecord(
        name=name,
        version=version,
        cpan_author=author or DEFAULT_AUTHOR,
        authors=authors,
        provides=[PackageDescriptor(name=n, version=v) for n, v in packages.items()],
    )


class FakeBuilder(DistributionBuilder):
    """Serves pre-built records keyed by source file name."""

    def __init__(self, dists: Dict[str, DistributionRecord]):
        self.dists = dists
        self.seen: List[str] = []

    def from_file(self, path: Path) -> DistributionRecord:
        self.seen.append(path.name)
        if path.name not in self.dists:
            raise DistributionBuildError("no fake dist registered", path)
        return self.dists[path.name]

    def make_archive(self, dist: DistributionRecord, dist_dest: Path) -> Path:
        target = dist_dest / dist.archive_path()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(gzip.compress(f"{dist.dist_basename}\n".encode("utf-8"), mtime=0))
        return target


@pytest.fixture
def make_dist() -> Callable[..., DistributionRecord]:
    return _make_dist


@pytest.fixture
def fake_builder() -> Callable[[Dict[str, DistributionRecord]], FakeBuilder]:
    return FakeBuilder


@pytest.fixture
def workspace(tmp_path: Path) -> Dict[str, Path]:
    source = tmp_path / "source"
    dest = tmp_path / "dest"
    source.mkdir()
    dest.mkdir()
    return {"source": source, "dest": dest}


@pytest.fixture
def read_gz() -> Callable[[Path], str]:
    def _read(path: Path) -> str:
        with gzip.open(path, "rt", encoding="utf-8") as f:
            return f.read()

    return _read
