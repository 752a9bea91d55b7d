from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_AUTHOR = "LOCAL"


class AuthorCredit(BaseModel):
    pause_id: str
    display_name: str


def _checked_author(value: Optional[str]) -> str:
    if value is not None and not isinstance(value, str):
        raise ValueError(f"invalid PAUSE id: {value!r}")
    pause_id = (value or "").strip()
    if not pause_id:
        return DEFAULT_AUTHOR
    if "/" in pause_id or "\\" in pause_id or pause_id in (".", ".."):
        raise ValueError(f"invalid PAUSE id: {value!r}")
    return pause_id


class PackageDescriptor(BaseModel):
    """
    A single package (module namespace) provided by a distribution.

    ``version`` is None when the package declares no version at all, which is
    not the same thing as version "0".
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: Optional[str] = None
    file: Optional[str] = Field(
        default=None,
        description="Path of the module file inside the archive, e.g. lib/Foo/Bar.pm.",
    )

    @property
    def module_file(self) -> str:
        if self.file:
            return self.file
        return "lib/" + "/".join(self.name.split("::")) + ".pm"


class DistributionRecord(BaseModel):
    """
    One fake release. Produced by a DistributionBuilder and never mutated
    afterwards.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: Optional[str] = None
    cpan_author: str = Field(
        default=DEFAULT_AUTHOR,
        description="PAUSE id the archive is filed under. Empty means LOCAL.",
    )
    authors: List[AuthorCredit] = Field(default_factory=list)
    provides: List[PackageDescriptor] = Field(default_factory=list)
    abstract: Optional[str] = None
    requires: Dict[str, str] = Field(default_factory=dict)

    @field_validator("cpan_author", mode="before")
    @classmethod
    def _default_author(cls, value: Optional[str]) -> str:
        return _checked_author(value)

    @property
    def dist_basename(self) -> str:
        if self.version is None:
            return self.name
        return f"{self.name}-{self.version}"

    def archive_filename(self) -> str:
        return f"{self.dist_basename}.tar.gz"

    def author_dir(self) -> str:
        """Author-prefixed directory, e.g. ``R/RJ/RJBS``."""
        pause_id = self.cpan_author
        return f"{pause_id[:1]}/{pause_id[:2]}/{pause_id}"

    def archive_path(self, author_prefix: bool = True) -> str:
        """
        Relative path of the archive below ``authors/id``.

        With ``author_prefix`` the path is ``R/RJ/RJBS/Dist-Name-1.23.tar.gz``;
        without it only the file name is returned.
        """
        if not author_prefix:
            return self.archive_filename()
        return f"{self.author_dir()}/{self.archive_filename()}"


class IndexEntry(BaseModel):
    dist: DistributionRecord
    package: PackageDescriptor


class PackageIndex(BaseModel):
    """
    In-memory 02packages index: package name -> winning (dist, package) pair.
    """

    entries: Dict[str, IndexEntry] = Field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, package_name: str) -> Optional[IndexEntry]:
        return self.entries.get(package_name)


class AuthorIndex(BaseModel):
    """
    In-memory 01mailrc index: PAUSE id -> display name.
    """

    authors: Dict[str, str] = Field(default_factory=dict)


class FakerConfig(BaseModel):
    """
    Everything a single build run needs to know.
    """

    source: Path = Field(description="Directory holding the dist descriptions.")
    dest: Path = Field(description="Directory in which to construct the CPAN instance.")
    url: Optional[str] = Field(
        default=None,
        description="Base URL of the CPAN; a file:// URL for dest is used when unset.",
    )
    dist_builder: str = Field(
        default="source-file",
        description="Name of the registered builder that turns source files into dists.",
    )

    @field_validator("url")
    @classmethod
    def _normalize_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        if not value.endswith("/"):
            value += "/"
        return value

    @property
    def base_url(self) -> str:
        if self.url:
            return self.url
        url = self.dest.resolve().as_uri()
        if not url.endswith("/"):
            url += "/"
        return url

    @property
    def dist_dest(self) -> Path:
        return self.dest / "authors" / "id"


class BuildResult(BaseModel):
    """
    Summary of a finished run.
    """

    package_index: PackageIndex
    author_index: AuthorIndex
    touched_dirs: List[str] = Field(default_factory=list)
    archives: List[Path] = Field(default_factory=list)
    index_files: List[Path] = Field(default_factory=list)
    checksums_changed: List[str] = Field(default_factory=list)
    finished_at: datetime = Field(default_factory=datetime.now)
