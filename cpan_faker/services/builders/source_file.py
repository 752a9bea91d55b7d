"""
Build fake distributions from simple description files.

Supported formats:
* ``*.yml`` / ``*.yaml``: YAML mapping describing the dist.
* ``*.json``: the same mapping as JSON.
* ``*.dist``: empty file whose name is ``[AUTHOR_]Dist-Name-1.23.dist``.
"""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from cpan_faker.core.exceptions import DistributionBuildError
from cpan_faker.domain.models import (
    DEFAULT_AUTHOR,
    AuthorCredit,
    DistributionRecord,
    PackageDescriptor,
)
from cpan_faker.services.builders.base import DistributionBuilder

logger = logging.getLogger(__name__)


DEFAULT_DIST_VERSION = "0.01"

_UNDEFINED_MARKERS = {"", "~", "null", "Null", "NULL", "undef"}

_DIST_FILENAME_RE = re.compile(
    r"\A(?:(?P<author>[A-Z][A-Z0-9]*)_)?(?P<name>.+)-(?P<version>v?\d[^-]*)\.dist\Z"
)


def _optional_version(value: Any) -> Optional[str]:
    """
    Normalize a version value. Numbers become strings; null-ish markers become None.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"invalid version: {value!r}")
    if isinstance(value, (int, float)):
        return str(value)
    if not isinstance(value, str):
        raise ValueError(f"invalid version: {value!r}")
    text = value.strip()
    if text in _UNDEFINED_MARKERS:
        return None
    return text


def default_package_name(dist_name: str) -> str:
    return dist_name.replace("-", "::")


def _parse_authors(raw: Dict[str, Any], cpan_author: str) -> List[AuthorCredit]:
    authors_raw = raw.get("authors")
    if authors_raw is None or authors_raw == "":
        authors_raw = [f"{cpan_author} <{cpan_author}@cpan.local>"]
    if isinstance(authors_raw, str):
        authors_raw = [authors_raw]
    if not isinstance(authors_raw, list):
        raise ValueError("authors must be a list")

    credits: List[AuthorCredit] = []
    for item in authors_raw:
        if isinstance(item, str):
            credits.append(AuthorCredit(pause_id=cpan_author, display_name=item))
        elif isinstance(item, dict):
            credits.append(
                AuthorCredit(
                    pause_id=item.get("id") or cpan_author,
                    display_name=item.get("name") or "",
                )
            )
        else:
            raise ValueError(f"unsupported author entry: {item!r}")
    return credits


def _parse_provides(raw: Dict[str, Any], dist_name: str, dist_version: Optional[str]) -> List[PackageDescriptor]:
    provides_raw = raw.get("provides")
    if provides_raw is None or provides_raw == "":
        return [PackageDescriptor(name=default_package_name(dist_name), version=dist_version)]
    if not isinstance(provides_raw, dict):
        raise ValueError("provides must be a mapping of package name to details")

    packages: List[PackageDescriptor] = []
    for pkg_name, details in provides_raw.items():
        if isinstance(details, dict):
            packages.append(
                PackageDescriptor(
                    name=pkg_name,
                    version=_optional_version(details.get("version")),
                    file=details.get("file") or None,
                )
            )
        else:
            # "Foo::Bar: 1.23" shorthand
            packages.append(PackageDescriptor(name=pkg_name, version=_optional_version(details)))
    return packages


def record_from_mapping(raw: Any) -> DistributionRecord:
    """
    Build a DistributionRecord from a parsed YAML/JSON description.
    """
    if not isinstance(raw, dict):
        raise ValueError("dist description must be a mapping")

    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValueError("dist description has no name")
    name = name.strip()

    cpan_author = raw.get("cpan_author")
    if cpan_author is not None and not isinstance(cpan_author, str):
        raise ValueError("cpan_author must be a string")
    authors = _parse_authors(raw, cpan_author or DEFAULT_AUTHOR)
    if not cpan_author and authors and isinstance(raw.get("authors"), list):
        first = raw["authors"][0]
        if isinstance(first, dict) and first.get("id"):
            # No explicit cpan_author: file under the first author's id.
            cpan_author = first["id"]

    if "version" in raw:
        version = _optional_version(raw.get("version"))
    else:
        version = DEFAULT_DIST_VERSION

    requires_raw = raw.get("requires") or {}
    if not isinstance(requires_raw, dict):
        raise ValueError("requires must be a mapping")

    return DistributionRecord(
        name=name,
        version=version,
        cpan_author=cpan_author or DEFAULT_AUTHOR,
        authors=authors,
        provides=_parse_provides(raw, name, version),
        abstract=raw.get("abstract") or None,
        requires={str(k): str(v) for k, v in requires_raw.items()},
    )


def record_from_dist_filename(filename: str) -> DistributionRecord:
    match = _DIST_FILENAME_RE.match(filename)
    if not match:
        raise ValueError(f"cannot parse dist name and version from {filename!r}")
    return record_from_mapping(
        {
            "name": match.group("name"),
            "version": match.group("version"),
            "cpan_author": match.group("author") or DEFAULT_AUTHOR,
        }
    )


class SourceFileBuilder(DistributionBuilder):
    """
    The default builder: reads YAML, JSON and ``.dist`` description files.
    """

    def from_file(self, path: Path) -> DistributionRecord:
        suffix = path.suffix.lower()
        try:
            if suffix in (".yml", ".yaml"):
                # BaseLoader keeps every scalar a string, so "1.00" stays "1.00".
                raw = yaml.load(path.read_text(encoding="utf-8"), Loader=yaml.BaseLoader)
                dist = record_from_mapping(raw)
            elif suffix == ".json":
                # Numbers stay as written, so 1.00 is not read back as "1.0".
                raw = json.loads(path.read_text(encoding="utf-8"), parse_float=str, parse_int=str)
                dist = record_from_mapping(raw)
            elif suffix == ".dist":
                dist = record_from_dist_filename(path.name)
            else:
                raise DistributionBuildError("unknown dist description format", path)
        except DistributionBuildError:
            raise
        except (OSError, UnicodeDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read dist description {path}: {e}")
            raise DistributionBuildError(f"cannot read dist description: {e}", path) from e
        except (ValueError, ValidationError) as e:
            logger.error(f"Invalid dist description {path}: {e}")
            raise DistributionBuildError(f"invalid dist description: {e}", path) from e

        logger.debug(
            f"Parsed {path.name}: {dist.dist_basename} by {dist.cpan_author}, "
            f"{len(dist.provides)} package(s)"
        )
        return dist
