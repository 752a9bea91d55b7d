"""
Write the tarball for a single fake distribution.
"""
from __future__ import annotations

import io
import logging
import os
import tarfile
import time
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from cpan_faker import __version__
from cpan_faker.core.exceptions import WriteError
from cpan_faker.domain.models import DistributionRecord, PackageDescriptor

logger = logging.getLogger(__name__)


def render_meta_yml(dist: DistributionRecord) -> str:
    provides: Dict[str, Dict[str, str]] = {}
    for package in dist.provides:
        info = {"file": package.module_file}
        if package.version is not None:
            info["version"] = package.version
        provides[package.name] = info

    meta = {
        "name": dist.name,
        "version": dist.version if dist.version is not None else "undef",
        "abstract": dist.abstract or f"the {dist.name} dist",
        "author": [a.display_name for a in dist.authors],
        "generated_by": f"cpan-faker version {__version__}",
        "license": "perl",
        "provides": provides,
        "requires": dict(dist.requires),
        "meta-spec": {
            "url": "http://module-build.sourceforge.net/META-spec-v1.3.html",
            "version": "1.3",
        },
    }
    return yaml.safe_dump(meta, default_flow_style=False, sort_keys=True)


def render_makefile_pl(dist: DistributionRecord) -> str:
    lines = [
        "use ExtUtils::MakeMaker;",
        "",
        "WriteMakefile(",
        f"  NAME     => '{dist.name.replace('-', '::')}',",
        f"  DISTNAME => '{dist.name}',",
    ]
    if dist.version is not None:
        lines.append(f"  VERSION  => '{dist.version}',")
    lines.append(");")
    return "\n".join(lines) + "\n"


def render_module(packages: List[PackageDescriptor]) -> str:
    lines: List[str] = []
    for package in packages:
        lines.append(f"package {package.name};")
        if package.version is not None:
            lines.append(f"our $VERSION = '{package.version}';")
        lines.append("")
    lines.append("1;")
    return "\n".join(lines) + "\n"


def archive_members(dist: DistributionRecord) -> Dict[str, str]:
    """
    Relative file name -> content for everything that goes into the tarball.
    """
    members: Dict[str, str] = {}
    members["META.yml"] = render_meta_yml(dist)
    members["Makefile.PL"] = render_makefile_pl(dist)

    by_file: Dict[str, List[PackageDescriptor]] = {}
    for package in dist.provides:
        by_file.setdefault(package.module_file, []).append(package)
    for file_name, packages in by_file.items():
        members[file_name] = render_module(packages)
    return members


def write_tarball(dist: DistributionRecord, dist_dest: Path, mtime: Optional[float] = None) -> Path:
    """
    Write ``dist`` to ``dist_dest/<author prefix>/<Dist>-<Version>.tar.gz``.

    The archive is written to a temporary sibling first so a failed write
    never leaves a truncated tarball behind.
    """
    target = dist_dest / dist.archive_path(author_prefix=True)
    tmp_target = target.with_name(f".{target.name}.tmp")
    stamp = int(mtime if mtime is not None else time.time())

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tarfile.open(tmp_target, "w:gz") as tar:
            for rel_name, content in archive_members(dist).items():
                data = content.encode("utf-8")
                info = tarfile.TarInfo(name=f"{dist.dist_basename}/{rel_name}")
                info.size = len(data)
                info.mtime = stamp
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(data))
        os.replace(tmp_target, target)
    except (OSError, tarfile.TarError) as e:
        if tmp_target.exists():
            tmp_target.unlink()
        logger.error(f"Failed to write archive for {dist.dist_basename}: {e}")
        raise WriteError(f"cannot write archive for {dist.dist_basename}: {e}", target) from e

    logger.debug(f"Wrote archive {target}")
    return target
