"""
Resolution of package ownership for the 02packages index.
"""
from __future__ import annotations

import logging

from cpan_faker.domain.models import (
    DistributionRecord,
    IndexEntry,
    PackageDescriptor,
    PackageIndex,
)
from cpan_faker.domain.version_utils import (
    compare_optional_versions,
    compare_versions,
    is_undefined,
)

logger = logging.getLogger(__name__)


def should_replace(candidate: IndexEntry, existing: IndexEntry) -> bool:
    """
    Decide whether ``candidate`` takes over the index slot held by ``existing``.

    Rules, in order:
    * a versioned package beats an unversioned one;
    * between two unversioned packages the first one seen stays;
    * otherwise the higher package version wins;
    * on equal package versions the higher distribution version wins, and a
      full tie keeps the first one seen.
    """
    cand_version = candidate.package.version
    existing_version = existing.package.version

    if not is_undefined(cand_version) and is_undefined(existing_version):
        return True
    if is_undefined(cand_version):
        return False

    pkg_cmp = compare_versions(cand_version, existing_version)
    if pkg_cmp != 0:
        return pkg_cmp > 0

    return compare_optional_versions(candidate.dist.version, existing.dist.version) > 0


def consider(index: PackageIndex, dist: DistributionRecord, package: PackageDescriptor) -> bool:
    """
    Offer one (dist, package) pair to the index.

    Returns True if the pair is now the index entry for the package name.
    """
    entry = IndexEntry(dist=dist, package=package)
    existing = index.entries.get(package.name)

    if existing is None:
        index.entries[package.name] = entry
        return True

    if should_replace(entry, existing):
        logger.debug(
            f"{package.name}: {dist.dist_basename} ({package.version}) replaces "
            f"{existing.dist.dist_basename} ({existing.package.version})"
        )
        index.entries[package.name] = entry
        return True

    logger.debug(
        f"{package.name}: keeping {existing.dist.dist_basename} ({existing.package.version}) "
        f"over {dist.dist_basename} ({package.version})"
    )
    return False


def index_dist(index: PackageIndex, dist: DistributionRecord) -> int:
    """
    Offer every package a dist provides. Returns how many it now owns.
    """
    won = 0
    for package in dist.provides:
        if consider(index, dist, package):
            won += 1
    return won
