from __future__ import annotations

import logging

from cpan_faker.domain.models import AuthorIndex, DistributionRecord

logger = logging.getLogger(__name__)


def learn(index: AuthorIndex, dist: DistributionRecord) -> None:
    """
    Record the display name of the dist's first author.

    Later dists overwrite earlier ones for the same PAUSE id; a dist without
    an author id leaves the index alone.
    """
    if not dist.authors:
        return

    author = dist.authors[0]
    if not author.pause_id or not author.display_name:
        return

    previous = index.authors.get(author.pause_id)
    if previous is not None and previous != author.display_name:
        logger.debug(
            f"Author {author.pause_id}: replacing {previous!r} with {author.display_name!r} "
            f"(from {dist.dist_basename})"
        )
    index.authors[author.pause_id] = author.display_name
