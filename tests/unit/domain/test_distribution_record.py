from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from cpan_faker.domain.models import AuthorCredit, DistributionRecord


def test_archive_is_filed_under_cpan_author_not_credited_author() -> None:
    dist = DistributionRecord(
        name="Team-Work",
        version="1.0",
        cpan_author="RJBS",
        authors=[AuthorCredit(pause_id="OTHER", display_name="Someone Else")],
    )
    assert dist.author_dir() == "R/RJ/RJBS"
    assert dist.archive_path() == "R/RJ/RJBS/Team-Work-1.0.tar.gz"


@pytest.mark.parametrize("pause_id", ["", "   ", None])
def test_blank_cpan_author_falls_back_to_local(tmp_path: Path, pause_id) -> None:
    dist = DistributionRecord(
        name="Anon",
        version="1.0",
        cpan_author=pause_id,
        authors=[AuthorCredit(pause_id="", display_name="Nobody")],
    )
    dist_dest = tmp_path / "authors" / "id"

    assert dist.cpan_author == "LOCAL"
    assert dist.archive_path() == "L/LO/LOCAL/Anon-1.0.tar.gz"
    assert (dist_dest / dist.archive_path()).is_relative_to(dist_dest)


@pytest.mark.parametrize("pause_id", ["../EVIL", "A/B", "..", "A\\B"])
def test_cpan_author_cannot_escape_the_author_tree(pause_id: str) -> None:
    with pytest.raises(ValidationError):
        DistributionRecord(name="Bad", version="1.0", cpan_author=pause_id)
