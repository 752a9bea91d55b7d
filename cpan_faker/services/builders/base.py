from abc import ABC, abstractmethod
from pathlib import Path

from cpan_faker.domain.models import DistributionRecord
from cpan_faker.services.archive import write_tarball


class DistributionBuilder(ABC):
    """
    Abstract base class for anything that turns a source file into a
    DistributionRecord.
    """

    @abstractmethod
    def from_file(self, path: Path) -> DistributionRecord:
        """
        Build the record described by ``path``.
        Must raise DistributionBuildError if the file cannot be used.
        """
        pass

    def make_archive(self, dist: DistributionRecord, dist_dest: Path) -> Path:
        """
        Materialize the dist's archive below ``dist_dest`` (the authors/id
        directory) at ``dist.archive_path()`` and return its path.
        """
        return write_tarball(dist, dist_dest)
