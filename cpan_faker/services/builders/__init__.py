from cpan_faker.services.builders.base import DistributionBuilder
from cpan_faker.services.builders.source_file import SourceFileBuilder

__all__ = ["DistributionBuilder", "SourceFileBuilder"]
