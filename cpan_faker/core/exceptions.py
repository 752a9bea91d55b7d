"""Error taxonomy for a fake CPAN build. Every kind is fatal to the run."""

from pathlib import Path
from typing import Optional, Union


class FakerError(Exception):
    """Base exception for all build failures."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.message = message
        self.path = str(path) if path is not None else None

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} ({self.path})"
        return self.message


class ConfigurationError(FakerError):
    """Source or destination directory is missing, not a directory, or not writable."""


class DistributionBuildError(FakerError):
    """A source file could not be turned into a distribution or its archive."""


class WriteError(FakerError):
    """Writing or closing an output file (index, archive) failed."""


class ChecksumError(FakerError):
    """A CHECKSUMS manifest could not be computed or written."""
