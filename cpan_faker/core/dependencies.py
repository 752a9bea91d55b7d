from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml
from pydantic import ValidationError

from cpan_faker.core.exceptions import ConfigurationError
from cpan_faker.domain.models import FakerConfig
from cpan_faker.services.builders import DistributionBuilder, SourceFileBuilder

logger = logging.getLogger(__name__)


SOURCE_DIR_ENV_VAR = "CPAN_FAKER_SOURCE"
DEST_DIR_ENV_VAR = "CPAN_FAKER_DEST"

_builders: Dict[str, Callable[[], DistributionBuilder]] = {
    "source-file": SourceFileBuilder,
}


def register_dist_builder(name: str, factory: Callable[[], DistributionBuilder]) -> None:
    """
    Make a builder selectable by name (``FakerConfig.dist_builder``).
    """
    _builders[name] = factory


def available_dist_builders() -> list:
    return sorted(_builders)


def get_dist_builder(name: str) -> DistributionBuilder:
    factory = _builders.get(name)
    if factory is None:
        raise ConfigurationError(
            f"unknown dist builder {name!r} (available: {', '.join(available_dist_builders())})"
        )
    return factory()


def load_config(
    config_file: Optional[Path] = None,
    **overrides: Any,
) -> FakerConfig:
    """
    Assemble a FakerConfig.

    Priority (highest first):
    1. explicit overrides (CLI flags) that are not None
    2. values from the YAML config file
    3. CPAN_FAKER_SOURCE / CPAN_FAKER_DEST environment variables
    """
    raw: Dict[str, Any] = {}

    env_source = os.environ.get(SOURCE_DIR_ENV_VAR)
    env_dest = os.environ.get(DEST_DIR_ENV_VAR)
    if env_source:
        raw["source"] = Path(env_source).expanduser()
    if env_dest:
        raw["dest"] = Path(env_dest).expanduser()

    if config_file is not None:
        try:
            loaded = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"cannot read config file: {e}", config_file) from e
        if not isinstance(loaded, dict):
            raise ConfigurationError("config file must contain a mapping", config_file)
        logger.debug(f"Loaded config from {config_file}: {sorted(loaded)}")
        raw.update(loaded)

    raw.update({k: v for k, v in overrides.items() if v is not None})

    for key in ("source", "dest"):
        if key not in raw:
            raise ConfigurationError(f"no {key} directory given")

    try:
        return FakerConfig(**raw)
    except ValidationError as e:
        raise ConfigurationError(f"invalid configuration: {e}") from e
