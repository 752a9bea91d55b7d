from __future__ import annotations

from pathlib import Path

import pytest

from cpan_faker.core.dependencies import (
    DEST_DIR_ENV_VAR,
    SOURCE_DIR_ENV_VAR,
    get_dist_builder,
    load_config,
    register_dist_builder,
)
from cpan_faker.core.exceptions import ConfigurationError
from cpan_faker.domain.models import FakerConfig
from cpan_faker.services.builders import SourceFileBuilder


def test_url_override_gets_trailing_slash(tmp_path: Path) -> None:
    config = FakerConfig(source=tmp_path, dest=tmp_path, url="http://cpan.example/mirror")
    assert config.base_url == "http://cpan.example/mirror/"


def test_default_url_is_file_url_of_dest(tmp_path: Path) -> None:
    config = FakerConfig(source=tmp_path, dest=tmp_path)
    assert config.base_url == tmp_path.resolve().as_uri() + "/"
    assert config.base_url.startswith("file://")


def test_cli_overrides_beat_file_and_environment(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv(SOURCE_DIR_ENV_VAR, str(tmp_path / "env-source"))
    monkeypatch.setenv(DEST_DIR_ENV_VAR, str(tmp_path / "env-dest"))
    config_file = tmp_path / "faker.yml"
    config_file.write_text(
        f"dest: {tmp_path / 'file-dest'}\nurl: http://from-file.example\n",
        encoding="utf-8",
    )

    config = load_config(config_file, url="http://from-cli.example", dest=None)

    assert config.source == tmp_path / "env-source"
    assert config.dest == tmp_path / "file-dest"
    assert config.url == "http://from-cli.example/"


def test_missing_dest_is_a_configuration_error(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv(SOURCE_DIR_ENV_VAR, raising=False)
    monkeypatch.delenv(DEST_DIR_ENV_VAR, raising=False)
    with pytest.raises(ConfigurationError):
        load_config(source=tmp_path)


def test_config_file_must_be_a_mapping(tmp_path: Path) -> None:
    config_file = tmp_path / "faker.yml"
    config_file.write_text("- nope\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(config_file, source=tmp_path, dest=tmp_path)


def test_builder_registry(tmp_path: Path) -> None:
    assert isinstance(get_dist_builder("source-file"), SourceFileBuilder)

    register_dist_builder("custom", SourceFileBuilder)
    assert isinstance(get_dist_builder("custom"), SourceFileBuilder)

    with pytest.raises(ConfigurationError):
        get_dist_builder("does-not-exist")
