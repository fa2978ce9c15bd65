"""Tests for config models — defaults and sparse overrides."""

import pytest

from repopub.config.models import (
    DEFAULT_REPOSITORY_LOCATION,
    PluginsSection,
    PublishSection,
    RepositoryConfig,
    RepositorySection,
)


class TestRepositoryConfig:
    def test_default_layout(self) -> None:
        assert RepositoryConfig(location="/var/repo").layout_name == "default"

    def test_location_required(self) -> None:
        with pytest.raises(Exception):
            RepositoryConfig()  # type: ignore[call-arg]

    def test_frozen(self) -> None:
        config = RepositoryConfig(location="/var/repo")
        with pytest.raises(Exception):
            config.location = "/elsewhere"  # type: ignore[misc]


class TestSections:
    def test_defaults(self) -> None:
        assert RepositorySection().location == DEFAULT_REPOSITORY_LOCATION
        assert RepositorySection().layout == "default"
        assert PublishSection().temp_dir is None
        assert PluginsSection().local_dir == ".repopub/plugins"

    def test_section_to_repository_config(self) -> None:
        section = RepositorySection(location="/srv/repo", layout="legacy")
        assert section.to_repository_config() == RepositoryConfig(
            location="/srv/repo", layout_name="legacy"
        )
