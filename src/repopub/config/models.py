"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, repopub.toml only contains
overrides. An empty file (or no file at all) installs into the user's
``~/.m2/repository`` with the default layout.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel

DEFAULT_REPOSITORY_LOCATION = str(Path("~/.m2/repository").expanduser())


class RepositoryConfig(BaseModel):
    """Publish target description supplied once per publish.

    The local variant carries no credential or proxy fields.
    """

    model_config = {"frozen": True}

    location: str
    layout_name: str = "default"


# --- repopub.toml sections ---


class RepositorySection(BaseModel):
    """[repository] section."""

    model_config = {"frozen": True}

    location: str = DEFAULT_REPOSITORY_LOCATION
    layout: str = "default"

    def to_repository_config(self) -> RepositoryConfig:
        return RepositoryConfig(location=self.location, layout_name=self.layout)


class PublishSection(BaseModel):
    """[publish] section."""

    model_config = {"frozen": True}

    temp_dir: str | None = None
    keep_diagnostics: bool = False


class PluginsSection(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".repopub/plugins"
