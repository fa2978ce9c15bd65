"""Shared pytest fixtures and test helpers for repopub tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from repopub.config.settings import RepoSettings
from repopub.domain.layout import LAYOUT_REGISTRY
from repopub.infrastructure.tempdir import TemporaryDirectoryProvider
from repopub.services.telemetry import disable_telemetry

POM_TEMPLATE = """\
<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  <groupId>{group}</groupId>
  <artifactId>{artifact}</artifactId>
  <version>{version}</version>
  <packaging>{packaging}</packaging>
</project>
"""


def write_pom(
    path: Path,
    *,
    group: str = "org.example",
    artifact: str = "project",
    version: str = "1.0",
    packaging: str = "jar",
) -> Path:
    """Write a minimal POM to *path* and return it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        POM_TEMPLATE.format(group=group, artifact=artifact, version=version, packaging=packaging),
        encoding="utf-8",
    )
    return path


class CountingTempDirProvider(TemporaryDirectoryProvider):
    """Temp-dir provider that records every acquire and release."""

    def __init__(self, base_dir: Path | None = None) -> None:
        super().__init__(base_dir)
        self.acquired: list[Path] = []
        self.released: list[Path] = []

    def acquire(self) -> Path:
        directory = super().acquire()
        self.acquired.append(directory)
        return directory

    def release(self, directory: Path) -> None:
        self.released.append(directory)
        super().release(directory)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def descriptor(tmp_path: Path) -> Path:
    """POM for org.example:project:1.0 at ``build/project-1.0.pom``."""
    return write_pom(tmp_path / "build" / "project-1.0.pom")


@pytest.fixture
def jar(tmp_path: Path) -> Path:
    """Binary artifact next to the descriptor."""
    path = tmp_path / "build" / "libs" / "project-1.0.jar"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"PK\x03\x04 jar bytes")
    return path


@pytest.fixture
def repo_dir(tmp_path: Path) -> Path:
    """Target repository root (not created up front)."""
    return tmp_path / "repository"


@pytest.fixture
def temp_provider(tmp_path: Path) -> CountingTempDirProvider:
    return CountingTempDirProvider(tmp_path / "staging")


@pytest.fixture
def settings(tmp_path: Path, repo_dir: Path, monkeypatch: pytest.MonkeyPatch) -> RepoSettings:
    """Settings rooted at *tmp_path* with the repository pointed at *repo_dir*."""
    monkeypatch.delenv("REPOPUB_CONFIG", raising=False)
    toml = tmp_path / "repopub.toml"
    toml.write_text(f'[repository]\nlocation = "{repo_dir.as_posix()}"\n', encoding="utf-8")
    return RepoSettings.from_cli(project_root=tmp_path)


@pytest.fixture
def restore_layouts() -> Iterator[None]:
    """Restore the global layout registry after a test that registers layouts."""
    original = LAYOUT_REGISTRY.copy()
    try:
        yield
    finally:
        LAYOUT_REGISTRY.clear()
        LAYOUT_REGISTRY.update(original)


@pytest.fixture
def _isolated_project(
    tmp_path: Path,
    repo_dir: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Run CLI commands from *tmp_path* with a repopub.toml targeting *repo_dir*.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command test
    classes.
    """
    monkeypatch.delenv("REPOPUB_CONFIG", raising=False)
    (tmp_path / "repopub.toml").write_text(
        f'[repository]\nlocation = "{repo_dir.as_posix()}"\n', encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _reset_process_state() -> Iterator[None]:
    """Undo telemetry and root-logger changes made by CLI invocations."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    repopub_level = logging.getLogger("repopub").level
    yield
    disable_telemetry()
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("repopub").setLevel(repopub_level)
