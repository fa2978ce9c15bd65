"""Tests for InstallService — ServiceResult mapping, settings defaults, plugin hooks."""

from __future__ import annotations

from pathlib import Path

import pluggy
import pytest

from repopub.config.settings import RepoSettings
from repopub.domain.coordinates import AttachedArtifact
from repopub.plugins.manager import PluginManager
from repopub.services.install import InstallService
from repopub.services.publisher import LocalPublishStrategy, Publisher
from tests.conftest import CountingTempDirProvider

hookimpl = pluggy.HookimplMarker("repopub")


class _RecordingPlugin:
    def __init__(self) -> None:
        self.events: list[dict[str, object]] = []

    @hookimpl
    def post_install(self, location: str, layout: str, installed: list[str]) -> None:
        self.events.append({"location": location, "layout": layout, "installed": installed})


class _BrokenPlugin:
    @hookimpl
    def post_install(self, location: str, layout: str, installed: list[str]) -> None:
        raise RuntimeError("plugin crashed")


@pytest.fixture
def service(settings: RepoSettings, temp_provider: CountingTempDirProvider) -> InstallService:
    publisher = Publisher(LocalPublishStrategy(), temp_provider=temp_provider)
    return InstallService(settings, publisher=publisher)


class TestInstall:
    def test_success_uses_configured_repository(
        self, service: InstallService, descriptor: Path, repo_dir: Path
    ) -> None:
        result = service.install(descriptor)
        assert result.ok, result.error
        assert result.op == "install"
        assert result.data["location"] == repo_dir.as_posix()
        assert result.data["repository"] == "local"
        assert result.data["layout"] == "default"
        pom = repo_dir / "org/example/project/1.0/project-1.0.pom"
        assert str(pom) in result.data["installed"]
        assert "diagnostics" not in result.data

    def test_explicit_overrides(
        self, service: InstallService, descriptor: Path, jar: Path, tmp_path: Path
    ) -> None:
        other = tmp_path / "other-repo"
        result = service.install(
            descriptor,
            location=str(other),
            layout="legacy",
            artifacts=[AttachedArtifact.from_path(jar)],
        )
        assert result.ok, result.error
        assert result.data["location"] == str(other)
        assert (other / "org.example" / "jars" / "project-1.0.jar").is_file()

    def test_unknown_layout_error(self, service: InstallService, descriptor: Path) -> None:
        result = service.install(descriptor, layout="unknown-layout")
        assert result.ok is False
        assert result.error is not None
        assert result.error.code == "LAYOUT_NOT_FOUND"
        assert result.error.detail["layout"] == "unknown-layout"

    def test_missing_descriptor_error(self, service: InstallService, tmp_path: Path) -> None:
        result = service.install(tmp_path / "nope.pom")
        assert result.ok is False
        assert result.error is not None
        assert result.error.code == "CONFIGURATION_ERROR"

    def test_empty_location_error(self, service: InstallService, descriptor: Path) -> None:
        result = service.install(descriptor, location="")
        assert result.error is not None
        assert result.error.code == "CONFIGURATION_ERROR"

    def test_deploy_failure_error(
        self, service: InstallService, descriptor: Path, jar: Path
    ) -> None:
        artifact = AttachedArtifact.from_path(jar)
        result = service.install(descriptor, artifacts=[artifact, artifact])
        assert result.error is not None
        assert result.error.code == "DEPLOY_FAILED"

    def test_keep_diagnostics(
        self, tmp_path: Path, repo_dir: Path, descriptor: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("REPOPUB_CONFIG", raising=False)
        (tmp_path / "repopub.toml").write_text(
            f'[repository]\nlocation = "{repo_dir.as_posix()}"\n'
            "[publish]\nkeep_diagnostics = true\n"
        )
        settings = RepoSettings.from_cli(project_root=tmp_path)
        result = InstallService(settings).install(descriptor)
        assert result.ok, result.error
        assert "Installing org.example:project:1.0" in result.data["diagnostics"]

    def test_temp_dir_setting_used(
        self, tmp_path: Path, repo_dir: Path, descriptor: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("REPOPUB_CONFIG", raising=False)
        staging_root = tmp_path / "custom-staging"
        (tmp_path / "repopub.toml").write_text(
            f'[repository]\nlocation = "{repo_dir.as_posix()}"\n'
            f'[publish]\ntemp_dir = "{staging_root.as_posix()}"\n'
        )
        settings = RepoSettings.from_cli(project_root=tmp_path)
        result = InstallService(settings).install(descriptor)
        assert result.ok, result.error
        assert staging_root.is_dir()
        assert list(staging_root.iterdir()) == []


class TestPluginDispatch:
    def test_post_install_hook_called(
        self,
        settings: RepoSettings,
        temp_provider: CountingTempDirProvider,
        descriptor: Path,
        repo_dir: Path,
    ) -> None:
        pm = PluginManager()
        plugin = _RecordingPlugin()
        pm.register_plugin(plugin, name="recorder")
        publisher = Publisher(LocalPublishStrategy(), temp_provider=temp_provider)
        result = InstallService(settings, plugin_manager=pm, publisher=publisher).install(
            descriptor
        )
        assert result.ok
        assert plugin.events[0]["location"] == repo_dir.as_posix()
        assert plugin.events[0]["layout"] == "default"

    def test_plugin_failure_is_warning(
        self,
        settings: RepoSettings,
        temp_provider: CountingTempDirProvider,
        descriptor: Path,
    ) -> None:
        pm = PluginManager()
        pm.register_plugin(_BrokenPlugin(), name="broken")
        publisher = Publisher(LocalPublishStrategy(), temp_provider=temp_provider)
        result = InstallService(settings, plugin_manager=pm, publisher=publisher).install(
            descriptor
        )
        assert result.ok is True
        assert any("post_install" in w for w in result.warnings)

    def test_hook_not_called_on_failure(
        self,
        settings: RepoSettings,
        temp_provider: CountingTempDirProvider,
        descriptor: Path,
    ) -> None:
        pm = PluginManager()
        plugin = _RecordingPlugin()
        pm.register_plugin(plugin, name="recorder")
        publisher = Publisher(LocalPublishStrategy(), temp_provider=temp_provider)
        result = InstallService(settings, plugin_manager=pm, publisher=publisher).install(
            descriptor, layout="unknown-layout"
        )
        assert result.ok is False
        assert plugin.events == []


class TestListLayouts:
    def test_lists_builtins(self, service: InstallService) -> None:
        result = service.list_layouts()
        assert result.ok
        names = [item["name"] for item in result.data["items"]]
        assert {"default", "legacy", "flat"} <= set(names)
        assert all(item["builtin"] for item in result.data["items"] if item["name"] == "default")
