"""InstallService — install artifacts into a local repository.

Pipeline: RESOLVE CONFIG -> PUBLISH -> NOTIFY PLUGINS -> REPORT

Publishing exceptions are converted to ``ServiceResult`` errors here;
callers above this layer never see them.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from repopub.config.models import RepositoryConfig
from repopub.domain.coordinates import AttachedArtifact
from repopub.domain.layout import BUILTIN_LAYOUTS, LAYOUT_REGISTRY
from repopub.errors import PublishError
from repopub.infrastructure.tempdir import TemporaryDirectoryProvider
from repopub.services.base import BaseService
from repopub.services.publisher import LocalPublishStrategy, Publisher
from repopub.services.result import ServiceError, ServiceResult
from repopub.services.telemetry import traced

if TYPE_CHECKING:
    from repopub.config.settings import RepoSettings
    from repopub.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class InstallService(BaseService):
    """Installs descriptors and attached artifacts using the local publisher."""

    def __init__(
        self,
        settings: RepoSettings,
        *,
        plugin_manager: PluginManager | None = None,
        publisher: Publisher | None = None,
    ) -> None:
        super().__init__(settings, plugin_manager=plugin_manager)
        if publisher is None:
            temp_dir = settings.publish.temp_dir
            publisher = Publisher(
                LocalPublishStrategy(),
                temp_provider=TemporaryDirectoryProvider(Path(temp_dir) if temp_dir else None),
            )
        self._publisher = publisher

    def repository_config(
        self,
        *,
        location: str | None = None,
        layout: str | None = None,
    ) -> RepositoryConfig:
        """Merge explicit overrides over the ``[repository]`` settings section."""
        configured = self._settings.repository.to_repository_config()
        return RepositoryConfig(
            location=configured.location if location is None else location,
            layout_name=layout or configured.layout_name,
        )

    @traced
    def install(
        self,
        descriptor: Path,
        *,
        location: str | None = None,
        layout: str | None = None,
        artifacts: Sequence[AttachedArtifact] = (),
    ) -> ServiceResult:
        """Publish *descriptor* and *artifacts* into the configured repository."""
        op = "install"
        repo_config = self.repository_config(location=location, layout=layout)

        try:
            published = self._publisher.publish(descriptor, repo_config, artifacts=artifacts)
        except PublishError as exc:
            logger.debug("Install of %s failed: %s", descriptor, exc.message)
            return ServiceResult(ok=False, op=op, error=ServiceError.from_exception(exc))

        warnings = list(published.warnings)
        installed = [str(path) for path in published.installed]
        self._dispatch_event(
            "post_install",
            {
                "location": published.location,
                "layout": published.handle.layout.name,
                "installed": installed,
            },
            warnings,
        )

        data: dict[str, object] = {
            "descriptor": str(descriptor),
            "repository": published.handle.name,
            "location": published.location,
            "layout": published.handle.layout.name,
            "installed": installed,
        }
        if self._settings.publish.keep_diagnostics or self._settings.verbose:
            data["diagnostics"] = published.diagnostics
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def list_layouts(self) -> ServiceResult:
        """Report every registered layout and whether it is built in."""
        items = [
            {
                "name": name,
                "builtin": name in BUILTIN_LAYOUTS,
                "class": type(layout).__name__,
            }
            for name, layout in sorted(LAYOUT_REGISTRY.items())
        ]
        return ServiceResult(ok=True, op="layouts", data={"items": items, "count": len(items)})
