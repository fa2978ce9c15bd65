"""Publisher — the fixed publish workflow with pluggable target strategies.

``Publisher.publish`` always runs the same steps:

1. validate the descriptor and repository config (no resources held yet)
2. acquire a staging directory
3. ask the strategy for a deploy operation bound to the descriptor
4. attach artifacts and let the strategy configure the target
5. capture operation diagnostics while the operation executes
6. restore diagnostic routing
7. release the staging directory, on every exit path

Target-specific behavior lives in a :class:`PublishStrategy` injected at
construction; :class:`LocalPublishStrategy` is the filesystem target.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import structlog

from repopub.config.models import RepositoryConfig
from repopub.domain.coordinates import AttachedArtifact
from repopub.domain.layout import LayoutStrategy, resolve_layout
from repopub.domain.repository import LocalRepositoryHandle, location_to_path
from repopub.errors import ConfigurationError, MisuseError
from repopub.infrastructure.diagnostics import DiagnosticCapture
from repopub.infrastructure.engine import DeployEngine, FileSystemInstallEngine
from repopub.infrastructure.tempdir import TempDirProvider, TemporaryDirectoryProvider
from repopub.services.deploy import DeployOperation, LocalDeployOperation
from repopub.services.telemetry import trace_span

logger = logging.getLogger(__name__)


class PublishStrategy(Protocol):
    """Target-specific hooks called by :class:`Publisher`."""

    def create_deploy_operation(
        self,
        descriptor: Path,
        *,
        staging_dir: Path,
        engine: DeployEngine,
    ) -> DeployOperation: ...

    def post_configure(
        self, operation: DeployOperation, repo_config: RepositoryConfig
    ) -> None: ...


class LocalPublishStrategy:
    """Publishes into a repository on the local filesystem.

    Only the location is taken from the repository config; the layout is
    the one that repository declares, looked up when the operation runs.
    """

    def __init__(
        self,
        layout_resolver: Callable[[str], LayoutStrategy] = resolve_layout,
    ) -> None:
        self._layout_resolver = layout_resolver

    def create_deploy_operation(
        self,
        descriptor: Path,
        *,
        staging_dir: Path,
        engine: DeployEngine,
    ) -> LocalDeployOperation:
        return LocalDeployOperation(
            descriptor,
            staging_dir=staging_dir,
            engine=engine,
            layout_resolver=self._layout_resolver,
        )

    def post_configure(self, operation: DeployOperation, repo_config: RepositoryConfig) -> None:
        if not isinstance(operation, LocalDeployOperation):
            msg = f"LocalPublishStrategy cannot configure {type(operation).__name__}"
            raise MisuseError(msg)
        operation.set_repository(repo_config)


@dataclass(frozen=True)
class PublishResult:
    """Outcome of a successful publish."""

    handle: LocalRepositoryHandle
    installed: tuple[Path, ...] = ()
    diagnostics: str = ""
    warnings: tuple[str, ...] = ()

    @property
    def location(self) -> str:
        return self.handle.location


class Publisher:
    """Runs the publish workflow for one strategy.

    Collaborators default to the filesystem implementations and can be
    replaced for tests or alternative engines.
    """

    def __init__(
        self,
        strategy: PublishStrategy,
        *,
        temp_provider: TempDirProvider | None = None,
        capture: DiagnosticCapture | None = None,
        engine: DeployEngine | None = None,
    ) -> None:
        self._strategy = strategy
        self._temp = temp_provider or TemporaryDirectoryProvider()
        self._capture = capture or DiagnosticCapture()
        self._engine = engine or FileSystemInstallEngine()

    def publish(
        self,
        descriptor: Path,
        repo_config: RepositoryConfig,
        *,
        artifacts: Sequence[AttachedArtifact] = (),
    ) -> PublishResult:
        """Install *descriptor* and *artifacts* into the repository described by *repo_config*.

        Raises:
            ConfigurationError: Invalid inputs; raised before any resource is acquired.
            LayoutResolutionError: The repository's layout is unknown.
            DeployExecutionError: The engine failed to place the files.
        """
        with structlog.contextvars.bound_contextvars(descriptor=str(descriptor)):
            with trace_span("validate"):
                self._validate(descriptor, repo_config, artifacts)

            staging_dir = self._temp.acquire()
            warnings: list[str] = []
            try:
                operation = self._strategy.create_deploy_operation(
                    descriptor,
                    staging_dir=staging_dir,
                    engine=self._engine,
                )
                for artifact in artifacts:
                    operation.attach(artifact)
                self._strategy.post_configure(operation, repo_config)

                with trace_span("execute") as span, self._capture.capture() as token:
                    installed = operation.execute()
                if span is not None:
                    span.annotate("files", len(installed))
            finally:
                self._release(staging_dir, warnings)

        assert operation.handle is not None
        logger.debug("Published %s to %s", descriptor, operation.handle.location)
        return PublishResult(
            handle=operation.handle,
            installed=tuple(installed),
            diagnostics=token.text,
            warnings=tuple(warnings),
        )

    @staticmethod
    def _validate(
        descriptor: Path,
        repo_config: RepositoryConfig,
        artifacts: Sequence[AttachedArtifact],
    ) -> None:
        if not repo_config.location.strip():
            msg = "Repository location must not be empty"
            raise ConfigurationError(msg)
        location_to_path(repo_config.location)
        if not descriptor.is_file():
            msg = f"Descriptor file does not exist: {descriptor}"
            raise ConfigurationError(msg, descriptor=str(descriptor))
        if not os.access(descriptor, os.R_OK):
            msg = f"Descriptor file is not readable: {descriptor}"
            raise ConfigurationError(msg, descriptor=str(descriptor))
        for artifact in artifacts:
            if not artifact.path.is_file():
                msg = f"Attached artifact does not exist: {artifact.path}"
                raise ConfigurationError(msg, artifact=str(artifact.path))

    def _release(self, staging_dir: Path, warnings: list[str]) -> None:
        """Release the staging directory without masking an in-flight error."""
        try:
            self._temp.release(staging_dir)
        except OSError:
            logger.warning("Failed to release staging directory %s", staging_dir, exc_info=True)
            warnings.append(f"Staging directory {staging_dir} was not removed")
