"""Deploy operations — single-use units of work handed to the install engine.

Lifecycle: ``unconfigured -> configured -> executed -> succeeded|failed``.
The repository handle is built inside :meth:`DeployOperation.execute`, never
earlier, so layout problems surface at execution time.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from repopub.domain.layout import LayoutStrategy, resolve_layout
from repopub.domain.lifecycle import DeployState, is_valid_transition
from repopub.domain.repository import LocalRepositoryHandle
from repopub.errors import ConfigurationError, MisuseError

if TYPE_CHECKING:
    from repopub.config.models import RepositoryConfig
    from repopub.domain.coordinates import AttachedArtifact
    from repopub.infrastructure.engine import DeployEngine

logger = logging.getLogger(__name__)


class DeployOperation(ABC):
    """Holds the descriptor, attached artifacts, and staging directory for one install.

    Subclasses decide how the repository handle is produced by implementing
    :meth:`create_repository_handle`.
    """

    def __init__(self, descriptor: Path, *, staging_dir: Path, engine: DeployEngine) -> None:
        self._descriptor = descriptor
        self._staging_dir = staging_dir
        self._engine = engine
        self._artifacts: list[AttachedArtifact] = []
        self._handle: LocalRepositoryHandle | None = None
        self._state = DeployState.UNCONFIGURED

    @property
    def descriptor(self) -> Path:
        return self._descriptor

    @property
    def staging_dir(self) -> Path:
        return self._staging_dir

    @property
    def artifacts(self) -> tuple[AttachedArtifact, ...]:
        return tuple(self._artifacts)

    @property
    def state(self) -> DeployState:
        return self._state

    @property
    def handle(self) -> LocalRepositoryHandle | None:
        """The handle built during execute(); None before that."""
        return self._handle

    def attach(self, artifact: AttachedArtifact) -> None:
        """Add a binary output to install alongside the descriptor."""
        if self._state not in (DeployState.UNCONFIGURED, DeployState.CONFIGURED):
            msg = f"Cannot attach artifacts to a deploy operation in state {self._state}"
            raise MisuseError(msg, state=str(self._state))
        self._artifacts.append(artifact)

    def execute(self) -> list[Path]:
        """Build the repository handle and let the engine place the files.

        Raises:
            MisuseError: If the operation is not configured or already executed.
            LayoutResolutionError: If the handle's layout cannot be resolved.
            DeployExecutionError: If the engine fails to place a file.
        """
        if self._state != DeployState.CONFIGURED:
            if self._state == DeployState.UNCONFIGURED:
                msg = "Deploy operation executed before it was configured"
            else:
                msg = "Deploy operation is single-use and has already been executed"
            raise MisuseError(msg, state=str(self._state))
        self._transition(DeployState.EXECUTED)

        try:
            self._handle = self.create_repository_handle()
            logger.debug(
                "Resolved repository %s at %s (%s layout)",
                self._handle.name,
                self._handle.location,
                self._handle.layout.name,
            )
            installed = self._engine.install(
                self._descriptor,
                self.artifacts,
                self._handle,
                self._staging_dir,
            )
        except BaseException:
            self._transition(DeployState.FAILED)
            raise

        self._transition(DeployState.SUCCEEDED)
        return installed

    @abstractmethod
    def create_repository_handle(self) -> LocalRepositoryHandle:
        """Produce the handle this operation installs into."""
        ...

    def _mark_configured(self) -> None:
        self._transition(DeployState.CONFIGURED)

    def _transition(self, target: DeployState) -> None:
        if not is_valid_transition(self._state, target):
            msg = f"Invalid deploy operation transition {self._state} -> {target}"
            raise MisuseError(msg, state=str(self._state), target=str(target))
        self._state = target


class LocalDeployOperation(DeployOperation):
    """Installs into a filesystem repository; no remote protocol or credentials."""

    def __init__(
        self,
        descriptor: Path,
        *,
        staging_dir: Path,
        engine: DeployEngine,
        layout_resolver: Callable[[str], LayoutStrategy] = resolve_layout,
    ) -> None:
        super().__init__(descriptor, staging_dir=staging_dir, engine=engine)
        self._resolve_layout = layout_resolver
        self._location: str | None = None
        self._layout_name: str | None = None

    @property
    def location(self) -> str | None:
        return self._location

    def set_repository(self, repo_config: RepositoryConfig) -> None:
        """Store the target location and the layout name the repository declares."""
        if not repo_config.location.strip():
            msg = "Repository location must not be empty"
            raise ConfigurationError(msg)
        self._mark_configured()
        self._location = repo_config.location
        self._layout_name = repo_config.layout_name

    def create_repository_handle(self) -> LocalRepositoryHandle:
        assert self._location is not None and self._layout_name is not None
        layout = self._resolve_layout(self._layout_name)
        return LocalRepositoryHandle(location=self._location, layout=layout)
