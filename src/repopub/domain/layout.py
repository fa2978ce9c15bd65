"""Repository layouts and the layout registry.

A layout maps artifact coordinates to a path relative to the repository
root. Layouts are stateless and shared: the registry hands out the same
instance to every caller and nothing mutates it after registration.

Built-in layouts mirror the Maven conventions:

- ``default``: ``org/example/lib/1.0/lib-1.0.jar``
- ``legacy``:  ``org.example/jars/lib-1.0.jar``
- ``flat``:    ``lib-1.0.jar``
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from repopub.domain.coordinates import ArtifactCoordinates
from repopub.errors import LayoutResolutionError


def artifact_filename(coordinates: ArtifactCoordinates) -> str:
    """``<artifactId>-<version>[-<classifier>].<extension>``."""
    name = f"{coordinates.artifact_id}-{coordinates.version}"
    if coordinates.classifier:
        name = f"{name}-{coordinates.classifier}"
    return f"{name}.{coordinates.extension}"


class LayoutStrategy(ABC):
    """Abstract base for repository layouts."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Layout identifier used for lookup (e.g. ``"default"``)."""
        ...

    @abstractmethod
    def path_of(self, coordinates: ArtifactCoordinates) -> str:
        """Repository-relative path, ``/``-separated, for *coordinates*."""
        ...

    def metadata_path(self, coordinates: ArtifactCoordinates, repository_id: str) -> str | None:
        """Path of the artifact-level metadata file, or None if the layout keeps none."""
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class DefaultLayout(LayoutStrategy):
    """Maven 2 hierarchical layout."""

    @property
    def name(self) -> str:
        return "default"

    def path_of(self, coordinates: ArtifactCoordinates) -> str:
        group_path = coordinates.group_id.replace(".", "/")
        return (
            f"{group_path}/{coordinates.artifact_id}/{coordinates.version}/"
            f"{artifact_filename(coordinates)}"
        )

    def metadata_path(self, coordinates: ArtifactCoordinates, repository_id: str) -> str | None:
        group_path = coordinates.group_id.replace(".", "/")
        return f"{group_path}/{coordinates.artifact_id}/maven-metadata-{repository_id}.xml"


class LegacyLayout(LayoutStrategy):
    """Maven 1 layout: one directory per group and extension."""

    @property
    def name(self) -> str:
        return "legacy"

    def path_of(self, coordinates: ArtifactCoordinates) -> str:
        return f"{coordinates.group_id}/{coordinates.extension}s/{artifact_filename(coordinates)}"


class FlatLayout(LayoutStrategy):
    """Every file directly under the repository root."""

    @property
    def name(self) -> str:
        return "flat"

    def path_of(self, coordinates: ArtifactCoordinates) -> str:
        return artifact_filename(coordinates)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

LAYOUT_REGISTRY: dict[str, LayoutStrategy] = {}

BUILTIN_LAYOUTS: frozenset[str] = frozenset({"default", "legacy", "flat"})


def resolve_layout(name: str) -> LayoutStrategy:
    """Look up a registered layout by name.

    Raises:
        LayoutResolutionError: If no layout is registered under *name*.
    """
    layout = LAYOUT_REGISTRY.get(name)
    if layout is None:
        msg = f"Unknown repository layout {name!r}"
        raise LayoutResolutionError(msg, layout=name, available=available_layouts())
    return layout


def register_layout(name: str, layout: LayoutStrategy) -> None:
    """Register a layout under *name*.

    Built-in names are reserved and cannot be replaced by plugins.
    Re-registering the same instance is a no-op.
    """
    normalized_name = name.strip()
    if not normalized_name:
        msg = "Layout name must not be empty"
        raise ValueError(msg)
    if not isinstance(layout, LayoutStrategy):
        msg = f"Layout {normalized_name!r} must be a LayoutStrategy, got {type(layout).__name__}"
        raise TypeError(msg)

    existing = LAYOUT_REGISTRY.get(normalized_name)
    if existing is layout:
        return
    if normalized_name in BUILTIN_LAYOUTS or existing is not None:
        msg = f"Layout {normalized_name!r} is already registered"
        raise ValueError(msg)

    LAYOUT_REGISTRY[normalized_name] = layout


def available_layouts() -> list[str]:
    return sorted(LAYOUT_REGISTRY)


def _register_builtins() -> None:
    """Populate :data:`LAYOUT_REGISTRY` with built-in layouts."""
    for layout in (DefaultLayout(), LegacyLayout(), FlatLayout()):
        LAYOUT_REGISTRY[layout.name] = layout


_register_builtins()
