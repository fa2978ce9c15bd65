"""Filesystem install engine — physical placement of artifacts.

INVARIANT: An install either places every file or leaves the repository
as it found it. Each placed file is tracked; on failure, new files are
removed, overwritten files are restored from their staged backups, and
directories created for the install are removed again.

Files are copied into the staging directory first and moved into the
repository afterwards, so a half-copied file is never visible at its
final path.
"""

from __future__ import annotations

import logging
import shutil
import xml.etree.ElementTree as ET
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from repopub.domain.coordinates import (
    ArtifactCoordinates,
    AttachedArtifact,
    is_snapshot,
    parse_descriptor,
    version_key,
)
from repopub.domain.repository import LocalRepositoryHandle
from repopub.errors import DeployExecutionError

logger = logging.getLogger(__name__)


class DeployEngine(Protocol):
    """Placement boundary consumed by deploy operations."""

    def install(
        self,
        descriptor: Path,
        artifacts: Sequence[AttachedArtifact],
        handle: LocalRepositoryHandle,
        staging_dir: Path,
    ) -> list[Path]:
        """Place *descriptor* and *artifacts* under *handle*; return the written paths."""
        ...


# ---------------------------------------------------------------------------
# Placement tracking for compensation-based rollback
# ---------------------------------------------------------------------------


@dataclass
class _Placement:
    """A file written into the repository during one install."""

    path: Path
    backup: Path | None  # staged copy of the previous file, None if newly created
    created_dirs: tuple[Path, ...] = ()  # deepest first

    def rollback(self) -> None:
        """Undo this placement (best-effort)."""
        try:
            if self.backup is not None:
                shutil.copy2(self.backup, self.path)
            else:
                self.path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Failed to roll back %s", self.path, exc_info=True)
            return
        for directory in self.created_dirs:
            try:
                directory.rmdir()
            except OSError:
                logger.warning("Failed to remove directory %s", directory, exc_info=True)
                return


def _timestamp() -> str:
    return datetime.now(UTC).strftime("%Y%m%d%H%M%S")


class FileSystemInstallEngine:
    """Default engine: copies files into a local repository under its layout."""

    def __init__(self, *, clock: Callable[[], str] = _timestamp) -> None:
        self._clock = clock

    def install(
        self,
        descriptor: Path,
        artifacts: Sequence[AttachedArtifact],
        handle: LocalRepositoryHandle,
        staging_dir: Path,
    ) -> list[Path]:
        try:
            coordinates = parse_descriptor(descriptor)
        except (OSError, ValueError) as exc:
            msg = f"Cannot read coordinates from {descriptor}: {exc}"
            raise DeployExecutionError(msg, descriptor=str(descriptor)) from exc

        plan = self.plan(coordinates, descriptor, artifacts, handle)
        logger.info(
            "Installing %s:%s:%s into %s (%s layout)",
            coordinates.group_id,
            coordinates.artifact_id,
            coordinates.version,
            handle.location,
            handle.layout.name,
        )

        placements: list[_Placement] = []
        backup_dir = staging_dir / "backup"
        try:
            for index, (source, destination) in enumerate(plan):
                staged = staging_dir / f"{index:03d}-{destination.name}"
                shutil.copy2(source, staged)
                placements.append(self._place(staged, destination, backup_dir))
                logger.info("Installed %s", destination)

            metadata_relative = handle.layout.metadata_path(coordinates, handle.name)
            if metadata_relative is not None:
                destination = handle.path_for(metadata_relative)
                staged = staging_dir / destination.name
                self._render_metadata(coordinates, destination, staged)
                placements.append(self._place(staged, destination, backup_dir))
                logger.debug("Updated metadata %s", destination)
        except BaseException as exc:
            for placement in reversed(placements):
                placement.rollback()
            if isinstance(exc, OSError):
                msg = f"Install into {handle.location} failed: {exc}"
                raise DeployExecutionError(msg, location=handle.location) from exc
            raise

        return [placement.path for placement in placements]

    def plan(
        self,
        coordinates: ArtifactCoordinates,
        descriptor: Path,
        artifacts: Sequence[AttachedArtifact],
        handle: LocalRepositoryHandle,
    ) -> list[tuple[Path, Path]]:
        """Map every input file to its destination under the handle's layout.

        Raises:
            DeployExecutionError: If two inputs map to the same destination.
        """
        entries: list[tuple[Path, ArtifactCoordinates]] = [
            (descriptor, coordinates.as_descriptor())
        ]
        entries.extend(
            (artifact.path, coordinates.with_file(artifact.extension, artifact.classifier))
            for artifact in artifacts
        )

        plan: list[tuple[Path, Path]] = []
        seen: dict[str, Path] = {}
        for source, target in entries:
            relative = handle.layout.path_of(target)
            if relative in seen:
                msg = (
                    f"Path collision under {handle.layout.name!r} layout: "
                    f"{seen[relative]} and {source} both map to {relative}"
                )
                raise DeployExecutionError(msg, path=relative)
            seen[relative] = source
            plan.append((source, handle.path_for(relative)))
        return plan

    @staticmethod
    def _place(staged: Path, destination: Path, backup_dir: Path) -> _Placement:
        backup: Path | None = None
        if destination.exists():
            backup_dir.mkdir(parents=True, exist_ok=True)
            backup = backup_dir / f"{len(list(backup_dir.iterdir())):03d}-{destination.name}"
            shutil.copy2(destination, backup)
        created_dirs: list[Path] = []
        parent = destination.parent
        while not parent.exists():
            created_dirs.append(parent)
            parent = parent.parent
        destination.parent.mkdir(parents=True, exist_ok=True)
        placement = _Placement(path=destination, backup=backup, created_dirs=tuple(created_dirs))
        try:
            shutil.move(staged, destination)
        except BaseException:
            placement.rollback()
            raise
        return placement

    def _render_metadata(
        self,
        coordinates: ArtifactCoordinates,
        existing: Path,
        target: Path,
    ) -> None:
        """Write artifact-level metadata to *target*, merging *existing* if present."""
        versions: list[str] = []
        if existing.is_file():
            try:
                root = ET.parse(existing).getroot()
            except ET.ParseError as exc:
                msg = f"Existing metadata {existing} is not well-formed XML: {exc}"
                raise DeployExecutionError(msg, path=str(existing)) from exc
            versions = [
                (node.text or "").strip()
                for node in root.iterfind("versioning/versions/version")
                if (node.text or "").strip()
            ]
        if coordinates.version not in versions:
            versions.append(coordinates.version)

        root = ET.Element("metadata")
        ET.SubElement(root, "groupId").text = coordinates.group_id
        ET.SubElement(root, "artifactId").text = coordinates.artifact_id
        versioning = ET.SubElement(root, "versioning")
        releases = [v for v in versions if not is_snapshot(v)]
        if releases:
            ET.SubElement(versioning, "release").text = max(releases, key=version_key)
        versions_node = ET.SubElement(versioning, "versions")
        for version in versions:
            ET.SubElement(versions_node, "version").text = version
        ET.SubElement(versioning, "lastUpdated").text = self._clock()

        ET.indent(root)
        ET.ElementTree(root).write(target, encoding="UTF-8", xml_declaration=True)
