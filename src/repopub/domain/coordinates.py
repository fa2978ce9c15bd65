"""Artifact coordinates and descriptor (POM) parsing.

Coordinates identify an artifact inside a repository: group, artifact,
version, plus an optional classifier and a file extension. The descriptor
supplies the first three; attached artifacts contribute classifier and
extension.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, replace
from pathlib import Path

# Packaging types whose primary artifact is not stored under the packaging name.
PACKAGING_EXTENSIONS: dict[str, str] = {
    "maven-plugin": "jar",
    "ejb": "jar",
    "ejb-client": "jar",
    "bundle": "jar",
    "java-source": "jar",
    "javadoc": "jar",
}

DESCRIPTOR_EXTENSION = "pom"
SNAPSHOT_SUFFIX = "-SNAPSHOT"

_VERSION_TOKEN = re.compile(r"\d+|[A-Za-z]+")


def is_snapshot(version: str) -> bool:
    return version.endswith(SNAPSHOT_SUFFIX)


def version_key(version: str) -> tuple[tuple[int, int, str], ...]:
    """Sort key ordering versions numerically, segment by segment.

    ``1.10`` sorts after ``1.9``, ``1.0.1`` after ``1.0``, and a qualified
    version such as ``1.0-beta`` before the plain ``1.0`` release.
    """
    tokens: list[tuple[int, int, str]] = []
    for token in _VERSION_TOKEN.findall(version):
        if token.isdigit():
            tokens.append((1, int(token), ""))
        else:
            tokens.append((-1, 0, token.lower()))
    tokens.append((0, 0, ""))
    return tuple(tokens)


@dataclass(frozen=True)
class ArtifactCoordinates:
    """Repository coordinates of a single file."""

    group_id: str
    artifact_id: str
    version: str
    extension: str = "jar"
    classifier: str | None = None

    def with_file(self, extension: str, classifier: str | None = None) -> ArtifactCoordinates:
        """Return coordinates for a sibling file of the same artifact version."""
        return replace(self, extension=extension, classifier=classifier or None)

    def as_descriptor(self) -> ArtifactCoordinates:
        return self.with_file(DESCRIPTOR_EXTENSION)


@dataclass(frozen=True)
class AttachedArtifact:
    """A binary output installed alongside the descriptor."""

    path: Path
    extension: str
    classifier: str | None = None

    @classmethod
    def from_path(cls, path: Path, classifier: str | None = None) -> AttachedArtifact:
        """Derive the extension from the file suffix (``.tar.gz`` stays whole)."""
        suffixes = path.suffixes
        if not suffixes:
            msg = f"Cannot derive an extension from {path.name!r}"
            raise ValueError(msg)
        if len(suffixes) >= 2 and suffixes[-2] == ".tar":
            extension = "tar" + suffixes[-1]
        else:
            extension = suffixes[-1]
        return cls(path=path, extension=extension.lstrip("."), classifier=classifier or None)


def _local(tag: str) -> str:
    """Strip an XML namespace from *tag*."""
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str) -> str | None:
    for child in element:
        if _local(child.tag) == name:
            text = (child.text or "").strip()
            return text or None
    return None


def _child(element: ET.Element, name: str) -> ET.Element | None:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def parse_descriptor(path: Path) -> ArtifactCoordinates:
    """Read coordinates of the primary artifact from a POM file.

    ``groupId`` and ``version`` fall back to the ``<parent>`` block when the
    project does not declare them itself. The extension follows
    ``<packaging>`` (``jar`` when absent).

    Raises:
        ValueError: If the file is not well-formed XML or lacks coordinates.
    """
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as exc:
        msg = f"Descriptor {path} is not well-formed XML: {exc}"
        raise ValueError(msg) from exc

    if _local(root.tag) != "project":
        msg = f"Descriptor {path} has root <{_local(root.tag)}>, expected <project>"
        raise ValueError(msg)

    parent = _child(root, "parent")
    group_id = _child_text(root, "groupId")
    version = _child_text(root, "version")
    if parent is not None:
        group_id = group_id or _child_text(parent, "groupId")
        version = version or _child_text(parent, "version")
    artifact_id = _child_text(root, "artifactId")

    required = (("groupId", group_id), ("artifactId", artifact_id), ("version", version))
    missing = [name for name, value in required if value is None]
    if missing:
        msg = f"Descriptor {path} is missing {', '.join(missing)}"
        raise ValueError(msg)

    packaging = _child_text(root, "packaging") or "jar"
    extension = PACKAGING_EXTENSIONS.get(packaging, packaging)

    assert group_id is not None and artifact_id is not None and version is not None
    return ArtifactCoordinates(
        group_id=group_id,
        artifact_id=artifact_id,
        version=version,
        extension=extension,
    )
