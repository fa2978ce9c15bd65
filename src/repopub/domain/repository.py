"""LocalRepositoryHandle — the resolved publish target."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlparse

from repopub.domain.layout import LayoutStrategy
from repopub.errors import ConfigurationError

LOCAL_REPOSITORY_ID = "local"


@dataclass(frozen=True)
class LocalRepositoryHandle:
    """A filesystem repository: symbolic name, location string, and layout.

    ``location`` is kept exactly as supplied. :attr:`root` converts it to a
    filesystem path, accepting ``file:`` URIs as well as plain paths.
    """

    location: str
    layout: LayoutStrategy
    name: str = LOCAL_REPOSITORY_ID

    @property
    def root(self) -> Path:
        return location_to_path(self.location)

    def path_for(self, relative: str) -> Path:
        return self.root.joinpath(*relative.split("/"))


def location_to_path(location: str) -> Path:
    """Convert a path string or ``file:`` URI into a :class:`Path`.

    Raises:
        ConfigurationError: If a ``file:`` URI names a host other than ``localhost``.
    """
    if location.startswith("file:"):
        parsed = urlparse(location)
        if parsed.netloc not in ("", "localhost"):
            msg = f"Repository URI {location!r} names a remote host {parsed.netloc!r}"
            raise ConfigurationError(msg, location=location)
        return Path(unquote(parsed.path)).expanduser()
    return Path(location).expanduser()
