"""Temporary working directories scoped to a single publish."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class TempDirProvider(Protocol):
    """Acquire/release boundary for staging directories."""

    def acquire(self) -> Path: ...

    def release(self, directory: Path) -> None: ...


class TemporaryDirectoryProvider:
    """Creates ``repopub-*`` directories under *base_dir* (system temp by default)."""

    def __init__(self, base_dir: Path | None = None) -> None:
        self._base_dir = base_dir

    def acquire(self) -> Path:
        if self._base_dir is not None:
            self._base_dir.mkdir(parents=True, exist_ok=True)
        directory = Path(tempfile.mkdtemp(prefix="repopub-", dir=self._base_dir))
        logger.debug("Acquired staging directory %s", directory)
        return directory

    def release(self, directory: Path) -> None:
        shutil.rmtree(directory)
        logger.debug("Released staging directory %s", directory)
