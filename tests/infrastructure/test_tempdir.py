"""Tests for the temporary-directory provider."""

from __future__ import annotations

from pathlib import Path

import pytest

from repopub.infrastructure.tempdir import TemporaryDirectoryProvider


class TestTemporaryDirectoryProvider:
    def test_acquire_creates_directory_under_base(self, tmp_path: Path) -> None:
        provider = TemporaryDirectoryProvider(tmp_path / "base")
        directory = provider.acquire()
        assert directory.is_dir()
        assert directory.parent == tmp_path / "base"
        assert directory.name.startswith("repopub-")

    def test_release_removes_contents(self, tmp_path: Path) -> None:
        provider = TemporaryDirectoryProvider(tmp_path)
        directory = provider.acquire()
        (directory / "nested").mkdir()
        (directory / "nested" / "file.txt").write_text("x")
        provider.release(directory)
        assert not directory.exists()

    def test_each_acquire_is_distinct(self, tmp_path: Path) -> None:
        provider = TemporaryDirectoryProvider(tmp_path)
        assert provider.acquire() != provider.acquire()

    def test_release_of_missing_directory_raises(self, tmp_path: Path) -> None:
        provider = TemporaryDirectoryProvider(tmp_path)
        with pytest.raises(FileNotFoundError):
            provider.release(tmp_path / "never-acquired")
