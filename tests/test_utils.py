"""Tests for utility functions."""

import os
from pathlib import Path

import pytest
from layered_settings.utils import is_path_a_file
from layered_settings.utils import lock_file_name
from layered_settings.utils import resolve_config_path


class TestIsPathAFile:
    """Test is_path_a_file function."""

    @pytest.mark.parametrize("name", ["settings.yaml", "NuGet.Config", ".hidden", "a..b"])
    def test_bare_names(self, name):
        assert is_path_a_file(name)

    @pytest.mark.parametrize("name", ["", ".", "..", "dir/settings.yaml", "/settings.yaml", "dir/"])
    def test_paths_rejected(self, name):
        assert not is_path_a_file(name)

    @pytest.mark.skipif(os.name != "nt", reason="backslash is a separator only on Windows")
    def test_backslash_rejected_on_windows(self):
        assert not is_path_a_file("dir\\settings.yaml")


class TestResolveConfigPath:
    """Test resolve_config_path function."""

    def test_absolute_directory(self, tmp_path):
        assert resolve_config_path(tmp_path, "settings.yaml") == tmp_path / "settings.yaml"

    def test_relative_directory(self):
        path = resolve_config_path("some/dir", "settings.yaml")
        assert path.is_absolute()
        assert path == Path.cwd() / "some" / "dir" / "settings.yaml"

    def test_normalizes_dot_segments(self, tmp_path):
        assert resolve_config_path(tmp_path / "a" / ".." / "b", "s.yaml") == tmp_path / "b" / "s.yaml"


class TestLockFileName:
    """Test lock_file_name function."""

    def test_stable_for_same_path(self, tmp_path):
        assert lock_file_name(tmp_path / "settings.yaml") == lock_file_name(tmp_path / "settings.yaml")

    def test_differs_per_path(self, tmp_path):
        assert lock_file_name(tmp_path / "a.yaml") != lock_file_name(tmp_path / "b.yaml")

    def test_is_plain_file_name(self, tmp_path):
        name = lock_file_name(tmp_path / "settings.yaml")
        assert name.endswith(".lock")
        assert is_path_a_file(name)
