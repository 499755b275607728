"""Utility functions for layered-settings."""

import hashlib
import os
from pathlib import Path


def is_path_a_file(file_name: str) -> bool:
    """Check that a file name is a bare name rather than a path.

    Args:
        file_name: Candidate file name

    Returns:
        True if the name has no directory component

    Examples:
        >>> is_path_a_file("settings.yaml")
        True

        >>> is_path_a_file("sub/settings.yaml")
        False

        >>> is_path_a_file("..")
        False
    """
    if not file_name or file_name in (".", ".."):
        return False

    separators = {os.sep, "/"}
    if os.altsep:
        separators.add(os.altsep)

    return not any(separator in file_name for separator in separators)


def resolve_config_path(directory_path: str | Path, file_name: str) -> Path:
    """Combine a directory and file name into an absolute path.

    Symlinks are not resolved; the path is only made absolute and normalized.
    """
    return Path(os.path.abspath(os.path.join(directory_path, file_name)))


def lock_file_name(path: Path) -> str:
    """Name of the lock file guarding ``path``.

    The name depends only on the absolute path, so every process computes the
    same lock file for the same settings file.
    """
    digest = hashlib.sha256(os.path.normcase(str(path)).encode("utf-8")).hexdigest()
    return f"{digest}.lock"
