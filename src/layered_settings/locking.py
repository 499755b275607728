"""Cross-process file locking for settings files."""

import logging
import os
import tempfile
from collections.abc import Callable
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator
from typing import Protocol
from typing import TypeVar

if os.name == "nt":  # pragma: no cover - platform specific
    import msvcrt
else:  # pragma: no cover - platform specific
    import fcntl

from .utils import lock_file_name

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_LOCK_DIRECTORY_NAME = "layered-settings-locks"


class FileLock(Protocol):
    """Runs an action with exclusive access to a file path."""

    def execute_with_file_lock(self, path: Path, action: Callable[[], T]) -> T: ...


class InterProcessFileLock:
    """Exclusive advisory lock shared by every process on the machine.

    The lock is taken on a separate lock file in ``lock_directory`` (by default
    a directory under the system temp dir), so locking never creates anything
    next to the settings file itself. Acquisition blocks until the lock is
    available.

    Args:
        lock_directory: Directory holding the lock files
    """

    def __init__(self, lock_directory: Path | None = None):
        if lock_directory is None:
            lock_directory = Path(tempfile.gettempdir()) / DEFAULT_LOCK_DIRECTORY_NAME
        self.lock_directory = lock_directory

    def lock_path_for(self, path: Path) -> Path:
        return self.lock_directory / lock_file_name(path)

    def execute_with_file_lock(self, path: Path, action: Callable[[], T]) -> T:
        """Run ``action`` while holding the lock for ``path``.

        The lock is released whether ``action`` returns or raises.

        Args:
            path: Absolute path of the file to guard
            action: Callable run under the lock

        Returns:
            Whatever ``action`` returns
        """
        with self._locked(path):
            return action()

    @contextmanager
    def _locked(self, path: Path) -> Iterator[None]:
        lock_path = self.lock_path_for(path)
        lock_path.parent.mkdir(parents=True, exist_ok=True)

        with lock_path.open("a") as fh:
            if os.name == "nt":  # pragma: no cover - platform specific
                fh.seek(0)
                msvcrt.locking(fh.fileno(), msvcrt.LK_LOCK, 1)
            else:  # pragma: no cover - platform specific
                fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
            logger.debug(f"Acquired lock {lock_path} for {path}")
            try:
                yield
            finally:
                if os.name == "nt":  # pragma: no cover - platform specific
                    fh.seek(0)
                    msvcrt.locking(fh.fileno(), msvcrt.LK_UNLCK, 1)
                else:  # pragma: no cover - platform specific
                    fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
                logger.debug(f"Released lock {lock_path} for {path}")
