"""Settings file: one settings document in a chain of overrides."""

import logging
from collections.abc import Callable
from collections.abc import Sequence
from pathlib import Path
from typing import Any
from typing import TypeVar

import yaml

from .document import DocumentStore
from .document import YamlDocumentStore
from .exceptions import ConfigError
from .exceptions import ConfigFileError
from .exceptions import ConfigValidationError
from .exceptions import MachineWideSettingsError
from .locking import FileLock
from .locking import InterProcessFileLock
from .models import ConfigurationRoot
from .models import SettingItem
from .models import SettingSection
from .utils import is_path_a_file
from .utils import resolve_config_path

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SETTINGS_FILE_NAME = "settings.yaml"


class SettingsFile:
    """One settings document on disk.

    The document is loaded (or a default one built) when the instance is
    created, while holding the exclusive lock for its path. Changes stay in
    memory until ``save_to_disk`` is called.

    Settings files are chained through ``next`` by ``connect_settings_files``.
    Machine-wide files are read-only.

    Args:
        directory_path: Directory holding the settings file
        file_name: Bare name of the settings file
        is_machine_wide: Whether the file is a read-only machine-wide file
        store: Document store used for loading and saving
        file_lock: Lock serializing disk access to the file
    """

    def __init__(
        self,
        directory_path: str | Path,
        file_name: str = DEFAULT_SETTINGS_FILE_NAME,
        is_machine_wide: bool = False,
        *,
        store: DocumentStore | None = None,
        file_lock: FileLock | None = None,
    ):
        if not directory_path:
            raise ConfigValidationError("directory_path cannot be None or empty")
        if not file_name:
            raise ConfigValidationError("file_name cannot be None or empty")
        if not is_path_a_file(file_name):
            raise ConfigValidationError(f"file_name must be a file name, not a path: {file_name!r}")

        self.directory_path = Path(directory_path)
        self.file_name = file_name
        self.is_dirty = False
        self._is_machine_wide = is_machine_wide
        self._next: SettingsFile | None = None
        self._config_file_path = resolve_config_path(directory_path, file_name)
        self._store: DocumentStore = store if store is not None else YamlDocumentStore()
        self._file_lock: FileLock = file_lock if file_lock is not None else InterProcessFileLock()

        self._root: ConfigurationRoot = self._execute_synchronized(
            lambda: ConfigurationRoot.from_document(
                self._store.load_or_create(self.config_file_path, self._create_default_document)
            )
        )

    def __repr__(self) -> str:
        return f"SettingsFile({str(self.config_file_path)!r}, is_machine_wide={self._is_machine_wide})"

    @property
    def config_file_path(self) -> Path:
        """Absolute path of the settings file."""
        return self._config_file_path

    @property
    def is_machine_wide(self) -> bool:
        return self._is_machine_wide

    @property
    def next(self) -> "SettingsFile | None":
        """Next settings file to read in the hierarchy."""
        return self._next

    def set_next_file(self, settings_file: "SettingsFile | None") -> None:
        self._next = settings_file

    # ===== Sections =====

    def get_section(self, section_name: str) -> SettingSection | None:
        """Get a section of this file.

        Only this file is searched, not the files linked through ``next``.

        Args:
            section_name: Name of the section

        Returns:
            Copy of the section, or None if the file has no such section
        """
        section = self._root.get_section(section_name)
        return section.copy() if section is not None else None

    def try_get_section(self, section_name: str) -> tuple[bool, SettingSection | None]:
        section = self.get_section(section_name)
        return section is not None, section

    def add_or_update(self, section_name: str, item: SettingItem) -> None:
        """Add ``item`` to a section, or update the item with the same identity.

        The section is created if it does not exist.

        Args:
            section_name: Section receiving the item
            item: Item to add or update

        Raises:
            MachineWideSettingsError: If this is a machine-wide file
            ConfigValidationError: If the item could not be saved and loaded back
        """
        self._ensure_editable(section_name)
        self._root.add_or_update(section_name, item)
        self.is_dirty = True

    def remove(self, section_name: str, item: SettingItem) -> None:
        """Remove ``item`` from a section.

        If it was the last item of the section, the section is removed too.

        Args:
            section_name: Section holding the item
            item: Item to remove, matched by identity

        Raises:
            MachineWideSettingsError: If this is a machine-wide file
            SectionNotFoundError: If the section does not exist
            ItemNotFoundError: If the item does not exist in the section
        """
        self._ensure_editable(section_name)
        self._root.remove(section_name, item)
        self.is_dirty = True

    def is_empty(self) -> bool:
        return self._root.is_empty()

    # ===== Merging =====

    def merge_sections_into(self, sections: dict[str, SettingSection]) -> None:
        """Merge the sections of this file and of every file after it.

        Files are folded in chain order, so a file later in the walk wins
        over an earlier one for items with the same identity. Start from the
        least authoritative file of a chain built by ``connect_settings_files``.

        The merged sections are copies; no settings file is modified.

        Args:
            sections: Mapping of section name to merged section, updated in place

        Raises:
            ConfigError: If the chain loops back on itself
        """
        visited: set[int] = set()
        current: SettingsFile | None = self
        while current is not None:
            if id(current) in visited:
                raise ConfigError(f"Settings chain contains a cycle at {current.config_file_path}")
            visited.add(id(current))

            current._root.merge_sections_into(sections)
            current = current.next

    # ===== Persistence =====

    def save_to_disk(self) -> None:
        """Write in-memory changes to disk, if there are any.

        Raises:
            ConfigFileError: If the file cannot be written
        """
        if not self.is_dirty:
            logger.debug(f"No changes to save for {self.config_file_path}")
            return

        document = self._root.to_document()
        self._execute_synchronized(lambda: self._store.save(document, self.config_file_path))

        self.is_dirty = False
        logger.info(f"Saved settings to {self.config_file_path}")

    # ===== Private Helpers =====

    def _ensure_editable(self, section_name: str) -> None:
        if self._is_machine_wide:
            raise MachineWideSettingsError(
                f"Cannot modify section '{section_name}' of machine-wide settings file {self.config_file_path}"
            )

    def _create_default_document(self) -> dict[str, Any]:
        return ConfigurationRoot().to_document()

    def _execute_synchronized(self, io_operation: Callable[[], T]) -> T:
        """Run ``io_operation`` under the file lock.

        Every failure, including failure to take the lock, is re-raised as
        ConfigFileError.
        """
        return self._translate_errors(
            lambda: self._file_lock.execute_with_file_lock(self.config_file_path, io_operation)
        )

    def _translate_errors(self, io_operation: Callable[[], T]) -> T:
        path = self.config_file_path
        try:
            return io_operation()
        except ConfigFileError:
            raise
        except PermissionError as e:
            raise ConfigFileError(f"Access denied to configuration file at {path}: {e}", path=path) from e
        except yaml.YAMLError as e:
            raise ConfigFileError(f"Configuration file at {path} is not valid YAML: {e}", path=path) from e
        except ValueError as e:
            raise ConfigFileError(f"Configuration file at {path} is invalid: {e}", path=path) from e
        except Exception as e:
            raise ConfigFileError(f"Could not read or write configuration file at {path}: {e}", path=path) from e


def connect_settings_files(settings_files: Sequence[SettingsFile]) -> None:
    """Chain settings files into a linked list.

    ``settings_files[0]`` is the most authoritative file. Each later file gets
    the file before it as ``next``, so walking ``next`` from the last file
    moves toward the most authoritative one. Empty and single-file lists are
    left untouched.

    Args:
        settings_files: Settings files, most authoritative first
    """
    for i in range(1, len(settings_files)):
        settings_files[i].set_next_file(settings_files[i - 1])


def merge_settings_chain(settings_files: Sequence[SettingsFile]) -> dict[str, SettingSection]:
    """Chain settings files and merge all of their sections.

    Args:
        settings_files: Settings files, most authoritative first

    Returns:
        New mapping of section name to merged section
    """
    sections: dict[str, SettingSection] = {}
    if not settings_files:
        return sections

    connect_settings_files(settings_files)
    settings_files[-1].merge_sections_into(sections)
    return sections
