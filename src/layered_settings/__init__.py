"""layered-settings: Chained settings files with locked persistence.

This library provides the mechanism for one settings document on disk and for
chaining several of them, from the most specific directory up to machine-wide
files, so that closer files override more distant ones:
- Load-or-create of a settings file under a cross-process file lock
- Section/item mutation with dirty tracking
- Merging the sections of a whole chain into one aggregate
- Saving changes atomically under the same lock

Applications discover the settings files and decide their order. The library
provides reading, writing and merging.

Public API:
    SettingsFile: One settings document on disk
    connect_settings_files: Link settings files into an override chain
    merge_settings_chain: Link settings files and merge all their sections
    SettingItem, SettingSection, ConfigurationRoot: In-memory document tree
    YamlDocumentStore, InterProcessFileLock: Default storage and lock capabilities
    ConfigError, ConfigFileError, ConfigValidationError, MachineWideSettingsError,
    SectionNotFoundError, ItemNotFoundError: Exception types

Example:
    ```python
    from layered_settings import SettingItem, SettingsFile, merge_settings_chain

    # Most authoritative first
    files = [
        SettingsFile("/work/repo"),
        SettingsFile("/home/me/.config/app"),
        SettingsFile("/etc/app", is_machine_wide=True),
    ]

    files[0].add_or_update("packageSources", SettingItem("add", {"key": "local", "value": "/feeds"}))
    files[0].save_to_disk()

    sections = merge_settings_chain(files)
    ```
"""

from .document import DocumentStore
from .document import YamlDocumentStore
from .exceptions import ConfigError
from .exceptions import ConfigFileError
from .exceptions import ConfigValidationError
from .exceptions import ItemNotFoundError
from .exceptions import MachineWideSettingsError
from .exceptions import SectionNotFoundError
from .locking import FileLock
from .locking import InterProcessFileLock
from .models import ConfigurationRoot
from .models import SettingItem
from .models import SettingSection
from .settings_file import DEFAULT_SETTINGS_FILE_NAME
from .settings_file import SettingsFile
from .settings_file import connect_settings_files
from .settings_file import merge_settings_chain

__version__ = "0.1.0"

__all__ = [
    "SettingsFile",
    "connect_settings_files",
    "merge_settings_chain",
    "DEFAULT_SETTINGS_FILE_NAME",
    "SettingItem",
    "SettingSection",
    "ConfigurationRoot",
    "DocumentStore",
    "YamlDocumentStore",
    "FileLock",
    "InterProcessFileLock",
    "ConfigError",
    "ConfigFileError",
    "ConfigValidationError",
    "MachineWideSettingsError",
    "SectionNotFoundError",
    "ItemNotFoundError",
]
