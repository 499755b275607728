"""Exceptions for layered-settings."""

from pathlib import Path
from typing import Any


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ConfigFileError(ConfigError):
    """Error reading or writing configuration file.

    Every failure during a locked load or save surfaces as this type. The
    original exception is kept as ``__cause__``.

    Attributes:
        path: Absolute path of the configuration file involved
    """

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path


class ConfigValidationError(ConfigError, ValueError):
    """Invalid settings file arguments or setting item content."""

    pass


class MachineWideSettingsError(ConfigError, PermissionError):
    """Attempt to modify a machine-wide settings file."""

    pass


class SectionNotFoundError(ConfigError, KeyError):
    """Section does not exist in the settings file."""

    def __init__(self, section_name: str):
        super().__init__(f"Section '{section_name}' does not exist")
        self.section_name = section_name

    def __str__(self) -> str:
        return self.args[0]


class ItemNotFoundError(ConfigError, KeyError):
    """Item does not exist in the given section."""

    def __init__(self, section_name: str, item: Any):
        super().__init__(f"Item {item!r} does not exist in section '{section_name}'")
        self.section_name = section_name
        self.item = item

    def __str__(self) -> str:
        return self.args[0]
