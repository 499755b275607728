"""YAML document storage for settings files."""

import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any
from typing import Protocol

import yaml

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """Loads and saves whole settings documents."""

    def load_or_create(self, path: Path, default_factory: Callable[[], dict[str, Any]]) -> dict[str, Any]: ...

    def save(self, document: dict[str, Any], path: Path) -> None: ...


class YamlDocumentStore:
    """Document store backed by YAML files.

    Missing and empty files load as the default document; nothing is written
    until ``save`` is called.
    """

    def load_or_create(self, path: Path, default_factory: Callable[[], dict[str, Any]]) -> dict[str, Any]:
        """Load the document at ``path`` or build the default one.

        Args:
            path: Path to YAML file
            default_factory: Builds the document used when the file is missing

        Returns:
            Parsed document

        Raises:
            yaml.YAMLError: If the file is not valid YAML
            OSError: If the file cannot be read
        """
        if not path.exists():
            logger.debug(f"No settings file at {path}, using default document")
            return default_factory()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        logger.debug(f"Loaded settings file {path}")
        return data if data else default_factory()

    def save(self, document: dict[str, Any], path: Path) -> None:
        """Write ``document`` to ``path``.

        The document is written to a temporary file in the same directory and
        moved over the target, so a failed write leaves the old content intact.

        Args:
            document: Document to write
            path: Path to YAML file
        """
        # Ensure directory exists
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(document, f, default_flow_style=False, sort_keys=False)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
