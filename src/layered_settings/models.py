"""Data models for layered-settings.

A settings document is a single ``configuration`` root holding named
sections, each of which holds an ordered list of items:

    configuration:
      packageSources:
        - add:
            key: nuget.org
            value: https://api.nuget.org/v3/index.json
"""

import datetime
from collections.abc import Iterator
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from .exceptions import ConfigValidationError
from .exceptions import ItemNotFoundError
from .exceptions import SectionNotFoundError

ROOT_ELEMENT_NAME = "configuration"

# Attribute name under which child items are serialized
CHILD_ITEMS_KEY = "items"

# Scalar types yaml.safe_load produces; datetime.datetime is a datetime.date
_SCALAR_TYPES = (str, int, float, bool, datetime.date)


@dataclass
class SettingItem:
    """Single entry of a settings section.

    Items are matched by ``identity``: the element name plus the ``key``
    attribute, if any. Two items with the same identity are the same setting,
    possibly with different values.

    Attributes:
        name: Element name (e.g. "add", "clear")
        attributes: Ordered attribute mapping
        children: Nested items
    """

    name: str
    attributes: dict[str, Any] = field(default_factory=dict)
    children: list["SettingItem"] = field(default_factory=list)

    @property
    def key(self) -> Any:
        return self.attributes.get("key")

    @property
    def identity(self) -> tuple[str, Any]:
        return (self.name, self.key)

    def copy(self) -> "SettingItem":
        """Return a deep copy sharing no mutable state with this item."""
        return SettingItem(
            name=self.name,
            attributes=dict(self.attributes),
            children=[child.copy() for child in self.children],
        )

    def update_from(self, other: "SettingItem") -> None:
        """Replace attributes and children with copies of ``other``'s."""
        self.attributes = dict(other.attributes)
        self.children = [child.copy() for child in other.children]

    def validate(self) -> None:
        """Check that the item can be saved and loaded back unchanged.

        Raises:
            ConfigValidationError: If the name is empty, an attribute is not a
                scalar, or an attribute uses the reserved child items name
        """
        if not isinstance(self.name, str) or not self.name:
            raise ConfigValidationError(f"Setting item name must be a non-empty string, got {self.name!r}")

        for attr_name, value in self.attributes.items():
            if not isinstance(attr_name, str):
                raise ConfigValidationError(f"Attribute names of item '{self.name}' must be strings, got {attr_name!r}")
            if attr_name == CHILD_ITEMS_KEY:
                raise ConfigValidationError(
                    f"Attribute name '{CHILD_ITEMS_KEY}' of item '{self.name}' is reserved for child items"
                )
            if value is not None and not isinstance(value, _SCALAR_TYPES):
                raise ConfigValidationError(
                    f"Attribute '{attr_name}' of item '{self.name}' must be a scalar, got {value!r}"
                )

        for child in self.children:
            if not isinstance(child, SettingItem):
                raise ConfigValidationError(f"Children of item '{self.name}' must be setting items, got {child!r}")
            child.validate()

    # ===== Serialization =====

    def to_node(self) -> dict[str, Any]:
        body: dict[str, Any] = dict(self.attributes)
        if self.children:
            body[CHILD_ITEMS_KEY] = [child.to_node() for child in self.children]
        return {self.name: body}

    @classmethod
    def from_node(cls, node: Any) -> "SettingItem":
        """Build an item from its document node.

        Raises:
            ValueError: If the node does not have the item shape
        """
        if not isinstance(node, dict) or len(node) != 1:
            raise ValueError(f"Expected a single-key mapping for a setting item, got {node!r}")

        name, body = next(iter(node.items()))
        if not isinstance(name, str) or not name:
            raise ValueError(f"Setting item name must be a non-empty string, got {name!r}")
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise ValueError(f"Attributes of item '{name}' must be a mapping, got {body!r}")

        attributes: dict[str, Any] = {}
        children: list[SettingItem] = []
        for attr_name, value in body.items():
            if attr_name == CHILD_ITEMS_KEY:
                if not isinstance(value, list):
                    raise ValueError(f"'{CHILD_ITEMS_KEY}' of item '{name}' must be a list of items, got {value!r}")
                children = [cls.from_node(child) for child in value]
            else:
                attributes[str(attr_name)] = value

        item = cls(name=name, attributes=attributes, children=children)
        item.validate()
        return item


@dataclass
class SettingSection:
    """Named, ordered collection of setting items."""

    name: str
    items: list[SettingItem] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[SettingItem]:
        return iter(self.items)

    def is_empty(self) -> bool:
        return not self.items

    def find(self, identity: tuple[str, Any]) -> SettingItem | None:
        for item in self.items:
            if item.identity == identity:
                return item
        return None

    def get_item(self, item: SettingItem) -> SettingItem | None:
        """Get the item with the same identity as ``item``, if any."""
        return self.find(item.identity)

    def add_or_update(self, item: SettingItem) -> None:
        """Update the matching item in place, or append a copy of ``item``.

        Args:
            item: Item to add or update

        Raises:
            ConfigValidationError: If the item could not be saved and loaded back
        """
        item.validate()
        existing = self.get_item(item)
        if existing is not None:
            existing.update_from(item)
        else:
            self.items.append(item.copy())

    def remove(self, item: SettingItem) -> None:
        """Remove the item matching ``item`` by identity.

        Raises:
            ItemNotFoundError: If no such item exists
        """
        existing = self.get_item(item)
        if existing is None:
            raise ItemNotFoundError(self.name, item)
        self.items.remove(existing)

    def merge(self, other: "SettingSection") -> None:
        """Merge ``other`` into this section.

        Items with the same identity are replaced entirely by ``other``'s
        (keeping their position); all other items of ``other`` are appended.
        Only copies of ``other``'s items are stored.
        """
        for item in other.items:
            existing = self.get_item(item)
            if existing is not None:
                self.items[self.items.index(existing)] = item.copy()
            else:
                self.items.append(item.copy())

    def copy(self) -> "SettingSection":
        return SettingSection(name=self.name, items=[item.copy() for item in self.items])


class ConfigurationRoot:
    """In-memory ``configuration`` root of one settings document."""

    def __init__(self, sections: dict[str, SettingSection] | None = None):
        self.sections: dict[str, SettingSection] = sections if sections is not None else {}

    def is_empty(self) -> bool:
        return not self.sections

    def get_section(self, name: str) -> SettingSection | None:
        return self.sections.get(name)

    def add_or_update(self, section_name: str, item: SettingItem) -> None:
        """Add or update an item, creating its section if needed.

        The item is validated before anything changes.

        Raises:
            ConfigValidationError: If the section name or the item is invalid
        """
        if not isinstance(section_name, str):
            raise ConfigValidationError(f"Section name must be a string, got {section_name!r}")
        item.validate()

        section = self.sections.get(section_name)
        if section is None:
            section = SettingSection(section_name)
            self.sections[section_name] = section
        section.add_or_update(item)

    def remove(self, section_name: str, item: SettingItem) -> None:
        """Remove an item, dropping its section once the section is empty.

        Raises:
            SectionNotFoundError: If the section does not exist
            ItemNotFoundError: If the item does not exist in the section
        """
        section = self.sections.get(section_name)
        if section is None:
            raise SectionNotFoundError(section_name)

        section.remove(item)

        if section.is_empty():
            del self.sections[section_name]

    def merge_sections_into(self, target: dict[str, SettingSection]) -> None:
        """Fold copies of this root's sections into ``target``.

        Args:
            target: Aggregate mapping of section name to section, updated in place
        """
        for name, section in self.sections.items():
            if name in target:
                target[name].merge(section)
            else:
                target[name] = section.copy()

    # ===== Serialization =====

    def to_document(self) -> dict[str, Any]:
        return {
            ROOT_ELEMENT_NAME: {
                name: [item.to_node() for item in section.items] for name, section in self.sections.items()
            }
        }

    @classmethod
    def from_document(cls, document: Any) -> "ConfigurationRoot":
        """Build the root from a parsed document.

        Raises:
            ValueError: If the document does not have the settings layout
        """
        if not isinstance(document, dict) or ROOT_ELEMENT_NAME not in document:
            raise ValueError(f"Root element must be a mapping with a '{ROOT_ELEMENT_NAME}' key")

        body = document[ROOT_ELEMENT_NAME]
        if body is None:
            return cls()
        if not isinstance(body, dict):
            raise ValueError(f"'{ROOT_ELEMENT_NAME}' must be a mapping of sections, got {body!r}")

        sections: dict[str, SettingSection] = {}
        for name, nodes in body.items():
            if not isinstance(name, str):
                raise ValueError(f"Section name must be a string, got {name!r}")
            if nodes is None:
                nodes = []
            if not isinstance(nodes, list):
                raise ValueError(f"Section '{name}' must be a list of items, got {nodes!r}")
            sections[name] = SettingSection(name, [SettingItem.from_node(node) for node in nodes])

        return cls(sections)
