"""
InterMine Item model.

An Item is a typed bag of attributes (string values), references (the
identifier of one other Item) and collections (ordered identifiers of many
other Items). Identifiers are opaque strings of the form
"<class index>_<counter>", unique within a converter run.
"""

from typing import Iterable, Optional, Union

from legfed.core.exceptions import ItemError


class Item:
    """A single InterMine item."""

    def __init__(self, class_name: str, identifier: str):
        self.class_name = class_name
        self.identifier = identifier
        self.attributes: dict[str, str] = {}
        self.references: dict[str, str] = {}
        self.collections: dict[str, list[str]] = {}

    def __repr__(self) -> str:
        return f"Item({self.class_name}, {self.identifier})"

    def set_attribute(self, name: str, value) -> None:
        """
        Set an attribute value.

        Raises:
            ItemError: if the value is None or an empty string
        """
        if value is None:
            raise ItemError(f"{self.class_name}.{name}: value cannot be null")
        value = str(value)
        if value == "":
            raise ItemError(f"{self.class_name}.{name}: value cannot be empty")
        self.attributes[name] = value

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def set_reference(self, name: str, target: Union["Item", str]) -> None:
        self.references[name] = _ref_id(target)

    def get_reference(self, name: str) -> Optional[str]:
        return self.references.get(name)

    def add_to_collection(self, name: str, target: Union["Item", str]) -> None:
        """Add an item to a collection; an identifier is only listed once."""
        ref_id = _ref_id(target)
        members = self.collections.setdefault(name, [])
        if ref_id not in members:
            members.append(ref_id)

    def get_collection(self, name: str) -> list[str]:
        return list(self.collections.get(name, []))


def _ref_id(target: Union[Item, str]) -> str:
    if isinstance(target, Item):
        return target.identifier
    if not target:
        raise ItemError("reference target cannot be null or empty")
    return target


class ItemFactory:
    """Creates Items with run-unique identifiers."""

    def __init__(self):
        self._class_index: dict[str, int] = {}
        self._counter = 0

    def make_item(self, class_name: str) -> Item:
        if class_name not in self._class_index:
            self._class_index[class_name] = len(self._class_index)
        self._counter += 1
        return Item(class_name, f"{self._class_index[class_name]}_{self._counter}")


class ItemMap:
    """
    Lookup helper over a set of Items.

    Finds items by primaryIdentifier, secondaryIdentifier or chadoFeatureId
    and resolves the references and collections of an item back to Items.
    """

    def __init__(self, items: Iterable[Item] = ()):
        self._items: dict[str, Item] = {}
        for item in items:
            self.add(item)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._items

    def add(self, item: Item) -> None:
        self._items[item.identifier] = item

    def get(self, identifier: str) -> Optional[Item]:
        return self._items.get(identifier)

    def values(self) -> list[Item]:
        return list(self._items.values())

    def _find(self, attribute: str, value: str, class_name: str = None) -> Optional[Item]:
        for item in self._items.values():
            if class_name and item.class_name != class_name:
                continue
            if item.get_attribute(attribute) == value:
                return item
        return None

    def get_by_primary_identifier(self, value: str, class_name: str = None) -> Optional[Item]:
        return self._find("primaryIdentifier", value, class_name)

    def get_by_secondary_identifier(self, value: str, class_name: str = None) -> Optional[Item]:
        return self._find("secondaryIdentifier", value, class_name)

    def get_by_chado_feature_id(self, feature_id: int, class_name: str = None) -> Optional[Item]:
        return self._find("chadoFeatureId", str(feature_id), class_name)

    def get_reference_item(self, item: Item, name: str) -> Optional[Item]:
        ref_id = item.get_reference(name)
        return self._items.get(ref_id) if ref_id else None

    def get_collection_items(self, item: Item, name: str) -> list[Item]:
        return [self._items[ref_id] for ref_id in item.get_collection(name) if ref_id in self._items]
