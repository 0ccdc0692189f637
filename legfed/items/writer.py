"""
Item writers: the write-only sink that converters store Items into.

XmlItemWriter streams the InterMine full-XML items format, one <item>
element per stored Item. MemoryItemWriter keeps the Items in memory and is
used for dry runs and tests.
"""

import logging
from collections import Counter
from pathlib import Path
from typing import TextIO
from xml.etree.ElementTree import Element, SubElement, tostring

from legfed.items.item import Item

logger = logging.getLogger(__name__)


class ItemWriter:
    """Base sink. Subclasses implement write()."""

    def __init__(self):
        self.counts: Counter = Counter()

    def store(self, item: Item) -> None:
        self.write(item)
        self.counts[item.class_name] += 1

    def write(self, item: Item) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def __enter__(self):
        return self

    def discard(self) -> None:
        """Drop whatever was written so far. Called when a conversion fails."""
        self.close()

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
        else:
            self.discard()
        return False


class MemoryItemWriter(ItemWriter):
    """Keeps stored Items in a list, in store order."""

    def __init__(self):
        super().__init__()
        self.items: list[Item] = []

    def write(self, item: Item) -> None:
        self.items.append(item)

    def get_items(self, class_name: str) -> list[Item]:
        return [item for item in self.items if item.class_name == class_name]

    def get_item(self, identifier: str) -> Item | None:
        for item in self.items:
            if item.identifier == identifier:
                return item
        return None


def item_to_element(item: Item) -> Element:
    """Render an Item as an InterMine <item> element."""
    element = Element("item", {"id": item.identifier, "class": item.class_name, "implements": ""})
    for name, value in item.attributes.items():
        SubElement(element, "attribute", {"name": name, "value": value})
    for name, ref_id in item.references.items():
        SubElement(element, "reference", {"name": name, "ref_id": ref_id})
    for name, ref_ids in item.collections.items():
        if not ref_ids:
            continue
        collection = SubElement(element, "collection", {"name": name})
        for ref_id in ref_ids:
            SubElement(collection, "reference", {"ref_id": ref_id})
    return element


class XmlItemWriter(ItemWriter):
    """
    Streams Items to an InterMine items XML file.

    A path output is written to "<name>.part" beside it and renamed into
    place on close(), so a failed run never leaves a complete-looking
    items file behind.
    """

    def __init__(self, output: Path | TextIO):
        super().__init__()
        self.path = None
        self._part_path = None
        if isinstance(output, (str, Path)):
            self.path = Path(output)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._part_path = self.path.with_name(self.path.name + ".part")
            self._fh = open(self._part_path, "w", encoding="utf-8")
            self._owns_fh = True
        else:
            self._fh = output
            self._owns_fh = False
        self._fh.write("<items>\n")
        self._closed = False

    def write(self, item: Item) -> None:
        self._fh.write(tostring(item_to_element(item), encoding="unicode"))
        self._fh.write("\n")

    def close(self) -> None:
        if self._closed:
            return
        self._fh.write("</items>\n")
        if self._owns_fh:
            self._fh.close()
            self._part_path.replace(self.path)
        else:
            self._fh.flush()
        self._closed = True
        logger.info(f"Wrote {self.total} items")

    def discard(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_fh:
            self._fh.close()
            self._part_path.unlink(missing_ok=True)
            logger.warning(f"Discarded partial items file {self.path}")
        else:
            # the stream is not ours to remove; leave it unterminated
            self._fh.flush()
            logger.warning(f"Conversion failed after {self.total} items; output is incomplete")
