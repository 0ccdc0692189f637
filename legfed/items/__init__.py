"""
InterMine items.

Modules:
- item: Item, ItemFactory and the ItemMap lookup helper
- writer: ItemWriter sinks (items XML and in-memory)
"""

from legfed.items.item import Item, ItemFactory, ItemMap
from legfed.items.writer import ItemWriter, MemoryItemWriter, XmlItemWriter

__all__ = [
    "Item",
    "ItemFactory",
    "ItemMap",
    "ItemWriter",
    "MemoryItemWriter",
    "XmlItemWriter",
]
