"""
Strain file converter.

    TaxonID     3885
    #identifier origin  comment
    G19833      Peru    Andean landrace
"""

import logging
from typing import Optional, TextIO

from legfed.converters.base import FileConverter
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)


class StrainFileConverter(FileConverter):
    """Loads Strains keyed by identifier."""

    name = "strain-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.identifiers: set[str] = set()

    def process(self, fh: TextIO) -> None:
        organism: Optional[Item] = None
        for line in fh:
            if is_comment_or_blank(line):
                continue
            parts = split_line(line)
            if parts[0].lower() == "taxonid" and len(parts) > 1:
                organism = self.get_organism(parts[1].strip())
                continue

            identifier = parts[0]
            if identifier in self.identifiers:
                continue
            strain = self.create_item("Strain")
            strain.set_attribute("identifier", identifier)
            if organism is not None:
                strain.set_reference("organism", organism)
            if len(parts) > 1 and parts[1]:
                strain.set_attribute("origin", parts[1])
            if len(parts) > 2 and parts[2]:
                strain.set_attribute("comment", parts[2])
            self.store(strain)
            self.identifiers.add(identifier)

    def close(self) -> None:
        logger.info(f"Stored {len(self.identifiers)} strains")
