"""
Organism file converter.

Key/value lines describe one Organism and its Strains:

    organism.taxonId            3885
    organism.genus              Phaseolus
    organism.species            vulgaris
    strain.1.primaryIdentifier  G19833
    strain.1.origin             Peru
    strain.2.primaryIdentifier  BAT93
"""

import logging
from typing import Optional, TextIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.item import Item
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)


class OrganismFileConverter(FileConverter):
    """Loads an Organism and its Strains from organism.* / strain.N.* keys."""

    name = "organism-file"

    def process(self, fh: TextIO) -> None:
        organism: Optional[Item] = None
        strains: dict[int, Item] = {}

        for line in fh:
            if is_comment_or_blank(line):
                continue
            parts = split_line(line)
            if len(parts) < 2:
                logger.warning(f"Skipping line without a value: {line.strip()}")
                continue
            record = parts[0].strip().split(".")
            value = parts[1].strip()

            if record[0] == "organism" and len(record) == 2:
                if organism is None:
                    organism = self.create_item("Organism")
                organism.set_attribute(record[1], value)
            elif record[0] == "strain" and len(record) == 3:
                if organism is None:
                    raise ConverterError(f"strain.* line before any organism.* line in {self.current_file_name}")
                try:
                    num = int(record[1])
                except ValueError as e:
                    raise ConverterError(f"Bad strain number in '{parts[0]}'") from e
                strain = strains.get(num)
                if strain is None:
                    strain = self.create_item("Strain")
                    strain.set_reference("organism", organism)
                    strains[num] = strain
                strain.set_attribute(record[2], value)
            else:
                logger.warning(f"Unrecognised key {parts[0]} in {self.current_file_name}")

        if organism is None:
            raise ConverterError(f"No organism.* lines found in {self.current_file_name}")
        self.store(organism)
        self.store_all(strains.values())
        logger.info(f"Stored organism with {len(strains)} strains")
