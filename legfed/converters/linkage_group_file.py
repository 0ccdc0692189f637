"""
Linkage group file converter.

    TaxonID     3885
    Variety     G19833
    PMID        25555555
    #LG         Number  GeneticMap              Length
    PvLG01      1       BAT93_x_JALO_EEP558     120.5
"""

import logging
from typing import Optional, TextIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)


class LinkageGroupFileConverter(FileConverter):
    """Loads LinkageGroups and the GeneticMaps they belong to."""

    name = "linkage-group-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.genetic_map_map: dict[str, Item] = {}

    def process(self, fh: TextIO) -> None:
        taxon_id: Optional[str] = None
        variety: Optional[str] = None
        pmid: Optional[str] = None
        doi: Optional[str] = None

        for line in fh:
            if is_comment_or_blank(line):
                continue
            parts = split_line(line)
            if len(parts) < 2:
                logger.warning(f"Skipping short line in {self.current_file_name}: {line.strip()}")
                continue
            key = parts[0].strip().lower()
            value = parts[1].strip()

            if key == "taxonid":
                taxon_id = value
            elif key == "variety":
                variety = value
            elif key == "pmid":
                pmid = value
            elif key == "doi":
                doi = value
            else:
                if len(parts) < 3:
                    raise ConverterError(f"Linkage group line needs LG, number and map: {line.strip()}")
                organism = self.get_organism(taxon_id, variety) if taxon_id else None
                publication = self.get_publication(pmid=pmid, doi=doi)
                self.process_linkage_group(parts, organism, publication)

    def get_genetic_map(self, name: str, organism: Optional[Item], publication: Optional[Item]) -> Item:
        genetic_map = self.genetic_map_map.get(name)
        if genetic_map is None:
            genetic_map = self.create_item("GeneticMap")
            genetic_map.set_attribute("primaryIdentifier", name)
            if organism is not None:
                genetic_map.set_reference("organism", organism)
            self.genetic_map_map[name] = genetic_map
        if publication is not None:
            genetic_map.add_to_collection("publications", publication)
        return genetic_map

    def process_linkage_group(self, parts: list[str], organism: Optional[Item], publication: Optional[Item]) -> None:
        lg_id, number, gm_id = parts[0].strip(), parts[1].strip(), parts[2].strip()
        length = 0.0
        if len(parts) > 3 and parts[3].strip():
            length = float(parts[3])

        genetic_map = self.get_genetic_map(gm_id, organism, publication)

        linkage_group = self.create_item("LinkageGroup")
        linkage_group.set_attribute("primaryIdentifier", lg_id)
        linkage_group.set_attribute("number", number)
        if length > 0.0:
            linkage_group.set_attribute("length", length)
        linkage_group.set_reference("geneticMap", genetic_map)
        self.store(linkage_group)

        genetic_map.add_to_collection("linkageGroups", linkage_group)

    def close(self) -> None:
        logger.info(f"Storing {len(self.genetic_map_map)} GeneticMap items...")
        self.store_all(self.genetic_map_map.values())
