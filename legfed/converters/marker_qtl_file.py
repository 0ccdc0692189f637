"""
Marker-QTL file converter.

    TaxonID   3847
    #Marker   QTL                 Phenotype
    Satt423   Seed protein 1-1    seed protein
"""

import logging
from typing import Optional, TextIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)


class MarkerQTLFileConverter(FileConverter):
    """Links GeneticMarkers and QTLs both ways."""

    name = "marker-qtl-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.marker_map: dict[str, Item] = {}
        self.qtl_map: dict[str, Item] = {}
        self.phenotype_map: dict[str, Item] = {}

    def process(self, fh: TextIO) -> None:
        organism: Optional[Item] = None
        for line in fh:
            if is_comment_or_blank(line):
                continue
            parts = split_line(line)
            if parts[0].lower() == "taxonid":
                organism = self.get_organism(parts[1].strip())
                continue
            if organism is None:
                raise ConverterError("Organism not set: supply TaxonID in header.")
            if len(parts) < 2:
                raise ConverterError(f"Marker-QTL line needs marker and QTL: {line.strip()}")
            phenotype_name = parts[2] if len(parts) > 2 and parts[2] else None
            self.link(parts[0], parts[1], phenotype_name, organism)

    def get_phenotype(self, name: str) -> Item:
        phenotype = self.phenotype_map.get(name)
        if phenotype is None:
            phenotype = self.create_item("Phenotype")
            phenotype.set_attribute("name", name)
            self.store(phenotype)
            self.phenotype_map[name] = phenotype
            logger.info(f"Stored phenotype {name}")
        return phenotype

    def link(self, marker_id: str, qtl_id: str, phenotype_name: Optional[str], organism: Item) -> None:
        marker = self.marker_map.get(marker_id)
        if marker is None:
            marker = self.create_item("GeneticMarker")
            marker.set_attribute("primaryIdentifier", marker_id)
            marker.set_reference("organism", organism)
            self.marker_map[marker_id] = marker

        phenotype = self.get_phenotype(phenotype_name) if phenotype_name else None

        qtl = self.qtl_map.get(qtl_id)
        if qtl is None:
            qtl = self.create_item("QTL")
            qtl.set_attribute("primaryIdentifier", qtl_id)
            qtl.set_reference("organism", organism)
            if phenotype is not None:
                qtl.set_reference("phenotype", phenotype)
            self.qtl_map[qtl_id] = qtl

        marker.add_to_collection("QTLs", qtl)
        qtl.add_to_collection("markers", marker)

    def close(self) -> None:
        logger.info(f"Storing {len(self.marker_map)} GeneticMarker items...")
        self.store_all(self.marker_map.values())
        logger.info(f"Storing {len(self.qtl_map)} QTL items...")
        self.store_all(self.qtl_map.values())
