"""
SNP marker file converter: array SNP markers with their design sequences.

    TaxonID     3885
    ArrayName   BARCBean6K_3
    MarkerType  SNP
    PMID        23922345
    #marker     designSequence          alleles source  beadType  stepDescription  associatedGenes...
    ss715646001 ATTCG[A/G]TCCAT         A/G     BARC    0         BARC-PV-0001     Phvul.001G000100
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, TextIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)


@dataclass
class SNPMarkerRecord:
    """One SNP marker line. Columns after stepDescription name associated genes."""

    marker: str
    design_sequence: str
    alleles: Optional[str] = None
    source: Optional[str] = None
    bead_type: Optional[int] = None
    step_description: Optional[str] = None
    associated_genes: list[str] = field(default_factory=list)

    @classmethod
    def from_parts(cls, parts: list[str]) -> "SNPMarkerRecord":
        """
        Raises:
            ConverterError: if the design sequence is missing or beadType is not an integer
        """
        if len(parts) < 2 or not parts[0] or not parts[1]:
            raise ConverterError(f"SNP marker line needs marker and design sequence: {parts}")

        def single(i: int) -> Optional[str]:
            return parts[i] if len(parts) > i and parts[i] else None

        bead_type = single(4)
        try:
            bead_type = int(bead_type) if bead_type is not None else None
        except ValueError as e:
            raise ConverterError(f"Bad beadType '{parts[4]}' for marker {parts[0]}") from e

        return cls(
            marker=parts[0],
            design_sequence=parts[1],
            alleles=single(2),
            source=single(3),
            bead_type=bead_type,
            step_description=single(5),
            associated_genes=[gene for gene in parts[6:] if gene],
        )


class SNPMarkerFileConverter(FileConverter):
    name = "snp-marker-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.gene_map: dict[str, Item] = {}
        self.marker_count = 0

    def process(self, fh: TextIO) -> None:
        organism: Optional[Item] = None
        publication: Optional[Item] = None
        array_name: Optional[str] = None
        marker_type: Optional[str] = None

        for line in fh:
            if is_comment_or_blank(line):
                continue
            parts = split_line(line)
            key = parts[0].strip().lower()
            if key in ("taxonid", "arrayname", "markertype", "pmid"):
                if len(parts) < 2 or not parts[1].strip():
                    raise ConverterError(f"{parts[0]} has no value in {self.current_file_name}")
                value = parts[1].strip()
                if key == "taxonid":
                    organism = self.get_organism(value)
                elif key == "arrayname":
                    array_name = value
                elif key == "markertype":
                    marker_type = value
                else:
                    publication = self.get_publication(pmid=value)
                continue

            if organism is None:
                raise ConverterError(f"Marker organism not specified in {self.current_file_name}")
            record = SNPMarkerRecord.from_parts(parts)
            self.store_marker(record, organism, publication, array_name, marker_type)

    def store_marker(
        self,
        record: SNPMarkerRecord,
        organism: Item,
        publication: Optional[Item],
        array_name: Optional[str],
        marker_type: Optional[str],
    ) -> None:
        marker = self.create_item("GeneticMarker")
        marker.set_attribute("primaryIdentifier", record.marker)
        marker.set_attribute("designSequence", record.design_sequence)
        marker.set_reference("organism", organism)
        if marker_type:
            marker.set_attribute("type", marker_type)
        if array_name:
            marker.set_attribute("arrayName", array_name)
        if publication is not None:
            marker.set_reference("publication", publication)
        if record.alleles:
            marker.set_attribute("alleles", record.alleles)
        if record.source:
            marker.set_attribute("source", record.source)
        if record.bead_type is not None:
            marker.set_attribute("beadType", record.bead_type)
        if record.step_description:
            marker.set_attribute("stepDescription", record.step_description)
        for gene_id in record.associated_genes:
            marker.add_to_collection("associatedGenes", self.get_gene(gene_id))
        self.store(marker)
        self.marker_count += 1

    def get_gene(self, primary_identifier: str) -> Item:
        gene = self.gene_map.get(primary_identifier)
        if gene is None:
            gene = self.create_item("Gene")
            gene.set_attribute("primaryIdentifier", primary_identifier)
            self.store(gene)
            self.gene_map[primary_identifier] = gene
        return gene

    def close(self) -> None:
        logger.info(f"Stored {self.marker_count} SNP markers with {len(self.gene_map)} associated genes")
