"""
Marker chromosome file converter.

    TaxonID     3885
    Strain      G19833
    #ID         SecondaryID  Type  Chromosome              Start   End     Motif
    BM140       BM140-1      SSR   phavu.G19833.gnm1.Chr01 120300  120480  (GA)15
"""

import logging
from dataclasses import dataclass
from typing import Optional, TextIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)


@dataclass
class MarkerChromosomeRecord:
    primary_identifier: str
    secondary_identifier: str
    type: str
    chromosome: str
    start: int
    end: int
    motif: str

    @classmethod
    def from_parts(cls, parts: list[str]) -> "MarkerChromosomeRecord":
        try:
            return cls(
                primary_identifier=parts[0],
                secondary_identifier=parts[1],
                type=parts[2],
                chromosome=parts[3],
                start=int(parts[4]),
                end=int(parts[5]),
                motif=parts[6] if len(parts) > 6 else "",
            )
        except (IndexError, ValueError) as e:
            raise ConverterError(f"Error parsing marker chromosome line {parts}: {e}") from e

    @property
    def on_supercontig(self) -> bool:
        lc = self.chromosome.lower()
        return "scaffold" in lc or "contig" in lc


class MarkerChromosomeFileConverter(FileConverter):
    """Loads GeneticMarkers with their chromosome or supercontig locations."""

    name = "marker-chromosome-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.chromosome_map: dict[str, Item] = {}

    def process(self, fh: TextIO) -> None:
        taxon_id: Optional[str] = None
        strain_name: Optional[str] = None
        organism: Optional[Item] = None
        strain: Optional[Item] = None

        for line in fh:
            if is_comment_or_blank(line):
                continue
            if organism is None and taxon_id is not None:
                organism = self.get_organism(taxon_id)
            if strain is None and strain_name is not None:
                strain = self.get_strain(strain_name, organism)

            parts = split_line(line)
            lower = line.lower()
            if lower.startswith("taxonid"):
                taxon_id = parts[1].strip()
            elif lower.startswith("strain"):
                strain_name = parts[1].strip()
            else:
                if organism is None:
                    raise ConverterError(f"Organism has not been formed for marker/chromosome import in file {self.current_file_name}")
                if strain is None:
                    raise ConverterError(f"Strain has not been formed for marker/chromosome import in file {self.current_file_name}")
                self.process_record(MarkerChromosomeRecord.from_parts(parts), organism, strain)

    def get_sequence(self, record: MarkerChromosomeRecord, organism: Item, strain: Item) -> Item:
        sequence = self.chromosome_map.get(record.chromosome)
        if sequence is None:
            sequence = self.create_item("Supercontig" if record.on_supercontig else "Chromosome")
            sequence.set_attribute("primaryIdentifier", record.chromosome)
            sequence.set_reference("organism", organism)
            sequence.set_reference("strain", strain)
            self.store(sequence)
            self.chromosome_map[record.chromosome] = sequence
            logger.info(f"Created and stored {sequence.class_name}: {record.chromosome}")
        return sequence

    def process_record(self, record: MarkerChromosomeRecord, organism: Item, strain: Item) -> None:
        sequence = self.get_sequence(record, organism, strain)
        prefix = "supercontig" if record.on_supercontig else "chromosome"

        marker = self.create_item("GeneticMarker")
        marker.set_attribute("primaryIdentifier", record.primary_identifier)
        marker.set_reference("organism", organism)
        marker.set_reference("strain", strain)
        if record.secondary_identifier:
            marker.set_attribute("secondaryIdentifier", record.secondary_identifier)
        if record.type:
            marker.set_attribute("type", record.type)
        if record.motif:
            marker.set_attribute("motif", record.motif)
        marker.set_reference(prefix, sequence)

        location = self.create_item("Location")
        location.set_attribute("start", record.start)
        location.set_attribute("end", record.end)
        location.set_attribute("strand", "1")
        location.set_reference("locatedOn", sequence)
        location.set_reference("feature", marker)
        self.store(location)

        marker.set_reference(f"{prefix}Location", location)
        self.store(marker)
