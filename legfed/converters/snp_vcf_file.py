"""
SNP VCF converter: one SNP GeneticMarker per VCF data line, located at POS.
"""

import logging
from dataclasses import dataclass
from typing import Optional, TextIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.datastore import is_supercontig
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)


@dataclass
class VCFRecord:
    """The fixed columns of a VCF data line."""

    chromosome: str
    pos: int
    id: str
    ref: str
    alt: str
    qual: Optional[float]
    filter: Optional[str]
    info: str

    @classmethod
    def from_line(cls, line: str) -> "VCFRecord":
        """
        Raises:
            ConverterError: if the line has fewer than 8 columns or a bad POS/QUAL
        """
        parts = split_line(line)
        try:
            return cls(
                chromosome=parts[0],
                pos=int(parts[1]),
                id=parts[2],
                ref=parts[3],
                alt=parts[4],
                qual=None if parts[5] == "." else float(parts[5]),
                filter=None if parts[6] == "." else parts[6],
                info=parts[7],
            )
        except (IndexError, ValueError) as e:
            raise ConverterError(f"Error parsing VCF file line {line.strip()!r}: {e}") from e


class SNPVCFFileConverter(FileConverter):
    name = "snp-vcf-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.sequence_map: dict[str, Item] = {}
        self.marker_count = 0

    def process(self, fh: TextIO) -> None:
        for line in fh:
            if is_comment_or_blank(line):
                continue
            self.process_record(VCFRecord.from_line(line))

    def get_sequence(self, name: str) -> Item:
        """Get or create (and store) the Chromosome or Supercontig named in CHROM."""
        sequence = self.sequence_map.get(name)
        if sequence is None:
            sequence = self.create_item("Supercontig" if is_supercontig(name) else "Chromosome")
            sequence.set_attribute("primaryIdentifier", name)
            self.store(sequence)
            self.sequence_map[name] = sequence
            logger.info(f"Created and stored {sequence.class_name.lower()}: {name}")
        return sequence

    def process_record(self, record: VCFRecord) -> None:
        sequence = self.get_sequence(record.chromosome)
        # chromosome/chromosomeLocation or supercontig/supercontigLocation
        reference = sequence.class_name[0].lower() + sequence.class_name[1:]

        marker = self.create_item("GeneticMarker")
        marker.set_attribute("primaryIdentifier", record.id)
        marker.set_attribute("type", "SNP")
        marker.set_attribute("length", "1")
        marker.set_reference(reference, sequence)

        location = self.create_item("Location")
        location.set_attribute("start", record.pos)
        location.set_attribute("end", record.pos)
        location.set_reference("locatedOn", sequence)
        location.set_reference("feature", marker)
        self.store(location)

        marker.set_reference(f"{reference}Location", location)
        self.store(marker)
        self.marker_count += 1

    def close(self) -> None:
        logger.info(f"Stored {self.marker_count} SNP markers on {len(self.sequence_map)} sequences")
