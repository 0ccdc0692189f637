"""
Genetic marker GFF converter.

Creates a GeneticMarker per GFF row, located on the Chromosome or
Supercontig named in column 1. The organism comes from the converter
options or from #TaxonID / #Variety header lines.
"""

import logging
from typing import Optional, TextIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import split_line
from legfed.utils.gff import GFFRecord

logger = logging.getLogger(__name__)


class GeneticMarkerGFFConverter(FileConverter):
    """Loads GeneticMarkers and their sequence locations from GFF."""

    name = "genetic-marker-gff"

    def __init__(
        self,
        writer: ItemWriter,
        taxon_id: Optional[str] = None,
        variety: Optional[str] = None,
        gff_filename: Optional[str] = None,
    ):
        super().__init__(writer)
        self.taxon_id = taxon_id
        self.variety = variety
        # optional single file restriction
        self.gff_filename = gff_filename
        self.sequence_map: dict[str, Item] = {}
        self.marker_keys: set[str] = set()

    def process(self, fh: TextIO) -> None:
        if self.gff_filename and self.current_file_name != self.gff_filename:
            raise ConverterError(f"Specified single GFF file {self.gff_filename} not found.")

        organism: Optional[Item] = None
        for line in fh:
            if line.startswith("##FASTA"):
                break
            lower = line.lower()
            if lower.startswith("#taxonid"):
                self.taxon_id = split_line(line)[1].strip()
                logger.info(f"Setting taxonId={self.taxon_id} from GFF file header")
                continue
            if lower.startswith("#variety"):
                self.variety = split_line(line)[1].strip()
                logger.info(f"Setting variety={self.variety} from GFF file header")
                continue
            if line.startswith("#") or not line.strip():
                continue

            if not self.taxon_id:
                raise ConverterError("Taxon ID not set, not reading GFF data.")
            if organism is None:
                organism = self.get_organism(self.taxon_id, self.variety)

            try:
                record = GFFRecord.from_line(line)
            except ValueError as e:
                logger.warning(f"Skipping GFF line in {self.current_file_name}: {e}")
                continue
            self.process_record(record, organism)

    def get_sequence(self, seqid: str, organism: Item) -> tuple[Item, bool]:
        """Return the Chromosome or Supercontig for a seqid and whether it is a supercontig."""
        is_supercontig = "scaffold" in seqid.lower()
        name = seqid.lower() if is_supercontig else seqid
        sequence = self.sequence_map.get(name)
        if sequence is None:
            sequence = self.create_item("Supercontig" if is_supercontig else "Chromosome")
            sequence.set_attribute("primaryIdentifier", name)
            sequence.set_reference("organism", organism)
            self.store(sequence)
            self.sequence_map[name] = sequence
            logger.info(f"Created and stored {name}")
        return sequence, is_supercontig

    def process_record(self, record: GFFRecord, organism: Item) -> None:
        if not record.names:
            logger.warning(f"GFF record without a Name at {record.seqid}:{record.start}, skipping")
            return
        name = record.names[0]

        marker_key = f"{self.taxon_id}_{self.variety}:{name}"
        if marker_key in self.marker_keys:
            logger.info(f"Ignoring duplicate marker: {marker_key}")
            return
        self.marker_keys.add(marker_key)

        sequence, is_supercontig = self.get_sequence(record.seqid, organism)

        marker = self.create_item("GeneticMarker")
        location = self.create_item("Location")

        location.set_attribute("start", record.start)
        location.set_attribute("end", record.end)
        location.set_reference("locatedOn", sequence)
        location.set_reference("feature", marker)
        self.store(location)

        marker.set_attribute("primaryIdentifier", name)
        marker.set_attribute("type", record.type)
        marker.set_attribute("length", record.end - record.start + 1)
        marker.set_reference("organism", organism)
        if is_supercontig:
            marker.set_reference("supercontig", sequence)
            marker.set_reference("supercontigLocation", location)
        else:
            marker.set_reference("chromosome", sequence)
            marker.set_reference("chromosomeLocation", location)
        self.store(marker)
