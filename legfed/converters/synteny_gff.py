"""
Synteny GFF converter.

Reads DAGchainer syntenic_region GFF files. Each row describes a pair of
regions, the source on column 1 and the target in the Target attribute,
which become two SyntenicRegions joined by a SyntenyBlock. The same pair
can appear reversed in another file; only the first orientation is kept.

Header lines give the two organisms:

    #SourceTaxonID  3847
    #SourceVariety  Williams82
    #TargetTaxonID  3885
    #TargetVariety  G19833
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

RANGE_SEPARATOR = "-"
REGION_SEPARATOR = "|"

HEADER_KEYS = {
    "#SourceTaxonID": "source_taxon_id",
    "#SourceVariety": "source_variety",
    "#TargetTaxonID": "target_taxon_id",
    "#TargetVariety": "target_variety",
}


def parse_target(target: str) -> tuple[str, int, int]:
    """
    Split a Target attribute of the form chr:start..end.

    Raises:
        ConverterError: if the target is malformed
    """
    try:
        chromosome, span = target.split(":", 1)
        start, end = span.split("..", 1)
        return chromosome, int(start), int(end)
    except ValueError as e:
        raise ConverterError(f"Bad Target attribute '{target}': {e}") from e


def target_strand(record: GFFRecord) -> Optional[str]:
    """The target strand is carried by the last character of the first Name."""
    names = record.names
    if not names or not names[0]:
        return None
    end_char = names[0][-1]
    if end_char in (" ", "+"):
        return "+"
    if end_char == "-":
        return "-"
    return None


def region_name(chromosome: str, start: int, end: int) -> str:
    return f"{chromosome}:{start}{RANGE_SEPARATOR}{end}"


class SyntenyGFFConverter(FileConverter):
    """Converts syntenic_region GFF rows into SyntenyBlocks."""

    name = "synteny-gff"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.chromosome_map: dict[str, Item] = {}
        # source region name -> target region name
        self.synteny_block_map: dict[str, str] = {}
        self.stats = {"blocks": 0, "duplicates": 0}

    def process(self, fh: TextIO) -> None:
        header = dict.fromkeys(HEADER_KEYS.values())
        source_organism: Optional[Item] = None
        target_organism: Optional[Item] = None

        for line in fh:
            if line.startswith("##FASTA"):
                break

            if source_organism is None and all(header.values()):
                source_organism = self.get_organism(header["source_taxon_id"], header["source_variety"])
                target_organism = self.get_organism(header["target_taxon_id"], header["target_variety"])

            key = line.split("\t", 1)[0].strip()
            if key in HEADER_KEYS:
                parts = split_line(line)
                if len(parts) < 2 or not parts[1].strip():
                    raise ConverterError(f"Header without a value in {self.current_file_name}: {line.strip()}")
                header[HEADER_KEYS[key]] = parts[1].strip()
                logger.info(f"{HEADER_KEYS[key]}={parts[1].strip()}")
                continue

            if line.startswith("#") or not line.strip():
                continue

            if source_organism is None or target_organism is None:
                raise ConverterError(
                    "Source organism and/or target organism not established: "
                    f"{header['source_taxon_id']} ({header['source_variety']}), "
                    f"{header['target_taxon_id']} ({header['target_variety']})"
                )

            try:
                record = GFFRecord.from_line(line)
            except ValueError as e:
                logger.warning(f"Skipping GFF line in {self.current_file_name}: {e}")
                continue

            if record.type == "syntenic_region":
                self.process_record(record, source_organism, target_organism)

    def get_chromosome(self, name: str, organism: Item) -> Item:
        chromosome = self.chromosome_map.get(name)
        if chromosome is None:
            chromosome = self.create_item("Chromosome")
            chromosome.set_attribute("primaryIdentifier", name)
            chromosome.set_reference("organism", organism)
            self.store(chromosome)
            self.chromosome_map[name] = chromosome
            logger.debug(f"Created chromosome {name}")
        return chromosome

    def process_record(self, record: GFFRecord, source_organism: Item, target_organism: Item) -> None:
        """Create the two regions and their block unless the pair has already been seen."""
        if record.target is None:
            raise ConverterError(f"syntenic_region record is missing a Target attribute: {record.id}")

        target_chr, target_start, target_end = parse_target(record.target)
        source_name = region_name(record.seqid, record.start, record.end)
        target_name = region_name(target_chr, target_start, target_end)

        source_chromosome = self.get_chromosome(record.seqid, source_organism)
        target_chromosome = self.get_chromosome(target_chr, target_organism)

        if (
            self.synteny_block_map.get(source_name) == target_name
            or self.synteny_block_map.get(target_name) == source_name
        ):
            self.stats["duplicates"] += 1
            return
        self.synteny_block_map[source_name] = target_name

        source_region, source_location = self._make_region(
            source_name, record.start, record.end, record.strand,
            record.score, source_organism, source_chromosome,
        )
        target_region, target_location = self._make_region(
            target_name, target_start, target_end, target_strand(record),
            record.score, target_organism, target_chromosome,
        )

        block = self.create_item("SyntenyBlock")
        block.set_attribute("primaryIdentifier", f"{source_name}{REGION_SEPARATOR}{target_name}")
        median_ks = record.get_attribute("median_Ks")
        if median_ks:
            block.set_attribute("medianKs", median_ks)
        block.add_to_collection("syntenicRegions", source_region)
        block.add_to_collection("syntenicRegions", target_region)
        self.store(block)

        source_region.set_reference("syntenyBlock", block)
        target_region.set_reference("syntenyBlock", block)
        self.store_all([source_region, source_location, target_region, target_location])
        self.stats["blocks"] += 1

    def _make_region(
        self,
        name: str,
        start: int,
        end: int,
        strand: Optional[str],
        score: Optional[float],
        organism: Item,
        chromosome: Item,
    ) -> tuple[Item, Item]:
        region = self.create_item("SyntenicRegion")
        location = self.create_item("Location")

        region.set_attribute("primaryIdentifier", name)
        region.set_attribute("length", end - start + 1)
        if score is not None:
            region.set_attribute("score", score)
        region.set_reference("organism", organism)
        region.set_reference("chromosome", chromosome)
        region.set_reference("chromosomeLocation", location)

        location.set_attribute("start", start)
        location.set_attribute("end", end)
        if strand:
            location.set_attribute("strand", strand)
        location.set_reference("feature", region)
        location.set_reference("locatedOn", chromosome)
        return region, location

    def close(self) -> None:
        logger.info(
            f"Stored {self.stats['blocks']} synteny blocks, "
            f"skipped {self.stats['duplicates']} reversed duplicates"
        )
