"""
FASTA loader for LIS datastore sequence files.

The file name carries the organism and versions:

    phavu.G19833.gnm2.fC0g.genome_main.fna.gz
    phavu.G19833.gnm2.ann1.PB8d.protein.faa.gz

gensp.strain.assembly[.annotation].key.kind.ext: seven parts means the
file belongs to an annotation. Each record becomes an entity of the
configured class (Chromosome by default, Supercontig when the ID looks
like a scaffold) with a Sequence, linked to a DataSet whose version is
the assembly (plus annotation) version.
"""

import logging
from dataclasses import dataclass
from typing import Optional, TextIO

from Bio import SeqIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.core.organisms import OrganismRepository, get_organism_repository
from legfed.core.settings import settings
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.datastore import md5_checksum

logger = logging.getLogger(__name__)


@dataclass
class FastaFileName:
    """The parts of a datastore FASTA file name."""

    gensp: str
    strain: str
    assembly_version: str
    annotation_version: Optional[str]

    @property
    def data_set_version(self) -> str:
        if self.annotation_version:
            return f"{self.assembly_version}.{self.annotation_version}"
        return self.assembly_version

    @classmethod
    def parse(cls, filename: str) -> "FastaFileName":
        """
        Raises:
            ConverterError: if the name has fewer than gensp.strain.assembly parts
        """
        if filename.endswith(".gz"):
            filename = filename[:-3]
        parts = filename.split(".")
        if len(parts) < 3:
            raise ConverterError(f"FASTA file name {filename} is not gensp.strain.assembly...")
        return cls(
            gensp=parts[0],
            strain=parts[1],
            assembly_version=parts[2],
            annotation_version=parts[3] if len(parts) == 7 else None,
        )


def get_identifier(header: str, id_suffix: str = "") -> Optional[str]:
    """
    Return the record identifier: the first token of the header, or the
    second field when the token is |-delimited.
    """
    name = header.split()[0] + id_suffix if header.split() else id_suffix
    if "|" in name:
        bits = name.split("|")
        if len(bits) < 2 or not bits[1]:
            return None
        name = bits[1]
    return name or None


def get_symbol(header: str) -> Optional[str]:
    """The second whitespace-delimited token of a header, if any."""
    tokens = header.split()
    return tokens[1] if len(tokens) > 1 else None


def is_supercontig_id(identifier: str) -> bool:
    last_part = identifier.split(".")[-1]
    return "scaffold" in identifier.lower() or "sc" in last_part or "pilon" in last_part


def get_secondary_identifier(identifier: str) -> str:
    """Drop the strain, assembly and annotation parts: phavu.G19833.gnm2.ann1.Phvul.010G034400.1 gives phavu.Phvul.010G034400.1."""
    parts = identifier.split(".")
    return ".".join([parts[0]] + parts[4:10])


class FastaFileConverter(FileConverter):
    """Loads sequence entities from datastore FASTA files."""

    name = "fasta"

    def __init__(
        self,
        writer: ItemWriter,
        class_name: str = "Chromosome",
        data_set_title: Optional[str] = None,
        data_set_url: Optional[str] = None,
        id_suffix: str = "",
        repository: OrganismRepository = None,
    ):
        super().__init__(writer)
        self.class_name = class_name
        self.data_set_title = data_set_title or settings.data_set_title
        self.data_set_url = data_set_url or settings.data_set_url
        self.id_suffix = id_suffix
        self.repository = repository or get_organism_repository()
        self.stats = {"records": 0, "skipped": 0}

    def get_fasta_organism(self, file_name: FastaFileName) -> Item:
        organism_data = self.repository.get_by_gensp(file_name.gensp)
        if organism_data is None:
            raise ConverterError(f"Organism {file_name.gensp} is not in the gensp to taxon ID map.")
        organism = self.organism_map.get(organism_data.taxon_id)
        if organism is None:
            organism = self.create_item("Organism")
            organism.set_attribute("taxonId", organism_data.taxon_id)
            organism.set_attribute("gensp", file_name.gensp)
            self.store(organism)
            self.organism_map[organism_data.taxon_id] = organism
        return organism

    def process(self, fh: TextIO) -> None:
        if not self.data_set_title:
            raise ConverterError("DataSet title (DATA_SET_TITLE) not set.")

        file_name = FastaFileName.parse(self.current_file_name)
        organism = self.get_fasta_organism(file_name)
        strain = self.get_strain(file_name.strain, organism)
        data_set = self.get_data_set(self.data_set_title, self.data_set_url, file_name.data_set_version)

        logger.info(f"Reading sequences from {self.current_file_name}")
        for record in SeqIO.parse(fh, "fasta"):
            self.process_record(record, file_name, organism, strain, data_set)

    def process_record(self, record, file_name: FastaFileName, organism: Item, strain: Item, data_set: Item) -> None:
        identifier = get_identifier(record.description, self.id_suffix)
        if identifier is None:
            logger.warning(f"No identifier in FASTA header '{record.description}', skipping")
            self.stats["skipped"] += 1
            return

        residues = str(record.seq)
        checksum = md5_checksum(residues)

        sequence = self.create_item("Sequence")
        sequence.set_attribute("residues", residues)
        sequence.set_attribute("length", len(residues))
        sequence.set_attribute("md5checksum", checksum)

        entity = self.create_item("Supercontig" if is_supercontig_id(identifier) else self.class_name)
        entity.set_attribute("primaryIdentifier", identifier)
        entity.set_attribute("secondaryIdentifier", get_secondary_identifier(identifier))
        entity.set_attribute("length", len(residues))
        entity.set_attribute("md5checksum", checksum)
        entity.set_attribute("assemblyVersion", file_name.assembly_version)
        if file_name.annotation_version:
            entity.set_attribute("annotationVersion", file_name.annotation_version)
        symbol = get_symbol(record.description)
        if symbol:
            entity.set_attribute("symbol", symbol)
        entity.set_reference("sequence", sequence)
        entity.set_reference("organism", organism)
        entity.set_reference("strain", strain)
        entity.add_to_collection("dataSets", data_set)

        self.store(sequence)
        self.store(entity)
        self.stats["records"] += 1

    def close(self) -> None:
        logger.info(f"Stored {self.stats['records']} sequences, skipped {self.stats['skipped']}")
