"""
GWAS file converter.

Header lines (TaxonID, Strain, Name, PlatformName, PlatformDetails,
NumberLociTested, NumberGermplasmTested, Assembly, PMID, DOI) describe one
GWAS experiment; each data line is a result:

    phenotype   ontology_id   marker   p_value   chromosome   start   end
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

GWAS_ATTRIBUTES = {
    "platformname": "platformName",
    "platformdetails": "platformDetails",
    "numberlocitested": "numberLociTested",
    "numbergermplasmtested": "numberGermplasmTested",
}


@dataclass
class GWASRecord:
    """One GWAS result line."""

    phenotype: str
    ontology_identifier: str
    marker: str
    p_value: float
    chromosome: str
    start: int
    end: int

    @property
    def type(self) -> str:
        return "SNP" if self.start == self.end else "SSR"

    @classmethod
    def from_parts(cls, parts: list[str]) -> "GWASRecord":
        """
        Raises:
            ConverterError: if the line does not have 7 columns
        """
        if len(parts) != 7:
            raise ConverterError(f"GWAS record does not have 7 columns: {parts}")
        return cls(
            phenotype=parts[0],
            ontology_identifier=parts[1].strip(),
            marker=parts[2],
            p_value=float(parts[3]) if parts[3].strip() else 0.0,
            chromosome=parts[4],
            start=int(parts[5]),
            end=int(parts[6]),
        )


class GWASFileConverter(FileConverter):
    """Loads one GWAS experiment per file with its markers, phenotypes and results."""

    name = "gwas-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.chromosome_map: dict[str, Item] = {}
        self.phenotype_map: dict[str, Item] = {}
        self.ontology_term_map: dict[str, Item] = {}
        self.marker_map: dict[str, Item] = {}

    def process(self, fh: TextIO) -> None:
        organism: Optional[Item] = None
        strain: Optional[Item] = None
        gwas: Optional[Item] = None
        publication: Optional[Item] = None

        for line in fh:
            parts = split_line(line)
            if is_comment_or_blank(line) or len(parts) < 2:
                continue
            key = parts[0].lower()
            value = parts[1]

            if key == "taxonid":
                organism = self.get_organism(value)
            elif key == "strain":
                strain = self.get_strain(value, organism)
            elif key == "name":
                gwas = self.create_item("GWAS")
                gwas.set_attribute("primaryIdentifier", value)
            elif key in GWAS_ATTRIBUTES:
                self._require_gwas(gwas).set_attribute(GWAS_ATTRIBUTES[key], value)
            elif key == "assembly":
                continue
            elif key in ("pmid", "doi"):
                publication = self.get_publication(
                    pmid=value if key == "pmid" else None,
                    doi=value if key == "doi" else None,
                )
                self._require_gwas(gwas).add_to_collection("publications", publication)
            else:
                if organism is None:
                    raise ConverterError(f"Organism has not been set for GWAS record import in file {self.current_file_name}")
                if strain is None:
                    raise ConverterError(f"Strain has not been set for GWAS record import in file {self.current_file_name}")
                self._require_gwas(gwas)
                record = GWASRecord.from_parts(parts)
                self.process_record(record, gwas, organism, strain, publication)

        if gwas is not None:
            self.store(gwas)

    def _require_gwas(self, gwas: Optional[Item]) -> Item:
        if gwas is None:
            raise ConverterError(f"GWAS experiment has not been created in file {self.current_file_name}")
        return gwas

    def get_sequence(self, name: str, organism: Item) -> Item:
        sequence = self.chromosome_map.get(name)
        if sequence is None:
            sequence = self.create_item("Supercontig" if is_supercontig(name) else "Chromosome")
            sequence.set_attribute("primaryIdentifier", name)
            sequence.set_reference("organism", organism)
            self.store(sequence)
            self.chromosome_map[name] = sequence
            logger.info(f"Stored {sequence.class_name}: {name}")
        return sequence

    def get_marker(self, record: GWASRecord, organism: Item, strain: Item) -> Item:
        marker = self.marker_map.get(record.marker)
        if marker is None:
            marker = self.create_item("GeneticMarker")
            marker.set_attribute("primaryIdentifier", record.marker)
            marker.set_attribute("type", record.type)
            marker.set_reference("organism", organism)
            marker.set_reference("strain", strain)
            sequence = self.get_sequence(record.chromosome, organism)
            if sequence.class_name == "Supercontig":
                marker.set_reference("supercontig", sequence)
            else:
                marker.set_reference("chromosome", sequence)
            self.store(marker)
            self.marker_map[record.marker] = marker
        return marker

    def get_ontology_term(self, identifier: str) -> Item:
        term = self.ontology_term_map.get(identifier)
        if term is None:
            term = self.create_item("OntologyTerm")
            term.set_attribute("identifier", identifier)
            self.store(term)
            self.ontology_term_map[identifier] = term
        return term

    def process_record(
        self,
        record: GWASRecord,
        gwas: Item,
        organism: Item,
        strain: Item,
        publication: Optional[Item],
    ) -> None:
        marker = self.get_marker(record, organism, strain)

        phenotype = self.phenotype_map.get(record.phenotype)
        if phenotype is None:
            phenotype = self.create_item("Phenotype")
            phenotype.set_attribute("primaryIdentifier", record.phenotype)
            self.phenotype_map[record.phenotype] = phenotype
        if publication is not None:
            phenotype.add_to_collection("publications", publication)

        if record.ontology_identifier:
            annotation = self.create_item("OntologyAnnotation")
            annotation.set_reference("ontologyTerm", self.get_ontology_term(record.ontology_identifier))
            annotation.set_reference("subject", phenotype)
            self.store(annotation)

        result = self.create_item("GWASResult")
        if record.p_value > 0:
            result.set_attribute("pValue", record.p_value)
        result.set_reference("study", gwas)
        result.set_reference("phenotype", phenotype)
        result.set_reference("marker", marker)
        self.store(result)

    def close(self) -> None:
        logger.info(f"Storing {len(self.phenotype_map)} Phenotype items...")
        self.store_all(self.phenotype_map.values())
