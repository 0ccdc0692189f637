"""
LIS datastore annotation file converter.

The file name decides what a file holds:

    description_Phaseolus_vulgaris.yml            organism.<attribute> lines
    strains_Phaseolus_vulgaris.yml                strain.<attribute> sections, one per strain.identifier
    legume.genefam.fam1.M65K.info_annot_ahrd.tsv  gene families with AHRD descriptions
    phavu.G19833.gnm2.ann1.PB8d.info_annot.txt    anything else: Phytozome annotation_info lines

For annotation_info files the organism and strain come from the file
name, e.g. phavu.G19833.gnm2.ann1.annotation_info.txt gives taxon 3885
and strain G19833. Each line links a locus (Gene) to its peptide
(Protein) and lists the ontology terms they are annotated with.

Organisms and strains are held until close() so description and strains
files can fill in their attributes whatever order the files come in.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, TextIO

from Bio import SeqIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.core.organisms import OrganismRepository, get_organism_repository
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)

AHRD_SUFFIX = ".info_annot_ahrd.tsv"

# "GO:0004672 (protein kinase activity)" or a bare "IPR000719"
AHRD_TERM_PATTERN = re.compile(r"(GO:\d{7}|IPR\d{6})(?: \(([^()]*)\))?")

# description file keys that are not the attribute name
DESCRIPTION_ATTRIBUTES = {"taxid": "taxonId", "abbrev": "abbreviation"}


@dataclass
class AnnotInfoRecord:
    """One annotation_info line; the optional columns are comma-separated lists."""

    pac_id: str
    locus_name: str
    transcript_name: str
    peptide_name: str
    pfam: list[str] = field(default_factory=list)
    panther: list[str] = field(default_factory=list)
    kog: list[str] = field(default_factory=list)
    ec: list[str] = field(default_factory=list)
    ko: list[str] = field(default_factory=list)
    go: list[str] = field(default_factory=list)
    best_hit_at_name: Optional[str] = None
    best_hit_at_symbol: Optional[str] = None
    best_hit_at_defline: Optional[str] = None

    @classmethod
    def from_parts(cls, parts: list[str]) -> "AnnotInfoRecord":
        """
        Raises:
            ConverterError: if fewer than the four ID columns are present
        """
        if len(parts) < 4:
            raise ConverterError(f"Error parsing AnnotInfo line: {parts}")

        def listed(i: int) -> list[str]:
            return [v for v in parts[i].split(",") if v] if len(parts) > i else []

        def single(i: int) -> Optional[str]:
            return parts[i] if len(parts) > i and parts[i] else None

        return cls(
            pac_id=parts[0],
            locus_name=parts[1],
            transcript_name=parts[2],
            peptide_name=parts[3],
            pfam=listed(4),
            panther=listed(5),
            kog=listed(6),
            ec=listed(7),
            ko=listed(8),
            go=listed(9),
            best_hit_at_name=single(10),
            best_hit_at_symbol=single(11),
            best_hit_at_defline=single(12),
        )


@dataclass
class InfoAnnotAhrdRecord:
    """
    One gene family line: identifier, then the AHRD description with its
    GO and InterPro terms inline.

        legume.fam1.M65K.L_0001RW   Protein kinase; IPR000719 (Protein kinase domain); GO:0004672 (protein kinase activity)
    """

    identifier: str
    description: str
    # identifier -> description (None when the term is given bare)
    go: dict[str, Optional[str]] = field(default_factory=dict)
    interpro: dict[str, Optional[str]] = field(default_factory=dict)

    @classmethod
    def from_parts(cls, parts: list[str]) -> "InfoAnnotAhrdRecord":
        """
        Raises:
            ConverterError: if the identifier or description is missing
        """
        if len(parts) < 2 or not parts[0].strip() or not parts[1].strip():
            raise ConverterError(f"Gene family line needs identifier and description: {parts}")
        record = cls(identifier=parts[0].strip(), description=parts[1].strip())
        for match in AHRD_TERM_PATTERN.finditer(record.description):
            terms = record.go if match.group(1).startswith("GO:") else record.interpro
            if terms.get(match.group(1)) is None:
                terms[match.group(1)] = match.group(2)
        return record


def parse_annot_info_filename(filename: str) -> tuple[str, str]:
    """
    Return (gensp, strain) from a datastore file name.

    Raises:
        ConverterError: if the name has no gensp.strain prefix
    """
    chunks = Path(filename).name.split(".")
    if len(chunks) < 3:
        raise ConverterError(f"Cannot get organism and strain from file name {filename}")
    return chunks[0], chunks[1]


# record field -> (Ontology name, url, annotated subject)
ONTOLOGIES = {
    "go": ("GO", "http://www.geneontology.org", "gene"),
    "pfam": ("Pfam", "https://pfam.xfam.org/", "protein"),
    "panther": ("PANTHER", "http://www.pantherdb.org/", "protein"),
    "kog": ("KOG", "https://genome.jgi.doe.gov/Tutorial/tutorial/kog.html", "protein"),
    "ec": ("ENZYME", "https://enzyme.expasy.org/", "protein"),
    "ko": ("KEGG Orthology", "https://www.genome.jp/kegg/ko.html", "gene"),
}


class AnnotInfoFileConverter(FileConverter):
    """
    Loads organism descriptions, strains, gene families and the Gene and
    Protein items of annotation_info files, with an OntologyAnnotation for
    each GO, Pfam, PANTHER, KOG, EC and KO term.

    GO and KO terms annotate the gene; the others annotate the protein.
    Gene family GO terms annotate the family. Each term is one
    OntologyTerm across all files, and a subject is annotated with a
    given term once.
    """

    name = "annot-info-file"

    def __init__(self, writer: ItemWriter, repository: OrganismRepository = None):
        super().__init__(writer)
        self.repository = repository or get_organism_repository()
        self.organisms: dict[str, Item] = {}
        self.strains: dict[str, Item] = {}
        self.genes: dict[str, Item] = {}
        self.proteins: dict[str, Item] = {}
        self.ontologies: dict[str, Item] = {}
        self.ontology_terms: dict[str, Item] = {}
        self.gene_families: dict[str, Item] = {}
        self.protein_domains: dict[str, Item] = {}
        # protein name -> gene family, from the family FASTA files
        self.protein_families: dict[str, Item] = {}
        # (term identifier, subject item identifier)
        self.annotated: set[tuple[str, str]] = set()
        self.annotation_count = 0

    def process(self, fh: TextIO) -> None:
        file_name = self.current_file_name
        if file_name.startswith("description_"):
            self.process_description(fh)
        elif file_name.startswith("strains_"):
            self.process_strains(fh)
        elif file_name.endswith(AHRD_SUFFIX):
            self.process_info_annot_ahrd(fh)
        else:
            self.process_annot_info(fh)

    def get_datastore_organism(self, taxon_id: str) -> Item:
        organism = self.organisms.get(taxon_id)
        if organism is None:
            organism = self.create_item("Organism")
            organism.set_attribute("taxonId", taxon_id)
            self.organisms[taxon_id] = organism
        return organism

    def get_datastore_strain(self, strain_name: str, organism: Item) -> Item:
        strain = self.strains.get(strain_name)
        if strain is None:
            strain = self.create_item("Strain")
            strain.set_attribute("primaryIdentifier", strain_name)
            strain.set_reference("organism", organism)
            self.strains[strain_name] = strain
        return strain

    def get_species_organism(self) -> Item:
        """
        Get the Organism named by a description_/strains_<Genus>_<species> file name.

        Raises:
            ConverterError: if the genus and species are not known
        """
        chunks = self.current_file_name.split(".")[0].split("_")
        if len(chunks) < 3:
            raise ConverterError(f"Cannot get genus and species from file name {self.current_file_name}")
        organism_data = self.repository.get_by_genus_species(chunks[1], chunks[2])
        if organism_data is None:
            raise ConverterError(f"Taxon ID not available for {chunks[1]}_{chunks[2]}")
        return self.get_datastore_organism(organism_data.taxon_id)

    def process_description(self, fh: TextIO) -> None:
        organism = self.get_species_organism()
        for line in fh:
            if is_comment_or_blank(line) or line.startswith("%"):
                continue
            parts = split_line(line)
            if len(parts) < 2 or not parts[1].strip():
                continue
            attribute = parts[0].replace("organism.", "").replace(":", "").strip()
            attribute = DESCRIPTION_ATTRIBUTES.get(attribute, attribute)
            if attribute == "taxonId" and parts[1].strip() != organism.get_attribute("taxonId"):
                raise ConverterError(
                    f"{self.current_file_name} gives taxon {parts[1].strip()} "
                    f"but its name is taxon {organism.get_attribute('taxonId')}"
                )
            organism.set_attribute(attribute, parts[1].strip())

    def process_strains(self, fh: TextIO) -> None:
        organism = self.get_species_organism()
        strain: Optional[Item] = None
        for line in fh:
            if is_comment_or_blank(line) or line.startswith("%"):
                continue
            parts = split_line(line)
            if len(parts) < 2:
                continue
            attribute = parts[0].replace("strain.", "").replace(":", "").strip()
            value = parts[1].strip()
            if attribute == "identifier":
                strain = self.get_datastore_strain(value, organism)
                continue
            if strain is None:
                raise ConverterError(f"strain.{attribute} before any strain.identifier in {self.current_file_name}")
            if value:
                strain.set_attribute(attribute, value)

    def process_annot_info(self, fh: TextIO) -> None:
        gensp, strain_name = parse_annot_info_filename(self.current_file_name)
        taxon_id = self.repository.get_taxon_id(gensp)
        organism = self.get_datastore_organism(taxon_id)
        self.get_datastore_strain(strain_name, organism)

        for line in fh:
            if is_comment_or_blank(line):
                continue
            record = AnnotInfoRecord.from_parts(split_line(line))
            if not record.pac_id:
                continue

            gene = self.genes.get(record.locus_name)
            if gene is None:
                gene = self.create_item("Gene")
                gene.set_attribute("primaryIdentifier", record.locus_name)
                gene.set_reference("organism", organism)
                self.genes[record.locus_name] = gene

            protein = self.proteins.get(record.peptide_name)
            if protein is None:
                protein = self.create_item("Protein")
                protein.set_attribute("primaryIdentifier", record.peptide_name)
                protein.set_reference("organism", organism)
                protein.set_reference("gene", gene)
                self.proteins[record.peptide_name] = protein

            for field_name, (_, _, subject_name) in ONTOLOGIES.items():
                subject = gene if subject_name == "gene" else protein
                for identifier in getattr(record, field_name):
                    self.annotate(subject, identifier, field_name)

    def process_info_annot_ahrd(self, fh: TextIO) -> None:
        """
        Gene families from legume.genefam.fam1.M65K.info_annot_ahrd.tsv.

        The version is the third dotted part of the file name. When a
        legume.genefam.fam1.M65K.family_fasta directory sits beside the
        file, the FASTA named after each family lists its member proteins.
        """
        chunks = self.current_file_name.split(".")
        if len(chunks) < 4:
            raise ConverterError(f"Cannot get gene family version from file name {self.current_file_name}")
        version = chunks[2]
        data_set = self.get_data_set(self.current_file_name[: -len(AHRD_SUFFIX)], version=version)
        fasta_dir = self.current_file.parent / self.current_file_name.replace(AHRD_SUFFIX, ".family_fasta")

        for line in fh:
            if is_comment_or_blank(line):
                continue
            record = InfoAnnotAhrdRecord.from_parts(split_line(line))
            if record.identifier in self.gene_families:
                raise ConverterError(f"Gene family {record.identifier} is listed twice")

            gene_family = self.create_item("GeneFamily")
            gene_family.set_attribute("primaryIdentifier", record.identifier)
            gene_family.set_attribute("version", version)
            gene_family.set_attribute("description", record.description)
            gene_family.set_reference("dataSet", data_set)
            self.gene_families[record.identifier] = gene_family

            for identifier, description in record.go.items():
                self.annotate(gene_family, identifier, "go", description, data_set)

            for identifier, description in record.interpro.items():
                protein_domain = self.protein_domains.get(identifier)
                if protein_domain is None:
                    protein_domain = self.create_item("ProteinDomain")
                    protein_domain.set_attribute("primaryIdentifier", identifier)
                    if description:
                        protein_domain.set_attribute("description", description)
                    self.protein_domains[identifier] = protein_domain
                protein_domain.add_to_collection("geneFamilies", gene_family)

            fasta_path = fasta_dir / record.identifier
            if fasta_path.is_file():
                self.read_family_fasta(fasta_path, gene_family)

    def read_family_fasta(self, fasta_path: Path, gene_family: Item) -> None:
        """Map each member protein (gensp.name header) to its family."""
        for fasta_record in SeqIO.parse(str(fasta_path), "fasta"):
            chunks = fasta_record.id.split(".", 1)
            if len(chunks) < 2:
                logger.warning(f"No gensp prefix on {fasta_record.id} in {fasta_path.name}")
                continue
            self.protein_families.setdefault(chunks[1], gene_family)

    def get_ontology(self, field_name: str) -> Item:
        """Get or create (and store) the Ontology behind a record column."""
        ontology = self.ontologies.get(field_name)
        if ontology is None:
            name, url, _ = ONTOLOGIES[field_name]
            ontology = self.create_item("Ontology")
            ontology.set_attribute("name", name)
            ontology.set_attribute("url", url)
            self.store(ontology)
            self.ontologies[field_name] = ontology
        return ontology

    def annotate(
        self,
        subject: Item,
        identifier: str,
        field_name: str,
        description: Optional[str] = None,
        data_set: Optional[Item] = None,
    ) -> None:
        term = self.ontology_terms.get(identifier)
        if term is None:
            term = self.create_item("OntologyTerm")
            term.set_attribute("identifier", identifier)
            term.set_reference("ontology", self.get_ontology(field_name))
            self.ontology_terms[identifier] = term
        if description and not term.has_attribute("description"):
            term.set_attribute("description", description)

        key = (identifier, subject.identifier)
        if key in self.annotated:
            return
        self.annotated.add(key)

        annotation = self.create_item("OntologyAnnotation")
        annotation.set_reference("subject", subject)
        annotation.set_reference("ontologyTerm", term)
        if data_set is not None:
            annotation.add_to_collection("dataSets", data_set)
        self.store(annotation)
        self.annotation_count += 1

    def close(self) -> None:
        family_members = 0
        for name, protein in self.proteins.items():
            gene_family = self.protein_families.get(name)
            if gene_family is not None:
                protein.set_reference("geneFamily", gene_family)
                family_members += 1
        unmatched = len(self.protein_families) - family_members
        if unmatched:
            logger.info(f"{unmatched} gene family member proteins are not in any annotation_info file")

        self.store_all(self.organisms.values())
        self.store_all(self.strains.values())
        self.store_all(self.genes.values())
        self.store_all(self.proteins.values())
        self.store_all(self.ontology_terms.values())
        self.store_all(self.gene_families.values())
        self.store_all(self.protein_domains.values())
        logger.info(
            f"Stored {len(self.genes)} genes, {len(self.proteins)} proteins and "
            f"{self.annotation_count} annotations to {len(self.ontology_terms)} ontology terms"
        )
        if self.gene_families:
            logger.info(
                f"Stored {len(self.gene_families)} gene families ({family_members} member proteins) "
                f"and {len(self.protein_domains)} protein domains"
            )
