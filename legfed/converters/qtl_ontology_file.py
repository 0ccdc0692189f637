"""
QTL ontology file converter.

Annotates QTLs with ontology terms. The term class comes from the
two-letter prefix of the term ID (TO:0000181 makes a TOTerm and a
TOAnnotation).

    TaxonID         3885
    #QTL            Term        Phenotype
    Seed weight 1-1 TO:0000181  seed weight
"""

import logging
from typing import Optional, TextIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)


class QTLOntologyFileConverter(FileConverter):
    name = "qtl-ontology-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.qtl_map: dict[str, Item] = {}
        self.term_map: dict[str, Item] = {}
        self.phenotype_map: dict[str, Item] = {}
        # (QTL name, term ID) pairs already annotated
        self.annotated: set[tuple[str, str]] = set()

    def process(self, fh: TextIO) -> None:
        organism: Optional[Item] = None
        for line in fh:
            if is_comment_or_blank(line):
                continue
            parts = split_line(line)
            if len(parts) < 2:
                raise ConverterError(f"QTL ontology line needs QTL and term: {line.strip()}")
            key, value = parts[0], parts[1].strip()
            if key.lower() == "taxonid":
                organism = self.get_organism(value)
                continue
            if organism is None:
                raise ConverterError(f"No organism set in {self.current_file_name}")
            if len(value) < 2:
                raise ConverterError(f"Bad ontology term ID '{value}'")
            phenotype_name = parts[2] if len(parts) > 2 and parts[2] else None
            self.annotate(key, value, phenotype_name, organism)

    def annotate(self, qtl_name: str, term_id: str, phenotype_name: Optional[str], organism: Item) -> None:
        # GO, PO, TO, ...
        term_type = term_id[:2]

        phenotype = None
        if phenotype_name:
            phenotype = self.phenotype_map.get(phenotype_name)
            if phenotype is None:
                phenotype = self.create_item("Phenotype")
                phenotype.set_attribute("primaryIdentifier", phenotype_name)
                self.store(phenotype)
                self.phenotype_map[phenotype_name] = phenotype

        qtl = self.qtl_map.get(qtl_name)
        if qtl is None:
            qtl = self.create_item("QTL")
            qtl.set_attribute("primaryIdentifier", qtl_name)
            qtl.set_reference("organism", organism)
            self.qtl_map[qtl_name] = qtl
        if phenotype is not None:
            current = qtl.get_reference("phenotype")
            if current is None:
                qtl.set_reference("phenotype", phenotype)
            elif current != phenotype.identifier:
                logger.warning(f"QTL {qtl_name} already has a phenotype; ignoring '{phenotype_name}'")

        term = self.term_map.get(term_id)
        if term is None:
            term = self.create_item(f"{term_type}Term")
            term.set_attribute("identifier", term_id)
            self.term_map[term_id] = term

        if (qtl_name, term_id) in self.annotated:
            logger.debug(f"QTL {qtl_name} is already annotated with {term_id}")
            return
        self.annotated.add((qtl_name, term_id))

        annotation = self.create_item(f"{term_type}Annotation")
        annotation.set_reference("ontologyTerm", term)
        annotation.set_reference("subject", qtl)
        self.store(annotation)
        logger.debug(f"Stored annotation for QTL {qtl_name} and term {term_id}")

    def close(self) -> None:
        logger.info(f"Storing {len(self.qtl_map)} QTL items...")
        self.store_all(self.qtl_map.values())
        logger.info(f"Storing {len(self.term_map)} OntologyTerm items...")
        self.store_all(self.term_map.values())
