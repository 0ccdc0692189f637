"""
Reactome pathways linked to chado genes.

The Reactome file is tab-delimited: pathway identifier, pathway name,
species and gene name. Only the soybean GLYMA_ gene names can be mapped
to chado feature names.
"""

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from legfed.chado.processors.base import ChadoProcessor
from legfed.core.exceptions import ChadoError, ConverterError
from legfed.items.item import Item
from legfed.services.sql_utils import fetch_one, schema_prefix
from legfed.utils.file_io import open_file, split_line

logger = logging.getLogger(__name__)


def reactome_gene_to_feature_name(gene_name: str) -> Optional[str]:
    """GLYMA_01G000100 gives glyma.Glyma.01G000100; other names have no chado form."""
    if "_" in gene_name:
        parts = gene_name.split("_")
        if parts[0] == "GLYMA":
            return f"glyma.Glyma.{parts[1]}"
    return None


class ReactomeProcessor(ChadoProcessor):
    """Stores Pathway items and the chado genes that take part in them."""

    name = "reactome"

    def __init__(self, converter):
        super().__init__(converter)
        self.gene_map: dict[int, Item] = {}
        self.pathway_map: dict[str, Item] = {}
        self.stats = {"lines": 0, "not_found": 0}

    def process(self, session: Session) -> None:
        if not self.converter.reactome_file:
            raise ChadoError("REACTOME_FILE must be set to run the reactome processor.")

        organisms: dict[int, Item] = {}
        species_names = set()
        for organism_id, organism_data in self.converter.chado_to_org_data.items():
            organism = self.create_organism(organism_data)
            organism.set_attribute("genus", organism_data.genus)
            organism.set_attribute("species", organism_data.species)
            self.store(organism)
            organisms[organism_id] = organism
            species_names.add(organism_data.genus_species)

        gene_type_id = self.get_cvterm_id(session, "gene")

        filepath = Path(self.converter.reactome_file)
        logger.info(f"Reading Reactome pathways from {filepath}")
        with open_file(filepath) as fh:
            for line in fh:
                if line.startswith("#") or not line.strip():
                    continue
                parts = split_line(line)
                if len(parts) < 4:
                    raise ConverterError(f"Reactome line needs identifier, name, species and gene: {line.strip()}")
                identifier, pathway_name, species, gene_name = parts[:4]
                if species not in species_names:
                    continue
                self.stats["lines"] += 1
                feature_name = reactome_gene_to_feature_name(gene_name)
                if feature_name is not None:
                    self.link_gene(session, gene_type_id, feature_name, identifier, pathway_name, species, organisms)

        logger.info(
            f"Storing {len(self.gene_map)} genes in {len(self.pathway_map)} pathways "
            f"({self.stats['not_found']} genes not found)"
        )
        self.store_all(self.gene_map.values())
        self.store_all(self.pathway_map.values())

    def link_gene(
        self,
        session: Session,
        gene_type_id: int,
        feature_name: str,
        identifier: str,
        pathway_name: str,
        species: str,
        organisms: dict[int, Item],
    ) -> None:
        row = fetch_one(
            session,
            f"SELECT * FROM {schema_prefix()}feature WHERE type_id = :type_id AND name = :name",
            {"type_id": gene_type_id, "name": feature_name},
        )
        if row is None:
            logger.error(f"{feature_name} not found in chado database.")
            self.stats["not_found"] += 1
            return

        feature_id = int(row["feature_id"])
        gene = self.gene_map.get(feature_id)
        if gene is None:
            gene = self.create_item("Gene")
            gene.set_attribute("primaryIdentifier", row["uniquename"])
            gene.set_attribute("secondaryIdentifier", row["name"])
            organism = organisms.get(row["organism_id"])
            if organism is not None:
                gene.set_reference("organism", organism)
            self.gene_map[feature_id] = gene

        # pathways carry the species since several varieties share them
        pathway = self.pathway_map.get(identifier)
        if pathway is None:
            pathway = self.create_item("Pathway")
            pathway.set_attribute("identifier", identifier)
            pathway.set_attribute("name", pathway_name)
            pathway.set_attribute("species", species)
            self.pathway_map[identifier] = pathway

        gene.add_to_collection("pathways", pathway)
