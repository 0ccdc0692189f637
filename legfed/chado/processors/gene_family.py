"""
Gene families from chado featureprops.

Gene families are not features: each distinct "gene family" featureprop
value names one. Consensus regions are named "<gene family>-consensus".
"""

import logging

from sqlalchemy.orm import Session

from legfed.chado.processors.base import ChadoProcessor
from legfed.items.item import Item
from legfed.services.sql_utils import fetch_all, schema_prefix

logger = logging.getLogger(__name__)


class GeneFamilyProcessor(ChadoProcessor):
    """Stores GeneFamily items with their consensus regions and genes."""

    name = "gene-family"

    def __init__(self, converter):
        super().__init__(converter)
        self.gene_family_map: dict[str, Item] = {}
        self.gene_map: dict[int, Item] = {}

    def process(self, session: Session) -> None:
        schema = schema_prefix()

        gene_family_type_id = self.get_cvterm_id(session, "gene family")
        consensus_region_type_id = self.get_cvterm_id(session, "consensus_region")
        gene_type_id = self.get_cvterm_id(session, "gene")

        rows = fetch_all(
            session,
            f"SELECT DISTINCT value FROM {schema}featureprop WHERE type_id = :type_id",
            {"type_id": gene_family_type_id},
        )
        for row in rows:
            if not row["value"]:
                continue
            gene_family = self.create_item("GeneFamily")
            gene_family.set_attribute("primaryIdentifier", row["value"])
            self.gene_family_map[row["value"]] = gene_family

        for row in fetch_all(session, f"SELECT DISTINCT name, comment FROM {schema}phylotree"):
            gene_family = self.gene_family_map.get(row["name"])
            if gene_family is not None and row["comment"]:
                gene_family.set_attribute("description", row["comment"])

        self.load_consensus_regions(session, consensus_region_type_id)

        for gene_family_name, gene_family in self.gene_family_map.items():
            rows = fetch_all(
                session,
                f"SELECT feature.feature_id, feature.uniquename, feature.name "
                f"FROM {schema}feature, {schema}featureprop "
                "WHERE feature.feature_id = featureprop.feature_id "
                "AND feature.type_id = :gene_type_id "
                "AND featureprop.type_id = :gene_family_type_id "
                "AND featureprop.value = :gene_family_name",
                {
                    "gene_type_id": gene_type_id,
                    "gene_family_type_id": gene_family_type_id,
                    "gene_family_name": gene_family_name,
                },
            )
            for row in rows:
                chado_id = int(row["feature_id"])
                if chado_id in self.gene_map:
                    continue
                gene = self.create_item("Gene")
                gene.set_attribute("chadoId", chado_id)
                gene.set_attribute("primaryIdentifier", row["uniquename"])
                gene.set_attribute("chadoUniqueName", row["uniquename"])
                if row["name"]:
                    gene.set_attribute("chadoName", row["name"])
                gene.set_reference("geneFamily", gene_family)
                self.gene_map[chado_id] = gene

        logger.info(f"Storing {len(self.gene_map)} genes in {len(self.gene_family_map)} gene families")
        self.store_all(self.gene_map.values())
        self.store_all(self.gene_family_map.values())

    def load_consensus_regions(self, session: Session, consensus_region_type_id: int) -> None:
        """Store the consensus regions that belong to a loaded gene family."""
        rows = fetch_all(
            session,
            f"SELECT feature_id, uniquename, name FROM {schema_prefix()}feature WHERE type_id = :type_id",
            {"type_id": consensus_region_type_id},
        )
        count = 0
        for row in rows:
            gene_family = self.gene_family_map.get(row["uniquename"].split("-")[0])
            if gene_family is None:
                continue
            consensus_region = self.create_item("ConsensusRegion")
            consensus_region.set_attribute("chadoId", row["feature_id"])
            consensus_region.set_attribute("primaryIdentifier", row["uniquename"])
            consensus_region.set_attribute("chadoUniqueName", row["uniquename"])
            if row["name"]:
                consensus_region.set_attribute("secondaryIdentifier", row["name"])
                consensus_region.set_attribute("chadoName", row["name"])
            consensus_region.set_reference("geneFamily", gene_family)
            self.store(consensus_region)
            count += 1
        logger.info(f"Stored {count} consensus regions")
