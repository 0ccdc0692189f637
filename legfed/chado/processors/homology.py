"""
Homologues from the chado phylotree and phylonode tables.

Genes are homologous when their polypeptides are nodes of the same
phylotree. A phylotree named "<phytozome version>.<n>" is a gene family;
its phylonode features are polypeptides, and each polypeptide leads to
its gene through two feature_relationship hops (polypeptide -> mRNA -> gene).

Source genes come from the ORGANISMS/STRAINS selection, homologue genes
from HOMOLOGUE_ORGANISMS/HOMOLOGUE_STRAINS. Every (source, homologue) pair
of distinct genes in a family gives one Homologue: a paralogue when both
genes share an organism, otherwise an orthologue.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from legfed.chado.feature import ChadoFeature
from legfed.chado.processors.base import ChadoProcessor
from legfed.core.exceptions import ChadoError
from legfed.items.item import Item
from legfed.services.sql_utils import fetch_all, fetch_one, schema_prefix

logger = logging.getLogger(__name__)


class HomologyProcessor(ChadoProcessor):
    """Stores GeneFamily, Gene and Homologue items from chado phylotrees."""

    name = "homology"

    def __init__(self, converter):
        super().__init__(converter)
        self.organism_map: dict[int, Item] = {}
        self.strain_map: dict[int, Item] = {}
        self.gene_map: dict[str, Item] = {}
        self.gene_family_map: dict[str, Item] = {}
        self.consensus_regions: list[Item] = []
        self.homologue_count = 0

    def process(self, session: Session) -> None:
        phytozome_version = self.converter.phytozome_version
        if not phytozome_version:
            raise ChadoError("PHYTOZOME_VERSION must be set to run the homology processor")

        source_ids = self.converter.get_desired_chado_organism_ids()
        target_ids = self.converter.get_desired_chado_homologue_organism_ids()
        if not source_ids:
            raise ChadoError("No chado organisms match ORGANISMS/STRAINS for the homology processor")
        if not target_ids:
            raise ChadoError(
                "No chado organisms match HOMOLOGUE_ORGANISMS/HOMOLOGUE_STRAINS for the homology processor"
            )
        for organism_id in sorted(source_ids | target_ids):
            self.create_chado_organism(organism_id)
        logger.info(f"Homology: {len(source_ids)} source and {len(target_ids)} homologue chado organisms")

        schema = schema_prefix()
        trees = fetch_all(
            session,
            f"SELECT phylotree_id, name, comment FROM {schema}phylotree WHERE name LIKE :pattern",
            {"pattern": f"{phytozome_version}.%"},
        )
        for tree in trees:
            gene_family = self.create_gene_family(tree["name"], tree["comment"])
            source_genes: dict[str, Item] = {}
            target_genes: dict[str, Item] = {}
            nodes = fetch_all(
                session,
                f"SELECT feature.feature_id, feature.uniquename, feature.organism_id "
                f"FROM {schema}phylonode, {schema}feature "
                "WHERE phylonode.feature_id = feature.feature_id AND phylonode.phylotree_id = :phylotree_id "
                "ORDER BY feature.feature_id",
                {"phylotree_id": tree["phylotree_id"]},
            )
            for node in nodes:
                organism_id = node["organism_id"]
                if organism_id not in source_ids and organism_id not in target_ids:
                    continue
                gene = self.get_gene(session, node, gene_family)
                gene_id = gene.get_attribute("primaryIdentifier")
                if organism_id in source_ids:
                    source_genes[gene_id] = gene
                if organism_id in target_ids:
                    target_genes[gene_id] = gene
            self.store_homologues(gene_family, source_genes, target_genes)

        if self.gene_map:
            self.store_all(self.organism_map.values())
            self.store_all(self.strain_map.values())
            self.store_all(self.gene_map.values())
            self.store_all(self.gene_family_map.values())
            self.store_all(self.consensus_regions)
        logger.info(
            f"Stored {self.homologue_count} homologues between {len(self.gene_map)} genes "
            f"in {len(self.gene_family_map)} gene families"
        )

    def create_chado_organism(self, organism_id: int) -> None:
        organism = self.create_organism(self.converter.get_organism_data(organism_id))
        self.organism_map[organism_id] = organism
        strain_name = self.converter.get_strain_name(organism_id) or self.converter.get_homologue_strain_name(
            organism_id
        )
        if strain_name:
            strain = self.create_item("Strain")
            strain.set_attribute("primaryIdentifier", strain_name)
            strain.set_reference("organism", organism)
            self.strain_map[organism_id] = strain

    def create_gene_family(self, name: str, description: Optional[str]) -> Item:
        """Create a GeneFamily with its "<name>-consensus" ConsensusRegion."""
        gene_family = self.create_item("GeneFamily")
        gene_family.set_attribute("primaryIdentifier", name)
        if description:
            gene_family.set_attribute("description", description)

        consensus_region = self.create_item("ConsensusRegion")
        consensus_region.set_attribute("primaryIdentifier", f"{name}-consensus")
        consensus_region.set_reference("geneFamily", gene_family)
        gene_family.set_reference("consensusRegion", consensus_region)
        self.consensus_regions.append(consensus_region)

        self.gene_family_map[name] = gene_family
        return gene_family

    def get_gene(self, session: Session, node: dict, gene_family: Item) -> Item:
        """
        The gene of a phylonode polypeptide. A gene keeps the first family
        it was found in.
        """
        organism_id = node["organism_id"]
        schema = schema_prefix()
        row = fetch_one(
            session,
            f"SELECT gene.feature_id, gene.uniquename, gene.name, gene.organism_id, "
            f"gene.residues, gene.seqlen, gene.md5checksum "
            f"FROM {schema}feature_relationship protein_mrna, {schema}feature_relationship mrna_gene, "
            f"{schema}feature gene "
            "WHERE protein_mrna.subject_id = :polypeptide_id "
            "AND mrna_gene.subject_id = protein_mrna.object_id "
            "AND gene.feature_id = mrna_gene.object_id",
            {"polypeptide_id": node["feature_id"]},
        )
        if row is not None:
            gene_name = row["uniquename"]
        else:
            # no gene feature (Arabidopsis): AT1G01010.1 belongs to AT1G01010
            gene_name = node["uniquename"].split(".")[0]

        gene = self.gene_map.get(gene_name)
        if gene is not None:
            return gene

        gene = self.create_item("Gene")
        organism = self.organism_map[organism_id]
        if row is not None:
            sequence = self.create_item("Sequence")
            if ChadoFeature.from_row(row).populate_sequence_feature(gene, sequence, organism):
                self.store(sequence)
        else:
            logger.debug(f"No gene feature for {node['uniquename']}, using {gene_name}")
            gene.set_attribute("primaryIdentifier", gene_name)
            gene.set_reference("organism", organism)
        strain = self.strain_map.get(organism_id)
        if strain is not None:
            gene.set_reference("strain", strain)
        gene.set_reference("geneFamily", gene_family)
        self.gene_map[gene_name] = gene
        return gene

    def store_homologues(self, gene_family: Item, source_genes: dict[str, Item], target_genes: dict[str, Item]) -> None:
        for source_id, source in source_genes.items():
            for target_id, target in target_genes.items():
                if source_id == target_id:
                    continue
                same_organism = source.get_reference("organism") == target.get_reference("organism")
                homologue = self.create_item("Homologue")
                homologue.set_attribute("type", "paralogue" if same_organism else "orthologue")
                homologue.set_reference("geneFamily", gene_family)
                homologue.set_reference("gene", source)
                homologue.set_reference("homologue", target)
                self.store(homologue)
                self.homologue_count += 1
