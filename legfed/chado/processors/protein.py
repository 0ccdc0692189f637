"""
Proteins, their consensus regions, protein matches and HMM matches from chado.

featureloc coordinates are zero-based, so Location.start is fmin + 1.
"""

import logging

from sqlalchemy.orm import Session

from legfed.chado.feature import ChadoFeature
from legfed.chado.processors.base import ChadoProcessor
from legfed.core.exceptions import ChadoError
from legfed.items.item import Item
from legfed.services.sql_utils import fetch_all, schema_prefix

logger = logging.getLogger(__name__)


class ProteinProcessor(ChadoProcessor):
    """Stores Protein items with their sequences, matches and domains."""

    name = "protein"

    def __init__(self, converter):
        super().__init__(converter)
        # consensus regions and domains are shared between proteins
        self.consensus_region_map: dict[int, Item] = {}
        self.protein_domain_map: dict[int, Item] = {}
        self.stats = {"proteins": 0, "protein_matches": 0, "protein_hmm_matches": 0}

    def process(self, session: Session) -> None:
        organisms = self.create_organisms()
        if not organisms:
            raise ChadoError("ORGANISMS must name at least one organism present in chado.")

        type_ids = {
            name: self.get_cvterm_id(session, name)
            for name in ("polypeptide", "polypeptide_domain", "protein_match", "protein_hmm_match", "consensus_region")
        }

        for organism_id, organism in organisms.items():
            rows = fetch_all(
                session,
                f"SELECT * FROM {schema_prefix()}feature WHERE organism_id = :organism_id AND type_id = :type_id",
                {"organism_id": organism_id, "type_id": type_ids["polypeptide"]},
            )
            for row in rows:
                self.process_protein(session, ChadoFeature.from_row(row), organism, type_ids)

        logger.info(
            f"Stored {self.stats['proteins']} proteins, {self.stats['protein_matches']} protein matches, "
            f"{self.stats['protein_hmm_matches']} HMM matches, {len(self.protein_domain_map)} domains, "
            f"{len(self.consensus_region_map)} consensus regions"
        )

    def process_protein(self, session: Session, feature: ChadoFeature, organism: Item, type_ids: dict) -> None:
        schema = schema_prefix()

        protein = self.create_item("Protein")
        sequence = self.create_item("Sequence")
        if feature.populate_sequence_feature(protein, sequence, organism):
            self.store(sequence)
        feature.populate_chado_names(protein)
        if feature.md5checksum:
            protein.set_attribute("md5checksum", feature.md5checksum)

        rows = fetch_all(
            session,
            f"SELECT feature.* FROM {schema}feature, {schema}featureloc "
            "WHERE feature.type_id = :type_id AND feature.feature_id = featureloc.srcfeature_id "
            "AND featureloc.feature_id = :protein_id",
            {"type_id": type_ids["consensus_region"], "protein_id": feature.feature_id},
        )
        for row in rows:
            protein.add_to_collection("consensusRegions", self.get_consensus_region(ChadoFeature.from_row(row)))

        for row in self.fetch_located_on(session, type_ids["protein_match"], feature.feature_id):
            match = self.create_match("ProteinMatch", row, organism, protein)
            self.store(match)
            self.stats["protein_matches"] += 1

        for row in self.fetch_located_on(session, type_ids["protein_hmm_match"], feature.feature_id):
            hmm_match = self.create_match("ProteinHmmMatch", row, organism, protein)
            domain_rows = fetch_all(
                session,
                f"SELECT feature.*, fmin, fmax FROM {schema}feature, {schema}featureloc "
                "WHERE feature.type_id = :type_id AND feature.feature_id = featureloc.srcfeature_id "
                "AND featureloc.feature_id = :hmm_match_id",
                {"type_id": type_ids["polypeptide_domain"], "hmm_match_id": row["feature_id"]},
            )
            for domain_row in domain_rows:
                domain = self.get_protein_domain(ChadoFeature.from_row(domain_row))
                hmm_match.set_reference("proteinDomain", domain)
                location = self.create_location(domain_row, hmm_match, domain)
                hmm_match.set_reference("proteinDomainLocation", location)
                protein.add_to_collection("proteinDomains", domain)
            self.store(hmm_match)
            self.stats["protein_hmm_matches"] += 1

        self.store(protein)
        self.stats["proteins"] += 1

    def fetch_located_on(self, session: Session, type_id: int, srcfeature_id: int) -> list[dict]:
        """Features of a type located on the given feature, with their fmin and fmax."""
        schema = schema_prefix()
        return fetch_all(
            session,
            f"SELECT feature.*, fmin, fmax FROM {schema}feature, {schema}featureloc "
            "WHERE feature.type_id = :type_id AND feature.feature_id = featureloc.feature_id "
            "AND featureloc.srcfeature_id = :srcfeature_id",
            {"type_id": type_id, "srcfeature_id": srcfeature_id},
        )

    def create_match(self, class_name: str, row: dict, organism: Item, protein: Item) -> Item:
        """Create an unstored ProteinMatch or ProteinHmmMatch located on the protein."""
        feature = ChadoFeature.from_row(row)
        match = self.create_item(class_name)
        feature.populate_bio_entity(match, organism)
        feature.populate_chado_names(match)
        match.set_reference("protein", protein)
        match.set_reference("proteinLocation", self.create_location(row, match, protein))
        return match

    def create_location(self, row: dict, feature: Item, located_on: Item) -> Item:
        """Create and store a Location from a featureloc fmin/fmax."""
        location = self.create_item("Location")
        location.set_attribute("start", int(row["fmin"]) + 1)
        location.set_attribute("end", int(row["fmax"]))
        location.set_reference("feature", feature)
        location.set_reference("locatedOn", located_on)
        self.store(location)
        return location

    def get_consensus_region(self, feature: ChadoFeature) -> Item:
        consensus_region = self.consensus_region_map.get(feature.feature_id)
        if consensus_region is None:
            consensus_region = self.create_item("ConsensusRegion")
            sequence = self.create_item("Sequence")
            if feature.populate_sequence_feature(consensus_region, sequence):
                self.store(sequence)
            feature.populate_chado_names(consensus_region)
            if feature.md5checksum:
                consensus_region.set_attribute("md5checksum", feature.md5checksum)
            self.store(consensus_region)
            self.consensus_region_map[feature.feature_id] = consensus_region
        return consensus_region

    def get_protein_domain(self, feature: ChadoFeature) -> Item:
        domain = self.protein_domain_map.get(feature.feature_id)
        if domain is None:
            domain = self.create_item("ProteinDomain")
            feature.populate_bio_entity(domain)
            feature.populate_chado_names(domain)
            self.store(domain)
            self.protein_domain_map[feature.feature_id] = domain
        return domain
