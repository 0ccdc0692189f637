"""
Feature attributes loaded from chado featureprop values.

Each entry of FEATUREPROP_ATTRIBUTES names the Item class, the chado
feature type, and the (attribute, featureprop type) pairs loaded onto it.
When a feature has several props of one type, the lowest rank wins.
"""

import logging

from sqlalchemy.orm import Session

from legfed.chado.processors.base import ChadoProcessor
from legfed.items.item import Item
from legfed.services.sql_utils import fetch_all, fetch_one, schema_prefix

logger = logging.getLogger(__name__)

PROTEIN_MATCH_ATTRIBUTES = [
    ("signatureDesc", "signature_desc"),
    ("status", "status"),
    ("date", "date"),
]

FEATUREPROP_ATTRIBUTES = [
    ("Gene", "gene", [("description", "Note")]),
    ("LinkageGroup", "linkage_group", [("assignedLinkageGroup", "Assigned Linkage Group")]),
    (
        "QTL",
        "QTL",
        [
            ("description", "comment"),
            ("traitDescription", "Experiment Trait Description"),
            ("traitName", "Experiment Trait Name"),
            ("publicationLinkageGroup", "Publication Linkage Group"),
            ("analysisMethod", "QTL Analysis Method"),
            ("traitUnit", "Trait Unit"),
            ("identifier", "QTL Identifier"),
            ("peak", "QTL Peak"),
            ("studyTreatment", "QTL Study Treatment"),
        ],
    ),
    (
        "GeneticMarker",
        "genetic_marker",
        [
            ("description", "description"),
            ("sourceDescription", "Source Description"),
            ("canonicalMarker", "Canonical Marker"),
        ],
    ),
    ("Protein", "polypeptide", [("note", "Note")]),
    ("ProteinMatch", "protein_match", PROTEIN_MATCH_ATTRIBUTES),
    ("ProteinHmmMatch", "protein_hmm_match", PROTEIN_MATCH_ATTRIBUTES),
]


class FeaturePropProcessor(ChadoProcessor):
    """Stores features of the desired organisms carrying their featureprop attributes."""

    name = "featureprop"

    def process(self, session: Session) -> None:
        for organism_id, organism_data in self.converter.chado_to_org_data.items():
            organism = self.create_organism(organism_data)
            row = fetch_one(
                session,
                f"SELECT comment FROM {schema_prefix()}organism WHERE organism_id = :organism_id",
                {"organism_id": organism_id},
            )
            if row is not None and row["comment"] and row["comment"].strip():
                organism.set_attribute("description", row["comment"].strip())
            self.store(organism)

            for class_name, feature_type, attributes in FEATUREPROP_ATTRIBUTES:
                items = self.generate_map(session, organism_id, organism, class_name, feature_type)
                for attribute_name, prop_type in attributes:
                    self.load_attributes(session, items, organism_id, attribute_name, feature_type, prop_type)
                logger.info(f"Storing {len(items)} {class_name} items for organism {organism_data.taxon_id}")
                self.store_all(items.values())

    def get_cvterm_id(self, session: Session, name: str) -> int:
        """
        Look up a defined CV term ID by name.

        Returns:
            The cvterm_id, or 0 if there is no term with a definition
        """
        row = fetch_one(
            session,
            f"SELECT cvterm_id FROM {schema_prefix()}cvterm WHERE name = :name AND length(definition) > 0",
            {"name": name},
        )
        return int(row["cvterm_id"]) if row is not None else 0

    def generate_map(
        self,
        session: Session,
        organism_id: int,
        organism: Item,
        class_name: str,
        feature_type: str,
    ) -> dict[int, Item]:
        """Create an Item for each feature of the type that has featureprops."""
        schema = schema_prefix()
        rows = fetch_all(
            session,
            f"SELECT DISTINCT feature.feature_id, feature.uniquename FROM {schema}feature, {schema}featureprop "
            "WHERE feature.feature_id = featureprop.feature_id "
            "AND feature.organism_id = :organism_id AND feature.type_id = :type_id "
            "ORDER BY feature.feature_id",
            {"organism_id": organism_id, "type_id": self.get_cvterm_id(session, feature_type)},
        )
        items = {}
        for row in rows:
            item = self.create_item(class_name)
            item.set_attribute("primaryIdentifier", row["uniquename"])
            item.set_reference("organism", organism)
            items[int(row["feature_id"])] = item
        return items

    def load_attributes(
        self,
        session: Session,
        items: dict[int, Item],
        organism_id: int,
        attribute_name: str,
        feature_type: str,
        prop_type: str,
    ) -> None:
        """Set an attribute on the mapped items from their featureprop values."""
        schema = schema_prefix()
        rows = fetch_all(
            session,
            f"SELECT featureprop.feature_id, featureprop.value FROM {schema}featureprop, {schema}feature "
            "WHERE featureprop.feature_id = feature.feature_id "
            "AND featureprop.type_id = :prop_type_id "
            "AND feature.organism_id = :organism_id "
            "AND feature.type_id = :feature_type_id "
            "ORDER BY featureprop.feature_id ASC, featureprop.rank DESC",
            {
                "prop_type_id": self.get_cvterm_id(session, prop_type),
                "organism_id": organism_id,
                "feature_type_id": self.get_cvterm_id(session, feature_type),
            },
        )
        for row in rows:
            feature_id = int(row["feature_id"])
            item = items.get(feature_id)
            if item is None:
                logger.error(f"No feature found for featureprop.feature_id={feature_id}.")
                continue
            value = row["value"]
            if value is not None and value.strip():
                item.set_attribute(attribute_name, value.strip())
