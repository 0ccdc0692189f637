"""
Genetic maps, linkage groups, markers and QTLs from chado.

Linkage groups, QTLs and genetic markers are features; genetic maps are
featuremap rows reached through the featurepos rows of the linkage
groups. QTL spans are featureloc rows on a linkage group whose fmin/fmax
hold cM x 100.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from legfed.chado.feature import ChadoFeature
from legfed.chado.processors.base import ChadoProcessor
from legfed.items.item import Item
from legfed.services.sql_utils import fetch_all, fetch_one, schema_prefix
from legfed.utils.datastore import round_half_up

logger = logging.getLogger(__name__)

# Publication values chado uses for "no value"
NULL_VALUES = ("NULL", "0")


def _has_value(value: Optional[str], nulls: tuple = NULL_VALUES) -> bool:
    return value is not None and str(value) != "" and str(value) not in nulls


def set_publication_attributes(publication: Item, row: dict) -> None:
    """Copy a chado pub row onto a Publication, skipping placeholder values."""
    for column, attribute in (
        ("title", "title"),
        ("volume", "volume"),
        ("series_name", "journal"),
        ("issue", "issue"),
    ):
        if _has_value(row.get(column)):
            publication.set_attribute(attribute, row[column])

    year = row.get("pyear")
    if _has_value(year, ("NULL",)):
        try:
            int(year)
            publication.set_attribute("year", year)
        except ValueError:
            pass

    if _has_value(row.get("pages"), ("NULL",)):
        publication.set_attribute("pages", row["pages"])

    uniquename = row.get("uniquename") or ""
    first_author = uniquename.split(",")[0]
    if first_author:
        publication.set_attribute("firstAuthor", first_author)


class GeneticProcessor(ChadoProcessor):
    """Stores GeneticMap, LinkageGroup, GeneticMarker and QTL items with their links."""

    name = "genetic"

    def __init__(self, converter):
        super().__init__(converter)
        self.linkage_group_map: dict[int, Item] = {}
        self.genetic_marker_map: dict[int, Item] = {}
        self.qtl_map: dict[int, Item] = {}
        self.genetic_map_map: dict[int, Item] = {}
        self.publication_map: dict[int, Item] = {}

    def process(self, session: Session) -> None:
        schema = schema_prefix()

        linkage_group_type_id = self.get_cvterm_id(session, "linkage_group")
        genetic_marker_type_id = self.get_cvterm_id(session, "genetic_marker")
        qtl_type_id = self.get_cvterm_id(session, "QTL")
        self.get_cvterm_id(session, "consensus_region")
        favorable_allele_source_type_id = self.get_cvterm_id(session, "Favorable Allele Source")

        organisms = self.create_organisms()

        for organism_id, organism in organisms.items():
            self.linkage_group_map.update(self.generate_map(session, "LinkageGroup", linkage_group_type_id, organism_id))
            self.qtl_map.update(self.generate_map(session, "QTL", qtl_type_id, organism_id))
            self.genetic_marker_map.update(
                self.generate_map(session, "GeneticMarker", genetic_marker_type_id, organism_id, organism)
            )

            # genetic maps are not features; reach them through the linkage groups
            rows = fetch_all(
                session,
                f"SELECT * FROM {schema}featuremap WHERE featuremap_id IN ("
                f"SELECT DISTINCT featuremap_id FROM {schema}featurepos WHERE feature_id IN ("
                f"SELECT feature_id FROM {schema}feature WHERE organism_id = :organism_id AND type_id = :type_id))",
                {"organism_id": organism_id, "type_id": linkage_group_type_id},
            )
            for row in rows:
                genetic_map = self.create_item("GeneticMap")
                genetic_map.set_attribute("primaryIdentifier", row["name"])
                if row.get("description"):
                    genetic_map.set_attribute("description", row["description"])
                genetic_map.set_attribute("unit", "cM")
                self.genetic_map_map[int(row["featuremap_id"])] = genetic_map

        logger.info(
            f"Loaded {len(self.linkage_group_map)} linkage groups, {len(self.qtl_map)} QTLs, "
            f"{len(self.genetic_marker_map)} markers, {len(self.genetic_map_map)} genetic maps"
        )

        for featuremap_id, genetic_map in self.genetic_map_map.items():
            rows = fetch_all(
                session,
                f"SELECT * FROM {schema}pub WHERE pub_id IN "
                f"(SELECT pub_id FROM {schema}featuremap_pub WHERE featuremap_id = :featuremap_id)",
                {"featuremap_id": featuremap_id},
            )
            for row in rows:
                genetic_map.add_to_collection("publications", self.get_publication(row))

        for feature_id, qtl in self.qtl_map.items():
            rows = fetch_all(
                session,
                f"SELECT * FROM {schema}pub WHERE pub_id IN "
                f"(SELECT pub_id FROM {schema}feature_cvterm WHERE feature_id = :feature_id)",
                {"feature_id": feature_id},
            )
            for row in rows:
                qtl.add_to_collection("publications", self.get_publication(row))

            stock = fetch_one(
                session,
                f"SELECT uniquename FROM {schema}stock WHERE stock_id = "
                f"(SELECT stock_id FROM {schema}feature_stock WHERE type_id = :type_id AND feature_id = :feature_id)",
                {"type_id": favorable_allele_source_type_id, "feature_id": feature_id},
            )
            if stock is not None and stock["uniquename"]:
                qtl.set_attribute("favorableAlleleSource", stock["uniquename"])

        for featuremap_id, genetic_map in self.genetic_map_map.items():
            self.load_marker_positions(session, featuremap_id, genetic_map)
            self.load_linkage_group_lengths(session, featuremap_id, genetic_map)

        for feature_id, qtl in self.qtl_map.items():
            self.load_qtl_ranges(session, feature_id, qtl)
            self.load_qtl_markers(session, feature_id, qtl)

        self.store_all(self.linkage_group_map.values())
        self.store_all(self.genetic_marker_map.values())
        self.store_all(self.qtl_map.values())
        self.store_all(self.genetic_map_map.values())

    def generate_map(
        self,
        session: Session,
        class_name: str,
        type_id: int,
        organism_id: int,
        organism: Optional[Item] = None,
    ) -> dict[int, Item]:
        """Create an Item per feature of the given type, keyed by feature_id."""
        rows = fetch_all(
            session,
            f"SELECT * FROM {schema_prefix()}feature WHERE organism_id = :organism_id AND type_id = :type_id",
            {"organism_id": organism_id, "type_id": type_id},
        )
        items = {}
        for row in rows:
            feature = ChadoFeature.from_row(row)
            item = self.create_item(class_name)
            feature.populate_bio_entity(item, organism)
            items[feature.feature_id] = item
        return items

    def get_publication(self, row: dict) -> Item:
        """Get or create (and store) the Publication for a pub row."""
        pub_id = int(row["pub_id"])
        publication = self.publication_map.get(pub_id)
        if publication is None:
            publication = self.create_item("Publication")
            set_publication_attributes(publication, row)
            self.store(publication)
            self.publication_map[pub_id] = publication
        return publication

    def load_marker_positions(self, session: Session, featuremap_id: int, genetic_map: Item) -> None:
        rows = fetch_all(
            session,
            f"SELECT * FROM {schema_prefix()}featurepos "
            "WHERE featuremap_id = :featuremap_id AND feature_id <> map_feature_id",
            {"featuremap_id": featuremap_id},
        )
        for row in rows:
            marker = self.genetic_marker_map.get(int(row["feature_id"]))
            if marker is None:
                continue
            genetic_map.add_to_collection("markers", marker)
            linkage_group = self.linkage_group_map.get(int(row["map_feature_id"]))
            if linkage_group is not None:
                linkage_group.add_to_collection("markers", marker)
                position = self.create_item("LinkageGroupPosition")
                position.set_attribute("position", float(row["mappos"]))
                position.set_reference("linkageGroup", linkage_group)
                self.store(position)
                marker.add_to_collection("linkageGroupPositions", position)

    def load_linkage_group_lengths(self, session: Session, featuremap_id: int, genetic_map: Item) -> None:
        # the mappos=0 row is the start of the linkage group
        rows = fetch_all(
            session,
            f"SELECT * FROM {schema_prefix()}featurepos "
            "WHERE featuremap_id = :featuremap_id AND feature_id = map_feature_id AND mappos > 0",
            {"featuremap_id": featuremap_id},
        )
        for row in rows:
            linkage_group = self.linkage_group_map.get(int(row["feature_id"]))
            if linkage_group is not None:
                linkage_group.set_attribute("length", float(row["mappos"]))
                linkage_group.set_reference("geneticMap", genetic_map)

    def load_qtl_ranges(self, session: Session, feature_id: int, qtl: Item) -> None:
        rows = fetch_all(
            session,
            f"SELECT * FROM {schema_prefix()}featureloc WHERE feature_id = :feature_id",
            {"feature_id": feature_id},
        )
        for row in rows:
            linkage_group = self.linkage_group_map.get(int(row["srcfeature_id"]))
            if linkage_group is None:
                continue
            # fmin/fmax are cM x 100
            begin = float(row["fmin"]) / 100.0
            end = float(row["fmax"]) / 100.0
            linkage_group_range = self.create_item("LinkageGroupRange")
            linkage_group_range.set_attribute("begin", begin)
            linkage_group_range.set_attribute("end", end)
            linkage_group_range.set_attribute("length", round_half_up(end - begin, 2))
            linkage_group_range.set_reference("linkageGroup", linkage_group)
            self.store(linkage_group_range)
            qtl.add_to_collection("linkageGroupRanges", linkage_group_range)
            linkage_group.add_to_collection("QTLs", qtl)

    def load_qtl_markers(self, session: Session, feature_id: int, qtl: Item) -> None:
        # relationship type (nearest, flanking low/high) is not kept
        rows = fetch_all(
            session,
            f"SELECT object_id FROM {schema_prefix()}feature_relationship WHERE subject_id = :subject_id",
            {"subject_id": feature_id},
        )
        for row in rows:
            marker = self.genetic_marker_map.get(int(row["object_id"]))
            if marker is not None:
                qtl.add_to_collection("markers", marker)
