"""
GO annotations parsed out of free-text descriptions.

Gene descriptions (the gene "Note" featureprop) and gene family
descriptions (phylotree.comment) carry GO identifiers inline, e.g.
"NAC domain protein; GO:0003677 (DNA binding), GO:0006355". Each
identifier found gives a GOAnnotation on the gene or gene family.
"""

import logging
import re
from typing import Optional

from sqlalchemy.orm import Session

from legfed.chado.processors.base import ChadoProcessor
from legfed.items.item import Item
from legfed.services.sql_utils import fetch_all, schema_prefix

logger = logging.getLogger(__name__)

GO_PATTERN = re.compile(r"GO:\d{7}")


def parse_go_identifiers(description: Optional[str]) -> list[str]:
    """Return the distinct GO identifiers in a description, in order of appearance."""
    if not description:
        return []
    return list(dict.fromkeys(GO_PATTERN.findall(description)))


class GOProcessor(ChadoProcessor):
    """Stores GOTerm and GOAnnotation items for genes and gene families."""

    name = "go"

    def __init__(self, converter):
        super().__init__(converter)
        self.go_term_map: dict[str, Item] = {}
        self.annotation_count = 0

    def process(self, session: Session) -> None:
        schema = schema_prefix()
        gene_type_id = self.get_cvterm_id(session, "gene")
        note_type_id = self.get_cvterm_id(session, "Note")

        organisms = self.create_organisms()
        gene_count = 0
        for organism_id, organism in organisms.items():
            rows = fetch_all(
                session,
                f"SELECT feature.feature_id, feature.uniquename, featureprop.value "
                f"FROM {schema}feature, {schema}featureprop "
                "WHERE feature.feature_id = featureprop.feature_id "
                "AND feature.type_id = :gene_type_id AND featureprop.type_id = :note_type_id "
                "AND feature.organism_id = :organism_id "
                "ORDER BY feature.feature_id, featureprop.rank",
                {"gene_type_id": gene_type_id, "note_type_id": note_type_id, "organism_id": organism_id},
            )
            # a gene may carry several Note props
            gene_notes: dict[str, list[str]] = {}
            for row in rows:
                gene_notes.setdefault(row["uniquename"], []).append(row["value"] or "")

            for uniquename, notes in gene_notes.items():
                identifiers = parse_go_identifiers(" ".join(notes))
                if not identifiers:
                    continue
                gene = self.create_item("Gene")
                gene.set_attribute("primaryIdentifier", uniquename)
                gene.set_reference("organism", organism)
                self.annotate(gene, identifiers)
                self.store(gene)
                gene_count += 1

        family_count = 0
        for row in fetch_all(session, f"SELECT name, comment FROM {schema}phylotree ORDER BY phylotree_id"):
            identifiers = parse_go_identifiers(row["comment"])
            if not identifiers:
                continue
            gene_family = self.create_item("GeneFamily")
            gene_family.set_attribute("primaryIdentifier", row["name"])
            self.annotate(gene_family, identifiers)
            self.store(gene_family)
            family_count += 1

        logger.info(
            f"Stored {self.annotation_count} GO annotations on {gene_count} genes and {family_count} gene families "
            f"({len(self.go_term_map)} GO terms)"
        )

    def annotate(self, subject: Item, identifiers: list[str]) -> None:
        for identifier in identifiers:
            go_term = self.go_term_map.get(identifier)
            if go_term is None:
                go_term = self.create_item("GOTerm")
                go_term.set_attribute("identifier", identifier)
                self.store(go_term)
                self.go_term_map[identifier] = go_term

            annotation = self.create_item("GOAnnotation")
            annotation.set_reference("subject", subject)
            annotation.set_reference("ontologyTerm", go_term)
            self.store(annotation)
            subject.add_to_collection("goAnnotation", annotation)
            self.annotation_count += 1
