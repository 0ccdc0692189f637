import logging
from typing import TYPE_CHECKING, Iterable

from sqlalchemy.orm import Session

from legfed.core.exceptions import ChadoError
from legfed.core.organisms import OrganismData
from legfed.core.settings import settings
from legfed.items.item import Item
from legfed.services.sql_utils import fetch_one, schema_prefix

if TYPE_CHECKING:
    from legfed.chado.converter import ChadoDBConverter

logger = logging.getLogger(__name__)


class ChadoProcessor:
    """
    Base class for the processors run by ChadoDBConverter.

    A processor reads one area of the chado schema and stores Items
    through its converter, so every Item is still stored only once per run.
    """

    # Name used in the PROCESSORS setting
    name: str = ""

    def __init__(self, converter: "ChadoDBConverter"):
        self.converter = converter

    def process(self, session: Session) -> None:
        raise NotImplementedError

    def create_item(self, class_name: str) -> Item:
        return self.converter.create_item(class_name)

    def store(self, item: Item) -> None:
        self.converter.store(item)

    def store_all(self, items: Iterable[Item]) -> None:
        self.converter.store_all(items)

    def get_cvterm_id(self, session: Session, name: str) -> int:
        """
        Look up a CV term ID by name.

        Raises:
            ChadoError: if the term is not in the cvterm table
        """
        row = fetch_one(
            session,
            f"SELECT cvterm_id FROM {schema_prefix()}cvterm WHERE name = :name",
            {"name": name},
        )
        if row is None:
            raise ChadoError(f"Could not determine CV term id for '{name}'.")
        return int(row["cvterm_id"])

    def create_organism(self, organism_data: OrganismData) -> Item:
        """Create an unstored Organism with taxonId and a non-null variety."""
        organism = self.create_item("Organism")
        organism.set_attribute("taxonId", organism_data.taxon_id)
        organism.set_attribute("variety", organism_data.variety or settings.default_variety)
        return organism

    def create_organisms(self) -> dict[int, Item]:
        """Create and store one Organism per desired chado organism."""
        organisms = {}
        for organism_id, organism_data in self.converter.chado_to_org_data.items():
            organism = self.create_organism(organism_data)
            self.store(organism)
            organisms[organism_id] = organism
        return organisms
