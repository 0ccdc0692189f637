"""
A row of the chado feature table and the Item fields it fills.
"""

from dataclasses import dataclass
from typing import Optional

from legfed.items.item import Item
from legfed.utils.datastore import md5_checksum


@dataclass
class ChadoFeature:
    """The chado.feature fields used by the processors."""

    feature_id: int
    uniquename: str
    name: Optional[str] = None
    organism_id: Optional[int] = None
    type_id: Optional[int] = None
    residues: Optional[str] = None
    seqlen: int = 0
    md5checksum: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "ChadoFeature":
        return cls(
            feature_id=int(row["feature_id"]),
            uniquename=row["uniquename"],
            name=row.get("name"),
            organism_id=row.get("organism_id"),
            type_id=row.get("type_id"),
            residues=row.get("residues"),
            seqlen=int(row.get("seqlen") or 0),
            md5checksum=row.get("md5checksum"),
        )

    def populate_bio_entity(self, item: Item, organism: Optional[Item] = None) -> None:
        item.set_attribute("chadoFeatureId", self.feature_id)
        item.set_attribute("primaryIdentifier", self.uniquename)
        if self.name:
            item.set_attribute("secondaryIdentifier", self.name)
        if organism is not None:
            item.set_reference("organism", organism)

    def populate_chado_names(self, item: Item) -> None:
        item.set_attribute("chadoUniqueName", self.uniquename)
        if self.name:
            item.set_attribute("chadoName", self.name)

    def populate_sequence_feature(self, item: Item, sequence: Item, organism: Optional[Item] = None) -> bool:
        """
        Fill a SequenceFeature and, when the feature has residues, its Sequence.

        Args:
            item: The SequenceFeature item
            sequence: An unstored Sequence item
            organism: Organism to reference, if any

        Returns:
            True if the Sequence was filled and referenced and so must be stored
        """
        self.populate_bio_entity(item, organism)
        if self.seqlen > 0:
            item.set_attribute("length", self.seqlen)
        if not self.residues:
            return False

        sequence.set_attribute("residues", self.residues)
        sequence.set_attribute("length", self.seqlen if self.seqlen > 0 else len(self.residues))
        sequence.set_attribute("md5checksum", self.md5checksum or md5_checksum(self.residues))
        item.set_reference("sequence", sequence)
        return True
