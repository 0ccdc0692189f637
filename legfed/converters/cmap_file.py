"""
CMap file converter.

The file name carries the genetic map name and taxon, e.g.
BJ_3885_20000000.cmap is map "BJ" on taxon 3885, so the map name cannot
contain "_". The first line is the CMap column header:

    map_acc map_name map_start map_stop feature_acc feature_name feature_aliases feature_start feature_stop feature_type_acc [is_landmark]

Features whose type starts with "QTL" become QTLs with a
LinkageGroupRange; everything else is a GeneticMarker with a
LinkageGroupPosition.
"""

import logging
from dataclasses import dataclass
from typing import TextIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.datastore import round_half_up
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)


@dataclass
class CMapRecord:
    """One feature line of a CMap file."""

    map_acc: str
    map_name: str
    map_start: float
    map_stop: float
    feature_acc: str
    feature_name: str
    feature_aliases: str
    feature_start: float
    feature_stop: float
    feature_type_acc: str
    is_landmark: bool = False

    @classmethod
    def from_parts(cls, parts: list[str]) -> "CMapRecord":
        """
        Raises:
            ConverterError: if a column is missing or a coordinate is not numeric
        """
        try:
            return cls(
                map_acc=parts[0],
                map_name=parts[1],
                map_start=float(parts[2]),
                map_stop=float(parts[3]),
                feature_acc=parts[4].replace('"', ""),
                feature_name=parts[5].replace('"', ""),
                feature_aliases=parts[6],
                feature_start=float(parts[7]),
                feature_stop=float(parts[8]),
                feature_type_acc=parts[9],
                is_landmark=len(parts) > 10 and int(parts[10]) == 1,
            )
        except (IndexError, ValueError) as e:
            raise ConverterError(f"Error parsing CMap line {parts}: {e}") from e

    @property
    def is_qtl(self) -> bool:
        return self.feature_type_acc.startswith("QTL")


def parse_cmap_file_name(file_name: str) -> tuple[str, str]:
    """
    Return (genetic map name, taxon ID) from a CMap file name.

    Raises:
        ConverterError: if the name has no "_<taxon>" part
    """
    chunks = file_name.split("_")
    if len(chunks) < 2 or not chunks[1].isdigit():
        raise ConverterError(f"CMap file name {file_name} should be <map>_<taxonID>_<...>")
    return chunks[0], chunks[1]


class CMapFileConverter(FileConverter):
    """Loads linkage groups, marker positions and QTL ranges from CMap exports."""

    name = "cmap-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.genetic_map_map: dict[str, Item] = {}
        # keyed by accession
        self.linkage_group_map: dict[str, Item] = {}
        self.linkage_group_lengths: dict[str, float] = {}
        self.marker_map: dict[str, Item] = {}
        self.qtl_map: dict[str, Item] = {}
        self.positions: list[Item] = []
        self.ranges: list[Item] = []

    def process(self, fh: TextIO) -> None:
        genetic_map_name, taxon_id = parse_cmap_file_name(self.current_file_name)
        organism = self.get_organism(taxon_id)
        genetic_map = self.genetic_map_map.get(genetic_map_name)
        if genetic_map is None:
            genetic_map = self.create_item("GeneticMap")
            genetic_map.set_attribute("primaryIdentifier", genetic_map_name)
            genetic_map.set_reference("organism", organism)
            self.store(genetic_map)
            self.genetic_map_map[genetic_map_name] = genetic_map

        for line in fh:
            if is_comment_or_blank(line) or line.startswith("map_acc"):
                continue
            record = CMapRecord.from_parts(split_line(line))
            linkage_group = self.get_linkage_group(record, organism, genetic_map)
            if record.is_qtl:
                self.add_qtl(record, organism, linkage_group)
            else:
                self.add_marker(record, organism, linkage_group)

    def get_linkage_group(self, record: CMapRecord, organism: Item, genetic_map: Item) -> Item:
        """Get or create the linkage group, growing its length to the furthest map_stop."""
        linkage_group = self.linkage_group_map.get(record.map_acc)
        if linkage_group is None:
            linkage_group = self.create_item("LinkageGroup")
            linkage_group.set_attribute("primaryIdentifier", record.map_acc)
            linkage_group.set_attribute("secondaryIdentifier", record.map_name)
            linkage_group.set_attribute("length", record.map_stop)
            linkage_group.set_reference("organism", organism)
            linkage_group.set_reference("geneticMap", genetic_map)
            self.linkage_group_map[record.map_acc] = linkage_group
            self.linkage_group_lengths[record.map_acc] = record.map_stop
        elif record.map_stop > self.linkage_group_lengths[record.map_acc]:
            self.linkage_group_lengths[record.map_acc] = record.map_stop
            linkage_group.set_attribute("length", record.map_stop)
        return linkage_group

    def add_qtl(self, record: CMapRecord, organism: Item, linkage_group: Item) -> None:
        if record.feature_acc in self.qtl_map:
            return
        qtl = self.create_item("QTL")
        qtl.set_reference("organism", organism)
        # "Seed weight 2-1:SW" names QTL "Seed weight 2-1"; "cmap:QTL123" is accession QTL123
        qtl.set_attribute("primaryIdentifier", record.feature_name.split(":")[0])
        qtl.set_attribute("secondaryIdentifier", record.feature_acc.split(":")[-1])

        linkage_group_range = self.create_item("LinkageGroupRange")
        linkage_group_range.set_attribute("begin", record.feature_start)
        linkage_group_range.set_attribute("end", record.feature_stop)
        linkage_group_range.set_attribute("length", round_half_up(record.feature_stop - record.feature_start, 2))
        linkage_group_range.set_reference("linkageGroup", linkage_group)
        self.ranges.append(linkage_group_range)

        qtl.add_to_collection("linkageGroupRanges", linkage_group_range)
        linkage_group.add_to_collection("QTLs", qtl)
        self.qtl_map[record.feature_acc] = qtl

    def add_marker(self, record: CMapRecord, organism: Item, linkage_group: Item) -> None:
        if record.feature_acc in self.marker_map:
            return
        marker = self.create_item("GeneticMarker")
        marker.set_reference("organism", organism)
        marker.set_attribute("primaryIdentifier", record.feature_name)
        marker.set_attribute("secondaryIdentifier", record.feature_acc)
        marker.set_attribute("type", record.feature_type_acc)

        position = self.create_item("LinkageGroupPosition")
        position.set_attribute("position", record.feature_start)
        position.set_reference("linkageGroup", linkage_group)
        self.positions.append(position)

        marker.add_to_collection("linkageGroupPositions", position)
        linkage_group.add_to_collection("markers", marker)
        self.marker_map[record.feature_acc] = marker

    def close(self) -> None:
        self.store_all(self.linkage_group_map.values())
        self.store_all(self.positions)
        self.store_all(self.ranges)
        self.store_all(self.qtl_map.values())
        self.store_all(self.marker_map.values())
        logger.info(
            f"Stored {len(self.linkage_group_map)} linkage groups, {len(self.marker_map)} markers, "
            f"{len(self.qtl_map)} QTLs from {len(self.genetic_map_map)} CMap genetic maps"
        )
