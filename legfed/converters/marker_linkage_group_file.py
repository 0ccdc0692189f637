"""
Marker to linkage group file converter.

    TaxonID  3885
    Variety  BAT93
    #marker  LG          position
    Bng122   BJ_LG01     12.3
"""

import logging
from typing import Optional, TextIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)


class MarkerLinkageGroupFileConverter(FileConverter):
    name = "marker-linkage-group-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.marker_map: dict[str, Item] = {}
        self.linkage_group_map: dict[str, Item] = {}
        self.position_count = 0

    def process(self, fh: TextIO) -> None:
        taxon_id: Optional[str] = None
        variety: Optional[str] = None
        organism: Optional[Item] = None

        for line in fh:
            if is_comment_or_blank(line):
                continue
            parts = split_line(line)
            if line.startswith("TaxonID"):
                taxon_id = parts[1].strip()
                organism = None
                continue
            if line.startswith("Variety"):
                variety = parts[1].strip()
                organism = None
                continue

            if organism is None:
                if taxon_id is None or variety is None:
                    raise ConverterError(
                        f"Organism not defined in {self.current_file_name}: taxonId={taxon_id} variety={variety}"
                    )
                organism = self.get_organism(taxon_id, variety)

            if len(parts) < 3:
                raise ConverterError(f"Marker line needs marker, linkage group and position: {parts}")
            marker_id, lg_id = parts[0].strip(), parts[1].strip()
            try:
                position = float(parts[2])
            except ValueError as e:
                raise ConverterError(f"Bad position '{parts[2]}' for marker {marker_id}") from e

            marker = self.marker_map.get(marker_id)
            if marker is None:
                marker = self.create_item("GeneticMarker")
                marker.set_attribute("primaryIdentifier", marker_id)
                marker.set_reference("organism", organism)
                self.marker_map[marker_id] = marker

            linkage_group = self.linkage_group_map.get(lg_id)
            if linkage_group is None:
                linkage_group = self.create_item("LinkageGroup")
                linkage_group.set_attribute("primaryIdentifier", lg_id)
                self.linkage_group_map[lg_id] = linkage_group
            linkage_group.add_to_collection("markers", marker)

            linkage_group_position = self.create_item("LinkageGroupPosition")
            linkage_group_position.set_reference("linkageGroup", linkage_group)
            linkage_group_position.set_attribute("position", position)
            self.store(linkage_group_position)
            marker.add_to_collection("linkageGroupPositions", linkage_group_position)
            self.position_count += 1

    def close(self) -> None:
        self.store_all(self.marker_map.values())
        self.store_all(self.linkage_group_map.values())
        logger.info(
            f"Stored {len(self.marker_map)} markers on {len(self.linkage_group_map)} linkage groups "
            f"({self.position_count} positions)"
        )
