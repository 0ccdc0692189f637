"""
Genetic map file converter.

    GeneticMap  BAT93_x_JALO_EEP558
    PMID        20000000
    Parents     3885    BAT93   JALO_EEP558
    #Marker     LG  Type  Position  QTL             Traits
    Bng122      1   SSR   12.3      Seed weight 1-1 SW

Linkage groups are named "<map>_<lg>" and grow to the furthest marker
position. Each QTL gets a LinkageGroupRange spanning its markers.
"""

import logging
from dataclasses import dataclass
from typing import Optional, TextIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.datastore import round_half_up
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)


@dataclass
class GeneticMapRecord:
    """One marker line of a genetic map file."""

    marker: str
    lg: int
    type: str
    position: float
    qtl: Optional[str] = None
    traits: Optional[str] = None

    @classmethod
    def from_parts(cls, parts: list[str]) -> "GeneticMapRecord":
        """
        Raises:
            ConverterError: if a required column is missing or not numeric
        """
        try:
            return cls(
                marker=parts[0],
                lg=int(parts[1]),
                type=parts[2],
                position=float(parts[3]),
                qtl=parts[4] if len(parts) > 4 and parts[4] else None,
                traits=parts[5] if len(parts) > 5 and parts[5] else None,
            )
        except (IndexError, ValueError) as e:
            raise ConverterError(f"Error parsing genetic map file line {parts}: {e}") from e


@dataclass
class QTLSpan:
    """The QTL Item, its LinkageGroupRange and the marker positions seen so far."""

    qtl: Item
    linkage_group_range: Item
    begin: float
    end: float


class GeneticMapFileConverter(FileConverter):
    """Loads a GeneticMap with its linkage groups, marker positions and QTL ranges."""

    name = "genetic-map-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.genetic_map_map: dict[str, Item] = {}
        self.mapping_population_map: dict[str, Item] = {}
        self.linkage_group_map: dict[str, Item] = {}
        self.linkage_group_lengths: dict[str, float] = {}
        self.marker_map: dict[str, Item] = {}
        self.qtl_spans: dict[str, QTLSpan] = {}

    def process(self, fh: TextIO) -> None:
        genetic_map: Optional[Item] = None
        genetic_map_name: Optional[str] = None
        mapping_population: Optional[Item] = None
        publication: Optional[Item] = None

        for line in fh:
            if is_comment_or_blank(line) or line.startswith("Marker"):
                continue
            parts = split_line(line)

            if line.startswith("GeneticMap"):
                genetic_map_name = parts[1].strip()
                genetic_map = self.genetic_map_map.get(genetic_map_name)
                if genetic_map is None:
                    genetic_map = self.create_item("GeneticMap")
                    genetic_map.set_attribute("primaryIdentifier", genetic_map_name)
                    self.genetic_map_map[genetic_map_name] = genetic_map
            elif line.startswith("PMID"):
                publication = self.get_publication(pmid=parts[1].strip())
            elif line.startswith("Parents"):
                if len(parts) < 4:
                    raise ConverterError(f"Parents line needs taxon ID and two parents: {line.strip()}")
                mapping_population = self.get_mapping_population(parts[1].strip(), parts[2].strip(), parts[3].strip())
            else:
                if genetic_map is None:
                    raise ConverterError(f"GeneticMap header missing before data in {self.current_file_name}")
                if publication is not None:
                    genetic_map.add_to_collection("publications", publication)
                if mapping_population is not None:
                    genetic_map.add_to_collection("mappingPopulations", mapping_population)
                    if publication is not None:
                        mapping_population.add_to_collection("publications", publication)
                record = GeneticMapRecord.from_parts(parts)
                self.process_record(record, genetic_map, genetic_map_name)

    def get_mapping_population(self, taxon_id: str, parent1: str, parent2: str) -> Item:
        name = f"{parent1}_x_{parent2}"
        mapping_population = self.mapping_population_map.get(name)
        if mapping_population is None:
            mapping_population = self.create_item("MappingPopulation")
            mapping_population.set_attribute("primaryIdentifier", name)
            for parent in (parent1, parent2):
                mapping_population.add_to_collection("parents", self.get_organism(taxon_id, parent))
            self.mapping_population_map[name] = mapping_population
        return mapping_population

    def get_linkage_group(self, lg_id: str, number: int, genetic_map: Item) -> Item:
        linkage_group = self.linkage_group_map.get(lg_id)
        if linkage_group is None:
            linkage_group = self.create_item("LinkageGroup")
            linkage_group.set_attribute("primaryIdentifier", lg_id)
            linkage_group.set_attribute("number", number)
            linkage_group.set_attribute("length", 0.0)
            linkage_group.set_reference("geneticMap", genetic_map)
            self.linkage_group_map[lg_id] = linkage_group
            self.linkage_group_lengths[lg_id] = 0.0
        return linkage_group

    def process_record(self, record: GeneticMapRecord, genetic_map: Item, genetic_map_name: str) -> None:
        lg_id = f"{genetic_map_name}_{record.lg}"
        linkage_group = self.get_linkage_group(lg_id, record.lg, genetic_map)

        marker = self.marker_map.get(record.marker)
        if marker is None:
            marker = self.create_item("GeneticMarker")
            marker.set_attribute("primaryIdentifier", record.marker)
            marker.set_attribute("type", record.type)
            position = self.create_item("LinkageGroupPosition")
            position.set_attribute("position", record.position)
            position.set_reference("linkageGroup", linkage_group)
            self.store(position)
            marker.add_to_collection("linkageGroupPositions", position)
            genetic_map.add_to_collection("markers", marker)
            linkage_group.add_to_collection("markers", marker)
            self.marker_map[record.marker] = marker

        if record.position > self.linkage_group_lengths[lg_id]:
            self.linkage_group_lengths[lg_id] = record.position
            linkage_group.set_attribute("length", record.position)

        if record.qtl:
            self.add_qtl_marker(record, marker, linkage_group, genetic_map)

    def add_qtl_marker(self, record: GeneticMapRecord, marker: Item, linkage_group: Item, genetic_map: Item) -> None:
        """Add a marker to a QTL and widen the QTL's range to cover it."""
        span = self.qtl_spans.get(record.qtl)
        if span is None:
            qtl = self.create_item("QTL")
            qtl.set_attribute("primaryIdentifier", record.qtl)
            if record.traits:
                qtl.set_attribute("secondaryIdentifier", record.traits)
            linkage_group_range = self.create_item("LinkageGroupRange")
            linkage_group_range.set_reference("linkageGroup", linkage_group)
            qtl.add_to_collection("linkageGroupRanges", linkage_group_range)
            genetic_map.add_to_collection("QTLs", qtl)
            linkage_group.add_to_collection("QTLs", qtl)
            span = QTLSpan(qtl, linkage_group_range, record.position, record.position)
            self.qtl_spans[record.qtl] = span

        span.qtl.add_to_collection("markers", marker)
        span.begin = min(span.begin, record.position)
        span.end = max(span.end, record.position)
        span.linkage_group_range.set_attribute("begin", span.begin)
        span.linkage_group_range.set_attribute("end", span.end)
        span.linkage_group_range.set_attribute("length", round_half_up(span.end - span.begin, 2))

    def close(self) -> None:
        self.store_all(self.genetic_map_map.values())
        self.store_all(self.mapping_population_map.values())
        self.store_all(self.linkage_group_map.values())
        self.store_all(self.marker_map.values())
        for span in self.qtl_spans.values():
            self.store(span.qtl)
            self.store(span.linkage_group_range)
        logger.info(
            f"Stored {len(self.genetic_map_map)} genetic maps, {len(self.linkage_group_map)} linkage groups, "
            f"{len(self.marker_map)} markers, {len(self.qtl_spans)} QTLs"
        )
