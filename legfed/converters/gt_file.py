"""
GT (genotype matrix) file converter.

A header of key/value lines describes one GenotypingStudy, followed by a
matrix of genotype calls. A "Lines" row names the columns as genotyping
lines (each data row is then a marker); a "Markers" row names them as
markers (each data row is a line, Flapjack style):

    TaxonID         3885
    GenotypingStudy BAT93_x_JALO_EEP558
    Description     RIL population genotyped with the BARCBean6K_3 array
    MarkerType      SNP
    PMID            25555555
    Parent          BAT93
    Parent          JALO EEP558
    Lines           BJ-1    BJ-2    BJ-3
    ss715646001     A       B       A
    ss715646002     B       B       -
"""

import logging
import re
from typing import Optional, TextIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)

# CB27-17 and Foo-Bar-17 are line number 17
LINE_NUMBER_PATTERN = re.compile(r".+-(\d+)$")


class GTFileConverter(FileConverter):
    """Loads a GenotypingStudy with its lines, markers and GenotypeValues."""

    name = "gt-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.line_map: dict[str, Item] = {}
        self.marker_map: dict[str, Item] = {}
        self.value_count = 0

    def process(self, fh: TextIO) -> None:
        organism: Optional[Item] = None
        study: Optional[Item] = None
        marker_type: Optional[str] = None
        # the column items, and whether data rows are markers
        columns: list[Item] = []
        rows_are_markers: Optional[bool] = None

        for line in fh:
            if is_comment_or_blank(line):
                continue
            parts = split_line(line)
            if len(parts) < 2:
                continue
            key = parts[0].strip()
            value = parts[1].strip()
            lower = key.lower()

            if lower == "taxonid":
                organism = self.get_organism(value)
            elif lower == "genotypingstudy":
                if organism is None:
                    raise ConverterError(f"TaxonID must come before GenotypingStudy in {self.current_file_name}")
                study = self.create_item("GenotypingStudy")
                study.set_attribute("primaryIdentifier", value)
                study.set_reference("organism", organism)
            elif lower == "markertype":
                marker_type = value
            elif lower in ("description", "matrixnotes", "pmid", "parent", "lines", "markers"):
                if study is None:
                    raise ConverterError(f"GenotypingStudy must come before {key} in {self.current_file_name}")
                if lower == "description":
                    study.set_attribute("description", value)
                elif lower == "matrixnotes":
                    study.set_attribute("matrixNotes", value)
                elif lower == "pmid":
                    study.add_to_collection("publications", self.get_publication(pmid=value))
                elif lower == "parent":
                    study.add_to_collection("parents", self.get_strain(value, organism))
                elif lower == "lines":
                    rows_are_markers = True
                    columns = [self.get_line(name.strip(), organism) for name in parts[1:]]
                    for genotyping_line in columns:
                        study.add_to_collection("lines", genotyping_line)
                else:
                    rows_are_markers = False
                    columns = [self.get_marker(name.strip(), marker_type, organism) for name in parts[1:]]
                    for marker in columns:
                        study.add_to_collection("markers", marker)
            else:
                if rows_are_markers is None:
                    raise ConverterError(
                        f"Genotype row before a Lines or Markers header in {self.current_file_name}: {key}"
                    )
                values = parts[1:]
                if len(values) != len(columns):
                    raise ConverterError(
                        f"Row {key} has {len(values)} genotypes for {len(columns)} columns in {self.current_file_name}"
                    )
                if rows_are_markers:
                    marker = self.get_marker(key, marker_type, organism)
                    study.add_to_collection("markers", marker)
                    for genotyping_line, call in zip(columns, values):
                        self.store_genotype_value(call, genotyping_line, marker)
                else:
                    genotyping_line = self.get_line(key, organism)
                    study.add_to_collection("lines", genotyping_line)
                    for marker, call in zip(columns, values):
                        self.store_genotype_value(call, genotyping_line, marker)

        if study is None:
            raise ConverterError(f"No GenotypingStudy in {self.current_file_name}")
        self.store(study)

    def get_line(self, name: str, organism: Item) -> Item:
        genotyping_line = self.line_map.get(name)
        if genotyping_line is None:
            genotyping_line = self.create_item("GenotypingLine")
            genotyping_line.set_attribute("primaryIdentifier", name)
            match = LINE_NUMBER_PATTERN.match(name)
            if match:
                genotyping_line.set_attribute("number", int(match.group(1)))
            genotyping_line.set_reference("organism", organism)
            self.store(genotyping_line)
            self.line_map[name] = genotyping_line
        return genotyping_line

    def get_marker(self, name: str, marker_type: Optional[str], organism: Item) -> Item:
        marker = self.marker_map.get(name)
        if marker is None:
            marker = self.create_item("GeneticMarker")
            marker.set_attribute("primaryIdentifier", name)
            if marker_type:
                marker.set_attribute("type", marker_type)
            marker.set_reference("organism", organism)
            self.store(marker)
            self.marker_map[name] = marker
        return marker

    def store_genotype_value(self, call: str, genotyping_line: Item, marker: Item) -> None:
        genotype_value = self.create_item("GenotypeValue")
        genotype_value.set_attribute("value", call.strip() or "-")
        genotype_value.set_reference("line", genotyping_line)
        genotype_value.set_reference("marker", marker)
        self.store(genotype_value)
        self.value_count += 1

    def close(self) -> None:
        logger.info(
            f"Stored {self.value_count} genotype values for {len(self.line_map)} lines "
            f"and {len(self.marker_map)} markers"
        )
