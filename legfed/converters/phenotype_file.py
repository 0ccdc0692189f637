"""
Phenotype file converter.

Each line gives a GenotypingLine, a Phenotype and an observed value:

    PI 123456   flower color    purple
    PI 123456   seed weight     12.1;13.4;12.9
    PI 123456   determinate     +
"""

import logging
import re
from typing import TextIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)


NUMBER_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def _is_float(value: str) -> bool:
    """Plain decimal or exponent notation only; nan, inf and 1_000 are text."""
    return NUMBER_PATTERN.match(value.strip()) is not None



def set_phenotype_value(phenotype_value: Item, value: str) -> None:
    """
    Set booleanValue, numericValue or textValue from a raw value.

    "+"/"true" and "-"/"false" are booleans. A ";"-separated list is a
    boolean when it starts with "+" or "-", otherwise the mean of its
    measurements, or text if any measurement is not a number.
    """
    if ";" in value:
        measurements = value.rstrip(";").split(";")
        if measurements[0] == "+":
            phenotype_value.set_attribute("booleanValue", "true")
        elif measurements[0] == "-":
            phenotype_value.set_attribute("booleanValue", "false")
        elif all(_is_float(m) for m in measurements):
            mean = sum(float(m) for m in measurements) / len(measurements)
            phenotype_value.set_attribute("numericValue", mean)
        else:
            phenotype_value.set_attribute("textValue", value)
    elif value in ("+", "true"):
        phenotype_value.set_attribute("booleanValue", "true")
    elif value in ("-", "false"):
        phenotype_value.set_attribute("booleanValue", "false")
    elif _is_float(value):
        phenotype_value.set_attribute("numericValue", value)
    else:
        phenotype_value.set_attribute("textValue", value)


class PhenotypeFileConverter(FileConverter):
    """Loads PhenotypeValues linking GenotypingLines to Phenotypes."""

    name = "phenotype-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.line_map: dict[str, Item] = {}
        self.phenotype_map: dict[str, Item] = {}

    def process(self, fh: TextIO) -> None:
        for line in fh:
            if is_comment_or_blank(line):
                continue
            parts = split_line(line)
            if len(parts) < 3:
                raise ConverterError(f"Phenotype line needs line, phenotype and value in {self.current_file_name}: {line.strip()}")
            line_id, phenotype_id, value = parts[0], parts[1], parts[2]

            genotyping_line = self.line_map.get(line_id)
            if genotyping_line is None:
                genotyping_line = self.create_item("GenotypingLine")
                genotyping_line.set_attribute("primaryIdentifier", line_id)
                self.line_map[line_id] = genotyping_line

            phenotype = self.phenotype_map.get(phenotype_id)
            if phenotype is None:
                phenotype = self.create_item("Phenotype")
                phenotype.set_attribute("primaryIdentifier", phenotype_id)
                self.phenotype_map[phenotype_id] = phenotype

            phenotype_value = self.create_item("PhenotypeValue")
            if value:
                set_phenotype_value(phenotype_value, value)
            phenotype_value.set_reference("phenotype", phenotype)
            phenotype_value.set_reference("line", genotyping_line)
            self.store(phenotype_value)

    def close(self) -> None:
        logger.info(f"Storing {len(self.phenotype_map)} Phenotype items...")
        self.store_all(self.phenotype_map.values())
        logger.info(f"Storing {len(self.line_map)} GenotypingLine items...")
        self.store_all(self.line_map.values())
