"""
Genotyping line file converter: one GenotypingLine per line (id, origin, comment).
"""

import logging
from typing import TextIO

from legfed.converters.base import FileConverter
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)


class GenotypingLineFileConverter(FileConverter):
    name = "genotyping-line-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.identifiers: set[str] = set()

    def process(self, fh: TextIO) -> None:
        for line in fh:
            if is_comment_or_blank(line):
                continue
            parts = split_line(line)
            identifier = parts[0]
            if identifier in self.identifiers:
                continue
            genotyping_line = self.create_item("GenotypingLine")
            genotyping_line.set_attribute("primaryIdentifier", identifier)
            if len(parts) > 1 and parts[1]:
                genotyping_line.set_attribute("origin", parts[1])
            if len(parts) > 2 and parts[2]:
                genotyping_line.set_attribute("comment", parts[2])
            self.store(genotyping_line)
            self.identifiers.add(identifier)

    def close(self) -> None:
        logger.info(f"Stored {len(self.identifiers)} genotyping lines")
