"""
Expression file converter.

Header lines describe the ExpressionSource, then a Samples line gives the
number of sample lines that follow. Data lines carry one value per
sample for a transcript; transcripts of the same gene on consecutive
lines are summed into one ExpressionValue per sample.

    ID          phavu.mixed.expr1
    Unit        TPM
    Samples     2
    1   young_leaf  Young trifoliate leaves
    2   root        Root tips
    Phvul.001G000100.1  1.5  0.0
    Phvul.001G000100.2  0.5  3.0
"""

import logging
from typing import Optional, TextIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import split_line

logger = logging.getLogger(__name__)

SOURCE_ATTRIBUTES = {
    "ID": "primaryIdentifier",
    "Description": "description",
    "BioProject": "bioProject",
    "SRA": "sra",
    "GEO": "geo",
    "URL": "url",
    "Unit": "unit",
}


def transcript_to_gene_id(transcript_id: str) -> str:
    """
    Strip a .N or .NN transcript suffix: Foobar12345.11 and Foobar12345.3 give Foobar12345.

    Raises:
        ConverterError: for an empty identifier
    """
    if not transcript_id:
        raise ConverterError("Empty transcript identifier")
    if len(transcript_id) >= 3 and transcript_id[-3] == ".":
        return transcript_id[:-3]
    if len(transcript_id) >= 2 and transcript_id[-2] == ".":
        return transcript_id[:-2]
    return transcript_id


class ExpressionFileConverter(FileConverter):
    """Loads an ExpressionSource with its samples and per-gene values."""

    name = "expression-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.gene_map: dict[str, Item] = {}
        self.sources: list[Item] = []
        self.samples: list[Item] = []
        self.values: list[Item] = []

    def process(self, fh: TextIO) -> None:
        source = self.create_item("ExpressionSource")
        self.sources.append(source)

        samples: list[Item] = []
        gene_id: Optional[str] = None
        values: list[Item] = []
        sums: list[float] = []

        line_count = 0
        for line in fh:
            line_count += 1
            if line.startswith("#") or not line.strip():
                continue
            parts = split_line(line)
            key = parts[0]

            if key in SOURCE_ATTRIBUTES and len(parts) > 1:
                source.set_attribute(SOURCE_ATTRIBUTES[key], parts[1])
                if key == "ID":
                    logger.info(f"Loading expression source: {parts[1]}")
            elif key == "PMID" and len(parts) > 1:
                source.set_reference("publication", self.get_publication(pmid=parts[1]))
            elif key == "Samples" and len(parts) > 1:
                samples = self.read_samples(fh, int(parts[1]), source)
                line_count += len(samples)
            else:
                this_gene_id = transcript_to_gene_id(key)
                if len(parts) - 1 < len(samples):
                    raise ConverterError(
                        f"Error at line {line_count}: {len(parts) - 1} values for {len(samples)} samples"
                    )
                if this_gene_id != gene_id:
                    gene_id = this_gene_id
                    sums = [0.0] * len(samples)
                    values = [self.create_item("ExpressionValue") for _ in samples]
                    self.values.extend(values)

                gene = self.get_gene(gene_id)
                for i, sample in enumerate(samples):
                    sums[i] += float(parts[i + 1])
                    values[i].set_attribute("value", sums[i])
                    values[i].set_reference("sample", sample)
                    values[i].set_reference("gene", gene)

    def read_samples(self, fh: TextIO, count: int, source: Item) -> list[Item]:
        """Read the sample lines that follow a Samples header."""
        samples = []
        for _ in range(count):
            sample_line = fh.readline()
            sample_parts = split_line(sample_line)
            if len(sample_parts) < 2:
                raise ConverterError(f"Sample line needs num and name: {sample_line.strip()!r}")
            sample = self.create_item("ExpressionSample")
            sample.set_attribute("num", sample_parts[0])
            sample.set_attribute("primaryIdentifier", sample_parts[1])
            if len(sample_parts) > 2 and sample_parts[2]:
                sample.set_attribute("description", sample_parts[2])
            sample.set_reference("source", source)
            samples.append(sample)
        self.samples.extend(samples)
        return samples

    def get_gene(self, gene_id: str) -> Item:
        gene = self.gene_map.get(gene_id)
        if gene is None:
            gene = self.create_item("Gene")
            gene.set_attribute("primaryIdentifier", gene_id)
            self.gene_map[gene_id] = gene
        return gene

    def close(self) -> None:
        self.store_all(self.sources)
        self.store_all(self.samples)
        self.store_all(self.gene_map.values())
        self.store_all(self.values)
        logger.info(
            f"Stored {len(self.sources)} sources, {len(self.samples)} samples, "
            f"{len(self.gene_map)} genes, {len(self.values)} values"
        )
