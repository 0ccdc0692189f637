"""
QTL file converter.

A header block describes the study, followed by one QTL per line:

    TaxonID             3885
    PMID                22222222
    MappingPopulation   BAT93_x_JALO_EEP558
    GenotypingStudy     BAT93xJALO
    Description         RIL population of 80 lines
    #QTL                Phenotype
    Seed weight 1-1     seed weight

When there is no PMID or DOI, a Publication is made from the Title,
Journal, Year, Volume and Pages headers. Only two-column lines are read.
"""

import logging
from typing import Optional, TextIO

from legfed.converters.base import FileConverter
from legfed.items.item import Item
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)

CITATION_KEYS = ("title", "journal", "year", "volume", "pages")


class QTLFileConverter(FileConverter):
    """Loads QTLs with their phenotypes, mapping populations and genotyping studies."""

    name = "qtl-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.phenotype_map: dict[str, Item] = {}
        self.qtl_map: dict[str, Item] = {}
        self.mapping_population_map: dict[str, Item] = {}
        self.genotyping_study_map: dict[str, Item] = {}

    def process(self, fh: TextIO) -> None:
        organism: Optional[Item] = None
        publication: Optional[Item] = None
        citation: dict[str, str] = {}
        mapping_populations: list[Item] = []
        genotyping_study: Optional[Item] = None

        for line in fh:
            parts = split_line(line)
            if is_comment_or_blank(line) or len(parts) != 2:
                continue
            key = parts[0].strip()
            value = parts[1].strip()
            lower = key.lower()

            if lower == "taxonid":
                organism = self.get_organism(value)
            elif lower == "pmid":
                publication = self.get_publication(pmid=value)
            elif lower == "doi":
                publication = self.get_publication(doi=value)
            elif lower in CITATION_KEYS:
                citation[lower] = value
            elif lower == "mappingpopulation":
                mapping_populations.append(self.get_mapping_population(value, organism))
            elif lower == "genotypingstudy":
                genotyping_study = self.get_genotyping_study(value, organism)
            elif lower == "description":
                for mapping_population in mapping_populations:
                    mapping_population.set_attribute("description", value)
                logger.info(f"Set description on mapping populations: {value}")
            else:
                if publication is None and citation.get("title"):
                    publication = self.get_citation_publication(citation)
                if publication is not None:
                    for mapping_population in mapping_populations:
                        mapping_population.add_to_collection("publications", publication)
                    if genotyping_study is not None:
                        genotyping_study.add_to_collection("publications", publication)
                self.process_qtl(key, value, organism, publication, mapping_populations, genotyping_study)

    def get_mapping_population(self, name: str, organism: Optional[Item]) -> Item:
        """Get or create a MappingPopulation; a name like A_x_B also gets parent Strains A and B."""
        mapping_population = self.mapping_population_map.get(name)
        if mapping_population is not None:
            return mapping_population

        mapping_population = self.create_item("MappingPopulation")
        mapping_population.set_attribute("primaryIdentifier", name)
        if organism is not None:
            mapping_population.set_reference("organism", organism)
        self.mapping_population_map[name] = mapping_population
        logger.info(f"Created mapping population: {name}")

        if "_x_" in name:
            for strain_name in name.split("_x_"):
                parent = self.get_strain(strain_name, organism)
                mapping_population.add_to_collection("parents", parent)
        return mapping_population

    def get_genotyping_study(self, name: str, organism: Optional[Item]) -> Item:
        genotyping_study = self.genotyping_study_map.get(name)
        if genotyping_study is None:
            genotyping_study = self.create_item("GenotypingStudy")
            genotyping_study.set_attribute("primaryIdentifier", name)
            if organism is not None:
                genotyping_study.set_reference("organism", organism)
            self.genotyping_study_map[name] = genotyping_study
            logger.info(f"Created genotyping study: {name}")
        return genotyping_study

    def get_citation_publication(self, citation: dict[str, str]) -> Item:
        """Get or create (and store) a Publication described only by its citation."""
        key = f"TITLE:{citation['title']}"
        publication = self.publication_map.get(key)
        if publication is None:
            publication = self.create_item("Publication")
            for name in CITATION_KEYS:
                value = citation.get(name)
                if not value:
                    continue
                if name == "year" and not value.isdigit():
                    logger.warning(f"Ignoring non-numeric year '{value}'")
                    continue
                publication.set_attribute(name, value)
            self.store(publication)
            self.publication_map[key] = publication
            logger.info(f"Stored publication: {citation['title']}")
        return publication

    def process_qtl(
        self,
        qtl_name: str,
        phenotype_name: str,
        organism: Optional[Item],
        publication: Optional[Item],
        mapping_populations: list[Item],
        genotyping_study: Optional[Item],
    ) -> None:
        qtl = self.qtl_map.get(qtl_name)
        if qtl is None:
            qtl = self.create_item("QTL")
            qtl.set_attribute("primaryIdentifier", qtl_name)
            if organism is not None:
                qtl.set_reference("organism", organism)
            self.qtl_map[qtl_name] = qtl

        if phenotype_name:
            phenotype = self.phenotype_map.get(phenotype_name)
            if phenotype is None:
                phenotype = self.create_item("Phenotype")
                phenotype.set_attribute("primaryIdentifier", phenotype_name)
                self.phenotype_map[phenotype_name] = phenotype
            qtl.set_reference("phenotype", phenotype)

        if publication is not None:
            qtl.add_to_collection("publications", publication)
        for mapping_population in mapping_populations:
            qtl.add_to_collection("mappingPopulations", mapping_population)
        if genotyping_study is not None:
            qtl.add_to_collection("genotypingStudies", genotyping_study)

    def close(self) -> None:
        self.store_all(self.mapping_population_map.values())
        self.store_all(self.genotyping_study_map.values())
        self.store_all(self.qtl_map.values())
        self.store_all(self.phenotype_map.values())
        logger.info(f"Stored {len(self.qtl_map)} QTLs and {len(self.phenotype_map)} phenotypes")
