"""
Converter base classes.

DataConverter owns the item factory and the writer and enforces that
every Item reaches the writer exactly once. FileConverter adds the
per-file driving loop used by the flat-file formats: README files are
skipped, each remaining file is handed to process(), and close() stores
whatever the converter kept in its maps until the end of the run.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, TextIO

from legfed.core.exceptions import ConverterError, DuplicateStoreError
from legfed.core.settings import settings
from legfed.items.item import Item, ItemFactory
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import is_readme, open_file

logger = logging.getLogger(__name__)


class DataConverter:
    """Creates Items and stores them once each into an ItemWriter."""

    def __init__(self, writer: ItemWriter):
        self.writer = writer
        self.factory = ItemFactory()
        self._stored: set[str] = set()
        self.organism_map: dict[str, Item] = {}
        self.strain_map: dict[str, Item] = {}
        self.publication_map: dict[str, Item] = {}
        self._data_source: Optional[Item] = None
        self._data_sets: dict[str, Item] = {}

    def create_item(self, class_name: str) -> Item:
        return self.factory.make_item(class_name)

    def store(self, item: Item) -> None:
        """
        Hand an Item to the writer.

        Raises:
            DuplicateStoreError: if the Item was already stored
        """
        if item.identifier in self._stored:
            raise DuplicateStoreError(
                f"{item.class_name} {item.identifier} has already been stored"
            )
        self.writer.store(item)
        self._stored.add(item.identifier)

    def store_all(self, items: Iterable[Item]) -> None:
        for item in items:
            self.store(item)

    @property
    def stored_count(self) -> int:
        return len(self._stored)

    def get_organism(self, taxon_id: str, variety: Optional[str] = None) -> Item:
        """Get or create (and store) the Organism for a taxon ID and optional variety."""
        key = f"{taxon_id}_{variety}" if variety else str(taxon_id)
        organism = self.organism_map.get(key)
        if organism is None:
            organism = self.create_item("Organism")
            organism.set_attribute("taxonId", taxon_id)
            if variety:
                organism.set_attribute("variety", variety)
            self.store(organism)
            self.organism_map[key] = organism
            logger.info(f"Stored organism {key}")
        return organism

    def get_strain(self, strain_name: str, organism: Optional[Item] = None) -> Item:
        """Get or create (and store) a Strain by name."""
        strain = self.strain_map.get(strain_name)
        if strain is None:
            strain = self.create_item("Strain")
            strain.set_attribute("primaryIdentifier", strain_name)
            if organism is not None:
                strain.set_reference("organism", organism)
            self.store(strain)
            self.strain_map[strain_name] = strain
            logger.info(f"Stored strain {strain_name}")
        return strain

    def get_publication(self, pmid: Optional[str] = None, doi: Optional[str] = None) -> Optional[Item]:
        """
        Get or create (and store) a Publication by PubMed ID, else by DOI.

        Returns:
            The Publication, or None when neither identifier is given
        """
        if pmid:
            if not str(pmid).strip().isdigit():
                raise ConverterError(f"Bad PMID '{pmid}' in {self.__class__.__name__}")
            key, attribute, value = f"PMID:{int(pmid)}", "pubMedId", str(int(pmid))
        elif doi:
            key, attribute, value = f"DOI:{doi}", "doi", doi
        else:
            return None

        publication = self.publication_map.get(key)
        if publication is None:
            publication = self.create_item("Publication")
            publication.set_attribute(attribute, value)
            self.store(publication)
            self.publication_map[key] = publication
            logger.info(f"Stored publication {key}")
        return publication

    def get_data_source(self) -> Item:
        if self._data_source is None:
            self._data_source = self.create_item("DataSource")
            self._data_source.set_attribute("name", settings.data_source_name)
            if settings.data_source_url:
                self._data_source.set_attribute("url", settings.data_source_url)
            self.store(self._data_source)
        return self._data_source

    def get_data_set(
        self,
        title: str,
        url: Optional[str] = None,
        version: Optional[str] = None,
    ) -> Item:
        """Get or create (and store) a DataSet linked to the DataSource."""
        data_set = self._data_sets.get(title)
        if data_set is None:
            data_set = self.create_item("DataSet")
            data_set.set_attribute("name", title)
            if url:
                data_set.set_attribute("url", url)
            if version:
                data_set.set_attribute("version", version)
            data_set.set_reference("dataSource", self.get_data_source())
            self.store(data_set)
            self._data_sets[title] = data_set
        return data_set


class FileConverter(DataConverter):
    """Base class for converters that read one or more input files."""

    # Name used to select the converter on the command line
    name: str = ""

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.current_file: Optional[Path] = None
        self.files_processed = 0

    def process_file(self, filepath: Path) -> bool:
        """
        Convert one file.

        Returns:
            False if the file was skipped (README), True otherwise
        """
        filepath = Path(filepath)
        if is_readme(filepath):
            logger.info(f"Skipping {filepath.name}")
            return False

        self.current_file = filepath
        logger.info(f"Processing file {filepath.name}...")
        with open_file(filepath) as fh:
            self.process(fh)
        self.files_processed += 1
        return True

    def process(self, fh: TextIO) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Store Items held back until every file has been read."""
        pass

    def run(self, filepaths: Iterable[Path]) -> dict:
        """
        Convert every file, then close.

        Returns:
            Dictionary with statistics
        """
        for filepath in sorted(Path(p) for p in filepaths):
            self.process_file(filepath)
        self.close()
        return {
            "files_processed": self.files_processed,
            "items_stored": self.stored_count,
        }

    @property
    def current_file_name(self) -> str:
        return self.current_file.name if self.current_file else "<stream>"
