"""
Chado database converter.

Reads the chado organism table to map chado organism_ids onto the
configured organisms and strains, then runs each configured processor
in turn against the same session. Processors share this converter's
item factory and writer, so an Item is never stored twice in a run.

Strains are written in chado as a species suffix: Cicer arietinum_desi
is species arietinum, strain desi.
"""

import logging
from dataclasses import replace
from typing import Optional, Type

from sqlalchemy.orm import Session

from legfed.chado.processors import PROCESSORS, ChadoProcessor
from legfed.converters.base import DataConverter
from legfed.core.exceptions import ChadoError
from legfed.core.organisms import OrganismData, OrganismRepository, get_organism_repository
from legfed.core.settings import settings
from legfed.items.writer import ItemWriter
from legfed.services.sql_utils import fetch_all, schema_prefix

logger = logging.getLogger(__name__)


class ChadoDBConverter(DataConverter):
    """Runs chado processors for the configured organisms."""

    def __init__(
        self,
        writer: ItemWriter,
        session: Session,
        organisms: Optional[str] = None,
        strains: Optional[str] = None,
        homologue_organisms: Optional[str] = None,
        homologue_strains: Optional[str] = None,
        processors: Optional[str] = None,
        reactome_file: Optional[str] = None,
        phytozome_version: Optional[str] = None,
        repository: OrganismRepository = None,
    ):
        """
        Args:
            writer: Item sink
            session: Database session on the chado schema
            organisms: Space-separated taxon IDs, optionally with a variety (3827_desi)
            strains: Space-separated strain names
            homologue_organisms: Space-separated taxon IDs of homologue organisms
            homologue_strains: Space-separated homologue strain names
            processors: Space-separated processor names, run in order
            reactome_file: Reactome pathway file for the reactome processor
            phytozome_version: Phytozome release of the loaded annotations

        Unset arguments fall back to settings.

        Raises:
            ChadoError: if a taxon ID is not in the organism repository
        """
        super().__init__(writer)
        self.session = session
        self.repository = repository or get_organism_repository()

        self.organisms_to_process = self._parse_organisms(organisms if organisms is not None else settings.organisms)
        self.strains_to_process = set((strains if strains is not None else settings.strains).split())
        self.homologue_organisms_to_process = self._parse_organisms(
            homologue_organisms if homologue_organisms is not None else settings.homologue_organisms
        )
        self.homologue_strains_to_process = set(
            (homologue_strains if homologue_strains is not None else settings.homologue_strains).split()
        )
        self.processors = processors if processors is not None else settings.processors
        self.reactome_file = reactome_file or settings.reactome_file
        self.phytozome_version = phytozome_version or settings.phytozome_version

        # chado organism_id -> OrganismData / strain name
        self.chado_to_org_data: dict[int, OrganismData] = {}
        self.chado_to_homologue_org_data: dict[int, OrganismData] = {}
        self.chado_to_strain_name: dict[int, str] = {}
        self.chado_to_homologue_strain_name: dict[int, str] = {}
        # every chado organism row, selected or not
        self.chado_organism_data: dict[int, OrganismData] = {}

        self.completed_processors: list[ChadoProcessor] = []

    def _parse_organisms(self, value: str) -> dict[str, OrganismData]:
        """
        Resolve "taxon[_variety] ..." into OrganismData keyed by taxon ID.

        A chado organism row resolves to a single taxon, so each taxon may be
        listed once. Varieties that chado stores separately (arietinum_desi,
        arietinum_kabuli) are selected with the strains list instead.

        Raises:
            ChadoError: if a taxon is unknown or listed more than once
        """
        organisms = {}
        for token in value.split():
            taxon_id, _, variety = token.partition("_")
            if taxon_id in organisms:
                raise ChadoError(
                    f"Taxon {taxon_id} is listed more than once in '{value}'; select chado varieties with strains"
                )
            organism_data = self.repository.get_by_taxon(taxon_id)
            if organism_data is None:
                raise ChadoError(f"Can't find organism for taxonId {taxon_id}")
            if variety:
                organism_data = replace(organism_data, variety=variety)
            organisms[taxon_id] = organism_data
        return organisms

    def get_chado_organisms(self) -> list[tuple[int, OrganismData, Optional[str]]]:
        """
        Read the chado organism table.

        Returns:
            (organism_id, OrganismData, strain name or None) per row

        Raises:
            ChadoError: if a genus/species pair is not in the organism repository
        """
        rows = fetch_all(
            self.session,
            f"SELECT organism_id, abbreviation, genus, species FROM {schema_prefix()}organism",
        )
        organisms = []
        for row in rows:
            genus = row["genus"]
            species = row["species"]
            strain = None
            if genus and species and "_" in species:
                species, strain = species.split("_")[:2]
            organism_data = self.repository.get_by_genus_species(genus, species)
            if organism_data is None:
                raise ChadoError(f"Could not get OrganismData from genus,species: {genus},{species}")
            logger.debug(f"chado organism {row['organism_id']}: {genus} {species} strain={strain}")
            organisms.append((int(row["organism_id"]), organism_data, strain))
        return organisms

    def process(self) -> None:
        """
        Build the chado organism maps and run every configured processor.

        Raises:
            ChadoError: if no processors are configured or one is unknown
        """
        names = self.processors.split()
        if not names:
            raise ChadoError("processors not set in ChadoDBConverter")
        unknown = [name for name in names if name not in PROCESSORS]
        if unknown:
            raise ChadoError(f"Unknown chado processor(s): {', '.join(unknown)}. Known: {', '.join(PROCESSORS)}")

        for organism_id, organism_data, strain in self.get_chado_organisms():
            self.chado_organism_data[organism_id] = organism_data
            if organism_data.taxon_id in self.organisms_to_process:
                self.chado_to_org_data[organism_id] = self.organisms_to_process[organism_data.taxon_id]
            if organism_data.taxon_id in self.homologue_organisms_to_process:
                self.chado_to_homologue_org_data[organism_id] = self.homologue_organisms_to_process[
                    organism_data.taxon_id
                ]
            if strain is not None:
                if strain in self.strains_to_process:
                    self.chado_to_strain_name[organism_id] = strain
                if strain in self.homologue_strains_to_process:
                    self.chado_to_homologue_strain_name[organism_id] = strain

        logger.info(
            f"Processing {len(self.chado_to_org_data)} chado organisms "
            f"({len(self.chado_to_homologue_org_data)} homologue organisms)"
        )

        for name in names:
            processor = PROCESSORS[name](self)
            logger.info(f"Running {processor.__class__.__name__}...")
            processor.process(self.session)
            self.completed_processors.append(processor)

    def find_processor(self, cls: Type[ChadoProcessor]) -> ChadoProcessor:
        """
        Return the completed processor of the given type.

        Raises:
            ChadoError: if none or more than one completed processor matches
        """
        found = [processor for processor in self.completed_processors if isinstance(processor, cls)]
        if len(found) > 1:
            raise ChadoError(f"Completed processors list contains two objects of type: {cls.__name__}")
        if not found:
            raise ChadoError(
                f"Can't find {cls.__name__} in the list of completed processors - must run {cls.__name__} first."
            )
        return found[0]

    def get_data_set_title(self, taxon_id: str) -> str:
        organism_data = self.repository.get_by_taxon(taxon_id)
        if organism_data is not None:
            return f"{settings.data_source_name} data set for {organism_data.genus} {organism_data.species}"
        return f"{settings.data_source_name} data set"

    def get_desired_chado_organism_ids(self) -> set[int]:
        return set(self.chado_to_org_data) | set(self.chado_to_strain_name)

    def get_desired_chado_homologue_organism_ids(self) -> set[int]:
        return set(self.chado_to_homologue_org_data) | set(self.chado_to_homologue_strain_name)

    def get_strain_name(self, organism_id: int) -> Optional[str]:
        return self.chado_to_strain_name.get(organism_id)

    def get_homologue_strain_name(self, organism_id: int) -> Optional[str]:
        return self.chado_to_homologue_strain_name.get(organism_id)

    def get_organism_data(self, organism_id: int) -> Optional[OrganismData]:
        """
        OrganismData for a chado organism_id, with the configured variety when
        the organism was selected by taxon.
        """
        return (
            self.chado_to_org_data.get(organism_id)
            or self.chado_to_homologue_org_data.get(organism_id)
            or self.chado_organism_data.get(organism_id)
        )
