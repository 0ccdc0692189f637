"""
Organism repository.

Maps NCBI taxon IDs to genus/species and to the five-letter "gensp"
prefix used in LIS datastore file names (e.g. phavu = Phaseolus vulgaris).
A built-in table covers the LIS legumes; additional taxa can be loaded from
a properties file with entries of the form:

    taxon.3885.genus=Phaseolus
    taxon.3885.species=vulgaris
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from legfed.core.exceptions import ConverterError
from legfed.core.settings import settings

logger = logging.getLogger(__name__)

# taxon_id -> (genus, species)
LIS_TAXA = {
    "3702": ("Arabidopsis", "thaliana"),
    "130453": ("Arachis", "duranensis"),
    "130454": ("Arachis", "ipaensis"),
    "3818": ("Arachis", "hypogaea"),
    "3821": ("Cajanus", "cajan"),
    "3827": ("Cicer", "arietinum"),
    "3847": ("Glycine", "max"),
    "3848": ("Glycine", "soja"),
    "34305": ("Lotus", "japonicus"),
    "3871": ("Lupinus", "angustifolius"),
    "3880": ("Medicago", "truncatula"),
    "3884": ("Phaseolus", "lunatus"),
    "3885": ("Phaseolus", "vulgaris"),
    "157791": ("Vigna", "radiata"),
    "3914": ("Vigna", "angularis"),
    "3920": ("Vigna", "unguiculata"),
    "57577": ("Trifolium", "pratense"),
}


def make_gensp(genus: str, species: str) -> str:
    """Return the gensp abbreviation: first 3 letters of genus + first 2 of species."""
    return genus[:3].lower() + species[:2].lower()


@dataclass(frozen=True)
class OrganismData:
    """An organism known to the repository."""

    taxon_id: str
    genus: str
    species: str
    variety: Optional[str] = None
    abbreviation: Optional[str] = None

    @property
    def gensp(self) -> str:
        return make_gensp(self.genus, self.species)

    @property
    def genus_species(self) -> str:
        return f"{self.genus} {self.species}"


class OrganismRepository:
    """Lookup of OrganismData by taxon ID, genus/species or gensp."""

    def __init__(self, taxa: dict[str, tuple[str, str]] = None):
        self._by_taxon: dict[str, OrganismData] = {}
        for taxon_id, (genus, species) in (taxa if taxa is not None else LIS_TAXA).items():
            self.add(OrganismData(taxon_id=taxon_id, genus=genus, species=species))

    def add(self, organism: OrganismData) -> None:
        self._by_taxon[organism.taxon_id] = organism

    def load_properties(self, filepath: Path) -> int:
        """
        Load taxon.<id>.genus / taxon.<id>.species entries from a properties file.

        Args:
            filepath: Path to the properties file

        Returns:
            Number of organisms added or updated
        """
        genera: dict[str, str] = {}
        species: dict[str, str] = {}

        with open(filepath) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or line.startswith("!"):
                    continue
                if "=" not in line:
                    continue
                key, value = line.split("=", 1)
                parts = key.strip().split(".")
                if len(parts) < 3 or parts[0] != "taxon":
                    continue
                if parts[2] == "genus":
                    genera[parts[1]] = value.strip()
                elif parts[2] == "species":
                    species[parts[1]] = value.strip()

        count = 0
        for taxon_id, genus in genera.items():
            if taxon_id not in species:
                logger.warning(f"No species given for taxon {taxon_id}, skipping")
                continue
            self.add(OrganismData(taxon_id=taxon_id, genus=genus, species=species[taxon_id]))
            count += 1

        logger.info(f"Loaded {count} organisms from {filepath}")
        return count

    def get_by_taxon(self, taxon_id: str) -> Optional[OrganismData]:
        return self._by_taxon.get(str(taxon_id).strip())

    def get_by_genus_species(self, genus: str, species: str) -> Optional[OrganismData]:
        for organism in self._by_taxon.values():
            if organism.genus == genus and organism.species == species:
                return organism
        return None

    def get_by_gensp(self, gensp: str) -> Optional[OrganismData]:
        for organism in self._by_taxon.values():
            if organism.gensp == gensp:
                return organism
        return None

    def get_taxon_id(self, gensp: str) -> str:
        """
        Get the taxon ID for a gensp prefix.

        Raises:
            ConverterError: if the gensp is not known
        """
        organism = self.get_by_gensp(gensp)
        if organism is None:
            raise ConverterError(f"Taxon ID not available for {gensp}")
        return organism.taxon_id


# Module-level cached repository instance
_repository: Optional[OrganismRepository] = None


def get_organism_repository(reload: bool = False) -> OrganismRepository:
    """
    Return the shared repository, extended from ORGANISM_CONFIG when set.

    Args:
        reload: Force the repository to be rebuilt

    Returns:
        OrganismRepository instance
    """
    global _repository
    if _repository is None or reload:
        _repository = OrganismRepository()
        if settings.organism_config:
            _repository.load_properties(Path(settings.organism_config))
    return _repository
