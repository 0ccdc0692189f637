"""
Germplasm file converter: one Strain per file, described by key/value lines.

    TaxonID             3885
    Strain              G19833
    AlternateStrainName Chaucha Chuga
    Description         Andean landrace from Peru
    PatentNumber        PVP 9100155
    URL                 https://npgsweb.ars-grin.gov/gringlobal/accessiondetail?id=1234
    Country             Peru
    PMID                20694114
    PMID                23922345
"""

import logging
from typing import TextIO

from legfed.converters.base import FileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.writer import ItemWriter
from legfed.utils.file_io import is_comment_or_blank, split_line

logger = logging.getLogger(__name__)

# lower-cased key -> Strain attribute
STRAIN_ATTRIBUTES = {
    "alternatestrainname": "alternateName",
    "description": "description",
    "patentnumber": "patentNumber",
    "url": "url",
    "country": "country",
}


class GermplasmFileConverter(FileConverter):
    name = "germplasm-file"

    def __init__(self, writer: ItemWriter):
        super().__init__(writer)
        self.identifiers: set[str] = set()

    def process(self, fh: TextIO) -> None:
        taxon_id = None
        identifier = None
        attributes = {}
        pmids = []

        for line in fh:
            if is_comment_or_blank(line):
                continue
            parts = split_line(line)
            if len(parts) < 2 or not parts[1].strip():
                logger.warning(f"Skipping line without a value in {self.current_file_name}: {line.strip()}")
                continue
            key, value = parts[0].strip().lower(), parts[1].strip()
            if key == "taxonid":
                taxon_id = value
            elif key == "strain":
                identifier = value
            elif key == "pmid":
                pmids.append(value)
            elif key in STRAIN_ATTRIBUTES:
                attributes[STRAIN_ATTRIBUTES[key]] = value
            else:
                logger.warning(f"Unknown germplasm field '{parts[0]}' in {self.current_file_name}")

        if taxon_id is None or identifier is None:
            raise ConverterError(f"Germplasm file {self.current_file_name} needs TaxonID and Strain")
        if identifier in self.identifiers:
            raise ConverterError(f"Strain {identifier} is described by more than one germplasm file")

        strain = self.create_item("Strain")
        strain.set_attribute("identifier", identifier)
        strain.set_reference("organism", self.get_organism(taxon_id))
        for name, value in attributes.items():
            strain.set_attribute(name, value)
        for pmid in pmids:
            strain.add_to_collection("publications", self.get_publication(pmid=pmid))
        self.store(strain)
        self.identifiers.add(identifier)

    def close(self) -> None:
        logger.info(f"Stored {len(self.identifiers)} germplasm strains")
