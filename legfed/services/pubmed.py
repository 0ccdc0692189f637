"""
Look up a PubMed ID from journal, year and author names.

Backs the "legfed pubmed" command, which curators use to find the PMID
of a paper before writing it into a data file header. The converters
themselves never query PubMed.
"""

import logging

from Bio import Entrez

from legfed.core.settings import settings

logger = logging.getLogger(__name__)


def build_search_term(journal: str, year: int, authors: list[str]) -> str:
    """
    Build an esearch term such as
    molecular breeding[journal] AND 2012[pdat] AND Blair[author].
    """
    terms = [f"{journal}[journal]", f"{year}[pdat]"]
    terms.extend(f"{author}[author]" for author in authors)
    return " AND ".join(terms)


def get_pubmed_id(
    journal: str,
    year: int,
    authors: list[str],
    email: str = None,
) -> int:
    """
    Search PubMed for a single paper.

    Args:
        journal: Journal name
        year: Publication year
        authors: Author surnames
        email: Email for the NCBI API (default: ENTREZ_EMAIL setting)

    Returns:
        The PubMed ID when exactly one paper matches, otherwise 0
    """
    Entrez.email = email or settings.entrez_email
    term = build_search_term(journal, year, authors)

    try:
        handle = Entrez.esearch(db="pubmed", term=term)
        result = Entrez.read(handle)
        handle.close()
    except Exception as e:
        logger.error(f"PubMed search error for '{term}': {e}")
        return 0

    count = int(result.get("Count", 0))
    if count != 1:
        logger.debug(f"PubMed search '{term}' returned {count} hits")
        return 0

    return int(result["IdList"][0])
