"""
Chado processors.

PROCESSORS maps the names accepted by the PROCESSORS setting to their class.
"""

from legfed.chado.processors.base import ChadoProcessor
from legfed.chado.processors.featureprop import FeaturePropProcessor
from legfed.chado.processors.gene_family import GeneFamilyProcessor
from legfed.chado.processors.genetic import GeneticProcessor
from legfed.chado.processors.go import GOProcessor
from legfed.chado.processors.homology import HomologyProcessor
from legfed.chado.processors.protein import ProteinProcessor
from legfed.chado.processors.reactome import ReactomeProcessor

PROCESSORS: dict[str, type[ChadoProcessor]] = {
    processor.name: processor
    for processor in (
        GeneticProcessor,
        GeneFamilyProcessor,
        FeaturePropProcessor,
        ProteinProcessor,
        ReactomeProcessor,
        HomologyProcessor,
        GOProcessor,
    )
}

__all__ = [
    "ChadoProcessor",
    "PROCESSORS",
    "FeaturePropProcessor",
    "GeneFamilyProcessor",
    "GeneticProcessor",
    "GOProcessor",
    "HomologyProcessor",
    "ProteinProcessor",
    "ReactomeProcessor",
]
