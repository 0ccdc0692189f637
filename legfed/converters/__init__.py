"""
File converters.

Each converter reads one LIS file format and stores InterMine Items.
FILE_CONVERTERS maps the command-line format name to its class.
"""

from legfed.converters.base import DataConverter, FileConverter
from legfed.converters.annot_info_file import AnnotInfoFileConverter
from legfed.converters.cmap_file import CMapFileConverter
from legfed.converters.expression_file import ExpressionFileConverter
from legfed.converters.fasta_file import FastaFileConverter
from legfed.converters.genetic_map_file import GeneticMapFileConverter
from legfed.converters.genetic_marker_gff import GeneticMarkerGFFConverter
from legfed.converters.germplasm_file import GermplasmFileConverter
from legfed.converters.genotyping_line_file import GenotypingLineFileConverter
from legfed.converters.gt_file import GTFileConverter
from legfed.converters.gwas_file import GWASFileConverter
from legfed.converters.linkage_group_file import LinkageGroupFileConverter
from legfed.converters.marker_chromosome_file import MarkerChromosomeFileConverter
from legfed.converters.marker_linkage_group_file import MarkerLinkageGroupFileConverter
from legfed.converters.marker_qtl_file import MarkerQTLFileConverter
from legfed.converters.organism_file import OrganismFileConverter
from legfed.converters.phenotype_file import PhenotypeFileConverter
from legfed.converters.qtl_file import QTLFileConverter
from legfed.converters.qtl_ontology_file import QTLOntologyFileConverter
from legfed.converters.snp_marker_file import SNPMarkerFileConverter
from legfed.converters.snp_vcf_file import SNPVCFFileConverter
from legfed.converters.strain_file import StrainFileConverter
from legfed.converters.synteny_gff import SyntenyGFFConverter

FILE_CONVERTERS: dict[str, type[FileConverter]] = {
    converter.name: converter
    for converter in (
        AnnotInfoFileConverter,
        CMapFileConverter,
        ExpressionFileConverter,
        GeneticMapFileConverter,
        GeneticMarkerGFFConverter,
        GermplasmFileConverter,
        GenotypingLineFileConverter,
        GTFileConverter,
        GWASFileConverter,
        LinkageGroupFileConverter,
        MarkerChromosomeFileConverter,
        MarkerLinkageGroupFileConverter,
        MarkerQTLFileConverter,
        OrganismFileConverter,
        PhenotypeFileConverter,
        QTLFileConverter,
        QTLOntologyFileConverter,
        SNPMarkerFileConverter,
        SNPVCFFileConverter,
        StrainFileConverter,
        SyntenyGFFConverter,
    )
}

__all__ = [
    "DataConverter",
    "FileConverter",
    "FILE_CONVERTERS",
    "AnnotInfoFileConverter",
    "CMapFileConverter",
    "ExpressionFileConverter",
    "FastaFileConverter",
    "GeneticMapFileConverter",
    "GeneticMarkerGFFConverter",
    "GermplasmFileConverter",
    "GenotypingLineFileConverter",
    "GTFileConverter",
    "GWASFileConverter",
    "LinkageGroupFileConverter",
    "MarkerChromosomeFileConverter",
    "MarkerLinkageGroupFileConverter",
    "MarkerQTLFileConverter",
    "OrganismFileConverter",
    "PhenotypeFileConverter",
    "QTLFileConverter",
    "QTLOntologyFileConverter",
    "SNPMarkerFileConverter",
    "SNPVCFFileConverter",
    "StrainFileConverter",
    "SyntenyGFFConverter",
]
