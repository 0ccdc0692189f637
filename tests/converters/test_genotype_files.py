"""
Tests for the germplasm, GT genotype matrix and SNP marker file converters.
"""

import pytest

from legfed.converters.germplasm_file import GermplasmFileConverter
from legfed.converters.gt_file import GTFileConverter
from legfed.converters.snp_marker_file import SNPMarkerFileConverter, SNPMarkerRecord
from legfed.core.exceptions import ConverterError


GERMPLASM_FILE = """#G19833 germplasm
TaxonID\t3885
Strain\tG19833
AlternateStrainName\tChaucha Chuga
Description\tAndean landrace from Peru
Country\tPeru
URL\thttps://npgsweb.ars-grin.gov/gringlobal/accessiondetail?id=1234
PMID\t20694114
PMID\t23922345
"""

GT_LINES_FILE = """TaxonID\t3885
GenotypingStudy\tBAT93_x_JALO_EEP558
Description\tRIL population
MatrixNotes\tA = BAT93 allele
MarkerType\tSNP
PMID\t25555555
Parent\tBAT93
Parent\tJALO EEP558
Lines\tBJ-1\tBJ-2\tBJ-3
ss715646001\tA\tB\tA
ss715646002\tB\tB\t-
"""

GT_MARKERS_FILE = """TaxonID\t3885
GenotypingStudy\tDiversity panel
MarkerType\tSNP
Markers\tss715646001\tss715646003
PI 123456\tAA\tGG
BJ-2\tAG\tGG
"""

SNP_MARKER_FILE = """TaxonID\t3885
ArrayName\tBARCBean6K_3
MarkerType\tSNP
PMID\t23922345
#marker\tdesignSequence\talleles\tsource\tbeadType\tstepDescription\tassociatedGenes
ss715646001\tATTCG[A/G]TCCAT\tA/G\tBARC\t0\tBARC-PV-0001\tPhvul.001G000100\tPhvul.001G000200
ss715646002\tGGCTA[C/T]AAGTC\t\t\t\t\tPhvul.001G000100
ss715646003\tTTAGC[A/C]GGATC
"""


class TestGermplasmFileConverter:
    """Tests for GermplasmFileConverter."""

    def test_strain(self, temp_file, writer):
        path = temp_file("phavu.G19833.germplasm.txt", GERMPLASM_FILE)
        GermplasmFileConverter(writer).run([path])

        strain = writer.get_items("Strain")[0]
        organism = writer.get_items("Organism")[0]
        publications = writer.get_items("Publication")
        assert strain.get_attribute("identifier") == "G19833"
        assert strain.get_attribute("alternateName") == "Chaucha Chuga"
        assert strain.get_attribute("description") == "Andean landrace from Peru"
        assert strain.get_attribute("country") == "Peru"
        assert strain.get_attribute("url").startswith("https://npgsweb")
        assert not strain.has_attribute("patentNumber")
        assert strain.get_reference("organism") == organism.identifier
        assert organism.get_attribute("taxonId") == "3885"
        assert [p.get_attribute("pubMedId") for p in publications] == ["20694114", "23922345"]
        assert strain.get_collection("publications") == [p.identifier for p in publications]

    def test_organism_and_publication_shared_across_files(self, temp_file, writer):
        first = temp_file("a.germplasm.txt", GERMPLASM_FILE)
        second = temp_file("b.germplasm.txt", "TaxonID\t3885\nStrain\tBAT93\nPMID\t20694114\n")
        GermplasmFileConverter(writer).run([first, second])

        assert writer.counts["Strain"] == 2
        assert writer.counts["Organism"] == 1
        assert writer.counts["Publication"] == 2

    def test_missing_strain_raises(self, temp_file, writer):
        path = temp_file("phavu.germplasm.txt", "TaxonID\t3885\nCountry\tPeru\n")

        with pytest.raises(ConverterError, match="needs TaxonID and Strain"):
            GermplasmFileConverter(writer).run([path])

    def test_same_strain_in_two_files_raises(self, temp_file, writer):
        first = temp_file("a.germplasm.txt", GERMPLASM_FILE)
        second = temp_file("b.germplasm.txt", "TaxonID\t3885\nStrain\tG19833\n")

        with pytest.raises(ConverterError, match="G19833"):
            GermplasmFileConverter(writer).run([first, second])


class TestGTFileConverter:
    """Tests for GTFileConverter."""

    def test_rows_are_markers(self, temp_file, writer):
        path = temp_file("phavu.bj.gt.tsv", GT_LINES_FILE)
        GTFileConverter(writer).run([path])

        study = writer.get_items("GenotypingStudy")[0]
        lines = {line.get_attribute("primaryIdentifier"): line for line in writer.get_items("GenotypingLine")}
        markers = {m.get_attribute("primaryIdentifier"): m for m in writer.get_items("GeneticMarker")}
        parents = {s.get_attribute("primaryIdentifier") for s in writer.get_items("Strain")}

        assert study.get_attribute("primaryIdentifier") == "BAT93_x_JALO_EEP558"
        assert study.get_attribute("description") == "RIL population"
        assert study.get_attribute("matrixNotes") == "A = BAT93 allele"
        assert parents == {"BAT93", "JALO EEP558"}
        assert len(study.get_collection("parents")) == 2
        assert study.get_collection("publications") == [writer.get_items("Publication")[0].identifier]
        assert study.get_collection("lines") == [lines["BJ-1"].identifier, lines["BJ-2"].identifier, lines["BJ-3"].identifier]
        assert len(study.get_collection("markers")) == 2
        assert lines["BJ-3"].get_attribute("number") == "3"
        assert markers["ss715646001"].get_attribute("type") == "SNP"

        assert writer.counts["GenotypeValue"] == 6
        values = {
            (writer.get_item(v.get_reference("marker")).get_attribute("primaryIdentifier"),
             writer.get_item(v.get_reference("line")).get_attribute("primaryIdentifier")): v.get_attribute("value")
            for v in writer.get_items("GenotypeValue")
        }
        assert values[("ss715646001", "BJ-2")] == "B"
        assert values[("ss715646002", "BJ-3")] == "-"

    def test_rows_are_lines(self, temp_file, writer):
        path = temp_file("phavu.panel.gt.tsv", GT_MARKERS_FILE)
        GTFileConverter(writer).run([path])

        lines = {line.get_attribute("primaryIdentifier"): line for line in writer.get_items("GenotypingLine")}
        assert set(lines) == {"PI 123456", "BJ-2"}
        assert not lines["PI 123456"].has_attribute("number")
        assert writer.counts["GeneticMarker"] == 2
        assert writer.counts["GenotypeValue"] == 4
        values = [v.get_attribute("value") for v in writer.get_items("GenotypeValue")]
        assert values == ["AA", "GG", "AG", "GG"]

    def test_lines_and_markers_shared_across_files(self, temp_file, writer):
        first = temp_file("a.gt.tsv", GT_LINES_FILE)
        second = temp_file("b.gt.tsv", GT_MARKERS_FILE)
        GTFileConverter(writer).run([first, second])

        # BJ-2, ss715646001 appear in both studies
        assert writer.counts["GenotypingStudy"] == 2
        assert writer.counts["GenotypingLine"] == 4
        assert writer.counts["GeneticMarker"] == 3
        assert writer.counts["Organism"] == 1

    def test_short_row_raises(self, temp_file, writer):
        content = "TaxonID\t3885\nGenotypingStudy\tS\nLines\tBJ-1\tBJ-2\nss1\tA\n"
        path = temp_file("short.gt.tsv", content)

        with pytest.raises(ConverterError, match="1 genotypes for 2 columns"):
            GTFileConverter(writer).run([path])

    def test_row_before_header_raises(self, temp_file, writer):
        path = temp_file("bad.gt.tsv", "TaxonID\t3885\nGenotypingStudy\tS\nss1\tA\tB\n")

        with pytest.raises(ConverterError, match="before a Lines or Markers header"):
            GTFileConverter(writer).run([path])

    def test_study_needs_taxon(self, temp_file, writer):
        path = temp_file("bad.gt.tsv", "GenotypingStudy\tS\n")

        with pytest.raises(ConverterError, match="TaxonID must come before"):
            GTFileConverter(writer).run([path])


class TestSNPMarkerRecord:
    """Tests for SNPMarkerRecord."""

    def test_from_parts(self):
        record = SNPMarkerRecord.from_parts(
            ["ss1", "ATTCG[A/G]TCCAT", "A/G", "", "2", "step", "Phvul.001G000100", "", "Phvul.001G000200"]
        )

        assert record.alleles == "A/G"
        assert record.source is None
        assert record.bead_type == 2
        assert record.associated_genes == ["Phvul.001G000100", "Phvul.001G000200"]

    def test_missing_design_sequence(self):
        with pytest.raises(ConverterError, match="design sequence"):
            SNPMarkerRecord.from_parts(["ss1"])

    def test_bad_bead_type(self):
        with pytest.raises(ConverterError, match="beadType"):
            SNPMarkerRecord.from_parts(["ss1", "ACGT", "A/G", "BARC", "two"])


class TestSNPMarkerFileConverter:
    """Tests for SNPMarkerFileConverter."""

    def test_markers(self, temp_file, writer):
        path = temp_file("phavu.BARCBean6K_3.snp_markers.tsv", SNP_MARKER_FILE)
        SNPMarkerFileConverter(writer).run([path])

        markers = {m.get_attribute("primaryIdentifier"): m for m in writer.get_items("GeneticMarker")}
        genes = {g.get_attribute("primaryIdentifier"): g for g in writer.get_items("Gene")}
        publication = writer.get_items("Publication")[0]

        assert len(markers) == 3
        first = markers["ss715646001"]
        assert first.get_attribute("designSequence") == "ATTCG[A/G]TCCAT"
        assert first.get_attribute("alleles") == "A/G"
        assert first.get_attribute("source") == "BARC"
        assert first.get_attribute("beadType") == "0"
        assert first.get_attribute("stepDescription") == "BARC-PV-0001"
        assert first.get_attribute("arrayName") == "BARCBean6K_3"
        assert first.get_attribute("type") == "SNP"
        assert first.get_reference("publication") == publication.identifier
        assert first.get_collection("associatedGenes") == [
            genes["Phvul.001G000100"].identifier,
            genes["Phvul.001G000200"].identifier,
        ]
        assert not markers["ss715646002"].has_attribute("alleles")
        assert markers["ss715646002"].get_collection("associatedGenes") == [genes["Phvul.001G000100"].identifier]
        assert markers["ss715646003"].get_collection("associatedGenes") == []
        assert writer.counts["Gene"] == 2

    def test_marker_before_taxon_raises(self, temp_file, writer):
        path = temp_file("bad.snp_markers.tsv", "ss1\tACGT\n")

        with pytest.raises(ConverterError, match="organism not specified"):
            SNPMarkerFileConverter(writer).run([path])
