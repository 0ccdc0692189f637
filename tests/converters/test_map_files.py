"""
Tests for the linkage group, QTL, GWAS and phenotype file converters.
"""

import pytest

from legfed.converters.gwas_file import GWASFileConverter, GWASRecord
from legfed.converters.linkage_group_file import LinkageGroupFileConverter
from legfed.converters.phenotype_file import PhenotypeFileConverter, set_phenotype_value
from legfed.converters.qtl_file import QTLFileConverter
from legfed.core.exceptions import ConverterError
from legfed.items.item import Item


LINKAGE_GROUP_FILE = """TaxonID\t3885
Variety\tG19833
PMID\t25555555
#LG\tNumber\tGeneticMap\tLength
PvLG01\t1\tBAT93_x_JALO_EEP558\t120.5
PvLG02\t2\tBAT93_x_JALO_EEP558\t
"""

QTL_FILE = """TaxonID\t3885
PMID\t22222222
MappingPopulation\tBAT93_x_JALO_EEP558
GenotypingStudy\tBAT93xJALO
Description\tRIL population of 80 lines
#QTL\tPhenotype
Seed weight 1-1\tseed weight
Seed weight 1-2\tseed weight
Days to flower 1-1\tdays to flower
"""

CITATION_QTL_FILE = """TaxonID\t3885
Title\tQTL for common bacterial blight
Journal\tCrop Sci
Year\t2011a
#QTL\tPhenotype
CBB 1-1\tcommon bacterial blight
"""

GWAS_FILE = """#GWAS experiment
TaxonID\t3885
Strain\tG19833
Name\tKamfwa2015
PlatformName\tIllumina BARCBean6K_3
NumberLociTested\t5398
Assembly\tG19833.gnm1
PMID\t25555555
seed weight\tTO:0000181\tss715646235\t1.2e-05\tphavu.G19833.gnm1.Chr01\t1000\t1000
seed weight\tTO:0000181\tss715646236\t0.002\tphavu.G19833.gnm1.scaffold_100\t500\t700
days to flower\t\tss715646235\t\tphavu.G19833.gnm1.Chr01\t1000\t1000
"""


class TestLinkageGroupFileConverter:
    """Tests for LinkageGroupFileConverter."""

    def test_linkage_groups(self, temp_file, writer):
        path = temp_file("phavu.lg.tsv", LINKAGE_GROUP_FILE)
        LinkageGroupFileConverter(writer).run([path])

        linkage_groups = {lg.get_attribute("primaryIdentifier"): lg for lg in writer.get_items("LinkageGroup")}
        assert set(linkage_groups) == {"PvLG01", "PvLG02"}
        assert linkage_groups["PvLG01"].get_attribute("number") == "1"
        assert linkage_groups["PvLG01"].get_attribute("length") == "120.5"
        assert not linkage_groups["PvLG02"].has_attribute("length")

    def test_genetic_map_stored_at_close(self, temp_file, writer):
        path = temp_file("phavu.lg.tsv", LINKAGE_GROUP_FILE)
        LinkageGroupFileConverter(writer).run([path])

        genetic_maps = writer.get_items("GeneticMap")
        assert len(genetic_maps) == 1
        genetic_map = genetic_maps[0]
        assert genetic_map.get_attribute("primaryIdentifier") == "BAT93_x_JALO_EEP558"
        assert writer.items[-1] is genetic_map
        assert len(genetic_map.get_collection("linkageGroups")) == 2
        assert len(genetic_map.get_collection("publications")) == 1

        organism = writer.get_items("Organism")[0]
        assert organism.get_attribute("variety") == "G19833"
        assert genetic_map.get_reference("organism") == organism.identifier

    def test_short_linkage_group_line_raises(self, temp_file, writer):
        path = temp_file("bad.lg.tsv", "TaxonID\t3885\nPvLG01\t1\n")
        with pytest.raises(ConverterError, match="PvLG01"):
            LinkageGroupFileConverter(writer).run([path])


class TestQTLFileConverter:
    """Tests for QTLFileConverter."""

    def test_qtls_and_phenotypes(self, temp_file, writer):
        path = temp_file("phavu.qtl.tsv", QTL_FILE)
        QTLFileConverter(writer).run([path])

        qtls = {qtl.get_attribute("primaryIdentifier"): qtl for qtl in writer.get_items("QTL")}
        phenotypes = {p.get_attribute("primaryIdentifier"): p for p in writer.get_items("Phenotype")}
        assert set(qtls) == {"Seed weight 1-1", "Seed weight 1-2", "Days to flower 1-1"}
        assert set(phenotypes) == {"seed weight", "days to flower"}
        assert qtls["Seed weight 1-2"].get_reference("phenotype") == phenotypes["seed weight"].identifier

    def test_mapping_population_parents(self, temp_file, writer):
        path = temp_file("phavu.qtl.tsv", QTL_FILE)
        QTLFileConverter(writer).run([path])

        mapping_population = writer.get_items("MappingPopulation")[0]
        strains = {s.get_attribute("primaryIdentifier"): s for s in writer.get_items("Strain")}
        assert set(strains) == {"BAT93", "JALO_EEP558"}
        assert mapping_population.get_attribute("description") == "RIL population of 80 lines"
        assert sorted(mapping_population.get_collection("parents")) == sorted(s.identifier for s in strains.values())
        assert len(mapping_population.get_collection("publications")) == 1

    def test_qtl_collections(self, temp_file, writer):
        path = temp_file("phavu.qtl.tsv", QTL_FILE)
        QTLFileConverter(writer).run([path])

        publication = writer.get_items("Publication")[0]
        genotyping_study = writer.get_items("GenotypingStudy")[0]
        mapping_population = writer.get_items("MappingPopulation")[0]
        for qtl in writer.get_items("QTL"):
            assert qtl.get_collection("publications") == [publication.identifier]
            assert qtl.get_collection("mappingPopulations") == [mapping_population.identifier]
            assert qtl.get_collection("genotypingStudies") == [genotyping_study.identifier]

    def test_citation_publication(self, temp_file, writer):
        path = temp_file("phavu.qtl.tsv", CITATION_QTL_FILE)
        QTLFileConverter(writer).run([path])

        publication = writer.get_items("Publication")[0]
        assert publication.get_attribute("title") == "QTL for common bacterial blight"
        assert publication.get_attribute("journal") == "Crop Sci"
        assert not publication.has_attribute("year")
        assert writer.get_items("QTL")[0].get_collection("publications") == [publication.identifier]

    def test_items_stored_once_across_files(self, temp_file, writer):
        first = temp_file("a.qtl.tsv", QTL_FILE)
        second = temp_file("b.qtl.tsv", QTL_FILE)
        QTLFileConverter(writer).run([first, second])

        assert writer.counts["QTL"] == 3
        assert writer.counts["Publication"] == 1
        assert writer.counts["Organism"] == 1
        identifiers = [item.identifier for item in writer.items]
        assert len(identifiers) == len(set(identifiers))


class TestGWASRecord:
    """Tests for GWASRecord.from_parts."""

    def test_snp(self):
        record = GWASRecord.from_parts(["seed weight", "TO:0000181", "ss1", "1.2e-05", "Chr01", "1000", "1000"])

        assert record.type == "SNP"
        assert record.p_value == pytest.approx(1.2e-05)

    def test_ssr(self):
        record = GWASRecord.from_parts(["seed weight", "", "BM143", "", "Chr01", "500", "700"])

        assert record.type == "SSR"
        assert record.p_value == 0.0

    def test_wrong_column_count(self):
        with pytest.raises(ConverterError, match="7 columns"):
            GWASRecord.from_parts(["seed weight", "TO:0000181", "ss1"])


class TestGWASFileConverter:
    """Tests for GWASFileConverter."""

    def test_experiment(self, temp_file, writer):
        path = temp_file("phavu.gwas.tsv", GWAS_FILE)
        GWASFileConverter(writer).run([path])

        gwas = writer.get_items("GWAS")[0]
        assert gwas.get_attribute("primaryIdentifier") == "Kamfwa2015"
        assert gwas.get_attribute("platformName") == "Illumina BARCBean6K_3"
        assert gwas.get_attribute("numberLociTested") == "5398"
        assert len(gwas.get_collection("publications")) == 1

    def test_markers_and_sequences(self, temp_file, writer):
        path = temp_file("phavu.gwas.tsv", GWAS_FILE)
        GWASFileConverter(writer).run([path])

        markers = {m.get_attribute("primaryIdentifier"): m for m in writer.get_items("GeneticMarker")}
        chromosome = writer.get_items("Chromosome")[0]
        supercontig = writer.get_items("Supercontig")[0]
        assert len(markers) == 2
        assert markers["ss715646235"].get_attribute("type") == "SNP"
        assert markers["ss715646235"].get_reference("chromosome") == chromosome.identifier
        assert markers["ss715646236"].get_attribute("type") == "SSR"
        assert markers["ss715646236"].get_reference("supercontig") == supercontig.identifier

    def test_results(self, temp_file, writer):
        path = temp_file("phavu.gwas.tsv", GWAS_FILE)
        GWASFileConverter(writer).run([path])

        results = writer.get_items("GWASResult")
        assert len(results) == 3
        assert results[0].get_attribute("pValue") == "1.2e-05"
        assert not results[2].has_attribute("pValue")

        phenotypes = writer.get_items("Phenotype")
        assert len(phenotypes) == 2
        assert len(writer.get_items("OntologyTerm")) == 1
        assert len(writer.get_items("OntologyAnnotation")) == 2

    def test_missing_strain_raises(self, temp_file, writer):
        content = "TaxonID\t3885\nName\tKamfwa2015\nseed weight\tTO:1\tss1\t0.1\tChr01\t1\t1\n"
        path = temp_file("phavu.gwas.tsv", content)

        with pytest.raises(ConverterError, match="Strain has not been set"):
            GWASFileConverter(writer).run([path])

    def test_missing_experiment_raises(self, temp_file, writer):
        path = temp_file("phavu.gwas.tsv", "TaxonID\t3885\nPlatformName\tIllumina\n")

        with pytest.raises(ConverterError, match="GWAS experiment"):
            GWASFileConverter(writer).run([path])


class TestSetPhenotypeValue:
    """Tests for set_phenotype_value."""

    @pytest.mark.parametrize(
        "value,attribute,expected",
        [
            ("+", "booleanValue", "true"),
            ("true", "booleanValue", "true"),
            ("-", "booleanValue", "false"),
            ("false", "booleanValue", "false"),
            ("12.5", "numericValue", "12.5"),
            ("10;20;", "numericValue", "15.0"),
            ("+;+;-", "booleanValue", "true"),
            ("-;+", "booleanValue", "false"),
            ("purple", "textValue", "purple"),
            ("10;purple", "textValue", "10;purple"),
            ("-3.5e2", "numericValue", "-3.5e2"),
            (".5", "numericValue", ".5"),
            ("nan", "textValue", "nan"),
            ("inf", "textValue", "inf"),
            ("Infinity", "textValue", "Infinity"),
            ("1_000", "textValue", "1_000"),
            ("nan;nan", "textValue", "nan;nan"),
        ],
    )
    def test_value(self, value, attribute, expected):
        phenotype_value = Item("PhenotypeValue", "0_1")
        set_phenotype_value(phenotype_value, value)

        assert phenotype_value.get_attribute(attribute) == expected
        assert len(phenotype_value.attributes) == 1


class TestPhenotypeFileConverter:
    """Tests for PhenotypeFileConverter."""

    def test_values(self, temp_file, writer):
        content = "#Line\tPhenotype\tValue\nPI 123456\tflower color\tpurple\nPI 123456\tseed weight\t12.1\nPI 654321\tflower color\twhite\n"
        path = temp_file("phavu.phenotype.tsv", content)
        PhenotypeFileConverter(writer).run([path])

        assert writer.counts["PhenotypeValue"] == 3
        assert writer.counts["Phenotype"] == 2
        assert writer.counts["GenotypingLine"] == 2

        lines = {line.get_attribute("primaryIdentifier"): line for line in writer.get_items("GenotypingLine")}
        first = writer.get_items("PhenotypeValue")[0]
        assert first.get_attribute("textValue") == "purple"
        assert first.get_reference("line") == lines["PI 123456"].identifier

    def test_short_line_raises(self, temp_file, writer):
        path = temp_file("phavu.phenotype.tsv", "PI 123456\tflower color\n")

        with pytest.raises(ConverterError, match="PI 123456"):
            PhenotypeFileConverter(writer).run([path])
