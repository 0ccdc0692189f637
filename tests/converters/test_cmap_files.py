"""
Tests for the CMap and marker to linkage group file converters.
"""

import pytest

from legfed.converters.cmap_file import CMapFileConverter, CMapRecord, parse_cmap_file_name
from legfed.converters.marker_linkage_group_file import MarkerLinkageGroupFileConverter
from legfed.core.exceptions import ConverterError


CMAP_FILE = (
    "map_acc\tmap_name\tmap_start\tmap_stop\tfeature_acc\tfeature_name\tfeature_aliases\t"
    "feature_start\tfeature_stop\tfeature_type_acc\tis_landmark\n"
    "BJ_LG01\tPv01\t0\t98.4\tBng122\tBng122\t\t12.3\t12.3\tSSR\t0\n"
    "BJ_LG01\tPv01\t0\t104.2\tcmap:QTL17\t\"Seed weight 1-1:SW\"\t\t20.0\t31.25\tQTL\t0\n"
    "BJ_LG01\tPv01\t0\t104.2\tBng122\tBng122\t\t12.3\t12.3\tSSR\t0\n"
    "BJ_LG02\tPv02\t0\t87.0\tSSR-IAC61\tSSR-IAC61\t\t5.5\t5.5\tSSR\t1\n"
)

MARKER_LG_FILE = """TaxonID\t3885
Variety\tBAT93
#marker\tLG\tposition
Bng122\tBJ_LG01\t12.3
SSR-IAC61\tBJ_LG02\t5.5
Bng122\tBJ_LG03\t40.1
"""


class TestCMapRecord:
    """Tests for CMapRecord."""

    def test_qtl(self):
        record = CMapRecord.from_parts(
            ["LG1", "Pv01", "0", "98.4", "cmap:QTL17", '"SW 1-1"', "", "20", "31.5", "QTL", "1"]
        )
        assert record.is_qtl
        assert record.is_landmark
        assert record.feature_name == "SW 1-1"
        assert record.feature_stop == 31.5

    def test_marker_without_landmark_column(self):
        record = CMapRecord.from_parts(["LG1", "Pv01", "0", "98.4", "Bng122", "Bng122", "", "12.3", "12.3", "SSR"])
        assert not record.is_qtl
        assert not record.is_landmark

    def test_bad_coordinate(self):
        with pytest.raises(ConverterError, match="Error parsing CMap line"):
            CMapRecord.from_parts(["LG1", "Pv01", "0", "end", "Bng122", "Bng122", "", "12.3", "12.3", "SSR"])


class TestParseCMapFileName:
    """Tests for parse_cmap_file_name."""

    def test_map_and_taxon(self):
        assert parse_cmap_file_name("BJ_3885_20000000.cmap") == ("BJ", "3885")

    def test_no_taxon(self):
        with pytest.raises(ConverterError, match="should be"):
            parse_cmap_file_name("BJ.cmap")


class TestCMapFileConverter:
    """Tests for CMapFileConverter."""

    def test_linkage_groups(self, temp_file, writer):
        path = temp_file("BJ_3885_20000000.cmap", CMAP_FILE)
        CMapFileConverter(writer).run([path])

        genetic_map = writer.get_items("GeneticMap")[0]
        organism = writer.get_items("Organism")[0]
        groups = {lg.get_attribute("primaryIdentifier"): lg for lg in writer.get_items("LinkageGroup")}

        assert genetic_map.get_attribute("primaryIdentifier") == "BJ"
        assert organism.get_attribute("taxonId") == "3885"
        assert set(groups) == {"BJ_LG01", "BJ_LG02"}
        # grows to the furthest map_stop
        assert groups["BJ_LG01"].get_attribute("length") == "104.2"
        assert groups["BJ_LG01"].get_attribute("secondaryIdentifier") == "Pv01"
        assert groups["BJ_LG01"].get_reference("geneticMap") == genetic_map.identifier

    def test_markers_and_qtls(self, temp_file, writer):
        path = temp_file("BJ_3885_20000000.cmap", CMAP_FILE)
        CMapFileConverter(writer).run([path])

        markers = {m.get_attribute("primaryIdentifier"): m for m in writer.get_items("GeneticMarker")}
        qtl = writer.get_items("QTL")[0]
        linkage_group_range = writer.get_items("LinkageGroupRange")[0]

        assert set(markers) == {"Bng122", "SSR-IAC61"}
        assert writer.counts["LinkageGroupPosition"] == 2
        position = writer.get_item(markers["Bng122"].get_collection("linkageGroupPositions")[0])
        assert position.get_attribute("position") == "12.3"

        assert qtl.get_attribute("primaryIdentifier") == "Seed weight 1-1"
        assert qtl.get_attribute("secondaryIdentifier") == "QTL17"
        assert linkage_group_range.get_attribute("begin") == "20.0"
        assert linkage_group_range.get_attribute("end") == "31.25"
        assert linkage_group_range.get_attribute("length") == "11.25"

    def test_genetic_map_shared_across_files(self, temp_file, writer):
        first = temp_file("BJ_3885_1.cmap", CMAP_FILE)
        second = temp_file("BJ_3885_2.cmap", CMAP_FILE)
        CMapFileConverter(writer).run([first, second])

        assert writer.counts["GeneticMap"] == 1
        assert writer.counts["Organism"] == 1
        assert writer.counts["GeneticMarker"] == 2
        assert writer.counts["QTL"] == 1


class TestMarkerLinkageGroupFileConverter:
    """Tests for MarkerLinkageGroupFileConverter."""

    def test_positions(self, temp_file, writer):
        path = temp_file("phavu.BJ.marker_lg.tsv", MARKER_LG_FILE)
        MarkerLinkageGroupFileConverter(writer).run([path])

        organism = writer.get_items("Organism")[0]
        markers = {m.get_attribute("primaryIdentifier"): m for m in writer.get_items("GeneticMarker")}
        groups = {lg.get_attribute("primaryIdentifier"): lg for lg in writer.get_items("LinkageGroup")}

        assert organism.get_attribute("variety") == "BAT93"
        assert set(markers) == {"Bng122", "SSR-IAC61"}
        assert set(groups) == {"BJ_LG01", "BJ_LG02", "BJ_LG03"}
        assert writer.counts["LinkageGroupPosition"] == 3

        positions = [writer.get_item(ref) for ref in markers["Bng122"].get_collection("linkageGroupPositions")]
        assert [p.get_attribute("position") for p in positions] == ["12.3", "40.1"]
        assert [p.get_reference("linkageGroup") for p in positions] == [
            groups["BJ_LG01"].identifier,
            groups["BJ_LG03"].identifier,
        ]
        assert groups["BJ_LG03"].get_collection("markers") == [markers["Bng122"].identifier]

    def test_missing_variety_raises(self, temp_file, writer):
        path = temp_file("bad.marker_lg.tsv", "TaxonID\t3885\nBng122\tBJ_LG01\t12.3\n")

        with pytest.raises(ConverterError, match="Organism not defined"):
            MarkerLinkageGroupFileConverter(writer).run([path])

    def test_bad_position_raises(self, temp_file, writer):
        path = temp_file("bad.marker_lg.tsv", "TaxonID\t3885\nVariety\tBAT93\nBng122\tBJ_LG01\tfar\n")

        with pytest.raises(ConverterError, match="Bad position"):
            MarkerLinkageGroupFileConverter(writer).run([path])
