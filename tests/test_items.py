"""
Tests for legfed.items: Item, ItemFactory, ItemMap and the writers.
"""

import io
from xml.etree import ElementTree

import pytest

from legfed.converters.base import DataConverter
from legfed.core.exceptions import DuplicateStoreError, ItemError
from legfed.items.item import Item, ItemFactory, ItemMap
from legfed.items.writer import MemoryItemWriter, XmlItemWriter, item_to_element


class TestItem:
    """Tests for Item attributes, references and collections."""

    def test_set_attribute_converts_to_string(self):
        item = Item("Gene", "0_1")
        item.set_attribute("length", 1200)
        item.set_attribute("score", 0.5)

        assert item.get_attribute("length") == "1200"
        assert item.get_attribute("score") == "0.5"
        assert item.has_attribute("length")

    def test_null_attribute_raises(self):
        item = Item("Gene", "0_1")
        with pytest.raises(ItemError):
            item.set_attribute("symbol", None)

    def test_empty_attribute_raises(self):
        item = Item("Gene", "0_1")
        with pytest.raises(ItemError):
            item.set_attribute("symbol", "")

    def test_reference_to_item_or_identifier(self):
        organism = Item("Organism", "0_1")
        gene = Item("Gene", "1_2")
        gene.set_reference("organism", organism)
        gene.set_reference("strain", "2_3")

        assert gene.get_reference("organism") == "0_1"
        assert gene.get_reference("strain") == "2_3"
        assert gene.get_reference("chromosome") is None

    def test_empty_reference_raises(self):
        gene = Item("Gene", "1_2")
        with pytest.raises(ItemError):
            gene.set_reference("organism", "")

    def test_collection_has_no_duplicates(self):
        marker = Item("GeneticMarker", "0_1")
        qtl = Item("QTL", "1_2")
        qtl.add_to_collection("markers", marker)
        qtl.add_to_collection("markers", marker)
        qtl.add_to_collection("markers", "0_3")

        assert qtl.get_collection("markers") == ["0_1", "0_3"]
        assert qtl.get_collection("publications") == []


class TestItemFactory:
    """Tests for ItemFactory identifiers."""

    def test_identifiers_are_unique(self):
        factory = ItemFactory()
        items = [factory.make_item(name) for name in ("Gene", "Gene", "Protein", "Gene")]

        assert len({item.identifier for item in items}) == 4

    def test_identifier_format(self):
        factory = ItemFactory()
        gene = factory.make_item("Gene")
        protein = factory.make_item("Protein")
        gene2 = factory.make_item("Gene")

        assert gene.identifier == "0_1"
        assert protein.identifier == "1_2"
        assert gene2.identifier == "0_3"


class TestItemMap:
    """Tests for ItemMap lookups."""

    @pytest.fixture
    def items(self):
        gene = Item("Gene", "0_1")
        gene.set_attribute("primaryIdentifier", "phavu.Phvul.001G000100")
        gene.set_attribute("secondaryIdentifier", "Phvul.001G000100")
        gene.set_attribute("chadoFeatureId", 42)
        organism = Item("Organism", "1_2")
        organism.set_attribute("taxonId", "3885")
        gene.set_reference("organism", organism)
        family = Item("GeneFamily", "2_3")
        family.set_attribute("primaryIdentifier", "phavu.Phvul.001G000100")
        family.add_to_collection("genes", gene)
        return ItemMap([gene, organism, family])

    def test_lookup(self, items):
        assert len(items) == 3
        assert items.get_by_secondary_identifier("Phvul.001G000100").identifier == "0_1"
        assert items.get_by_chado_feature_id(42).identifier == "0_1"
        assert items.get_by_primary_identifier("phavu.Phvul.001G000100", "GeneFamily").identifier == "2_3"
        assert items.get_by_primary_identifier("missing") is None

    def test_resolve_reference_and_collection(self, items):
        gene = items.get("0_1")
        family = items.get("2_3")

        assert items.get_reference_item(gene, "organism").get_attribute("taxonId") == "3885"
        assert items.get_reference_item(gene, "strain") is None
        assert items.get_collection_items(family, "genes") == [gene]


class TestWriters:
    """Tests for MemoryItemWriter and XmlItemWriter."""

    def test_memory_writer_counts(self):
        writer = MemoryItemWriter()
        writer.store(Item("Gene", "0_1"))
        writer.store(Item("Gene", "0_2"))
        writer.store(Item("Protein", "1_3"))

        assert writer.total == 3
        assert writer.counts["Gene"] == 2
        assert [item.identifier for item in writer.get_items("Gene")] == ["0_1", "0_2"]
        assert writer.get_item("1_3").class_name == "Protein"
        assert writer.get_item("9_9") is None

    def test_item_to_element(self):
        gene = Item("Gene", "0_1")
        gene.set_attribute("primaryIdentifier", "Phvul.001G000100")
        gene.set_reference("organism", "1_2")
        gene.add_to_collection("pathways", "2_3")
        element = item_to_element(gene)

        assert element.get("id") == "0_1"
        assert element.get("class") == "Gene"
        assert element.find("attribute").get("value") == "Phvul.001G000100"
        assert element.find("reference").get("ref_id") == "1_2"
        assert element.find("collection/reference").get("ref_id") == "2_3"

    def test_xml_writer_stream(self):
        buffer = io.StringIO()
        with XmlItemWriter(buffer) as writer:
            gene = Item("Gene", "0_1")
            gene.set_attribute("symbol", "A&B <1>")
            writer.store(gene)

        root = ElementTree.fromstring(buffer.getvalue())
        assert root.tag == "items"
        assert root.find("item/attribute").get("value") == "A&B <1>"

    def test_xml_writer_file(self, temp_dir):
        output = temp_dir / "out" / "items.xml"
        writer = XmlItemWriter(output)
        writer.store(Item("Organism", "0_1"))
        writer.close()
        writer.close()

        root = ElementTree.parse(output).getroot()
        assert len(root.findall("item")) == 1

    def test_xml_writer_failure_removes_file(self, temp_dir):
        """A conversion error inside the with block leaves no items file."""
        output = temp_dir / "items.xml"

        with pytest.raises(ValueError):
            with XmlItemWriter(output) as writer:
                writer.store(Item("Organism", "0_1"))
                raise ValueError("bad row")

        assert not output.exists()
        assert list(temp_dir.iterdir()) == []

    def test_xml_writer_file_appears_on_close(self, temp_dir):
        output = temp_dir / "items.xml"
        writer = XmlItemWriter(output)
        writer.store(Item("Organism", "0_1"))

        assert not output.exists()
        writer.close()
        assert output.exists()
        assert not (temp_dir / "items.xml.part").exists()


class TestDataConverterStore:
    """Tests for store-once bookkeeping."""

    def test_store_once(self):
        writer = MemoryItemWriter()
        converter = DataConverter(writer)
        gene = converter.create_item("Gene")
        converter.store(gene)

        assert converter.stored_count == 1
        with pytest.raises(DuplicateStoreError):
            converter.store(gene)
        assert writer.total == 1

    def test_store_all(self):
        writer = MemoryItemWriter()
        converter = DataConverter(writer)
        converter.store_all(converter.create_item("Gene") for _ in range(3))

        assert writer.total == 3
