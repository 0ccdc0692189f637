"""
Tests for legfed.chado.converter.
"""

import pytest

from legfed.chado.converter import ChadoDBConverter
from legfed.chado.processors.base import ChadoProcessor
from legfed.chado.processors.genetic import GeneticProcessor
from legfed.core.exceptions import ChadoError
from legfed.core.settings import settings


def make_converter(chado_db, writer, **kwargs):
    config = {
        "organisms": "3885",
        "strains": "",
        "homologue_organisms": "",
        "homologue_strains": "",
        "processors": "genetic",
    }
    config.update(kwargs)
    return ChadoDBConverter(writer, chado_db.session, **config)


@pytest.fixture
def chado_organisms(chado_db):
    chado_db.insert("organism", organism_id=1, abbreviation="P.vulgaris", genus="Phaseolus", species="vulgaris")
    chado_db.insert("organism", organism_id=2, abbreviation="C.arietinum", genus="Cicer", species="arietinum_desi")
    chado_db.insert("organism", organism_id=3, abbreviation="C.arietinum", genus="Cicer", species="arietinum_kabuli")
    chado_db.session.commit()
    return chado_db


class TestConfiguration:
    """Tests for converter configuration."""

    def test_unknown_taxon_raises(self, chado_db, writer):
        with pytest.raises(ChadoError, match="99999"):
            make_converter(chado_db, writer, organisms="99999")

    def test_variety_suffix(self, chado_db, writer):
        converter = make_converter(chado_db, writer, organisms="3885 3827_desi")

        assert converter.organisms_to_process["3885"].variety is None
        assert converter.organisms_to_process["3827"].variety == "desi"
        assert converter.organisms_to_process["3827"].genus == "Cicer"

    def test_repeated_taxon_raises(self, chado_db, writer):
        """desi and kabuli can't both be selected by taxon; one would silently win."""
        with pytest.raises(ChadoError, match="3827 is listed more than once"):
            make_converter(chado_db, writer, organisms="3827_desi 3827_kabuli")

    def test_repeated_homologue_taxon_raises(self, chado_db, writer):
        with pytest.raises(ChadoError, match="3827"):
            make_converter(chado_db, writer, homologue_organisms="3827 3827")

    def test_empty_processors_raises(self, chado_organisms, writer):
        converter = make_converter(chado_organisms, writer, processors="  ")
        with pytest.raises(ChadoError, match="processors not set"):
            converter.process()

    def test_unknown_processor_raises(self, chado_organisms, writer):
        converter = make_converter(chado_organisms, writer, processors="genetic sequence")
        with pytest.raises(ChadoError, match="sequence"):
            converter.process()


class TestChadoOrganisms:
    """Tests for reading the chado organism table."""

    def test_strain_from_species_suffix(self, chado_organisms, writer):
        converter = make_converter(chado_organisms, writer)
        organisms = {organism_id: (data, strain) for organism_id, data, strain in converter.get_chado_organisms()}

        assert organisms[1][0].taxon_id == "3885"
        assert organisms[1][1] is None
        assert organisms[2][0].taxon_id == "3827"
        assert organisms[2][1] == "desi"
        assert organisms[3][1] == "kabuli"

    def test_unknown_genus_species_raises(self, chado_db, writer):
        chado_db.insert("organism", organism_id=1, genus="Nonexistus", species="fakeus")
        chado_db.session.commit()
        converter = make_converter(chado_db, writer)

        with pytest.raises(ChadoError, match="Nonexistus"):
            converter.get_chado_organisms()

    def test_desired_organism_maps(self, chado_organisms, writer):
        converter = make_converter(
            chado_organisms,
            writer,
            organisms="3885",
            strains="desi",
            homologue_organisms="3827",
            homologue_strains="kabuli",
        )
        converter.process()

        assert set(converter.chado_to_org_data) == {1}
        assert converter.chado_to_strain_name == {2: "desi"}
        assert set(converter.chado_to_homologue_org_data) == {2, 3}
        assert converter.chado_to_homologue_strain_name == {3: "kabuli"}
        assert converter.get_desired_chado_organism_ids() == {1, 2}
        assert converter.get_desired_chado_homologue_organism_ids() == {2, 3}
        assert converter.get_strain_name(2) == "desi"


class TestProcessors:
    """Tests for running and finding processors."""

    def test_processors_run_in_order(self, chado_organisms, writer):
        converter = make_converter(chado_organisms, writer, processors="genetic featureprop")
        converter.process()

        assert [p.name for p in converter.completed_processors] == ["genetic", "featureprop"]

    def test_find_processor(self, chado_organisms, writer):
        converter = make_converter(chado_organisms, writer)
        converter.process()

        assert isinstance(converter.find_processor(GeneticProcessor), GeneticProcessor)

    def test_find_processor_not_run(self, chado_organisms, writer):
        converter = make_converter(chado_organisms, writer, processors="featureprop")
        converter.process()

        with pytest.raises(ChadoError, match="must run GeneticProcessor first"):
            converter.find_processor(GeneticProcessor)

    def test_find_processor_twice(self, chado_organisms, writer):
        converter = make_converter(chado_organisms, writer, processors="featureprop gene-family")
        converter.process()

        with pytest.raises(ChadoError, match="two objects"):
            converter.find_processor(ChadoProcessor)


class TestDataSetTitle:
    """Tests for get_data_set_title."""

    def test_known_taxon(self, chado_db, writer):
        converter = make_converter(chado_db, writer)
        assert converter.get_data_set_title("3885") == f"{settings.data_source_name} data set for Phaseolus vulgaris"

    def test_unknown_taxon(self, chado_db, writer):
        converter = make_converter(chado_db, writer)
        assert converter.get_data_set_title("1") == f"{settings.data_source_name} data set"
