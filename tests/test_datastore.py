"""
Tests for legfed.utils.datastore and legfed.utils.file_io.
"""

import gzip
import hashlib

import pytest

from legfed.utils.datastore import is_supercontig, md5_checksum, round_half_up
from legfed.utils.file_io import is_comment_or_blank, is_readme, open_file, split_line


class TestIsSupercontig:
    """Tests for supercontig detection."""

    @pytest.mark.parametrize(
        "identifier",
        [
            "phavu.G19833.gnm2.scaffold_100",
            "vigan.Gyeonggi.gnm3.Contig0042",
            "arahy.Tifrunner.gnm1.pilon_12",
            "Aipa_scaffold",
            "cicar.CDCFrontier.gnm1.C11044140",
            "glyma.Lee.gnm1.sc119",
            "glyso.PI483463.gnm1.sc255",
            "medtr.jemalong_A17.gnm5.MtrunA17Chr0c01",
        ],
    )
    def test_supercontigs(self, identifier):
        assert is_supercontig(identifier)

    @pytest.mark.parametrize(
        "identifier",
        [
            "phavu.G19833.gnm2.Chr01",
            "glyma.Wm82.gnm2.Gm01",
            "cicar.CDCFrontier.gnm1.Ca1",
            "Chr05",
        ],
    )
    def test_chromosomes(self, identifier):
        assert not is_supercontig(identifier)


class TestRoundHalfUp:
    """Tests for round_half_up."""

    def test_rounds_half_up(self):
        assert round_half_up(0.125, 2) == 0.13
        assert round_half_up(44.800000000000004, 2) == 44.8
        assert round_half_up(7.5, 0) == 8.0

    def test_negative_places_raises(self):
        with pytest.raises(ValueError):
            round_half_up(1.0, -1)


class TestMd5Checksum:
    """Tests for md5_checksum."""

    def test_hex_digest(self):
        assert md5_checksum("ACGT") == hashlib.md5(b"ACGT").hexdigest()


class TestFileIO:
    """Tests for file helpers."""

    def test_open_plain_and_gzip(self, temp_dir):
        plain = temp_dir / "data.txt"
        plain.write_text("a\tb\n")
        zipped = temp_dir / "data.txt.gz"
        with gzip.open(zipped, "wt") as f:
            f.write("c\td\n")

        with open_file(plain) as f:
            assert f.read() == "a\tb\n"
        with open_file(zipped) as f:
            assert f.read() == "c\td\n"

    def test_is_readme(self, temp_dir):
        assert is_readme(temp_dir / "README.phavu.G19833.gnm2.yml")
        assert not is_readme(temp_dir / "phavu.G19833.gnm2.fna")

    def test_split_line(self):
        assert split_line("a\tb\t\r\n") == ["a", "b", ""]

    def test_is_comment_or_blank(self):
        assert is_comment_or_blank("#TaxonID\t3885\n")
        assert is_comment_or_blank("   \n")
        assert not is_comment_or_blank("BM143\t1\n")
