"""
Pytest fixtures for LegFed converter tests.

Provides:
- Temporary directories and files
- A converter writer that keeps items in memory
- An in-memory SQLite database with the chado tables the processors query
"""
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session

from legfed.items.writer import MemoryItemWriter


CHADO_DDL = [
    "CREATE TABLE cvterm (cvterm_id INTEGER PRIMARY KEY, name TEXT NOT NULL, definition TEXT)",
    """CREATE TABLE organism (
        organism_id INTEGER PRIMARY KEY, abbreviation TEXT, genus TEXT, species TEXT, comment TEXT
    )""",
    """CREATE TABLE feature (
        feature_id INTEGER PRIMARY KEY, dbxref_id INTEGER, organism_id INTEGER, name TEXT,
        uniquename TEXT NOT NULL, residues TEXT, seqlen INTEGER, md5checksum TEXT, type_id INTEGER,
        is_analysis BOOLEAN DEFAULT 0, is_obsolete BOOLEAN DEFAULT 0
    )""",
    """CREATE TABLE featureprop (
        featureprop_id INTEGER PRIMARY KEY, feature_id INTEGER, type_id INTEGER, value TEXT, rank INTEGER DEFAULT 0
    )""",
    """CREATE TABLE featureloc (
        featureloc_id INTEGER PRIMARY KEY, feature_id INTEGER, srcfeature_id INTEGER,
        fmin INTEGER, fmax INTEGER, strand INTEGER
    )""",
    "CREATE TABLE featuremap (featuremap_id INTEGER PRIMARY KEY, name TEXT, description TEXT, unittype_id INTEGER)",
    """CREATE TABLE featurepos (
        featurepos_id INTEGER PRIMARY KEY, featuremap_id INTEGER, feature_id INTEGER,
        map_feature_id INTEGER, mappos REAL
    )""",
    """CREATE TABLE pub (
        pub_id INTEGER PRIMARY KEY, title TEXT, volume TEXT, series_name TEXT, issue TEXT,
        pyear TEXT, pages TEXT, uniquename TEXT NOT NULL
    )""",
    "CREATE TABLE featuremap_pub (featuremap_pub_id INTEGER PRIMARY KEY, featuremap_id INTEGER, pub_id INTEGER)",
    """CREATE TABLE feature_cvterm (
        feature_cvterm_id INTEGER PRIMARY KEY, feature_id INTEGER, cvterm_id INTEGER, pub_id INTEGER
    )""",
    "CREATE TABLE stock (stock_id INTEGER PRIMARY KEY, uniquename TEXT, name TEXT)",
    """CREATE TABLE feature_stock (
        feature_stock_id INTEGER PRIMARY KEY, feature_id INTEGER, stock_id INTEGER, type_id INTEGER
    )""",
    """CREATE TABLE feature_relationship (
        feature_relationship_id INTEGER PRIMARY KEY, subject_id INTEGER, object_id INTEGER, type_id INTEGER
    )""",
    "CREATE TABLE phylotree (phylotree_id INTEGER PRIMARY KEY, name TEXT, comment TEXT)",
    "CREATE TABLE phylonode (phylonode_id INTEGER PRIMARY KEY, phylotree_id INTEGER, feature_id INTEGER)",
]

CVTERMS = {
    1: "linkage_group",
    2: "genetic_marker",
    3: "QTL",
    4: "consensus_region",
    5: "Favorable Allele Source",
    6: "gene",
    7: "gene family",
    8: "polypeptide",
    9: "polypeptide_domain",
    10: "protein_match",
    11: "protein_hmm_match",
    12: "Note",
    13: "comment",
    14: "Experiment Trait Name",
    15: "Assigned Linkage Group",
    16: "signature_desc",
}


class ChadoTestDB:
    """An in-memory chado schema with helpers for inserting rows."""

    def __init__(self):
        self.engine = create_engine("sqlite://")
        self.session = Session(self.engine)
        for ddl in CHADO_DDL:
            self.session.execute(text(ddl))
        for cvterm_id, name in CVTERMS.items():
            self.insert("cvterm", cvterm_id=cvterm_id, name=name, definition=f"{name} term")
        self.session.commit()

    def insert(self, table: str, **values) -> None:
        columns = ", ".join(values)
        params = ", ".join(f":{column}" for column in values)
        self.session.execute(text(f"INSERT INTO {table} ({columns}) VALUES ({params})"), values)

    def cvterm_id(self, name: str) -> int:
        for cvterm_id, term in CVTERMS.items():
            if term == name:
                return cvterm_id
        raise KeyError(name)

    def close(self) -> None:
        self.session.close()
        self.engine.dispose()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_file(temp_dir):
    """Create a temporary file."""
    def _create_file(name: str, content: str = "") -> Path:
        file_path = temp_dir / name
        file_path.write_text(content)
        return file_path
    return _create_file


@pytest.fixture
def writer():
    """Item writer that keeps stored items in memory."""
    return MemoryItemWriter()


@pytest.fixture
def mock_db_session():
    """Create a mock database session for testing."""
    session = MagicMock()
    session.execute = MagicMock()
    session.close = MagicMock()
    return session


@pytest.fixture
def chado_db():
    """In-memory chado database with the common CV terms loaded."""
    db = ChadoTestDB()
    yield db
    db.close()
