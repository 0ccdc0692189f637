"""
Tests for legfed.services.sql_utils.
"""

from unittest.mock import patch

from legfed.services.sql_utils import fetch_all, fetch_one, schema_prefix


class TestSchemaPrefix:
    """Tests for schema_prefix."""

    @patch("legfed.services.sql_utils.settings")
    def test_with_schema(self, mock_settings):
        mock_settings.db_schema = "chado"
        assert schema_prefix() == "chado."

    @patch("legfed.services.sql_utils.settings")
    def test_without_schema(self, mock_settings):
        mock_settings.db_schema = None
        assert schema_prefix() == ""


class TestFetch:
    """Tests for fetch_all and fetch_one."""

    def test_fetch_all(self, mock_db_session):
        mock_db_session.execute.return_value.mappings.return_value.all.return_value = [
            {"feature_id": 1, "name": "LG01"},
            {"feature_id": 2, "name": "LG02"},
        ]

        rows = fetch_all(mock_db_session, "SELECT * FROM feature WHERE type_id = :type_id", {"type_id": 1})

        assert rows == [{"feature_id": 1, "name": "LG01"}, {"feature_id": 2, "name": "LG02"}]
        sql, params = mock_db_session.execute.call_args.args
        assert str(sql) == "SELECT * FROM feature WHERE type_id = :type_id"
        assert params == {"type_id": 1}

    def test_fetch_one_none(self, mock_db_session):
        mock_db_session.execute.return_value.mappings.return_value.first.return_value = None

        assert fetch_one(mock_db_session, "SELECT * FROM cvterm") is None
        assert mock_db_session.execute.call_args.args[1] == {}

    def test_fetch_one_against_sqlite(self, chado_db):
        row = fetch_one(chado_db.session, "SELECT cvterm_id FROM cvterm WHERE name = :name", {"name": "QTL"})

        assert row == {"cvterm_id": 3}
