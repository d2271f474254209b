"""Unit tests for SilverDB with a mocked psycopg2 connection."""

from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from warehouse.conformer.db_operations import INSERT_PAGE_SIZE, DatabaseError, SilverDB

COLUMNS = ('cid', 'cntry')
ROWS = [
    {'cid': 'AW00011000', 'cntry': 'Germany'},
    {'cid': 'AW00011001', 'cntry': 'United States'},
]


@pytest.fixture
def conn():
    with patch('warehouse.conformer.db_operations.psycopg2.connect') as mock_connect:
        connection = MagicMock()
        mock_connect.return_value = connection
        yield connection


@pytest.fixture
def cursor(conn):
    return conn.cursor.return_value.__enter__.return_value


@pytest.fixture
def db(conn, database_url):
    silver_db = SilverDB(database_url)
    conn.reset_mock()
    return silver_db


@patch('warehouse.conformer.db_operations.psycopg2.extras.execute_values')
def test_replace_table_commits(mock_execute_values, db, conn, cursor):
    inserted = db.replace_table('erp_loc_a101', COLUMNS, ROWS)

    assert inserted == 2
    assert cursor.execute.call_count == 1  # TRUNCATE
    values = mock_execute_values.call_args.args[2]
    assert values == [('AW00011000', 'Germany'), ('AW00011001', 'United States')]
    conn.commit.assert_called_once()
    conn.rollback.assert_not_called()
    conn.close.assert_called_once()


@patch('warehouse.conformer.db_operations.psycopg2.extras.execute_values')
def test_failed_insert_rolls_back_truncate(mock_execute_values, db, conn):
    mock_execute_values.side_effect = psycopg2.DatabaseError("value too long for type character varying(50)")

    with pytest.raises(DatabaseError, match="erp_loc_a101"):
        db.replace_table('erp_loc_a101', COLUMNS, ROWS)

    conn.rollback.assert_called_once()
    conn.commit.assert_not_called()
    conn.close.assert_called_once()


@patch('warehouse.conformer.db_operations.psycopg2.extras.execute_values')
def test_empty_replace_still_truncates(mock_execute_values, db, cursor):
    assert db.replace_table('erp_loc_a101', COLUMNS, []) == 0

    assert cursor.execute.call_count == 1
    mock_execute_values.assert_not_called()


def test_fetch_bronze_returns_dicts(db, cursor):
    cursor.fetchall.return_value = [{'cid': 'AW-00011000', 'cntry': 'DE'}]

    assert db.fetch_bronze('erp_loc_a101') == [{'cid': 'AW-00011000', 'cntry': 'DE'}]


def test_fetch_bronze_error(db, cursor):
    cursor.execute.side_effect = psycopg2.ProgrammingError("relation does not exist")

    with pytest.raises(DatabaseError, match="bronze.erp_loc_a101"):
        db.fetch_bronze('erp_loc_a101')


def test_count_rows(db, cursor):
    cursor.fetchone.return_value = (42,)
    assert db.count_rows('erp_loc_a101') == 42


@patch('warehouse.common.retry.time.sleep')
def test_connection_failure_raises_database_error(mock_sleep, database_url):
    with patch('warehouse.conformer.db_operations.psycopg2.connect') as mock_connect:
        mock_connect.side_effect = psycopg2.OperationalError("connection refused")

        with pytest.raises(DatabaseError, match="Failed to connect"):
            SilverDB(database_url)

        assert mock_connect.call_count == 3
        assert mock_sleep.call_count == 2


def test_truncate_alone(db, conn, cursor):
    db.truncate('erp_loc_a101')

    assert cursor.execute.call_count == 1
    conn.commit.assert_called_once()


@patch('warehouse.conformer.db_operations.psycopg2.extras.execute_values')
def test_bulk_insert_uses_page_size(mock_execute_values, db):
    assert db.bulk_insert('erp_loc_a101', COLUMNS, ROWS) == 2
    assert mock_execute_values.call_args.kwargs['page_size'] == INSERT_PAGE_SIZE
