# tests/conftest.py
"""
Shared test fixtures and configuration for pytest.
"""

import copy
import io
import sqlite3
from pathlib import Path

import pytest

from dbdump.columns import ColumnDescriptor, SemanticType
from dbdump.cursors import ListCursor
from dbdump.defaults import settings
from dbdump.utils import reset_format_cache


@pytest.fixture(autouse=True)
def restore_settings():
    """Put the global settings back after each test."""
    saved = copy.deepcopy(settings)
    reset_format_cache()
    yield
    settings.clear()
    settings.update(saved)
    reset_format_cache()


@pytest.fixture
def test_config_file():
    """Path to test config file."""
    return Path(__file__).parent / 'test.yml'


@pytest.fixture
def sink():
    """In-memory text sink."""
    return io.StringIO()


@pytest.fixture
def bender_columns():
    """Column descriptors for the benders result set."""
    return [
        ColumnDescriptor('id', SemanticType.OTHER, scan_type=int),
        ColumnDescriptor('name', SemanticType.SHORT_TEXT, 40, 'VARCHAR'),
        ColumnDescriptor('bio', SemanticType.LONG_TEXT, type_name='BLOB'),
        ColumnDescriptor('born', SemanticType.TIMESTAMP, type_name='TIMESTAMP'),
    ]


@pytest.fixture
def bender_rows():
    """Raw rows as a driver would return them."""
    return [
        (1, 'Aang', b'Last airbender', '2024-01-15 08:30:00'),
        (2, 'Katara', None, None),
        (3, 'Toph', b'<earth> & metal', '2024-03-01 12:00:00'),
    ]


@pytest.fixture
def make_cursor():
    """Factory for in-memory cursors."""
    def _make(columns, rows):
        return ListCursor(columns, rows)
    return _make


@pytest.fixture
def benders_db():
    """In-memory sqlite database with a benders table."""
    db = sqlite3.connect(':memory:')
    db.execute("""
               CREATE TABLE benders
               (
                   id      INTEGER PRIMARY KEY,
                   name    VARCHAR(40) NOT NULL,
                   nation  TEXT,
                   bio     BLOB,
                   born    TIMESTAMP,
                   rating  REAL
               )
               """)
    db.executemany(
        "INSERT INTO benders (id, name, nation, bio, born, rating) VALUES (?, ?, ?, ?, ?, ?)",
        [
            (1, 'Aang', 'air', b'Last airbender', '2024-01-15 08:30:00', 9.5),
            (2, 'Katara', 'water', None, None, 9.0),
            (3, 'Toph', 'earth', b'<earth> & metal', '2024-03-01 12:00:00', None),
        ]
    )
    db.commit()
    yield db
    db.close()
