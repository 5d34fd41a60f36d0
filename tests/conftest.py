import pytest
import sqlite3
from media_table.database.schema import init_schema
from media_table.database.ops import CacheOperations

@pytest.fixture
def conn():
    """Returns an in-memory SQLite connection with the cache schema initialized."""
    c = sqlite3.connect(":memory:")
    init_schema(c)
    try:
        yield c
    finally:
        c.close()

@pytest.fixture
def cache_ops(conn):
    """Returns a CacheOperations instance attached to the in-memory DB."""
    return CacheOperations(conn)
