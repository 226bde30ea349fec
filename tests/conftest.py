"""
Pytest configuration and shared fixtures.
"""
from datetime import datetime

import pytest

from bikes_qa.llm import LLMError
from bikes_qa.pipeline import Pipeline
from bikes_qa.sql.executor import Database


class StubLLM:
    """
    Scripted LLM: returns queued replies in order and records every call.

    A queued Exception instance is raised instead of returned.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def complete(self, messages):
        self.calls.append([dict(m) for m in messages])
        if not self.replies:
            raise LLMError("stub LLM has no replies left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class CountingCursor:
    def __init__(self, cursor, owner):
        self._cursor = cursor
        self._owner = owner
        self.description = cursor.description

    def fetchmany(self, size):
        return self._cursor.fetchmany(size)

    def close(self):
        self._owner.closed += 1
        self._cursor.close()


class CountingDatabase:
    """Wraps a Database and counts queries and closed cursors."""

    def __init__(self, db):
        self._db = db
        self.queries = []
        self.closed = 0
        self.interrupts = 0

    def query(self, sql):
        self.queries.append(sql)
        return CountingCursor(self._db.query(sql), self)

    def interrupt(self):
        self.interrupts += 1
        self._db.interrupt()


@pytest.fixture
def memory_db():
    """An empty in-memory DuckDB database."""
    db = Database.open(":memory:")
    yield db
    db.close()


@pytest.fixture
def rides_db(memory_db):
    """In-memory DuckDB database with a small `rides` table."""
    conn = memory_db.connection
    conn.execute("""
        CREATE TABLE rides (
            ride_id VARCHAR,
            bike_type VARCHAR,
            started_at TIMESTAMP,
            duration DOUBLE,
            year INTEGER,
            month INTEGER,
            start_station VARCHAR,
            member_type VARCHAR
        )
    """)
    sample_data = [
        ("r1", "classic", datetime(2019, 8, 1, 7, 30), 1200.0, 2019, 8, "Main St", "member"),
        ("r2", "electric", datetime(2019, 8, 2, 8, 0), 1269.0, 2019, 8, "Elm St, North", "casual"),
        ("r3", "classic", datetime(2019, 9, 5, 17, 15), 1100.0, 2019, 9, "Main St", "member"),
        ("r4", "docked", datetime(2020, 1, 3, 9, 45), 600.0, 2020, 1, "Oak Ave", None),
    ]
    conn.executemany("INSERT INTO rides VALUES (?, ?, ?, ?, ?, ?, ?, ?)", sample_data)
    return memory_db


@pytest.fixture
def stub_llm():
    """Factory for scripted LLMs: stub_llm("SELECT 1", "answer")."""
    return StubLLM


@pytest.fixture
def counting_db(rides_db):
    return CountingDatabase(rides_db)


@pytest.fixture
def make_pipeline(counting_db):
    """Build a Pipeline over the rides database with a scripted LLM."""
    def _make(*replies, **kwargs):
        llm = StubLLM(*replies)
        return Pipeline(llm, counting_db, **kwargs), llm

    return _make


# Markers
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
