from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import duckdb

log = logging.getLogger(__name__)

MEMORY = ":memory:"


class DatabaseError(RuntimeError):
    """Opening the database or running a statement failed."""


class Database:
    """
    Handle on a local DuckDB database file.

    Lives for the whole process. Each query() hands out its own cursor, which
    the caller must close; interrupt() aborts whatever statement is running.
    """

    def __init__(self, conn: Any, path: str):
        self._conn = conn
        self.path = path
        self._active: Optional[Any] = None

    @classmethod
    def open(cls, path: str, read_only: Optional[bool] = None) -> "Database":
        """
        Open a DuckDB database.

        Files are opened read-only unless read_only=False; ":memory:" is always
        read-write since an empty read-only database is useless.
        """
        target = str(path)
        if target == MEMORY:
            read_only = False
        else:
            if not Path(target).exists():
                raise DatabaseError(f"database file not found: {target}")
            if read_only is None:
                read_only = True
        try:
            conn = duckdb.connect(database=target, read_only=read_only)
        except duckdb.Error as e:
            raise DatabaseError(str(e)) from e
        log.debug("opened %s (read_only=%s)", target, read_only)
        return cls(conn, target)

    @property
    def connection(self) -> Any:
        return self._conn

    def query(self, sql: str) -> Any:
        """
        Run parameter-free SQL and return a forward-only cursor.

        The cursor follows the DB-API: ``description`` names the columns and
        ``fetchmany`` streams the rows.
        """
        cursor = self._conn.cursor()
        self._active = cursor
        try:
            cursor.execute(sql)
        except duckdb.Error as e:
            cursor.close()
            raise DatabaseError(str(e)) from e
        finally:
            self._active = None
        return cursor

    def interrupt(self) -> None:
        """Abort the running statement, if any. Safe to call from another thread."""
        cursor = self._active
        if cursor is not None:
            log.debug("interrupting running query")
            cursor.interrupt()

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
