"""
This module defines the database connection which compiles statements.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Union
from weakref import WeakSet

from .base import Openable, Uncopyable
from .statement import Statement
from ..engine import SQLITE_OK, SQLiteEngine, get_engine
from ..errors import AllocationError, DatabaseError, InvalidStateError, SqlStepError


__all__ = ["Database"]

logger = logging.getLogger(__name__)

PathType = Union[str, "os.PathLike[str]"]


class Database(Uncopyable, Openable):
    """
    A connection to an SQLite database file.

    The database is closed after construction unless a file is given, in which case it
    is opened immediately. The connection is released by :meth:`close`, when leaving a
    ``with`` block or at the latest when the instance is garbage collected::

        with Database("/path/to/database.sqlite") as db:
            db.execute("CREATE TABLE test (id, value);")

    Statements keep their database alive. Closing a database finalizes all statements
    it prepared which are still open, any further use of them raises
    :exc:`InvalidStateError`.

    :param file: Database file to open. It is created if it does not exist.
    :param engine: Engine to use. Defaults to the shared engine from :func:`get_engine`.
    """

    _handle = None

    def __init__(
        self, file: PathType | None = None, engine: SQLiteEngine | None = None
    ) -> None:
        super().__init__(open=False, name="Database")
        self.engine = engine or get_engine()
        self.file: PathType | None = None
        self._statements: WeakSet[Statement] = WeakSet()

        if file is not None:
            self.open(file)

    def __del__(self) -> None:
        if self._open:
            try:
                self.close()
            except SqlStepError as exc:
                logger.debug(
                    "Ignoring error when closing %s: %s", repr(self), str(exc)
                )

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "open" if self._open else "closed"
        return f"<{self.__class__.__name__}({self.file!r}, {state})>"

    def open(self, file: PathType) -> None:
        """
        Opens a database file, creating it if necessary.

        :param file: Path of the database file.
        :raises InvalidStateError: if the database is already open.
        :raises AllocationError: if the engine cannot allocate a connection.
        :raises DatabaseError: if the engine cannot open the file.
        """
        if self._open:
            raise InvalidStateError(
                "Database already open", "Close the database before opening a file."
            )

        handle, result = self.engine.connect(file)

        if handle is None:
            raise AllocationError("Cannot allocate memory for database connection")

        if result != SQLITE_OK:
            message = self.engine.error_message(handle)
            self.engine.disconnect(handle)
            raise DatabaseError(result, message)

        self._handle = handle
        self.file = file
        self._set_open(True)
        logger.debug("Opened database %s", os.fspath(file))

    def close(self) -> None:
        """
        Finalizes all open statements of this database and closes the connection.
        Closing an already closed database is a no-op.

        :raises DatabaseError: if the engine refuses to close the connection. The
            database stays open in that case.
        """
        if not self._open:
            return

        for statement in list(self._statements):
            statement.close()

        result = self.engine.disconnect(self._handle)

        if result != SQLITE_OK:
            raise DatabaseError(result, self.engine.error_message(self._handle))

        self._handle = None
        self._set_open(False)
        logger.debug("Closed database %s", os.fspath(self.file))

    def prepare(self, sql: str) -> Statement:
        """
        Compiles an SQL statement. Only the first statement in ``sql`` is compiled.

        :param sql: SQL text, which may contain ``?``, ``?NNN``, ``:name``, ``@name``
            or ``$name`` parameters.
        :returns: The compiled statement.
        :raises InvalidStateError: if the database is not open.
        :raises DatabaseError: if the engine cannot compile ``sql``.
        :raises AllocationError: if the engine returns no statement handle, for
            instance because ``sql`` is empty.
        """
        self._require_open()
        handle, result = self.engine.compile(self._handle, sql)

        if result != SQLITE_OK:
            raise DatabaseError(result, self.engine.error_message(self._handle))

        if handle is None:
            raise AllocationError("Statement handle is NULL", f"SQL: {sql!r}")

        statement = Statement(self, handle, sql)
        self._statements.add(statement)
        logger.debug("Prepared statement %s", sql)
        return statement

    def execute(self, sql: str) -> None:
        """
        Compiles and executes a single SQL statement, discarding any rows.

        :param sql: SQL text.
        :raises InvalidStateError: if the database is not open.
        :raises DatabaseError: if compilation or execution fails.
        """
        self._require_open()
        with self.prepare(sql) as statement:
            statement.step()

    def last_insert_row_id(self) -> int:
        """Returns the row id of the most recent successful insert."""
        self._require_open()
        return self.engine.last_insert_row_id(self._handle)

    def error_message(self) -> str:
        """Returns the engine's explanation for the most recent failure."""
        self._require_open()
        return self.engine.error_message(self._handle)

    def _forget(self, statement: Statement) -> None:
        self._statements.discard(statement)
