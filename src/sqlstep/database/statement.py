"""
This module defines prepared statements and their bind / step / read protocol.
"""

from __future__ import annotations

import logging
from typing import Any, Union, TYPE_CHECKING

from .base import Openable, Uncopyable
from .result import ResultSet
from ..engine import (
    SQLITE_DONE,
    SQLITE_NOMEM,
    SQLITE_OK,
    SQLITE_RANGE,
    SQLITE_ROW,
    ColumnType,
)
from ..errors import (
    AllocationError,
    DatabaseError,
    InvalidArgumentError,
    InvalidStateError,
    OutOfRangeError,
)

if TYPE_CHECKING:
    from .core import Database


__all__ = ["Statement"]

logger = logging.getLogger(__name__)

ParameterKey = Union[int, str]

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class Statement(Uncopyable, Openable):
    """
    A compiled SQL statement. Create instances with :meth:`Database.prepare`.

    A statement is either open or closed. While open, it either has a current row
    which can be read (:attr:`can_read` is ``True``) or it has no row, because it was
    not executed yet, it was reset or all rows have been consumed. Parameters can be
    bound in any open state, values can only be read while there is a current row.

    Every :class:`ResultSet` returned by :meth:`execute` keeps a reference to its
    statement, so the statement stays usable for as long as the result set is held.
    Once the statement is closed, explicitly or because its database was closed, all
    operations raise :exc:`InvalidStateError`.

    :param database: The database which compiled the statement.
    :param handle: The compiled statement handle. Ownership is transferred to the new
        instance.
    :param sql: The statement's SQL text.
    """

    _handle = None

    def __init__(self, database: Database, handle: int, sql: str = "") -> None:
        self._database = database
        self._engine = database.engine
        self._handle = handle
        self._can_read = False
        self.sql = sql
        super().__init__(open=True, name="Statement")

    def __del__(self) -> None:
        self.close()

    def __enter__(self) -> Statement:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<{self.__class__.__name__}({self.sql!r}, {state})>"

    @property
    def database(self) -> Database:
        """The database which compiled this statement."""
        return self._database

    @property
    def can_read(self) -> bool:
        """Whether the last step produced a row which can be read."""
        return self._can_read

    @property
    def parameter_count(self) -> int:
        """The largest parameter index used in the statement."""
        self._require_open()
        return self._engine.parameter_count(self._handle)

    # ---- binding ---------------------------------------------------------------------

    def parameter_index(self, name: str) -> int:
        """
        Looks up the index of a named parameter.

        :param name: Parameter name including its prefix, for instance ``":id"``.
        :returns: One-based parameter index.
        :raises InvalidArgumentError: if the statement has no such parameter.
        """
        self._require_open()
        index = self._engine.resolve_named_parameter(self._handle, name)
        if index == 0:
            raise InvalidArgumentError(f"No such parameter: {name}")
        return index

    def _resolve(self, key: ParameterKey) -> int:
        if isinstance(key, str):
            return self.parameter_index(key)
        self._require_open()
        return key

    def _handle_bind_result(self, index: int, result: int) -> None:
        if result == SQLITE_OK:
            return
        elif result == SQLITE_RANGE:
            raise OutOfRangeError(f"Bind index out of range: {index}")
        elif result == SQLITE_NOMEM:
            raise AllocationError("No memory to bind parameter", f"Index {index}")
        else:
            raise DatabaseError(result, self._engine.error_string(result))

    def bind_int(self, key: ParameterKey, value: int) -> None:
        """
        Binds an integer to a parameter.

        :param key: One-based parameter index or parameter name.
        :param value: Value to bind, must fit into a signed 64-bit integer.
        :raises OverflowError: if the value does not fit into 64 bits.
        """
        index = self._resolve(key)
        if not INT64_MIN <= value <= INT64_MAX:
            raise OverflowError("Python int too large to convert to SQLite INTEGER")
        self._handle_bind_result(
            index, self._engine.bind_int(self._handle, index, value)
        )

    def bind_double(self, key: ParameterKey, value: float) -> None:
        """
        Binds a float to a parameter.

        :param key: One-based parameter index or parameter name.
        :param value: Value to bind.
        """
        index = self._resolve(key)
        self._handle_bind_result(
            index, self._engine.bind_double(self._handle, index, value)
        )

    def bind_text(self, key: ParameterKey, value: str) -> None:
        """
        Binds a string to a parameter. The engine keeps its own copy of the value.

        :param key: One-based parameter index or parameter name.
        :param value: Value to bind.
        """
        index = self._resolve(key)
        self._handle_bind_result(
            index, self._engine.bind_text(self._handle, index, value)
        )

    def bind_blob(self, key: ParameterKey, value: bytes) -> None:
        """
        Binds binary data to a parameter. The engine keeps its own copy of the value.

        :param key: One-based parameter index or parameter name.
        :param value: Value to bind.
        :raises TypeError: if the value is not bytes-like.
        """
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"Cannot bind value of type {type(value).__name__} as blob")
        index = self._resolve(key)
        data = memoryview(value).tobytes()
        self._handle_bind_result(
            index, self._engine.bind_blob(self._handle, index, data)
        )

    def bind_null(self, key: ParameterKey) -> None:
        """
        Binds NULL to a parameter.

        :param key: One-based parameter index or parameter name.
        """
        index = self._resolve(key)
        self._handle_bind_result(index, self._engine.bind_null(self._handle, index))

    def bind(self, key: ParameterKey, value: Any) -> None:
        """
        Binds a value to a parameter, choosing the bind method from the value's type.

        :param key: One-based parameter index or parameter name.
        :param value: ``None``, int, float, str or bytes-like value.
        :raises TypeError: for values of other types.
        """
        if value is None:
            self.bind_null(key)
        elif isinstance(value, int):
            self.bind_int(key, value)
        elif isinstance(value, float):
            self.bind_double(key, value)
        elif isinstance(value, str):
            self.bind_text(key, value)
        elif isinstance(value, (bytes, bytearray, memoryview)):
            self.bind_blob(key, value)
        else:
            raise TypeError(f"Cannot bind value of type {type(value).__name__}")

    # ---- execution -------------------------------------------------------------------

    def step(self) -> bool:
        """
        Advances execution of the statement by one row.

        :returns: Whether a row is available.
        :raises DatabaseError: if the engine reports an error. The readable state is
            left unchanged in that case.
        """
        self._require_open()
        result = self._engine.step(self._handle)

        if result == SQLITE_ROW:
            self._can_read = True
        elif result == SQLITE_DONE:
            self._can_read = False
        else:
            raise DatabaseError(result, self._database.error_message())

        return self._can_read

    def execute(self) -> ResultSet:
        """
        Executes the statement with the currently bound values. This performs exactly
        one step, rows are advanced with :meth:`ResultSet.next`.

        :returns: A result set positioned on the first row, if any.
        """
        self.step()
        return ResultSet(self)

    def reset(self) -> bool:
        """
        Resets the statement so that it can be executed again. Bound values are kept.

        :returns: Whether the engine reported success. On failure, :attr:`can_read` is
            not updated.
        """
        self._require_open()
        if self._engine.reset(self._handle) == SQLITE_OK:
            self._can_read = False
            return True
        return False

    def close(self) -> None:
        """
        Finalizes the statement. Closing an already closed statement is a no-op.
        """
        if not self._open:
            return

        # Errors reported by finalize repeat the error of the last failed step, which
        # has already been raised.
        result = self._engine.finalize(self._handle)
        if result != SQLITE_OK:
            logger.debug("Ignoring result %s when finalizing %s", result, repr(self))

        self._handle = None
        self._can_read = False
        self._set_open(False)
        self._database._forget(self)

    # ---- reading ---------------------------------------------------------------------

    def _require_can_read(self) -> None:
        self._require_open()
        if not self._can_read:
            raise InvalidStateError(
                "No data to read", "Trying to read from statement without data"
            )

    def column_count(self) -> int:
        """Returns the number of columns in the current row."""
        self._require_can_read()
        return self._engine.column_count(self._handle)

    def column_name(self, column: int) -> str | None:
        """Returns the name of a result column."""
        self._require_can_read()
        return self._engine.column_name(self._handle, column)

    def column_type(self, column: int) -> ColumnType:
        """Returns the storage class of a value in the current row."""
        self._require_can_read()
        return self._engine.column_type(self._handle, column)

    def read_int(self, column: int) -> int:
        self._require_can_read()
        return self._engine.column_int(self._handle, column)

    def read_double(self, column: int) -> float:
        self._require_can_read()
        return self._engine.column_double(self._handle, column)

    def read_string(self, column: int) -> str | None:
        """Reads a value as text. Returns ``None`` for SQL NULL."""
        self._require_can_read()
        return self._engine.column_text(self._handle, column)

    def read_blob(self, column: int) -> bytes:
        self._require_can_read()
        return self._engine.column_blob(self._handle, column)

    def read(self, column: int) -> Any:
        """
        Reads a value, converting it to the Python type that matches its storage class.

        :param column: Zero-based column index.
        :returns: int, float, str, bytes or ``None``.
        """
        column_type = self.column_type(column)

        if column_type is ColumnType.Integer:
            return self.read_int(column)
        elif column_type is ColumnType.Float:
            return self.read_double(column)
        elif column_type is ColumnType.Text:
            return self.read_string(column)
        elif column_type is ColumnType.Blob:
            return self.read_blob(column)
        else:
            return None

    def read_row(self) -> tuple[Any, ...]:
        """Reads all values of the current row."""
        return tuple(self.read(column) for column in range(self.column_count()))
