"""
This module provides the call surface of the native SQLite library which the
database classes build on. The library is loaded with :mod:`ctypes` and every function
which is used gets an explicit prototype. Handles returned by the engine are opaque
integers, ``None`` represents a NULL handle.

Nothing in here raises on engine-reported failures: methods return the SQLite result
codes and leave their interpretation to the caller.
"""

from __future__ import annotations

import ctypes
import ctypes.util
import logging
import os
import threading
from ctypes import (
    POINTER,
    byref,
    c_char_p,
    c_double,
    c_int,
    c_int64,
    c_void_p,
)
from enum import Enum
from typing import Optional

from packaging.version import Version

from .config import DEFAULT_CONFIG_NAME, SqlStepConfig
from .errors import EngineLoadError


__all__ = [
    "SQLITE_OK",
    "SQLITE_ERROR",
    "SQLITE_BUSY",
    "SQLITE_NOMEM",
    "SQLITE_MISUSE",
    "SQLITE_RANGE",
    "SQLITE_ROW",
    "SQLITE_DONE",
    "MIN_SQLITE_VERSION",
    "ColumnType",
    "SQLiteEngine",
    "find_library_path",
    "load_library",
    "get_engine",
]

logger = logging.getLogger(__name__)

Handle = Optional[int]

# result codes
SQLITE_OK = 0
SQLITE_ERROR = 1
SQLITE_BUSY = 5
SQLITE_NOMEM = 7
SQLITE_MISUSE = 21
SQLITE_RANGE = 25
SQLITE_ROW = 100
SQLITE_DONE = 101

# sqlite3_errstr was added in 3.7.15
MIN_SQLITE_VERSION = Version("3.7.15")

# tells the engine to make its own copy of bound text and blob values
SQLITE_TRANSIENT = c_void_p(-1)


class ColumnType(Enum):
    """Storage class of a value in the current result row"""

    Integer = 1
    Float = 2
    Text = 3
    Blob = 4
    Null = 5


_PROTOTYPES = {
    "sqlite3_libversion": (c_char_p, []),
    "sqlite3_open": (c_int, [c_char_p, POINTER(c_void_p)]),
    "sqlite3_close": (c_int, [c_void_p]),
    "sqlite3_errmsg": (c_char_p, [c_void_p]),
    "sqlite3_errstr": (c_char_p, [c_int]),
    "sqlite3_last_insert_rowid": (c_int64, [c_void_p]),
    "sqlite3_prepare_v2": (
        c_int,
        [c_void_p, c_char_p, c_int, POINTER(c_void_p), POINTER(c_char_p)],
    ),
    "sqlite3_finalize": (c_int, [c_void_p]),
    "sqlite3_step": (c_int, [c_void_p]),
    "sqlite3_reset": (c_int, [c_void_p]),
    "sqlite3_bind_parameter_count": (c_int, [c_void_p]),
    "sqlite3_bind_parameter_index": (c_int, [c_void_p, c_char_p]),
    "sqlite3_bind_int64": (c_int, [c_void_p, c_int, c_int64]),
    "sqlite3_bind_double": (c_int, [c_void_p, c_int, c_double]),
    "sqlite3_bind_text": (c_int, [c_void_p, c_int, c_char_p, c_int, c_void_p]),
    "sqlite3_bind_blob": (c_int, [c_void_p, c_int, c_char_p, c_int, c_void_p]),
    "sqlite3_bind_null": (c_int, [c_void_p, c_int]),
    "sqlite3_data_count": (c_int, [c_void_p]),
    "sqlite3_column_type": (c_int, [c_void_p, c_int]),
    "sqlite3_column_name": (c_char_p, [c_void_p, c_int]),
    "sqlite3_column_int64": (c_int64, [c_void_p, c_int]),
    "sqlite3_column_double": (c_double, [c_void_p, c_int]),
    "sqlite3_column_text": (c_void_p, [c_void_p, c_int]),
    "sqlite3_column_blob": (c_void_p, [c_void_p, c_int]),
    "sqlite3_column_bytes": (c_int, [c_void_p, c_int]),
}


def find_library_path() -> str | None:
    """
    Locates the SQLite shared library.

    The library found by the platform's linker search takes precedence. Otherwise, we
    fall back to the library which the interpreter's own ``_sqlite3`` extension is
    linked against: symbols of the dependencies of a loaded object are reachable
    through its handle.

    :returns: Library name or path, or ``None`` if no candidate was found.
    """
    name = ctypes.util.find_library("sqlite3")

    if name:
        return name

    try:
        import _sqlite3
    except ImportError:
        return None

    return getattr(_sqlite3, "__file__", None)


def load_library(path: str | None = None) -> ctypes.CDLL:
    """
    Loads the SQLite shared library and declares the prototypes of all functions used
    by :class:`SQLiteEngine`.

    :param path: Library path. If not given, the library is located with
        :func:`find_library_path`.
    :returns: The loaded library.
    :raises EngineLoadError: if no usable library can be loaded.
    """
    path = path or find_library_path()

    if not path:
        raise EngineLoadError(
            "Cannot find SQLite library",
            "Please install libsqlite3 or set the library path in the config.",
        )

    try:
        lib = ctypes.CDLL(path)
    except OSError as exc:
        raise EngineLoadError("Cannot load SQLite library", str(exc)) from exc

    for name, (restype, argtypes) in _PROTOTYPES.items():
        try:
            func = getattr(lib, name)
        except AttributeError:
            raise EngineLoadError(
                "Incompatible SQLite library", f"'{path}' does not export {name}"
            )
        func.restype = restype
        func.argtypes = argtypes

    return lib


class SQLiteEngine:
    """
    Thin wrapper around the SQLite C API.

    :param library: Path of the SQLite shared library. If not given, the library is
        located automatically.
    :raises EngineLoadError: if the library cannot be loaded or is older than
        :const:`MIN_SQLITE_VERSION`.
    """

    def __init__(self, library: str | None = None) -> None:
        self.library = library or find_library_path()
        self._lib = load_library(self.library)

        version = self.library_version()

        if Version(version) < MIN_SQLITE_VERSION:
            raise EngineLoadError(
                "SQLite library is too old",
                f"Found version {version}, at least {MIN_SQLITE_VERSION} is required.",
            )

        logger.debug("Loaded SQLite %s from %s", version, self.library)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(library={self.library!r})>"

    def library_version(self) -> str:
        """Returns the version string of the loaded library."""
        return self._lib.sqlite3_libversion().decode()

    # ---- connections -----------------------------------------------------------------

    def connect(self, path: str | os.PathLike[str]) -> tuple[Handle, int]:
        """
        Opens a connection, creating the database file if necessary.

        :returns: Connection handle and result code. The handle is ``None`` only if
            the engine could not allocate a connection object. It must be released with
            :meth:`disconnect` even if the result code signals an error.
        """
        handle = c_void_p()
        result = self._lib.sqlite3_open(os.fsencode(path), byref(handle))
        return handle.value, result

    def disconnect(self, connection: Handle) -> int:
        return self._lib.sqlite3_close(connection)

    def error_message(self, connection: Handle) -> str:
        """Returns the explanation for the most recent failure on a connection."""
        return self._lib.sqlite3_errmsg(connection).decode("utf-8", "replace")

    def error_string(self, code: int) -> str:
        """Returns the engine's default explanation for a result code."""
        message = self._lib.sqlite3_errstr(code)
        return message.decode("utf-8", "replace") if message else f"error {code}"

    def last_insert_row_id(self, connection: Handle) -> int:
        return self._lib.sqlite3_last_insert_rowid(connection)

    # ---- statements ------------------------------------------------------------------

    def compile(self, connection: Handle, sql: str) -> tuple[Handle, int]:
        """
        Compiles the first statement in ``sql``.

        :returns: Statement handle and result code. The handle is ``None`` on failure
            and if ``sql`` contains no statement.
        """
        handle = c_void_p()
        encoded = sql.encode("utf-8")
        result = self._lib.sqlite3_prepare_v2(
            connection, encoded, len(encoded), byref(handle), None
        )
        return handle.value, result

    def finalize(self, statement: Handle) -> int:
        return self._lib.sqlite3_finalize(statement)

    def step(self, statement: Handle) -> int:
        """
        Advances a statement.

        :returns: :const:`SQLITE_ROW` if a row is available, :const:`SQLITE_DONE` if
            execution completed and any other result code on failure.
        """
        return self._lib.sqlite3_step(statement)

    def reset(self, statement: Handle) -> int:
        """Resets a statement to its initial state. Bound values are retained."""
        return self._lib.sqlite3_reset(statement)

    # ---- parameters ------------------------------------------------------------------

    def parameter_count(self, statement: Handle) -> int:
        return self._lib.sqlite3_bind_parameter_count(statement)

    def resolve_named_parameter(self, statement: Handle, name: str) -> int:
        """
        :returns: The one-based index of the named parameter or zero if the statement
            has no such parameter.
        """
        return self._lib.sqlite3_bind_parameter_index(statement, name.encode("utf-8"))

    def bind_int(self, statement: Handle, index: int, value: int) -> int:
        return self._lib.sqlite3_bind_int64(statement, index, value)

    def bind_double(self, statement: Handle, index: int, value: float) -> int:
        return self._lib.sqlite3_bind_double(statement, index, value)

    def bind_text(self, statement: Handle, index: int, value: str) -> int:
        encoded = value.encode("utf-8")
        return self._lib.sqlite3_bind_text(
            statement, index, encoded, len(encoded), SQLITE_TRANSIENT
        )

    def bind_blob(self, statement: Handle, index: int, value: bytes) -> int:
        return self._lib.sqlite3_bind_blob(
            statement, index, value, len(value), SQLITE_TRANSIENT
        )

    def bind_null(self, statement: Handle, index: int) -> int:
        return self._lib.sqlite3_bind_null(statement, index)

    # ---- columns ---------------------------------------------------------------------

    def column_count(self, statement: Handle) -> int:
        """Returns the number of columns in the current row, zero if there is none."""
        return self._lib.sqlite3_data_count(statement)

    def column_type(self, statement: Handle, index: int) -> ColumnType:
        return ColumnType(self._lib.sqlite3_column_type(statement, index))

    def column_name(self, statement: Handle, index: int) -> str | None:
        name = self._lib.sqlite3_column_name(statement, index)
        return name.decode("utf-8", "replace") if name is not None else None

    def column_int(self, statement: Handle, index: int) -> int:
        return self._lib.sqlite3_column_int64(statement, index)

    def column_double(self, statement: Handle, index: int) -> float:
        return self._lib.sqlite3_column_double(statement, index)

    def column_text(self, statement: Handle, index: int) -> str | None:
        # the length must be queried after the conversion to text
        ptr = self._lib.sqlite3_column_text(statement, index)
        if not ptr:
            return None
        size = self._lib.sqlite3_column_bytes(statement, index)
        # invalid UTF-8 is stored as is and decoded with replacement characters
        return ctypes.string_at(ptr, size).decode("utf-8", "replace")

    def column_blob(self, statement: Handle, index: int) -> bytes:
        ptr = self._lib.sqlite3_column_blob(statement, index)
        size = self._lib.sqlite3_column_bytes(statement, index)
        # zero-length blobs and NULL are both returned as a NULL pointer
        return ctypes.string_at(ptr, size) if ptr else b""


# ==== shared engine instances =========================================================

_engine_instances: dict[str, SQLiteEngine] = {}
_engine_lock = threading.Lock()


def get_engine(
    library: str | None = None, config_name: str = DEFAULT_CONFIG_NAME
) -> SQLiteEngine:
    """
    Returns an existing engine instance or creates a new one.

    :param library: Path of the SQLite shared library. If not given, the path from the
        config's ``engine/library`` option is used and, if that is empty, the library
        is located automatically.
    :param config_name: Name of the config to read the library path from.
    :returns: Engine instance shared by all callers which request the same library.
    """
    if library is None:
        library = SqlStepConfig(config_name).get("engine", "library") or ""

    with _engine_lock:
        try:
            return _engine_instances[library]
        except KeyError:
            engine = SQLiteEngine(library or None)
            _engine_instances[library] = engine
            return engine
