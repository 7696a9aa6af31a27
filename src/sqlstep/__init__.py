# -*- coding: utf-8 -*-
"""
sqlstep wraps the SQLite C API in database, statement and result set classes which
release their native resources automatically and report every failure as an exception.
"""

from .database import Database, ResultSet, Statement
from .engine import ColumnType, SQLiteEngine, get_engine
from .errors import (
    AllocationError,
    DatabaseError,
    EngineLoadError,
    InvalidArgumentError,
    InvalidStateError,
    OutOfRangeError,
    SqlStepError,
)


__version__ = "1.0.0"
__author__ = "sqlstep contributors"

__all__ = [
    "AllocationError",
    "ColumnType",
    "Database",
    "DatabaseError",
    "EngineLoadError",
    "InvalidArgumentError",
    "InvalidStateError",
    "OutOfRangeError",
    "ResultSet",
    "SQLiteEngine",
    "SqlStepError",
    "Statement",
    "get_engine",
]
