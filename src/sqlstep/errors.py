# -*- coding: utf-8 -*-
"""
This module defines sqlstep's error classes. It should be kept free of heavy imports.

All errors inherit from :class:`SqlStepError` which has title and message attributes
to display the error to the user. Errors which signal a violated usage contract also
inherit from the closest builtin exception so that generic handlers keep working, for
instance :class:`InvalidArgumentError` is a :class:`ValueError`.
"""

from typing import Optional


class SqlStepError(Exception):
    """Base class for sqlstep errors

    :param title: A short description of the error type. This can be used in a CLI to
        give a short error summary.
    :param message: A more verbose description which can include instructions on how to
        proceed to fix the error.
    """

    def __init__(self, title: str, message: str = "") -> None:
        self.title = title
        self.message = message

    def __str__(self) -> str:
        return ". ".join(part for part in (self.title, self.message) if part)


# ==== usage errors ====================================================================


class InvalidStateError(SqlStepError, RuntimeError):
    """Raised when an operation is attempted on a database or statement which is in the
    wrong state, for instance reading from a closed statement or opening a database
    twice."""


class InvalidArgumentError(SqlStepError, ValueError):
    """Raised when binding to a named parameter that the statement does not have."""


class OutOfRangeError(SqlStepError, IndexError):
    """Raised when the engine rejects a positional parameter index."""


class AllocationError(SqlStepError, MemoryError):
    """Raised when the engine cannot allocate memory for a connection, statement or
    bound value."""


# ==== engine errors ===================================================================


class DatabaseError(SqlStepError):
    """Raised when the engine reports a failure while opening, compiling, binding,
    stepping or closing.

    :param error_code: The numeric SQLite result code.
    :param message: Explanation provided by the engine for this failure.
    """

    def __init__(self, error_code: int, message: Optional[str] = None) -> None:
        super().__init__(f"SQLite error {error_code}", message or "")
        self.error_code = error_code


class EngineLoadError(SqlStepError):
    """Raised when the SQLite shared library cannot be found, loaded or is too old."""

