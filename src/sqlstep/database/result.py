"""
This module defines the cursor over the rows produced by a statement.
"""

from __future__ import annotations

from typing import Any, Iterator, TYPE_CHECKING

from ..engine import ColumnType

if TYPE_CHECKING:
    from .statement import Statement


__all__ = ["ResultSet"]


class ResultSet:
    """
    A view on the current row of a :class:`Statement`, returned by
    :meth:`Statement.execute`.

    The result set does not cache any values: all reads go to the statement and
    :meth:`next` advances the statement itself. It holds a reference to its
    statement, so the statement remains usable while the result set is alive even if
    the caller dropped its own reference.

    Iterating over a result set yields the current row and all following rows as
    tuples::

        for row in statement.execute():
            print(row)

    :param statement: The executed statement.
    """

    def __init__(self, statement: Statement) -> None:
        self._statement = statement

    def __iter__(self) -> Iterator[tuple[Any, ...]]:
        while self.can_read:
            yield self.read_row()
            self.next()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self._statement!r})>"

    @property
    def statement(self) -> Statement:
        return self._statement

    @property
    def can_read(self) -> bool:
        """Whether there is a current row which can be read."""
        return self._statement.can_read

    def next(self) -> bool:
        """
        Advances to the next row.

        :returns: Whether a row is available.
        """
        return self._statement.step()

    def column_count(self) -> int:
        return self._statement.column_count()

    def column_name(self, column: int) -> str | None:
        return self._statement.column_name(column)

    def column_type(self, column: int) -> ColumnType:
        return self._statement.column_type(column)

    def read_int(self, column: int) -> int:
        return self._statement.read_int(column)

    def read_double(self, column: int) -> float:
        return self._statement.read_double(column)

    def read_string(self, column: int) -> str | None:
        return self._statement.read_string(column)

    def read_blob(self, column: int) -> bytes:
        return self._statement.read_blob(column)

    def read(self, column: int) -> Any:
        return self._statement.read(column)

    def read_row(self) -> tuple[Any, ...]:
        return self._statement.read_row()
