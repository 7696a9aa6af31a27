"""
Mixins shared by the classes which own engine resources.
"""

from __future__ import annotations

from typing import Any, NoReturn

from ..errors import InvalidStateError


class Uncopyable:
    """
    Forbids copying and pickling of subclasses. Instances own native handles which must
    be released exactly once, so there must never be two objects holding the same
    handle.
    """

    def __copy__(self) -> NoReturn:
        raise TypeError(f"{self.__class__.__name__} objects cannot be copied")

    def __deepcopy__(self, memo: Any) -> NoReturn:
        raise TypeError(f"{self.__class__.__name__} objects cannot be copied")

    def __reduce_ex__(self, protocol: Any) -> NoReturn:
        raise TypeError(f"{self.__class__.__name__} objects cannot be pickled")


class Openable:
    """
    An element that has the two states *open* and *closed*.

    Subclasses may define methods that require the object to be in a specific state.
    They use :meth:`_set_open` to change the state and :meth:`_require_open` to raise
    an :exc:`InvalidStateError` if the object is currently closed.

    :param open: The initial state.
    :param name: Name of the resource type, used in error messages.
    """

    _open = False
    _name = "Resource"

    def __init__(self, open: bool, name: str) -> None:
        self._open = open
        self._name = name

    @property
    def is_open(self) -> bool:
        """Whether this object is open."""
        return self._open

    def _require_open(self) -> None:
        if not self._open:
            raise InvalidStateError(f"{self._name} is not open")

    def _set_open(self, open: bool) -> None:
        self._open = open
