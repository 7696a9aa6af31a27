"""
Resource-safe classes for SQLite databases, prepared statements and their results.
"""

from .base import Openable, Uncopyable
from .core import Database
from .result import ResultSet
from .statement import Statement

__all__ = ["Database", "Openable", "ResultSet", "Statement", "Uncopyable"]
