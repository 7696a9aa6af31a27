"""
This module formats command line output: message lines with a status prefix and
tables of result rows.
"""

from __future__ import annotations

import enum
from typing import Any

import click
from rich.table import Column, Table


def rich_table(*headers: Column | str) -> Table:
    """Returns a borderless table. The header row is only shown if headers are given."""
    return Table(*headers, padding=(0, 2, 0, 0), box=None, show_header=bool(headers))


def format_value(value: Any, null_text: str = "NULL") -> str:
    """
    Formats a value read from a result row for display.

    :param value: The value.
    :param null_text: Text to show for SQL NULL.
    :returns: Display string. Blobs are shown as hex strings.
    """
    if value is None:
        return null_text
    elif isinstance(value, bytes):
        return "x'" + value.hex() + "'"
    else:
        return str(value)


class Prefix(enum.Enum):
    """Status shown in front of a message line"""

    Info = "- "
    Ok = "✓ "
    Warn = "! "
    NONE = ""


_PREFIX_COLORS = {Prefix.Ok: "green", Prefix.Warn: "red"}


def echo(message: str, nl: bool = True, prefix: Prefix = Prefix.NONE) -> None:
    """
    Prints a message line to stdout.

    :param message: Text to print.
    :param nl: Whether to end the line.
    :param prefix: Status to show in front of the message.
    """
    color = _PREFIX_COLORS.get(prefix)
    pre = click.style(prefix.value, fg=color) if color else prefix.value
    click.echo(pre + message, nl=nl)


def info(message: str, nl: bool = True) -> None:
    """Prints an informational message, prefixed with a dash."""
    echo(message, nl=nl, prefix=Prefix.Info)


def warn(message: str, nl: bool = True) -> None:
    """Prints an error or warning, prefixed with an exclamation mark."""
    echo(message, nl=nl, prefix=Prefix.Warn)


def ok(message: str, nl: bool = True) -> None:
    """Prints a success message, prefixed with a checkmark."""
    echo(message, nl=nl, prefix=Prefix.Ok)
