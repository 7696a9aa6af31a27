"""
This module provides the click parameter types of the sqlstep CLI: bound values given
as KEY=VALUE, config keys and config names. It also defines the command group which
prints its commands in titled sections.
"""
from __future__ import annotations

from typing import Any, Union

import click
from click.shell_completion import CompletionItem

from .output import warn


ParameterKey = Union[int, str]


# ==== parameter types =================================================================

# Parameter types must return None and already converted values unchanged, and must
# not rely on param or ctx, which are None when converting prompt input.


def parse_value(text: str) -> Any:
    """
    Converts a command line value to the Python type it will be bound as.

    :param text: Value as given on the command line.
    :returns: ``None`` for "null", an int or float if the text parses as one, otherwise
        the text itself.
    """
    if text.lower() == "null":
        return None

    for cast in (int, float):
        try:
            return cast(text)
        except ValueError:
            pass

    return text


class BindParameter(click.ParamType):
    """A command line parameter of the form KEY=VALUE to bind to a statement

    KEY is either a one-based parameter index or a parameter name including its prefix,
    for instance ``:id``.
    """

    name = "KEY=VALUE"

    def convert(
        self,
        value: str | tuple[ParameterKey, Any] | None,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> tuple[ParameterKey, Any] | None:
        if value is None or isinstance(value, tuple):
            return value

        key, sep, raw_value = value.partition("=")

        if not sep or not key:
            self.fail(f"'{value}' is not of the form KEY=VALUE", param, ctx)

        return (int(key) if key.isdigit() else key), parse_value(raw_value)


class ConfigKey(click.ParamType):
    """Name of a config option, completed from the known options"""

    name = "key"

    def shell_complete(
        self,
        ctx: click.Context | None,
        param: click.Parameter | None,
        incomplete: str,
    ) -> list[CompletionItem]:
        from ..config.main import KEY_SECTION_MAP

        keys = sorted(k for k in KEY_SECTION_MAP if k.startswith(incomplete))
        return [CompletionItem(key) for key in keys]


class ConfigName(click.ParamType):
    """Name of a sqlstep configuration"""

    name = "config"

    def convert(
        self,
        value: str | None,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> str | None:
        if value is None:
            return None

        from ..config import validate_config_name

        try:
            return validate_config_name(value)
        except ValueError as exc:
            raise CliException(f"Configuration name {value!r} is invalid: {exc}")


# ==== command group ===================================================================


class OrderedGroup(click.Group):
    """
    Command group which lists its commands in the order they were added, under the
    section title given to :meth:`add_command`.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.sections: dict[str, list[str]] = {}

    def add_command(
        self, cmd: click.Command, name: str | None = None, section: str = "Commands"
    ) -> None:
        name = name or cmd.name

        if name is None:
            raise TypeError("Command has no name.")

        super().add_command(cmd, name)
        self.sections.setdefault(section, []).append(name)

    def format_commands(
        self, ctx: click.Context, formatter: click.HelpFormatter
    ) -> None:
        visible = {name: cmd for name, cmd in self.commands.items() if not cmd.hidden}

        if not visible:
            return

        width = max(len(name) for name in visible)
        limit = formatter.width - 6 - width

        for section, names in self.sections.items():
            rows = [
                (name.ljust(width), visible[name].get_short_help_str(limit))
                for name in names
                if name in visible
            ]

            if rows:
                with formatter.section(section):
                    formatter.write_dl(rows)


# ==== errors ==========================================================================


class CliException(click.ClickException):
    """
    Usage error of the CLI which is printed as a warning line instead of click's
    default "Error:" output.
    """

    def show(self, file: Any = None) -> None:
        warn(self.format_message())
